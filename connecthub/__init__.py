"""
ConnectHub — Interest-Based Social Networking Backend
======================================================
Lets people build profiles, declare interests, hobbies and skills, discover
others who share them, connect, message, and organise events and groups.

Package layout::

    connecthub/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Enumerations and query limits
    ├── errors.py          # Domain exceptions raised by services
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Default interest/hobby/skill catalog
    ├── services/
    │   ├── user_service.py        # Profiles, bored flag, ratings
    │   ├── catalog_service.py     # Interests, hobbies, skills + junctions
    │   ├── matching_service.py    # Shared-interest / shared-hobby discovery
    │   ├── connection_service.py  # pending → accepted / declined
    │   ├── message_service.py     # Direct messages + read receipts
    │   ├── event_service.py       # Events and attendance
    │   ├── group_service.py       # Interest groups
    │   ├── hobby_group_service.py # Hobby meetup groups
    │   ├── notification_service.py
    │   └── activity_service.py
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/config/identity dependencies
        ├── rate_limit.py  # Per-user mutation throttle
        └── routes/        # REST endpoints under /api
"""

__version__ = "0.1.0"
