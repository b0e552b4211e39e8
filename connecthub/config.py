"""
connecthub.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for application tuning (discovery limits, feed size,
mutation throttle, catalog seeding).  Secrets and connection strings stay
in the environment (``DATABASE_URL``, ``JWT_SECRET``).

Usage::

    from connecthub.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.app_name)              # "ConnectHub"
    print(cfg.discover_default_limit)  # 10
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ConnectHubConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str

    # Serving
    api_port: int

    # Discovery
    discover_default_limit: int = 10
    discover_max_limit: int = 50

    # Feeds
    feed_limit: int = 50

    # Per-user mutation throttle
    mutation_rate_limit: int = 30
    mutation_window_seconds: int = 60

    # Insert the default interest/hobby/skill catalog on startup
    seed_catalog: bool = True


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> ConnectHubConfig:
    """Read *path* and return a :class:`ConnectHubConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = ConnectHubConfig(app_name="", api_port=0)
    return ConnectHubConfig(
        app_name=raw["app_name"],
        api_port=int(raw["api_port"]),
        discover_default_limit=int(
            raw.get("discover_default_limit", defaults.discover_default_limit)
        ),
        discover_max_limit=int(raw.get("discover_max_limit", defaults.discover_max_limit)),
        feed_limit=int(raw.get("feed_limit", defaults.feed_limit)),
        mutation_rate_limit=int(
            raw.get("mutation_rate_limit", defaults.mutation_rate_limit)
        ),
        mutation_window_seconds=int(
            raw.get("mutation_window_seconds", defaults.mutation_window_seconds)
        ),
        seed_catalog=bool(raw.get("seed_catalog", defaults.seed_catalog)),
    )
