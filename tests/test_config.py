"""
tests/test_config.py — YAML configuration loader
=================================================
"""

from __future__ import annotations

import pytest

from connecthub.config import ConnectHubConfig, load_config


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_full_file(self, tmp_path):
        path = _write(tmp_path, """
app_name: Hub
api_port: 9000
discover_default_limit: 5
discover_max_limit: 20
feed_limit: 25
mutation_rate_limit: 10
mutation_window_seconds: 30
seed_catalog: false
""")
        cfg = load_config(path)

        assert cfg == ConnectHubConfig(
            app_name="Hub",
            api_port=9000,
            discover_default_limit=5,
            discover_max_limit=20,
            feed_limit=25,
            mutation_rate_limit=10,
            mutation_window_seconds=30,
            seed_catalog=False,
        )

    def test_defaults_fill_optional_keys(self, tmp_path):
        cfg = load_config(_write(tmp_path, "app_name: Hub\napi_port: 8000\n"))

        assert cfg.discover_default_limit == 10
        assert cfg.discover_max_limit == 50
        assert cfg.mutation_rate_limit == 30
        assert cfg.seed_catalog is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        with pytest.raises(KeyError):
            load_config(_write(tmp_path, "api_port: 8000\n"))

    def test_config_is_frozen(self, tmp_path):
        cfg = load_config(_write(tmp_path, "app_name: Hub\napi_port: 8000\n"))
        with pytest.raises(AttributeError):
            cfg.feed_limit = 1
