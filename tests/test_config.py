"""Tests for configuration loading."""

import json
import logging
from pathlib import Path

from leftovers.config import Settings, load_settings


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.json")
        assert settings == Settings()
        assert settings.stale_days == 365
        assert settings.max_workers == 4
        assert settings.include_brew_estimate is True

    def test_valid_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(
            json.dumps(
                {
                    "stale_days": 30,
                    "include_brew_estimate": False,
                    "extra_exclusions": {"app_support": ["MyTool"]},
                }
            )
        )
        settings = load_settings(config)
        assert settings.stale_days == 30
        assert settings.include_brew_estimate is False
        assert settings.exclusions_for("app_support") == frozenset({"MyTool"})
        assert settings.exclusions_for("caches") == frozenset()

    def test_invalid_json_gives_defaults(self, tmp_path, caplog):
        config = tmp_path / "config.json"
        config.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="leftovers.config"):
            settings = load_settings(config)
        assert settings == Settings()
        assert "Ignoring invalid config" in caplog.text

    def test_invalid_values_give_defaults(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"stale_days": 0}))
        assert load_settings(config) == Settings()


class TestProtectedPaths:
    def test_exact_and_nested(self):
        settings = Settings(protected_paths=["/Users/me/Projects/"])
        assert settings.is_protected(Path("/Users/me/Projects"))
        assert settings.is_protected(Path("/Users/me/Projects/app"))

    def test_sibling_with_shared_prefix(self):
        settings = Settings(protected_paths=["/Users/me/Projects"])
        assert not settings.is_protected(Path("/Users/me/Projects-old"))

    def test_tilde_expansion(self):
        settings = Settings(protected_paths=["~/Keep"])
        assert settings.is_protected(Path.home() / "Keep" / "x")

    def test_nothing_protected_by_default(self):
        assert not Settings().is_protected(Path("/tmp/anything"))
