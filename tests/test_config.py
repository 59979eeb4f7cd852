"""Tests for settings loading."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reviewguard.config import (
    DEFAULT_WEAK_SEQUENCES,
    DEFAULT_WEAK_WORDS,
    Settings,
    get_settings,
)


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.auth_max_attempts == 5
        assert s.auth_window_ms == 900_000
        assert s.general_max_attempts == 10
        assert s.general_window_ms == 300_000
        assert s.rate_limit_store == "memory"
        assert s.password_min_length == 8
        assert s.password_max_length == 128
        assert s.weak_sequences == list(DEFAULT_WEAK_SEQUENCES)
        assert s.weak_words == list(DEFAULT_WEAK_WORDS)
        assert s.api_key == ""

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RG_AUTH_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("RG_WEAK_WORDS", '["doctor", "clinic"]')
        s = Settings()
        assert s.auth_max_attempts == 3
        assert s.weak_words == ["doctor", "clinic"]

    def test_log_level_normalised(self):
        assert Settings(log_level=" WARNING ").log_level == "warning"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    @pytest.mark.parametrize("field", ["auth_max_attempts", "general_window_ms", "max_field_length"])
    def test_non_positive_limits_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_unknown_store_rejected(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_store="redis")


class TestYamlLoading:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "rg.yaml"
        path.write_text("auth_max_attempts: 2\nweak_words: [clinic]\nrate_limit_store: ttl\n")
        s = get_settings(config_path=path)
        assert s.auth_max_attempts == 2
        assert s.weak_words == ["clinic"]
        assert s.rate_limit_store == "ttl"

    def test_bundled_default_matches_code_defaults(self):
        assert Settings.from_yaml() == Settings()

    def test_missing_file_uses_defaults(self, tmp_path):
        s = Settings.from_yaml(tmp_path / "absent.yaml")
        assert s == Settings()

    def test_non_mapping_yaml_ignored(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert Settings.from_yaml(path) == Settings()

    def test_invalid_yaml_value_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("general_max_attempts: -1\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(path)
