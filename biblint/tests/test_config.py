"""Tests for configuration loading."""

import dataclasses

import pytest

from biblint.config import CHECK_NAMES, Config
from biblint.exceptions import ConfigurationError

ENV_NAMES = [f"BIBLINT_{f.name.upper()}" for f in dataclasses.fields(Config)]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv then delenv so that values written by load_dotenv are undone too
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "true")
        monkeypatch.delenv(name)


class TestDefaults:

    def test_all_checks_enabled(self):
        """Every check is on by default."""
        config = Config()
        assert all(getattr(config, f.name) for f in dataclasses.fields(Config))

    def test_frozen(self):
        """Config instances are immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            Config().check_entry_types = False


class TestFromEnv:

    def test_reads_variables(self, monkeypatch):
        """BIBLINT_CHECK_* variables switch checks."""
        monkeypatch.setenv("BIBLINT_CHECK_UNKNOWN_FIELDS", "false")
        monkeypatch.setenv("BIBLINT_CHECK_DUPLICATE_KEYS", "Off")
        config = Config.from_env()
        assert not config.check_unknown_fields
        assert not config.check_duplicate_keys
        assert config.check_entry_types

    def test_invalid_value(self, monkeypatch):
        """Non-boolean values are rejected."""
        monkeypatch.setenv("BIBLINT_CHECK_ENTRY_TYPES", "maybe")
        with pytest.raises(ConfigurationError, match="BIBLINT_CHECK_ENTRY_TYPES"):
            Config.from_env()

    def test_env_file(self, tmp_path):
        """Values can come from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("BIBLINT_CHECK_FIELD_SYNTAX=no\n")
        config = Config.from_env(str(env_file))
        assert not config.check_field_syntax
        assert config.check_required_fields

    def test_environment_overrides_env_file(self, monkeypatch, tmp_path):
        """Variables already set win over the .env file."""
        monkeypatch.setenv("BIBLINT_CHECK_FIELD_SYNTAX", "yes")
        env_file = tmp_path / ".env"
        env_file.write_text("BIBLINT_CHECK_FIELD_SYNTAX=no\n")
        assert Config.from_env(str(env_file)).check_field_syntax


class TestFromDict:

    def test_snake_and_camel_case(self):
        """Both attribute names and camelCase spellings are accepted."""
        config = Config.from_dict({
            "checkUnknownFields": False,
            "check_entry_types": 0,
            "somethingElse": True,
        })
        assert not config.check_unknown_fields
        assert not config.check_entry_types
        assert config.check_field_syntax

    def test_string_values(self):
        """Boolean strings are parsed, not tested for truthiness."""
        config = Config.from_dict({"checkUnknownFields": "false", "check_field_syntax": "On"})
        assert not config.check_unknown_fields
        assert config.check_field_syntax

    def test_invalid_string_value(self):
        """Strings that are not booleans are rejected."""
        with pytest.raises(ConfigurationError, match="checkEntryTypes"):
            Config.from_dict({"checkEntryTypes": "sometimes"})

    def test_empty(self):
        """An empty mapping gives the defaults."""
        assert Config.from_dict({}) == Config()


class TestDisable:

    def test_short_names(self):
        """Short check names map to their flags."""
        config = Config().disable("unknown-fields", "check_entry_types")
        assert not config.check_unknown_fields
        assert not config.check_entry_types
        assert config.check_required_fields

    def test_every_short_name(self):
        """Each short name turns exactly one check off."""
        for short, attribute in CHECK_NAMES.items():
            config = Config().disable(short)
            assert not getattr(config, attribute)

    def test_original_unchanged(self):
        """disable() returns a copy."""
        config = Config()
        config.disable("field-syntax")
        assert config.check_field_syntax

    def test_unknown_name(self):
        """Unknown check names raise a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown check: spelling"):
            Config().disable("spelling")
