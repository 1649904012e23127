"""Configuration management for biblint."""
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# camelCase names used by editor hosts
_ALIASES = {
    "checkEntryTypes": "check_entry_types",
    "checkDuplicateKeys": "check_duplicate_keys",
    "checkRequiredFields": "check_required_fields",
    "checkUnknownFields": "check_unknown_fields",
    "checkFieldSyntax": "check_field_syntax",
}

# Short names accepted by Config.disable() and the CLI --disable option
CHECK_NAMES = {
    "entry-types": "check_entry_types",
    "duplicate-keys": "check_duplicate_keys",
    "required-fields": "check_required_fields",
    "unknown-fields": "check_unknown_fields",
    "field-syntax": "check_field_syntax",
}


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {raw!r}")


@dataclass(frozen=True)
class Config:
    """Lint configuration.

    Every check can be switched off independently; all are enabled by
    default.

    Attributes:
        check_entry_types: Report entry types outside the recognized catalog
        check_duplicate_keys: Report citation keys already used by an earlier entry
        check_required_fields: Report entries missing required fields for their type
        check_unknown_fields: Report field names outside the recognized catalog
        check_field_syntax: Report unmatched braces and empty values
    """

    check_entry_types: bool = True
    check_duplicate_keys: bool = True
    check_required_fields: bool = True
    check_unknown_fields: bool = True
    check_field_syntax: bool = True

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables.

        Reads ``BIBLINT_CHECK_ENTRY_TYPES``, ``BIBLINT_CHECK_DUPLICATE_KEYS``,
        ``BIBLINT_CHECK_REQUIRED_FIELDS``, ``BIBLINT_CHECK_UNKNOWN_FIELDS``
        and ``BIBLINT_CHECK_FIELD_SYNTAX``. Unset variables keep the default.

        Args:
            env_file: Path to .env file (optional)

        Returns:
            Config instance with values from environment

        Raises:
            ConfigurationError: If a variable holds something other than a boolean
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        values = {}
        for f in fields(cls):
            env_name = f"BIBLINT_{f.name.upper()}"
            raw = os.getenv(env_name)
            if raw is not None:
                values[f.name] = _parse_flag(env_name, raw)
        return cls(**values)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Load configuration from dictionary.

        Both snake_case attribute names and their camelCase spellings
        (``checkEntryTypes``...) are accepted; other keys are ignored.
        String values are read like environment variables (``"false"``,
        ``"off"``...).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Config instance

        Raises:
            ConfigurationError: If a string value is not a boolean
        """
        values = {}
        for key, value in config_dict.items():
            name = _ALIASES.get(key, key)
            if name not in cls.__annotations__:
                continue
            if isinstance(value, str):
                values[name] = _parse_flag(key, value)
            else:
                values[name] = bool(value)
        return cls(**values)

    def disable(self, *checks: str) -> "Config":
        """Return a copy with the named checks turned off.

        Args:
            checks: Short names from CHECK_NAMES or attribute names

        Raises:
            ConfigurationError: If a name does not match any check
        """
        changes = {}
        for check in checks:
            name = CHECK_NAMES.get(check, check)
            if name not in self.__annotations__:
                raise ConfigurationError(
                    f"Unknown check: {check}. Expected one of: {', '.join(CHECK_NAMES)}"
                )
            changes[name] = False
        return replace(self, **changes)
