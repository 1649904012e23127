"""Custom exceptions for biblint."""


class BibLintError(Exception):
    """Base exception for all biblint errors."""

    pass


class ConfigurationError(BibLintError):
    """Raised when configuration is invalid or missing."""

    pass


class BibTeXError(BibLintError):
    """Raised when a BibTeX file cannot be read."""

    pass

