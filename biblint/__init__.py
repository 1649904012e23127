"""biblint - BibTeX parsing and validation.

A Python library for checking BibTeX bibliographies:
- Resilient, mode-aware tokenizer
- Structural parser producing an immutable document model
- Diagnostics for entry types, duplicate keys, required fields and field syntax
- Shared catalogs of entry types and fields for editor front ends
"""

from .config import Config
from .exceptions import (
    BibLintError,
    ConfigurationError,
    BibTeXError,
)
from .core.models import Document, Entry, Field
from .parser import parse, tokenize
from .linter import BibLinter, Diagnostic, LintResult, Severity, validate

__version__ = "0.1.0"
__all__ = [
    "Config",
    "BibLintError",
    "ConfigurationError",
    "BibTeXError",
    "Document",
    "Entry",
    "Field",
    "parse",
    "tokenize",
    "validate",
    "BibLinter",
    "Diagnostic",
    "LintResult",
    "Severity",
]
