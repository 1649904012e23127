"""BibTeX validation - diagnostics for parsed documents."""

from .diagnostics import Diagnostic, Severity
from .validator import BibLinter, LintResult, brace_balance, lint_text, validate

__all__ = ["Diagnostic", "Severity", "BibLinter", "LintResult", "brace_balance", "lint_text", "validate"]
