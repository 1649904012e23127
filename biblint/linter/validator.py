"""BibTeX validator - check a parsed Document against the field catalogs.

Checks run per entry, in document order, each independently switchable
through Config:

- Unknown entry type (warning)
- Duplicate citation key (error, reported at the later occurrences)
- Missing required fields (error, one diagnostic per entry)
- Per field: unknown field name (warning), unmatched braces (error),
  empty value (warning)

Diagnostics come out in exactly that order for each entry.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import Config
from ..core.catalogs import is_entry_type, is_field_name, requirements_for
from ..core.models import Concatenation, Document, Entry, Field, PartKind
from ..exceptions import BibTeXError
from ..parser.parser import parse
from .diagnostics import Diagnostic, Severity

logger = logging.getLogger(__name__)


def brace_balance(text: str) -> int:
    """Signed count of unescaped ``{`` minus ``}``.

    Braces inside a closed math run (``$...$`` or ``$$...$$``) are left out.
    A math run that is never closed does not exclude anything.
    """
    outside = 0
    pending = 0
    math: Optional[str] = None
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "$":
            double = text.startswith("$$", i)
            if math is None:
                math = "$$" if double else "$"
                pending = 0
                i += len(math)
                continue
            if math == "$" or double:
                i += len(math)
                math = None
                pending = 0
                continue
            # lone $ inside display math
            i += 1
            continue
        if ch == "{" or ch == "}":
            delta = 1 if ch == "{" else -1
            if math is None:
                outside += delta
            else:
                pending += delta
        i += 1
    return outside + pending


def _checked_text(value: Concatenation) -> str:
    """Value text used by the brace check.

    Closed delimiters are stripped; the opening brace of a braced part that
    was never closed stays in, since nothing balances it.
    """
    pieces = []
    for part in value.parts:
        if part.kind is PartKind.BRACED and not part.closed:
            pieces.append("{")
        pieces.append(part.text)
    return "".join(pieces)


def _entry_type_check(entry: Entry) -> Optional[Diagnostic]:
    if is_entry_type(entry.entry_type):
        return None
    return Diagnostic(
        start=entry.span.start,
        end=entry.type_span.end,
        severity=Severity.WARNING,
        message=f"Unknown entry type: @{entry.entry_type}",
        code="UNKNOWN_ENTRY_TYPE",
    )


def _required_fields_check(entry: Entry) -> Optional[Diagnostic]:
    requirement = requirements_for(entry.entry_type)
    if requirement is None:
        return None
    present = {f.name.lower() for f in entry.fields}
    missing = [name for name in requirement.required if name not in present]
    if not missing:
        return None
    return Diagnostic(
        start=entry.span.start,
        end=entry.span.end,
        severity=Severity.ERROR,
        message=f"Missing required fields for @{entry.entry_type}: {', '.join(missing)}",
        code="MISSING_REQUIRED_FIELDS",
    )


def _field_checks(f: Field, config: Config) -> List[Diagnostic]:
    diagnostics = []
    value_span = f.value.span

    if config.check_unknown_fields and not is_field_name(f.name):
        diagnostics.append(Diagnostic(
            start=f.name_span.start,
            end=f.name_span.end,
            severity=Severity.WARNING,
            message=f"Unknown field: {f.name}",
            code="UNKNOWN_FIELD",
        ))

    if config.check_field_syntax:
        if brace_balance(_checked_text(f.value)) != 0:
            diagnostics.append(Diagnostic(
                start=value_span.start,
                end=value_span.end,
                severity=Severity.ERROR,
                message=f"Unmatched braces in field value for '{f.name}'",
                code="UNMATCHED_BRACES",
            ))
        if f.value.is_empty:
            diagnostics.append(Diagnostic(
                start=value_span.start,
                end=value_span.end,
                severity=Severity.WARNING,
                message=f"Empty value for field '{f.name}'",
                code="EMPTY_VALUE",
            ))

    return diagnostics


def validate(document: Document, config: Optional[Config] = None) -> List[Diagnostic]:
    """Validate a parsed document.

    Args:
        document: Result of parse()
        config: Enabled checks; all checks run when omitted

    Returns:
        Diagnostics in entry order, then type, duplicate key, missing
        required fields and per-field checks in field order
    """
    if config is None:
        config = Config()

    diagnostics: List[Diagnostic] = []
    seen_keys = set()

    for entry in document.entries:
        if config.check_entry_types:
            found = _entry_type_check(entry)
            if found:
                diagnostics.append(found)

        if config.check_duplicate_keys and entry.key:
            if entry.key in seen_keys:
                diagnostics.append(Diagnostic(
                    start=entry.key_span.start,
                    end=entry.key_span.end,
                    severity=Severity.ERROR,
                    message=f"Duplicate entry key: {entry.key}",
                    code="DUPLICATE_KEY",
                ))
            else:
                seen_keys.add(entry.key)

        if config.check_required_fields:
            found = _required_fields_check(entry)
            if found:
                diagnostics.append(found)

        for f in entry.fields:
            diagnostics.extend(_field_checks(f, config))

    logger.debug(f"Validated {len(document.entries)} entries: {len(diagnostics)} diagnostics")
    return diagnostics


@dataclass
class LintResult:
    """Result of linting one BibTeX document."""
    valid: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)
    document: Optional[Document] = None
    stats: Optional[Dict[str, Any]] = None

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)

    def __str__(self) -> str:
        status = "VALID" if self.valid else "INVALID"
        lines = [f"Lint Result: {status}"]
        if self.diagnostics:
            lines.append(f"  Errors: {self.error_count}, Warnings: {self.warning_count}")
            for diagnostic in self.diagnostics:
                lines.append(f"  - {diagnostic}")
        if self.stats:
            lines.append(f"  Stats: {self.stats}")
        return "\n".join(lines)


class BibLinter:
    """Parse and validate BibTeX documents.

    Example:
        linter = BibLinter()
        result = linter.lint_file("refs.bib")
        if not result.valid:
            for diagnostic in result.diagnostics:
                print(diagnostic)
    """

    def __init__(self, config: Optional[Config] = None, strict: bool = False):
        """Initialize linter.

        Args:
            config: Enabled checks; defaults to all checks
            strict: If True, treat warnings as errors
        """
        self.config = config or Config()
        self.strict = strict

    def lint(self, text: str) -> LintResult:
        """Lint BibTeX source text.

        Args:
            text: Full document text

        Returns:
            LintResult with the parsed document and its diagnostics
        """
        document = parse(text)
        diagnostics = validate(document, self.config)

        has_errors = any(d.severity == Severity.ERROR for d in diagnostics)
        has_warnings = any(d.severity == Severity.WARNING for d in diagnostics)

        if self.strict:
            valid = not has_errors and not has_warnings
        else:
            valid = not has_errors

        stats = {
            "blocks": len(document.blocks),
            "entries": len(document.entries),
            "fields": sum(len(e.fields) for e in document.entries),
        }
        return LintResult(valid=valid, diagnostics=diagnostics, document=document, stats=stats)

    def lint_file(self, path: Union[str, Path]) -> LintResult:
        """Lint a .bib file.

        Args:
            path: Path to .bib file

        Returns:
            LintResult

        Raises:
            BibTeXError: If the file cannot be read
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            raise BibTeXError(f"BibTeX file not found: {path}")
        except OSError as e:
            raise BibTeXError(f"Failed to read BibTeX file {path}: {e}")

        logger.info(f"Linting {path}")
        return self.lint(text)


def lint_text(text: str, config: Optional[Config] = None, strict: bool = False) -> LintResult:
    """Convenience function to lint BibTeX source.

    Args:
        text: Full document text
        config: Enabled checks
        strict: If True, treat warnings as errors

    Returns:
        LintResult
    """
    return BibLinter(config=config, strict=strict).lint(text)
