"""Diagnostic records produced by the validator."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Severity(Enum):
    """Severity level of a diagnostic."""
    ERROR = "error"      # Entry is invalid
    WARNING = "warning"  # Entry is usable but suspicious


@dataclass(frozen=True)
class Diagnostic:
    """A single validation finding.

    Attributes:
        start: Start offset of the flagged range
        end: End offset of the flagged range (exclusive)
        severity: Error or warning
        message: Human-readable description
        code: Rule code (e.g. DUPLICATE_KEY)
        source: Name of the producer, reported to editor hosts
    """
    start: int
    end: int
    severity: Severity
    message: str
    code: Optional[str] = None
    source: str = "BibTeX"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ``{from, to, severity, message, code}`` wire shape."""
        data: Dict[str, Any] = {
            "from": self.start,
            "to": self.end,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.code is not None:
            data["code"] = self.code
        return data

    def __str__(self) -> str:
        prefix = {
            Severity.ERROR: "[ERROR]",
            Severity.WARNING: "[WARNING]",
        }[self.severity]
        return f"{prefix} {self.code}: {self.message}"
