"""Document model, catalogs and macro resolution."""

from .catalogs import (
    ENTRY_TYPES,
    FIELD_NAMES,
    FIELD_REQUIREMENTS,
    JOURNAL_ABBREVIATIONS,
    MONTH_ABBREVIATIONS,
    FieldRequirement,
    is_entry_type,
    is_field_name,
    requirements_for,
    suggest_values,
)
from .models import (
    Block,
    BlockKind,
    Braced,
    CommentBlock,
    Concatenation,
    Document,
    Entry,
    Field,
    FreeText,
    Literal,
    PartKind,
    PreambleBlock,
    Quoted,
    Span,
    StringBlock,
)

__all__ = [
    "ENTRY_TYPES",
    "FIELD_NAMES",
    "FIELD_REQUIREMENTS",
    "JOURNAL_ABBREVIATIONS",
    "MONTH_ABBREVIATIONS",
    "FieldRequirement",
    "is_entry_type",
    "is_field_name",
    "requirements_for",
    "suggest_values",
    "Block",
    "BlockKind",
    "Braced",
    "CommentBlock",
    "Concatenation",
    "Document",
    "Entry",
    "Field",
    "FreeText",
    "Literal",
    "PartKind",
    "PreambleBlock",
    "Quoted",
    "Span",
    "StringBlock",
]
