"""Cursor context queries for completion and tooltip front ends.

Both questions ("what is being typed here?" and "what is under the
cursor?") are answered from the parsed Document, so they always agree with
what the validator sees.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .core.catalogs import ENTRY_TYPE_INFO, FIELD_INFO, EntryTypeInfo, FieldInfo
from .core.models import BlockKind, Document, Entry, Field

_TYPING_ENTRY_TYPE_RE = re.compile(r"@([A-Za-z]*)$")
_WORD_BEFORE_RE = re.compile(r"[A-Za-z_][\w\-:.+/]*$")


class ContextKind(Enum):
    """What the cursor is positioned on."""
    FREE_TEXT = "free_text"
    ENTRY_TYPE = "entry_type"
    ENTRY_KEY = "entry_key"
    FIELD_NAME = "field_name"
    FIELD_VALUE = "field_value"
    ENTRY_BODY = "entry_body"
    SPECIAL_BLOCK = "special_block"


@dataclass(frozen=True)
class CursorContext:
    """Result of context_at().

    Attributes:
        kind: Classification of the cursor position
        prefix: Text already typed for the item under the cursor
        entry: Enclosing entry, if any
        field: Enclosing field, if any
    """
    kind: ContextKind
    prefix: str = ""
    entry: Optional[Entry] = None
    field: Optional[Field] = None

    @property
    def entry_type(self) -> Optional[str]:
        return self.entry.entry_type.lower() if self.entry else None


def _inside(start: int, end: int, closed: bool, pos: int) -> bool:
    # The cursor sits between characters: after the opening '@' and, for a
    # closed block, before its closing delimiter has been passed.
    return start < pos and (pos < end or (not closed and pos <= end))


def _entry_context(document: Document, entry: Entry, pos: int) -> CursorContext:
    text = document.text

    if entry.type_span.contains_cursor(pos):
        return CursorContext(
            ContextKind.ENTRY_TYPE, prefix=text[entry.type_span.start:pos], entry=entry
        )
    if entry.key_span is not None and entry.key_span.contains_cursor(pos):
        return CursorContext(
            ContextKind.ENTRY_KEY, prefix=text[entry.key_span.start:pos], entry=entry
        )

    current = None
    for f in entry.fields:
        if f.span.start < pos or f.name_span.start == pos:
            current = f
    if current is not None:
        if current.name_span.contains_cursor(pos):
            return CursorContext(
                ContextKind.FIELD_NAME,
                prefix=text[current.name_span.start:pos],
                entry=entry,
                field=current,
            )
        if current.assign_span is not None and pos >= current.assign_span.end:
            tail = text[current.span.end:pos]
            if pos <= current.span.end or "," not in tail:
                value_start = current.value.span.start
                if current.value.span.start == current.value.span.end:
                    # empty value: everything typed after '=' so far
                    value_start = current.assign_span.end
                prefix = text[value_start:pos] if pos > value_start else ""
                return CursorContext(
                    ContextKind.FIELD_VALUE, prefix=prefix.lstrip(), entry=entry, field=current
                )

    match = _WORD_BEFORE_RE.search(text, entry.type_span.end, pos)
    prefix = match.group() if match else ""
    return CursorContext(ContextKind.ENTRY_BODY, prefix=prefix, entry=entry)


def context_at(document: Document, pos: int) -> CursorContext:
    """Classify the cursor position ``pos`` (an offset between characters).

    Args:
        document: Parsed document
        pos: Cursor offset

    Returns:
        CursorContext describing what is being typed at ``pos``
    """
    for block in document.blocks:
        kind = block.kind
        if kind is BlockKind.FREE_TEXT:
            if block.span.start <= pos <= block.span.end:
                before = document.text[block.span.start:pos]
                match = _TYPING_ENTRY_TYPE_RE.search(before)
                if match:
                    return CursorContext(ContextKind.ENTRY_TYPE, prefix=match.group(1))
                if pos < block.span.end:
                    return CursorContext(ContextKind.FREE_TEXT)
        elif kind is BlockKind.ENTRY:
            if _inside(block.span.start, block.span.end, block.closed, pos):
                return _entry_context(document, block, pos)
        elif kind in (BlockKind.COMMENT, BlockKind.PREAMBLE, BlockKind.STRING):
            if _inside(block.span.start, block.span.end, block.closed, pos):
                return CursorContext(ContextKind.SPECIAL_BLOCK)
        else:
            raise ValueError(f"Unhandled block kind: {kind}")
    return CursorContext(ContextKind.FREE_TEXT)


def describe_at(document: Document, pos: int) -> Optional[Union[EntryTypeInfo, FieldInfo]]:
    """Return catalog information for the entry type or field name at ``pos``.

    Returns:
        EntryTypeInfo, FieldInfo, or None when the cursor is on neither or
        the name is not in the catalog
    """
    for entry in document.entries:
        if not entry.span.start <= pos < entry.span.end:
            continue
        # '@' belongs to the type for hovering purposes
        if entry.span.start <= pos <= entry.type_span.end:
            return ENTRY_TYPE_INFO.get(entry.entry_type.lower())
        for f in entry.fields:
            if f.name_span.contains_cursor(pos):
                return FIELD_INFO.get(f.name.lower())
        return None
    return None
