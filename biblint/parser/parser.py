"""Structural BibTeX parser.

Builds a Document from the lexer's token stream. The lexer has already
resolved every mode question (escapes, math runs, where a value ends), so
the parser only groups tokens into blocks, entries, fields and value parts.

Malformed input never raises: unterminated blocks and values run to the end
of the text and are marked ``closed=False``.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from ..core.models import (
    Block,
    Braced,
    CommentBlock,
    Concatenation,
    Document,
    Entry,
    Field,
    FreeText,
    Literal,
    Node,
    PreambleBlock,
    Quoted,
    Span,
    StringBlock,
    ValuePart,
)
from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

_TRIVIA = (TokenKind.WHITESPACE, TokenKind.COMMENT, TokenKind.UNKNOWN)


class _Arena:
    """Hands out node ids in document order and stores the built nodes."""

    def __init__(self):
        self.slots: List[Optional[Node]] = []

    def reserve(self) -> int:
        self.slots.append(None)
        return len(self.slots) - 1

    def place(self, node: Node) -> Node:
        self.slots[node.id] = node
        return node


class _FieldBuilder:
    """Collects the tokens of one field until it is complete."""

    def __init__(self, arena: _Arena, parent: int, name: Optional[Token]):
        # A nameless builder carries a bare @preamble value owned by the block
        self.id = arena.reserve() if name is not None else None
        self.value_id = arena.reserve()
        self.parent = parent
        self.name = name
        self.assign: Optional[Token] = None
        self.parts: List[ValuePart] = []


def _balance(raw: str, opener: str, closer: str) -> int:
    depth = 0
    escaped = False
    for ch in raw:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == opener:
            depth += 1
        elif ch == closer and depth > 0:
            depth -= 1
    return depth


class Parser:
    """Turns BibTeX text into a Document.

    Example:
        document = Parser(text).parse()
        for entry in document.entries:
            print(entry.key, entry.field_names)
    """

    def __init__(self, text: str, tokens: Optional[Sequence[Token]] = None):
        self.text = text
        self.tokens: Sequence[Token] = tokenize(text) if tokens is None else tokens
        self.i = 0
        self.arena = _Arena()

    def parse(self) -> Document:
        blocks: List[Block] = []
        text_start: Optional[int] = None
        tokens = self.tokens

        while self.i < len(tokens):
            token = tokens[self.i]
            if token.kind is TokenKind.ENTRY_MARKER and self._has_body(self.i):
                if text_start is not None:
                    blocks.append(self._free_text(text_start, token.start))
                    text_start = None
                blocks.append(self._parse_block())
            else:
                if text_start is None:
                    text_start = token.start
                self.i += 1

        if text_start is not None:
            blocks.append(self._free_text(text_start, len(self.text)))

        document = Document(
            text=self.text,
            blocks=tuple(blocks),
            nodes=tuple(self.arena.slots),
        )
        logger.debug(
            f"Parsed {len(document.blocks)} blocks, {len(document.entries)} entries"
        )
        return document

    # -- blocks ----------------------------------------------------------

    def _has_body(self, index: int) -> bool:
        """Check that the marker at ``index`` is followed by an opening delimiter."""
        j = index + 2
        while j < len(self.tokens) and self.tokens[j].kind is TokenKind.WHITESPACE:
            j += 1
        return j < len(self.tokens) and self.tokens[j].kind is TokenKind.BRACE

    def _free_text(self, start: int, end: int) -> FreeText:
        text = self.text[start:end]
        prefix = text[:len(text) - len(text.lstrip())]
        node = FreeText(
            id=self.arena.reserve(),
            parent=None,
            span=Span(start, end),
            text=text,
            whitespace_prefix=prefix,
        )
        return self.arena.place(node)

    def _parse_block(self) -> Block:
        tokens = self.tokens
        block_id = self.arena.reserve()
        marker = tokens[self.i]
        type_token = tokens[self.i + 1]
        self.i += 2
        while tokens[self.i].kind is TokenKind.WHITESPACE:
            self.i += 1
        opener = tokens[self.i]
        self.i += 1
        closer = "}" if opener.text == "{" else ")"
        entry_type = type_token.text.lower()

        if entry_type == "comment":
            return self._parse_comment(block_id, marker, opener)

        key, fields, loose, end, closed = self._parse_body(block_id, closer)
        span = Span(marker.start, end)
        body_end = end - 1 if closed else end
        raw = self.text[opener.end:body_end]

        if entry_type == "preamble":
            node = PreambleBlock(
                id=block_id,
                parent=None,
                span=span,
                raw=raw,
                braces=_balance(raw, "{", "}"),
                parens=_balance(raw, "(", ")"),
                closed=closed,
                value=loose,
            )
        elif entry_type == "string":
            node = StringBlock(
                id=block_id,
                parent=None,
                span=span,
                raw=raw,
                braces=_balance(raw, "{", "}"),
                parens=_balance(raw, "(", ")"),
                closed=closed,
                fields=tuple(fields),
            )
        else:
            node = Entry(
                id=block_id,
                parent=None,
                span=span,
                entry_type=type_token.text,
                type_span=Span(type_token.start, type_token.end),
                key=key.text if key else None,
                key_span=Span(key.start, key.end) if key else None,
                wrap=opener.text,
                fields=tuple(fields),
                closed=closed,
            )
        return self.arena.place(node)

    def _parse_comment(self, block_id: int, marker: Token, opener: Token) -> CommentBlock:
        tokens = self.tokens
        end = len(self.text)
        closed = False
        body_end = end
        while self.i < len(tokens):
            token = tokens[self.i]
            self.i += 1
            if token.kind is TokenKind.BRACE:
                closed = True
                body_end = token.start
                end = token.end
                break
        raw = self.text[opener.end:body_end]
        node = CommentBlock(
            id=block_id,
            parent=None,
            span=Span(marker.start, end),
            raw=raw,
            braces=_balance(raw, "{", "}"),
            parens=_balance(raw, "(", ")"),
            closed=closed,
        )
        return self.arena.place(node)

    # -- entry bodies ----------------------------------------------------

    def _parse_body(
        self, parent: int, closer: str
    ) -> Tuple[Optional[Token], List[Field], Optional[Concatenation], int, bool]:
        """Parse tokens up to the entry closer.

        Returns:
            (key token, fields, loose value, end offset, closed). The loose
            value collects parts that precede any field name, which is how
            @preamble bodies arrive.
        """
        tokens = self.tokens
        key: Optional[Token] = None
        fields: List[Field] = []
        current: Optional[_FieldBuilder] = None
        loose: Optional[_FieldBuilder] = None

        def finish():
            nonlocal current
            if current is not None:
                fields.append(self._build_field(current))
                current = None

        while self.i < len(tokens):
            token = tokens[self.i]
            kind = token.kind

            if kind is TokenKind.BRACE and token.text == closer:
                self.i += 1
                finish()
                return key, fields, self._build_loose(loose), token.end, True
            if kind is TokenKind.ENTRY_KEY:
                if key is None:
                    key = token
                self.i += 1
            elif kind is TokenKind.FIELD_NAME:
                finish()
                current = _FieldBuilder(self.arena, parent, token)
                self.i += 1
            elif kind is TokenKind.OPERATOR and token.text == "=":
                if current is not None and current.assign is None:
                    current.assign = token
                self.i += 1
            elif kind is TokenKind.PUNCTUATION:
                finish()
                self.i += 1
            elif kind in (TokenKind.BRACE, TokenKind.QUOTE, TokenKind.NUMBER, TokenKind.IDENTIFIER):
                target = current
                if target is None:
                    if loose is None:
                        loose = _FieldBuilder(self.arena, parent, None)
                    target = loose
                target.parts.append(self._parse_part(target.value_id))
            else:
                # whitespace, comments, '#', unknown characters
                self.i += 1

        finish()
        return key, fields, self._build_loose(loose), len(self.text), False

    def _build_field(self, builder: _FieldBuilder) -> Field:
        name = builder.name
        value = self._build_value(builder)
        if builder.parts:
            end = value.span.end
        elif builder.assign is not None:
            end = builder.assign.end
        else:
            end = name.end
        node = Field(
            id=builder.id,
            parent=builder.parent,
            span=Span(name.start, end),
            name=name.text,
            name_span=Span(name.start, name.end),
            assign_span=Span(builder.assign.start, builder.assign.end) if builder.assign else None,
            value=value,
        )
        return self.arena.place(node)

    def _build_loose(self, builder: Optional[_FieldBuilder]) -> Optional[Concatenation]:
        if builder is None:
            return None
        return self._build_value(builder)

    def _build_value(self, builder: _FieldBuilder) -> Concatenation:
        parts = builder.parts
        if not parts:
            if builder.assign is not None:
                pos = builder.assign.end
            else:
                pos = builder.name.end
            placeholder = Literal(
                id=self.arena.reserve(),
                parent=builder.value_id,
                span=Span(pos, pos),
                text="",
            )
            parts = [self.arena.place(placeholder)]
        node = Concatenation(
            id=builder.value_id,
            parent=builder.id if builder.id is not None else builder.parent,
            span=Span(parts[0].span.start, parts[-1].span.end),
            parts=tuple(parts),
        )
        return self.arena.place(node)

    # -- value parts -----------------------------------------------------

    def _parse_part(self, parent: int) -> ValuePart:
        token = self.tokens[self.i]
        if token.kind is TokenKind.BRACE:
            return self._parse_braced(parent)
        if token.kind is TokenKind.QUOTE:
            return self._parse_quoted(parent)
        self.i += 1
        node = Literal(
            id=self.arena.reserve(),
            parent=parent,
            span=Span(token.start, token.end),
            text=token.text,
            is_number=token.kind is TokenKind.NUMBER,
        )
        return self.arena.place(node)

    def _parse_braced(self, parent: int) -> Braced:
        tokens = self.tokens
        opener = tokens[self.i]
        self.i += 1
        depth = 1
        deepest = 1
        while self.i < len(tokens):
            token = tokens[self.i]
            self.i += 1
            if token.kind is not TokenKind.BRACE:
                continue
            if token.text == "{":
                depth += 1
                deepest = max(deepest, depth)
            elif token.text == "}":
                depth -= 1
                if depth == 0:
                    node = Braced(
                        id=self.arena.reserve(),
                        parent=parent,
                        span=Span(opener.start, token.end),
                        text=self.text[opener.end:token.start],
                        depth=deepest - 1,
                    )
                    return self.arena.place(node)
        node = Braced(
            id=self.arena.reserve(),
            parent=parent,
            span=Span(opener.start, len(self.text)),
            text=self.text[opener.end:],
            depth=deepest - 1,
            closed=False,
        )
        return self.arena.place(node)

    def _parse_quoted(self, parent: int) -> Quoted:
        tokens = self.tokens
        opener = tokens[self.i]
        self.i += 1
        depth = 0
        deepest = 0
        while self.i < len(tokens):
            token = tokens[self.i]
            self.i += 1
            if token.kind is TokenKind.QUOTE:
                node = Quoted(
                    id=self.arena.reserve(),
                    parent=parent,
                    span=Span(opener.start, token.end),
                    text=self.text[opener.end:token.start],
                    depth=deepest,
                )
                return self.arena.place(node)
            if token.kind is TokenKind.BRACE:
                if token.text == "{":
                    depth += 1
                    deepest = max(deepest, depth)
                elif depth > 0:
                    depth -= 1
        node = Quoted(
            id=self.arena.reserve(),
            parent=parent,
            span=Span(opener.start, len(self.text)),
            text=self.text[opener.end:],
            depth=deepest,
            closed=False,
        )
        return self.arena.place(node)


def parse(text: str) -> Document:
    """Parse BibTeX source into a Document.

    Args:
        text: Full document text

    Returns:
        Document whose blocks cover ``text`` in order
    """
    return Parser(text).parse()
