"""Document model produced by the BibTeX parser.

The tree is stored twice: parents own their children through tuples, and
every node is also registered in the document's arena under its ``id``.
``Node.parent`` is the id of the owning node, a plain index used for
navigation only.

Offsets are Python string indexes, half-open ``[start, end)``.
"""
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Span:
    """A half-open range of the source text."""
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, pos: int) -> bool:
        """Check whether the character at ``pos`` lies in the span (end exclusive)."""
        return self.start <= pos < self.end

    def contains_cursor(self, pos: int) -> bool:
        """Check whether a cursor at ``pos`` touches the span, end inclusive.

        A cursor sits between characters, so one placed right after the
        last character still counts as inside.
        """
        return self.start <= pos <= self.end

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


class BlockKind(Enum):
    """Discriminator for top-level blocks."""
    FREE_TEXT = "free_text"
    COMMENT = "comment"
    PREAMBLE = "preamble"
    STRING = "string"
    ENTRY = "entry"


class PartKind(Enum):
    """Discriminator for field value parts."""
    LITERAL = "literal"
    BRACED = "braced"
    QUOTED = "quoted"


@dataclass(frozen=True)
class Node:
    """Common base of every node.

    Attributes:
        id: Index of the node in ``Document.nodes``
        parent: Id of the owning node, None for top-level blocks
        span: Source range covered by the node
    """
    id: int
    parent: Optional[int]
    span: Span


# -- value parts ---------------------------------------------------------


@dataclass(frozen=True)
class Literal(Node):
    """Unquoted identifier or number; identifiers may name a @string macro."""
    text: str
    is_number: bool = False

    kind: ClassVar[PartKind] = PartKind.LITERAL


@dataclass(frozen=True)
class Braced(Node):
    """``{...}`` value part.

    Attributes:
        text: Content between the outer braces
        depth: Deepest nesting of inner braces (0 when there are none)
        closed: False when the closing brace was never found
    """
    text: str
    depth: int = 0
    closed: bool = True

    kind: ClassVar[PartKind] = PartKind.BRACED


@dataclass(frozen=True)
class Quoted(Node):
    """``"..."`` value part. Quotes do not nest; ``depth`` tracks inner braces."""
    text: str
    depth: int = 0
    closed: bool = True

    kind: ClassVar[PartKind] = PartKind.QUOTED


ValuePart = Union[Literal, Braced, Quoted]


@dataclass(frozen=True)
class Concatenation(Node):
    """Value parts joined by ``#``. Always holds at least one part."""
    parts: Tuple[ValuePart, ...]

    @property
    def text(self) -> str:
        """Part texts joined without macro substitution."""
        return "".join(part.text for part in self.parts)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class Field(Node):
    """A ``name = value`` pair.

    Attributes:
        name: Field name as written
        name_span: Span of the name
        assign_span: Span of the ``=`` operator, None when it is missing
        value: The field value
    """
    name: str
    name_span: Span
    assign_span: Optional[Span]
    value: Concatenation


# -- blocks --------------------------------------------------------------


@dataclass(frozen=True)
class FreeText(Node):
    """Text between blocks, kept verbatim."""
    text: str
    whitespace_prefix: str = ""

    kind: ClassVar[BlockKind] = BlockKind.FREE_TEXT


@dataclass(frozen=True)
class CommentBlock(Node):
    """``@comment{...}``.

    Attributes:
        raw: Body between the delimiters
        braces: Net count of unclosed ``{`` in the body
        parens: Net count of unclosed ``(`` in the body
        closed: False when the closing delimiter was never found
    """
    raw: str
    braces: int = 0
    parens: int = 0
    closed: bool = True

    kind: ClassVar[BlockKind] = BlockKind.COMMENT


@dataclass(frozen=True)
class PreambleBlock(Node):
    """``@preamble{...}``; ``value`` is the parsed body, if any."""
    raw: str
    braces: int = 0
    parens: int = 0
    closed: bool = True
    value: Optional[Concatenation] = None

    kind: ClassVar[BlockKind] = BlockKind.PREAMBLE


@dataclass(frozen=True)
class StringBlock(Node):
    """``@string{name = value}``; ``fields`` holds the macro definitions."""
    raw: str
    braces: int = 0
    parens: int = 0
    closed: bool = True
    fields: Tuple[Field, ...] = ()

    kind: ClassVar[BlockKind] = BlockKind.STRING


@dataclass(frozen=True)
class Entry(Node):
    """A bibliographic record.

    Attributes:
        entry_type: Type name as written (``article``, ``Book``...)
        type_span: Span of the type name, without the ``@``
        key: Citation key, None when absent
        key_span: Span of the key
        wrap: Opening delimiter, ``{`` or ``(``
        fields: Fields in declaration order
        closed: False when the closing delimiter was never found
    """
    entry_type: str
    type_span: Span
    key: Optional[str]
    key_span: Optional[Span]
    wrap: str
    fields: Tuple[Field, ...] = ()
    closed: bool = True

    kind: ClassVar[BlockKind] = BlockKind.ENTRY

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[Field]:
        """Return the first field called ``name`` (case-insensitive)."""
        wanted = name.lower()
        for f in self.fields:
            if f.name.lower() == wanted:
                return f
        return None


Block = Union[FreeText, CommentBlock, PreambleBlock, StringBlock, Entry]


@dataclass(frozen=True)
class Document:
    """A parsed BibTeX document.

    Attributes:
        text: The source text
        blocks: Top-level blocks in document order; their spans tile the text
        nodes: Arena of every node, indexed by ``Node.id``
    """
    text: str
    blocks: Tuple[Block, ...]
    nodes: Tuple[Node, ...]

    @property
    def entries(self) -> List[Entry]:
        return [b for b in self.blocks if b.kind is BlockKind.ENTRY]

    def node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def parent_of(self, node: Node) -> Optional[Node]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def ancestors(self, node: Node) -> Iterator[Node]:
        """Yield the parents of ``node``, nearest first."""
        current = self.parent_of(node)
        while current is not None:
            yield current
            current = self.parent_of(current)

    def source(self, span: Span) -> str:
        return span.slice(self.text)

    def block_at(self, pos: int) -> Optional[Block]:
        """Return the block whose span contains ``pos`` (start inclusive, end exclusive)."""
        for block in self.blocks:
            if block.span.contains(pos):
                return block
        return None

    def node_at(self, pos: int) -> Optional[Node]:
        """Return the innermost node whose span contains ``pos``.

        Ranges are start inclusive, end exclusive, so a zero-width node is
        never returned.
        """
        found = None
        for node in self.nodes:
            if node.span.contains(pos):
                if found is None or len(node.span) <= len(found.span):
                    found = node
        return found

    def location(self, offset: int) -> Tuple[int, int]:
        """Convert an offset to a 1-based ``(line, column)`` pair."""
        starts = self._line_starts()
        line = bisect_right(starts, offset) - 1
        return line + 1, offset - starts[line] + 1

    def _line_starts(self) -> List[int]:
        starts = [0]
        for i, ch in enumerate(self.text):
            if ch == "\n":
                starts.append(i + 1)
        return starts
