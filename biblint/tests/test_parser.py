"""Tests for the structural BibTeX parser."""

import pytest

from biblint.core.models import BlockKind, PartKind, Span
from biblint.parser import Parser, parse, tokenize


SAMPLE = r"""% header
@string{jd = "John Doe"}
@preamble{"\newcommand{\x}{y}"}
@comment{ignored {stuff}}
@article{doe2020,
  author = jd # " and others",
  title = {A {Nested} Title},
  journal = "J. Stuff",
  year = 2020,
}
trailing text
"""


@pytest.fixture
def document():
    return parse(SAMPLE)


@pytest.fixture
def article(document):
    return document.entries[0]


def assert_tiles(document):
    position = 0
    for block in document.blocks:
        assert block.span.start == position
        position = block.span.end
    assert position == len(document.text)


class TestBlocks:
    """Top-level block structure."""

    def test_block_kinds_in_order(self, document):
        """Blocks come out in document order with free text between them."""
        assert [b.kind for b in document.blocks] == [
            BlockKind.FREE_TEXT,
            BlockKind.STRING,
            BlockKind.FREE_TEXT,
            BlockKind.PREAMBLE,
            BlockKind.FREE_TEXT,
            BlockKind.COMMENT,
            BlockKind.FREE_TEXT,
            BlockKind.ENTRY,
            BlockKind.FREE_TEXT,
        ]

    def test_blocks_tile_text(self, document):
        """Block spans are contiguous and cover the whole text."""
        assert_tiles(document)
        assert "".join(document.source(b.span) for b in document.blocks) == SAMPLE

    def test_free_text(self, document):
        """Free text keeps its content verbatim."""
        assert document.blocks[0].text == "% header\n"
        assert document.blocks[-1].text == "\ntrailing text\n"

    def test_whitespace_prefix(self):
        """Leading whitespace of a free-text block is recorded."""
        document = parse("  \n  hello @misc{k}")
        assert document.blocks[0].text == "  \n  hello "
        assert document.blocks[0].whitespace_prefix == "  \n  "

    def test_at_without_body(self):
        """'@word' not followed by a delimiter stays in free text."""
        document = parse("contact user@example.com now")
        assert len(document.blocks) == 1
        assert document.blocks[0].kind is BlockKind.FREE_TEXT
        assert document.entries == []

    def test_empty_text(self):
        """Empty input yields an empty document."""
        document = parse("")
        assert document.blocks == ()
        assert document.nodes == ()


class TestSpecialBlocks:
    """@comment, @preamble and @string."""

    def test_comment_block(self, document):
        """@comment keeps its raw body and brace balance."""
        comment = document.blocks[5]
        assert comment.raw == "ignored {stuff}"
        assert comment.braces == 0
        assert comment.closed

    def test_preamble_block(self, document):
        """@preamble body is parsed as a value owned by the block."""
        preamble = document.blocks[3]
        assert preamble.raw == r'"\newcommand{\x}{y}"'
        assert preamble.braces == 0
        assert preamble.value is not None
        assert [p.kind for p in preamble.value.parts] == [PartKind.QUOTED]
        assert preamble.value.parts[0].text == r"\newcommand{\x}{y}"
        assert preamble.value.parent == preamble.id

    def test_string_block(self, document):
        """@string definitions are parsed as fields."""
        string_block = document.blocks[1]
        assert [f.name for f in string_block.fields] == ["jd"]
        assert string_block.fields[0].value.text == "John Doe"
        assert string_block.fields[0].parent == string_block.id

    def test_paren_string_block(self):
        """@string accepts parentheses as delimiters."""
        document = parse("@string(jd = {x})")
        assert document.blocks[0].kind is BlockKind.STRING
        assert document.blocks[0].fields[0].value.text == "x"
        assert document.blocks[0].closed

    def test_unclosed_comment(self):
        """An unclosed @comment runs to the end of the text."""
        text = "@comment{never closed"
        block = parse(text).blocks[0]
        assert not block.closed
        assert block.span == Span(0, len(text))
        assert block.raw == "never closed"

    def test_comment_brace_counts(self):
        """Raw brace and paren balances are reported for special blocks."""
        block = parse("@preamble{ {a ( ").blocks[0]
        assert not block.closed
        assert block.braces == 1
        assert block.parens == 1


class TestEntries:
    """Entries and their fields."""

    def test_entry_header(self, article, document):
        """Type, key and delimiter are recorded with their spans."""
        assert article.entry_type == "article"
        assert article.key == "doe2020"
        assert document.source(article.key_span) == "doe2020"
        assert document.source(article.type_span) == "article"
        assert article.wrap == "{"
        assert article.closed

    def test_fields_in_order(self, article):
        """Fields keep declaration order; a trailing comma is accepted."""
        assert article.field_names == ["author", "title", "journal", "year"]

    def test_value_parts(self, article):
        """Each value part keeps its kind and inner text."""
        author = article.get_field("AUTHOR")
        assert [p.kind for p in author.value.parts] == [PartKind.LITERAL, PartKind.QUOTED]
        assert [p.text for p in author.value.parts] == ["jd", " and others"]

        title = article.get_field("title")
        assert title.value.parts[0].kind is PartKind.BRACED
        assert title.value.parts[0].text == "A {Nested} Title"
        assert title.value.parts[0].depth == 1

        year = article.get_field("year")
        assert year.value.parts[0].is_number
        assert not author.value.parts[0].is_number

    def test_field_spans(self, article, document):
        """Field spans run from the name to the end of the value."""
        journal = article.get_field("journal")
        assert document.source(journal.span) == 'journal = "J. Stuff"'
        assert document.source(journal.name_span) == "journal"
        assert document.source(journal.assign_span) == "="

    def test_paren_entry(self):
        """Entries delimited by parentheses parse like braced ones."""
        document = parse('@book(b1, title = {T}, author = "A", publisher = {P}, year = 1999)')
        entry = document.entries[0]
        assert entry.wrap == "("
        assert entry.key == "b1"
        assert entry.field_names == ["title", "author", "publisher", "year"]
        assert entry.closed

    def test_whitespace_before_delimiter(self):
        """Blanks between the type and the delimiter are allowed."""
        document = parse("@misc {k, title = {x}}")
        assert document.entries[0].key == "k"

    def test_entry_without_key(self):
        """An entry that starts with a field has no key."""
        entry = parse("@misc{title = {x}}").entries[0]
        assert entry.key is None
        assert entry.key_span is None
        assert entry.field_names == ["title"]

    def test_concatenation(self):
        """Parts joined by '#' form one value."""
        entry = parse('@misc{k, title = "a" # jd # {b}}').entries[0]
        value = entry.fields[0].value
        assert [p.kind for p in value.parts] == [
            PartKind.QUOTED, PartKind.LITERAL, PartKind.BRACED
        ]
        assert value.text == "ajdb"

    def test_missing_assignment(self):
        """A field written without '=' keeps its value and the entry stays whole."""
        text = "@article{k, title {X}, author = {A}, journal = {J}, year = 2000}"
        document = parse(text)
        entry = document.entries[0]
        assert entry.span == Span(0, len(text))
        assert entry.closed
        assert entry.field_names == ["title", "author", "journal", "year"]
        title = entry.get_field("title")
        assert title.assign_span is None
        assert title.value.text == "X"
        assert len(document.blocks) == 1

    def test_missing_comma_after_key(self):
        """Fields directly after the key are kept."""
        entry = parse("@article{k title = {X}, author = {A}}").entries[0]
        assert entry.key == "k"
        assert entry.field_names == ["title", "author"]

    def test_missing_comma(self):
        """A missing comma between fields still yields both fields."""
        entry = parse("@misc{k, title = {x} year = 2000}").entries[0]
        assert entry.field_names == ["title", "year"]


class TestMalformed:
    """Recovery from unterminated and incomplete input."""

    def test_unclosed_entry_and_value(self):
        """Unterminated constructs extend to the end of the text."""
        text = "@article{k, title = {Open"
        entry = parse(text).entries[0]
        assert not entry.closed
        assert entry.span.end == len(text)
        part = entry.fields[0].value.parts[0]
        assert part.kind is PartKind.BRACED
        assert not part.closed
        assert part.text == "Open"

    def test_unclosed_quoted_value(self):
        """An unterminated quoted value is marked open."""
        entry = parse('@misc{k, title = "never').entries[0]
        part = entry.fields[0].value.parts[0]
        assert part.kind is PartKind.QUOTED
        assert not part.closed

    def test_empty_value_placeholder(self):
        """A field with no value gets a zero-width empty literal after '='."""
        entry = parse("@misc{k, title = , year = 2000}").entries[0]
        title = entry.fields[0]
        assert len(title.value.parts) == 1
        placeholder = title.value.parts[0]
        assert placeholder.kind is PartKind.LITERAL
        assert placeholder.text == ""
        assert placeholder.span == Span(title.assign_span.end, title.assign_span.end)
        assert title.value.is_empty
        assert entry.field_names == ["title", "year"]

    def test_field_without_assignment(self):
        """A bare field name has no '=' and an empty value at the name's end."""
        entry = parse("@misc{k, title}").entries[0]
        title = entry.fields[0]
        assert title.assign_span is None
        assert title.value.span == Span(title.name_span.end, title.name_span.end)

    @pytest.mark.parametrize("text", [
        "@",
        "@{",
        "@misc{",
        "@misc{k, title = {",
        '@misc{k, title = "',
        "}}}}",
        "@misc(k, title = (x))",
        "\\",
        "$$",
        "@comment{",
        "@string{",
        "@preamble{#",
        "@misc{k,,, = = }",
        "@misc{k, title = {a} # }",
    ])
    def test_never_raises(self, text):
        """Arbitrary input parses and the blocks still tile the text."""
        assert_tiles(parse(text))


class TestSpan:
    """Character and cursor containment."""

    def test_contains_excludes_end(self):
        """A character position at the end lies outside the span."""
        span = Span(2, 5)
        assert span.contains(2)
        assert span.contains(4)
        assert not span.contains(5)
        assert not span.contains(1)

    def test_contains_cursor_includes_end(self):
        """A cursor right after the last character still touches the span."""
        span = Span(2, 5)
        assert span.contains_cursor(5)
        assert not span.contains_cursor(6)

    def test_zero_width(self):
        """An empty span holds no character but can hold a cursor."""
        span = Span(3, 3)
        assert not span.contains(3)
        assert span.contains_cursor(3)


class TestArena:
    """Node arena and parent links."""

    def test_every_node_registered(self, document):
        """Each node sits in the arena under its own id."""
        for index, node in enumerate(document.nodes):
            assert node is not None
            assert node.id == index
            assert document.node(node.id) is node

    def test_parent_links(self, article, document):
        """Fields point at their entry, values at their field, parts at their value."""
        assert article.parent is None
        for f in article.fields:
            assert document.parent_of(f) is article
            assert document.parent_of(f.value) is f
            for part in f.value.parts:
                assert document.parent_of(part) is f.value

    def test_ancestors(self, article, document):
        """Ancestors run from the nearest parent up to the block."""
        part = article.fields[0].value.parts[0]
        assert list(document.ancestors(part)) == [
            article.fields[0].value, article.fields[0], article
        ]

    def test_node_at(self, document):
        """The innermost node under an offset is returned."""
        node = document.node_at(SAMPLE.index("Nested"))
        assert node.kind is PartKind.BRACED

    def test_block_at(self, document):
        """block_at finds the top-level block covering an offset."""
        assert document.block_at(SAMPLE.index("doe2020")).kind is BlockKind.ENTRY
        assert document.block_at(len(SAMPLE)) is None

    def test_location(self, document):
        """Offsets convert to 1-based line and column."""
        assert document.location(0) == (1, 1)
        assert document.location(SAMPLE.index("@article")) == (5, 1)
        assert document.location(SAMPLE.index("author")) == (6, 3)

    def test_pretokenized_input(self):
        """The parser accepts tokens produced earlier."""
        text = "@misc{k, title = {x}}"
        assert Parser(text, tokens=tokenize(text)).parse() == parse(text)
