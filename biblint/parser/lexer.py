"""Mode-aware BibTeX tokenizer.

The lexer covers every character of its input with exactly one token and
never stops on bad input: anything it cannot classify becomes a
one-character UNKNOWN token and lexing carries on.

Modes, outermost first:

- DEFAULT: free text between entries.
- Entry body (KEY, FIELD_NAME): expecting the citation key or a field name.
- Field (ASSIGN, VALUE, AFTER_VALUE): after a field name, around ``=``,
  value parts and ``#``.
- Inside a value part: literal, ``{...}`` or ``"..."`` scanning, with an
  optional math run (``$...$`` or ``$$...$$``).
- RAW: the body of ``@comment``.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Token classifications."""
    TEXT = "text"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    ENTRY_MARKER = "entry_marker"
    ENTRY_TYPE = "entry_type"
    ENTRY_KEY = "entry_key"
    FIELD_NAME = "field_name"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    BRACE = "brace"
    QUOTE = "quote"
    STRING_CONTENT = "string_content"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    MATH_DELIMITER = "math_delimiter"
    MATH_CONTENT = "math_content"
    COMMAND = "command"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Token:
    """A classified slice of the source text."""
    kind: TokenKind
    start: int
    end: int
    text: str

    def __str__(self) -> str:
        return f"{self.kind.value}[{self.start}:{self.end}] {self.text!r}"


class LexMode(Enum):
    DEFAULT = "default"
    RAW = "raw"
    KEY = "key"
    FIELD_NAME = "field_name"
    ASSIGN = "assign"
    VALUE = "value"
    AFTER_VALUE = "after_value"


_ENTRY_TYPE_RE = re.compile(r"[A-Za-z]+")
_WHITESPACE_RE = re.compile(r"\s+")
_TEXT_RE = re.compile(r"[^@\s]+")
_KEY_RE = re.compile(r"[^\s,{}()=\"#%]+")
_IDENT_RE = re.compile(r"[A-Za-z_][\w\-:.+/]*")
_NUMBER_RE = re.compile(r"[0-9]+")
# Backslash plus a command name, a single escaped character, or nothing at EOF
_COMMAND_RE = re.compile(r"\\(?:[A-Za-z]+|.)?", re.DOTALL)
_BRACED_CONTENT_RE = re.compile(r"[^\\${}]+")
_QUOTED_CONTENT_RE = re.compile(r"[^\\${}\"]+")

_CLOSERS = {"{": "}", "(": ")"}
_VALUE_STOPS = ",{}#=\""


class Lexer:
    """Single-use tokenizer over one source text.

    Example:
        tokens = Lexer('@misc{k, title = {T}}').tokenize()
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.tokens: List[Token] = []
        self.mode = LexMode.DEFAULT
        self.closer: Optional[str] = None
        self.key_seen = False

    def tokenize(self) -> List[Token]:
        n = len(self.text)
        while self.pos < n:
            if self.mode is LexMode.DEFAULT:
                self._lex_default()
            elif self.mode is LexMode.RAW:
                self._lex_raw()
            elif self.mode is LexMode.KEY:
                self._lex_key()
            elif self.mode is LexMode.FIELD_NAME:
                self._lex_field_name()
            elif self.mode is LexMode.ASSIGN:
                self._lex_assign()
            else:
                self._lex_value()
        logger.debug(f"Tokenized {n} characters into {len(self.tokens)} tokens")
        return self.tokens

    # -- helpers ---------------------------------------------------------

    def _emit(self, kind: TokenKind, end: int) -> None:
        end = min(end, len(self.text))
        self.tokens.append(Token(kind, self.pos, end, self.text[self.pos:end]))
        self.pos = end

    def _at_line_start(self) -> bool:
        i = self.pos - 1
        while i >= 0 and self.text[i] in " \t":
            i -= 1
        return i < 0 or self.text[i] == "\n"

    def _line_end(self) -> int:
        end = self.text.find("\n", self.pos)
        return len(self.text) if end == -1 else end

    def _skip_blanks(self, i: int) -> int:
        n = len(self.text)
        while i < n and self.text[i].isspace():
            i += 1
        return i

    def _lex_trivia(self) -> bool:
        """Consume whitespace, a line comment or the entry closer."""
        ch = self.text[self.pos]
        if ch.isspace():
            self._emit(TokenKind.WHITESPACE, _WHITESPACE_RE.match(self.text, self.pos).end())
            return True
        if ch == "%" and self._at_line_start():
            self._emit(TokenKind.COMMENT, self._line_end())
            return True
        if ch == self.closer:
            self._emit(TokenKind.BRACE, self.pos + 1)
            self.mode = LexMode.DEFAULT
            self.closer = None
            return True
        return False

    def _unknown(self) -> None:
        self._emit(TokenKind.UNKNOWN, self.pos + 1)

    def _lex_stray_value(self) -> bool:
        """Lex a ``{...}`` or ``"..."`` met where no value was expected.

        Lexing it as a value keeps its braces balanced, so the ``}`` that
        closes it is never taken for the entry closer.
        """
        ch = self.text[self.pos]
        if ch == "{":
            self._lex_delimited(quoted=False)
        elif ch == '"':
            self._lex_delimited(quoted=True)
        else:
            return False
        self.mode = LexMode.AFTER_VALUE
        return True

    # -- top level -------------------------------------------------------

    def _lex_default(self) -> None:
        ch = self.text[self.pos]
        if ch == "@":
            match = _ENTRY_TYPE_RE.match(self.text, self.pos + 1)
            if match is None:
                self._emit(TokenKind.TEXT, self.pos + 1)
                return
            self._emit(TokenKind.ENTRY_MARKER, self.pos + 1)
            self._emit(TokenKind.ENTRY_TYPE, match.end())
            self._open_entry(match.group().lower())
            return
        if ch == "%" and self._at_line_start():
            self._emit(TokenKind.COMMENT, self._line_end())
            return
        if ch.isspace():
            self._emit(TokenKind.WHITESPACE, _WHITESPACE_RE.match(self.text, self.pos).end())
            return
        self._emit(TokenKind.TEXT, _TEXT_RE.match(self.text, self.pos).end())

    def _open_entry(self, entry_type: str) -> None:
        i = self._skip_blanks(self.pos)
        if i >= len(self.text) or self.text[i] not in _CLOSERS:
            # "@word" without a body stays free text
            return
        if i > self.pos:
            self._emit(TokenKind.WHITESPACE, i)
        opener = self.text[i]
        self._emit(TokenKind.BRACE, i + 1)
        self.closer = _CLOSERS[opener]
        self.key_seen = False
        if entry_type == "comment":
            self.mode = LexMode.RAW
        elif entry_type == "preamble":
            self.mode = LexMode.VALUE
        elif entry_type == "string":
            self.mode = LexMode.FIELD_NAME
        else:
            self.mode = LexMode.KEY

    def _lex_raw(self) -> None:
        opener = "{" if self.closer == "}" else "("
        depth = 0
        i = self.pos
        n = len(self.text)
        while i < n:
            ch = self.text[i]
            if ch == opener:
                depth += 1
            elif ch == self.closer:
                if depth == 0:
                    break
                depth -= 1
            i += 1
        if i > self.pos:
            self._emit(TokenKind.COMMENT, i)
        if i < n:
            self._emit(TokenKind.BRACE, i + 1)
        self.mode = LexMode.DEFAULT
        self.closer = None

    # -- entry body ------------------------------------------------------

    def _lex_key(self) -> None:
        if self._lex_trivia():
            return
        ch = self.text[self.pos]
        if ch == ",":
            self._emit(TokenKind.PUNCTUATION, self.pos + 1)
            self.mode = LexMode.FIELD_NAME
            return
        if self._lex_stray_value():
            return
        match = _KEY_RE.match(self.text, self.pos)
        if match is None:
            self._unknown()
            return
        after = self._skip_blanks(match.end())
        if after < len(self.text) and self.text[after] == "=":
            # No key, or no comma after the key: this starts a field
            self._lex_field_name()
            return
        if self.key_seen:
            self._unknown()
            return
        self._emit(TokenKind.ENTRY_KEY, match.end())
        self.key_seen = True

    def _lex_field_name(self) -> None:
        if self._lex_trivia():
            return
        ch = self.text[self.pos]
        if ch == ",":
            self._emit(TokenKind.PUNCTUATION, self.pos + 1)
            return
        if self._lex_stray_value():
            return
        match = _IDENT_RE.match(self.text, self.pos)
        if match is None:
            self._unknown()
            return
        self._emit(TokenKind.FIELD_NAME, match.end())
        self.mode = LexMode.ASSIGN

    def _lex_assign(self) -> None:
        if self._lex_trivia():
            return
        ch = self.text[self.pos]
        if ch == "=":
            self._emit(TokenKind.OPERATOR, self.pos + 1)
            self.mode = LexMode.VALUE
        elif ch == ",":
            self._emit(TokenKind.PUNCTUATION, self.pos + 1)
            self.mode = LexMode.FIELD_NAME
        elif not self._lex_stray_value():
            self._unknown()

    # -- field values ----------------------------------------------------

    def _lex_value(self) -> None:
        if self._lex_trivia():
            return
        ch = self.text[self.pos]
        if ch == ",":
            self._emit(TokenKind.PUNCTUATION, self.pos + 1)
            self.mode = LexMode.FIELD_NAME
            return
        if ch == "#":
            self._emit(TokenKind.OPERATOR, self.pos + 1)
            self.mode = LexMode.VALUE
            return
        if self.mode is LexMode.AFTER_VALUE:
            match = _IDENT_RE.match(self.text, self.pos)
            if match is not None:
                after = self._skip_blanks(match.end())
                if after < len(self.text) and self.text[after] == "=":
                    # Missing comma between two fields
                    self._lex_field_name()
                    return
        if ch == "{":
            self._lex_delimited(quoted=False)
        elif ch == '"':
            self._lex_delimited(quoted=True)
        elif ch in _VALUE_STOPS or ch == ")":
            self._unknown()
            return
        else:
            self._lex_literal()
        self.mode = LexMode.AFTER_VALUE

    def _lex_literal(self) -> None:
        text = self.text
        n = len(text)
        i = self.pos
        while i < n:
            ch = text[i]
            if ch.isspace() or ch in _VALUE_STOPS or ch == self.closer:
                break
            i += 2 if ch == "\\" else 1
        i = min(i, n)
        kind = TokenKind.NUMBER if _NUMBER_RE.fullmatch(text, self.pos, i) else TokenKind.IDENTIFIER
        self._emit(kind, i)

    def _lex_delimited(self, quoted: bool) -> None:
        """Lex a ``{...}`` or ``"..."`` value, up to and including its closer.

        Braced values end when the brace depth returns to zero; quoted
        values end at the first unescaped quote. Escapes are consumed before
        any other rule, so ``\\{``, ``\\"`` and ``\\$`` never change mode.
        """
        text = self.text
        n = len(text)
        if quoted:
            self._emit(TokenKind.QUOTE, self.pos + 1)
            depth = 0
            content_re = _QUOTED_CONTENT_RE
        else:
            self._emit(TokenKind.BRACE, self.pos + 1)
            depth = 1
            content_re = _BRACED_CONTENT_RE
        math: Optional[str] = None

        while self.pos < n:
            ch = text[self.pos]
            if ch == "\\":
                self._emit(TokenKind.COMMAND, _COMMAND_RE.match(text, self.pos).end())
            elif ch == "$":
                math = self._lex_dollar(math)
            elif ch == "{":
                depth += 1
                self._emit(TokenKind.BRACE, self.pos + 1)
            elif ch == "}":
                if depth > 0:
                    depth -= 1
                self._emit(TokenKind.BRACE, self.pos + 1)
                if not quoted and depth == 0:
                    return
            elif quoted and ch == '"':
                self._emit(TokenKind.QUOTE, self.pos + 1)
                return
            else:
                kind = TokenKind.MATH_CONTENT if math else TokenKind.STRING_CONTENT
                self._emit(kind, content_re.match(text, self.pos).end())

    def _lex_dollar(self, math: Optional[str]) -> Optional[str]:
        """Emit a math delimiter and return the new math state.

        ``$`` only closes ``$`` and ``$$`` only closes ``$$``; a lone ``$``
        inside display math is plain math content.
        """
        double = self.text.startswith("$$", self.pos)
        if math is None:
            delimiter = "$$" if double else "$"
            self._emit(TokenKind.MATH_DELIMITER, self.pos + len(delimiter))
            return delimiter
        if math == "$":
            self._emit(TokenKind.MATH_DELIMITER, self.pos + 1)
            return None
        if double:
            self._emit(TokenKind.MATH_DELIMITER, self.pos + 2)
            return None
        self._emit(TokenKind.MATH_CONTENT, self.pos + 1)
        return math


def tokenize(text: str) -> List[Token]:
    """Tokenize BibTeX source.

    Args:
        text: Full document text

    Returns:
        Tokens in document order; their texts concatenate back to ``text``
    """
    return Lexer(text).tokenize()
