"""
stepin.compiler.reader - Reading source text into forms

Text goes through two stages. tokenize() splits it into Tokens that know
their line, column and character offsets; Reader turns the tokens into
forms. Parenthesized forms come back as SourceList so that a definition can
later be found again in its file, and read_one_with_text() returns the
exact slice of text a form was read from.

Forms are built from the literal classes in stepin.runtime.types: Symbol,
Keyword, VectorLiteral, MapLiteral, SetLiteral and Decorated (^meta).
Numbers, strings, booleans and nil read as Python values.
"""

from dataclasses import dataclass
from typing import Any, Optional

from stepin.runtime.types import (
    Decorated,
    Keyword,
    MapLiteral,
    SetLiteral,
    Symbol,
    VectorLiteral,
)

# =============================================================================
# Locations
# =============================================================================


@dataclass
class SourceLocation:
    """Start and end position of a form."""

    line: int = 0  # 1-based
    col: int = 0  # 0-based
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"SourceLocation({self.line}:{self.col})"


@dataclass
class Token:
    value: Any  # str, or a (KIND, payload) tuple for strings, chars and quote marks
    line: int
    col: int
    pos: int = 0  # offset of the first character in the source
    end: int = 0  # offset just past the last character

    def __repr__(self):
        return f"Token({self.value!r}, {self.line}:{self.col})"


class SourceList(list):
    """A call form: a plain list that also remembers where it was read."""

    __slots__ = ("line", "col", "end_line", "end_col")

    def __init__(self, items=None, line=0, col=0, end_line=0, end_col=0):
        super().__init__(items if items is not None else [])
        self.line = line
        self.col = col
        self.end_line = end_line
        self.end_col = end_col

    def get_location(self) -> SourceLocation:
        return SourceLocation(self.line, self.col, self.end_line, self.end_col)


@dataclass
class ReadTimeEval:
    """
    A #= form. The interpreter evaluates the wrapped form only when
    read_eval is true.

    Example:
        (def answer #=(+ 40 2))
    """

    form: Any
    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0

    def __repr__(self):
        return f"ReadTimeEval({self.form!r})"


class _DiscardSentinel:
    """Marker returned for forms read after #_."""

    def __repr__(self):
        return "<DISCARD>"


DISCARD = _DiscardSentinel()


def is_discard(x) -> bool:
    return x is DISCARD


def get_source_location(form) -> Optional[SourceLocation]:
    """Location of form, or None for forms that carry none (numbers, strings)."""
    if isinstance(form, SourceList):
        return form.get_location()
    if hasattr(form, "line") and hasattr(form, "col"):
        return SourceLocation(
            form.line,
            form.col,
            getattr(form, "end_line", form.line),
            getattr(form, "end_col", form.col),
        )
    return None


# =============================================================================
# Tokenizer
# =============================================================================

# Named character literals: \newline, \space, ...
CHAR_NAMES = {
    "newline": "\n",
    "space": " ",
    "tab": "\t",
    "return": "\r",
    "backspace": "\b",
    "formfeed": "\f",
}


def tokenize(src: str) -> list[Token]:
    """Split src into Tokens. Comments and whitespace produce no tokens."""
    tokens = []
    i = 0
    n = len(src)
    line = 1
    line_start = 0  # offset where the current line begins

    # Commas are whitespace, as in Clojure
    WHITESPACE = " \t\r\n,"
    delimiters = set("()[]{}")
    closing_delims = set(")]}")

    def current_col():
        return i - line_start

    def add(value, tok_line, tok_col, start):
        tokens.append(Token(value, tok_line, tok_col, start, i))

    while i < n:
        c = src[i]
        if c == "\n":
            i += 1
            line += 1
            line_start = i
            continue
        if c in " \t\r,":
            i += 1
            continue
        if c == ";":
            # comment to end of line
            while i < n and src[i] != "\n":
                i += 1
            continue

        tok_line = line
        tok_col = current_col()
        start = i

        # Reader macros
        if c in "'`@":
            i += 1
            add(c, tok_line, tok_col, start)
            continue
        if c == "^":
            i += 1
            add(("META", "^"), tok_line, tok_col, start)
            continue
        if c == "~":
            if i + 1 < n and src[i + 1] == "@":
                i += 2
                add(("UNQUOTE_SPLICING", "~@"), tok_line, tok_col, start)
                continue
            i += 1
            add(("UNQUOTE", "~"), tok_line, tok_col, start)
            continue
        if c == "\\":
            # Character literal: \a, \(, \newline
            i += 1
            if i >= n:
                raise SyntaxError(f"unterminated character literal at line {line}")
            j = i + 1
            while j < n and src[j] not in WHITESPACE and src[j] not in delimiters:
                j += 1
            name = src[i:j]
            if len(name) > 1 and name in CHAR_NAMES:
                i = j
                add(("CHAR", CHAR_NAMES[name]), tok_line, tok_col, start)
            else:
                ch = src[i]
                i += 1
                add(("CHAR", ch), tok_line, tok_col, start)
            continue
        if c == "#":
            nxt = src[i + 1] if i + 1 < n else ""
            if nxt in ("{", "_", "=", "'"):
                i += 2
                add("#" + nxt, tok_line, tok_col, start)
                continue
            if nxt == "(":
                raise SyntaxError(
                    f"anonymous function literals #(...) are not supported "
                    f"at line {tok_line}, use (fn [...] ...)"
                )
            # Fall through to symbol parsing (gensym suffix like x#)
        if c in delimiters:
            i += 1
            add(c, tok_line, tok_col, start)
            continue
        if c == '"':
            # string literal
            i += 1
            buf = []
            while i < n:
                if src[i] == "\\":
                    if i + 1 < n:
                        esc = src[i + 1]
                        if esc == "n":
                            buf.append("\n")
                        elif esc == "t":
                            buf.append("\t")
                        elif esc == "r":
                            buf.append("\r")
                        else:
                            buf.append(esc)
                        i += 2
                    else:
                        raise SyntaxError(f"unterminated string escape at line {line}")
                elif src[i] == "\n":
                    buf.append("\n")
                    i += 1
                    line += 1
                    line_start = i
                elif src[i] == '"':
                    i += 1
                    break
                else:
                    buf.append(src[i])
                    i += 1
            else:
                raise SyntaxError(f"unterminated string starting at line {tok_line}")
            add(("STRING", "".join(buf)), tok_line, tok_col, start)
            continue
        # Anything else runs to the next delimiter: numbers, keywords, symbols
        while (
            i < n
            and src[i] not in WHITESPACE
            and src[i] not in delimiters
            and src[i] != ";"
            and not (src[i] == '"' and i > start)
        ):
            i += 1
        tok = src[start:i]
        if tok in closing_delims:
            raise SyntaxError(f"unexpected {tok} at line {tok_line}")
        add(tok, tok_line, tok_col, start)
    return tokens


# =============================================================================
# Reader
# =============================================================================

# Prefix reader macros that wrap the next form: token -> head symbol name
_WRAPPING_MACROS = {
    "'": "quote",
    "`": "quasiquote",
    "@": "deref",
    "#'": "var",
}


class Reader:
    """Builds forms from a token list, one form per read_form call."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.i = 0

    def eof(self):
        return self.i >= len(self.tokens)

    def peek(self) -> Optional[Token]:
        if self.eof():
            return None
        return self.tokens[self.i]

    def next(self) -> Optional[Token]:
        tok = self.peek()
        self.i += 1
        return tok

    def last_token(self) -> Optional[Token]:
        """The most recently consumed token."""
        if self.i == 0:
            return None
        return self.tokens[min(self.i, len(self.tokens)) - 1]

    def read(self):
        """Read every remaining form, dropping #_ discards."""
        forms = []
        while not self.eof():
            form = self.read_form()
            if not is_discard(form):
                forms.append(form)
        return forms

    def read_form(self):
        tok = self.next()
        if tok is None:
            raise SyntaxError("Unexpected end of input")

        tok_value = tok.value
        tok_line = tok.line
        tok_col = tok.col

        if isinstance(tok_value, str) and tok_value in _WRAPPING_MACROS:
            inner = self._read_target(tok)
            return self._wrap(_WRAPPING_MACROS[tok_value], inner, tok)
        if isinstance(tok_value, tuple) and tok_value[0] == "UNQUOTE":
            return self._wrap("unquote", self._read_target(tok), tok)
        if isinstance(tok_value, tuple) and tok_value[0] == "UNQUOTE_SPLICING":
            return self._wrap("unquote-splicing", self._read_target(tok), tok)
        if isinstance(tok_value, tuple) and tok_value[0] == "META":
            meta = self._read_target(tok)
            target = self._read_target(tok)
            loc = get_source_location(target)
            return Decorated(
                meta,
                target,
                tok_line,
                tok_col,
                loc.end_line if loc else tok_line,
                loc.end_col if loc else tok_col + 1,
            )

        # #_ drops the next form
        if tok_value == "#_":
            self._read_target(tok)
            return DISCARD

        # #= is kept as a node; evaluation decides what to do with it
        if tok_value == "#=":
            inner = self._read_target(tok)
            loc = get_source_location(inner)
            return ReadTimeEval(
                inner,
                tok_line,
                tok_col,
                loc.end_line if loc else tok_line,
                loc.end_col if loc else tok_col + 2,
            )

        if tok_value == "(":
            items, end_tok = self.read_list_with_end(")", tok_line, tok_col)
            return SourceList(items, tok_line, tok_col, *self._end(end_tok, tok))
        if tok_value == "[":
            items, end_tok = self.read_list_with_end("]", tok_line, tok_col)
            return VectorLiteral(items, tok_line, tok_col, *self._end(end_tok, tok))
        if tok_value == "{":
            items, end_tok = self.read_list_with_end("}", tok_line, tok_col)
            if len(items) % 2 != 0:
                raise SyntaxError(
                    f"Map literal must have even number of forms at line {tok_line}"
                )
            pairs = [(items[j], items[j + 1]) for j in range(0, len(items), 2)]
            return MapLiteral(pairs, tok_line, tok_col, *self._end(end_tok, tok))
        if tok_value == "#{":
            items, end_tok = self.read_list_with_end("}", tok_line, tok_col)
            return SetLiteral(items, tok_line, tok_col, *self._end(end_tok, tok))
        if tok_value in (")", "]", "}"):
            raise SyntaxError(f"Unmatched delimiter {tok_value} at line {tok_line}")
        if isinstance(tok_value, tuple) and tok_value[0] in ("STRING", "CHAR"):
            # Strings and characters are Python str values without location
            return tok_value[1]
        return self.read_atom(tok)

    def _read_target(self, tok: Token):
        """Read the form a prefix reader macro applies to."""
        if self.eof():
            raise SyntaxError(
                f"Reader macro at line {tok.line} is missing its target form"
            )
        form = self.read_form()
        while is_discard(form):
            form = self._read_target(tok)
        return form

    @staticmethod
    def _end(end_tok: Optional[Token], start_tok: Token) -> tuple[int, int]:
        if end_tok is None:
            return start_tok.line, start_tok.col + 1
        return end_tok.line, end_tok.col + 1

    @staticmethod
    def _wrap(head: str, inner, tok: Token) -> SourceList:
        inner_loc = get_source_location(inner)
        width = len(tok.value) if isinstance(tok.value, str) else len(tok.value[1])
        end_line = inner_loc.end_line if inner_loc else tok.line
        end_col = inner_loc.end_col if inner_loc else tok.col + width
        return SourceList(
            [Symbol(head, tok.line, tok.col, tok.line, tok.col + width), inner],
            tok.line,
            tok.col,
            end_line,
            end_col,
        )

    def read_list_with_end(
        self, end_delim, start_line: int = 0, start_col: int = 0
    ) -> tuple[list, Optional[Token]]:
        """Read forms up to end_delim. Returns the forms and the closing token."""
        items = []
        while True:
            if self.eof():
                raise SyntaxError(
                    f"unterminated list at line {start_line}, expected {end_delim}"
                )
            tok = self.peek()
            if tok.value == end_delim:
                end_tok = self.next()
                return items, end_tok
            form = self.read_form()
            if not is_discard(form):
                items.append(form)

    def read_atom(self, tok: Token):
        """Numbers, true/false/nil, keywords and symbols."""
        tok_value = tok.value
        tok_line = tok.line
        tok_col = tok.col

        # numbers
        try:
            if tok_value.startswith(("0x", "-0x")):
                return int(tok_value, 16)
            if "." in tok_value or "e" in tok_value.lower():
                return float(tok_value)
            return int(tok_value)
        except ValueError:
            pass
        if tok_value == "true":
            return True
        if tok_value == "false":
            return False
        if tok_value == "nil":
            return None
        # keyword (::auto-resolved keywords read as plain keywords)
        if tok_value.startswith(":") and len(tok_value) > 1:
            name = tok_value.lstrip(":")
            if not name:
                raise SyntaxError(f"Invalid keyword {tok_value} at line {tok_line}")
            return Keyword(name, tok_line, tok_col, tok_line, tok_col + len(tok_value))
        # symbol
        return Symbol(tok_value, tok_line, tok_col, tok_line, tok_col + len(tok_value))


def read_str(src: str):
    """Read every form in src."""
    return Reader(tokenize(src)).read()


def read_one(src: str):
    """Read the first form in src. Raises SyntaxError if there is none."""
    form, _ = read_one_with_text(src)
    return form


def read_one_with_text(src: str) -> tuple[Any, str]:
    """
    Read the first form in src and return it together with the exact
    source text it was read from.
    """
    tokens = tokenize(src)
    rdr = Reader(tokens)
    while True:
        if rdr.eof():
            raise SyntaxError("Unexpected end of input: no form to read")
        start = rdr.peek()
        form = rdr.read_form()
        if not is_discard(form):
            break
    assert start is not None
    last = rdr.last_token()
    end = last.end if last is not None else len(src)
    return form, src[start.pos : end]


__all__ = [
    "SourceLocation",
    "Token",
    "SourceList",
    "ReadTimeEval",
    "DISCARD",
    "is_discard",
    "get_source_location",
    "tokenize",
    "Reader",
    "read_str",
    "read_one",
    "read_one_with_text",
]
