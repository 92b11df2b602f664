"""
Token and source span models shared by the lexer and the parser.
"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


KEYWORDS = frozenset({
    'import', 'fn', 'struct', 'let', 'mod', 'const', 'enum',
    'if', 'else', 'return', 'while', 'for', 'in', 'break', 'continue', 'print',
})

# Items that can start a declaration inside a program or module body.
ITEM_KEYWORDS = frozenset({'fn', 'struct', 'mod', 'const', 'enum'})

SYMBOLS = frozenset({
    '::', '==', '+=', '-=', '*=', '/=', '>=', '<=', '&&', '||', '->',
    '+', '-', '*', '/', ':', '.', ';', '=', '|', '&', '!', '~', '>', '<',
    '^', '%', '[', ']', '{', '}', '(', ')', ',',
})


class TokenKind(str, Enum):
    """Lexical category of a token."""
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    CHAR = "char"
    SYMBOL = "symbol"
    EOF = "eof"
    ERROR = "error"


class Span(BaseModel):
    """
    A region of source text. Lines and columns are 1-based, offsets 0-based.

    Offsets and columns count characters of the decoded ``str``, not bytes
    of the encoded file; they differ on non-ASCII sources.
    """
    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    offset: int
    end_line: int
    end_column: int
    end_offset: int

    def to(self, other: "Span") -> "Span":
        """Return a span running from the start of self to the end of other."""
        return Span(
            line=self.line,
            column=self.column,
            offset=self.offset,
            end_line=other.end_line,
            end_column=other.end_column,
            end_offset=other.end_offset,
        )

    def __str__(self):
        return f"{self.line}:{self.column}"


class Token(BaseModel):
    """A single lexeme with its decoded value and position."""
    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    text: str
    value: Union[int, float, str, None] = None
    span: Span
    message: Optional[str] = None  # set on error tokens only

    def is_symbol(self, *symbols: str) -> bool:
        return self.kind is TokenKind.SYMBOL and self.text in symbols

    def is_keyword(self, *keywords: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.text in keywords

    def describe(self) -> str:
        """Human-readable description used in diagnostics."""
        if self.kind is TokenKind.EOF:
            return "end of file"
        if self.kind in (TokenKind.SYMBOL, TokenKind.KEYWORD):
            return f"'{self.text}'"
        if self.kind is TokenKind.IDENTIFIER:
            return f"identifier '{self.text}'"
        if self.kind is TokenKind.ERROR:
            return f"invalid input {self.text!r}"
        return f"{self.kind.value} literal {self.text}"

    def __str__(self):
        if self.value is not None and self.kind is not TokenKind.IDENTIFIER:
            return f"{self.kind.value}({self.value!r}) @ {self.span}"
        return f"{self.kind.value}({self.text}) @ {self.span}"
