"""
Tern Lexer - turns source text into a lazy stream of tokens.

Scanning is delegated to Lark's basic lexer built from ``tern_grammar``;
this module decodes literal values, converts malformed input into error
tokens and appends the final EOF token. Lexing never stops early: every
bad character or literal becomes one error token and scanning resumes
right after it.
"""
from functools import lru_cache
from typing import Iterator

from lark import Lark

from tern.grammar import tern_grammar, LITERAL_TERMINALS, MALFORMED_TERMINALS
from tern.tokens import KEYWORDS, SYMBOLS, Span, Token, TokenKind


ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '0': '\0',
    '\\': '\\',
    '"': '"',
    "'": "'",
}


class InvalidEscape(ValueError):
    """Raised by unescape() for an escape sequence the language lacks."""


@lru_cache(maxsize=None)
def _terminal_lexer():
    """Build the Lark frontend once; it is never mutated afterwards."""
    return Lark(tern_grammar, parser='lalr', lexer='basic')


def unescape(body):
    """Decode the escape sequences in the body of a string or char literal."""
    if '\\' not in body:
        return body
    out = []
    chars = iter(body)
    for c in chars:
        if c != '\\':
            out.append(c)
            continue
        escaped = next(chars, '')
        if escaped not in ESCAPES:
            raise InvalidEscape(f"unknown escape sequence '\\{escaped}'")
        out.append(ESCAPES[escaped])
    return ''.join(out)


def _span_of(lark_token):
    return Span(
        line=lark_token.line,
        column=lark_token.column,
        offset=lark_token.start_pos,
        end_line=lark_token.end_line,
        end_column=lark_token.end_column,
        end_offset=lark_token.end_pos,
    )


def _eof_span(source):
    line = source.count('\n') + 1
    column = len(source) - (source.rfind('\n') + 1) + 1
    offset = len(source)
    return Span(line=line, column=column, offset=offset,
                end_line=line, end_column=column, end_offset=offset)


def _error(text, span, message):
    return Token(kind=TokenKind.ERROR, text=text, span=span, message=message)


def _literal(terminal, text, span):
    """Decode an INT/FLOAT/STRING/CHAR lexeme into a token."""
    if terminal == 'INT':
        try:
            value = int(text)
        except ValueError:
            # Interpreter digit limit (sys.get_int_max_str_digits).
            return _error(text, span, "integer literal too long")
        return Token(kind=TokenKind.INTEGER, text=text, value=value, span=span)
    if terminal == 'FLOAT':
        return Token(kind=TokenKind.FLOAT, text=text, value=float(text), span=span)
    try:
        value = unescape(text[1:-1])
    except InvalidEscape as e:
        return _error(text, span, str(e))
    if terminal == 'CHAR':
        return Token(kind=TokenKind.CHAR, text=text, value=value, span=span)
    return Token(kind=TokenKind.STRING, text=text, value=value, span=span)


class Lexer:
    """
    Single forward pass over one source string.

    ``tokens()`` may be called once; the stream it returns ends with an
    EOF token and cannot be restarted.
    """

    def __init__(self, source):
        self.source = source
        self._started = False

    def tokens(self) -> Iterator[Token]:
        if self._started:
            raise RuntimeError("Lexer.tokens() can only be consumed once")
        self._started = True
        return self._scan()

    def _scan(self):
        for lark_token in _terminal_lexer().lex(self.source):
            yield self._convert(lark_token)
        yield Token(kind=TokenKind.EOF, text='', span=_eof_span(self.source))

    def _convert(self, lark_token):
        terminal = lark_token.type
        text = str(lark_token)
        span = _span_of(lark_token)

        if terminal == 'NAME':
            return Token(kind=TokenKind.IDENTIFIER, text=text, span=span)
        if terminal in LITERAL_TERMINALS:
            return _literal(terminal, text, span)
        if terminal in MALFORMED_TERMINALS:
            return _error(text, span, MALFORMED_TERMINALS[terminal])
        if text in KEYWORDS:
            return Token(kind=TokenKind.KEYWORD, text=text, span=span)
        if text in SYMBOLS:
            return Token(kind=TokenKind.SYMBOL, text=text, span=span)
        return _error(text, span, f"unexpected character {text!r}")


def tokenize(source) -> Iterator[Token]:
    """Lazily tokenize ``source``; the last token is always EOF."""
    return Lexer(source).tokens()
