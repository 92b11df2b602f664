"""
Error handling utilities for the Tern front end.

Diagnostics are exceptions so the parser can raise them to unwind to a
recovery point, but the public entry points only ever *return* them.
"""
from tern.tokens import TokenKind


class ParseError(Exception):
    """Base diagnostic with a source position, expected-vs-found and a hint."""
    category = "error"

    def __init__(self, message, span=None, suggestion=None):
        self.message = message
        self.span = span
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    @property
    def line(self):
        return self.span.line if self.span else None

    @property
    def column(self):
        return self.span.column if self.span else None

    @property
    def offset(self):
        return self.span.offset if self.span else 0

    def describe(self):
        """One-line description without position."""
        return self.message

    def _format_error(self):
        if self.span:
            return f"{self.line}:{self.column}: {self.category}: {self.describe()}"
        return f"{self.category}: {self.describe()}"


class LexicalError(ParseError):
    """Unrecognized character, malformed or unterminated literal."""
    category = "lexical error"

    def __init__(self, message, span=None, text=None, suggestion=None):
        self.text = text  # The offending lexeme
        super().__init__(message, span=span, suggestion=suggestion)

    @classmethod
    def from_token(cls, token):
        return cls(token.message, span=token.span, text=token.text,
                   suggestion=suggest_lexical_fix(token.message))


class TernSyntaxError(ParseError):
    """An unexpected token where one of ``expected`` was required."""
    category = "syntax error"

    def __init__(self, message=None, span=None, expected=(), found=None, suggestion=None):
        self.expected = tuple(expected)
        self.found = found  # The offending Token
        if span is None and found is not None:
            span = found.span
        if message is None:
            message = f"expected {format_expected(self.expected)}"
        if suggestion is None:
            suggestion = suggest_syntax_fix(self)
        super().__init__(message, span=span, suggestion=suggestion)

    def describe(self):
        if self.found is None:
            return self.message
        return f"{self.message}, found {self.found.describe()}"


class StructuralError(TernSyntaxError):
    """Grammar-level impossibility such as an enum without variants."""
    category = "structural error"


def format_expected(expected):
    """Render an expected set as ``'a', 'b' or 'c'``."""
    items = list(expected)
    if not items:
        return "something else"
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " or " + items[-1]


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].rstrip()
    return None


def suggest_lexical_fix(message):
    """Return a hint for a lexical error message."""
    if message is None:
        return None
    if message.startswith("unterminated string"):
        return "Close the string with '\"'"
    if message.startswith("unterminated character"):
        return "Close the character literal with \"'\""
    if message.startswith("character literal"):
        return "Use double quotes for strings: \"...\""
    if message.startswith("unknown escape"):
        return "Supported escapes are \\n \\t \\r \\0 \\\\ \\\" and \\'"
    return None


def suggest_syntax_fix(error):
    """Detect common mistakes and return a helpful suggestion (or None)."""
    expected = set(error.expected)
    found = error.found

    if found is not None and found.is_symbol('!') and "expression" not in expected:
        return "'!=' is not an operator; use '!(a == b)'"
    if "';'" in expected:
        return "Statements should end with ';'"
    if "'}'" in expected and found is not None and found.kind is TokenKind.EOF:
        return "Unmatched braces: add the missing '}'"
    if "')'" in expected:
        return "Unmatched parentheses: add the missing ')'"
    if "']'" in expected:
        return "Unmatched brackets: add the missing ']'"
    if "'in'" in expected:
        return "Loops are written 'for item in items { ... }'"
    if found is not None and found.kind is TokenKind.KEYWORD and "identifier" in expected:
        return f"'{found.text}' is a keyword and cannot be used as a name"
    return None
