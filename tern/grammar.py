"""
Tern Terminal Grammar.

This module contains the Lark grammar describing the terminals of the Tern
language. Only Lark's basic lexer is driven from it; the syntactic rules
live in the hand-written parser (tern.parser), so the ``start`` rule below
simply accepts any sequence of terminals.

Recovery terminals (UNTERMINATED_*, BAD_CHAR, ERROR_CHAR) carry lower
priorities than the well-formed literals so Lark only falls back to them
when nothing valid matches.
"""

tern_grammar = r"""
    start: _token*

    _token: _keyword | _literal | _symbol | _malformed | NAME

    _keyword: IMPORT | FN | STRUCT | LET | MOD | CONST | ENUM | IF | ELSE
            | RETURN | WHILE | FOR | IN | BREAK | CONTINUE | PRINT

    _literal: INT | FLOAT | STRING | CHAR

    _symbol: DOUBLE_COLON | EQUAL_EQUAL | PLUS_EQUAL | MINUS_EQUAL | STAR_EQUAL
           | SLASH_EQUAL | GREATER_EQUAL | LESS_EQUAL | AND_AND | OR_OR | ARROW
           | PLUS | MINUS | STAR | SLASH | COLON | DOT | SEMICOLON | EQUAL
           | PIPE | AMPERSAND | BANG | TILDE | GREATER | LESS | CARET | PERCENT
           | LBRACKET | RBRACKET | LBRACE | RBRACE | LPAREN | RPAREN | COMMA

    _malformed: UNTERMINATED_STRING | BAD_CHAR | UNTERMINATED_CHAR | ERROR_CHAR

    // --- Keywords ---
    IMPORT: "import"
    FN: "fn"
    STRUCT: "struct"
    LET: "let"
    MOD: "mod"
    CONST: "const"
    ENUM: "enum"
    IF: "if"
    ELSE: "else"
    RETURN: "return"
    WHILE: "while"
    FOR: "for"
    IN: "in"
    BREAK: "break"
    CONTINUE: "continue"
    PRINT: "print"

    // --- Symbols (Lark tries longer strings first) ---
    DOUBLE_COLON: "::"
    EQUAL_EQUAL: "=="
    PLUS_EQUAL: "+="
    MINUS_EQUAL: "-="
    STAR_EQUAL: "*="
    SLASH_EQUAL: "/="
    GREATER_EQUAL: ">="
    LESS_EQUAL: "<="
    AND_AND: "&&"
    OR_OR: "||"
    ARROW: "->"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    COLON: ":"
    DOT: "."
    SEMICOLON: ";"
    EQUAL: "="
    PIPE: "|"
    AMPERSAND: "&"
    BANG: "!"
    TILDE: "~"
    GREATER: ">"
    LESS: "<"
    CARET: "^"
    PERCENT: "%"
    LBRACKET: "["
    RBRACKET: "]"
    LBRACE: "{"
    RBRACE: "}"
    LPAREN: "("
    RPAREN: ")"
    COMMA: ","

    // --- Literals ---
    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    FLOAT.2: /[0-9]+\.[0-9]+/
    INT: /[0-9]+/
    STRING.3: /"(?:[^"\\]|\\.)*"/s
    CHAR.3: /'(?:[^'\\\n]|\\.)'/

    // --- Malformed input ---
    UNTERMINATED_STRING.1: /"(?:[^"\\]|\\.)*\\?/s
    BAD_CHAR.2: /'(?:[^'\\\n]|\\.)*'/
    UNTERMINATED_CHAR.1: /'(?:[^'\\\n]|\\.)*\\?/
    ERROR_CHAR.-1: /./s

    // --- Ignored ---
    COMMENT: /#[^\n]*/
    WS: /[ \t\f\r\n]+/

    %ignore WS
    %ignore COMMENT
"""

# Terminal names that decode into literal tokens.
LITERAL_TERMINALS = ('INT', 'FLOAT', 'STRING', 'CHAR')

# Terminal names that always become error tokens, with their messages.
MALFORMED_TERMINALS = {
    'UNTERMINATED_STRING': "unterminated string literal",
    'UNTERMINATED_CHAR': "unterminated character literal",
    'BAD_CHAR': "character literal must contain exactly one character",
}
