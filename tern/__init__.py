# Tern Language - Front End
"""
Front-end modules for the Tern language:
- tokens: Token and source span models
- grammar: Lark terminal grammar for the Tern lexer
- lexer: Lazy tokenizer with error tokens
- nodes: AST node models
- parser: Recursive-descent parser with panic-mode recovery
- errors: Diagnostic types and suggestion helpers
- config: Reporting configuration
- visitor: AST traversal helpers
- outline: Item signature extraction
"""

from .errors import LexicalError, ParseError, StructuralError, TernSyntaxError
from .lexer import tokenize
from .parser import parse, parse_source
from .config import FrontendConfig, load_config
from .outline import OutlineExtractor

__all__ = [
    'LexicalError',
    'ParseError',
    'StructuralError',
    'TernSyntaxError',
    'tokenize',
    'parse',
    'parse_source',
    'FrontendConfig',
    'load_config',
    'OutlineExtractor',
]
