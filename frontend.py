import sys
import os

# Import from the tern package
from tern.config import FrontendConfig
from tern.errors import get_line_context
from tern.lexer import tokenize
from tern.parser import Parser
from tern.visitor import walk

# Global verbose flag
_VERBOSE = False

def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value

def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)

def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)


class ParseResult:
    """Outcome of parsing one source: the program plus its diagnostics."""

    def __init__(self, program, errors, source, filename):
        self.program = program
        self.errors = errors
        self.source = source
        self.filename = filename

    def is_ok(self) -> bool:
        return not self.errors

    def format_errors(self, config=None):
        """Render every diagnostic (up to config.max_errors) for a terminal."""
        config = config or FrontendConfig()
        shown = self.errors if config.max_errors is None else self.errors[:config.max_errors]
        blocks = [format_diagnostic(e, self.source, self.filename, config) for e in shown]
        hidden = len(self.errors) - len(shown)
        if hidden > 0:
            blocks.append(f"... and {hidden} more error{'s' if hidden != 1 else ''}")
        return "\n".join(blocks)

    def __repr__(self):
        return f"ParseResult({self.filename!r}, errors={len(self.errors)})"


def format_diagnostic(error, source=None, filename="<string>", config=None):
    """Format one diagnostic with location, context line and suggestion."""
    config = config or FrontendConfig()
    red, dim, reset = ("\033[91m", "\033[2m", "\033[0m") if config.color else ("", "", "")

    location = filename
    if error.line is not None:
        location = f"{filename}:{error.line}:{error.column}"
    lines = [f"{location}: {red}{error.category}{reset}: {error.describe()}"]

    if config.show_context:
        context = get_line_context(source, error.line)
        if context:
            lines.append(f"   > {context}")
            lines.append(f"   > {' ' * (error.column - 1)}{red}^{reset}")

    if config.show_suggestions and error.suggestion:
        lines.append(f"   {dim}hint:{reset} {error.suggestion}")

    return "\n".join(lines)


def analyze_source(source_code, filename="<string>"):
    """Tokenize and parse source text; never raises for bad input."""
    debug_log(f"Parsing source: {filename} ({len(source_code)} characters)")
    program, errors = Parser(tokenize(source_code)).parse()
    debug_log(f"Parsed {len(program.items)} items, {sum(1 for _ in walk(program))} nodes, "
              f"{len(errors)} diagnostics")
    return ParseResult(program, errors, source_code, filename)


def read_source(file_path):
    """Read a source file as UTF-8; '-' or None reads stdin."""
    if file_path is None or file_path == "-":
        return sys.stdin.read(), "<stdin>"
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File '{file_path}' not found.")
    with open(file_path, 'r', encoding='utf-8') as f:
        return f.read(), file_path


def analyze_file(file_path):
    """Read and parse a file (or stdin for '-')."""
    source_code, filename = read_source(file_path)
    return analyze_source(source_code, filename)
