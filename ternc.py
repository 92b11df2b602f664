import argparse
import sys
import json

from frontend import analyze_file, log, read_source, set_verbose, debug_log
from tern.config import ConfigError, load_config
from tern.lexer import tokenize
from tern.tokens import TokenKind
from tern.outline import OutlineExtractor


def _load_config(args):
    try:
        return load_config(
            args.config,
            max_errors=args.max_errors,
            color=False if args.no_color else None,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


def _analyze(filename):
    try:
        return analyze_file(filename)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


def cmd_tokens(args):
    """Print the token stream, one token per line."""
    try:
        source_code, filename = read_source(args.filename)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    debug_log(f"Tokenizing {filename}")
    failed = False
    for token in tokenize(source_code):
        print(token)
        failed = failed or token.kind is TokenKind.ERROR
    return 1 if failed else 0


def cmd_parse(args):
    """Parse a file, report diagnostics and optionally dump the AST as JSON."""
    config = _load_config(args)
    result = _analyze(args.filename)
    if args.json:
        print(result.program.model_dump_json(indent=2))
    if not result.is_ok():
        print(result.format_errors(config), file=sys.stderr)
        return 1
    if not args.json:
        log(f"✓ {result.filename}: no errors ({len(result.program.items)} items)")
    return 0


def cmd_outline(args):
    """Print the declared items of a file as JSON."""
    config = _load_config(args)
    result = _analyze(args.filename)
    print(json.dumps(OutlineExtractor().extract(result.program), indent=2))
    if not result.is_ok():
        print(result.format_errors(config), file=sys.stderr)
        return 1
    return 0


def cmd_check(args):
    """Parse several files; fail if any of them has diagnostics."""
    config = _load_config(args)
    failures = 0
    for filename in args.filenames:
        result = _analyze(filename)
        if result.is_ok():
            log(f"✓ {result.filename}")
        else:
            failures += 1
            print(result.format_errors(config), file=sys.stderr)
    if failures:
        log(f"❌ {failures} of {len(args.filenames)} files have errors")
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tern front-end CLI")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help="Path to a JSON config file (default: tern.json or ~/.tern/config.json)")
    parser.add_argument("--max-errors", type=int, help="Show at most this many diagnostics per file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored diagnostics")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("tokens", help="Print the token stream").add_argument("filename", nargs="?", default="-", help="Source file (default: read from stdin)")

    parse = subparsers.add_parser("parse", help="Parse a file and report diagnostics")
    parse.add_argument("filename", nargs="?", default="-", help="Source file (default: read from stdin)")
    parse.add_argument("--json", action="store_true", help="Dump the AST as JSON to stdout")

    subparsers.add_parser("outline", help="Print declared items as JSON").add_argument("filename", nargs="?", default="-")

    check = subparsers.add_parser("check", help="Parse several files")
    check.add_argument("filenames", nargs="+")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.command == "tokens": return cmd_tokens(args)
    elif args.command == "parse": return cmd_parse(args)
    elif args.command == "outline": return cmd_outline(args)
    elif args.command == "check": return cmd_check(args)
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    sys.exit(main())
