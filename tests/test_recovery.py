"""
Tests for diagnostics and panic-mode error recovery.
"""
import sys

import pytest

from tern import nodes
from tern.errors import (
    LexicalError,
    ParseError,
    StructuralError,
    TernSyntaxError,
    format_expected,
    get_line_context,
)
from tern.parser import MAX_NESTING, parse_source
from tern.tokens import TokenKind


class TestStatementRecovery:
    """One mistake inside a block yields one diagnostic and parsing continues."""

    def test_missing_expression_then_valid_statements(self):
        program, errors = parse_source("fn main() { let x = ; foo(); bar(); }")
        assert len(errors) == 1
        body = program.items[0].body
        assert [s.kind for s in body] == ["error", "expression_statement", "expression_statement"]

    def test_missing_semicolon_before_keyword(self):
        program, errors = parse_source("fn main() { let x = 5 let y = 6; }")
        assert len(errors) == 1
        assert errors[0].expected == ("';'",)
        assert errors[0].found.text == "let"
        body = program.items[0].body
        assert isinstance(body[0], nodes.ErrorNode)
        assert body[1].name == "y"

    def test_missing_semicolon_before_brace(self):
        program, errors = parse_source("fn main() { foo() }")
        assert len(errors) == 1
        error = errors[0]
        assert (error.line, error.column) == (1, 19)
        assert error.found.text == "}"
        assert error.suggestion == "Statements should end with ';'"
        assert str(error) == "1:19: syntax error: expected ';', found '}'"

    def test_several_errors_in_one_pass(self):
        program, errors = parse_source("fn main() { let = 1; let y = ; ok(); }")
        assert len(errors) == 2
        assert [s.kind for s in program.items[0].body] == ["error", "error", "expression_statement"]

    def test_error_inside_nested_block(self):
        source = """
        fn main() {
            while x {
                if y { let = 3; }
                step();
            }
            done();
        }
        """
        program, errors = parse_source(source)
        assert len(errors) == 1
        assert errors[0].line == 4
        loop = program.items[0].body[0]
        assert isinstance(loop.body[0].then_body[0], nodes.ErrorNode)
        assert loop.body[1].expression.callee.name == "step"
        assert program.items[0].body[1].expression.callee.name == "done"

    def test_bad_condition_skips_the_block(self):
        program, errors = parse_source("fn main() { while ) { a(); } b(); }")
        assert len(errors) == 1
        body = program.items[0].body
        assert [s.kind for s in body] == ["error", "expression_statement"]

    def test_unexpected_keyword_in_statement_position(self):
        program, errors = parse_source("fn main() { else { } after(); }")
        assert len(errors) == 1
        assert errors[0].expected == ("statement",)
        assert program.items[0].body[-1].kind == "expression_statement"


class TestItemRecovery:
    """Errors at item level resynchronize on the next declaration."""

    def test_bad_struct_field(self):
        program, errors = parse_source("struct S { a i32 } fn ok() {}")
        assert len(errors) == 1
        assert isinstance(program.items[0], nodes.ErrorNode)
        assert program.items[1].name == "ok"

    def test_statement_at_top_level(self):
        program, errors = parse_source("let x = 1; fn ok() {}")
        assert len(errors) == 1
        assert "'fn'" in errors[0].expected
        assert program.items[-1].name == "ok"

    def test_stray_closing_brace(self):
        program, errors = parse_source("} fn ok() {}")
        assert len(errors) == 1
        assert program.items[-1].name == "ok"

    def test_keyword_as_name(self):
        _, errors = parse_source("fn while() {}")
        assert len(errors) == 1
        assert errors[0].suggestion == "'while' is a keyword and cannot be used as a name"

    def test_error_inside_module_stays_inside(self):
        program, errors = parse_source("mod m { fn ( } fn after() {}")
        assert len(errors) == 1
        module = program.items[0]
        assert isinstance(module, nodes.Module)
        assert isinstance(module.program.items[0], nodes.ErrorNode)
        assert program.items[1].name == "after"

    def test_missing_brace_at_end_of_file(self):
        program, errors = parse_source("fn main() { foo();")
        assert len(errors) == 1
        assert errors[0].found.kind is TokenKind.EOF
        assert errors[0].suggestion == "Unmatched braces: add the missing '}'"
        function = program.items[0]
        assert isinstance(function, nodes.Function)
        assert len(function.body) == 1


class TestStructuralErrors:
    """Grammatically impossible constructs get their own category."""

    def test_for_without_in(self):
        program, errors = parse_source("fn f() { for x items { } after(); }")
        assert len(errors) == 1
        assert isinstance(errors[0], StructuralError)
        assert errors[0].expected == ("'in'",)
        assert program.items[0].body[-1].kind == "expression_statement"

    def test_break_outside_loop(self):
        program, errors = parse_source("fn f() { break; }")
        assert len(errors) == 1
        assert isinstance(errors[0], StructuralError)
        assert errors[0].message == "'break' outside of a loop"
        assert isinstance(program.items[0].body[0], nodes.Break)

    def test_continue_outside_loop(self):
        _, errors = parse_source("fn f() { if x { continue; } }")
        assert len(errors) == 1
        assert "'continue'" in errors[0].message

    def test_loop_depth_resets_after_loop(self):
        _, errors = parse_source("fn f() { for i in xs { break; } break; }")
        assert len(errors) == 1
        assert errors[0].column == 33

    def test_structural_is_a_syntax_error(self):
        _, errors = parse_source("enum E {}")
        assert isinstance(errors[0], TernSyntaxError)
        assert isinstance(errors[0], ParseError)


class TestLexicalErrors:
    """Lexical errors reach the parser's diagnostics in source order."""

    def test_stray_character_is_skipped(self):
        program, errors = parse_source("fn main() { let x = 1 @ ; }")
        assert len(errors) == 1
        assert isinstance(errors[0], LexicalError)
        assert errors[0].text == "@"
        assert isinstance(program.items[0].body[0], nodes.Binding)

    def test_unterminated_string(self):
        _, errors = parse_source('fn main() { let s = "abc; }')
        lexical = [e for e in errors if isinstance(e, LexicalError)]
        assert len(lexical) == 1
        assert lexical[0].suggestion == "Close the string with '\"'"

    def test_errors_sorted_by_position(self):
        _, errors = parse_source("fn a() { let = 1; }\nfn b() { $ }\nenum E {}")
        offsets = [e.offset for e in errors]
        assert offsets == sorted(offsets)
        assert [e.category for e in errors] == ["syntax error", "lexical error", "structural error"]

    @pytest.mark.skipif(
        not getattr(sys, "get_int_max_str_digits", lambda: 0)(),
        reason="interpreter has no integer digit limit",
    )
    def test_integer_over_digit_limit(self):
        digits = "9" * (sys.get_int_max_str_digits() + 1)
        program, errors = parse_source(f"fn main() {{ let x = {digits}; after(); }}")
        assert len(errors) == 2
        assert errors[0].message == "integer literal too long"
        assert isinstance(errors[0], LexicalError)
        assert program.items[0].body[-1].kind == "expression_statement"


class TestNestingLimit:
    """Pathologically deep input is a diagnostic, never a crash."""

    def test_deep_parentheses(self):
        expr = "(" * 200 + "1" + ")" * 200
        program, errors = parse_source(f"fn main() {{ let x = {expr}; after(); }}")
        assert len(errors) == 1
        assert errors[0].message == "expression nested too deeply"
        body = program.items[0].body
        assert [s.kind for s in body] == ["error", "expression_statement"]

    def test_moderate_parentheses(self):
        expr = "(" * 50 + "1" + ")" * 50
        program, errors = parse_source(f"fn main() {{ let x = {expr}; }}")
        assert errors == []
        value = program.items[0].body[0].value
        depth = 0
        while isinstance(value, nodes.Grouped):
            value, depth = value.expression, depth + 1
        assert depth == 50

    def test_deep_unary_chain(self):
        program, errors = parse_source("fn main() { let x = " + "-" * 500 + "1; ok(); }")
        assert len(errors) == 1
        assert "nested too deeply" in errors[0].message
        assert program.items[0].body[-1].kind == "expression_statement"

    def test_long_assignment_chain(self):
        _, errors = parse_source("fn main() { " + "a = " * 300 + "1; }")
        assert len(errors) == 1
        assert errors[0].message == "expression nested too deeply"

    def test_deep_blocks(self):
        source = "fn main() { " + "if a { " * 150 + "}" * 150 + " after(); }"
        program, errors = parse_source(source)
        assert len(errors) == 1
        assert "nested too deeply" in errors[0].message
        assert program.items[0].body[-1].expression.callee.name == "after"

    def test_deep_modules(self):
        source = "mod m { " * 150 + "}" * 150 + " fn ok() {}"
        program, errors = parse_source(source)
        assert len(errors) == 1
        assert errors[0].message == "module nested too deeply"
        assert program.items[-1].name == "ok"

    def test_nesting_just_below_limit(self):
        """Nesting right below the limit still parses."""
        expr = "(" * (MAX_NESTING - 5) + "1" + ")" * (MAX_NESTING - 5)
        _, errors = parse_source(f"fn main() {{ {expr}; }}")
        assert errors == []


class TestErrorHelpers:
    """Tests for diagnostic formatting helpers."""

    def test_format_expected(self):
        assert format_expected(["'a'"]) == "'a'"
        assert format_expected(["'a'", "'b'", "'c'"]) == "'a', 'b' or 'c'"
        assert format_expected([]) == "something else"

    def test_get_line_context(self):
        source = "line one\nline two  \nline three"
        assert get_line_context(source, 2) == "line two"
        assert get_line_context(source, 10) is None
        assert get_line_context(None, 1) is None

    def test_not_equal_hint(self):
        _, errors = parse_source("fn f() { if a != b { } }")
        assert errors[0].suggestion.startswith("'!=' is not an operator")

    def test_error_without_span(self):
        error = ParseError("something broke")
        assert error.line is None
        assert error.offset == 0
        assert str(error) == "error: something broke"
