"""
Tern Parser - recursive descent from tokens to the AST.

One method per grammar rule, one token of lookahead to choose between
alternatives (two more only to tell a struct literal from a block).
Expressions use precedence climbing over ``BINARY_PRECEDENCE``.

Syntax errors are raised as ``TernSyntaxError`` and caught by the nearest
statement or item loop, which records the diagnostic, skips to the next
``;`` or closing ``}`` and leaves an ``ErrorNode`` in the tree. The public
``parse()`` therefore always returns a program plus every diagnostic.
"""
from collections import deque
from contextlib import contextmanager

from tern import nodes
from tern.errors import LexicalError, StructuralError, TernSyntaxError
from tern.lexer import tokenize
from tern.tokens import ITEM_KEYWORDS, Span, Token, TokenKind


ASSIGNMENT_OPERATORS = frozenset({'=', '+=', '-=', '*=', '/='})

UNARY_OPERATORS = frozenset({'-', '!', '~', '&'})

# Binding power of infix operators, loosest first. All are left-associative.
BINARY_PRECEDENCE = {
    '||': 1,
    '&&': 2,
    '|': 3, '^': 3, '&': 3,
    '==': 4,
    '<': 5, '>': 5, '<=': 5, '>=': 5,
    '+': 6, '-': 6,
    '*': 7, '/': 7, '%': 7,
}

# Deepest nesting of expressions, blocks and modules; deeper input is a
# syntax error instead of exhausting the interpreter stack.
MAX_NESTING = 100

STATEMENT_KEYWORDS = frozenset({
    'let', 'if', 'while', 'for', 'return', 'break', 'continue', 'print',
})

# Keywords at which item-level recovery may resume.
DECLARATION_KEYWORDS = ITEM_KEYWORDS | {'import'}

_ZERO_SPAN = Span(line=1, column=1, offset=0, end_line=1, end_column=1, end_offset=0)


def _quoted(*symbols):
    return tuple(f"'{s}'" for s in symbols)


class Parser:
    """
    Parser state for one token stream.

    Instances are single-use: all state (cursor, loop depth, diagnostics)
    lives on the instance, so separate parsers never interfere.
    """

    def __init__(self, tokens):
        self._tokens = iter(tokens)
        self._lookahead = deque()
        self._eof = None
        self._previous = None
        self._consumed = 0
        self._brace_depth = 0
        self._loop_depth = 0
        self._nesting = 0
        self.errors = []

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self):
        """Parse a whole program; returns ``(Program, errors)`` sorted by position."""
        start = self._current.span
        imports, items = self._parse_declarations(inside_module=False)
        program = nodes.Program(
            span=self._span_from(start),
            imports=tuple(imports),
            items=tuple(items),
        )
        self.errors.sort(key=lambda e: e.offset)
        return program, list(self.errors)

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def _fill(self, offset):
        while len(self._lookahead) <= offset:
            if self._eof is not None:
                self._lookahead.append(self._eof)
                continue
            tok = next(self._tokens, None)
            if tok is None:
                # Token sources that omit EOF still terminate cleanly.
                end = self._lookahead[-1].span if self._lookahead else (
                    self._previous.span if self._previous else _ZERO_SPAN)
                tok = Token(kind=TokenKind.EOF, text='', span=Span(
                    line=end.end_line, column=end.end_column, offset=end.end_offset,
                    end_line=end.end_line, end_column=end.end_column, end_offset=end.end_offset))
            if tok.kind is TokenKind.ERROR:
                self._report(LexicalError.from_token(tok))
                continue
            if tok.kind is TokenKind.EOF:
                self._eof = tok
            self._lookahead.append(tok)

    def _peek(self, offset=0):
        self._fill(offset)
        return self._lookahead[offset]

    @property
    def _current(self):
        return self._peek()

    def _at_end(self):
        return self._current.kind is TokenKind.EOF

    def _advance(self):
        tok = self._peek()
        if tok.kind is not TokenKind.EOF:
            self._lookahead.popleft()
            self._consumed += 1
            if tok.is_symbol('{'):
                self._brace_depth += 1
            elif tok.is_symbol('}'):
                self._brace_depth -= 1
        self._previous = tok
        return tok

    def _check(self, *symbols):
        return self._current.is_symbol(*symbols)

    def _check_keyword(self, *keywords):
        return self._current.is_keyword(*keywords)

    def _match(self, *symbols):
        if self._check(*symbols):
            return self._advance()
        return None

    def _match_keyword(self, keyword):
        if self._check_keyword(keyword):
            return self._advance()
        return None

    def _expect(self, symbol):
        tok = self._match(symbol)
        if tok is None:
            raise self._unexpected(f"'{symbol}'")
        return tok

    def _expect_keyword(self, keyword):
        tok = self._match_keyword(keyword)
        if tok is None:
            raise self._unexpected(f"'{keyword}'")
        return tok

    def _expect_identifier(self):
        if self._current.kind is TokenKind.IDENTIFIER:
            return self._advance()
        raise self._unexpected("identifier")

    def _unexpected(self, *expected):
        return TernSyntaxError(expected=expected, found=self._current)

    def _report(self, error):
        self.errors.append(error)

    def _span_from(self, start):
        """Span from ``start`` to the end of the last consumed token."""
        prev = self._previous
        if prev is None or prev.span.end_offset < start.offset:
            return start
        return start.to(prev.span)

    @contextmanager
    def _nested(self, what):
        """Count one level of recursive descent; fail past ``MAX_NESTING``."""
        if self._nesting >= MAX_NESTING:
            raise TernSyntaxError(
                f"{what} nested too deeply",
                found=self._current,
                suggestion=f"Split the {what} up; at most {MAX_NESTING} levels are allowed",
            )
        self._nesting += 1
        try:
            yield
        finally:
            self._nesting -= 1

    # ------------------------------------------------------------------
    # Error recovery
    # ------------------------------------------------------------------

    def _synchronize(self, start_count, base_depth, item_level=False):
        """
        Skip tokens after a syntax error.

        ``base_depth`` is the brace depth where the failed statement or item
        began. Skipping stops after a ``;`` at that depth, after a ``}`` that
        brings the depth back to it, or before a ``}`` that would close the
        enclosing block. Once at least one token has been consumed it also
        stops before a keyword that starts a new statement (or item) at that
        depth. Always makes progress unless the input is exhausted.
        """
        resume_at = DECLARATION_KEYWORDS if item_level else STATEMENT_KEYWORDS
        while not self._at_end():
            tok = self._current
            at_base = self._brace_depth == base_depth
            if tok.is_symbol('}') and self._brace_depth <= base_depth:
                break
            if at_base and self._consumed > start_count and tok.is_keyword(*resume_at):
                break
            self._advance()
            if at_base and tok.is_symbol(';'):
                return
            if tok.is_symbol('}') and self._brace_depth == base_depth:
                self._match(';')
                return
        if self._consumed == start_count and not self._at_end():
            self._advance()

    # ------------------------------------------------------------------
    # Programs and items
    # ------------------------------------------------------------------

    def _parse_declarations(self, inside_module):
        """PROGRAM := (IMPORT | ITEM)*, ending at EOF or at a module's '}'."""
        imports, items = [], []
        while not self._at_end():
            if inside_module and self._check('}'):
                break
            start = self._current
            start_count, base_depth = self._consumed, self._brace_depth
            try:
                if start.is_keyword('import'):
                    imports.append(self._parse_import())
                else:
                    items.append(self._parse_item())
            except TernSyntaxError as e:
                self._report(e)
                self._synchronize(start_count, base_depth, item_level=True)
                items.append(nodes.ErrorNode(span=self._span_from(start.span), message=e.message))
        return imports, items

    def _parse_import(self):
        """IMPORT := import IDENT ((:: | .) IDENT)* ;"""
        start = self._expect_keyword('import')
        first = self._expect_identifier()
        segments = [first.text]
        while self._match('::', '.'):
            segments.append(self._expect_identifier().text)
        path = nodes.Path(span=self._span_from(first.span), segments=tuple(segments))
        self._expect(';')
        return nodes.Import(span=self._span_from(start.span), path=path)

    def _parse_item(self):
        tok = self._current
        if tok.is_keyword('fn'):
            return self._parse_function()
        if tok.is_keyword('struct'):
            return self._parse_struct()
        if tok.is_keyword('mod'):
            return self._parse_module()
        if tok.is_keyword('const'):
            return self._parse_constant()
        if tok.is_keyword('enum'):
            return self._parse_enum()
        raise self._unexpected(*_quoted('fn', 'struct', 'mod', 'const', 'enum', 'import'))

    def _parse_function(self):
        """FUNCTION := fn IDENT ( PARAMS ) (-> TYPE)? BLOCK"""
        start = self._expect_keyword('fn')
        name = self._expect_identifier()
        self._expect('(')
        params = self._parse_delimited(')', self._parse_param)
        self._check_unique(params, "parameter")
        return_type = None
        if self._match('->'):
            return_type = self._parse_type()
        body = self._parse_block()
        return nodes.Function(
            span=self._span_from(start.span),
            name=name.text,
            params=tuple(params),
            return_type=return_type,
            body=body,
        )

    def _parse_param(self):
        name = self._expect_identifier()
        self._expect(':')
        type_ref = self._parse_type()
        return nodes.Param(span=self._span_from(name.span), name=name.text, type_ref=type_ref)

    def _parse_struct(self):
        """STRUCT := struct IDENT { (IDENT : TYPE),* }"""
        start = self._expect_keyword('struct')
        name = self._expect_identifier()
        self._expect('{')
        fields = self._parse_delimited('}', self._parse_field_decl)
        self._check_unique(fields, "field", owner=f"struct '{name.text}'")
        return nodes.Struct(span=self._span_from(start.span), name=name.text, fields=tuple(fields))

    def _parse_field_decl(self):
        name = self._expect_identifier()
        self._expect(':')
        type_ref = self._parse_type()
        return nodes.FieldDecl(span=self._span_from(name.span), name=name.text, type_ref=type_ref)

    def _parse_module(self):
        """MODULE := mod IDENT { PROGRAM }"""
        start = self._expect_keyword('mod')
        name = self._expect_identifier()
        open_brace = self._expect('{')
        with self._nested("module"):
            imports, items = self._parse_declarations(inside_module=True)
        self._close_brace()
        program = nodes.Program(
            span=self._span_from(open_brace.span),
            imports=tuple(imports),
            items=tuple(items),
        )
        return nodes.Module(span=self._span_from(start.span), name=name.text, program=program)

    def _parse_constant(self):
        """CONSTANT := const IDENT : TYPE = EXPR ;"""
        start = self._expect_keyword('const')
        name = self._expect_identifier()
        self._expect(':')
        type_ref = self._parse_type()
        self._expect('=')
        value = self.parse_expression()
        self._expect(';')
        return nodes.Constant(
            span=self._span_from(start.span),
            name=name.text,
            type_ref=type_ref,
            value=value,
        )

    def _parse_enum(self):
        """ENUM := enum IDENT { VARIANT (, VARIANT)* ,? }"""
        start = self._expect_keyword('enum')
        name = self._expect_identifier()
        self._expect('{')
        variants = self._parse_delimited('}', self._parse_variant)
        span = self._span_from(start.span)
        if not variants:
            self._report(StructuralError(
                f"enum '{name.text}' must declare at least one variant",
                span=span,
                suggestion="Add a variant, e.g. 'enum Name { Variant }'",
            ))
        self._check_unique(variants, "variant", owner=f"enum '{name.text}'")
        return nodes.Enum(span=span, name=name.text, variants=tuple(variants))

    def _parse_variant(self):
        """VARIANT := IDENT ( ( TYPE ) )?"""
        name = self._expect_identifier()
        payload = None
        if self._match('('):
            payload = self._parse_type()
            self._expect(')')
        return nodes.Variant(span=self._span_from(name.span), name=name.text, payload=payload)

    def _check_unique(self, members, what, owner=None):
        seen = set()
        for member in members:
            if member.name in seen:
                where = f" in {owner}" if owner else ""
                self._report(StructuralError(
                    f"duplicate {what} '{member.name}'{where}",
                    span=member.span,
                ))
            seen.add(member.name)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _parse_type(self):
        """TYPE := &? ( PATH | [ PATH ] )"""
        start = self._current
        reference = self._match('&') is not None
        array = self._match('[') is not None
        path = self._parse_type_path()
        if array:
            self._expect(']')
        return nodes.TypeRef(
            span=self._span_from(start.span),
            path=path,
            reference=reference,
            array=array,
        )

    def _parse_type_path(self):
        if self._current.kind is not TokenKind.IDENTIFIER:
            raise self._unexpected("type")
        first = self._advance()
        segments = [first.text]
        while self._match('::'):
            segments.append(self._expect_identifier().text)
        return nodes.Path(span=self._span_from(first.span), segments=tuple(segments))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_block(self):
        """BLOCK := { STATEMENT* }"""
        self._expect('{')
        statements = []
        with self._nested("block"):
            while not self._check('}') and not self._at_end():
                statements.append(self._parse_statement_or_recover())
        self._close_brace()
        return tuple(statements)

    def _close_brace(self):
        # Only reachable at '}' or EOF; a missing brace at EOF is reported
        # without discarding what the block already holds.
        if not self._match('}'):
            self._report(self._unexpected("'}'"))

    def _parse_loop_body(self):
        self._loop_depth += 1
        try:
            return self._parse_block()
        finally:
            self._loop_depth -= 1

    def _parse_statement_or_recover(self):
        start = self._current
        start_count, base_depth = self._consumed, self._brace_depth
        try:
            return self._parse_statement()
        except TernSyntaxError as e:
            self._report(e)
            self._synchronize(start_count, base_depth)
            return nodes.ErrorNode(span=self._span_from(start.span), message=e.message)

    def _parse_statement(self):
        tok = self._current
        if tok.kind is TokenKind.KEYWORD:
            if tok.text == 'let':
                return self._parse_binding()
            if tok.text == 'if':
                return self._parse_if()
            if tok.text == 'while':
                return self._parse_while()
            if tok.text == 'for':
                return self._parse_for()
            if tok.text == 'return':
                return self._parse_return()
            if tok.text in ('break', 'continue'):
                return self._parse_loop_jump()
            if tok.text == 'print':
                return self._parse_print()
            raise self._unexpected("statement")
        expression = self.parse_expression()
        self._expect(';')
        return nodes.ExpressionStatement(span=self._span_from(tok.span), expression=expression)

    def _parse_binding(self):
        """BINDING := let IDENT (: TYPE)? = EXPR ;"""
        start = self._expect_keyword('let')
        name = self._expect_identifier()
        type_ref = None
        if self._match(':'):
            type_ref = self._parse_type()
        elif not self._check('='):
            raise self._unexpected("':'", "'='")
        self._expect('=')
        value = self.parse_expression()
        self._expect(';')
        return nodes.Binding(
            span=self._span_from(start.span),
            name=name.text,
            type_ref=type_ref,
            value=value,
        )

    def _parse_if(self):
        """IF := if EXPR BLOCK (else (BLOCK | IF))?"""
        start = self._expect_keyword('if')
        condition = self.parse_expression(allow_struct=False)
        then_body = self._parse_block()
        else_body = None
        if self._match_keyword('else'):
            if self._check_keyword('if'):
                with self._nested("'else if' chain"):
                    else_body = (self._parse_if(),)
            else:
                else_body = self._parse_block()
        return nodes.If(
            span=self._span_from(start.span),
            condition=condition,
            then_body=then_body,
            else_body=else_body,
        )

    def _parse_while(self):
        start = self._expect_keyword('while')
        condition = self.parse_expression(allow_struct=False)
        body = self._parse_loop_body()
        return nodes.While(span=self._span_from(start.span), condition=condition, body=body)

    def _parse_for(self):
        """FOR := for IDENT in EXPR BLOCK"""
        start = self._expect_keyword('for')
        variable = self._expect_identifier()
        if not self._match_keyword('in'):
            raise StructuralError(
                "'for' loop requires 'in' before the iterable",
                expected=("'in'",),
                found=self._current,
            )
        iterable = self.parse_expression(allow_struct=False)
        body = self._parse_loop_body()
        return nodes.For(
            span=self._span_from(start.span),
            variable=variable.text,
            iterable=iterable,
            body=body,
        )

    def _parse_return(self):
        start = self._expect_keyword('return')
        value = None
        if not self._check(';'):
            value = self.parse_expression()
        self._expect(';')
        return nodes.Return(span=self._span_from(start.span), value=value)

    def _parse_loop_jump(self):
        tok = self._advance()
        if self._loop_depth == 0:
            self._report(StructuralError(
                f"'{tok.text}' outside of a loop",
                span=tok.span,
                suggestion=f"'{tok.text}' can only be used inside a 'while' or 'for' loop",
            ))
        self._expect(';')
        span = self._span_from(tok.span)
        if tok.text == 'break':
            return nodes.Break(span=span)
        return nodes.Continue(span=span)

    def _parse_print(self):
        """PRINT := print ( EXPR,* ) ;"""
        start = self._expect_keyword('print')
        self._expect('(')
        args = self._parse_delimited(')', self.parse_expression)
        self._expect(';')
        return nodes.Print(span=self._span_from(start.span), args=tuple(args))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, allow_struct=True):
        """
        Parse one expression.

        With ``allow_struct=False`` (conditions and loop heads) a ``{`` after
        a path is left for the caller as the start of a block. Parentheses,
        brackets and argument lists turn struct literals back on.
        """
        with self._nested("expression"):
            return self._parse_assignment(allow_struct)

    def _parse_assignment(self, allow_struct):
        target = self._parse_binary(1, allow_struct)
        tok = self._current
        if tok.kind is not TokenKind.SYMBOL or tok.text not in ASSIGNMENT_OPERATORS:
            return target
        self._advance()
        value = self.parse_expression(allow_struct)
        if not self._is_assignable(target):
            self._report(TernSyntaxError(
                f"invalid assignment target for '{tok.text}'",
                span=target.span,
                expected=("identifier", "index expression", "field access"),
                suggestion="Only variables, indexed elements and fields can be assigned to",
            ))
        return nodes.Assign(span=target.span.to(value.span), op=tok.text, target=target, value=value)

    @staticmethod
    def _is_assignable(expr):
        if isinstance(expr, nodes.Path):
            return expr.is_simple
        return isinstance(expr, nodes.ASSIGNABLE)

    def _parse_binary(self, min_precedence, allow_struct):
        left = self._parse_unary(allow_struct)
        while True:
            tok = self._current
            precedence = BINARY_PRECEDENCE.get(tok.text) if tok.kind is TokenKind.SYMBOL else None
            if precedence is None or precedence < min_precedence:
                return left
            self._advance()
            right = self._parse_binary(precedence + 1, allow_struct)
            left = nodes.Binary(span=left.span.to(right.span), op=tok.text, left=left, right=right)

    def _parse_unary(self, allow_struct):
        tok = self._current
        if tok.is_symbol('&&'):
            # '&&x' in prefix position is a reference to a reference.
            self._advance()
            with self._nested("expression"):
                operand = self._parse_unary(allow_struct)
            inner = nodes.Unary(span=tok.span.to(operand.span), op='&', operand=operand)
            return nodes.Unary(span=inner.span, op='&', operand=inner)
        if tok.kind is TokenKind.SYMBOL and tok.text in UNARY_OPERATORS:
            self._advance()
            with self._nested("expression"):
                operand = self._parse_unary(allow_struct)
            return nodes.Unary(span=tok.span.to(operand.span), op=tok.text, operand=operand)
        return self._parse_postfix(allow_struct)

    def _parse_postfix(self, allow_struct):
        expr = self._parse_primary()
        while True:
            tok = self._current
            if tok.is_symbol('('):
                self._advance()
                args = self._parse_delimited(')', self.parse_expression)
                expr = nodes.Call(span=self._span_from(expr.span), callee=expr, args=tuple(args))
            elif tok.is_symbol('['):
                self._advance()
                index = self.parse_expression()
                self._expect(']')
                expr = nodes.Index(span=self._span_from(expr.span), base=expr, index=index)
            elif tok.is_symbol('.'):
                self._advance()
                name = self._expect_identifier()
                expr = nodes.FieldAccess(span=self._span_from(expr.span), base=expr, name=name.text)
            elif tok.is_symbol('::'):
                if not isinstance(expr, nodes.Path):
                    raise TernSyntaxError(
                        "'::' can only follow a path",
                        found=tok,
                        suggestion="Paths are written 'module::Name'",
                    )
                self._advance()
                segment = self._expect_identifier()
                expr = nodes.Path(span=self._span_from(expr.span), segments=expr.segments + (segment.text,))
            elif (tok.is_symbol('{') and allow_struct
                  and isinstance(expr, nodes.Path) and self._at_struct_body()):
                expr = self._parse_struct_literal(expr)
            else:
                return expr

    def _at_struct_body(self):
        """Current token is '{'; look past it for '}' or 'IDENT :'."""
        nxt = self._peek(1)
        if nxt.is_symbol('}'):
            return True
        return nxt.kind is TokenKind.IDENTIFIER and self._peek(2).is_symbol(':')

    def _parse_struct_literal(self, path):
        """STRUCT_LITERAL := PATH { (IDENT : EXPR),* }"""
        self._expect('{')
        fields = self._parse_delimited('}', self._parse_field_init)
        return nodes.StructLiteral(span=self._span_from(path.span), path=path, fields=tuple(fields))

    def _parse_field_init(self):
        name = self._expect_identifier()
        self._expect(':')
        value = self.parse_expression()
        return nodes.FieldInit(span=self._span_from(name.span), name=name.text, value=value)

    def _parse_primary(self):
        tok = self._current
        kind = tok.kind
        if kind is TokenKind.INTEGER:
            self._advance()
            return nodes.IntegerLiteral(span=tok.span, value=tok.value)
        if kind is TokenKind.FLOAT:
            self._advance()
            return nodes.FloatLiteral(span=tok.span, value=tok.value)
        if kind is TokenKind.STRING:
            self._advance()
            return nodes.StringLiteral(span=tok.span, value=tok.value)
        if kind is TokenKind.CHAR:
            self._advance()
            return nodes.CharLiteral(span=tok.span, value=tok.value)
        if kind is TokenKind.IDENTIFIER:
            self._advance()
            if tok.text in ('true', 'false'):
                return nodes.BoolLiteral(span=tok.span, value=tok.text == 'true')
            return nodes.Path(span=tok.span, segments=(tok.text,))
        if tok.is_symbol('('):
            self._advance()
            inner = self.parse_expression()
            self._expect(')')
            return nodes.Grouped(span=self._span_from(tok.span), expression=inner)
        if tok.is_symbol('['):
            self._advance()
            elements = self._parse_delimited(']', self.parse_expression)
            return nodes.ArrayLiteral(span=self._span_from(tok.span), elements=tuple(elements))
        raise self._unexpected("expression")

    def _parse_delimited(self, closing, parse_element):
        """Parse ``element (, element)* ,?`` up to and including ``closing``."""
        elements = []
        while not self._check(closing):
            elements.append(parse_element())
            if not self._match(','):
                break
        if not self._match(closing):
            raise self._unexpected("','", f"'{closing}'")
        return elements


def parse(tokens):
    """
    Parse a token sequence into ``(Program, errors)``.

    Never raises for bad input: syntax and lexical problems are returned as
    ``ParseError`` instances ordered by source position.
    """
    return Parser(tokens).parse()


def parse_source(source):
    """Tokenize and parse a source string."""
    return parse(tokenize(source))
