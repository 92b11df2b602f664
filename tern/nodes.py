"""
Tern AST node models.

Every node is a frozen pydantic model with a ``kind`` tag and a ``span``.
``Item``, ``Statement`` and ``Expression`` are closed unions discriminated
on ``kind``; traversal code dispatches on the tag (see tern.visitor).
Children are stored in tuples so a parsed tree is immutable.
"""
from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from tern.tokens import Span


class Node(BaseModel):
    """Base class of every AST node."""
    model_config = ConfigDict(frozen=True)

    span: Span


class ErrorNode(Node):
    """Placeholder for input discarded during error recovery."""
    kind: Literal['error'] = 'error'
    message: str


# ---------------------------------------------------------------------------
# Paths and types
# ---------------------------------------------------------------------------

class Path(Node):
    """``IDENT (:: IDENT)*``; never resolved by the front end."""
    kind: Literal['path'] = 'path'
    segments: Tuple[str, ...]

    @property
    def name(self) -> str:
        return '::'.join(self.segments)

    @property
    def is_simple(self) -> bool:
        return len(self.segments) == 1


class TypeRef(Node):
    """A type position: ``PATH``, ``&PATH``, ``[PATH]`` or ``&[PATH]``."""
    kind: Literal['type'] = 'type'
    path: Path
    reference: bool = False
    array: bool = False

    def __str__(self):
        text = f"[{self.path.name}]" if self.array else self.path.name
        return f"&{text}" if self.reference else text


class Import(Node):
    kind: Literal['import'] = 'import'
    path: Path


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

class IntegerLiteral(Node):
    kind: Literal['integer'] = 'integer'
    value: int


class FloatLiteral(Node):
    kind: Literal['float'] = 'float'
    value: float


class BoolLiteral(Node):
    kind: Literal['bool'] = 'bool'
    value: bool


class StringLiteral(Node):
    kind: Literal['string'] = 'string'
    value: str


class CharLiteral(Node):
    kind: Literal['char'] = 'char'
    value: str


class ArrayLiteral(Node):
    kind: Literal['array'] = 'array'
    elements: Tuple[Expression, ...] = ()


class Binary(Node):
    kind: Literal['binary'] = 'binary'
    op: str
    left: Expression
    right: Expression


class Unary(Node):
    """Prefix operator; ``op == '&'`` takes a reference."""
    kind: Literal['unary'] = 'unary'
    op: str
    operand: Expression

    @property
    def is_reference(self) -> bool:
        return self.op == '&'


class Assign(Node):
    kind: Literal['assign'] = 'assign'
    op: str
    target: Expression
    value: Expression


class Call(Node):
    kind: Literal['call'] = 'call'
    callee: Expression
    args: Tuple[Expression, ...] = ()

    @property
    def is_path_qualified(self) -> bool:
        """True for ``Enum::Variant(...)`` style construction."""
        return isinstance(self.callee, Path) and not self.callee.is_simple


class Index(Node):
    kind: Literal['index'] = 'index'
    base: Expression
    index: Expression


class FieldAccess(Node):
    kind: Literal['field_access'] = 'field_access'
    base: Expression
    name: str


class FieldInit(Node):
    kind: Literal['field_init'] = 'field_init'
    name: str
    value: Expression


class StructLiteral(Node):
    kind: Literal['struct_literal'] = 'struct_literal'
    path: Path
    fields: Tuple[FieldInit, ...] = ()


class Grouped(Node):
    kind: Literal['grouped'] = 'grouped'
    expression: Expression


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

class Binding(Node):
    kind: Literal['binding'] = 'binding'
    name: str
    type_ref: Optional[TypeRef] = None
    value: Expression


class ExpressionStatement(Node):
    kind: Literal['expression_statement'] = 'expression_statement'
    expression: Expression


class If(Node):
    kind: Literal['if'] = 'if'
    condition: Expression
    then_body: Tuple[Statement, ...] = ()
    else_body: Optional[Tuple[Statement, ...]] = None


class While(Node):
    kind: Literal['while'] = 'while'
    condition: Expression
    body: Tuple[Statement, ...] = ()


class For(Node):
    kind: Literal['for'] = 'for'
    variable: str
    iterable: Expression
    body: Tuple[Statement, ...] = ()


class Return(Node):
    kind: Literal['return'] = 'return'
    value: Optional[Expression] = None


class Break(Node):
    kind: Literal['break'] = 'break'


class Continue(Node):
    kind: Literal['continue'] = 'continue'


class Print(Node):
    kind: Literal['print'] = 'print'
    args: Tuple[Expression, ...] = ()


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class Param(Node):
    kind: Literal['param'] = 'param'
    name: str
    type_ref: TypeRef


class FieldDecl(Node):
    kind: Literal['field_decl'] = 'field_decl'
    name: str
    type_ref: TypeRef


class Variant(Node):
    kind: Literal['variant'] = 'variant'
    name: str
    payload: Optional[TypeRef] = None


class Function(Node):
    kind: Literal['function'] = 'function'
    name: str
    params: Tuple[Param, ...] = ()
    return_type: Optional[TypeRef] = None
    body: Tuple[Statement, ...] = ()


class Struct(Node):
    kind: Literal['struct'] = 'struct'
    name: str
    fields: Tuple[FieldDecl, ...] = ()


class Constant(Node):
    kind: Literal['constant'] = 'constant'
    name: str
    type_ref: TypeRef
    value: Expression


class Enum(Node):
    kind: Literal['enum'] = 'enum'
    name: str
    variants: Tuple[Variant, ...] = ()


class Module(Node):
    kind: Literal['module'] = 'module'
    name: str
    program: Program


class Program(Node):
    kind: Literal['program'] = 'program'
    imports: Tuple[Import, ...] = ()
    items: Tuple[Item, ...] = ()


Expression = Annotated[
    Union[
        IntegerLiteral, FloatLiteral, BoolLiteral, StringLiteral, CharLiteral,
        ArrayLiteral, Path, Binary, Unary, Assign, Call, Index, FieldAccess,
        StructLiteral, Grouped, ErrorNode,
    ],
    Field(discriminator='kind'),
]

Statement = Annotated[
    Union[
        Binding, ExpressionStatement, If, While, For, Return, Break, Continue,
        Print, ErrorNode,
    ],
    Field(discriminator='kind'),
]

Item = Annotated[
    Union[Function, Struct, Module, Constant, Enum, ErrorNode],
    Field(discriminator='kind'),
]

# Expressions that may appear on the left of an assignment operator.
ASSIGNABLE = (Index, FieldAccess)

for _model in (
    ArrayLiteral, Binary, Unary, Assign, Call, Index, FieldAccess, FieldInit,
    StructLiteral, Grouped, Binding, ExpressionStatement, If, While, For,
    Return, Print, Constant, Function, Module, Program,
):
    _model.model_rebuild()
del _model
