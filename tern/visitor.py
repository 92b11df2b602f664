"""
Tern AST traversal.

``NodeVisitor`` dispatches on a node's ``kind`` tag to a ``visit_<kind>``
method, the same name-based dispatch Lark's Transformer uses for rules.
Nodes without a handler fall back to ``generic_visit``, which visits the
children.
"""
from typing import Iterator

from tern.nodes import Node


def iter_child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct children of ``node`` in field order."""
    for name in type(node).model_fields:
        value = getattr(node, name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first, in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


class NodeVisitor:
    """
    Base class for read-only passes over the AST.

    Subclasses define ``visit_function``, ``visit_binary`` and so on; the
    suffix is the node's ``kind``. A handler that wants the children
    visited calls ``self.generic_visit(node)`` itself.
    """

    def visit(self, node):
        method = getattr(self, f"visit_{node.kind}", self.generic_visit)
        return method(node)

    def generic_visit(self, node):
        for child in iter_child_nodes(node):
            self.visit(child)
        return None
