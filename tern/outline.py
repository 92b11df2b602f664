"""
Tern Outline Extraction - declared item signatures.

This module contains the OutlineExtractor class that walks a parsed Tern
program and collects the signature of every declared item (functions,
structs, enums, constants and nested modules) for documentation and
tooling. Function bodies and initializer expressions are ignored.
"""

from tern.visitor import NodeVisitor


class OutlineExtractor(NodeVisitor):
    """
    Extracts item signatures from a Tern AST.

    ``extract(program)`` returns a list of plain dicts, one per item, in
    source order. Modules carry their own ``imports`` and ``items`` lists.
    """

    def extract(self, program):
        """Return the outline of a Program node."""
        return self.visit(program)

    def visit_program(self, node):
        """Collect items; error placeholders left by recovery are skipped."""
        return [entry for entry in (self.visit(item) for item in node.items) if entry]

    def visit_function(self, node):
        """Extract function name, parameters and return type."""
        return {
            "type": "function",
            "name": node.name,
            "args": [{"name": p.name, "type": str(p.type_ref)} for p in node.params],
            "return": str(node.return_type) if node.return_type else None,
            "line": node.span.line,
        }

    def visit_struct(self, node):
        """Extract struct fields."""
        return {
            "type": "struct",
            "name": node.name,
            "fields": [{"name": f.name, "type": str(f.type_ref)} for f in node.fields],
            "line": node.span.line,
        }

    def visit_enum(self, node):
        """Extract enum variants and their payload types."""
        return {
            "type": "enum",
            "name": node.name,
            "variants": [
                {"name": v.name, "payload": str(v.payload) if v.payload else None}
                for v in node.variants
            ],
            "line": node.span.line,
        }

    def visit_constant(self, node):
        return {
            "type": "constant",
            "name": node.name,
            "value_type": str(node.type_ref),
            "line": node.span.line,
        }

    def visit_module(self, node):
        """Recurse into a nested module."""
        return {
            "type": "module",
            "name": node.name,
            "imports": [imp.path.name for imp in node.program.imports],
            "items": self.visit(node.program),
            "line": node.span.line,
        }

    def visit_error(self, node):
        """Ignore placeholders left by error recovery."""
        return None


def extract_outline(program):
    """Convenience wrapper around OutlineExtractor."""
    return OutlineExtractor().extract(program)
