"""Binding of the instrumentation callee at the top of a file.

Before adding an import the top-level statement list is scanned for an
existing ES import or CommonJS ``require`` that already binds the callee,
and for a declaration of the same name that an import would collide with.
"""

import logging
from dataclasses import dataclass

from jinja2 import StrictUndefined, Template
from tree_sitter import Node

from tracewrap.codemod.nodes import TransformOptions
from tracewrap.codemod.rewriter import quote_js_string
from tracewrap.exceptions import ImportConflictError
from tracewrap.syntax.provider import Edit, Span, SyntaxTree

logger = logging.getLogger("tracewrap.codemod")

ESM_IMPORT_TEMPLATE = Template("import { {{ callee }} } from {{ source }};", undefined=StrictUndefined)
CJS_REQUIRE_TEMPLATE = Template("const { {{ callee }} } = require({{ source }});", undefined=StrictUndefined)


@dataclass(frozen=True)
class Binding:
    source: str | None
    """Module the callee comes from; None when the file declares it itself."""
    named: bool
    """True for ``{ callee }`` style bindings, False for default, namespace or whole-module ones."""


LOCAL_DECLARATION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_signature",
        "class_declaration",
        "abstract_class_declaration",
        "enum_declaration",
    }
)


def _is_type_only(node: Node) -> bool:
    """True for ``import type ...`` statements and ``{ type x }`` specifiers."""
    return any(not c.is_named and c.type in ("type", "typeof") for c in node.children)


def _string_value(tree: SyntaxTree, node: Node | None) -> str | None:
    if node is None or node.type != "string":
        return None
    fragments = [c for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(tree.text(f) for f in fragments)
    return tree.text(node)[1:-1]


def _require_source(tree: SyntaxTree, node: Node | None) -> str | None:
    """Module name of a ``require('<module>')`` call, else None."""
    if node is None or node.type != "call_expression":
        return None
    function = node.child_by_field_name("function")
    if function is None or function.type != "identifier" or tree.text(function) != "require":
        return None
    arguments = node.child_by_field_name("arguments")
    values = [c for c in arguments.named_children if c.type != "comment"] if arguments is not None else []
    return _string_value(tree, values[0]) if len(values) == 1 else None


def _import_binding(tree: SyntaxTree, statement: Node, callee: str) -> Binding | None:
    source = _string_value(tree, statement.child_by_field_name("source"))
    if source is None or _is_type_only(statement):
        return None
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for part in clause.named_children:
            if part.type == "identifier" and tree.text(part) == callee:
                return Binding(source, named=False)
            if part.type == "namespace_import" and any(tree.text(c) == callee for c in part.named_children):
                return Binding(source, named=False)
            if part.type == "named_imports":
                for specifier in part.named_children:
                    if specifier.type != "import_specifier" or _is_type_only(specifier):
                        continue
                    local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    if local is not None and tree.text(local) == callee:
                        return Binding(source, named=True)
    return None


def _pattern_binds(tree: SyntaxTree, pattern: Node, callee: str) -> bool:
    for prop in pattern.named_children:
        if prop.type == "shorthand_property_identifier_pattern" and tree.text(prop) == callee:
            return True
        if prop.type == "pair_pattern":
            value = prop.child_by_field_name("value")
            if value is not None and value.type == "identifier" and tree.text(value) == callee:
                return True
    return False


def _variable_binding(tree: SyntaxTree, statement: Node, callee: str) -> Binding | None:
    """Binding made by a ``const``/``let``/``var``: a require, or a plain local."""
    for declarator in statement.named_children:
        if declarator.type != "variable_declarator":
            continue
        pattern = declarator.child_by_field_name("name")
        if pattern is None:
            continue
        source = _require_source(tree, declarator.child_by_field_name("value"))
        if pattern.type == "identifier" and tree.text(pattern) == callee:
            return Binding(source, named=False)
        if pattern.type == "object_pattern" and _pattern_binds(tree, pattern, callee):
            return Binding(source, named=True)
    return None


def _declared_binding(tree: SyntaxTree, statement: Node, callee: str) -> Binding | None:
    if statement.type == "export_statement":
        statement = statement.child_by_field_name("declaration")
        if statement is None:
            return None
    if statement.type in ("lexical_declaration", "variable_declaration"):
        return _variable_binding(tree, statement, callee)
    if statement.type in LOCAL_DECLARATION_TYPES:
        name = statement.child_by_field_name("name")
        if name is not None and tree.text(name) == callee:
            return Binding(None, named=False)
    return None


def find_callee_binding(tree: SyntaxTree, callee: str) -> Binding | None:
    """First top-level import, require or declaration that binds `callee`.

    Type-only imports bind no value and are ignored.
    """
    for statement in tree.root.named_children:
        if statement.type == "import_statement":
            binding = _import_binding(tree, statement, callee)
        else:
            binding = _declared_binding(tree, statement, callee)
        if binding is not None:
            return binding
    return None


def _uses_commonjs(tree: SyntaxTree, node: Node) -> bool:
    if node.type == "call_expression" and _require_source(tree, node) is not None:
        return True
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and prop is not None and tree.text(obj) == "module" and tree.text(prop) == "exports":
            return True
    return any(_uses_commonjs(tree, child) for child in node.named_children)


def module_style(tree: SyntaxTree, requested: str = "auto") -> str:
    """'esm' or 'cjs': how the callee should be bound in this file."""
    if requested != "auto":
        return requested
    if tree.file_path.endswith(".cjs"):
        return "cjs"
    if any(child.type in ("import_statement", "export_statement") for child in tree.root.named_children):
        return "esm"
    return "cjs" if _uses_commonjs(tree, tree.root) else "esm"


def prologue_end(tree: SyntaxTree) -> int:
    """Byte offset after a leading ``#!`` line and directive prologue, or 0."""
    offset = 0
    for child in tree.root.named_children:
        if child.type == "hash_bang_line":
            offset = child.end_byte
        elif child.type == "comment":
            continue
        elif child.type == "expression_statement" and [c.type for c in child.named_children] == ["string"]:
            offset = child.end_byte
        else:
            break
    return offset


def render_binding(options: TransformOptions, style: str) -> str:
    template = CJS_REQUIRE_TEMPLATE if style == "cjs" else ESM_IMPORT_TEMPLATE
    return template.render(callee=options.callee, source=quote_js_string(options.import_source))


def ensure_callee_import(tree: SyntaxTree, options: TransformOptions) -> Edit | None:
    """Edit that binds the callee, or None when the file already binds it.

    Raises ImportConflictError when the callee name is already taken by
    anything other than a named binding from `options.import_source`,
    including a declaration in the file itself.
    """
    binding = find_callee_binding(tree, options.callee)
    if binding is not None:
        if binding.named and binding.source == options.import_source:
            return None
        raise ImportConflictError(tree.file_path, options.callee, binding.source)
    statement = render_binding(options, module_style(tree, options.module_style))
    offset = prologue_end(tree)
    logger.debug("%s: inserting %r at byte %d", tree.file_path, statement, offset)
    if offset == 0:
        return Edit(Span(0, 0), statement + tree.newline)
    return Edit(Span(offset, offset), tree.newline + statement)
