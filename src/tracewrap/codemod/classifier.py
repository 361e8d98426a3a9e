"""Eligibility classifier.

Walks the top level of a parsed file and turns every function-like
declaration it visits into an `AstNode`, then decides for each one whether
it is a wrap candidate or why it is skipped. Top-level declarations are
visited first in source order, then the members of each class and object
literal, again in source order. Every visited node yields exactly one
outcome.
"""

import logging
from dataclasses import dataclass

from tree_sitter import Node

from tracewrap.codemod.nodes import (
    AstNode,
    Classification,
    ExportKind,
    NodeKind,
    SkipReason,
    SkipRecord,
    TransformOptions,
)
from tracewrap.syntax.provider import Span, SyntaxTree

logger = logging.getLogger("tracewrap.codemod")

FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
# "function" is the pre-0.21 grammar name of function_expression
FUNCTION_EXPRESSION_TYPES = frozenset({"function_expression", "function", "generator_function", "arrow_function"})
GENERATOR_TYPES = frozenset({"generator_function_declaration", "generator_function"})
CLASS_DECLARATION_TYPES = frozenset({"class_declaration", "abstract_class_declaration"})
BODILESS_MEMBER_TYPES = frozenset({"method_signature", "abstract_method_signature"})

ANONYMOUS_DEFAULT = "(default export)"


@dataclass
class _Container:
    """A class or object literal whose members are visited after the top level."""

    node: Node
    name: str | None
    is_class: bool


def _named_children(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def strip_parens(node: Node | None) -> Node | None:
    while node is not None and node.type == "parenthesized_expression":
        inner = _named_children(node)
        node = inner[0] if inner else None
    return node


def _modifiers(node: Node) -> set[str]:
    """Keyword tokens (async, *, static, get, set, ...) before the name or parameters."""
    stop = (
        node.child_by_field_name("name")
        or node.child_by_field_name("parameters")
        or node.child_by_field_name("parameter")
    )
    found = set()
    for child in node.children:
        if stop is not None and child.start_byte >= stop.start_byte:
            break
        if not child.is_named:
            found.update(child.type.split())  # the JS grammar aliases "static get" into one token
    return found


def _property_name(tree: SyntaxTree, name_node: Node | None) -> str | None:
    if name_node is None:
        return None
    text = tree.text(name_node)
    if name_node.type == "string" and len(text) >= 2:
        return text[1:-1]
    return text


def _field_text(tree: SyntaxTree, node: Node, field_name: str) -> str | None:
    child = node.child_by_field_name(field_name)
    return tree.text(child) if child is not None else None


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def is_callee_call(tree: SyntaxTree, node: Node | None, callee: str) -> bool:
    """True for ``callee(..., <function>)``: a traced function at its wrap position."""
    node = strip_parens(node)
    if node is None or node.type != "call_expression":
        return False
    function = node.child_by_field_name("function")
    if function is None or function.type != "identifier" or tree.text(function) != callee:
        return False
    arguments = node.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return False
    values = _named_children(arguments)
    if not values:
        return False
    last = strip_parens(values[-1])
    return last is not None and last.type in FUNCTION_EXPRESSION_TYPES


def is_wrapped_body(tree: SyntaxTree, body: Node, callee: str) -> bool:
    """True for a body reading ``{ return callee('...', () => {...})(); }``."""
    statements = _named_children(body)
    if len(statements) != 1 or statements[0].type != "return_statement":
        return False
    returned = _named_children(statements[0])
    if len(returned) != 1:
        return False
    invocation = strip_parens(returned[0])
    if invocation is None or invocation.type != "call_expression":
        return False
    arguments = invocation.child_by_field_name("arguments")
    if arguments is None or _named_children(arguments):
        return False
    return is_callee_call(tree, invocation.child_by_field_name("function"), callee)


def _unwrap_export(statement: Node) -> tuple[Node | None, ExportKind]:
    if statement.type != "export_statement":
        return statement, ExportKind.NONE
    is_default = any(child.type == "default" for child in statement.children)
    inner = statement.child_by_field_name("declaration") or statement.child_by_field_name("value")
    return inner, ExportKind.DEFAULT if is_default else ExportKind.NAMED


def _function_node(tree: SyntaxTree, statement: Node, inner: Node, export: ExportKind) -> AstNode:
    modifiers = _modifiers(inner)
    if export is ExportKind.DEFAULT:
        kind = NodeKind.DEFAULT_EXPORTED_FUNCTION_DECLARATION
        span = Span.of(statement)
    elif export is ExportKind.NAMED:
        kind = NodeKind.EXPORTED_FUNCTION_DECLARATION
        span = Span.of(inner)
    else:
        kind = NodeKind.FUNCTION_DECLARATION
        span = Span.of(inner)
    return AstNode(
        kind=kind,
        span=span,
        text=tree.text(inner),
        line=_line(statement),
        name=_field_text(tree, inner, "name"),
        export=export,
        is_async="async" in modifiers,
        is_generator=inner.type in GENERATOR_TYPES or "*" in modifiers,
        params=_field_text(tree, inner, "parameters") or _field_text(tree, inner, "parameter"),
        body=_field_text(tree, inner, "body"),
    )


def _const_node(
    tree: SyntaxTree, statement: Node, name: str, value: Node, export: ExportKind, wrapped: bool
) -> AstNode:
    modifiers = _modifiers(value)
    return AstNode(
        kind=NodeKind.CONST_ARROW_OR_FUNCTION_EXPRESSION,
        span=Span.of(value),
        text=tree.text(value),
        line=_line(statement),
        name=name,
        export=export,
        is_async="async" in modifiers,
        is_generator=value.type in GENERATOR_TYPES or "*" in modifiers,
        params=_field_text(tree, value, "parameters") or _field_text(tree, value, "parameter"),
        body=_field_text(tree, value, "body"),
        wrapped=wrapped,
    )


def _member_node(tree: SyntaxTree, member: Node, container: _Container, callee: str) -> AstNode:
    name = _property_name(tree, member.child_by_field_name("name"))
    modifiers = _modifiers(member)
    body = member.child_by_field_name("body")
    if member.type in BODILESS_MEMBER_TYPES or body is None:
        kind = NodeKind.OVERLOAD_SIGNATURE
    elif container.is_class and name == "constructor" and "static" not in modifiers:
        kind = NodeKind.CONSTRUCTOR_METHOD
    elif not container.is_class:
        kind = NodeKind.OBJECT_LITERAL_METHOD
    elif "static" in modifiers:
        kind = NodeKind.CLASS_STATIC_METHOD
    else:
        kind = NodeKind.CLASS_INSTANCE_METHOD
    target = body if body is not None else member
    accessor = "get" if "get" in modifiers else "set" if "set" in modifiers else None
    return AstNode(
        kind=kind,
        span=Span.of(target),
        text=tree.text(target),
        line=_line(member),
        name=name,
        enclosing=container.name,
        is_async="async" in modifiers,
        is_generator="*" in modifiers,
        accessor=accessor,
        params=_field_text(tree, member, "parameters"),
        body=tree.text(body) if body is not None else None,
        indent=tree.indent_of(member),
        wrapped=body is not None and is_wrapped_body(tree, body, callee),
    )


def _visit_top_level(tree: SyntaxTree, callee: str) -> tuple[list[AstNode], list[_Container]]:
    nodes: list[AstNode] = []
    containers: list[_Container] = []
    for statement in tree.root.named_children:
        inner, export = _unwrap_export(statement)
        if inner is None:
            continue
        if inner.type in FUNCTION_DECLARATION_TYPES:
            nodes.append(_function_node(tree, statement, inner, export))
        elif inner.type == "function_signature":
            nodes.append(
                AstNode(
                    kind=NodeKind.OVERLOAD_SIGNATURE,
                    span=Span.of(inner),
                    text=tree.text(inner),
                    line=_line(statement),
                    name=_field_text(tree, inner, "name"),
                    export=export,
                )
            )
        elif export is ExportKind.DEFAULT and inner.type in FUNCTION_EXPRESSION_TYPES:
            nodes.append(_function_node(tree, statement, inner, export))
        elif inner.type in CLASS_DECLARATION_TYPES or (export is ExportKind.DEFAULT and inner.type == "class"):
            containers.append(_Container(inner, _field_text(tree, inner, "name"), is_class=True))
        elif export is ExportKind.DEFAULT and inner.type == "object":
            containers.append(_Container(inner, None, is_class=False))
        elif inner.type == "lexical_declaration" and inner.children and inner.children[0].type == "const":
            for declarator in inner.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name_node is None or name_node.type != "identifier" or value is None:
                    continue
                name = tree.text(name_node)
                if value.type in FUNCTION_EXPRESSION_TYPES:
                    nodes.append(_const_node(tree, statement, name, value, export, wrapped=False))
                elif is_callee_call(tree, value, callee):
                    nodes.append(_const_node(tree, statement, name, value, export, wrapped=True))
                elif value.type == "object":
                    containers.append(_Container(value, name, is_class=False))
                elif value.type == "class":
                    containers.append(_Container(value, name, is_class=True))
    return nodes, containers


def _visit_members(tree: SyntaxTree, container: _Container, callee: str) -> list[AstNode]:
    if container.is_class:
        body = container.node.child_by_field_name("body")
        members = body.named_children if body is not None else []
        wanted = {"method_definition"} | BODILESS_MEMBER_TYPES
    else:
        members = container.node.named_children
        wanted = {"method_definition"}
    return [_member_node(tree, member, container, callee) for member in members if member.type in wanted]


def skip_reason(node: AstNode, options: TransformOptions) -> SkipReason | None:
    """Return why `node` must not be wrapped, or None for a candidate."""
    if node.kind is NodeKind.CONSTRUCTOR_METHOD:
        return SkipReason.CONSTRUCTOR
    if node.kind is NodeKind.OVERLOAD_SIGNATURE:
        return SkipReason.OVERLOAD_SIGNATURE
    identifier = node.identifier
    if identifier is None:
        return SkipReason.ANONYMOUS_DEFAULT_EXPORT
    if any(pattern.search(identifier) for pattern in options.skip):
        return SkipReason.NAME_MATCH
    if node.kind.is_method and node.is_generator:
        return SkipReason.GENERATOR
    if node.accessor is not None:
        return SkipReason.ACCESSOR
    if node.wrapped:
        return SkipReason.ALREADY_WRAPPED
    return None


def _display_name(node: AstNode) -> str:
    if node.identifier is not None:
        return node.identifier
    if node.kind.is_method or node.kind is NodeKind.OVERLOAD_SIGNATURE:
        return f"{node.enclosing or ANONYMOUS_DEFAULT}.{node.name}"
    return node.name or ANONYMOUS_DEFAULT


def collect_nodes(tree: SyntaxTree, callee: str = "trace") -> list[AstNode]:
    """All visited nodes: top-level declarations, then container members."""
    nodes, containers = _visit_top_level(tree, callee)
    for container in containers:
        nodes.extend(_visit_members(tree, container, callee))
    return nodes


def classify(tree: SyntaxTree, options: TransformOptions) -> Classification:
    result = Classification()
    for node in collect_nodes(tree, options.callee):
        reason = skip_reason(node, options)
        if reason is None:
            logger.debug("%s:%d: wrapping %s", tree.file_path, node.line, node.identifier)
            result.candidates.append(node)
        else:
            logger.debug("%s:%d: skipping %s (%s)", tree.file_path, node.line, _display_name(node), reason.value)
            result.skipped.append(SkipRecord(name=_display_name(node), reason=reason, kind=node.kind, line=node.line))
    return result
