import pytest

from tracewrap.codemod.nodes import AstNode, NodeKind
from tracewrap.codemod.rewriter import quote_js_string, rewrite
from tracewrap.syntax.provider import Span


def make_node(kind: NodeKind, text: str, **kwargs) -> AstNode:
    return AstNode(kind=kind, span=Span(0, len(text)), text=text, line=1, **kwargs)


# --- Templates ---


def test_function_declaration_becomes_const():
    node = make_node(NodeKind.FUNCTION_DECLARATION, "async function load(id) { return id; }", name="load")
    assert rewrite(node, "load") == "const load = trace('load', async function load(id) { return id; });"


def test_exported_declaration_text_excludes_export():
    node = make_node(NodeKind.EXPORTED_FUNCTION_DECLARATION, "function a() {}", name="a")
    assert rewrite(node, "api.a", callee="span") == "const a = span('api.a', function a() {});"


def test_default_export_reexports_binding():
    node = make_node(NodeKind.DEFAULT_EXPORTED_FUNCTION_DECLARATION, "function main() {}", name="main")
    assert rewrite(node, "main") == "const main = trace('main', function main() {});\nexport default main;"


def test_const_initializer_is_wrapped_in_place():
    node = make_node(NodeKind.CONST_ARROW_OR_FUNCTION_EXPRESSION, "(a, b) => a + b", name="add")
    assert rewrite(node, "add") == "trace('add', (a, b) => a + b)"


def test_method_body_uses_member_indent():
    body = "{\n      return this.id;\n    }"
    node = make_node(NodeKind.CLASS_INSTANCE_METHOD, body, name="id", enclosing="User", indent="    ")
    assert rewrite(node, "User.id") == (
        "{\n"
        "      return trace('User.id', () => {\n"
        "      return this.id;\n"
        "    })();\n"
        "    }"
    )


def test_async_method_body_closure_is_async():
    node = make_node(NodeKind.OBJECT_LITERAL_METHOD, "{ await x; }", name="f", enclosing="o", is_async=True)
    assert rewrite(node, "o.f") == "{\n  return trace('o.f', async () => { await x; })();\n}"


def test_templates_use_given_line_break():
    method = make_node(NodeKind.CLASS_INSTANCE_METHOD, "{\r\n    go();\r\n  }", name="m", enclosing="K", indent="  ")
    assert rewrite(method, "K.m", newline="\r\n") == (
        "{\r\n    return trace('K.m', () => {\r\n    go();\r\n  })();\r\n  }"
    )
    default = make_node(NodeKind.DEFAULT_EXPORTED_FUNCTION_DECLARATION, "function main() {}", name="main")
    assert rewrite(default, "main", newline="\r\n").endswith(");\r\nexport default main;")


@pytest.mark.parametrize("kind", [NodeKind.CONSTRUCTOR_METHOD, NodeKind.OVERLOAD_SIGNATURE])
def test_never_rewritten_kinds(kind):
    with pytest.raises(ValueError):
        rewrite(make_node(kind, "constructor() {}", name="constructor", enclosing="K"), "K.constructor")


# --- Quoting ---


@pytest.mark.parametrize(
    "value,expected",
    [
        ("createUser", "'createUser'"),
        ("it's", "'it\\'s'"),
        ("a\\b", "'a\\\\b'"),
        ("line\nbreak", "'line\\nbreak'"),
        ('say "hi"', "'say \"hi\"'"),
        ("sep\u2028arator", "'sep\\u2028arator'"),
        ("", "''"),
    ],
)
def test_quote_js_string(value, expected):
    assert quote_js_string(value) == expected
