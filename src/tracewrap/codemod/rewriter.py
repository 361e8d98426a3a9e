"""Turn a candidate declaration into its wrapped source text.

Which template applies depends only on the node kind:

* function declarations become a ``const`` bound to the traced function
  expression; the declaration's own text is reused as that expression, so
  ``async``, ``*``, generics and annotations carry over verbatim;
* default-exported functions additionally get ``export default <name>;``;
* ``const`` arrow/function initializers are wrapped in place;
* method bodies become an immediately invoked traced arrow closure, which
  keeps the method's parameters and its ``this``.
"""

from jinja2 import StrictUndefined, Template

from tracewrap.codemod.nodes import AstNode, NodeKind

FUNCTION_TEMPLATE = Template(
    "const {{ name }} = {{ callee }}({{ span_name }}, {{ function }});",
    undefined=StrictUndefined,
)

DEFAULT_EXPORT_TEMPLATE = Template(
    "const {{ name }} = {{ callee }}({{ span_name }}, {{ function }});{{ newline }}export default {{ name }};",
    undefined=StrictUndefined,
)

EXPRESSION_TEMPLATE = Template(
    "{{ callee }}({{ span_name }}, {{ expression }})",
    undefined=StrictUndefined,
)

METHOD_BODY_TEMPLATE = Template(
    "{{ '{' }}{{ newline }}"
    "{{ indent }}  return {{ callee }}({{ span_name }}, {% if is_async %}async {% endif %}() => {{ body }})();{{ newline }}"
    "{{ indent }}}",
    undefined=StrictUndefined,
)

_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def quote_js_string(value: str) -> str:
    """Render `value` as a single-quoted JavaScript string literal."""
    return "'" + "".join(_ESCAPES.get(ch, ch) for ch in value) + "'"


def rewrite(node: AstNode, span_name: str, callee: str = "trace", newline: str = "\n") -> str:
    """Return the replacement text for `node.span`.

    `newline` is the line break the file already uses.
    """
    quoted = quote_js_string(span_name)
    if node.kind in (NodeKind.FUNCTION_DECLARATION, NodeKind.EXPORTED_FUNCTION_DECLARATION):
        return FUNCTION_TEMPLATE.render(name=node.name, callee=callee, span_name=quoted, function=node.text)
    if node.kind is NodeKind.DEFAULT_EXPORTED_FUNCTION_DECLARATION:
        return DEFAULT_EXPORT_TEMPLATE.render(
            name=node.name, callee=callee, span_name=quoted, function=node.text, newline=newline
        )
    if node.kind is NodeKind.CONST_ARROW_OR_FUNCTION_EXPRESSION:
        return EXPRESSION_TEMPLATE.render(callee=callee, span_name=quoted, expression=node.text)
    if node.kind in (NodeKind.CLASS_INSTANCE_METHOD, NodeKind.CLASS_STATIC_METHOD, NodeKind.OBJECT_LITERAL_METHOD):
        return METHOD_BODY_TEMPLATE.render(
            indent=node.indent,
            callee=callee,
            span_name=quoted,
            is_async=node.is_async,
            body=node.text,
            newline=newline,
        )
    raise ValueError(f"{node.kind.value} nodes are never rewritten")
