from tracewrap.syntax.provider import (
    CODEMOD_EXTENSIONS,
    Edit,
    Span,
    SyntaxTree,
    apply_edits,
    detect_language,
    line_ending,
    line_indent,
    parse,
)

__all__ = [
    "CODEMOD_EXTENSIONS",
    "Edit",
    "Span",
    "SyntaxTree",
    "apply_edits",
    "detect_language",
    "line_ending",
    "line_indent",
    "parse",
]
