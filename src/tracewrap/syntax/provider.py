"""Syntax provider for JavaScript and TypeScript sources.

Wraps tree-sitter: picks a grammar from the file extension, parses source
text into a tree, turns tree-sitter's error recovery into a hard
`ParseError`, and applies a batch of byte-span edits in one bottom-up pass
so that earlier edits never invalidate the offsets of later ones.
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from tracewrap.exceptions import EditConflictError, ParseError, UnsupportedLanguageError

logger = logging.getLogger("tracewrap.syntax")

LANG_MAP = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

CODEMOD_EXTENSIONS = frozenset(LANG_MAP)


def detect_language(file_path: str) -> str | None:
    """Return the grammar name for a file path, or None if unsupported."""
    _, ext = os.path.splitext(file_path)
    return LANG_MAP.get(ext.lower())


@lru_cache(maxsize=None)
def get_language(lang: str) -> Language:
    if lang == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if lang == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    if lang == "javascript":
        return Language(tree_sitter_javascript.language())
    raise ValueError(f"Unknown grammar: {lang}")


@dataclass(frozen=True)
class Span:
    """Half-open range of UTF-8 byte offsets into the source."""

    start: int
    end: int

    @classmethod
    def of(cls, node: Node) -> "Span":
        return cls(node.start_byte, node.end_byte)


@dataclass(frozen=True)
class Edit:
    span: Span
    text: str


@dataclass
class SyntaxTree:
    file_path: str
    language: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return node_text(self.source, node)

    def indent_of(self, node: Node) -> str:
        return line_indent(self.source, node.start_byte)

    @property
    def newline(self) -> str:
        return line_ending(self.source)


def node_text(source: bytes, node: Node) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _first_error_node(node: Node) -> Node | None:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error_node(child)
        if found is not None:
            return found
    return node


def parse(text: str, file_path: str) -> SyntaxTree:
    """Parse source text; raise ParseError if tree-sitter had to recover."""
    lang = detect_language(file_path)
    if lang is None:
        raise UnsupportedLanguageError(file_path)
    source = text.encode("utf-8")
    parser = Parser(get_language(lang))
    tree = parser.parse(source)
    bad = _first_error_node(tree.root_node)
    if bad is not None:
        row, column = bad.start_point
        message = f"missing {bad.type}" if bad.is_missing else "unexpected syntax"
        raise ParseError(file_path, row + 1, column + 1, message)
    return SyntaxTree(file_path=file_path, language=lang, source=source, tree=tree)


def has_syntax_errors(text: str, file_path: str) -> bool:
    try:
        parse(text, file_path)
    except ParseError:
        return True
    return False


def line_indent(source: bytes, offset: int) -> str:
    """Leading whitespace of the line that contains `offset`."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    indent = b""
    for b_val in source[line_start:offset]:
        if b_val in (32, 9):  # space or tab
            indent += bytes([b_val])
        else:
            break
    return indent.decode("utf-8")


def line_ending(source: bytes) -> str:
    """Line break of `source`: CRLF when its first line break is one, else LF."""
    index = source.find(b"\n")
    return "\r\n" if index > 0 and source[index - 1 : index] == b"\r" else "\n"


def apply_edits(source: bytes | str, edits: Iterable[Edit]) -> str:
    """Apply all edits in one pass and return the new text.

    Edits are spliced bottom-up (start offset descending) so each splice
    only shifts bytes after the ranges still to be applied. Overlapping
    ranges raise EditConflictError. A zero-width span is an insertion.
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    ordered = sorted(edits, key=lambda e: (e.span.start, e.span.end), reverse=True)
    for later, earlier in zip(ordered, ordered[1:]):
        if earlier.span.end > later.span.start:
            raise EditConflictError(
                f"Edits overlap: [{earlier.span.start}, {earlier.span.end}) and "
                f"[{later.span.start}, {later.span.end})"
            )
    for edit in ordered:
        data = data[: edit.span.start] + edit.text.encode("utf-8") + data[edit.span.end :]
    logger.debug("Applied %d edit(s)", len(ordered))
    return data.decode("utf-8")
