"""Data model of the transformation engine."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel

from tracewrap.syntax.provider import Span


class NodeKind(str, Enum):
    FUNCTION_DECLARATION = "FunctionDeclaration"
    EXPORTED_FUNCTION_DECLARATION = "ExportedFunctionDeclaration"
    DEFAULT_EXPORTED_FUNCTION_DECLARATION = "DefaultExportedFunctionDeclaration"
    CONST_ARROW_OR_FUNCTION_EXPRESSION = "ConstArrowOrFunctionExpression"
    CLASS_INSTANCE_METHOD = "ClassInstanceMethod"
    CLASS_STATIC_METHOD = "ClassStaticMethod"
    OBJECT_LITERAL_METHOD = "ObjectLiteralMethod"
    CONSTRUCTOR_METHOD = "ConstructorMethod"
    OVERLOAD_SIGNATURE = "OverloadSignature"

    @property
    def is_method(self) -> bool:
        return self in _METHOD_KINDS


_METHOD_KINDS = frozenset(
    {
        NodeKind.CLASS_INSTANCE_METHOD,
        NodeKind.CLASS_STATIC_METHOD,
        NodeKind.OBJECT_LITERAL_METHOD,
        NodeKind.CONSTRUCTOR_METHOD,
    }
)


class ExportKind(str, Enum):
    NONE = "none"
    NAMED = "named"
    DEFAULT = "default"


class SkipReason(str, Enum):
    CONSTRUCTOR = "constructor"
    ANONYMOUS_DEFAULT_EXPORT = "anonymous default export"
    NAME_MATCH = "name match"
    ALREADY_WRAPPED = "already wrapped"
    OVERLOAD_SIGNATURE = "overload signature"
    GENERATOR = "generator"
    ACCESSOR = "getter/setter"


@dataclass(frozen=True)
class AstNode:
    """One visited declaration, detached from the tree-sitter tree.

    `span` is the byte range a rewrite replaces and `text` is the source of
    the function itself: the declaration for function declarations, the
    initializer for `const` bindings, the body block for methods.
    """

    kind: NodeKind
    span: Span
    text: str
    line: int
    name: str | None = None
    enclosing: str | None = None
    export: ExportKind = ExportKind.NONE
    is_async: bool = False
    is_generator: bool = False
    accessor: Literal["get", "set"] | None = None
    params: str | None = None
    body: str | None = None
    indent: str = ""
    wrapped: bool = False

    @property
    def identifier(self) -> str | None:
        """`Enclosing.method` for methods, the own or binding name otherwise."""
        if self.kind.is_method or self.enclosing is not None:
            if self.name is None or self.enclosing is None:
                return None
            return f"{self.enclosing}.{self.name}"
        return self.name


@dataclass(frozen=True)
class CandidateTarget:
    node: AstNode
    span_name: str
    replacement: str


class SkipRecord(BaseModel):
    name: str
    reason: SkipReason
    kind: NodeKind
    line: int


@dataclass
class Classification:
    candidates: list[AstNode] = field(default_factory=list)
    skipped: list[SkipRecord] = field(default_factory=list)


class TransformOptions(BaseModel):
    skip: list[re.Pattern] = []
    """Identifiers matching any of these regexes (search semantics) are left alone."""
    name_pattern: str | None = None
    """Span name template; tokens {name}, {file} and {path}."""
    callee: str = "trace"
    """Identifier of the instrumentation call emitted around each function."""
    import_source: str = "autotel"
    """Module the callee is imported from."""
    root: str | None = None
    """Directory `{path}` is made relative to."""
    module_style: Literal["auto", "esm", "cjs"] = "auto"
    """How to bind the callee when it is not imported yet."""


class TransformResult(BaseModel):
    changed: bool
    wrapped_count: int
    skipped: list[SkipRecord]
    modified: str
    wrapped: list[str] = []
    """Resolved span names of the wrapped functions, in source order."""

    def skip_reasons(self) -> list[str]:
        """Distinct skip reasons in first-seen order."""
        return list(dict.fromkeys(record.reason.value for record in self.skipped))

    def summary(self) -> dict[str, Any]:
        return self.model_dump(exclude={"modified"}, mode="json")
