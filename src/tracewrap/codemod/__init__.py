from tracewrap.codemod.classifier import classify
from tracewrap.codemod.naming import resolve_name
from tracewrap.codemod.nodes import (
    AstNode,
    CandidateTarget,
    ExportKind,
    NodeKind,
    SkipReason,
    SkipRecord,
    TransformOptions,
    TransformResult,
)
from tracewrap.codemod.rewriter import rewrite
from tracewrap.codemod.transform import transform_file

__all__ = [
    "AstNode",
    "CandidateTarget",
    "ExportKind",
    "NodeKind",
    "SkipReason",
    "SkipRecord",
    "TransformOptions",
    "TransformResult",
    "classify",
    "resolve_name",
    "rewrite",
    "transform_file",
]
