"""Per-file transformation: classify, rewrite, bind the callee, apply.

`transform_file` is a pure function of its inputs. It performs no I/O and
keeps no state between calls, so callers may run it for different files
in parallel.
"""

import logging

from tracewrap.codemod.classifier import classify
from tracewrap.codemod.imports import ensure_callee_import
from tracewrap.codemod.naming import resolve_name
from tracewrap.codemod.nodes import AstNode, CandidateTarget, TransformOptions, TransformResult
from tracewrap.codemod.rewriter import rewrite
from tracewrap.exceptions import RewriteError
from tracewrap.syntax.provider import Edit, apply_edits, has_syntax_errors, parse

logger = logging.getLogger("tracewrap.codemod")


def build_target(node: AstNode, file_path: str, options: TransformOptions, newline: str = "\n") -> CandidateTarget:
    if node.identifier is None:
        raise RewriteError(file_path, f"line {node.line}: cannot name an anonymous {node.kind.value}")
    span_name = resolve_name(node.identifier, file_path, options.name_pattern, options.root)
    replacement = rewrite(node, span_name, options.callee, newline)
    return CandidateTarget(node=node, span_name=span_name, replacement=replacement)


def transform_file(source: str, file_path: str, options: TransformOptions | None = None) -> TransformResult:
    """Wrap every eligible function of one file in the instrumentation call.

    When nothing is wrapped the source is returned unchanged, byte for byte,
    and no import is added. Raises ParseError for invalid input.
    """
    options = options or TransformOptions()
    tree = parse(source, file_path)
    classification = classify(tree, options)

    if not classification.candidates:
        logger.debug("%s: nothing to wrap (%d skipped)", file_path, len(classification.skipped))
        return TransformResult(changed=False, wrapped_count=0, skipped=classification.skipped, modified=source)

    targets = [build_target(node, file_path, options, tree.newline) for node in classification.candidates]
    edits = [Edit(target.node.span, target.replacement) for target in targets]
    if (import_edit := ensure_callee_import(tree, options)) is not None:
        edits.append(import_edit)

    modified = apply_edits(tree.source, edits)
    if has_syntax_errors(modified, file_path):
        raise RewriteError(file_path, "rewritten source no longer parses")

    logger.debug("%s: wrapped %d function(s)", file_path, len(targets))
    return TransformResult(
        changed=True,
        wrapped_count=len(targets),
        skipped=classification.skipped,
        modified=modified,
        wrapped=[target.span_name for target in targets],
    )
