"""tracewrap: wrap JavaScript/TypeScript functions in a tracing call.

The engine entry point is `transform_file`; see `tracewrap.codemod.transform`.
"""

__version__ = "0.1.0"

from tracewrap.codemod.nodes import SkipReason, TransformOptions, TransformResult  # noqa: E402
from tracewrap.codemod.transform import transform_file  # noqa: E402

__all__ = ["SkipReason", "TransformOptions", "TransformResult", "__version__", "transform_file"]
