import os
import re

_TOKEN = re.compile(r"\{(name|file|path)\}")


def _relative_path(file_path: str, root: str | None) -> str:
    path = os.path.relpath(file_path, root) if root else file_path
    return path.replace("\\", "/")


def resolve_name(identifier: str, file_path: str, name_pattern: str | None = None, root: str | None = None) -> str:
    """Return the span name for a function.

    Without a pattern the identifier is used verbatim. A pattern may use
    ``{name}`` (the identifier), ``{file}`` (base name without extension) and
    ``{path}`` (path relative to `root`). Tokens are substituted in a single
    pass, so substituted text is never expanded again.
    """
    if not name_pattern:
        return identifier
    values = {
        "name": identifier,
        "file": os.path.splitext(os.path.basename(file_path))[0],
        "path": _relative_path(file_path, root),
    }
    return _TOKEN.sub(lambda m: values[m.group(1)], name_pattern)
