class CodemodError(Exception):
    """Base class for every error raised by the transformation engine."""


class ParseError(CodemodError):
    """The source file is not syntactically valid. Fatal for that file."""

    def __init__(self, file_path: str, line: int, column: int, message: str = "syntax error"):
        self.file_path = file_path
        self.line = line
        self.column = column
        super().__init__(f"{file_path}:{line}:{column}: {message}")


class UnsupportedLanguageError(CodemodError):
    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Unsupported file type: {file_path}")


class EditConflictError(CodemodError):
    """Two edits touch overlapping byte ranges."""


class ImportConflictError(CodemodError):
    """The callee name is already bound by another import or a local declaration.

    `source` is None when the file declares the name itself.
    """

    def __init__(self, file_path: str, name: str, source: str | None):
        self.file_path = file_path
        self.name = name
        self.source = source
        if source is None:
            super().__init__(f"{file_path}: '{name}' is already declared in this file")
        else:
            super().__init__(f"{file_path}: '{name}' is already imported from '{source}'")


class RewriteError(CodemodError):
    """The rewritten text no longer parses."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        super().__init__(f"{file_path}: {message}")
