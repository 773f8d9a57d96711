class FnrError(Exception):
    """Base class for all find-and-replace errors."""


class PatternCompileError(FnrError):
    """FIND could not be compiled."""


class TemplateError(FnrError):
    """REPLACE references a capture group the pattern does not declare."""


class ConflictError(FnrError):
    """Edits handed to the planner overlap or are out of order."""


class FileReadError(FnrError):
    """A candidate file could not be read or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FileWriteError(FnrError):
    """Planned content could not be committed to a file."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(FnrError):
    """The configuration file could not be loaded or saved."""


class UsageError(FnrError):
    """Incompatible command line options."""
