"""
Error kinds raised by the scope extraction subsystem.

Failures local to one tag record or one file are recoverable: callers skip the
record, or degrade the file to "no scope data", and keep going.
"""


class ScopeError(Exception):
    """Base exception for scope extraction."""

    pass


class TagStreamMalformed(ScopeError):
    """A single tag record could not be parsed or validated."""

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class TaggingToolUnavailable(ScopeError):
    """The external tagging tool is missing, crashed, hung or was closed."""

    pass


class CodecDecodeError(ScopeError):
    """Stored scope bytes are truncated or corrupt."""

    pass


class CodecVersionMismatch(CodecDecodeError):
    """Stored scope bytes use a format version this build does not know."""

    def __init__(self, version: int, supported: int):
        super().__init__(
            f"Unsupported scope format version {version} (supported: {supported})"
        )
        self.version = version
        self.supported = supported
