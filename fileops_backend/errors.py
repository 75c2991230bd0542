"""Exceptions raised by file operations.

Operations raise these; tools.call_tool turns them into error results.
"""


class FileOpsError(Exception):
    """Base exception for file operation failures."""


class NotFoundError(FileOpsError):
    """Raised when an input path or archive does not exist."""


class AlreadyExistsError(FileOpsError):
    """Raised when a target exists and overwrite is not set."""


class TargetNotEmptyError(AlreadyExistsError):
    """Raised when an extraction target directory is not empty."""


class UnsupportedFormatError(FileOpsError):
    """Raised for an unrecognized archive or image suffix."""


class InvalidRangeSyntax(FileOpsError, ValueError):
    """Raised when a page/range specification cannot be parsed."""


class InvalidArgumentError(FileOpsError):
    """Raised when arguments are valid in shape but not in meaning."""


class ArchiveWriteError(FileOpsError):
    """Raised for I/O or format failures while writing an archive."""


class ArchiveReadError(FileOpsError):
    """Raised for unreadable, corrupt or unsafe archives."""


class ConversionError(FileOpsError):
    """Raised when an image or PDF library fails mid-operation."""
