"""Custom exceptions for bulkops.

This module defines the typed errors raised by filesystem operations and the
classifier that maps raw ``OSError`` values onto the error taxonomy.
"""

import errno
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any


class BulkOpsError(Exception):
    """Base exception for all bulkops errors.

    All custom exceptions should inherit from this base class to allow
    for broad exception handling when needed.
    """

    pass


class ErrorKind(str, Enum):
    """Categories of filesystem operation failures."""

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"
    INVALID_FILE_NAME = "INVALID_FILE_NAME"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DISK_SPACE_INSUFFICIENT = "DISK_SPACE_INSUFFICIENT"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"


#: Kinds a caller may reasonably retry.
RECOVERABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {ErrorKind.NETWORK_ERROR, ErrorKind.DISK_SPACE_INSUFFICIENT}
)


def _errno_table() -> dict[int, ErrorKind]:
    names: dict[ErrorKind, tuple[str, ...]] = {
        ErrorKind.FILE_NOT_FOUND: ("ENOENT", "ENOTDIR"),
        ErrorKind.PERMISSION_DENIED: ("EACCES", "EPERM", "EROFS"),
        ErrorKind.FILE_ALREADY_EXISTS: ("EEXIST", "ENOTEMPTY"),
        ErrorKind.DISK_SPACE_INSUFFICIENT: ("ENOSPC", "EDQUOT"),
        ErrorKind.INVALID_FILE_NAME: ("ENAMETOOLONG",),
        ErrorKind.NETWORK_ERROR: (
            "ETIMEDOUT",
            "ECONNRESET",
            "ECONNREFUSED",
            "ECONNABORTED",
            "EHOSTUNREACH",
            "ENETUNREACH",
            "ENETDOWN",
            "ESTALE",
            "EREMOTEIO",
        ),
    }
    table: dict[int, ErrorKind] = {}
    for kind, codes in names.items():
        for name in codes:
            # Not every platform defines every errno constant
            code = getattr(errno, name, None)
            if code is not None:
                table[code] = kind
    return table


_ERRNO_KINDS = _errno_table()

_MESSAGE_PATTERNS: tuple[tuple[tuple[str, ...], ErrorKind], ...] = (
    (("enoent", "no such file"), ErrorKind.FILE_NOT_FOUND),
    (("eacces", "permission denied"), ErrorKind.PERMISSION_DENIED),
    (("eexist", "already exists"), ErrorKind.FILE_ALREADY_EXISTS),
    (("enospc", "no space left"), ErrorKind.DISK_SPACE_INSUFFICIENT),
)


class FileOperationError(BulkOpsError):
    """Raised when a filesystem operation on a single path fails.

    Attributes:
        kind: Failure category
        path: Path the failure is attributed to
        message: Human-readable description
        cause: Underlying exception, if any
        context: Name of the operation that failed (e.g. 'copy')
        timestamp: When the error was created (UTC)
    """

    def __init__(
        self,
        kind: ErrorKind,
        path: str | Path,
        message: str,
        cause: BaseException | None = None,
        context: str | None = None,
    ) -> None:
        """Initialize FileOperationError.

        Args:
            kind: Failure category
            path: Path the failure is attributed to
            message: Human-readable description
            cause: Underlying exception (optional)
            context: Operation name (optional)
        """
        self.kind = kind
        self.path = Path(path)
        self.message = message
        self.cause = cause
        self.context = context
        self.timestamp = datetime.now(UTC)

        super().__init__(message)

    @property
    def recoverable(self) -> bool:
        """Whether the failure is transient and eligible for retry."""
        return self.kind in RECOVERABLE_KINDS

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        path: str | Path,
        context: str | None = None,
    ) -> "FileOperationError":
        """Classify an arbitrary exception into a FileOperationError.

        ``FileOperationError`` instances are returned unchanged. ``OSError``
        values are classified by errno, anything else by message text.

        Args:
            exc: Exception to classify
            path: Path to attribute the failure to
            context: Operation name (optional)

        Returns:
            FileOperationError describing ``exc``
        """
        if isinstance(exc, FileOperationError):
            return exc

        kind = ErrorKind.UNKNOWN
        if isinstance(exc, OSError) and exc.errno in _ERRNO_KINDS:
            kind = _ERRNO_KINDS[exc.errno]
        elif isinstance(exc, FileNotFoundError):
            kind = ErrorKind.FILE_NOT_FOUND
        elif isinstance(exc, PermissionError):
            kind = ErrorKind.PERMISSION_DENIED
        elif isinstance(exc, FileExistsError):
            kind = ErrorKind.FILE_ALREADY_EXISTS
        else:
            text = str(exc).lower()
            for needles, candidate in _MESSAGE_PATTERNS:
                if any(needle in text for needle in needles):
                    kind = candidate
                    break

        message = str(exc) or type(exc).__name__
        return cls(kind, path, message, cause=exc, context=context)

    def user_message(self) -> str:
        """Short message suitable for end users."""
        name = self.path.name or str(self.path)
        messages = {
            ErrorKind.FILE_NOT_FOUND: f"File or folder not found: {name}",
            ErrorKind.PERMISSION_DENIED: f"Permission denied: {name}",
            ErrorKind.FILE_ALREADY_EXISTS: f"File or folder already exists: {name}",
            ErrorKind.INVALID_FILE_NAME: f"Invalid file name: {name}",
            ErrorKind.DISK_SPACE_INSUFFICIENT: "Not enough disk space",
            ErrorKind.NETWORK_ERROR: "A network error occurred",
        }
        return messages.get(self.kind, f"Unexpected error: {self.message}")

    def recovery_suggestions(self) -> list[str]:
        """Hints for resolving the failure."""
        suggestions = {
            ErrorKind.FILE_NOT_FOUND: [
                "Check that the path is correct",
                "Check that the file was not moved or deleted",
            ],
            ErrorKind.PERMISSION_DENIED: [
                "Check the file permissions",
                "Check that no other program holds the file",
            ],
            ErrorKind.FILE_ALREADY_EXISTS: [
                "Use a different name",
                "Move or delete the existing file",
            ],
            ErrorKind.INVALID_FILE_NAME: [
                'Remove unsupported characters (< > : " | ? *)',
                "Shorten the file name",
            ],
            ErrorKind.DISK_SPACE_INSUFFICIENT: ["Free up disk space and retry"],
            ErrorKind.NETWORK_ERROR: ["Check the network connection and retry"],
        }
        return suggestions.get(self.kind, ["Retry later"])

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging and JSON output.

        Returns:
            Dictionary representation suitable for JSON responses
        """
        result: dict[str, Any] = {
            "error": self.kind.value,
            "path": str(self.path),
            "message": self.message,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
        }

        if self.context is not None:
            result["context"] = self.context

        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"

        return result

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return (
            f"FileOperationError(kind={self.kind.value}, "
            f"path={str(self.path)!r}, "
            f"message={self.message!r})"
        )
