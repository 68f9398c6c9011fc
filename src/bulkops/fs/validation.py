"""Pre-flight checks run before any mutation.

Every check returns ``None`` when it passes or the ``FileOperationError``
describing the failure. Nothing here raises for a failed check; callers
decide whether to raise or record.
"""

from pathlib import Path
from typing import Literal

import anyio

from bulkops.core.errors import ErrorKind, FileOperationError
from bulkops.core.schemas import PermissionOp
from bulkops.fs.protocols import PathValidator, PermissionChecker

SourceOp = Literal["copy", "move", "delete"]

_SOURCE_PERMISSION: dict[str, PermissionOp] = {
    "copy": "read",
    "move": "delete",
    "delete": "delete",
}


class ValidationGate:
    """Destination, source and name checks backed by the collaborators."""

    def __init__(self, paths: PathValidator, permissions: PermissionChecker) -> None:
        self._paths = paths
        self._permissions = permissions

    async def check_destination(
        self, destination: Path, context: str | None = None
    ) -> FileOperationError | None:
        """Destination must exist, be a directory and be writable."""
        if not await self._paths.path_exists(destination):
            return FileOperationError(
                ErrorKind.FILE_NOT_FOUND,
                destination,
                "Destination directory does not exist",
                context=context,
            )

        if not await self._paths.is_directory(destination):
            return FileOperationError(
                ErrorKind.INVALID_FILE_NAME,
                destination,
                "Destination is not a directory",
                context=context,
            )

        permission = await self._permissions.check_operation_permission(
            destination, "write"
        )
        if not permission.allowed:
            return FileOperationError(
                ErrorKind.PERMISSION_DENIED,
                destination,
                permission.reason or "Cannot write to destination directory",
                context=context,
            )

        return None

    async def check_source(
        self, source: Path, operation: SourceOp
    ) -> FileOperationError | None:
        """Source must exist and allow read (copy) or delete (move/delete)."""
        if not await self._paths.path_exists(source):
            return FileOperationError(
                ErrorKind.FILE_NOT_FOUND,
                source,
                "Source does not exist",
                context=operation,
            )

        permission = await self._permissions.check_operation_permission(
            source, _SOURCE_PERMISSION[operation]
        )
        if not permission.allowed:
            return FileOperationError(
                ErrorKind.PERMISSION_DENIED,
                source,
                permission.reason or f"Cannot {operation} source",
                context=operation,
            )

        return None

    async def check_not_nested(
        self, source: Path, destination: Path, operation: SourceOp
    ) -> FileOperationError | None:
        """A directory cannot be copied or moved into itself."""
        if not await self._paths.is_directory(source):
            return None

        resolved_source = Path(await anyio.Path(source).resolve())
        resolved_destination = Path(await anyio.Path(destination).resolve())
        if resolved_destination.is_relative_to(resolved_source):
            return FileOperationError(
                ErrorKind.INVALID_FILE_NAME,
                destination,
                f"Cannot {operation} a directory into itself",
                context=operation,
            )

        return None

    def check_name(
        self, target: Path, context: str | None = None
    ) -> FileOperationError | None:
        """Final path component must be a valid file name."""
        validation = self._paths.validate_file_name(target.name)
        if not validation.is_valid:
            return FileOperationError(
                ErrorKind.INVALID_FILE_NAME,
                target,
                validation.error_message or "Invalid file name",
                context=context,
            )
        return None
