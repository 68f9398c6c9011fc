"""Local-filesystem permission checker.

Implements the ``PermissionChecker`` collaborator with ``os.access`` checks
run in a worker thread.
"""

import os
from pathlib import Path

import anyio

from bulkops.core.schemas import PermissionOp, PermissionResult


async def _access(path: Path, mode: int) -> bool:
    return await anyio.to_thread.run_sync(os.access, str(path), mode)


def is_hidden(path: Path) -> bool:
    """Dot-file convention; Windows attribute bits are not inspected."""
    return path.name.startswith(".")


class LocalPermissionChecker:
    """Answers read/write/delete questions for the current process."""

    async def can_read(self, path: Path) -> bool:
        return await _access(path, os.R_OK)

    async def can_write(self, path: Path) -> bool:
        return await _access(path, os.W_OK)

    async def can_execute(self, path: Path) -> bool:
        return await _access(path, os.X_OK)

    async def check_operation_permission(
        self, path: Path, operation: PermissionOp
    ) -> PermissionResult:
        """Check whether ``operation`` is allowed on ``path``.

        Args:
            path: Target path
            operation: 'read', 'write' or 'delete'

        Returns:
            PermissionResult with a reason when denied
        """
        path = Path(path)
        exists = await _access(path, os.F_OK)

        if not exists and operation != "write":
            return PermissionResult(False, "File or directory does not exist")

        if operation == "read":
            allowed = await self.can_read(path)
            return PermissionResult(allowed, None if allowed else "No read permission")

        if operation == "write":
            if exists:
                allowed = await self.can_write(path)
                return PermissionResult(
                    allowed, None if allowed else "No write permission"
                )
            # New entries need a writable parent
            allowed = await self.can_write(path.parent)
            return PermissionResult(
                allowed, None if allowed else "Parent directory is not writable"
            )

        if operation == "delete":
            if not await self.can_write(path.parent):
                return PermissionResult(False, "Parent directory is not writable")
            allowed = await self.can_write(path)
            return PermissionResult(allowed, None if allowed else "File is read-only")

        return PermissionResult(False, f"Unknown operation: {operation}")

    async def describe(self, path: Path) -> tuple[bool, bool, bool]:
        """Return ``(readonly, executable, hidden)`` for ``path``."""
        path = Path(path)
        readable = await self.can_read(path)
        writable = await self.can_write(path)
        executable = await self.can_execute(path)
        return readable and not writable, executable, is_hidden(path)
