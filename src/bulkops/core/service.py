"""File operation service and its factory.

``FileOperationService`` is the composition root for the engine: it owns the
collaborators, the executor and the batch scheduler. Build one with
``create_file_operation_service()`` and keep it for the lifetime of the
caller; nothing here is a module-level singleton.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from bulkops.core.config import Settings, load_settings
from bulkops.core.errors import FileOperationError
from bulkops.core.scheduler import BatchScheduler, BatchState
from bulkops.core.schemas import (
    BatchOperationOptions,
    BatchOperationResult,
    FileStats,
    NameValidation,
    RollbackOperation,
)
from bulkops.fs.fs_ops import OperationExecutor
from bulkops.fs.paths import LocalPathValidator
from bulkops.fs.permissions import LocalPermissionChecker
from bulkops.fs.protocols import AuditSink, PathValidator, PermissionChecker
from bulkops.fs.rollback import RollbackLedger
from bulkops.utils.logging import AuditLog

PathLike = str | Path


class FileOperationService:
    """Bulk and single-shot copy/move/delete over local paths."""

    def __init__(
        self,
        paths: PathValidator,
        permissions: PermissionChecker,
        *,
        audit: AuditSink | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            paths: Path validator collaborator
            permissions: Permission checker collaborator
            audit: Optional audit sink (structlog-backed by default)
            settings: Optional settings supplying default options
        """
        self._paths = paths
        self._settings = settings or Settings()
        self._audit = audit or AuditLog()
        self._executor = OperationExecutor(paths, permissions)
        self._scheduler = BatchScheduler(self._audit)

    @property
    def state(self) -> BatchState:
        """State of the most recent (or running) batch call."""
        return self._scheduler.state

    def default_options(self) -> BatchOperationOptions:
        """Batch options derived from settings."""
        return BatchOperationOptions(
            max_concurrency=self._settings.max_concurrency,
            max_retries=self._settings.max_retries,
        )

    # ===== Batch operations =====

    async def copy_files_batch(
        self,
        sources: Sequence[PathLike],
        destination: PathLike,
        options: BatchOperationOptions | None = None,
    ) -> BatchOperationResult:
        """Copy every source into ``destination``.

        Raises:
            FileOperationError: Destination check failed, or the aborting
                item error when ``continue_on_error`` is off
        """
        target_dir = Path(destination)

        async def copy_one(source: Path, ledger: RollbackLedger | None) -> Path:
            return await self._executor.copy_item(source, target_dir, ledger=ledger)

        return await self._scheduler.run(
            "copy",
            sources,
            copy_one,
            options or self.default_options(),
            precheck=lambda: self._executor.gate.check_destination(
                target_dir, context="copy"
            ),
            destination=str(target_dir),
        )

    async def move_files_batch(
        self,
        sources: Sequence[PathLike],
        destination: PathLike,
        options: BatchOperationOptions | None = None,
    ) -> BatchOperationResult:
        """Move every source into ``destination``.

        Raises:
            FileOperationError: Destination check failed, or the aborting
                item error when ``continue_on_error`` is off
        """
        target_dir = Path(destination)

        async def move_one(source: Path, ledger: RollbackLedger | None) -> Path:
            return await self._executor.move_item(source, target_dir, ledger=ledger)

        return await self._scheduler.run(
            "move",
            sources,
            move_one,
            options or self.default_options(),
            precheck=lambda: self._executor.gate.check_destination(
                target_dir, context="move"
            ),
            destination=str(target_dir),
        )

    async def delete_files_batch(
        self,
        sources: Sequence[PathLike],
        options: BatchOperationOptions | None = None,
    ) -> BatchOperationResult:
        """Delete every source (directories recursively).

        Raises:
            FileOperationError: The aborting item error when
                ``continue_on_error`` is off
        """

        async def delete_one(source: Path, ledger: RollbackLedger | None) -> None:
            await self._executor.delete_item(source, ledger=ledger)

        return await self._scheduler.run(
            "delete", sources, delete_one, options or self.default_options()
        )

    def get_rollback_operations(self) -> list[RollbackOperation]:
        """Snapshot of the current rollback ledger (diagnostics)."""
        return self._scheduler.ledger.entries()

    def clear_rollback_operations(self) -> None:
        self._scheduler.ledger.clear()

    # ===== Single-shot operations =====

    async def copy_files(
        self, sources: Sequence[PathLike], destination: PathLike
    ) -> list[Path]:
        """Copy sources one by one, stopping at the first failure.

        Returns:
            Paths of the created copies

        Raises:
            FileOperationError: First failure encountered
        """
        target_dir = Path(destination)
        await self._raise_if_invalid_destination(target_dir, "copy")
        return [
            await self._executor.copy_item(Path(source), target_dir)
            for source in sources
        ]

    async def move_files(
        self, sources: Sequence[PathLike], destination: PathLike
    ) -> list[Path]:
        """Move sources one by one, stopping at the first failure.

        Raises:
            FileOperationError: First failure encountered
        """
        target_dir = Path(destination)
        await self._raise_if_invalid_destination(target_dir, "move")
        return [
            await self._executor.move_item(Path(source), target_dir)
            for source in sources
        ]

    async def delete_files(self, paths: Sequence[PathLike]) -> None:
        """Delete paths one by one, stopping at the first failure.

        Raises:
            FileOperationError: First failure encountered
        """
        for path in paths:
            await self._executor.delete_item(Path(path))

    async def rename_file(self, old_path: PathLike, new_path: PathLike) -> Path:
        return await self._executor.rename(Path(old_path), Path(new_path))

    async def create_file(self, path: PathLike, content: str | bytes = "") -> Path:
        data = content.encode("utf-8") if isinstance(content, str) else content
        return await self._executor.create_file(Path(path), data)

    async def create_directory(self, path: PathLike) -> Path:
        return await self._executor.create_directory(Path(path))

    async def get_file_stats(self, path: PathLike) -> FileStats:
        return await self._executor.stat(Path(path))

    def validate_file_name(self, name: str) -> NameValidation:
        return self._paths.validate_file_name(name)

    async def _raise_if_invalid_destination(
        self, destination: Path, context: str
    ) -> None:
        error: FileOperationError | None = (
            await self._executor.gate.check_destination(destination, context=context)
        )
        if error is not None:
            raise error


def create_file_operation_service(
    *,
    paths: PathValidator | None = None,
    permissions: PermissionChecker | None = None,
    audit: AuditSink | None = None,
    settings: Settings | None = None,
) -> FileOperationService:
    """Build a service with local-filesystem collaborators wired in."""

    return FileOperationService(
        paths or LocalPathValidator(),
        permissions or LocalPermissionChecker(),
        audit=audit,
        settings=settings or load_settings(),
    )
