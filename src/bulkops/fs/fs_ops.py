"""Single-item filesystem mutations with collision handling.

Each mutating call validates, resolves a free destination name, mutates,
and finally appends an undo entry when a rollback ledger is supplied.
Failures are raised as ``FileOperationError``.
"""

from collections.abc import Awaitable
from datetime import UTC, datetime
from pathlib import Path

import anyio
import structlog

from bulkops.core.errors import ErrorKind, FileOperationError
from bulkops.core.schemas import FileStats, RollbackOperation
from bulkops.fs.collisions import resolve_unique_name
from bulkops.fs.protocols import PathValidator, PermissionChecker
from bulkops.fs.rollback import RollbackLedger
from bulkops.fs.tree import copy_file, copy_tree, remove_path
from bulkops.fs.validation import ValidationGate

logger = structlog.get_logger(__name__)


class OperationExecutor:
    """Copy, move, delete, create and rename primitives for one path.

    Destination names picked for in-flight items are reserved until the
    item settles, so concurrent siblings sharing a base name receive
    distinct numbered names.
    """

    def __init__(
        self,
        paths: PathValidator,
        permissions: PermissionChecker,
        gate: ValidationGate | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            paths: Path validator collaborator
            permissions: Permission checker collaborator
            gate: Optional pre-built validation gate
        """
        self._paths = paths
        self._permissions = permissions
        self._gate = gate or ValidationGate(paths, permissions)
        self._reserved: set[Path] = set()

    @property
    def gate(self) -> ValidationGate:
        return self._gate

    async def copy_item(
        self,
        source: Path,
        destination_dir: Path,
        *,
        ledger: RollbackLedger | None = None,
    ) -> Path:
        """Copy a file or directory tree into ``destination_dir``.

        Args:
            source: File or directory to copy
            destination_dir: Existing directory receiving the copy
            ledger: Optional undo ledger

        Returns:
            Path of the created copy (renamed on collision)

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        source = Path(source)
        destination_dir = Path(destination_dir)

        await self._raise_if(self._gate.check_source(source, "copy"))
        await self._raise_if(
            self._gate.check_not_nested(source, destination_dir, "copy")
        )

        target = await self._claim_target(destination_dir, source.name)
        try:
            _raise_error(self._gate.check_name(target, context="copy"))
            try:
                if await self._paths.is_directory(source):
                    await copy_tree(source, target)
                else:
                    await copy_file(source, target)
            except OSError as exc:
                await _discard_partial(target)
                raise FileOperationError.from_exception(
                    exc, source, context="copy"
                ) from exc
        finally:
            self._reserved.discard(target)

        if ledger is not None:
            ledger.append(RollbackOperation("copy", source, target_path=target))

        logger.debug("fs.copy", source=str(source), target=str(target))
        return target

    async def move_item(
        self,
        source: Path,
        destination_dir: Path,
        *,
        ledger: RollbackLedger | None = None,
    ) -> Path:
        """Move a file or directory into ``destination_dir`` with one rename.

        Cross-device moves are not emulated; they surface as the classified
        rename error.

        Returns:
            Path the source now lives at (renamed on collision)

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        source = Path(source)
        destination_dir = Path(destination_dir)

        await self._raise_if(self._gate.check_source(source, "move"))
        await self._raise_if(
            self._gate.check_not_nested(source, destination_dir, "move")
        )

        target = await self._claim_target(destination_dir, source.name)
        try:
            _raise_error(self._gate.check_name(target, context="move"))
            try:
                await anyio.Path(source).rename(target)
            except OSError as exc:
                raise FileOperationError.from_exception(
                    exc, source, context="move"
                ) from exc
        finally:
            self._reserved.discard(target)

        if ledger is not None:
            ledger.append(RollbackOperation("move", source, target_path=target))

        logger.debug("fs.move", source=str(source), target=str(target))
        return target

    async def delete_item(
        self, path: Path, *, ledger: RollbackLedger | None = None
    ) -> None:
        """Delete a file or a whole directory tree.

        With a ledger, file content is captured before deletion so the file
        can be rewritten on rollback. Directory content is not captured.

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        path = Path(path)

        await self._raise_if(self._gate.check_source(path, "delete"))

        try:
            is_directory = await self._paths.is_directory(path)
            content: bytes | None = None
            if ledger is not None and not is_directory:
                content = await anyio.Path(path).read_bytes()

            await remove_path(path)
        except OSError as exc:
            raise FileOperationError.from_exception(
                exc, path, context="delete"
            ) from exc

        if ledger is not None:
            ledger.append(RollbackOperation("delete", path, content=content))

        logger.debug("fs.delete", path=str(path), directory=is_directory)

    async def create_file(
        self,
        path: Path,
        content: bytes = b"",
        *,
        ledger: RollbackLedger | None = None,
    ) -> Path:
        """Create a new file; refuses to overwrite.

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        path = Path(path)
        await self._check_new_entry(path, "create_file")

        try:
            async with await anyio.open_file(path, "xb") as handle:
                await handle.write(content)
        except OSError as exc:
            raise FileOperationError.from_exception(
                exc, path, context="create_file"
            ) from exc

        if ledger is not None:
            ledger.append(RollbackOperation("create", path))
        return path

    async def create_directory(
        self, path: Path, *, ledger: RollbackLedger | None = None
    ) -> Path:
        """Create a single new directory; the parent must already exist.

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        path = Path(path)
        await self._check_new_entry(path, "create_directory")

        try:
            await anyio.Path(path).mkdir()
        except OSError as exc:
            raise FileOperationError.from_exception(
                exc, path, context="create_directory"
            ) from exc

        if ledger is not None:
            ledger.append(RollbackOperation("create", path))
        return path

    async def rename(
        self,
        old_path: Path,
        new_path: Path,
        *,
        ledger: RollbackLedger | None = None,
    ) -> Path:
        """Rename ``old_path`` to exactly ``new_path``.

        Unlike copy/move, an occupied target is an error rather than a
        trigger for a numbered name.

        Raises:
            FileOperationError: On validation or filesystem failure
        """
        old_path = Path(old_path)
        new_path = Path(new_path)

        if not await self._paths.path_exists(old_path):
            raise FileOperationError(
                ErrorKind.FILE_NOT_FOUND,
                old_path,
                "Source file does not exist",
                context="rename",
            )
        if await self._paths.path_exists(new_path):
            raise FileOperationError(
                ErrorKind.FILE_ALREADY_EXISTS,
                new_path,
                "Target file already exists",
                context="rename",
            )
        _raise_error(self._gate.check_name(new_path, context="rename"))

        permission = await self._permissions.check_operation_permission(
            old_path, "delete"
        )
        if not permission.allowed:
            raise FileOperationError(
                ErrorKind.PERMISSION_DENIED,
                old_path,
                permission.reason or "Cannot rename file",
                context="rename",
            )
        permission = await self._permissions.check_operation_permission(
            new_path.parent, "write"
        )
        if not permission.allowed:
            raise FileOperationError(
                ErrorKind.PERMISSION_DENIED,
                new_path,
                permission.reason or "Cannot create file in target directory",
                context="rename",
            )

        try:
            await anyio.Path(old_path).rename(new_path)
        except OSError as exc:
            raise FileOperationError.from_exception(
                exc, old_path, context="rename"
            ) from exc

        if ledger is not None:
            ledger.append(RollbackOperation("move", old_path, target_path=new_path))
        return new_path

    async def stat(self, path: Path) -> FileStats:
        """Collect size, timestamps and permission flags for ``path``.

        Raises:
            FileOperationError: If the path does not exist or cannot be read
        """
        path = Path(path)
        if not await self._paths.path_exists(path):
            raise FileOperationError(
                ErrorKind.FILE_NOT_FOUND, path, "File does not exist", context="stat"
            )

        try:
            info = await anyio.Path(path).stat()
        except OSError as exc:
            raise FileOperationError.from_exception(
                exc, path, context="stat"
            ) from exc

        readonly, executable, hidden = await self._permissions.describe(path)
        created = getattr(info, "st_birthtime", info.st_ctime)

        return FileStats(
            size=info.st_size,
            modified=datetime.fromtimestamp(info.st_mtime, tz=UTC),
            created=datetime.fromtimestamp(created, tz=UTC),
            is_directory=await anyio.Path(path).is_dir(),
            readonly=readonly,
            executable=executable,
            hidden=hidden,
        )

    async def _claim_target(self, directory: Path, name: str) -> Path:
        async def is_taken(candidate: Path) -> bool:
            exists = await self._paths.path_exists(candidate)
            # Checked after the await so no sibling can claim in between
            return exists or candidate in self._reserved

        unique = await resolve_unique_name(directory, name, is_taken)
        target = directory / unique
        self._reserved.add(target)
        return target

    async def _check_new_entry(self, path: Path, context: str) -> None:
        _raise_error(self._gate.check_name(path, context=context))

        if await self._paths.path_exists(path):
            raise FileOperationError(
                ErrorKind.FILE_ALREADY_EXISTS,
                path,
                "Path already exists",
                context=context,
            )

        parent = path.parent
        if not await self._paths.path_exists(parent):
            raise FileOperationError(
                ErrorKind.FILE_NOT_FOUND,
                parent,
                "Parent directory does not exist",
                context=context,
            )

        permission = await self._permissions.check_operation_permission(
            parent, "write"
        )
        if not permission.allowed:
            raise FileOperationError(
                ErrorKind.PERMISSION_DENIED,
                path,
                permission.reason or "Cannot create entries in parent directory",
                context=context,
            )

    @staticmethod
    async def _raise_if(check: Awaitable[FileOperationError | None]) -> None:
        _raise_error(await check)


def _raise_error(error: FileOperationError | None) -> None:
    if error is not None:
        raise error


async def _discard_partial(target: Path) -> None:
    """Remove whatever a failed copy left at ``target``.

    Cleanup failures are logged; the copy error is what the caller sees.
    """
    partial = anyio.Path(target)
    if not (await partial.is_symlink() or await partial.exists()):
        return
    try:
        await remove_path(target)
    except OSError as exc:
        logger.warning("fs.copy_cleanup_failed", target=str(target), error=str(exc))
