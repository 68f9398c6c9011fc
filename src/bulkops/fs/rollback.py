"""Undo ledger for batch mutations.

Entries are appended right after each mutation succeeds and replayed in
reverse (LIFO) order when a batch aborts. Replay is best-effort: a failed
undo step is logged and the remaining steps still run.
"""

from pathlib import Path

import anyio

from bulkops.core.schemas import RollbackOperation, RollbackReport
from bulkops.fs.protocols import AuditSink
from bulkops.fs.tree import remove_path
from bulkops.utils.logging import AuditLog


class RollbackLedger:
    """Append-only list of completed mutations for one batch run."""

    def __init__(self) -> None:
        self._operations: list[RollbackOperation] = []

    def append(self, operation: RollbackOperation) -> None:
        self._operations.append(operation)

    def entries(self) -> list[RollbackOperation]:
        """Snapshot of the ledger in append order."""
        return list(self._operations)

    def clear(self) -> None:
        self._operations.clear()

    def __len__(self) -> int:
        return len(self._operations)

    async def replay(self, audit: AuditSink | None = None) -> RollbackReport:
        """Undo every recorded mutation, newest first.

        The ledger is cleared afterwards whether or not every step succeeded.

        Args:
            audit: Optional audit sink for per-step records

        Returns:
            RollbackReport with undone/skipped counts and failure messages
        """
        log = audit or AuditLog()
        report = RollbackReport()
        log.record("rollback.start", operations=len(self._operations))

        try:
            for operation in reversed(self.entries()):
                try:
                    undone = await self._undo(operation, log)
                except Exception as exc:
                    message = f"{operation.kind} {operation.original_path}: {exc}"
                    report.failures.append(message)
                    log.record(
                        "rollback.step_failed",
                        level="warning",
                        kind=operation.kind,
                        original_path=str(operation.original_path),
                        target_path=_str_or_none(operation.target_path),
                        error=str(exc),
                    )
                    continue

                if undone:
                    report.undone += 1
                else:
                    report.skipped += 1
        finally:
            self.clear()

        log.record(
            "rollback.summary",
            undone=report.undone,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def _undo(self, operation: RollbackOperation, log: AuditSink) -> bool:
        original = anyio.Path(operation.original_path)

        if operation.kind == "create":
            if not await original.exists():
                return False
            await remove_path(operation.original_path)
            return True

        if operation.kind == "delete":
            if operation.content is None:
                # Deleted directories were recorded by path only
                log.record(
                    "rollback.directory_not_restorable",
                    level="warning",
                    original_path=str(operation.original_path),
                )
                return False
            await original.write_bytes(operation.content)
            return True

        target = operation.target_path
        if target is None or not await anyio.Path(target).exists():
            return False

        if operation.kind == "move":
            await anyio.Path(target).rename(original)
            return True

        # copy
        await remove_path(target)
        return True


def _str_or_none(path: Path | None) -> str | None:
    return str(path) if path is not None else None
