"""Bounded-concurrency batch driver.

Sources are cut into contiguous slices of ``max_concurrency`` items. Slices
run strictly one after another; the items of a slice run concurrently in an
anyio task group and the whole slice settles before the next one starts.

State progression::

    idle -> validating -> running -> succeeded
                                  -> aborting -> rolling_back -> aborted

When ``continue_on_error`` is off, the first failure to settle aborts the
batch, but only after its slice has fully settled, so no sibling can mutate
the filesystem once rollback begins.
"""

import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TypeVar

import anyio

from bulkops.core.errors import FileOperationError
from bulkops.core.retry import run_with_retry
from bulkops.core.schemas import (
    BatchFailure,
    BatchOperationOptions,
    BatchOperationResult,
)
from bulkops.fs.protocols import AuditSink
from bulkops.fs.rollback import RollbackLedger
from bulkops.utils.logging import AuditLog

T = TypeVar("T")

BatchState = Literal[
    "idle",
    "validating",
    "running",
    "succeeded",
    "aborting",
    "rolling_back",
    "aborted",
]

ItemAction = Callable[[Path, RollbackLedger | None], Awaitable[Any]]
Precheck = Callable[[], Awaitable[FileOperationError | None]]


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into contiguous slices of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"slice size must be >= 1, got {size}")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


@dataclass
class _Settled:
    source: Path
    error: FileOperationError | None = None


@dataclass
class _BatchRun:
    operation: str
    action: ItemAction
    options: BatchOperationOptions
    ledger: RollbackLedger | None
    audit: AuditSink
    total: int
    completed: int = 0
    abort_error: FileOperationError | None = None
    slots: list[_Settled | None] = field(default_factory=list)


class BatchScheduler:
    """Drives batch calls over an item action.

    Every rollback-enabled ``run()`` gets its own ledger, so concurrent
    batches on one scheduler never see each other's undo entries.
    ``ledger`` exposes the most recently started run's ledger for
    diagnostics only.
    """

    def __init__(self, audit: AuditSink | None = None) -> None:
        self._audit = audit or AuditLog()
        self._current: RollbackLedger | None = None
        self.state: BatchState = "idle"

    @property
    def ledger(self) -> RollbackLedger:
        """Ledger of the active run, or an empty one between runs."""
        if self._current is None:
            return RollbackLedger()
        return self._current

    async def run(
        self,
        operation: str,
        sources: Sequence[str | Path],
        action: ItemAction,
        options: BatchOperationOptions,
        *,
        precheck: Precheck | None = None,
        **context: Any,
    ) -> BatchOperationResult:
        """Run ``action`` over every source.

        Args:
            operation: Operation name for logs and error context
            sources: Ordered source paths
            action: Coroutine applied to each source with the active ledger
            options: Batch options
            precheck: Whole-batch check run before any item starts
            **context: Extra fields bound onto every audit record

        Returns:
            BatchOperationResult covering every source

        Raises:
            FileOperationError: Precheck failure, or the aborting item error
                when ``continue_on_error`` is off
        """
        paths = [Path(source) for source in sources]
        audit = self._audit.bind(
            operation=operation, batch_id=uuid.uuid4().hex[:12], **context
        )
        audit.record(
            "batch.start",
            total=len(paths),
            continue_on_error=options.continue_on_error,
            enable_rollback=options.enable_rollback,
            max_concurrency=options.max_concurrency,
        )

        self.state = "validating"
        if precheck is not None:
            error = await precheck()
            if error is not None:
                self.state = "aborted"
                audit.record(
                    "batch.precondition_failed", level="error", **error.to_dict()
                )
                raise error

        ledger: RollbackLedger | None = None
        if options.enable_rollback:
            ledger = RollbackLedger()
            self._current = ledger

        run = _BatchRun(
            operation=operation,
            action=action,
            options=options,
            ledger=ledger,
            audit=audit,
            total=len(paths),
        )
        result = BatchOperationResult()

        try:
            for chunk in partition(paths, options.max_concurrency):
                self.state = "running"
                run.slots = [None] * len(chunk)

                async with anyio.create_task_group() as tg:
                    for position, source in enumerate(chunk):
                        tg.start_soon(self._run_item, run, position, source)

                for settled in run.slots:
                    if settled is None:
                        continue
                    if settled.error is None:
                        result.successful.append(settled.source)
                    else:
                        result.failed.append(
                            BatchFailure(settled.source, settled.error)
                        )
                result.total_processed += len(chunk)

                if run.abort_error is not None:
                    await self._abort(run.abort_error, ledger, audit)

            self.state = "succeeded"
            if ledger is not None:
                ledger.clear()
        finally:
            if ledger is not None and self._current is ledger:
                self._current = None

        audit.record(
            "batch.summary",
            total=len(paths),
            successful=len(result.successful),
            failed=len(result.failed),
            total_processed=result.total_processed,
        )
        return result

    async def _run_item(self, run: _BatchRun, position: int, source: Path) -> None:
        def on_retry(attempt: int, delay: float, exc: FileOperationError) -> None:
            run.audit.record(
                "batch.retry",
                level="warning",
                source=str(source),
                attempt=attempt,
                delay=delay,
                error=exc.kind.value,
            )

        error: FileOperationError | None = None
        try:
            await run_with_retry(
                lambda: run.action(source, run.ledger),
                max_retries=run.options.max_retries,
                base_delay=run.options.retry_base_delay,
                on_retry=on_retry,
            )
        except Exception as exc:
            error = FileOperationError.from_exception(
                exc, source, context=run.operation
            )

        run.slots[position] = _Settled(source, error)
        run.completed += 1

        if error is None:
            run.audit.record("batch.item", source=str(source), status="ok")
        else:
            run.audit.record(
                "batch.item",
                level="warning",
                source=str(source),
                status="failed",
                error=error.kind.value,
                message=error.message,
            )
            if not run.options.continue_on_error and run.abort_error is None:
                run.abort_error = error

        callback = run.options.progress_callback
        if callback is not None:
            try:
                callback(run.completed, run.total, source)
            except Exception as exc:
                run.audit.record(
                    "batch.progress_callback_failed", level="warning", error=str(exc)
                )

    async def _abort(
        self,
        error: FileOperationError,
        ledger: RollbackLedger | None,
        audit: AuditSink,
    ) -> None:
        self.state = "aborting"
        audit.record("batch.aborted", level="error", **error.to_dict())

        if ledger is not None:
            self.state = "rolling_back"
            await ledger.replay(audit)

        self.state = "aborted"
        raise error
