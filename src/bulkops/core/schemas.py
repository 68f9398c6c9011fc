"""Data structures shared by the batch engine.

- BatchOperationOptions: closed options model for a batch call (pydantic)
- BatchOperationResult: aggregated per-item outcomes of a batch call
- RollbackOperation: one undo ledger entry
- NameValidation / PermissionResult: collaborator check results
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from bulkops.core.constants import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BASE_DELAY,
)
from bulkops.core.errors import FileOperationError

#: ``(completed_count, total_count, current_item_path)``
ProgressCallback = Callable[[int, int, Path | None], None]

RollbackKind = Literal["create", "delete", "move", "copy"]
PermissionOp = Literal["read", "write", "delete"]


class BatchOperationOptions(BaseModel):
    """Options for a single batch call.

    Attributes:
        continue_on_error: Record per-item failures and keep going
        enable_rollback: Keep an undo ledger and replay it on abort
        max_concurrency: Slice size; items in a slice run concurrently
        progress_callback: Invoked once per settled item
        max_retries: Retries of recoverable per-item errors
        retry_base_delay: Base delay (seconds) for exponential backoff
    """

    continue_on_error: bool = True
    enable_rollback: bool = False
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    progress_callback: ProgressCallback | None = None
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_base_delay: float = Field(default=DEFAULT_RETRY_BASE_DELAY, ge=0)

    model_config = {"frozen": True, "extra": "forbid"}


@dataclass
class BatchFailure:
    """A source path that reached a failed terminal state."""

    path: Path
    error: FileOperationError


@dataclass
class BatchOperationResult:
    """Summary of a batch call that ran to completion."""

    successful: list[Path] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)
    total_processed: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to a JSON-friendly dictionary."""
        return {
            "successful": [str(path) for path in self.successful],
            "failed": [
                {"path": str(item.path), **item.error.to_dict()}
                for item in self.failed
            ],
            "total_processed": self.total_processed,
        }


@dataclass
class RollbackOperation:
    """Undo ledger entry recorded after a successful mutation.

    ``content`` is only captured for deleted files; deleted directories
    carry the path alone.
    """

    kind: RollbackKind
    original_path: Path
    target_path: Path | None = None
    content: bytes | None = None
    backup_path: Path | None = None


@dataclass
class RollbackReport:
    """Outcome of replaying a rollback ledger."""

    undone: int = 0
    skipped: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class NameValidation:
    """Result of validating a single file name."""

    is_valid: bool
    error_message: str | None = None


@dataclass(frozen=True)
class PermissionResult:
    """Result of a permission check."""

    allowed: bool
    reason: str | None = None


@dataclass(frozen=True)
class FileStats:
    """Filesystem metadata for a single path."""

    size: int
    modified: datetime
    created: datetime
    is_directory: bool
    readonly: bool
    executable: bool
    hidden: bool
