"""Collaborator interfaces consumed by the batch engine."""

from pathlib import Path
from typing import Any, Protocol

from bulkops.core.schemas import NameValidation, PermissionOp, PermissionResult


class PathValidator(Protocol):
    """Path existence, type and naming checks."""

    async def path_exists(self, path: Path) -> bool: ...

    async def is_directory(self, path: Path) -> bool: ...

    def validate_file_name(self, name: str) -> NameValidation: ...

    async def generate_unique_file_name(self, directory: Path, name: str) -> str: ...


class PermissionChecker(Protocol):
    """Answers whether the current process may perform an operation."""

    async def check_operation_permission(
        self, path: Path, operation: PermissionOp
    ) -> PermissionResult: ...

    async def describe(self, path: Path) -> tuple[bool, bool, bool]:
        """Return ``(readonly, executable, hidden)`` flags for ``path``."""
        ...


class AuditSink(Protocol):
    """Free-form operation/result records. Must never raise."""

    def record(self, event: str, *, level: str = "info", **fields: Any) -> None: ...

    def bind(self, **fields: Any) -> "AuditSink": ...
