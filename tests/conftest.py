"""Pytest configuration and fixtures for bulkops tests."""

from pathlib import Path

import pytest

from bulkops.core.config import Settings
from bulkops.core.schemas import PermissionOp, PermissionResult
from bulkops.core.service import FileOperationService, create_file_operation_service
from bulkops.fs.paths import LocalPathValidator
from bulkops.fs.permissions import LocalPermissionChecker


class RecordingAudit:
    """Audit sink that keeps every record in memory."""

    def __init__(self, records: list[dict] | None = None, **bound) -> None:
        self.records: list[dict] = records if records is not None else []
        self._bound = bound

    def bind(self, **fields) -> "RecordingAudit":
        return RecordingAudit(self.records, **{**self._bound, **fields})

    def record(self, event: str, *, level: str = "info", **fields) -> None:
        self.records.append({"event": event, "level": level, **self._bound, **fields})

    def events(self) -> list[str]:
        return [record["event"] for record in self.records]


class DenyingPermissionChecker(LocalPermissionChecker):
    """Local checker that denies chosen (path, operation) pairs."""

    def __init__(self, denied: set[tuple[Path, PermissionOp]]) -> None:
        self._denied = denied

    async def check_operation_permission(
        self, path: Path, operation: PermissionOp
    ) -> PermissionResult:
        if (Path(path), operation) in self._denied:
            return PermissionResult(False, f"{operation} denied by test")
        return await super().check_operation_permission(path, operation)


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def service(audit: RecordingAudit) -> FileOperationService:
    """Service wired to the local filesystem with default settings."""
    return create_file_operation_service(audit=audit, settings=Settings())


@pytest.fixture
def make_service(audit: RecordingAudit):
    """Factory for services with a custom permission checker."""

    def _make(denied: set[tuple[Path, PermissionOp]]) -> FileOperationService:
        return FileOperationService(
            LocalPathValidator(),
            DenyingPermissionChecker(denied),
            audit=audit,
            settings=Settings(),
        )

    return _make


@pytest.fixture
def src_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def dst_dir(tmp_path: Path) -> Path:
    path = tmp_path / "dst"
    path.mkdir()
    return path


def write_files(directory: Path, files: dict[str, str]) -> list[Path]:
    """Create ``files`` (relative name -> text) under ``directory``."""
    created = []
    for name, text in files.items():
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        created.append(path)
    return created


@pytest.fixture(name="write_files")
def write_files_fixture():
    return write_files


@pytest.fixture
def denying_permissions():
    """The DenyingPermissionChecker class, for building custom gates."""
    return DenyingPermissionChecker
