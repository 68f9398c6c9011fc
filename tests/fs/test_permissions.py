"""Tests for the local permission checker."""

import os
from pathlib import Path

import pytest

from bulkops.fs.permissions import LocalPermissionChecker, is_hidden

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0


def test_is_hidden() -> None:
    assert is_hidden(Path("/home/me/.profile"))
    assert not is_hidden(Path("/home/me/profile"))


class TestCheckOperationPermission:
    """Test read/write/delete decisions."""

    @pytest.mark.asyncio
    async def test_existing_file_allows_everything(self, tmp_path: Path) -> None:
        checker = LocalPermissionChecker()
        file_path = tmp_path / "a.txt"
        file_path.write_text("x")

        for operation in ("read", "write", "delete"):
            result = await checker.check_operation_permission(file_path, operation)
            assert result.allowed, operation
            assert result.reason is None

    @pytest.mark.asyncio
    async def test_missing_path_denied_for_read_and_delete(
        self, tmp_path: Path
    ) -> None:
        checker = LocalPermissionChecker()
        missing = tmp_path / "missing.txt"

        for operation in ("read", "delete"):
            result = await checker.check_operation_permission(missing, operation)
            assert not result.allowed
            assert result.reason == "File or directory does not exist"

    @pytest.mark.asyncio
    async def test_missing_path_write_checks_parent(self, tmp_path: Path) -> None:
        result = await LocalPermissionChecker().check_operation_permission(
            tmp_path / "new.txt", "write"
        )

        assert result.allowed

    @pytest.mark.asyncio
    @pytest.mark.skipif(running_as_root, reason="root bypasses permission bits")
    async def test_read_only_file_cannot_be_deleted(self, tmp_path: Path) -> None:
        file_path = tmp_path / "locked.txt"
        file_path.write_text("x")
        file_path.chmod(0o444)
        try:
            result = await LocalPermissionChecker().check_operation_permission(
                file_path, "delete"
            )
        finally:
            file_path.chmod(0o644)

        assert not result.allowed
        assert result.reason == "File is read-only"

    @pytest.mark.asyncio
    async def test_describe(self, tmp_path: Path) -> None:
        file_path = tmp_path / ".hidden"
        file_path.write_text("x")

        readonly, executable, hidden = await LocalPermissionChecker().describe(
            file_path
        )

        assert readonly is False
        assert hidden is True
        assert isinstance(executable, bool)
