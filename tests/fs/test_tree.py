"""Tests for tree copy/remove primitives."""

import os
from pathlib import Path

import pytest

from bulkops.fs.tree import copy_file, copy_tree, remove_path

symlinks = pytest.mark.skipif(not hasattr(os, "symlink"), reason="no symlinks")


def _build_tree(root: Path) -> None:
    (root / "a" / "b" / "c").mkdir(parents=True)
    (root / "top.txt").write_text("top")
    (root / "a" / "mid.txt").write_text("mid")
    (root / "a" / "b" / "c" / "deep.bin").write_bytes(b"\x00\x01")
    (root / "empty").mkdir()


@pytest.mark.asyncio
async def test_copy_file(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("hello")

    await copy_file(source, tmp_path / "b.txt")

    assert (tmp_path / "b.txt").read_text() == "hello"


class TestCopyTree:
    """Test explicit-stack tree copy."""

    @pytest.mark.asyncio
    async def test_copies_nested_structure(self, tmp_path: Path) -> None:
        source = tmp_path / "source"
        _build_tree(source)

        copied = await copy_tree(source, tmp_path / "copy")

        target = tmp_path / "copy"
        assert copied == 3
        assert (target / "top.txt").read_text() == "top"
        assert (target / "a" / "mid.txt").read_text() == "mid"
        assert (target / "a" / "b" / "c" / "deep.bin").read_bytes() == b"\x00\x01"
        assert (target / "empty").is_dir()
        assert (source / "top.txt").exists()

    @pytest.mark.asyncio
    async def test_existing_target_raises(self, tmp_path: Path) -> None:
        source = tmp_path / "source"
        _build_tree(source)
        (tmp_path / "copy").mkdir()

        with pytest.raises(FileExistsError):
            await copy_tree(source, tmp_path / "copy")

    @symlinks
    @pytest.mark.asyncio
    async def test_symlinks_are_recreated(self, tmp_path: Path) -> None:
        source = tmp_path / "source"
        _build_tree(source)
        (source / "link.txt").symlink_to("top.txt")

        await copy_tree(source, tmp_path / "copy")

        link = tmp_path / "copy" / "link.txt"
        assert link.is_symlink()
        assert os.readlink(link) == "top.txt"


class TestRemovePath:
    """Test post-order tree removal."""

    @pytest.mark.asyncio
    async def test_removes_file(self, tmp_path: Path) -> None:
        file_path = tmp_path / "a.txt"
        file_path.write_text("x")

        await remove_path(file_path)

        assert not file_path.exists()

    @pytest.mark.asyncio
    async def test_removes_tree(self, tmp_path: Path) -> None:
        root = tmp_path / "tree"
        _build_tree(root)

        await remove_path(root)

        assert not root.exists()
        assert list(tmp_path.iterdir()) == []

    @symlinks
    @pytest.mark.asyncio
    async def test_does_not_follow_directory_links(self, tmp_path: Path) -> None:
        keep = tmp_path / "keep"
        keep.mkdir()
        (keep / "precious.txt").write_text("x")
        root = tmp_path / "tree"
        root.mkdir()
        (root / "link").symlink_to(keep, target_is_directory=True)

        await remove_path(root)

        assert not root.exists()
        assert (keep / "precious.txt").exists()

    @pytest.mark.asyncio
    async def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await remove_path(tmp_path / "missing")
