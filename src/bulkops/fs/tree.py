"""Asynchronous copy/remove primitives for files and directory trees.

Directory walks use an explicit stack of pending entries rather than
recursion. Symlinks inside a tree are recreated as links (copy) or unlinked
(remove), never followed.
"""

import shutil
from pathlib import Path

import anyio


async def copy_file(source: Path, target: Path) -> None:
    """Byte-for-byte copy of a single file, run off the event loop."""
    await anyio.to_thread.run_sync(shutil.copyfile, str(source), str(target))


async def copy_tree(source: Path, target: Path) -> int:
    """Copy a directory tree depth-first.

    Args:
        source: Existing directory to copy
        target: Directory to create; must not exist yet

    Returns:
        Number of files and links copied

    Raises:
        OSError: On the first filesystem failure
    """
    copied = 0
    pending: list[tuple[anyio.Path, anyio.Path]] = [
        (anyio.Path(source), anyio.Path(target))
    ]

    while pending:
        src_dir, dst_dir = pending.pop()
        await dst_dir.mkdir()

        subdirs: list[tuple[anyio.Path, anyio.Path]] = []
        async for entry in src_dir.iterdir():
            dst_entry = dst_dir / entry.name
            if await entry.is_symlink():
                await dst_entry.symlink_to(await entry.readlink())
                copied += 1
            elif await entry.is_dir():
                subdirs.append((entry, dst_entry))
            else:
                await copy_file(Path(entry), Path(dst_entry))
                copied += 1

        # Reversed so the first subdirectory is walked first
        pending.extend(reversed(subdirs))

    return copied


async def remove_path(path: Path) -> None:
    """Remove a file, link or whole directory tree.

    Directories are emptied post-order: every child is removed before its
    parent's ``rmdir``.

    Raises:
        OSError: On the first filesystem failure
    """
    root = anyio.Path(path)
    if await root.is_symlink() or not await root.is_dir():
        await root.unlink()
        return

    pending: list[tuple[anyio.Path, bool]] = [(root, False)]
    while pending:
        current, expanded = pending.pop()
        if expanded:
            await current.rmdir()
            continue

        pending.append((current, True))
        async for entry in current.iterdir():
            if await entry.is_dir() and not await entry.is_symlink():
                pending.append((entry, False))
            else:
                await entry.unlink()
