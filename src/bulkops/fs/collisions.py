"""Unique-name generation for occupied destination paths.

``report.pdf`` collides into ``report (1).pdf``, ``report (2).pdf``, ...
The counter restarts at 1 for every resolution and counts upward one step
at a time.
"""

from collections.abc import Awaitable, Callable
from pathlib import Path, PurePath

IsTaken = Callable[[Path], Awaitable[bool]]


def split_name(name: str) -> tuple[str, str]:
    """Split a file name into base and final extension.

    Dotfiles such as ``.bashrc`` have no extension.

    Examples:
        >>> split_name("archive.tar.gz")
        ('archive.tar', '.gz')
        >>> split_name(".bashrc")
        ('.bashrc', '')
    """
    pure = PurePath(name)
    return pure.stem, pure.suffix


def numbered_name(name: str, counter: int) -> str:
    """Return ``name`` with `` (counter)`` inserted before the extension."""
    base, ext = split_name(name)
    return f"{base} ({counter}){ext}"


async def resolve_unique_name(directory: Path, name: str, is_taken: IsTaken) -> str:
    """Find the first free name for ``name`` inside ``directory``.

    Tries sequentially: ``name`` itself, then ``name (1)``, ``name (2)``...

    Args:
        directory: Directory the name will live in
        name: Preferred file name
        is_taken: Async predicate telling whether a path is occupied

    Returns:
        The preferred name if free, otherwise the first free numbered name
    """
    if not await is_taken(directory / name):
        return name

    counter = 1
    while True:
        candidate = numbered_name(name, counter)
        if not await is_taken(directory / candidate):
            return candidate
        counter += 1
