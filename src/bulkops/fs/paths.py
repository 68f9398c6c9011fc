"""Local-filesystem path validator.

This module provides the default implementation of the ``PathValidator``
collaborator: existence and type checks, file name validation and unique
name generation.
"""

import os
from pathlib import Path, PurePath

import anyio

from bulkops.core.constants import (
    INVALID_FILE_NAME_CHARS,
    MAX_FILE_NAME_LENGTH,
    WINDOWS_RESERVED_NAMES,
)
from bulkops.core.schemas import NameValidation
from bulkops.fs.collisions import resolve_unique_name


def validate_file_name(name: str, *, windows: bool | None = None) -> NameValidation:
    """Validate a single file name for the current platform.

    Args:
        name: File name without any directory component
        windows: Apply Windows rules; defaults to the running platform

    Returns:
        NameValidation with an error message when invalid
    """
    if windows is None:
        windows = os.name == "nt"

    if not name or not name.strip():
        return NameValidation(False, "File name must not be empty")

    if len(name) > MAX_FILE_NAME_LENGTH:
        return NameValidation(
            False, f"File name is too long (max {MAX_FILE_NAME_LENGTH} characters)"
        )

    bad = sorted({char for char in name if char in INVALID_FILE_NAME_CHARS})
    if bad:
        shown = " ".join(repr(char) if char == "\0" else char for char in bad)
        return NameValidation(False, f"File name contains invalid characters: {shown}")

    if name != name.strip(" "):
        return NameValidation(
            False, "File name must not start or end with a space"
        )

    if windows:
        if "\\" in name:
            return NameValidation(False, "File name contains invalid characters: \\")
        if PurePath(name).stem.upper() in WINDOWS_RESERVED_NAMES:
            return NameValidation(False, f'"{name}" is a reserved file name')
        if name.startswith(".") or name.endswith("."):
            return NameValidation(
                False, "File name must not start or end with a dot on Windows"
            )

    return NameValidation(True)


class LocalPathValidator:
    """Path checks against the local filesystem.

    Every check is awaited, so sibling tasks may run between checks.
    """

    async def path_exists(self, path: Path) -> bool:
        return await anyio.Path(path).exists()

    async def is_directory(self, path: Path) -> bool:
        return await anyio.Path(path).is_dir()

    def validate_file_name(self, name: str) -> NameValidation:
        return validate_file_name(name)

    async def generate_unique_file_name(self, directory: Path, name: str) -> str:
        return await resolve_unique_name(Path(directory), name, self.path_exists)
