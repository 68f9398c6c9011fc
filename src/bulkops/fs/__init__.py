"""Filesystem primitives for bulk copy/move/delete with rollback.

This module provides the single-item executor, the validation gate, the
collision resolver, the rollback ledger and the default local-filesystem
collaborators.
"""

from bulkops.fs.collisions import resolve_unique_name, split_name
from bulkops.fs.fs_ops import OperationExecutor
from bulkops.fs.paths import LocalPathValidator, validate_file_name
from bulkops.fs.permissions import LocalPermissionChecker
from bulkops.fs.rollback import RollbackLedger
from bulkops.fs.validation import ValidationGate

__all__ = [
    "LocalPathValidator",
    "LocalPermissionChecker",
    "OperationExecutor",
    "RollbackLedger",
    "ValidationGate",
    "resolve_unique_name",
    "split_name",
    "validate_file_name",
]
