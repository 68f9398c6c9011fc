"""Core constants for bulkops.

This module defines constants used throughout the application:
- Batch scheduling defaults
- File name validation rules
- Retry/backoff limits
"""

# ============================================================================
# Batch Scheduling
# ============================================================================

#: Number of items dispatched concurrently within one slice
DEFAULT_MAX_CONCURRENCY: int = 5

#: Per-item retries of recoverable errors (0 disables retrying)
DEFAULT_MAX_RETRIES: int = 0

#: Base delay in seconds for exponential backoff between retries
DEFAULT_RETRY_BASE_DELAY: float = 0.1

#: Upper bound for a single backoff delay, in seconds
MAX_BACKOFF_SECONDS: float = 60.0

# ============================================================================
# File Name Validation
# ============================================================================

#: Longest accepted file name, in characters
MAX_FILE_NAME_LENGTH: int = 255

#: Characters rejected in file names on every platform
INVALID_FILE_NAME_CHARS: frozenset[str] = frozenset('<>:"|?*/\0')

#: Device names Windows refuses regardless of extension
WINDOWS_RESERVED_NAMES: frozenset[str] = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)

# ============================================================================
# Configuration
# ============================================================================

#: Environment variable prefix for settings
ENV_PREFIX: str = "BULKOPS_"

#: Default structlog level name
DEFAULT_LOG_LEVEL: str = "INFO"
