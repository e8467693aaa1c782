"""
Project-wide Constants.

Single source of truth for the logger identity and the filesystem conventions
used while indexing a ``root/class_name/image_file`` dataset.

Module Attributes:
    LOGGER_NAME: Global logger identity used by all modules for log synchronization.
    IMAGE_EXTENSIONS: Allow-listed image extensions (compared case-insensitively).
    HIDDEN_PREFIX: Directory names starting with this marker are never classes.
    DEFAULT_MAX_RETRIES: Failed draws tolerated by one balanced ``sample`` call.
"""

from typing import Final, FrozenSet

# Global logger identity used by all modules to ensure log synchronization
LOGGER_NAME: Final[str] = "PatchSet"

# Lower-case extensions without the leading dot
IMAGE_EXTENSIONS: Final[FrozenSet[str]] = frozenset({"jpg", "jpeg", "png", "ppm", "bmp"})

HIDDEN_PREFIX: Final[str] = "."

DEFAULT_MAX_RETRIES: Final[int] = 1000
