"""
Filesystem Conventions Package.

Exposes the constants shared by the index builder, the sampler and the
logging layer.
"""

from .constants import DEFAULT_MAX_RETRIES, HIDDEN_PREFIX, IMAGE_EXTENSIONS, LOGGER_NAME

__all__ = [
    "LOGGER_NAME",
    "IMAGE_EXTENSIONS",
    "HIDDEN_PREFIX",
    "DEFAULT_MAX_RETRIES",
]
