"""
Semantic type Definitions & Validation Primitives.

Annotated pydantic types shared by the configuration schemas. Constraints are
enforced at schema construction so invalid sample shapes, batch sizes or
paths never reach the index builder or the sampler.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, PlainSerializer


# VALIDATORS
def _sanitize_path(v: str | Path) -> Path:
    """
    Resolve path to absolute form without disk side-effects.

    Expands user home directory (~) and converts to absolute path. No
    filesystem validation is performed to avoid I/O during schema
    initialization.

    Args:
        v: Path object or string to sanitize

    Returns:
        Absolute Path with home directory expanded
    """
    return Path(v).expanduser().resolve()


# GENERIC PRIMITIVES
PositiveInt = Annotated[int, Field(gt=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]

# FILESYSTEM
ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str),
]

# SAMPLE GEOMETRY
Channels = Literal[1, 3]
ImageSize = Annotated[int, Field(ge=1, le=4096)]
SamplesPerImage = Annotated[int, Field(ge=1, le=64)]

# SAMPLING
BatchSize = Annotated[int, Field(ge=1, le=65536)]
CropVariant = Literal["default", "train", "test", "ten_crop"]
EnumeratorName = Literal["auto", "find", "walk"]

# SYSTEM
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
