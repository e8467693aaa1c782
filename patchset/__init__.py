"""
PatchSet: class-balanced patch sampling over large image folders.

Top-level convenience API re-exporting the most commonly used components:

    from patchset import ImagePatchSet, SampleConfig
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("patchset")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from .core import Config, IndexConfig, Logger, LogStyle, NormalizationConfig, SampleConfig
from .data_handler import (
    ClassCatalog,
    ImagePatchSet,
    IndexBuilder,
    NormalizationStats,
    Normalizer,
    PathStore,
    SampleBatch,
    Sampler,
    TransformPipeline,
    create_sample_loader,
    load_imagenet_patchsets,
)
from .exceptions import (
    DecodeFailure,
    EmptyClassError,
    NoImagesFoundError,
    PatchSetError,
    SamplingExhaustedError,
    ShapeMismatchError,
    UndersizedSourceError,
)

__all__ = [
    "__version__",
    # Core
    "Config",
    "IndexConfig",
    "SampleConfig",
    "NormalizationConfig",
    "Logger",
    "LogStyle",
    # Engine
    "ImagePatchSet",
    "IndexBuilder",
    "ClassCatalog",
    "PathStore",
    "Sampler",
    "SampleBatch",
    "TransformPipeline",
    "Normalizer",
    "NormalizationStats",
    "load_imagenet_patchsets",
    "create_sample_loader",
    # Errors
    "PatchSetError",
    "NoImagesFoundError",
    "EmptyClassError",
    "DecodeFailure",
    "UndersizedSourceError",
    "ShapeMismatchError",
    "SamplingExhaustedError",
]
