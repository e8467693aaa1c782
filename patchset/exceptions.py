"""
PatchSet Exception Hierarchy.

PatchSetError (base, Exception)
├── PatchSetConfigError(PatchSetError, ValueError)     ← config validation
├── IndexBuildError(PatchSetError)                     ← fatal, aborts the index build
│   ├── NoImagesFoundError                             ← no image anywhere under the roots
│   ├── EmptyClassError                                ← a class directory without images
│   └── EnumerationError                               ← bulk file enumerator failed
├── SampleError(PatchSetError)                         ← recoverable, per sample
│   ├── DecodeFailure                                  ← image could not be decoded
│   └── UndersizedSourceError                          ← image smaller than the crop
├── ShapeMismatchError(PatchSetError, ValueError)      ← ten-crop / channel mismatch
└── SamplingExhaustedError(PatchSetError, RuntimeError) ← retry ceiling reached

Build-time errors propagate to the caller. ``SampleError`` subclasses are
retried by balanced sampling and zero-filled by indexed access.
"""

from __future__ import annotations


class PatchSetError(Exception):
    """Base exception for all PatchSet errors."""


class PatchSetConfigError(PatchSetError, ValueError):
    """Configuration validation error (backward-compatible with ValueError)."""


# INDEX BUILD
class IndexBuildError(PatchSetError):
    """Index construction failed; no partial dataset is returned."""


class NoImagesFoundError(IndexBuildError):
    """No matching image file was found under any of the given roots."""


class EmptyClassError(IndexBuildError):
    """A discovered class directory contains zero matching image files."""

    def __init__(self, class_name: str, directories: tuple[str, ...] = ()) -> None:
        self.class_name = class_name
        self.directories = directories
        where = f" (searched: {', '.join(directories)})" if directories else ""
        super().__init__(f"Class '{class_name}' has zero samples{where}")


class EnumerationError(IndexBuildError):
    """The bulk file enumerator exited abnormally."""


# PER-SAMPLE
class SampleError(PatchSetError):
    """A single sample could not be produced. Recoverable."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class DecodeFailure(SampleError):
    """The image decoder rejected a file (corrupt, truncated or unsupported)."""


class UndersizedSourceError(SampleError):
    """The source raster is smaller than the requested crop."""


class ShapeMismatchError(PatchSetError, ValueError):
    """Source raster is incompatible with the target shape (not retried)."""


class SamplingExhaustedError(PatchSetError, RuntimeError):
    """Balanced sampling gave up after too many failed draws."""
