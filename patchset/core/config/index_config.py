"""
Index Construction Schema.

Declares where images live and how they are enumerated: dataset roots,
exclusion globs and the bulk enumeration backend.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import EnumeratorName, ValidatedPath


# INDEX CONFIGURATION
class IndexConfig(BaseModel):
    """
    Dataset discovery configuration.

    Attributes:
        roots: One or more dataset roots laid out as ``root/class/image``.
            Classes sharing a name across roots are merged.
        exclude_file: Case-insensitive file-name glob to skip.
        exclude_dir: Path glob; files whose full path matches are skipped.
        enumerator: Bulk enumeration backend (``find``, ``walk`` or ``auto``).
        verbose: Show progress bars and summaries while building.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    roots: tuple[ValidatedPath, ...] = Field(min_length=1, description="Dataset root directories")
    exclude_file: str | None = Field(default=None, description="File-name exclusion glob")
    exclude_dir: str | None = Field(default=None, description="Path exclusion glob")
    enumerator: EnumeratorName = Field(default="auto", description="Bulk enumerator backend")
    verbose: bool = Field(default=True, description="Progress reporting")

    @field_validator("roots", mode="before")
    @classmethod
    def _coerce_single_root(cls, v):
        """Accept a single path where a sequence is expected."""
        if isinstance(v, (str, bytes)) or hasattr(v, "__fspath__"):
            return (v,)
        return v
