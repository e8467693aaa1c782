"""
Configuration Package Initialization.

Provides a flat public API for the configuration schemas while deferring the
pydantic import until a schema is first accessed.

Architecture:

- Lazy Import Pattern (PEP 562): Uses __getattr__ for on-demand loading
- Flat API: All configs accessible from patchset.core.config namespace
- Caching: Loaded attributes cached in globals() for performance

Example:
    >>> from patchset.core.config import Config, SampleConfig
    >>> cfg = Config.from_yaml(Path("recipes/imagenet.yaml"))
"""

from importlib import import_module
from typing import Any

__all__ = [
    "Config",
    "IndexConfig",
    "SampleConfig",
    "NormalizationConfig",
    "ValidatedPath",
]

# LAZY IMPORTS MAPPING
_PKG = "patchset.core.config"

_LAZY_IMPORTS: dict[str, str] = {
    "Config": f"{_PKG}.manifest",
    "IndexConfig": f"{_PKG}.index_config",
    "SampleConfig": f"{_PKG}.sample_config",
    "NormalizationConfig": f"{_PKG}.normalization_config",
    "ValidatedPath": f"{_PKG}.types",
}


# LAZY LOADER FUNCTION
def __getattr__(name: str) -> Any:
    """
    Lazily import configuration components on first access.

    Args:
        name: Name of the configuration class to import.

    Returns:
        The requested configuration class.

    Raises:
        AttributeError: If name is not in the public API (__all__).
    """
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(_LAZY_IMPORTS[name])
    attr = getattr(module, name)

    globals()[name] = attr
    return attr


# DIR SUPPORT
def __dir__() -> list[str]:
    """Sorted list of public configuration names (IDE auto-completion)."""
    return sorted(__all__)
