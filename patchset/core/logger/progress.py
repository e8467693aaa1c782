"""
Index and Normalization Summaries.

Formatted logging helpers for the outcome of an index build and of a
normalization fit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..paths import LOGGER_NAME
from .styles import LogStyle

if TYPE_CHECKING:  # pragma: no cover
    from ...data_handler.catalog import ClassCatalog
    from ...data_handler.normalizer import NormalizationStats
    from ...data_handler.path_store import PathStore

logger = logging.getLogger(LOGGER_NAME)

_MAX_LISTED_CLASSES = 5


def _format_channels(values: tuple[float, ...]) -> str:
    """Format per-channel statistics for log display."""
    return "[" + ", ".join(f"{v:.4f}" for v in values) + "]"


def log_index_summary(
    catalog: ClassCatalog,
    store: PathStore,
    elapsed: float | None = None,
    logger_instance: logging.Logger | None = None,
) -> None:
    """
    Log a compact summary of a freshly built index.

    Args:
        catalog: Built class catalog
        store: Built path store
        elapsed: Build duration in seconds (omitted when None)
        logger_instance: Logger instance to use (defaults to module logger)
    """
    log = logger_instance or logger

    sizes = [len(r) for r in store.class_list]
    head = ", ".join(catalog.class_names[:_MAX_LISTED_CLASSES])
    if len(catalog) > _MAX_LISTED_CLASSES:
        head += ", ..."

    log.info(LogStyle.LIGHT)
    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Classes':<14}: {len(catalog)} ({head})")
    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Images':<14}: {len(store):,}")
    log.info(
        f"{LogStyle.INDENT}{LogStyle.ARROW} {'Per class':<14}: "
        f"min={min(sizes)} max={max(sizes)}"
    )
    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Path stride':<14}: {store.stride} bytes")
    if elapsed is not None:
        log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Build time':<14}: {elapsed:.2f}s")
    log.info(f"{LogStyle.INDENT}{LogStyle.SUCCESS} Index ready")


def log_normalization_summary(
    stats: NormalizationStats,
    num_samples: int,
    logger_instance: logging.Logger | None = None,
) -> None:
    """
    Log fitted per-channel statistics.

    Args:
        stats: Fitted statistics
        num_samples: Number of samples observed during the fit
        logger_instance: Logger instance to use (defaults to module logger)
    """
    log = logger_instance or logger

    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Samples':<14}: {num_samples:,}")
    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Mean':<14}: {_format_channels(stats.mean)}")
    log.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {'Std':<14}: {_format_channels(stats.std)}")
