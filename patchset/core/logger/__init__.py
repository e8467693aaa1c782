"""
Logging Package.

Centralizes logger initialization and the formatted summaries emitted while
building an index or fitting normalization statistics.

Available Components:

- Logger: Static utility for stream and file logging initialization.
- LogStyle: Unified logging style constants.
- Summary functions: index build and normalization summaries.
"""

from .logger import ColorFormatter, Logger
from .progress import log_index_summary, log_normalization_summary
from .styles import LogStyle

__all__ = [
    "Logger",
    "ColorFormatter",
    "LogStyle",
    "log_index_summary",
    "log_normalization_summary",
]
