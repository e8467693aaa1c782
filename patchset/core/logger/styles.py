"""
Separators, symbols and console colors shared by the index builder, the
normalizer and the summary helpers.
"""

from __future__ import annotations

import logging


class LogStyle:
    """Visual vocabulary of patchset log output."""

    # Width of separators and centered headers
    HEADER_WIDTH = 80

    # Phase separators (index build, normalization fit)
    HEAVY = "━" * HEADER_WIDTH
    LIGHT = "─" * HEADER_WIDTH

    ARROW = "»"
    SUCCESS = "✓"
    INDENT = "  "

    # ANSI escapes; only ColorFormatter emits them, and only on the console
    RESET = "\033[0m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    MAGENTA = "\033[35m"

    @staticmethod
    def log_phase_header(
        log: logging.Logger,
        title: str,
        style: str | None = None,
    ) -> None:
        """Write *title* centered between two separators (``HEAVY`` unless *style* is given)."""
        sep = style if style is not None else LogStyle.HEAVY
        log.info("")
        log.info(sep)
        log.info(f"{title:^{LogStyle.HEADER_WIDTH}}")
        log.info(sep)
