"""
Test Suite for Logging Management Module.

Tests logger configuration, file rotation, reconfiguration, color
formatting and the index/normalization summaries.
"""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest

from patchset.core.logger import (
    ColorFormatter,
    Logger,
    LogStyle,
    log_index_summary,
    log_normalization_summary,
)
from patchset.core.paths import LOGGER_NAME
from patchset.data_handler.catalog import ClassCatalog
from patchset.data_handler.normalizer import NormalizationStats
from patchset.data_handler.path_store import PathStore


def _record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=level, pathname="", lineno=0, msg=msg, args=(), exc_info=None
    )


# LOGGER: INITIALIZATION
@pytest.mark.unit
def test_logger_init_console_only():
    """Logger installs a single console handler when no log_dir is given."""
    logger = Logger(name="ps_console", log_dir=None, log_to_file=False)

    assert logger.log_to_file is False
    assert len(logger._log.handlers) == 1
    assert logger._log.propagate is False


@pytest.mark.unit
def test_logger_init_with_file(tmp_path):
    """Console and rotating file handlers are installed when log_dir is set."""
    log_dir = tmp_path / "logs"
    logger = Logger(name="ps_file", log_dir=log_dir, max_bytes=1024, backup_count=3)

    assert log_dir.is_dir()
    assert len(logger._log.handlers) == 2
    file_handler = next(h for h in logger._log.handlers if hasattr(h, "maxBytes"))
    assert file_handler.maxBytes == 1024
    assert file_handler.backupCount == 3


@pytest.mark.unit
def test_logger_default_name():
    """The default logger is the shared PatchSet logger."""
    assert Logger().name == LOGGER_NAME


@pytest.mark.unit
def test_logger_writes_to_file(tmp_path):
    """Messages reach the timestamped log file."""
    log_dir = tmp_path / "logs"
    log = Logger(name="ps_write", log_dir=log_dir).get_logger()
    log.info("Indexing ✓")

    log_files = list(log_dir.glob("ps_write_*.log"))
    assert len(log_files) == 1
    assert "Indexing ✓" in log_files[0].read_text(encoding="utf-8")
    assert Logger.get_log_file() == log_files[0]


# LOGGER: RECONFIGURATION
@pytest.mark.unit
def test_reconfiguration_replaces_handlers(tmp_path):
    """Reconfiguring never duplicates handlers."""
    first = Logger(name="ps_reconfig", log_dir=tmp_path / "a")
    count = len(first._log.handlers)
    second = Logger(name="ps_reconfig", log_dir=tmp_path / "b")

    assert first._log is second._log
    assert len(second._log.handlers) == count


@pytest.mark.unit
def test_existing_logger_level_is_updated():
    """A second instantiation without log_dir still applies its level."""
    Logger(name="ps_relevel", level=logging.INFO)
    logger = Logger(name="ps_relevel", level=logging.WARNING)

    assert logger._log.level == logging.WARNING
    assert len(logger._log.handlers) == 1


# LOGGER: SETUP
@pytest.mark.unit
@pytest.mark.parametrize(
    "level_str, expected",
    [("DEBUG", logging.DEBUG), ("WARNING", logging.WARNING), ("INVALID", logging.INFO)],
)
def test_setup_level_mapping(level_str, expected):
    """Level strings map to logging constants, unknown ones to INFO."""
    with patch.dict(os.environ, {"DEBUG": "0"}):
        logger = Logger.setup(name=f"ps_level_{level_str.lower()}", level=level_str)
    assert logger.level == expected


@pytest.mark.unit
@patch.dict(os.environ, {"DEBUG": "1"})
def test_setup_debug_env_var():
    """DEBUG=1 forces DEBUG level."""
    assert Logger.setup(name="ps_debug_env", level="INFO").level == logging.DEBUG


# COLOR FORMATTER
@pytest.mark.unit
def test_color_formatter_success_message():
    """Success lines are green, and only the message part is colored."""
    formatter = ColorFormatter("%(levelname)s - %(message)s")
    msg = f"{LogStyle.INDENT}{LogStyle.SUCCESS} Index ready"
    output = formatter.format(_record(msg))

    idx = output.find(LogStyle.GREEN)
    assert idx > 0
    assert "\033[" not in output[:idx]
    assert output.endswith(f"{LogStyle.GREEN}{msg}{LogStyle.RESET}")


@pytest.mark.unit
def test_color_formatter_separator_dim():
    """Separator lines are dimmed."""
    output = ColorFormatter("%(message)s").format(_record(LogStyle.HEAVY))
    assert LogStyle.DIM in output


@pytest.mark.unit
def test_color_formatter_header_bold_magenta():
    """Upper-case headers are bold magenta."""
    output = ColorFormatter("%(message)s").format(_record("IMAGENET PATCH SETS"))
    assert LogStyle.BOLD in output
    assert LogStyle.MAGENTA in output


@pytest.mark.unit
def test_color_formatter_warning_level():
    """Warning level names are yellow."""
    output = ColorFormatter("%(levelname)s - %(message)s").format(
        _record("Zero-filled sample 3", logging.WARNING)
    )
    assert output.startswith(f"{LogStyle.YELLOW}WARNING{LogStyle.RESET}")


# SUMMARIES
@pytest.mark.unit
def test_log_index_summary():
    """The index summary reports classes, images and stride."""
    catalog = ClassCatalog(class_names=("a", "b"), class_dirs=(("/a",), ("/b",)))
    store = PathStore.from_class_paths([["/a/1.jpg", "/a/2.jpg"], ["/b/1.jpg"]])
    log = MagicMock()

    log_index_summary(catalog, store, elapsed=1.5, logger_instance=log)

    lines = " ".join(str(c.args[0]) for c in log.info.call_args_list)
    assert "2 (a, b)" in lines
    assert "min=1 max=2" in lines
    assert f"{store.stride} bytes" in lines
    assert "1.50s" in lines


@pytest.mark.unit
def test_log_normalization_summary():
    """The normalization summary lists per-channel values."""
    log = MagicMock()
    log_normalization_summary(
        NormalizationStats(mean=(0.5,), std=(0.25,)), 2048, logger_instance=log
    )

    lines = " ".join(str(c.args[0]) for c in log.info.call_args_list)
    assert "2,048" in lines
    assert "[0.5000]" in lines
    assert "[0.2500]" in lines


@pytest.mark.unit
def test_log_phase_header():
    """Phase headers are framed by separators."""
    log = MagicMock()
    LogStyle.log_phase_header(log, "INDEX", LogStyle.LIGHT)

    args = [c.args[0] for c in log.info.call_args_list]
    assert args[1] == LogStyle.LIGHT
    assert args[2].strip() == "INDEX"


@pytest.mark.unit
def test_separators_span_header_width():
    """Both separators match the width headers are centered in."""
    assert len(LogStyle.HEAVY) == LogStyle.HEADER_WIDTH
    assert len(LogStyle.LIGHT) == LogStyle.HEADER_WIDTH
    assert LogStyle.HEAVY != LogStyle.LIGHT
