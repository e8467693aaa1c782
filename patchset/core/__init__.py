"""
Core Utilities Package

Exposes configuration schemas, logging, reproducibility helpers, I/O
utilities and project constants.
"""

# Configuration
from .config import Config, IndexConfig, NormalizationConfig, SampleConfig

# Environment
from .environment import derive_worker_seed, make_generator, set_seed, worker_init_fn

# Input/Output Utilities
from .io import find_class_info, load_class_info, load_config_from_yaml, save_config_as_yaml

# Logging
from .logger import Logger, LogStyle, log_index_summary, log_normalization_summary

# Constants
from .paths import DEFAULT_MAX_RETRIES, HIDDEN_PREFIX, IMAGE_EXTENSIONS, LOGGER_NAME

__all__ = [
    # Configuration
    "Config",
    "IndexConfig",
    "SampleConfig",
    "NormalizationConfig",
    # Constants
    "LOGGER_NAME",
    "IMAGE_EXTENSIONS",
    "HIDDEN_PREFIX",
    "DEFAULT_MAX_RETRIES",
    # Logging
    "Logger",
    "LogStyle",
    "log_index_summary",
    "log_normalization_summary",
    # Environment
    "set_seed",
    "make_generator",
    "derive_worker_seed",
    "worker_init_fn",
    # I/O
    "save_config_as_yaml",
    "load_config_from_yaml",
    "find_class_info",
    "load_class_info",
]
