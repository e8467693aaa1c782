"""
Input/Output & Persistence Utilities.

Configuration serialization (YAML) and loading of the optional class
information artifact attached to a dataset.
"""

from .class_info import CLASS_INFO_FILENAMES, find_class_info, load_class_info
from .serialization import load_config_from_yaml, save_config_as_yaml

__all__ = [
    "save_config_as_yaml",
    "load_config_from_yaml",
    "CLASS_INFO_FILENAMES",
    "find_class_info",
    "load_class_info",
]
