"""
Class-Information Artifact Loading.

A dataset may ship a precomputed description of its classes (for ImageNet,
the human readable synset names) under ``metadata/``. The artifact is
attached to a built dataset as an opaque pass-through value.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..paths import LOGGER_NAME
from .serialization import load_config_from_yaml

logger = logging.getLogger(LOGGER_NAME)

# Probed in this order inside the metadata directory
CLASS_INFO_FILENAMES: tuple[str, ...] = ("class_info.yaml", "class_info.yml", "class_info.json")


def find_class_info(metadata_dir: Path) -> Path | None:
    """Return the first class-info artifact present in *metadata_dir*, if any."""
    for name in CLASS_INFO_FILENAMES:
        candidate = metadata_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_class_info(path: Path) -> Any:
    """
    Load a class-info artifact without interpreting its content.

    Args:
        path: YAML or JSON file.

    Returns:
        The parsed document.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    if path.suffix.lower() == ".json":
        if not path.exists():
            raise FileNotFoundError(f"Class info file not found at: {path}")
        with open(path, "r", encoding="utf-8") as f:
            info = json.load(f)
    else:
        info = load_config_from_yaml(path)

    logger.debug(f"Loaded class info from {path}")
    return info
