"""
Shared fixtures: small on-disk image trees generated with Pillow.

Trees follow the ``root/class_name/image_file`` layout expected by the index
builder. PNG is used so pixel values survive the round trip exactly.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from patchset.core.config import SampleConfig

ImageSpec = tuple[int, int, str]
TreeFactory = Callable[[Path, Mapping[str, Sequence[ImageSpec]]], Path]

_rng = np.random.default_rng(0)


def write_image(path: Path, height: int, width: int, mode: str = "RGB", value: int | None = None) -> Path:
    """Write a random (or constant) image of the given Pillow mode."""
    path.parent.mkdir(parents=True, exist_ok=True)
    channels = {"RGB": 3, "L": 1, "RGBA": 4}[mode]
    if value is None:
        pixels = _rng.integers(0, 256, (height, width, channels), dtype=np.uint8)
    else:
        pixels = np.full((height, width, channels), value, dtype=np.uint8)
    if channels == 1:
        pixels = pixels[..., 0]
    Image.fromarray(pixels).save(path)
    return path


def _build_tree(root: Path, layout: Mapping[str, Sequence[ImageSpec]]) -> Path:
    for class_name, specs in layout.items():
        class_dir = root / class_name
        class_dir.mkdir(parents=True, exist_ok=True)
        for i, (height, width, mode) in enumerate(specs):
            write_image(class_dir / f"img_{i:03d}.png", height, width, mode)
    return root


@pytest.fixture
def make_tree() -> TreeFactory:
    """Factory writing ``{class_name: [(h, w, mode), ...]}`` under a root."""
    return _build_tree


@pytest.fixture
def balanced_tree(tmp_path: Path) -> Path:
    """Three classes, four 16x16 RGB images each."""
    return _build_tree(
        tmp_path / "balanced",
        {name: [(16, 16, "RGB")] * 4 for name in ("alpha", "beta", "gamma")},
    )


@pytest.fixture
def skewed_tree(tmp_path: Path) -> Path:
    """Two classes with a 20:1 population ratio."""
    return _build_tree(
        tmp_path / "skewed",
        {"big": [(12, 12, "RGB")] * 20, "small": [(12, 12, "RGB")]},
    )


@pytest.fixture
def small_cfg() -> SampleConfig:
    """8x8 RGB samples with default policy."""
    return SampleConfig(shape=(3, 8, 8))


@pytest.fixture
def image_writer() -> Callable[..., Path]:
    """Exposes ``write_image`` to tests that need single files."""
    return write_image
