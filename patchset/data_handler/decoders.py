"""
Image Decoding Boundary.

The engine needs exactly one capability from an image codec:
``decode(path) -> Tensor`` returning a float raster of shape
``(channels, height, width)`` with values in ``[0, 1]``, and raising
``DecodeFailure`` on malformed or unsupported input. Any callable honoring
that contract can be passed to ``TransformPipeline``; ``pil_decode`` is the
default, built on Pillow and torchvision.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import torch
import torchvision.transforms.functional as TF
from PIL import Image

from ..exceptions import DecodeFailure

Decoder = Callable[[str], torch.Tensor]

# Pillow modes decoded as a single luminance channel
_GRAYSCALE_MODES = frozenset({"1", "L", "LA", "I", "I;16", "I;16B", "I;16L", "F"})

# Integer modes wider than 8 bits; Pillow opens 16-bit PNG/TIFF as one of these
_WIDE_INTEGER_MODES = frozenset({"I", "I;16", "I;16B", "I;16L"})


def _wide_grayscale(img: Image.Image) -> torch.Tensor:
    """Scale a 16-bit (or float) grayscale raster to ``[0, 1]`` without clipping at 255."""
    pixels = np.asarray(img).astype(np.float32)
    if img.mode in _WIDE_INTEGER_MODES:
        pixels /= 65535.0
    np.clip(pixels, 0.0, 1.0, out=pixels)
    return torch.from_numpy(pixels).unsqueeze(0)


def pil_decode(path: str) -> torch.Tensor:
    """
    Decode an image file into a ``(C, H, W)`` float tensor in ``[0, 1]``.

    Grayscale sources keep one channel. 16-bit sources are scaled by their
    full range and float sources are clamped; every other mode (palette, RGBA,
    CMYK, ...) is converted to RGB.

    Args:
        path: Image file path.

    Returns:
        Float32 tensor with 1 or 3 channels.

    Raises:
        DecodeFailure: If Pillow cannot open or fully decode the file.
    """
    try:
        with Image.open(path) as img:
            img.load()
            if img.mode in _WIDE_INTEGER_MODES or img.mode == "F":
                return _wide_grayscale(img)
            target_mode = "L" if img.mode in _GRAYSCALE_MODES else "RGB"
            converted = img.convert(target_mode) if img.mode != target_mode else img
            raster = TF.pil_to_tensor(converted)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeFailure(f"failed to load {path}: {e}", path=path) from e

    return raster.to(torch.float32).div_(255.0)
