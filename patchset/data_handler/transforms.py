"""
Per-Sample Transform Pipeline.

Turns an image path into fixed-shape samples:

1. ``TransformPipeline.load``: decode, replicate grayscale to three channels,
   convert RGB to YUV and keep only luma when one channel is requested.
2. A crop strategy cuts the target window(s) out of the loaded raster.

Crop strategies form a closed table selected by name at configuration time.
All share one contract, ``strategy(source, shape, center, generator)``:

- ``default`` / ``train`` / ``test``: one window, at the center or at a uniform
  random origin. An undersized source raises ``UndersizedSourceError`` which
  callers treat as "no sample".
- ``ten_crop``: center and four corners, each followed by its horizontal
  mirror. The source must already be large enough; an undersized source is a
  ``ShapeMismatchError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import ClassVar

import torch

from ..core.config.sample_config import SampleConfig
from ..exceptions import DecodeFailure, PatchSetConfigError, ShapeMismatchError, UndersizedSourceError
from .decoders import Decoder, pil_decode

Shape = tuple[int, int, int]

# ITU-R BT.601 analog YUV
_RGB_TO_YUV = torch.tensor(
    [
        [0.299, 0.587, 0.114],
        [-0.14713, -0.28886, 0.436],
        [0.615, -0.51499, -0.10001],
    ],
    dtype=torch.float32,
)


# COLOR SPACE
def rgb_to_yuv(raster: torch.Tensor) -> torch.Tensor:
    """Convert a ``(3, H, W)`` RGB raster to YUV."""
    return torch.einsum("oc,chw->ohw", _RGB_TO_YUV.to(raster.dtype), raster)


class TransformPipeline:
    """
    Loads images into the color space and channel count of the target shape.

    Attributes:
        shape (Shape): Target ``(channels, height, width)``.
        decoder (Decoder): Callable honoring the decode contract.
    """

    def __init__(self, shape: Shape, decoder: Decoder | None = None) -> None:
        self.shape = tuple(int(s) for s in shape)
        self.decoder = decoder or pil_decode

    def load(self, path: str) -> torch.Tensor:
        """
        Decode *path* and normalize its representation.

        Args:
            path: Image file path.

        Returns:
            ``(1, H, W)`` luma or ``(3, H, W)`` YUV float raster.

        Raises:
            DecodeFailure: The decoder rejected the file or returned a
                raster that is not ``(C, H, W)``.
        """
        raster = self.decoder(path)
        if raster.ndim != 3 or raster.shape[0] == 0:
            raise DecodeFailure(
                f"decoder returned shape {tuple(raster.shape)} for {path}", path=path
            )

        raster = raster.to(torch.float32)
        if raster.shape[0] < 3:
            raster = raster[:1].repeat(3, 1, 1)
        elif raster.shape[0] > 3:
            raster = raster[:3]

        yuv = rgb_to_yuv(raster)
        if self.shape[0] == 1:
            yuv = yuv[:1]
        return yuv


# CROP HELPERS
def crop_origin(
    source_dim: int, target_dim: int, center: bool, generator: torch.Generator | None = None
) -> int:
    """
    Crop origin along one axis.

    Center: ``floor((source_dim - target_dim) / 2)``. Random: uniform integer
    over ``[0, source_dim - target_dim]``.
    """
    span = source_dim - target_dim
    if center:
        return span // 2
    return int(torch.randint(0, span + 1, (1,), generator=generator))


def crop_window(source: torch.Tensor, top: int, left: int, height: int, width: int) -> torch.Tensor:
    """View of the ``height x width`` window at ``(top, left)``."""
    return source[:, top : top + height, left : left + width]


def _check_channels(source: torch.Tensor, shape: Shape) -> None:
    if source.ndim != 3 or source.shape[0] != shape[0]:
        raise ShapeMismatchError(
            f"source raster {tuple(source.shape)} does not match {shape[0]} target channels"
        )


# CROP STRATEGIES
class CropStrategy:
    """
    Produces sample raster(s) of the target shape from a loaded source.

    Attributes:
        name (str): Registry key.
        views_per_image (int): Samples produced per call.
    """

    name: ClassVar[str] = ""
    views_per_image: ClassVar[int] = 1

    def center_first(self, config: SampleConfig) -> bool:
        """Whether the first crop of each image is the center crop."""
        return config.train_center_first

    def __call__(
        self,
        source: torch.Tensor,
        shape: Shape,
        center: bool = False,
        generator: torch.Generator | None = None,
    ) -> torch.Tensor:
        raise NotImplementedError  # pragma: no cover

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DefaultCrop(CropStrategy):
    """Single window at the center or at a random origin."""

    name = "default"

    def __call__(
        self,
        source: torch.Tensor,
        shape: Shape,
        center: bool = False,
        generator: torch.Generator | None = None,
    ) -> torch.Tensor:
        _check_channels(source, shape)
        _, out_h, out_w = shape
        in_h, in_w = source.shape[1], source.shape[2]
        if in_h < out_h or in_w < out_w:
            raise UndersizedSourceError(
                f"source {in_h}x{in_w} smaller than crop {out_h}x{out_w}"
            )

        top = crop_origin(in_h, out_h, center, generator)
        left = crop_origin(in_w, out_w, center, generator)
        return crop_window(source, top, left, out_h, out_w)


class TrainCrop(DefaultCrop):
    name = "train"


class EvalCrop(DefaultCrop):
    """Evaluation crop; the center-first policy follows ``test_center_first``."""

    name = "test"

    def center_first(self, config: SampleConfig) -> bool:
        return config.test_center_first


class TenCrop(CropStrategy):
    """
    Center and four corners plus their horizontal mirrors.

    Output order: center, mirrored center, top-left, mirrored, top-right,
    mirrored, bottom-left, mirrored, bottom-right, mirrored.
    """

    name = "ten_crop"
    views_per_image = 10

    def center_first(self, config: SampleConfig) -> bool:
        return False

    def __call__(
        self,
        source: torch.Tensor,
        shape: Shape,
        center: bool = False,
        generator: torch.Generator | None = None,
    ) -> torch.Tensor:
        _check_channels(source, shape)
        _, out_h, out_w = shape
        in_h, in_w = source.shape[1], source.shape[2]
        if in_h < out_h or in_w < out_w:
            raise ShapeMismatchError(
                f"ten-crop needs a source of at least {out_h}x{out_w}, got {in_h}x{in_w}"
            )

        origins = [
            ((in_h - out_h) // 2, (in_w - out_w) // 2),
            (0, 0),
            (0, in_w - out_w),
            (in_h - out_h, 0),
            (in_h - out_h, in_w - out_w),
        ]
        views = []
        for top, left in origins:
            window = crop_window(source, top, left, out_h, out_w)
            views.append(window)
            views.append(torch.flip(window, dims=[2]))
        return torch.stack(views)


CROP_STRATEGIES: Mapping[str, CropStrategy] = MappingProxyType(
    {strategy.name: strategy for strategy in (DefaultCrop(), TrainCrop(), EvalCrop(), TenCrop())}
)


def get_crop_strategy(name: str) -> CropStrategy:
    """
    Look up a crop strategy by name.

    Raises:
        PatchSetConfigError: Unknown strategy name.
    """
    try:
        return CROP_STRATEGIES[name]
    except KeyError:
        raise PatchSetConfigError(
            f"Unknown crop variant '{name}' (expected one of {sorted(CROP_STRATEGIES)})"
        ) from None
