"""
Sample Geometry & Sampling Policy Schema.

Describes the fixed shape every produced sample conforms to, the number of
crops drawn per sampled image, center-first policies and the crop strategy
used by default.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..paths import DEFAULT_MAX_RETRIES
from .types import Channels, CropVariant, ImageSize, PositiveInt, SamplesPerImage


# SAMPLE CONFIGURATION
class SampleConfig(BaseModel):
    """
    Sampling configuration shared by indexed access and balanced sampling.

    Attributes:
        shape: Target ``(channels, height, width)`` of every sample.
        samples_per_image: Crops drawn from each image picked by ``sample``.
        train_center_first: First crop of an image is the center crop (train).
        test_center_first: First crop of an image is the center crop (test).
        variant: Crop strategy used when the caller does not override it.
        normalize: Apply fitted normalization to every returned batch.
        max_retries: Failed draws tolerated by one ``sample`` call
            (None means retry forever).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    shape: tuple[Channels, ImageSize, ImageSize] = Field(
        default=(3, 51, 51), description="Sample shape (channels, height, width)"
    )
    samples_per_image: SamplesPerImage = Field(default=1, description="Crops per sampled image")
    train_center_first: bool = Field(default=False, description="Center crop first (train)")
    test_center_first: bool = Field(default=False, description="Center crop first (test)")
    variant: CropVariant = Field(default="default", description="Default crop strategy")
    normalize: bool = Field(default=False, description="Normalize returned batches")
    max_retries: PositiveInt | None = Field(
        default=DEFAULT_MAX_RETRIES, description="Failed draws allowed per sample() call"
    )

    @property
    def channels(self) -> int:
        return self.shape[0]

    @property
    def height(self) -> int:
        return self.shape[1]

    @property
    def width(self) -> int:
        return self.shape[2]

    @model_validator(mode="after")
    def _check_ten_crop(self) -> "SampleConfig":
        """Ten-crop emits ten fixed views; extra random crops per image are meaningless."""
        if self.variant == "ten_crop" and self.samples_per_image != 1:
            raise ValueError("variant 'ten_crop' requires samples_per_image=1")
        return self
