"""
Normalization Fit Schema.

Controls the size of the random subsample used to estimate per-channel
mean and standard deviation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .types import BatchSize, PositiveInt, SamplesPerImage


class NormalizationConfig(BaseModel):
    """
    Normalization estimation parameters.

    Attributes:
        target_image_count: Approximate number of images drawn for the fit.
        batch_size: Images per balanced batch during the fit.
        samples_per_image: Random crops taken from each drawn image.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_image_count: PositiveInt = Field(default=10000, description="Images drawn for the fit")
    batch_size: BatchSize = Field(default=128, description="Images per fit batch")
    samples_per_image: SamplesPerImage = Field(default=2, description="Crops per fit image")
