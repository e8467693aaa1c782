"""
Top-level Configuration Manifest.

Aggregates the index, sampling and normalization schemas together with the
seed and log level into a single frozen ``Config`` that can be loaded from a
YAML recipe.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..io.serialization import load_config_from_yaml
from .index_config import IndexConfig
from .normalization_config import NormalizationConfig
from .sample_config import SampleConfig
from .types import LogLevel, NonNegativeInt


class Config(BaseModel):
    """
    Complete PatchSet configuration.

    Attributes:
        index: Dataset discovery settings.
        sample: Sample geometry and sampling policy.
        normalization: Normalization fit parameters.
        seed: Seed of the sampler's random generator (None = non-deterministic).
        log_level: Level applied to the PatchSet logger.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: IndexConfig
    sample: SampleConfig = Field(default_factory=SampleConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    seed: NonNegativeInt | None = Field(default=None, description="Sampler seed")
    log_level: LogLevel = Field(default="INFO", description="Logger level")

    @classmethod
    def from_yaml(cls, yaml_path: Path, **overrides: Any) -> "Config":
        """
        Build a Config from a YAML recipe.

        Args:
            yaml_path: Recipe file.
            **overrides: Top-level keys replacing those read from the file.

        Returns:
            Validated Config instance.
        """
        raw = load_config_from_yaml(yaml_path) or {}
        raw.update(overrides)
        return cls.model_validate(raw)
