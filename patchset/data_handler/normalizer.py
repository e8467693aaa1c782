"""
Per-Channel Normalization.

Estimates per-channel mean and standard deviation from a bounded number of
class-balanced random batches and applies ``(x - mean) / std`` in place.

The estimate is the batch-size weighted average of per-batch means and
standard deviations; it is not the exact global moment, but the bias is small
for the batch sizes used in practice.

Lifecycle: a ``Normalizer`` starts unfitted, is fitted at most once (further
``fit`` calls return the cached statistics) and is read-only afterwards. The
fit is guarded by a lock so concurrent callers block and then observe the
cached result.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import torch
from tqdm.auto import tqdm

from ..core.io import load_config_from_yaml, save_config_as_yaml
from ..core.logger import LogStyle, log_normalization_summary
from ..core.paths import LOGGER_NAME
from ..exceptions import ShapeMismatchError

if TYPE_CHECKING:  # pragma: no cover
    from .sampler import Sampler

logger = logging.getLogger(LOGGER_NAME)

# Floor applied to std at normalization time (constant channels)
_MIN_STD = 1e-8


@dataclass(frozen=True)
class NormalizationStats:
    """Fitted per-channel statistics."""

    mean: tuple[float, ...]
    std: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.mean) != len(self.std):
            raise ValueError(f"mean has {len(self.mean)} channels, std has {len(self.std)}")

    @property
    def num_channels(self) -> int:
        return len(self.mean)

    @classmethod
    def from_batch(cls, batch: torch.Tensor) -> NormalizationStats:
        """Per-channel mean and (unbiased) std of an ``(N, C, H, W)`` batch."""
        per_channel = batch.detach().transpose(0, 1).reshape(batch.shape[1], -1).to(torch.float64)
        return cls(
            mean=tuple(per_channel.mean(dim=1).tolist()),
            std=tuple(per_channel.std(dim=1).tolist()),
        )

    def to_dict(self) -> dict[str, list[float]]:
        return {"mean": list(self.mean), "std": list(self.std)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NormalizationStats:
        return cls(mean=tuple(float(v) for v in data["mean"]), std=tuple(float(v) for v in data["std"]))


def normalize_samples(batch: torch.Tensor, stats: NormalizationStats | None) -> torch.Tensor:
    """
    Normalize an ``(N, C, H, W)`` batch in place.

    Args:
        batch: Samples to normalize.
        stats: Fitted statistics; when None the batch is returned unchanged.

    Returns:
        The same tensor, normalized.

    Raises:
        ShapeMismatchError: Channel count differs from the statistics.
    """
    if stats is None:
        return batch
    if batch.ndim != 4 or batch.shape[1] != stats.num_channels:
        raise ShapeMismatchError(
            f"batch {tuple(batch.shape)} does not match {stats.num_channels}-channel statistics"
        )

    mean = torch.tensor(stats.mean, dtype=batch.dtype, device=batch.device).view(1, -1, 1, 1)
    std = torch.tensor(stats.std, dtype=batch.dtype, device=batch.device).clamp_min(_MIN_STD)
    batch.sub_(mean).div_(std.view(1, -1, 1, 1))
    return batch


class Normalizer:
    """
    Holds the normalization statistics of a dataset.

    Attributes:
        verbose (bool): Show fit progress and log the fitted values.
    """

    def __init__(self, stats: NormalizationStats | None = None, verbose: bool = True) -> None:
        self._stats = stats
        self._lock = threading.Lock()
        self.verbose = verbose

    @property
    def stats(self) -> NormalizationStats | None:
        return self._stats

    @property
    def is_fitted(self) -> bool:
        return self._stats is not None

    def fit(
        self,
        sampler: Sampler,
        target_image_count: int = 10000,
        batch_size: int = 128,
        samples_per_image: int = 2,
    ) -> NormalizationStats:
        """
        Estimate statistics from balanced random batches drawn from *sampler*.

        Batches use the default crop strategy and are never normalized.

        Args:
            sampler: Source of class-balanced batches.
            target_image_count: Approximate number of images to draw.
            batch_size: Images per batch.
            samples_per_image: Random crops per image.

        Returns:
            The fitted (or previously cached) statistics.
        """
        if target_image_count < 1 or batch_size < 1:
            raise ValueError("target_image_count and batch_size must be positive")

        with self._lock:
            if self._stats is not None:
                logger.debug("Returning pre-computed normalization statistics")
                return self._stats

            n_batches = math.ceil(target_image_count / batch_size)
            if self.verbose:
                logger.info(
                    f"{LogStyle.INDENT}{LogStyle.ARROW} Normalization on {target_image_count} images "
                    f"x {samples_per_image} samples per image (batch size {batch_size})"
                )

            mean_sum: torch.Tensor | None = None
            std_sum: torch.Tensor | None = None
            observed = 0

            for _ in tqdm(
                range(n_batches),
                desc="Fitting normalization",
                disable=not self.verbose,
                leave=False,
                ncols=100,
            ):
                batch = sampler.sample(
                    batch_size, samples_per_image, variant="default", normalize=False
                )
                batch_stats = NormalizationStats.from_batch(batch.samples)
                weighted_mean = torch.tensor(batch_stats.mean, dtype=torch.float64) * batch_size
                weighted_std = torch.tensor(batch_stats.std, dtype=torch.float64) * batch_size

                mean_sum = weighted_mean if mean_sum is None else mean_sum + weighted_mean
                std_sum = weighted_std if std_sum is None else std_sum + weighted_std
                observed += batch_size

            assert mean_sum is not None and std_sum is not None  # nosec B101
            stats = NormalizationStats(
                mean=tuple((mean_sum / observed).tolist()),
                std=tuple((std_sum / observed).tolist()),
            )
            self._stats = stats

            if self.verbose:
                log_normalization_summary(stats, observed * samples_per_image)
            return stats

    def apply(self, batch: torch.Tensor) -> torch.Tensor:
        """Normalize *batch* in place; no-op while unfitted."""
        return normalize_samples(batch, self._stats)

    # PERSISTENCE
    def save(self, yaml_path: Path) -> Path:
        """
        Persist the fitted statistics as YAML.

        Raises:
            RuntimeError: The normalizer has not been fitted.
        """
        if self._stats is None:
            raise RuntimeError("Cannot save normalization statistics before fit()")
        return save_config_as_yaml(self._stats, yaml_path)

    @classmethod
    def from_yaml(cls, yaml_path: Path, verbose: bool = True) -> Normalizer:
        """Fitted normalizer restored from a file written by ``save``."""
        return cls(NormalizationStats.from_dict(load_config_from_yaml(yaml_path)), verbose=verbose)
