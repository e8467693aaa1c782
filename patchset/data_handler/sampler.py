"""
Sampling Engine.

Two read-only access protocols over an immutable ``PathStore``/``ClassCatalog``:

- ``index(indices)``: deterministic, order-preserving materialization of the
  given positions. A sample that cannot be produced (decode failure,
  undersized source) leaves a zero-filled slot instead of aborting the batch.
- ``sample(batch_size)``: class-balanced random sampling. Each draw picks a
  class uniformly, then an image uniformly within that class, so every class
  is equally likely regardless of its population. Failed draws are retried
  with a fresh class and image and never occupy an output slot.

All randomness (class, image, crop origin, slot permutation) comes from the
sampler's own ``torch.Generator``. Concurrent workers must each use their own
sampler obtained through ``fork``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
import torch

from ..core.config.sample_config import SampleConfig
from ..core.environment import make_generator
from ..core.paths import LOGGER_NAME
from ..exceptions import PatchSetConfigError, SampleError, SamplingExhaustedError
from .catalog import ClassCatalog
from .path_store import PathStore
from .transforms import CropStrategy, TransformPipeline, get_crop_strategy

if TYPE_CHECKING:  # pragma: no cover
    from .normalizer import Normalizer

logger = logging.getLogger(LOGGER_NAME)


class SampleBatch(NamedTuple):
    """
    A batch of samples.

    Attributes:
        samples: Float32 tensor ``(n, C, H, W)``.
        labels: Int64 tensor ``(n,)`` of class indices.
        paths: ``paths[i]`` is the source image of ``samples[i]``.
    """

    samples: torch.Tensor
    labels: torch.Tensor
    paths: list[str]


class Sampler:
    """
    Indexed and class-balanced access to an indexed image dataset.

    Attributes:
        store (PathStore): Immutable path/label storage.
        catalog (ClassCatalog): Immutable class table.
        pipeline (TransformPipeline): Loads images into the target color space.
        config (SampleConfig): Shape, crops per image and center-first policy.
        normalizer (Normalizer | None): Applied when normalization is enabled.
        generator (torch.Generator): Private random source.
    """

    def __init__(
        self,
        store: PathStore,
        catalog: ClassCatalog,
        pipeline: TransformPipeline,
        config: SampleConfig,
        *,
        normalizer: Normalizer | None = None,
        generator: torch.Generator | None = None,
    ) -> None:
        if store.num_classes != len(catalog):
            raise ValueError(
                f"store holds {store.num_classes} classes, catalog lists {len(catalog)}"
            )
        if tuple(pipeline.shape) != tuple(config.shape):
            raise PatchSetConfigError(
                f"pipeline shape {pipeline.shape} differs from sample shape {config.shape}"
            )

        self.store = store
        self.catalog = catalog
        self.pipeline = pipeline
        self.config = config
        self.normalizer = normalizer
        self.generator = generator if generator is not None else make_generator()

    @property
    def num_classes(self) -> int:
        return len(self.catalog)

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.config.shape

    def fork(self, seed: int | None = None) -> Sampler:
        """
        Sampler sharing this one's immutable state with an independent generator.

        Args:
            seed: Seed of the new generator (None = fresh OS entropy).
        """
        return Sampler(
            self.store,
            self.catalog,
            self.pipeline,
            self.config,
            normalizer=self.normalizer,
            generator=make_generator(seed),
        )

    def _strategy(self, variant: str | None) -> CropStrategy:
        return get_crop_strategy(variant or self.config.variant)

    def _randint(self, high: int) -> int:
        return int(torch.randint(high, (1,), generator=self.generator))

    def _finish(self, samples: torch.Tensor, normalize: bool | None) -> torch.Tensor:
        enabled = self.config.normalize if normalize is None else normalize
        if enabled and self.normalizer is not None:
            self.normalizer.apply(samples)
        return samples

    # INDEXED ACCESS
    def index(
        self,
        indices: Sequence[int] | np.ndarray | torch.Tensor,
        *,
        variant: str | None = None,
        normalize: bool | None = None,
    ) -> SampleBatch:
        """
        Materialize the samples at *indices*, in order.

        Each index yields one sample (ten for the ``ten_crop`` variant, stored
        contiguously). The crop is centered when the variant's center-first
        flag is set, random otherwise.

        Args:
            indices: Positions in ``[0, N)``.
            variant: Crop strategy overriding the configured one.
            normalize: Override of the configured normalization flag.

        Returns:
            SampleBatch; slots whose image failed to load are zero-filled.

        Raises:
            IndexError: A position is out of range.
            ShapeMismatchError: Ten-crop on an incompatible source.
        """
        positions = [int(i) for i in torch.as_tensor(indices).reshape(-1).tolist()]
        n_total = len(self.store)
        for pos in positions:
            if not 0 <= pos < n_total:
                raise IndexError(f"Index {pos} out of range [0, {n_total})")

        strategy = self._strategy(variant)
        views = strategy.views_per_image
        center = strategy.center_first(self.config)

        n_out = len(positions) * views
        samples = torch.zeros((n_out, *self.shape), dtype=torch.float32)
        labels = torch.empty(n_out, dtype=torch.long)
        source_paths = self.store.paths(positions) if positions else []
        paths: list[str] = []

        for slot, (pos, path) in enumerate(zip(positions, source_paths)):
            lo = slot * views
            labels[lo : lo + views] = self.store.label(pos)
            paths.extend([path] * views)
            try:
                source = self.pipeline.load(path)
                out = strategy(source, self.shape, center=center, generator=self.generator)
            except SampleError as e:
                logger.warning(f"Zero-filled sample {pos}: {e}")
                continue
            samples[lo : lo + views].copy_(out.reshape(views, *self.shape))

        return SampleBatch(self._finish(samples, normalize), labels, paths)

    # BALANCED SAMPLING
    def sample(
        self,
        batch_size: int,
        samples_per_image: int | None = None,
        *,
        variant: str | None = None,
        normalize: bool | None = None,
    ) -> SampleBatch:
        """
        Draw a class-balanced random batch.

        Each of the ``batch_size`` draws selects a class uniformly, then an
        image uniformly within the class, and takes ``samples_per_image``
        crops from it (the first one centered when center-first is
        configured). Crops are scattered over a random permutation of the
        output slots so crops of one image do not cluster.

        Args:
            batch_size: Number of successfully loaded images.
            samples_per_image: Crops per image (default from config).
            variant: Crop strategy overriding the configured one.
            normalize: Override of the configured normalization flag.

        Returns:
            SampleBatch of exactly ``batch_size * samples_per_image`` samples.

        Raises:
            PatchSetConfigError: Multi-view strategy (ten-crop) requested.
            SamplingExhaustedError: More than ``config.max_retries`` failed draws.
        """
        spi = self.config.samples_per_image if samples_per_image is None else samples_per_image
        if batch_size < 1 or spi < 1:
            raise ValueError(f"batch_size and samples_per_image must be >= 1 ({batch_size}, {spi})")

        strategy = self._strategy(variant)
        if strategy.views_per_image != 1:
            raise PatchSetConfigError(
                f"crop variant '{strategy.name}' yields several views per image; use index()"
            )
        center_first = strategy.center_first(self.config)

        n_out = batch_size * spi
        samples = torch.empty((n_out, *self.shape), dtype=torch.float32)
        labels = torch.empty(n_out, dtype=torch.long)
        paths: list[str] = [""] * n_out
        slots = torch.randperm(n_out, generator=self.generator).tolist()

        max_retries = self.config.max_retries
        failures = 0
        drawn = 0
        while drawn < batch_size:
            class_idx = self._randint(self.num_classes)
            members = self.store.class_list[class_idx]
            pos = members[self._randint(len(members))]
            path = self.store.path(pos)

            try:
                source = self.pipeline.load(path)
                crops = [
                    strategy(
                        source,
                        self.shape,
                        center=(j == 0 and center_first),
                        generator=self.generator,
                    )
                    for j in range(spi)
                ]
            except SampleError as e:
                failures += 1
                logger.debug(f"Draw failed, retrying: {e}")
                if max_retries is not None and failures > max_retries:
                    raise SamplingExhaustedError(
                        f"Gave up after {failures} failed draws "
                        f"({drawn}/{batch_size} images loaded)"
                    ) from e
                continue

            for j, crop in enumerate(crops):
                slot = slots[drawn * spi + j]
                samples[slot].copy_(crop)
                labels[slot] = class_idx
                paths[slot] = path
            drawn += 1

        return SampleBatch(self._finish(samples, normalize), labels, paths)
