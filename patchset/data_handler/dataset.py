"""
Image Patch Dataset.

``ImagePatchSet`` ties the engine together for a dataset laid out as
``root/class_name/image_file``: it builds the index once, then serves
deterministic indexed access, class-balanced random batches and per-channel
normalization. It is also a map-style PyTorch ``Dataset`` so it can be handed
directly to a ``DataLoader``.

Key Components:
    ImagePatchSet: Facade over IndexBuilder, Sampler and Normalizer.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import torch
from torch.utils.data import Dataset

from ..core.config import Config, NormalizationConfig, SampleConfig
from ..core.environment import make_generator
from ..core.logger import Logger
from ..core.paths import LOGGER_NAME
from .builder import IndexBuilder, ProgressCallback
from .catalog import ClassCatalog, SortKey
from .decoders import Decoder
from .enumerators import BulkEnumerator
from .normalizer import NormalizationStats, Normalizer
from .path_store import PathStore
from .sampler import SampleBatch, Sampler
from .transforms import TransformPipeline


class ImagePatchSet(Dataset[tuple[torch.Tensor, torch.Tensor]]):
    """
    Class-balanced patch dataset over a directory-encoded image collection.

    The constructor accepts an already built catalog and store (no I/O).
    Use the classmethod factories to scan the filesystem:

    - ``ImagePatchSet.from_directories(...)``
    - ``ImagePatchSet.from_config(cfg)``

    Attributes:
        catalog (ClassCatalog): Class table.
        store (PathStore): Path and label storage.
        sample_cfg (SampleConfig): Current sampling configuration.
        norm_cfg (NormalizationConfig): Default fit parameters of ``normalization``.
        normalizer (Normalizer): Normalization state (initially unfitted).
        sampler (Sampler): Engine serving ``index`` and ``sample``.
        class_info (Any): Optional pass-through class description artifact.
    """

    def __init__(
        self,
        catalog: ClassCatalog,
        store: PathStore,
        sample_cfg: SampleConfig | None = None,
        *,
        decoder: Decoder | None = None,
        seed: int | None = None,
        normalizer: Normalizer | None = None,
        norm_cfg: NormalizationConfig | None = None,
        verbose: bool = True,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.sample_cfg = sample_cfg or SampleConfig()
        self.decoder = decoder
        self.seed = seed
        self.verbose = verbose
        self.norm_cfg = norm_cfg or NormalizationConfig()
        self.normalizer = normalizer or Normalizer(verbose=verbose)
        self.class_info: Any = None
        self.sampler = self._make_sampler(make_generator(seed))

    @classmethod
    def from_directories(
        cls,
        roots: str | Path | Sequence[str | Path],
        sample_cfg: SampleConfig | None = None,
        *,
        exclude_file: str | None = None,
        exclude_dir: str | None = None,
        sort_key: SortKey | None = None,
        enumerator: str | BulkEnumerator = "auto",
        decoder: Decoder | None = None,
        seed: int | None = None,
        norm_cfg: NormalizationConfig | None = None,
        verbose: bool = True,
        progress_callback: ProgressCallback | None = None,
    ) -> ImagePatchSet:
        """
        Scan one or more roots and build the dataset.

        Args:
            roots: Dataset root(s); same-named classes across roots are merged.
            sample_cfg: Sample geometry and policy (defaults to ``SampleConfig()``).
            exclude_file: Case-insensitive file-name glob to skip.
            exclude_dir: Path glob to skip.
            sort_key: Key ordering class names (default: code-point order).
            enumerator: Bulk enumerator name or instance.
            decoder: Image decoder (default: Pillow).
            seed: Sampler seed.
            norm_cfg: Default parameters of ``normalization()``.
            verbose: Progress bars and summaries.
            progress_callback: Advisory ``(stage, done, total)`` hook.
        """
        builder = IndexBuilder(
            enumerator=enumerator, verbose=verbose, progress_callback=progress_callback
        )
        catalog, store = builder.build(
            roots, exclude_file=exclude_file, exclude_dir=exclude_dir, sort_key=sort_key
        )
        return cls(
            catalog,
            store,
            sample_cfg,
            decoder=decoder,
            seed=seed,
            norm_cfg=norm_cfg,
            verbose=verbose,
        )

    @classmethod
    def from_config(
        cls,
        cfg: Config,
        *,
        sort_key: SortKey | None = None,
        decoder: Decoder | None = None,
    ) -> ImagePatchSet:
        """Build the dataset described by a ``Config``."""
        Logger.setup(name=LOGGER_NAME, level=cfg.log_level)
        return cls.from_directories(
            cfg.index.roots,
            cfg.sample,
            exclude_file=cfg.index.exclude_file,
            exclude_dir=cfg.index.exclude_dir,
            sort_key=sort_key,
            enumerator=cfg.index.enumerator,
            decoder=decoder,
            seed=cfg.seed,
            norm_cfg=cfg.normalization,
            verbose=cfg.index.verbose,
        )

    def _make_sampler(self, generator: torch.Generator) -> Sampler:
        pipeline = TransformPipeline(self.sample_cfg.shape, decoder=self.decoder)
        return Sampler(
            self.store,
            self.catalog,
            pipeline,
            self.sample_cfg,
            normalizer=self.normalizer,
            generator=generator,
        )

    # CLASS TABLE
    @property
    def classes(self) -> tuple[str, ...]:
        return self.catalog.class_names

    @property
    def class_to_idx(self) -> dict[str, int]:
        return dict(self.catalog.class_to_idx)

    @property
    def labels(self) -> np.ndarray:
        return self.store.labels

    def size(self, cls: str | int | None = None) -> int:
        """
        Number of images in the dataset, or in one class.

        Args:
            cls: Class name or index; None for the whole dataset.
        """
        if cls is None:
            return len(self.store)
        return self.store.class_size(self.catalog.index_of(cls))

    # SAMPLING PROPERTIES
    def set_sample_properties(
        self,
        normalize: bool | None = None,
        samples_per_image: int | None = None,
        train_center_first: bool | None = None,
        test_center_first: bool | None = None,
    ) -> SampleConfig:
        """
        Update sampling properties; unspecified ones are kept.

        The sampler keeps its generator, so the random stream continues.

        Returns:
            The new (validated) sample configuration.
        """
        updates = {
            "normalize": normalize,
            "samples_per_image": samples_per_image,
            "train_center_first": train_center_first,
            "test_center_first": test_center_first,
        }
        merged = self.sample_cfg.model_dump()
        merged.update({k: v for k, v in updates.items() if v is not None})
        self.sample_cfg = SampleConfig.model_validate(merged)
        self.sampler = self._make_sampler(self.sampler.generator)
        return self.sample_cfg

    # ACCESS PROTOCOLS
    def index(
        self,
        indices: Sequence[int] | np.ndarray | torch.Tensor,
        *,
        variant: str | None = None,
    ) -> SampleBatch:
        """Deterministic, order-preserving access (see ``Sampler.index``)."""
        return self.sampler.index(indices, variant=variant)

    def sample(
        self,
        batch_size: int,
        samples_per_image: int | None = None,
        *,
        variant: str | None = None,
    ) -> SampleBatch:
        """Class-balanced random batch (see ``Sampler.sample``)."""
        return self.sampler.sample(batch_size, samples_per_image, variant=variant)

    # NORMALIZATION
    def normalization(
        self,
        target_image_count: int | None = None,
        batch_size: int | None = None,
        samples_per_image: int | None = None,
    ) -> NormalizationStats:
        """
        Fit (once) and return the per-channel mean/std of the dataset.

        Unspecified parameters fall back to ``norm_cfg``.
        """
        cfg = self.norm_cfg
        return self.normalizer.fit(
            self.sampler,
            target_image_count=target_image_count or cfg.target_image_count,
            batch_size=batch_size or cfg.batch_size,
            samples_per_image=samples_per_image or cfg.samples_per_image,
        )

    def normalize_samples(self, batch: torch.Tensor) -> torch.Tensor:
        """Normalize *batch* in place; unchanged while statistics are unfitted."""
        return self.normalizer.apply(batch)

    # TORCH DATASET PROTOCOL
    def __len__(self) -> int:
        """Total number of indexed images."""
        return len(self.store)

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, torch.Tensor]:
        """
        Single sample and its label.

        Returns:
            ``(sample, label)``; for the ten-crop variant the sample holds the
            ten views stacked on the first axis.
        """
        batch = self.sampler.index([idx])
        sample = batch.samples if batch.samples.shape[0] > 1 else batch.samples[0]
        return sample, batch.labels[0]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(classes={len(self.catalog)}, images={len(self.store)}, "
            f"shape={self.sample_cfg.shape})"
        )
