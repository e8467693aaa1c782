"""
Dataset Loading and DataLoader Adapters.

Provides:

- ``load_imagenet_patchsets``: builds the train/valid pair of an
  ILSVRC2012-style directory tree, ordering classes by the number embedded in
  their names and attaching the optional class-info artifact.
- ``BalancedBatchStream``: ``IterableDataset`` yielding class-balanced batches,
  one independently seeded sampler per DataLoader worker.
- ``create_sample_loader``: DataLoader over a ``BalancedBatchStream``.

The concurrency itself is PyTorch's; this module only hands each worker its
own sampler.

Example:
    >>> train, valid = load_imagenet_patchsets(Path("/data/imagenet"), SampleConfig())
    >>> loader = create_sample_loader(train, batch_size=128, num_batches=1000, num_workers=4)
    >>> for samples, labels in loader:
    ...     ...
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

import torch
from torch.utils.data import DataLoader, IterableDataset, get_worker_info

from ..core.config import SampleConfig
from ..core.environment import derive_worker_seed, worker_init_fn
from ..core.io import find_class_info, load_class_info
from ..core.logger import LogStyle
from ..core.paths import LOGGER_NAME
from .dataset import ImagePatchSet
from .sampler import Sampler

logger = logging.getLogger(LOGGER_NAME)

_TRAIN_DIRS = ("ILSVRC2012_img_train", "Train")
_VALID_DIRS = ("ILSVRC2012_img_val", "Test")
_METADATA_DIR = "metadata"

_NUMBER_RE = re.compile(r"[0-9]+")


def numeric_sort_key(name: str) -> tuple[int, str]:
    """
    Order class names by the first integer they contain (``n01440764``).

    Names without digits sort after numbered ones, by name.
    """
    match = _NUMBER_RE.search(name)
    if match is None:
        return (2**63, name)
    return (int(match.group()), name)


def _resolve_split_dir(datapath: Path, candidates: tuple[str, ...]) -> Path:
    for name in candidates:
        path = datapath / name
        if path.is_dir():
            return path
    raise FileNotFoundError(
        f"None of {', '.join(candidates)} found under {datapath}"
    )


def load_imagenet_patchsets(
    datapath: Path,
    sample_cfg: SampleConfig | None = None,
    *,
    enumerator: str = "auto",
    seed: int | None = None,
    verbose: bool = True,
) -> tuple[ImagePatchSet, ImagePatchSet]:
    """
    Build the train and valid patch sets of an ImageNet-style tree.

    Expected layout: ``ILSVRC2012_img_train`` (or ``Train``),
    ``ILSVRC2012_img_val`` (or ``Test``) and an optional ``metadata``
    directory holding ``class_info.{yaml,json}``.

    The train set uses the ``train`` crop variant, the valid set the ``test``
    variant; both share ``sample_cfg`` otherwise.

    Args:
        datapath: Dataset root.
        sample_cfg: Sample geometry and policy.
        enumerator: Bulk enumerator backend.
        seed: Seed of the train sampler; the valid sampler uses ``seed + 1``.
        verbose: Progress bars and summaries.

    Returns:
        ``(train, valid)``.

    Raises:
        FileNotFoundError: *datapath* or a split directory is missing.
    """
    if not datapath.is_dir():
        raise FileNotFoundError(f"Expecting path to ILSVRC2012 data, got: {datapath}")

    sample_cfg = sample_cfg or SampleConfig()
    train_dir = _resolve_split_dir(datapath, _TRAIN_DIRS)
    valid_dir = _resolve_split_dir(datapath, _VALID_DIRS)

    if verbose:
        LogStyle.log_phase_header(logger, "IMAGENET PATCH SETS")

    train = ImagePatchSet.from_directories(
        train_dir,
        sample_cfg.model_copy(update={"variant": "train"}),
        sort_key=numeric_sort_key,
        enumerator=enumerator,
        seed=seed,
        verbose=verbose,
    )
    valid = ImagePatchSet.from_directories(
        valid_dir,
        sample_cfg.model_copy(update={"variant": "test"}),
        sort_key=numeric_sort_key,
        enumerator=enumerator,
        seed=None if seed is None else seed + 1,
        verbose=verbose,
    )

    info_path = find_class_info(datapath / _METADATA_DIR)
    if info_path is not None:
        class_info = load_class_info(info_path)
        train.class_info = class_info
        valid.class_info = class_info
    elif verbose:
        logger.info(
            f"{LogStyle.INDENT}{LogStyle.ARROW} No class info found in "
            f"{datapath / _METADATA_DIR}, skipping"
        )

    return train, valid


# BALANCED STREAM
class BalancedBatchStream(IterableDataset[tuple[torch.Tensor, torch.Tensor]]):
    """
    Endless-or-bounded stream of class-balanced batches.

    Every DataLoader worker forks its own sampler seeded from
    ``(seed, worker_id)``; ``num_batches`` is split across workers.

    Attributes:
        sampler (Sampler): Template sampler; never used directly for draws.
        batch_size (int): Images per batch.
        num_batches (int | None): Total batches to yield (None = endless).
        samples_per_image (int | None): Crops per image override.
        seed (int): Base seed for worker samplers.
    """

    def __init__(
        self,
        sampler: Sampler,
        batch_size: int,
        num_batches: int | None = None,
        samples_per_image: int | None = None,
        seed: int = 0,
    ) -> None:
        super().__init__()
        self.sampler = sampler
        self.batch_size = batch_size
        self.num_batches = num_batches
        self.samples_per_image = samples_per_image
        self.seed = seed

    def _worker_share(self, worker_id: int, num_workers: int) -> int | None:
        if self.num_batches is None:
            return None
        base, extra = divmod(self.num_batches, num_workers)
        return base + (1 if worker_id < extra else 0)

    def __iter__(self) -> Iterator[tuple[torch.Tensor, torch.Tensor]]:
        info = get_worker_info()
        worker_id, num_workers = (0, 1) if info is None else (info.id, info.num_workers)

        sampler = self.sampler.fork(derive_worker_seed(self.seed, worker_id))
        remaining = self._worker_share(worker_id, num_workers)

        while remaining is None or remaining > 0:
            batch = sampler.sample(self.batch_size, self.samples_per_image)
            yield batch.samples, batch.labels
            if remaining is not None:
                remaining -= 1


def create_sample_loader(
    patchset: ImagePatchSet,
    batch_size: int,
    num_batches: int | None = None,
    *,
    samples_per_image: int | None = None,
    num_workers: int = 0,
    seed: int = 0,
) -> DataLoader:
    """
    DataLoader yielding ``(samples, labels)`` class-balanced batches.

    Batches are assembled by the sampler, so automatic batching is disabled.

    Args:
        patchset: Dataset to draw from.
        batch_size: Images per batch.
        num_batches: Total batches (None = endless).
        samples_per_image: Crops per image override.
        num_workers: DataLoader worker processes.
        seed: Base seed of worker samplers.
    """
    stream = BalancedBatchStream(
        patchset.sampler,
        batch_size,
        num_batches=num_batches,
        samples_per_image=samples_per_image,
        seed=seed,
    )
    return DataLoader(
        stream,
        batch_size=None,
        num_workers=num_workers,
        pin_memory=torch.cuda.is_available(),
        worker_init_fn=worker_init_fn if num_workers > 0 else None,
    )
