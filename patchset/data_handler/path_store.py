"""
Fixed-Stride Path Storage.

Holds every image path of an indexed dataset in a single numpy byte buffer
(one row of ``stride`` bytes per path) next to a parallel label array. With
tens of millions of files this avoids one Python ``str`` object per path
while keeping lookup O(1) and slicing O(batch).

Paths are ordered by class index, and by discovery order inside a class, so
that every class owns one contiguous run of positions.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

import numpy as np


class PathStore:
    """
    Immutable path + label storage backing indexed access and sampling.

    Attributes:
        class_list (tuple[range, ...]): Positions belonging to each class,
            contiguous and ascending; together they partition ``[0, N)``.
    """

    def __init__(self, paths: np.ndarray, labels: np.ndarray, class_list: Sequence[range]) -> None:
        """
        Wraps pre-built buffers. Use ``from_class_paths`` to build from strings.

        Args:
            paths: Fixed-width bytes array of shape ``(N,)`` (dtype ``S<stride>``).
            labels: Integer array of shape ``(N,)``.
            class_list: One contiguous range of positions per class.
        """
        if paths.shape != labels.shape:
            raise ValueError(f"paths {paths.shape} and labels {labels.shape} differ in shape")

        covered = sum(len(r) for r in class_list)
        if covered != len(paths):
            raise ValueError(f"class ranges cover {covered} positions, store holds {len(paths)}")

        self._paths = paths
        self._labels = labels.astype(np.int64, copy=False)
        self.class_list: tuple[range, ...] = tuple(class_list)

        # Shared read-only across workers
        self._paths.setflags(write=False)
        self._labels.setflags(write=False)

    @classmethod
    def from_class_paths(cls, class_paths: Sequence[Sequence[str]]) -> PathStore:
        """
        Build the store from per-class path lists given in class-index order.

        The maximum encoded path length is computed once over the whole set
        and fixes the stride of the buffer.

        Args:
            class_paths: ``class_paths[c]`` lists the files of class ``c``.

        Returns:
            A populated, read-only PathStore.
        """
        encoded = [[os.fsencode(p) for p in paths] for paths in class_paths]
        total = sum(len(paths) for paths in encoded)
        stride = max((len(p) for paths in encoded for p in paths), default=1)

        buffer = np.zeros(total, dtype=f"S{max(stride, 1)}")
        labels = np.empty(total, dtype=np.int64)
        ranges: list[range] = []

        start = 0
        for class_idx, paths in enumerate(encoded):
            stop = start + len(paths)
            buffer[start:stop] = paths
            labels[start:stop] = class_idx
            ranges.append(range(start, stop))
            start = stop

        return cls(buffer, labels, ranges)

    def __len__(self) -> int:
        return len(self._paths)

    @property
    def nsample(self) -> int:
        """Total number of indexed images (N)."""
        return len(self._paths)

    @property
    def stride(self) -> int:
        """Bytes reserved per path."""
        return self._paths.dtype.itemsize

    @property
    def labels(self) -> np.ndarray:
        """Read-only label array; ``labels[i]`` is the class of ``path(i)``."""
        return self._labels

    @property
    def num_classes(self) -> int:
        return len(self.class_list)

    def path(self, idx: int) -> str:
        """Decoded path at position *idx*."""
        return os.fsdecode(self._paths[idx])

    def label(self, idx: int) -> int:
        """Class index at position *idx*."""
        return int(self._labels[idx])

    def paths(self, indices: Sequence[int] | np.ndarray) -> list[str]:
        """Decoded paths for a batch of positions, in the given order."""
        return [os.fsdecode(p) for p in self._paths[np.asarray(indices, dtype=np.int64)]]

    def class_size(self, class_idx: int) -> int:
        """Number of images belonging to *class_idx*."""
        return len(self.class_list[class_idx])
