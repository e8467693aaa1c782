"""
Index Construction Module.

One-shot construction of the immutable ``ClassCatalog`` and ``PathStore``
from one or more dataset roots laid out as ``root/class_name/image_file``.

Pipeline:
    1. Discover class directories (hidden names skipped) across all roots and
       union them by name.
    2. Sort class names to fix class-index assignment.
    3. Enumerate the files of every class with a bulk enumerator.
    4. Pack all paths into a fixed-stride buffer, in class order.

Any class without images aborts the build with ``EmptyClassError``; a build
that finds nothing at all raises ``NoImagesFoundError``. Enumeration results
live only in memory, so nothing survives a failed build.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from tqdm.auto import tqdm

from ..core.logger import LogStyle, log_index_summary
from ..core.paths import HIDDEN_PREFIX, LOGGER_NAME
from ..exceptions import EmptyClassError, NoImagesFoundError
from .catalog import ClassCatalog, SortKey
from .enumerators import BulkEnumerator, get_enumerator
from .path_store import PathStore

logger = logging.getLogger(LOGGER_NAME)

# (stage, done, total); stages are "classes" and "paths"
ProgressCallback = Callable[[str, int, int], None]


def discover_class_dirs(roots: Sequence[str | Path]) -> dict[str, list[str]]:
    """
    List the class directories of every root.

    Args:
        roots: Dataset roots, each holding one sub-directory per class.

    Returns:
        Class name → absolute directories with that name, in root order.

    Raises:
        FileNotFoundError: If a root is not an existing directory.
    """
    dirs_by_name: dict[str, list[str]] = {}

    for root in roots:
        root_path = os.path.abspath(os.fspath(root))
        if not os.path.isdir(root_path):
            raise FileNotFoundError(f"Dataset root not found: {root_path}")

        with os.scandir(root_path) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if not entry.name.startswith(HIDDEN_PREFIX) and entry.is_dir()
            )

        for name in names:
            dirs_by_name.setdefault(name, []).append(os.path.join(root_path, name))

    return dirs_by_name


class IndexBuilder:
    """
    Builds the class catalog and path store of an image dataset.

    Not re-entrant: run it once, synchronously, before any sampling starts.

    Attributes:
        enumerator (BulkEnumerator): Backend listing the files of a class.
        verbose (bool): Show tqdm progress and log a summary.
        progress_callback (ProgressCallback | None): Advisory progress hook.
    """

    def __init__(
        self,
        enumerator: str | BulkEnumerator = "auto",
        verbose: bool = True,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.enumerator = get_enumerator(enumerator) if isinstance(enumerator, str) else enumerator
        self.verbose = verbose
        self.progress_callback = progress_callback

    def _report(self, stage: str, done: int, total: int) -> None:
        if self.progress_callback is not None:
            self.progress_callback(stage, done, total)

    def build(
        self,
        roots: str | Path | Sequence[str | Path],
        exclude_file: str | None = None,
        exclude_dir: str | None = None,
        sort_key: SortKey | None = None,
    ) -> tuple[ClassCatalog, PathStore]:
        """
        Scan *roots* and build the index.

        Args:
            roots: One dataset root or a sequence of roots sharing class names.
            exclude_file: Case-insensitive file-name glob to skip.
            exclude_dir: Path glob; matching files are skipped.
            sort_key: Key ordering class names (default: code-point order).

        Returns:
            ``(catalog, store)``, both immutable.

        Raises:
            FileNotFoundError: A root does not exist.
            NoImagesFoundError: No image was found under any root.
            EmptyClassError: A class directory holds no image.
            EnumerationError: The bulk enumerator failed.
        """
        if isinstance(roots, (str, Path)):
            roots = [roots]

        start = time.perf_counter()

        dirs_by_name = discover_class_dirs(roots)
        if not dirs_by_name:
            raise NoImagesFoundError(
                f"No class directories found in: {', '.join(os.fspath(r) for r in roots)}"
            )

        catalog = ClassCatalog.from_directories(dirs_by_name, sort_key=sort_key)
        if self.verbose:
            logger.info(
                f"{LogStyle.INDENT}{LogStyle.ARROW} Found {len(catalog)} classes, "
                f"enumerating with '{self.enumerator.name}'"
            )

        class_paths = self._enumerate(catalog, exclude_file, exclude_dir)

        total = sum(len(paths) for paths in class_paths)
        if total == 0:
            raise NoImagesFoundError(
                f"Could not find any image file in: {', '.join(os.fspath(r) for r in roots)}"
            )

        for class_idx, paths in enumerate(class_paths):
            if not paths:
                raise EmptyClassError(catalog.class_names[class_idx], catalog.class_dirs[class_idx])

        store = PathStore.from_class_paths(class_paths)
        self._report("paths", total, total)

        if self.verbose:
            log_index_summary(catalog, store, elapsed=time.perf_counter() - start)

        return catalog, store

    def _enumerate(
        self,
        catalog: ClassCatalog,
        exclude_file: str | None,
        exclude_dir: str | None,
    ) -> list[list[str]]:
        """List the files of every class, in class-index order."""
        class_paths: list[list[str]] = []
        n_classes = len(catalog)

        progress = tqdm(
            catalog.class_dirs,
            desc="Indexing classes",
            total=n_classes,
            disable=not self.verbose,
            leave=False,
            ncols=100,
        )
        for class_idx, directories in enumerate(progress):
            paths = self.enumerator.list_files(directories, exclude_file, exclude_dir)
            logger.debug(f"Class '{catalog.class_names[class_idx]}': {len(paths)} files")
            class_paths.append(paths)
            self._report("classes", class_idx + 1, n_classes)

        return class_paths
