"""
Bulk File Enumeration Backends.

Listing every image of a class one syscall at a time from Python does not
scale to tens of millions of files. Enumeration is therefore delegated to a
pluggable backend that lists, in one batched call per class, every file under
a set of directories whose extension is allow-listed:

- ``FindEnumerator``: one GNU ``find`` process per class (``gfind`` on macOS),
  NUL-separated output parsed in a single pass.
- ``WalkEnumerator``: native ``os.walk`` with the same filter, sorted for
  determinism; adequate for small and medium datasets.

Filter semantics are identical for both backends:

- extension in ``IMAGE_EXTENSIONS``, compared case-insensitively;
- ``exclude_file``: glob matched case-insensitively against the file name;
- ``exclude_dir``: glob matched against the full path (``*`` spans ``/``).
- a class directory that is a symlink is followed; nested symlinks are not.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import subprocess  # nosec B404
import sys
from collections.abc import Sequence
from typing import Protocol

from ..core.paths import IMAGE_EXTENSIONS, LOGGER_NAME
from ..exceptions import EnumerationError, PatchSetConfigError

logger = logging.getLogger(LOGGER_NAME)


class BulkEnumerator(Protocol):
    """Lists allow-listed image files under a set of directories."""

    name: str

    def list_files(
        self,
        directories: Sequence[str],
        exclude_file: str | None = None,
        exclude_dir: str | None = None,
    ) -> list[str]: ...  # pragma: no cover


# FIND BACKEND
def find_binary() -> str | None:
    """Locate a GNU-compatible ``find``; ``None`` when unavailable."""
    if os.name == "nt":
        # Windows ships an unrelated FIND.EXE
        return None
    if sys.platform == "darwin" and shutil.which("gfind"):
        return shutil.which("gfind")
    return shutil.which("find")


class FindEnumerator:
    """
    Enumerates files with one external ``find`` process per call.

    Attributes:
        binary (str): Path of the ``find`` executable.
    """

    name = "find"

    def __init__(self, binary: str | None = None) -> None:
        resolved = binary or find_binary()
        if resolved is None:
            raise PatchSetConfigError("No 'find' executable available; use the 'walk' enumerator")
        self.binary = resolved

    @staticmethod
    def build_expression(exclude_file: str | None = None, exclude_dir: str | None = None) -> list[str]:
        """
        Build the ``find`` predicate list for the extension allow-list.

        Args:
            exclude_file: File-name glob to skip (case-insensitive).
            exclude_dir: Path glob to skip.

        Returns:
            Arguments following the directory operands.
        """
        name_tests: list[str] = []
        for ext in sorted(IMAGE_EXTENSIONS):
            if name_tests:
                name_tests.append("-o")
            name_tests.extend(["-iname", f"*.{ext}"])

        expr = ["-not", "-type", "d"]
        if exclude_file:
            expr.extend(["!", "-iname", exclude_file])
        if exclude_dir:
            expr.extend(["-not", "-path", exclude_dir])
        expr.extend(["(", *name_tests, ")", "-print0"])
        return expr

    def list_files(
        self,
        directories: Sequence[str],
        exclude_file: str | None = None,
        exclude_dir: str | None = None,
    ) -> list[str]:
        """
        Run ``find`` over *directories* and return matching paths.

        Raises:
            EnumerationError: If ``find`` exits with a non-zero status.
        """
        if not directories:
            return []

        # -H follows class directories that are themselves symlinks, like os.walk
        cmd = [self.binary, "-H", *directories, *self.build_expression(exclude_file, exclude_dir)]
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False)  # nosec B603

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            raise EnumerationError(
                f"'{os.path.basename(self.binary)}' failed with status {result.returncode} "
                f"on {', '.join(directories)}: {stderr}"
            )

        return [os.fsdecode(raw) for raw in result.stdout.split(b"\0") if raw]


# WALK BACKEND
def _has_image_extension(filename: str) -> bool:
    return os.path.splitext(filename)[1][1:].lower() in IMAGE_EXTENSIONS


class WalkEnumerator:
    """Enumerates files with ``os.walk``; directory and file order is sorted."""

    name = "walk"

    def list_files(
        self,
        directories: Sequence[str],
        exclude_file: str | None = None,
        exclude_dir: str | None = None,
    ) -> list[str]:
        file_pattern = exclude_file.lower() if exclude_file else None
        found: list[str] = []

        for directory in directories:
            for dirpath, dirnames, filenames in os.walk(directory):
                dirnames.sort()
                for filename in sorted(filenames):
                    if not _has_image_extension(filename):
                        continue
                    if file_pattern and fnmatch.fnmatchcase(filename.lower(), file_pattern):
                        continue
                    full_path = os.path.join(dirpath, filename)
                    if exclude_dir and fnmatch.fnmatchcase(full_path, exclude_dir):
                        continue
                    found.append(full_path)

        return found


# FACTORY
def get_enumerator(name: str = "auto") -> BulkEnumerator:
    """
    Resolve an enumerator backend by name.

    Args:
        name: ``"find"``, ``"walk"`` or ``"auto"`` (``find`` when available).

    Returns:
        Enumerator instance.

    Raises:
        PatchSetConfigError: Unknown name, or ``find`` requested but missing.
    """
    if name == "auto":
        name = "find" if find_binary() else "walk"
        logger.debug(f"Bulk enumerator resolved to '{name}'")

    if name == "find":
        return FindEnumerator()
    if name == "walk":
        return WalkEnumerator()
    raise PatchSetConfigError(f"Unknown enumerator '{name}' (expected 'auto', 'find' or 'walk')")
