"""
Class Catalog.

Sorted, de-duplicated table of class names with the name → index mapping and
the directories (across all dataset roots) that contributed to each class.
The sort order fixes class-index assignment, so it must be stable across runs.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

SortKey = Callable[[str], Any]


@dataclass(frozen=True)
class ClassCatalog:
    """
    Immutable class table.

    Attributes:
        class_names: Class names in canonical (index) order.
        class_dirs: ``class_dirs[c]`` lists the directories of class ``c``.
        class_to_idx: Mapping class name → 0-based class index.
    """

    class_names: tuple[str, ...]
    class_dirs: tuple[tuple[str, ...], ...]
    class_to_idx: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(set(self.class_names)) != len(self.class_names):
            raise ValueError("class names must be distinct")
        if len(self.class_dirs) != len(self.class_names):
            raise ValueError(
                f"{len(self.class_names)} class names but {len(self.class_dirs)} directory lists"
            )
        object.__setattr__(
            self, "class_to_idx", {name: idx for idx, name in enumerate(self.class_names)}
        )

    @classmethod
    def from_directories(
        cls,
        dirs_by_name: Mapping[str, Sequence[str]],
        sort_key: SortKey | None = None,
    ) -> ClassCatalog:
        """
        Build the catalog from discovered class directories.

        Args:
            dirs_by_name: Class name → directories carrying that name.
            sort_key: Key used to order class names (default: code-point order).

        Returns:
            Catalog with class indices assigned by sort order.
        """
        names = sorted(dirs_by_name, key=sort_key)
        return cls(
            class_names=tuple(names),
            class_dirs=tuple(tuple(dirs_by_name[name]) for name in names),
        )

    def __len__(self) -> int:
        return len(self.class_names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.class_names)

    def __contains__(self, name: object) -> bool:
        return name in self.class_to_idx

    def index_of(self, cls_ref: str | int) -> int:
        """
        Resolve a class given by name or by index.

        Raises:
            KeyError: Unknown class name.
            IndexError: Class index out of range.
        """
        if isinstance(cls_ref, str):
            if cls_ref not in self.class_to_idx:
                raise KeyError(f"Unknown class '{cls_ref}'")
            return self.class_to_idx[cls_ref]
        if not 0 <= cls_ref < len(self.class_names):
            raise IndexError(f"Class index {cls_ref} out of range [0, {len(self.class_names)})")
        return int(cls_ref)

    def name_of(self, class_idx: int) -> str:
        return self.class_names[class_idx]
