"""
Module: core.models.pages

Purpose:
    Per-document arrangement state. A PageSet is a single list of PageSlot
    records; the list position of a slot is its current display and export
    order. Keeping order, merge mode and cached composite on one record
    means a reorder swaps all of them at once.

Key Classes:
    - MergeMode: Shape of a merge group
    - PageSlot: One displayed page position
    - PageSet: Ordered sequence of PageSlots
    - Document: Loaded source PDF, immutable apart from its PageSet

Dependencies:
    - dataclasses (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - arrange.merge: Merge state machine
    - arrange.reorder: Slot swapping
    - arrange.planner: Export planning
    - arrange.session: Document lifecycle
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from PIL import Image


class MergeMode(str, Enum):
    """Shape of the merge group a slot starts."""
    NONE = "none"
    VERTICAL = "vertical"      # 2 slots stacked top to bottom
    HORIZONTAL = "horizontal"  # 2 slots side by side
    GRID = "grid"              # 4 slots in a 2x2 grid

    def __str__(self) -> str:
        return self.value

    @property
    def group_size(self) -> int:
        """Number of consecutive slots covered by a group of this shape."""
        if self is MergeMode.NONE:
            return 1
        if self is MergeMode.GRID:
            return 4
        return 2

    @property
    def is_merge(self) -> bool:
        return self is not MergeMode.NONE

    @classmethod
    def parse(cls, value: str) -> MergeMode:
        """
        Parse a mode name, case-insensitive.

        Raises:
            ValueError: If value is not a known mode
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown merge mode {value!r} (expected one of: {names})") from None


CacheKey = Tuple[int, MergeMode, Tuple[int, ...]]


@dataclass(slots=True)
class PageSlot:
    """
    One position in a document's current page order.

    Attributes:
        original_index: 0-indexed page number in the source PDF
        raster: Rendered page image
        merge_mode: Shape of the group this slot starts (NONE if it starts none)
        merged_raster: Cached composite, only set while merge_mode is a merge
        merged_key: Inputs the cached composite was built from
            (start index, mode, raster identities)
    """
    original_index: int
    raster: "Image.Image"
    merge_mode: MergeMode = MergeMode.NONE
    merged_raster: Optional["Image.Image"] = None
    merged_key: Optional[CacheKey] = None

    def reset_merge(self) -> None:
        """Drop merge mode and cached composite."""
        self.merge_mode = MergeMode.NONE
        self.merged_raster = None
        self.merged_key = None

    def invalidate_composite(self) -> None:
        """Forget the cached composite but keep the merge mode."""
        self.merged_raster = None
        self.merged_key = None


class PageSet:
    """
    Ordered sequence of PageSlots for one document.

    Behaves as a read-only sequence; the only structural mutation is
    swap(), used by the reorder operator. Slot fields are changed by
    the merge state machine.

    Example:
        >>> page_set = PageSet.from_rasters([img1, img2, img3])
        >>> len(page_set)
        3
        >>> [s.original_index for s in page_set]
        [0, 1, 2]
    """

    def __init__(self, slots: Optional[Sequence[PageSlot]] = None) -> None:
        self._slots: List[PageSlot] = list(slots or [])

    @classmethod
    def from_rasters(cls, rasters: Sequence["Image.Image"]) -> PageSet:
        """Create one unmerged slot per raster, in source order."""
        return cls([PageSlot(original_index=i, raster=r) for i, r in enumerate(rasters)])

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> PageSlot:
        return self._slots[index]

    def __iter__(self) -> Iterator[PageSlot]:
        return iter(self._slots)

    def __repr__(self) -> str:
        modes = ", ".join(f"{s.original_index}:{s.merge_mode}" for s in self._slots)
        return f"PageSet([{modes}])"

    @property
    def original_order(self) -> List[int]:
        """Original page indices in current order."""
        return [s.original_index for s in self._slots]

    def swap(self, i: int, j: int) -> None:
        """Exchange two whole slot records."""
        self._slots[i], self._slots[j] = self._slots[j], self._slots[i]

    def clear(self) -> None:
        self._slots.clear()


@dataclass(frozen=True)
class Document:
    """
    One loaded source PDF.

    The raw bytes are never modified; only the page set evolves.

    Attributes:
        name: Source file name (e.g. "report.pdf")
        data: Raw PDF bytes
        page_set: Arrangement state for this document
        doc_id: Stable identity within a session
    """
    name: str
    data: bytes = field(repr=False)
    page_set: PageSet = field(repr=False)
    doc_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def base_name(self) -> str:
        """File name without a trailing .pdf suffix (case-insensitive)."""
        if self.name.lower().endswith(".pdf"):
            return self.name[:-4]
        return self.name

    @property
    def page_count(self) -> int:
        return len(self.page_set)
