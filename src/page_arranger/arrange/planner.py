"""
Module: arrange.planner

Purpose:
    Walk a PageSet left to right and produce the ordered export units:
    one per unmerged slot and one per merge group. The same plan drives
    the reconstructed PDF and the exported page images, so both always
    have the same count and boundaries.

Key Functions:
    - plan_export(): Build the export plan for a page set

Key Classes:
    - ExportUnit: One output page (single page or composite)

Dependencies:
    - PIL: Image type
    - arrange.merge: Composite cache

Used By:
    - output.reconstructor: PDF reconstruction
    - controller: Page image export
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image

from page_arranger.core.models import MergeMode, PageSet

from .merge import ensure_composite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportUnit:
    """
    One page of the exported output (immutable).

    Attributes:
        raster: Page image, or the group composite for merged units
        label: Human-readable span, e.g. "page 1" or "pages 2-3"
        start: First slot position covered (0-indexed, inclusive)
        stop: Slot position after the last one covered (exclusive)
        mode: Merge mode of the unit (NONE for single pages)
        original_indices: Source page indices in slot order

    Example:
        >>> unit = ExportUnit(img, "pages 2-3", 1, 3, MergeMode.VERTICAL, (1, 2))
        >>> unit.span
        range(1, 3)
    """
    raster: Image.Image
    label: str
    start: int
    stop: int
    mode: MergeMode
    original_indices: Tuple[int, ...]

    @property
    def is_merged(self) -> bool:
        return self.mode.is_merge

    @property
    def span(self) -> range:
        """Slot positions covered by this unit."""
        return range(self.start, self.stop)

    @property
    def original_index(self) -> int:
        """Source page index of a single-page unit."""
        return self.original_indices[0]


def plan_export(page_set: PageSet) -> List[ExportUnit]:
    """
    Build the ordered export plan for a page set.

    Algorithm:
    1. Slot with merge mode NONE: emit it as a single page, advance 1
    2. Group lead: emit the (cached or freshly rendered) composite
       labelled with the covered range, advance past the whole group
    3. Group that runs past the end: emit the lead as a single page
    4. Leads inside an earlier group (left there by moves) are skipped
       with a warning

    Args:
        page_set: Arranged page set

    Returns:
        Export units in output order

    Example:
        >>> [u.label for u in plan_export(page_set)]
        ['page 1', 'pages 2-3', 'page 4', 'page 5']
    """
    units: List[ExportUnit] = []
    i = 0
    count = len(page_set)

    while i < count:
        slot = page_set[i]
        mode = slot.merge_mode
        size = mode.group_size

        if mode.is_merge and i + size > count:
            logger.warning(
                f"{mode} merge at page {i + 1} is missing {i + size - count} "
                f"page(s); exporting it unmerged"
            )
            mode, size = MergeMode.NONE, 1

        if not mode.is_merge:
            units.append(ExportUnit(
                raster=slot.raster,
                label=f"page {i + 1}",
                start=i,
                stop=i + 1,
                mode=MergeMode.NONE,
                original_indices=(slot.original_index,),
            ))
            i += 1
            continue

        for j in range(i + 1, i + size):
            if page_set[j].merge_mode.is_merge:
                logger.warning(
                    f"{page_set[j].merge_mode} merge at page {j + 1} lies inside the "
                    f"{mode} merge at page {i + 1}; ignoring it"
                )

        units.append(ExportUnit(
            raster=ensure_composite(page_set, i),
            label=f"pages {i + 1}-{i + size}",
            start=i,
            stop=i + size,
            mode=mode,
            original_indices=tuple(page_set[j].original_index for j in range(i, i + size)),
        ))
        i += size

    return units
