"""
Module: arrange.merge

Purpose:
    Merge state machine for a PageSet. Decides which slots may start a
    merge group, applies and clears merges, and keeps the composite cache
    on each group lead in step with the rasters it was built from.

    A group started at slot i covers slots i .. i + group_size - 1.
    Slots after the lead are "consumed": they keep merge_mode NONE and
    are exported as part of the lead's composite.

Key Functions:
    - can_start_pair() / can_start_grid() / can_merge(): Eligibility predicates
    - apply_merge(): Start a group at a slot
    - clear_merge(): Drop the group started at a slot
    - ensure_composite(): Cached composite for a group lead
    - slot_label(): Display label for a slot
    - group_owner() / find_overlaps(): Group membership queries

Dependencies:
    - imaging.compositor: Composite rendering

Used By:
    - arrange.planner: Export planning
    - arrange.reorder: Cache invalidation
    - cli: Scripted merge operations
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from page_arranger.core.models import MergeMode, PageSlot
from page_arranger.core.models.pages import CacheKey
from page_arranger.imaging.compositor import composite

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Group membership
# ─────────────────────────────────────────────────────────────────────────────

def group_owner(slots: Sequence[PageSlot], i: int) -> Optional[int]:
    """
    Index of the earlier slot whose group covers slot i.

    Returns None when slot i is not consumed by a preceding group
    (a group lead is not its own owner).
    """
    # Grids are the widest group, so only the 3 preceding slots can reach i
    for j in range(max(0, i - 3), i):
        if slots[j].merge_mode.is_merge and j + slots[j].merge_mode.group_size > i:
            return j
    return None


def is_consumed(slots: Sequence[PageSlot], i: int) -> bool:
    """True if slot i belongs to a group started by an earlier slot."""
    return group_owner(slots, i) is not None


def group_span(slots: Sequence[PageSlot], i: int) -> range:
    """Slot indices covered by the group started at i (just i if unmerged)."""
    return range(i, min(len(slots), i + slots[i].merge_mode.group_size))


def find_overlaps(slots: Sequence[PageSlot]) -> List[Tuple[int, int]]:
    """
    Pairs (lead, other_lead) of merge groups that share a slot.

    A valid PageSet returns an empty list.
    """
    overlaps = []
    for i, slot in enumerate(slots):
        if not slot.merge_mode.is_merge:
            continue
        for j in range(i + 1, min(len(slots), i + slot.merge_mode.group_size)):
            if slots[j].merge_mode.is_merge:
                overlaps.append((i, j))
    return overlaps


# ─────────────────────────────────────────────────────────────────────────────
# Eligibility
# ─────────────────────────────────────────────────────────────────────────────

def _can_start(slots: Sequence[PageSlot], i: int, size: int) -> bool:
    if i < 0 or i + size > len(slots):
        return False
    if slots[i].merge_mode.is_merge:
        return False
    return not is_consumed(slots, i)


def can_start_pair(slots: Sequence[PageSlot], i: int) -> bool:
    """True if slot i may start a vertical or horizontal pair."""
    return _can_start(slots, i, 2)


def can_start_grid(slots: Sequence[PageSlot], i: int) -> bool:
    """True if slot i may start a 2x2 grid (needs slots i..i+3)."""
    return _can_start(slots, i, 4)


def can_merge(slots: Sequence[PageSlot], i: int, mode: MergeMode) -> bool:
    """Eligibility for any merge mode; NONE is never a merge."""
    if mode is MergeMode.GRID:
        return can_start_grid(slots, i)
    if mode.is_merge:
        return can_start_pair(slots, i)
    return False


# ─────────────────────────────────────────────────────────────────────────────
# Mutations
# ─────────────────────────────────────────────────────────────────────────────

def apply_merge(slots: Sequence[PageSlot], i: int, mode: MergeMode) -> bool:
    """
    Start a merge group of the given shape at slot i.

    Ineligible requests are ignored: the caller is expected to offer
    only eligible merges, so this returns False instead of raising.

    On success the composite is rendered and cached on slot i, and every
    follower slot has its merge state reset, even if it led a group of
    its own.

    Args:
        slots: PageSet (or any sequence of PageSlots)
        i: Index of the lead slot
        mode: VERTICAL, HORIZONTAL or GRID

    Returns:
        True if the merge was applied

    Example:
        >>> apply_merge(page_set, 1, MergeMode.VERTICAL)
        True
        >>> apply_merge(page_set, 2, MergeMode.HORIZONTAL)  # slot 2 consumed
        False
    """
    if not can_merge(slots, i, mode):
        logger.debug(f"Ignoring {mode} merge at slot {i}: not eligible")
        return False

    lead = slots[i]
    lead.merge_mode = mode
    for j in range(i + 1, i + mode.group_size):
        slots[j].reset_merge()

    ensure_composite(slots, i)
    logger.debug(f"Applied {mode} merge at slots {i}-{i + mode.group_size - 1}")
    return True


def clear_merge(slots: Sequence[PageSlot], i: int) -> None:
    """Drop the merge started at slot i; neighbours are not touched."""
    if 0 <= i < len(slots):
        slots[i].reset_merge()


# ─────────────────────────────────────────────────────────────────────────────
# Composite cache
# ─────────────────────────────────────────────────────────────────────────────

def composite_key(slots: Sequence[PageSlot], i: int) -> Optional[CacheKey]:
    """
    Cache key for the group started at slot i.

    Returns None if slot i is not a merge lead or the group runs past
    the end of the page set.
    """
    mode = slots[i].merge_mode
    if not mode.is_merge or i + mode.group_size > len(slots):
        return None
    rasters = tuple(id(slots[j].raster) for j in range(i, i + mode.group_size))
    return (i, mode, rasters)


def ensure_composite(slots: Sequence[PageSlot], i: int) -> Optional[Image.Image]:
    """
    Return the composite for the group started at slot i.

    Reuses slot i's cached composite while its key still matches,
    otherwise renders a fresh one and stores it.

    Returns:
        Composite image, or None if slot i does not lead a complete group
    """
    key = composite_key(slots, i)
    if key is None:
        return None

    lead = slots[i]
    if lead.merged_raster is not None and lead.merged_key == key:
        logger.debug(f"Composite cache hit for slot {i}")
        return lead.merged_raster

    mode = lead.merge_mode
    images = [slots[j].raster for j in range(i, i + mode.group_size)]
    lead.merged_raster = composite(mode, images)
    lead.merged_key = key
    return lead.merged_raster


# ─────────────────────────────────────────────────────────────────────────────
# Labels
# ─────────────────────────────────────────────────────────────────────────────

def slot_label(slots: Sequence[PageSlot], i: int) -> str:
    """
    Display label for slot i (1-based page number).

    Example:
        >>> slot_label(page_set, 1)
        'page 2 (starts vertical merge)'
        >>> slot_label(page_set, 2)
        'page 3 (merged into previous)'
    """
    number = i + 1
    if is_consumed(slots, i):
        return f"page {number} (merged into previous)"
    mode = slots[i].merge_mode
    if mode.is_merge:
        return f"page {number} (starts {mode} merge)"
    return f"page {number}"
