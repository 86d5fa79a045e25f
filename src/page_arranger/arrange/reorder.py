"""
Module: arrange.reorder

Purpose:
    Manual page movement. Swaps a slot with its left or right neighbour,
    moving original index, raster, merge mode and cached composite as one
    record.

Key Functions:
    - move(): Swap slot i with slot i + direction

Used By:
    - cli: Scripted move operations
"""

from __future__ import annotations

import logging
from typing import Set

from page_arranger.core.models import PageSet

from .merge import group_owner

logger = logging.getLogger(__name__)


def move(page_set: PageSet, i: int, direction: int) -> bool:
    """
    Swap slot i with its neighbour in the given direction.

    Out-of-range moves are ignored. Any merge group whose span includes
    either swapped position loses its cached composite, since different
    rasters now sit inside it; the group's merge mode is kept.

    Args:
        page_set: Page set to mutate
        i: Index of the slot to move
        direction: -1 (towards the start) or +1 (towards the end)

    Returns:
        True if the slots were swapped

    Example:
        >>> move(page_set, 0, +1)
        True
        >>> move(page_set, 0, -1)  # nothing before slot 0
        False
    """
    if direction not in (-1, 1):
        logger.debug(f"Ignoring move of slot {i}: invalid direction {direction}")
        return False
    target = i + direction
    if not (0 <= i < len(page_set) and 0 <= target < len(page_set)):
        logger.debug(f"Ignoring move of slot {i} to {target}: out of range")
        return False

    # Collect leads before and after the swap; a lead may itself be moved
    affected = _group_leads(page_set, i) | _group_leads(page_set, target)
    stale = [page_set[lead] for lead in affected]
    page_set.swap(i, target)
    stale += [page_set[lead] for lead in _group_leads(page_set, i) | _group_leads(page_set, target)]

    for slot in stale:
        if slot.merged_raster is not None:
            logger.debug(f"Invalidated composite for group led by page {slot.original_index + 1}")
        slot.invalidate_composite()
    return True


def _group_leads(page_set: PageSet, i: int) -> Set[int]:
    """Leads of groups touching slot i (its owner and/or i itself)."""
    leads = set()
    owner = group_owner(page_set, i)
    if owner is not None:
        leads.add(owner)
    if page_set[i].merge_mode.is_merge:
        leads.add(i)
    return leads
