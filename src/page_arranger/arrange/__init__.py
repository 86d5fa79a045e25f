"""
Module: arrange

Purpose:
    Page arrangement engine: merge state machine, reorder operator,
    export planning and the session that owns loaded documents.

Key Functions:
    - apply_merge() / clear_merge(): Merge state changes
    - can_start_pair() / can_start_grid(): Eligibility predicates
    - move(): Swap adjacent slots
    - plan_export(): Ordered export units

Key Classes:
    - ArrangeConfig: Configuration
    - Session: Loaded documents
    - ExportUnit: One output page
"""

from .config import ArrangeConfig
from .merge import (
    apply_merge,
    can_merge,
    can_start_grid,
    can_start_pair,
    clear_merge,
    ensure_composite,
    find_overlaps,
    group_owner,
    slot_label,
)
from .planner import ExportUnit, plan_export
from .reorder import move
from .session import LoadResult, Session, SessionError

__all__ = [
    # Config
    "ArrangeConfig",
    # Merge
    "apply_merge",
    "can_merge",
    "can_start_grid",
    "can_start_pair",
    "clear_merge",
    "ensure_composite",
    "find_overlaps",
    "group_owner",
    "slot_label",
    # Planning
    "ExportUnit",
    "plan_export",
    # Reorder
    "move",
    # Session
    "LoadResult",
    "Session",
    "SessionError",
]
