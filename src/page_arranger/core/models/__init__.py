"""
Module: core.models

Purpose:
    Page slot, page set and document models.

Key Classes:
    - MergeMode: Shape of a merge group (none/vertical/horizontal/grid)
    - PageSlot: One displayed page position
    - PageSet: Ordered slots of one document
    - Document: Loaded source PDF and its page set
"""

from .pages import Document, MergeMode, PageSet, PageSlot

__all__ = [
    "Document",
    "MergeMode",
    "PageSet",
    "PageSlot",
]
