"""
Module: core

Purpose:
    Data model shared by the arrange, imaging and output packages.
"""

from .models import Document, MergeMode, PageSet, PageSlot

__all__ = [
    "Document",
    "MergeMode",
    "PageSet",
    "PageSlot",
]
