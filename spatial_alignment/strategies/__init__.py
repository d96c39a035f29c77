"""Alignment strategy implementations."""

from .multi_parent import MultiParentAlignmentMode, MultiParentAlignmentStrategy

__all__ = [
    "MultiParentAlignmentMode",
    "MultiParentAlignmentStrategy",
]
