"""
Source resolution for vendor SDK downloads.
"""

from .resolver import SourceResolver

__all__ = ["SourceResolver"]
