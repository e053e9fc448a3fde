"""
Archive layout normalization.

This package handles:
1. Abstracting directory listings (local disk or in-memory fixtures)
2. Finding the effective package root of an extracted archive
"""

from .listing import DirectoryListing, InMemoryDirectoryListing, LocalDirectoryListing
from .normalizer import normalize

__all__ = [
    "DirectoryListing",
    "InMemoryDirectoryListing",
    "LocalDirectoryListing",
    "normalize",
]
