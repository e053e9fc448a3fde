"""
Locates the real package root inside an extracted vendor archive.

Vendor archives put their content at inconsistent depths: directly at the
archive root, inside one package-named folder, or inside a package-named
folder that wraps a differently named one. normalize() probes these shapes
in order and falls back to a breadth-first search for the marker.
"""

import fnmatch
from collections import deque
from pathlib import PurePath
from typing import List, Optional

from sdkprov.archive_normalizer.listing import DirectoryListing
from sdkprov.sdkprov_exceptions import StructureMismatch

# Directories that archivers add next to the real content.
IGNORED_DIRECTORIES = ("__MACOSX",)


def _content_subdirectories(listing: DirectoryListing, path: PurePath) -> List[str]:
    return [
        name
        for name in listing.subdirectories(path)
        if name not in IGNORED_DIRECTORIES and not name.startswith(".")
    ]


def normalize(
    listing: DirectoryListing,
    extracted_root: PurePath,
    marker: str,
    nested_pattern: Optional[str] = None,
) -> PurePath:
    """
    Return the directory under extracted_root that directly contains marker.

    Args:
        listing: Directory listing to probe
        extracted_root: Root of the extracted archive
        marker: Relative path that only exists at the package root,
            e.g. "include" or "include/cudnn.h"
        nested_pattern: Glob for the inner folder of two-level wrapped
            archives, e.g. "TensorRT-*"

    Raises:
        StructureMismatch: If no directory in the tree contains marker
    """
    if listing.exists(extracted_root / marker):
        return extracted_root

    subdirectories = _content_subdirectories(listing, extracted_root)
    if subdirectories:
        wrapper = extracted_root / subdirectories[0]
        if listing.exists(wrapper / marker):
            return wrapper

        if nested_pattern:
            for name in _content_subdirectories(listing, wrapper):
                nested = wrapper / name
                if fnmatch.fnmatch(name, nested_pattern) and listing.exists(nested / marker):
                    return nested

    found = _search(listing, extracted_root, marker)
    if found is None:
        raise StructureMismatch(
            f"Could not locate package root containing '{marker}' under {extracted_root}",
            marker=marker,
        )
    return found


def _search(listing: DirectoryListing, root: PurePath, marker: str) -> Optional[PurePath]:
    """Breadth-first, so the shallowest match wins; siblings in sorted order."""
    queue = deque([root])
    while queue:
        current = queue.popleft()
        if listing.exists(current / marker):
            return current
        for name in _content_subdirectories(listing, current):
            queue.append(current / name)
    return None
