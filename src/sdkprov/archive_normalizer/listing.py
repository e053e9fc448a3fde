"""
Directory listing abstraction used by the archive normalizer.

The normalizer only needs to ask whether a path exists and which
subdirectories a directory has, so it can run against the real filesystem or
against a synthetic tree in tests.
"""

import os
from abc import ABC, abstractmethod
from pathlib import PurePath, PurePosixPath
from typing import Iterable, List, Set, Tuple


class DirectoryListing(ABC):
    """Read-only view of a directory tree."""

    @abstractmethod
    def exists(self, path: PurePath) -> bool:
        """Whether path names an existing file or directory."""

    @abstractmethod
    def subdirectories(self, path: PurePath) -> List[str]:
        """Names of the directories directly under path, sorted."""


class LocalDirectoryListing(DirectoryListing):
    """Listing backed by the local filesystem."""

    def exists(self, path: PurePath) -> bool:
        return os.path.exists(path)

    def subdirectories(self, path: PurePath) -> List[str]:
        try:
            with os.scandir(path) as entries:
                # Symlinked directories are not descended into; vendor trees
                # may contain link cycles.
                return sorted(
                    entry.name
                    for entry in entries
                    if entry.is_dir(follow_symlinks=False)
                )
        except (FileNotFoundError, NotADirectoryError):
            return []


class InMemoryDirectoryListing(DirectoryListing):
    """
    Listing over a set of relative posix paths.

    Every ancestor of a listed path is a directory; a listed path ending in
    "/" is an (empty) directory, anything else is a file. Paths passed to
    exists() and subdirectories() are relative to PurePosixPath(".").

    >>> listing = InMemoryDirectoryListing(["pkg/include/foo.h", "pkg/lib/"])
    >>> listing.subdirectories(PurePosixPath("pkg"))
    ['include', 'lib']
    """

    def __init__(self, paths: Iterable[str]):
        self._entries: Set[Tuple[str, ...]] = set()
        self._directories: Set[Tuple[str, ...]] = {()}
        for raw in paths:
            parts = PurePosixPath(raw).parts
            if not parts:
                continue
            for depth in range(1, len(parts)):
                self._directories.add(parts[:depth])
            if raw.endswith("/"):
                self._directories.add(parts)
            self._entries.add(parts)
        self._entries.update(self._directories)

    def exists(self, path: PurePath) -> bool:
        return PurePosixPath(path).parts in self._entries

    def subdirectories(self, path: PurePath) -> List[str]:
        parts = PurePosixPath(path).parts
        depth = len(parts)
        return sorted(
            directory[depth]
            for directory in self._directories
            if len(directory) == depth + 1 and directory[:depth] == parts
        )
