"""
Retrieval of vendor SDK archives and installers.

This package handles:
1. Streaming http(s) downloads with requests
2. Copying operator-supplied local archives (file:// urls)
3. Reporting expected failures as results instead of exceptions
"""

from .fetcher import Fetcher

__all__ = ["Fetcher"]
