"""
Installation of normalized package trees into canonical install roots.
"""

from .installer import Installer

__all__ = ["Installer"]
