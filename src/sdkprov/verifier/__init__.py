"""
Post-install verification against expected artifact manifests.
"""

from .verifier import Verifier

__all__ = ["Verifier"]
