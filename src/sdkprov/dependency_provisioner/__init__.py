"""
Dependency provisioning.

This package handles:
1. Trying retrieval candidates in order until one succeeds
2. Extracting, normalizing and installing the fetched archive
3. Falling back to linking a copy bundled in an installed sibling
4. Verifying the result and updating dependency states
"""

from .provisioner import DependencyProvisioner

__all__ = ["DependencyProvisioner"]
