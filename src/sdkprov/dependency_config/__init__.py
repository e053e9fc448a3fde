"""
Dependency configuration management.

This package handles:
1. Applying provision.toml overrides to the dependency catalogue
2. Expanding version and platform placeholders into DependencySpecs
3. Tracking the provisioning state of every dependency in a run
"""

from .config_manager import DependencyConfigManager, DependencyState, ProvisionStatus

__all__ = ["DependencyConfigManager", "DependencyState", "ProvisionStatus"]
