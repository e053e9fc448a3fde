"""
Dependency models for vendor SDK provisioning.

This package provides Pydantic data models for the dependency catalogue
(sdk_dependencies.json) and for the values passed between the provisioning
stages: resolve, fetch, normalize, install and verify.
"""

from .sdk_dependencies import (
    DEFAULT_CATALOGUE_PATH,
    ManifestEntry,
    SdkDependency,
    SdkDependenciesConfig,
)
from .provisioning import (
    DependencySpec,
    FetchResult,
    InstalledTree,
    ProvisionOutcome,
    RetrievalAttempt,
    VerificationEntry,
    VerificationReport,
)

__all__ = [
    # Catalogue
    "DEFAULT_CATALOGUE_PATH",
    "ManifestEntry",
    "SdkDependency",
    "SdkDependenciesConfig",
    # Provisioning values
    "DependencySpec",
    "FetchResult",
    "InstalledTree",
    "ProvisionOutcome",
    "RetrievalAttempt",
    "VerificationEntry",
    "VerificationReport",
]
