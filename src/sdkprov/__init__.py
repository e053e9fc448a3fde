"""
sdkprov provisions the vendor SDKs (CUDA toolkit, cuDNN, TensorRT and
OpenVINO) that an accelerated inference-engine build links against.

Each dependency is resolved to an ordered list of download candidates,
fetched, extracted, normalized to its real package root, installed into its
canonical install root and verified against a manifest of expected files.
"""

from sdkprov.dependency_config import DependencyConfigManager
from sdkprov.dependency_models import (
    DependencySpec,
    FetchResult,
    InstalledTree,
    SdkDependenciesConfig,
    VerificationReport,
)
from sdkprov.dependency_provisioner import DependencyProvisioner
from sdkprov.sdkprov_config import ProvisionConfig
from sdkprov.sdkprov_logger import ProvisionLogger

__all__ = [
    "DependencyConfigManager",
    "DependencyProvisioner",
    "DependencySpec",
    "FetchResult",
    "InstalledTree",
    "ProvisionConfig",
    "ProvisionLogger",
    "SdkDependenciesConfig",
    "VerificationReport",
]
