"""
Configuration parameters for a provisioning run, loaded from provision.toml.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from sdkprov.sdkprov_exceptions import ConfigurationError


PROVISION_TOML_SCHEMA = """
# Provisioning configuration for sdkprov

[provision]
# Dependencies to provision, in order. Defaults to the whole catalogue.
dependencies = ["cuda_toolkit", "cudnn", "tensorrt", "openvino"]

# Fail the run when an installed tree misses expected artifacts.
# When false, verification gaps are reported as warnings only.
strict_verification = false

# Parent directory for temporary download/extraction directories (optional)
# work_dir = "/tmp"

# Alternative dependency catalogue (optional)
# catalogue = "/path/to/sdk_dependencies.json"

# Per-dependency overrides (all keys optional)
[provision.cudnn]
# version = "9.1.0.70"
# major_minor_version = "9.1"
# install_root = "/usr/local/cudnn"
# urls = ["https://mirror.example.com/cudnn-{version}.tar.xz"]
"""

DEFAULT_CONFIG_FILE = "provision.toml"


def derive_major_minor(version: str) -> str:
    """
    Returns the major.minor prefix of a dotted version string
    """
    return ".".join(version.split(".")[:2])


@dataclass
class DependencyOverride:
    """Run-specific overrides for a single catalogue dependency."""

    name: str
    version: Optional[str] = None
    major_minor_version: Optional[str] = None
    install_root: Optional[str] = None
    urls: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "DependencyOverride":
        urls = data.get("urls", [])
        if not isinstance(urls, list):
            raise ConfigurationError(f"'urls' for {name} must be a list")

        version = data.get("version")
        major_minor = data.get("major_minor_version")
        if version and not major_minor:
            major_minor = derive_major_minor(version)

        return cls(
            name=name,
            version=version,
            major_minor_version=major_minor,
            install_root=data.get("install_root"),
            urls=[str(url) for url in urls],
        )


@dataclass
class ProvisionConfig:
    """
    Configuration for a provisioning run.
    """

    dependencies: List[str] = field(default_factory=list)
    overrides: Dict[str, DependencyOverride] = field(default_factory=dict)
    strict_verification: bool = False
    work_dir: Optional[str] = None
    catalogue: Optional[str] = None

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ProvisionConfig":
        """
        Create a ProvisionConfig from a dictionary (loaded from TOML).

        Args:
            config_dict: Dictionary loaded from provision.toml

        Returns:
            ProvisionConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        section = config_dict.get("provision", {})
        if not isinstance(section, dict):
            raise ConfigurationError("[provision] must be a table")

        dependencies = section.get("dependencies", [])
        if not isinstance(dependencies, list):
            raise ConfigurationError("'dependencies' must be a list")

        strict = section.get("strict_verification", False)
        if not isinstance(strict, bool):
            raise ConfigurationError("'strict_verification' must be a boolean")

        overrides = {}
        for key, value in section.items():
            if isinstance(value, dict):
                overrides[key] = DependencyOverride.from_dict(key, value)

        work_dir = section.get("work_dir")
        if work_dir is not None and not os.path.isdir(work_dir):
            raise ConfigurationError(f"work_dir does not exist: {work_dir}")

        return cls(
            dependencies=[str(name) for name in dependencies],
            overrides=overrides,
            strict_verification=strict,
            work_dir=work_dir,
            catalogue=section.get("catalogue"),
        )

    @classmethod
    def from_toml(cls, path: str) -> "ProvisionConfig":
        try:
            with open(path, "rb") as f:
                toml_dict = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to load {path}: {e}") from e
        return cls.from_dict(toml_dict)

    def get_override(self, name: str) -> Optional[DependencyOverride]:
        return self.overrides.get(name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert ProvisionConfig to dictionary representation."""
        return {
            "dependencies": list(self.dependencies),
            "overrides": {name: asdict(o) for name, o in self.overrides.items()},
            "strict_verification": self.strict_verification,
            "work_dir": self.work_dir,
            "catalogue": self.catalogue,
        }
