"""
Dependency configuration manager.

Combines the dependency catalogue with the run configuration and the current
platform into immutable DependencySpecs, and tracks the provisioning state of
each dependency during a run.
"""

import os
from typing import Dict, List, Optional

from sdkprov.dependency_models import (
    DependencySpec,
    ManifestEntry,
    ProvisionOutcome,
    SdkDependenciesConfig,
    SdkDependency,
)
from sdkprov.sdkprov_config import ProvisionConfig
from sdkprov.sdkprov_exceptions import ConfigurationError
from sdkprov.sdkprov_utils import PlatformId, PlatformUtils


class ProvisionStatus:
    """Enumeration of provisioning statuses."""

    PENDING = "pending"
    COMPLETED = "completed"
    LINKED = "linked"
    FAILED = "failed"


class DependencyState:
    """
    Current state of a dependency.

    Tracks whether a dependency has been provisioned and where it lives.
    """

    def __init__(
            self,
            name: str,
            status: str,
            install_root: Optional[str] = None,
            verified: Optional[bool] = None,
            error_message: Optional[str] = None,
    ):
        """
        Initialize dependency state.

        Args:
            name: Dependency name from the catalogue
            status: Current provisioning status
            install_root: Where the dependency was installed
            verified: Whether every manifest entry was found
            error_message: Error message if provisioning failed
        """
        self.name = name
        self.status = status
        self.install_root = install_root
        self.verified = verified
        self.error_message = error_message

    def is_installed(self) -> bool:
        """Check if the dependency has been installed or linked."""
        return self.status in (ProvisionStatus.COMPLETED, ProvisionStatus.LINKED)

    def __repr__(self) -> str:
        return (
            f"DependencyState(name={self.name}, "
            f"status={self.status}, path={self.install_root})"
        )


class DependencyConfigManager:
    """
    Manages dependency configuration and provisioning state.

    Applies version, install root and url overrides from ProvisionConfig to
    the catalogue entries and produces one DependencySpec per selected
    dependency, in catalogue order.
    """

    def __init__(
        self,
        dependencies_config: SdkDependenciesConfig,
        provision_config: ProvisionConfig,
        platform_id: Optional[PlatformId] = None,
    ):
        """
        Initialize the dependency config manager.

        Args:
            dependencies_config: Loaded dependency catalogue
            provision_config: Run configuration with overrides
            platform_id: Target platform, detected when omitted
        """
        self.dependencies = dependencies_config
        self.provision_config = provision_config
        self.platform_id = platform_id or PlatformUtils.get_platform_id()
        self.specs: Dict[str, DependencySpec] = {}
        self.dependency_states: Dict[str, DependencyState] = {}

    def create_specs(self) -> None:
        """
        Build a DependencySpec for every selected dependency.

        Raises:
            ConfigurationError: If a selected dependency is unknown or has
                no install root for the target platform
        """
        selected = self.provision_config.dependencies or self.dependencies.names()
        unknown = [name for name in selected if self.dependencies.get_dependency(name) is None]
        if unknown:
            raise ConfigurationError(f"Unknown dependencies: {', '.join(unknown)}")

        self.specs = {}
        self.dependency_states = {}
        # Catalogue order wins so that bundled siblings are provisioned first.
        for name in self.dependencies.names():
            if name not in selected:
                continue
            dep = self.dependencies.get_dependency(name)
            self.specs[name] = self._create_spec(name, dep)
            self.dependency_states[name] = DependencyState(name, ProvisionStatus.PENDING)

    def _create_spec(self, name: str, dep: SdkDependency) -> DependencySpec:
        """
        Create the spec for a specific dependency.

        Args:
            name: The dependency name (e.g., "cudnn")
            dep: The catalogue entry

        Returns:
            DependencySpec with install root, manifest and installer
            arguments expanded for this run
        """
        platform = self.platform_id.value
        override = self.provision_config.get_override(name)

        version = dep.version
        major_minor = dep.major_minor_version
        urls = dep.urls_for(platform)
        install_root = dep.install_root_for(platform)

        if override is not None:
            if override.version:
                version = override.version
                major_minor = override.major_minor_version or major_minor
            if override.urls:
                urls = list(override.urls)
            if override.install_root:
                install_root = override.install_root

        if not install_root:
            raise ConfigurationError(f"No install root for {name} on {platform}")

        values = {
            "name": name,
            "version": version,
            "major_minor": major_minor,
            "major": version.split(".")[0],
            "short_version": ".".join(version.split(".")[:3]),
            "platform": platform,
        }
        # Candidate urls stay templates for the resolver; bad placeholders
        # are configuration errors, caught here before any download starts.
        for url in urls:
            self._expand(url, values, name)
        install_root = os.path.abspath(
            os.path.expanduser(self._expand(install_root, values, name))
        )
        values["install_root"] = install_root

        manifest = tuple(
            ManifestEntry(
                path=self._expand(entry.path, values, name),
                alternates=[self._expand(alt, values, name) for alt in entry.alternates],
                platforms=entry.platforms,
            )
            for entry in dep.manifest_for(platform)
        )

        return DependencySpec(
            name=name,
            version=version,
            major_minor_version=major_minor,
            platform=platform,
            candidate_urls=tuple(urls),
            manifest=manifest,
            install_root=install_root,
            marker=dep.marker,
            nested_pattern=dep.nested_pattern,
            archive_type=dep.archive_type,
            override_env=dep.override_env,
            bundled_in=dep.bundled_in,
            installer_args=tuple(
                self._expand(arg, values, name) for arg in dep.installer_args_for(platform)
            ),
            remediation=tuple(self._expand(step, values, name) for step in dep.remediation),
            build_env=dep.build_env,
        )

    @staticmethod
    def _expand(template: str, values: Dict[str, str], name: str) -> str:
        try:
            return template.format(**values)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Bad placeholder in '{template}' for {name}: {e}"
            ) from e

    def get_specs(self) -> List[DependencySpec]:
        """
        Get all specs, in provisioning order.
        """
        return list(self.specs.values())

    def get_spec(self, name: str) -> Optional[DependencySpec]:
        return self.specs.get(name)

    def get_install_root(self, name: str) -> Optional[str]:
        """
        Install root of a dependency, even when it is not selected for this run.

        Used to find bundled siblings that were installed by an earlier run.
        """
        spec = self.specs.get(name)
        if spec is not None:
            return spec.install_root
        dep = self.dependencies.get_dependency(name)
        if dep is None:
            return None
        return self._create_spec(name, dep).install_root

    def mark_completed(self, outcome: ProvisionOutcome) -> None:
        """
        Mark a dependency as installed, or linked from a sibling.
        """
        status = ProvisionStatus.LINKED if outcome.linked else ProvisionStatus.COMPLETED
        self.dependency_states[outcome.name] = DependencyState(
            name=outcome.name,
            status=status,
            install_root=outcome.install_root,
            verified=outcome.report.passed,
        )

    def mark_failed(self, name: str, error_message: str) -> None:
        self.dependency_states[name] = DependencyState(
            name=name,
            status=ProvisionStatus.FAILED,
            error_message=error_message,
        )

    def get_dependency_states(self) -> Dict[str, DependencyState]:
        """
        Get the states of all dependencies.

        Returns:
            Dictionary mapping dependency names to DependencyState objects
        """
        return self.dependency_states

    def get_dependency_state(self, name: str) -> Optional[DependencyState]:
        return self.dependency_states.get(name)

    def build_environment(self) -> Dict[str, str]:
        """
        Environment assignments handed to the downstream build for every
        installed dependency that declares a build variable.
        """
        env = {}
        for name, spec in self.specs.items():
            state = self.dependency_states.get(name)
            if spec.build_env and state is not None and state.is_installed():
                env[spec.build_env] = spec.install_root
        return env
