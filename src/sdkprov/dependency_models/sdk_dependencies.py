"""
Pydantic data models for the sdk_dependencies.json catalogue.

The catalogue describes, for every vendor SDK, its default version, the
per-platform download candidates, the archive layout hints used to find the
package root and the manifest of artifacts a finished install must contain.
"""

import json
import pathlib
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from sdkprov.sdkprov_exceptions import ConfigurationError

DEFAULT_CATALOGUE_PATH = (
    pathlib.Path(__file__).parent.parent / "dependencies" / "sdk_dependencies.json"
)


class ManifestEntry(BaseModel):
    """
    One expected artifact of an installation.

    `path` is a glob relative to the install root. `alternates` are tried in
    order when the canonical path is missing (typically version-qualified
    file names such as libfoo.so.9).
    """

    path: str = Field(..., description="Relative path or glob")
    alternates: List[str] = Field(default_factory=list)
    platforms: Optional[List[str]] = Field(
        None, description="Restrict the entry to these platform ids"
    )
    description: Optional[str] = Field(None, alias="_description")

    class Config:
        frozen = True
        populate_by_name = True

    def applies_to(self, platform_id: str) -> bool:
        return not self.platforms or platform_id in self.platforms


class SdkDependency(BaseModel):
    """
    A single vendor SDK as declared in the catalogue.

    Per-platform values (urls, install roots, installer arguments) are keyed
    by platform id, e.g. "linux-x64" or "win-x64".
    """

    description: Optional[str] = Field(None, alias="_description")
    version: str
    major_minor_version: str = Field(..., alias="majorMinorVersion")
    archive_type: str = Field(..., alias="archiveType")
    marker: str = Field(..., description="Relative path proving a directory is the package root")
    nested_pattern: Optional[str] = Field(None, alias="nestedPattern")
    install_root: Dict[str, str] = Field(..., alias="installRoot")
    urls: Dict[str, List[str]] = Field(default_factory=dict)
    manifest: List[ManifestEntry] = Field(default_factory=list)
    override_env: Optional[str] = Field(None, alias="overrideEnv")
    bundled_in: Optional[str] = Field(None, alias="bundledIn")
    installer_args: Dict[str, List[str]] = Field(default_factory=dict, alias="installerArgs")
    remediation: List[str] = Field(default_factory=list)
    build_env: Optional[str] = Field(None, alias="buildEnv")

    class Config:
        extra = "forbid"
        populate_by_name = True

    def urls_for(self, platform_id: str) -> List[str]:
        return list(self.urls.get(platform_id, []))

    def install_root_for(self, platform_id: str) -> Optional[str]:
        return self.install_root.get(platform_id)

    def installer_args_for(self, platform_id: str) -> List[str]:
        return list(self.installer_args.get(platform_id, []))

    def manifest_for(self, platform_id: str) -> List[ManifestEntry]:
        return [entry for entry in self.manifest if entry.applies_to(platform_id)]


class SdkDependenciesConfig(BaseModel):
    """
    Complete dependency catalogue.

    Structure:
    {
      "_description": "...",
      "dependencies": {
        "cuda_toolkit": SdkDependency,
        "cudnn": SdkDependency,
        ...
      }
    }

    The order of "dependencies" is the default provisioning order; a
    dependency that is bundled in a sibling must come after that sibling.
    """

    description: Optional[str] = Field(None, alias="_description")
    dependencies: Dict[str, SdkDependency] = Field(default_factory=dict)

    class Config:
        populate_by_name = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SdkDependenciesConfig":
        try:
            config = cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid dependency catalogue: {e}") from e
        config.validate_siblings()
        return config

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "SdkDependenciesConfig":
        """
        Loads a catalogue from disk, defaulting to the one shipped with sdkprov.
        """
        catalogue_path = pathlib.Path(path) if path else DEFAULT_CATALOGUE_PATH
        try:
            with open(catalogue_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Could not read dependency catalogue {catalogue_path}: {e}"
            ) from e
        return cls.from_dict(data)

    def validate_siblings(self) -> None:
        names = list(self.dependencies)
        for index, (name, dependency) in enumerate(self.dependencies.items()):
            sibling = dependency.bundled_in
            if sibling is None:
                continue
            if sibling not in self.dependencies:
                raise ConfigurationError(
                    f"{name} is bundled in unknown dependency {sibling}"
                )
            if names.index(sibling) > index:
                raise ConfigurationError(
                    f"{name} is bundled in {sibling}, which must be declared before it"
                )

    def get_dependency(self, name: str) -> Optional[SdkDependency]:
        return self.dependencies.get(name)

    def names(self) -> List[str]:
        return list(self.dependencies)
