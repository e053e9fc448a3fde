"""
Pydantic models for the values that flow between the provisioning stages.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from sdkprov.dependency_models.sdk_dependencies import ManifestEntry


class DependencySpec(BaseModel):
    """
    Everything needed to provision one dependency in one run.

    Built by the DependencyConfigManager from the catalogue and the run
    configuration; immutable afterwards. Candidate urls are kept as
    templates and expanded by the SourceResolver.
    """

    name: str
    version: str
    major_minor_version: str
    platform: str
    candidate_urls: Tuple[str, ...] = ()
    manifest: Tuple[ManifestEntry, ...] = ()
    install_root: str
    marker: str
    nested_pattern: Optional[str] = None
    archive_type: str = "zip"
    override_env: Optional[str] = None
    bundled_in: Optional[str] = None
    installer_args: Tuple[str, ...] = ()
    remediation: Tuple[str, ...] = ()
    build_env: Optional[str] = None

    class Config:
        frozen = True

    @property
    def major_version(self) -> str:
        return self.version.split(".")[0]

    @property
    def short_version(self) -> str:
        """First three components of the version, e.g. 10.0.1 for 10.0.1.6."""
        return ".".join(self.version.split(".")[:3])

    def template_values(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "major_minor": self.major_minor_version,
            "major": self.major_version,
            "short_version": self.short_version,
            "platform": self.platform,
        }


class RetrievalAttempt(BaseModel):
    """A single location to try, in order."""

    url: str
    source: str = Field(..., description='"override" or "static"')
    env_var: Optional[str] = None

    class Config:
        frozen = True


class FetchResult(BaseModel):
    """
    Outcome of retrieving one candidate.

    On success archive_path is set; on failure error_message carries the
    underlying transport or HTTP error.
    """

    source_url: str
    archive_path: Optional[str] = None
    byte_size: int = 0
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.archive_path is not None and self.error_message is None

    @classmethod
    def failure(cls, url: str, message: str) -> "FetchResult":
        return cls(source_url=url, error_message=message)


class InstalledTree(BaseModel):
    """Final on-disk state of an install root."""

    install_root: str
    top_level_entries: Tuple[str, ...] = ()
    linked: bool = False


class VerificationEntry(BaseModel):
    path: str
    present: bool
    resolved_path: Optional[str] = None
    used_alternate: bool = False


class VerificationReport(BaseModel):
    """
    Per-path verification results. `passed` is advisory: whether a gap is
    fatal is decided by the verifier's strict flag, not by the report.
    """

    install_root: str
    entries: Dict[str, VerificationEntry] = Field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(entry.present for entry in self.entries.values())

    def missing(self) -> List[str]:
        return [path for path, entry in self.entries.items() if not entry.present]

    def as_mapping(self) -> Dict[str, bool]:
        return {path: entry.present for path, entry in self.entries.items()}

    def format_listing(self) -> List[str]:
        lines = []
        for path, entry in self.entries.items():
            if not entry.present:
                lines.append(f"[MISSING] {path}")
            elif entry.used_alternate:
                lines.append(f"[OK] {path} (found {entry.resolved_path})")
            else:
                lines.append(f"[OK] {path}")
        return lines


class ProvisionOutcome(BaseModel):
    """Result of provisioning a single dependency."""

    name: str
    install_root: str
    fetch_result: Optional[FetchResult] = None
    installed_tree: InstalledTree
    report: VerificationReport

    @property
    def linked(self) -> bool:
        return self.installed_tree.linked
