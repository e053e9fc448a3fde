"""
This file contains the exceptions raised while provisioning vendor SDKs.
"""

from typing import List, Optional, Sequence


class ProvisionException(Exception):
    """
    Base exception for every provisioning failure.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ProvisionException):
    """
    Raised when the dependency catalogue or the run configuration is invalid.
    """


class TransportFailure(ProvisionException):
    """
    A single candidate location could not be retrieved.

    Recorded by the fetcher and only surfaced as part of a SourceUnavailable
    once every candidate has failed.
    """

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.reason = message


class SourceUnavailable(ProvisionException):
    """
    No candidate, override or bundled sibling could supply a dependency.
    """

    def __init__(
        self,
        dependency_name: str,
        failures: Optional[Sequence[TransportFailure]] = None,
        remediation: Optional[Sequence[str]] = None,
    ):
        self.dependency_name = dependency_name
        self.failures: List[TransportFailure] = list(failures or [])
        self.remediation: List[str] = list(remediation or [])
        super().__init__(
            f"No source available for {dependency_name} "
            f"({len(self.failures)} candidate(s) tried)"
        )

    def remediation_text(self) -> str:
        lines = [f"Could not obtain {self.dependency_name}."]
        for failure in self.failures:
            lines.append(f"  - {failure.message}")
        if self.remediation:
            lines.append("To install it manually:")
            for index, step in enumerate(self.remediation, start=1):
                lines.append(f"  {index}. {step}")
        return "\n".join(lines)


class StructureMismatch(ProvisionException):
    """
    The extracted archive does not contain the expected package layout.
    """

    def __init__(self, message: str, marker: Optional[str] = None):
        super().__init__(message)
        self.marker = marker


class InstallerFailure(ProvisionException):
    """
    A vendor silent installer exited with an error.
    """


class VerificationGap(ProvisionException):
    """
    Expected artifacts are missing after installation.

    Only raised when verification runs in strict mode.
    """

    def __init__(self, install_root: str, missing: Sequence[str]):
        self.install_root = install_root
        self.missing = list(missing)
        super().__init__(
            f"{len(self.missing)} expected path(s) missing under {install_root}: "
            + ", ".join(self.missing)
        )
