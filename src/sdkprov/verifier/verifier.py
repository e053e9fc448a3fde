"""
Verifier implementation.

Checks an installed tree against the manifest of expected artifacts.
"""

import glob
import logging
import os
from typing import Iterable, Optional

from sdkprov.dependency_models import ManifestEntry, VerificationEntry, VerificationReport
from sdkprov.sdkprov_exceptions import VerificationGap
from sdkprov.sdkprov_logger import ProvisionLogger


class Verifier:
    """
    Verifies install roots against manifests.

    In permissive mode (the default) missing artifacts are logged as warnings
    and left for the downstream build to trip over. In strict mode they raise
    VerificationGap.
    """

    def __init__(self, logger: ProvisionLogger, strict: bool = False):
        self.logger = logger
        self.strict = strict

    def verify(self, install_root: str, manifest: Iterable[ManifestEntry]) -> VerificationReport:
        """
        Check every manifest entry under install_root.

        Args:
            install_root: Installed tree to check
            manifest: Expected relative paths, each with optional alternates

        Returns:
            VerificationReport with one entry per manifest path

        Raises:
            VerificationGap: In strict mode, if any entry is missing
        """
        report = VerificationReport(install_root=str(install_root))
        for item in manifest:
            report.entries[item.path] = self._check(str(install_root), item)

        self.logger.log(f"Verification of {install_root}:", logging.INFO)
        for line in report.format_listing():
            level = logging.WARNING if line.startswith("[MISSING]") else logging.INFO
            self.logger.log(f"  {line}", level)

        if not report.passed:
            if self.strict:
                raise VerificationGap(str(install_root), report.missing())
            self.logger.log(
                f"{len(report.missing())} expected path(s) missing under {install_root}; "
                "continuing, the build may fail to find them",
                logging.WARNING,
            )
        return report

    def _check(self, install_root: str, item: ManifestEntry) -> VerificationEntry:
        found = self._find(install_root, item.path)
        if found is not None:
            return VerificationEntry(path=item.path, present=True, resolved_path=found)

        for alternate in item.alternates:
            found = self._find(install_root, alternate)
            if found is not None:
                return VerificationEntry(
                    path=item.path, present=True, resolved_path=found, used_alternate=True
                )

        return VerificationEntry(path=item.path, present=False)

    @staticmethod
    def _find(install_root: str, pattern: str) -> Optional[str]:
        """First match of a relative glob, as a path relative to install_root."""
        matches = sorted(glob.glob(os.path.join(glob.escape(install_root), pattern)))
        if not matches:
            return None
        return os.path.relpath(matches[0], install_root).replace(os.sep, "/")
