"""
Dependency provisioner implementation.

Drives resolve -> fetch -> extract -> normalize -> install -> verify for
every dependency in a run.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from sdkprov.archive_normalizer import LocalDirectoryListing, normalize
from sdkprov.dependency_config import DependencyConfigManager, ProvisionStatus
from sdkprov.dependency_models import (
    DependencySpec,
    FetchResult,
    InstalledTree,
    ProvisionOutcome,
    RetrievalAttempt,
)
from sdkprov.fetcher import Fetcher
from sdkprov.installer import Installer
from sdkprov.sdkprov_exceptions import (
    InstallerFailure,
    ProvisionException,
    SourceUnavailable,
    StructureMismatch,
    TransportFailure,
)
from sdkprov.sdkprov_logger import ProvisionLogger
from sdkprov.sdkprov_utils import FileUtils
from sdkprov.source_resolver import SourceResolver
from sdkprov.verifier import Verifier


class DependencyProvisioner:
    """
    Provisions dependencies one at a time.

    Acquisition is strict and verification lenient: a dependency that cannot
    be fetched or whose archive has no recognizable package root aborts the
    run, while missing artifacts after installation are only warnings unless
    the verifier is strict.
    """

    def __init__(
        self,
        config_manager: DependencyConfigManager,
        logger: ProvisionLogger,
        resolver: Optional[SourceResolver] = None,
        fetcher: Optional[Fetcher] = None,
        installer: Optional[Installer] = None,
        verifier: Optional[Verifier] = None,
    ):
        """
        Initialize the dependency provisioner.

        Args:
            config_manager: The DependencyConfigManager with the run's specs
            logger: Logger for progress and error messages
            resolver, fetcher, installer, verifier: Stage implementations,
                defaults built from logger and the run configuration
        """
        self.config_manager = config_manager
        self.logger = logger
        self.resolver = resolver or SourceResolver(logger)
        self.fetcher = fetcher or Fetcher(logger)
        self.installer = installer or Installer(logger)
        self.verifier = verifier or Verifier(
            logger, strict=config_manager.provision_config.strict_verification
        )
        self.work_dir = config_manager.provision_config.work_dir

    def provision_all(self) -> List[ProvisionOutcome]:
        """
        Provision every pending dependency, in order.

        Returns:
            One outcome per dependency

        Raises:
            ProvisionException: The first fatal failure; later dependencies
                are left pending
        """
        specs = self.config_manager.get_specs()
        self.logger.log(f"Provisioning {len(specs)} dependencies", logging.INFO)

        outcomes = []
        for spec in specs:
            state = self.config_manager.get_dependency_state(spec.name)
            if state is not None and state.status != ProvisionStatus.PENDING:
                continue
            outcomes.append(self.provision(spec))
        return outcomes

    def provision(self, spec: DependencySpec) -> ProvisionOutcome:
        """
        Provision a single dependency.

        The temporary download/extraction directory is removed whether this
        succeeds or fails.
        """
        self.logger.log(
            f"Provisioning {spec.name} {spec.version} into {spec.install_root}",
            logging.INFO,
        )
        try:
            with tempfile.TemporaryDirectory(
                prefix=f"sdkprov-{spec.name}-", dir=self.work_dir
            ) as tmp_dir:
                outcome = self._provision(spec, tmp_dir)
        except ProvisionException as e:
            self.logger.log(f"Failed to provision {spec.name}: {e.message}", logging.ERROR)
            self.config_manager.mark_failed(spec.name, e.message)
            raise
        except OSError as e:
            message = f"Failed to install {spec.name} into {spec.install_root}: {e}"
            self.logger.log(message, logging.ERROR)
            self.config_manager.mark_failed(spec.name, message)
            raise InstallerFailure(message) from e

        self.config_manager.mark_completed(outcome)
        self.logger.log(
            f"Provisioned {spec.name} at {outcome.install_root}"
            + (" (linked)" if outcome.linked else ""),
            logging.INFO,
        )
        return outcome

    def _provision(self, spec: DependencySpec, tmp_dir: str) -> ProvisionOutcome:
        attempts = self.resolver.resolve(spec)
        self.logger.log(
            f"Retrieval attempts for {spec.name}: {[attempt.url for attempt in attempts]}",
            logging.DEBUG,
        )
        fetch_result, failures = self.fetch_first(attempts, os.path.join(tmp_dir, "download"))

        if fetch_result is None:
            if attempts and attempts[0].source == "override":
                # A set override is the only source, bundled copies included.
                raise SourceUnavailable(spec.name, failures, spec.remediation)
            tree = self._link_from_sibling(spec, failures)
        else:
            archive_type = FileUtils.guess_archive_type(
                Fetcher.file_name_for(fetch_result.source_url), spec.archive_type
            )
            if archive_type == "installer":
                tree = self.installer.run_silent_installer(
                    fetch_result.archive_path, spec.installer_args, spec.install_root
                )
            else:
                extract_dir = os.path.join(tmp_dir, "extracted")
                FileUtils.extract_archive(
                    self.logger, fetch_result.archive_path, extract_dir, archive_type
                )
                effective_root = normalize(
                    LocalDirectoryListing(), Path(extract_dir), spec.marker, spec.nested_pattern
                )
                self.logger.log(
                    f"Package root of {spec.name}: {os.path.relpath(effective_root, extract_dir)}",
                    logging.INFO,
                )
                tree = self.installer.install(str(effective_root), spec.install_root)

        report = self.verifier.verify(spec.install_root, spec.manifest)
        return ProvisionOutcome(
            name=spec.name,
            install_root=spec.install_root,
            fetch_result=fetch_result,
            installed_tree=tree,
            report=report,
        )

    def fetch_first(
        self, attempts: List[RetrievalAttempt], destination_dir: str
    ) -> Tuple[Optional[FetchResult], List[TransportFailure]]:
        """
        Try attempts in order and commit to the first successful fetch.

        Returns:
            The successful FetchResult (or None) and the failures recorded
            before it
        """
        failures = []
        for index, attempt in enumerate(attempts, start=1):
            self.logger.log(
                f"Candidate {index}/{len(attempts)} ({attempt.source}): {attempt.url}",
                logging.INFO,
            )
            result = self.fetcher.fetch(attempt.url, destination_dir)
            if result.ok:
                return result, failures
            failures.append(TransportFailure(attempt.url, result.error_message or "unknown error"))
        return None, failures

    def _link_from_sibling(
        self, spec: DependencySpec, failures: List[TransportFailure]
    ) -> InstalledTree:
        """
        Fall back to linking the package out of an installed sibling that
        bundles it.

        Raises:
            SourceUnavailable: If there is no sibling or it does not hold the package
        """
        if spec.bundled_in:
            sibling_root = self.config_manager.get_install_root(spec.bundled_in)
            if sibling_root and os.path.isdir(sibling_root):
                try:
                    effective_root = normalize(
                        LocalDirectoryListing(), Path(sibling_root), spec.marker, spec.nested_pattern
                    )
                except StructureMismatch:
                    self.logger.log(
                        f"{spec.bundled_in} at {sibling_root} does not bundle {spec.name}",
                        logging.WARNING,
                    )
                else:
                    self.logger.log(
                        f"No source for {spec.name}; linking the copy bundled in "
                        f"{spec.bundled_in} at {effective_root}",
                        logging.WARNING,
                    )
                    return self.installer.install(str(effective_root), spec.install_root, link=True)

        raise SourceUnavailable(spec.name, failures, spec.remediation)

    def get_summary(self) -> dict:
        """
        Get a summary of provisioning results.

        Returns:
            Dictionary with counts of completed, linked, failed and pending
            dependencies, and how many of the installed ones passed verification
        """
        states = self.config_manager.get_dependency_states().values()
        counts = {
            status: sum(1 for state in states if state.status == status)
            for status in (
                ProvisionStatus.COMPLETED,
                ProvisionStatus.LINKED,
                ProvisionStatus.FAILED,
                ProvisionStatus.PENDING,
            )
        }
        counts["verified"] = sum(1 for state in states if state.is_installed() and state.verified)
        counts["total"] = len(states)
        return counts
