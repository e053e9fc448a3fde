"""
Installer implementation.

Places a normalized package tree into its canonical install root, either by
copying or, for dependencies bundled inside an installed sibling, by linking.
Runs vendor silent installers for dependencies shipped as installers.
"""

import logging
import os
import shutil
import stat
import subprocess
from typing import Sequence

from sdkprov.dependency_models import InstalledTree
from sdkprov.sdkprov_exceptions import InstallerFailure
from sdkprov.sdkprov_logger import ProvisionLogger
from sdkprov.sdkprov_utils import FileUtils


class Installer:
    """
    Copies or links package trees into install roots.

    Installs are not transactional: a failure leaves a partially populated
    install root. Re-running overwrites what is there, so an interrupted run
    is repaired by running again.
    """

    def __init__(self, logger: ProvisionLogger):
        self.logger = logger

    def install(self, effective_root: str, install_root: str, link: bool = False) -> InstalledTree:
        """
        Install the contents of effective_root into install_root.

        Args:
            effective_root: Directory whose entries make up the package
            install_root: Canonical destination, created if missing
            link: Symlink each top-level entry instead of copying it

        Returns:
            InstalledTree describing install_root afterwards
        """
        effective_root = os.path.abspath(str(effective_root))
        install_root = os.path.abspath(str(install_root))
        os.makedirs(install_root, exist_ok=True)

        if os.path.realpath(effective_root) == os.path.realpath(install_root):
            self.logger.log(
                f"{install_root} already holds the package, nothing to install",
                logging.INFO,
            )
        elif link:
            self.logger.log(f"Linking {effective_root} into {install_root}", logging.INFO)
            self._link_entries(effective_root, install_root)
        else:
            self.logger.log(f"Copying {effective_root} into {install_root}", logging.INFO)
            self._copy_tree(effective_root, install_root)

        return self.describe(install_root, linked=link)

    @staticmethod
    def describe(install_root: str, linked: bool = False) -> InstalledTree:
        return InstalledTree(
            install_root=install_root,
            top_level_entries=tuple(sorted(os.listdir(install_root))),
            linked=linked,
        )

    def _copy_tree(self, source: str, destination: str) -> None:
        with os.scandir(source) as entries:
            for entry in entries:
                target = os.path.join(destination, entry.name)
                if entry.is_symlink():
                    # Keep vendor library symlinks (libfoo.so -> libfoo.so.9)
                    FileUtils.remove_path(target)
                    os.symlink(os.readlink(entry.path), target)
                elif entry.is_dir():
                    if os.path.islink(target) or os.path.isfile(target):
                        os.unlink(target)
                    os.makedirs(target, exist_ok=True)
                    self._copy_tree(entry.path, target)
                else:
                    # Replace rather than overwrite: copy2 keeps vendor
                    # read-only modes, so a previous copy may not be writable.
                    FileUtils.remove_path(target)
                    self.logger.log(f"Copying {entry.path} -> {target}", logging.DEBUG)
                    shutil.copy2(entry.path, target)

    @staticmethod
    def _link_entries(source: str, destination: str) -> None:
        for name in sorted(os.listdir(source)):
            source_path = os.path.join(source, name)
            target = os.path.join(destination, name)
            FileUtils.remove_path(target)
            os.symlink(
                source_path,
                target,
                target_is_directory=os.path.isdir(source_path),
            )

    def run_silent_installer(
        self, installer_path: str, arguments: Sequence[str], install_root: str
    ) -> InstalledTree:
        """
        Run a vendor installer unattended; it populates install_root itself.

        Raises:
            InstallerFailure: If the installer cannot be started or exits non-zero
        """
        install_root = os.path.abspath(install_root)
        command = [installer_path, *arguments]
        self.logger.log(f"Running silent installer: {' '.join(command)}", logging.INFO)
        try:
            os.makedirs(install_root, exist_ok=True)
            mode = os.stat(installer_path).st_mode
            os.chmod(installer_path, mode | stat.S_IXUSR)
            completed = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise InstallerFailure(f"Could not run {installer_path}: {e}") from e

        if completed.returncode != 0:
            output = (completed.stderr or completed.stdout or "").strip()
            self.logger.log(
                f"Installer exited with {completed.returncode}: {output}",
                logging.ERROR,
            )
            raise InstallerFailure(
                f"{os.path.basename(installer_path)} exited with status {completed.returncode}"
            )

        return self.describe(install_root)
