"""
This file contains various utility functions like platform detection and
archive extraction.
"""

import logging
import os
import platform
import shutil
import sys
import zipfile
from enum import Enum
from typing import Optional

from sdkprov.sdkprov_exceptions import ProvisionException, StructureMismatch
from sdkprov.sdkprov_logger import ProvisionLogger


class PlatformId(str, Enum):
    """
    Platforms for which the dependency catalogue carries download locations
    """

    LINUX_x64 = "linux-x64"
    LINUX_arm64 = "linux-arm64"
    WIN_x64 = "win-x64"


class PlatformUtils:
    """
    This class provides utilities for platform detection and identification.
    """

    @staticmethod
    def get_platform_id() -> PlatformId:
        """
        Returns the platform id for the current system
        """
        system = platform.system()
        machine = platform.machine().lower()
        arch = {
            "amd64": "x64",
            "x86_64": "x64",
            "aarch64": "arm64",
            "arm64": "arm64",
        }.get(machine)

        if system == "Linux":
            system_id = "linux"
        elif system == "Windows":
            system_id = "win"
        else:
            raise ProvisionException(f"Unsupported operating system: {system}")

        if arch is None:
            raise ProvisionException(f"Unsupported architecture: {machine}")

        return PlatformId(f"{system_id}-{arch}")


# Archive type aliases accepted in the dependency catalogue, mapped to
# the format names understood by shutil.unpack_archive.
ARCHIVE_FORMATS = {
    "zip": "zip",
    "tar": "tar",
    "tar.gz": "gztar",
    "tgz": "gztar",
    "gztar": "gztar",
    "tar.xz": "xztar",
    "txz": "xztar",
    "xztar": "xztar",
    "tar.bz2": "bztar",
    "bztar": "bztar",
}

INSTALLER_SUFFIXES = (".run", ".exe", ".msi")


class FileUtils:
    """
    Utility functions for handling downloaded archives
    """

    @staticmethod
    def guess_archive_type(file_name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Infers the archive type from a file name, falling back to the given default.

        Longer suffixes are checked first so that "x.tar.gz" resolves to "tar.gz".
        """
        lowered = file_name.lower()
        if lowered.endswith(INSTALLER_SUFFIXES):
            return "installer"
        for suffix in sorted(ARCHIVE_FORMATS, key=len, reverse=True):
            if lowered.endswith("." + suffix):
                return suffix
        return default

    @staticmethod
    def extract_archive(
        logger: ProvisionLogger, archive_path: str, target_path: str, archive_type: str
    ) -> None:
        """
        Extracts the archive at archive_path into target_path
        """
        archive_format = ARCHIVE_FORMATS.get(archive_type)
        if archive_format is None:
            raise StructureMismatch(f"Unsupported archive type: {archive_type}")

        os.makedirs(target_path, exist_ok=True)
        logger.log(
            f"Extracting {os.path.basename(archive_path)} ({archive_type}) to {target_path}",
            logging.INFO,
        )

        kwargs = {}
        if archive_format != "zip" and sys.version_info >= (3, 12):
            kwargs["filter"] = "data"

        try:
            shutil.unpack_archive(archive_path, target_path, archive_format, **kwargs)
        except (shutil.ReadError, zipfile.BadZipFile, EOFError, OSError) as exc:
            logger.log(f"Failed to extract {archive_path}: {exc}", logging.ERROR)
            raise StructureMismatch(
                f"Could not extract {os.path.basename(archive_path)} as {archive_type}: {exc}"
            ) from exc

    @staticmethod
    def remove_path(path: str) -> None:
        """
        Removes a file, symlink or directory tree if it exists
        """
        if os.path.islink(path) or os.path.isfile(path):
            os.unlink(path)
        elif os.path.isdir(path):
            shutil.rmtree(path)
