"""
Shared fixtures for sdkprov tests.
"""

import pathlib
import zipfile
from typing import Dict

import pytest

from sdkprov.dependency_config import DependencyConfigManager
from sdkprov.dependency_models import SdkDependenciesConfig
from sdkprov.sdkprov_config import ProvisionConfig
from sdkprov.sdkprov_logger import ProvisionLogger
from sdkprov.sdkprov_utils import PlatformId


@pytest.fixture
def logger():
    return ProvisionLogger()


def make_zip(path: pathlib.Path, files: Dict[str, str]) -> pathlib.Path:
    """Write a zip archive whose members are the given relative paths."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return path


def catalogue_entry(install_root: str, urls=None, **extra) -> dict:
    """A minimal linux-x64 catalogue entry for the test package 'foo'."""
    entry = {
        "version": "1.2.3",
        "majorMinorVersion": "1.2",
        "archiveType": "zip",
        "marker": "include",
        "installRoot": {"linux-x64": install_root},
        "urls": {"linux-x64": list(urls or [])},
        "manifest": [{"path": "include/foo.h"}],
        "remediation": ["Download foo {version} by hand"],
    }
    entry.update(extra)
    return entry


def build_manager(catalogue_dependencies: dict, **config_kwargs) -> DependencyConfigManager:
    catalogue = SdkDependenciesConfig.from_dict({"dependencies": catalogue_dependencies})
    manager = DependencyConfigManager(
        catalogue, ProvisionConfig(**config_kwargs), PlatformId.LINUX_x64
    )
    manager.create_specs()
    return manager
