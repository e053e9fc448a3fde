"""
Command line entry point for sdkprov.

Usage:
  sdkprov [--config provision.toml] [--only NAME ...] [--strict] [--print-env]

Exit status is 1 when a dependency cannot be acquired or installed (and,
with --strict, when verification finds gaps); 0 otherwise, even if
verification printed warnings. Configuration errors exit with 2.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from sdkprov.dependency_config import DependencyConfigManager
from sdkprov.dependency_models import SdkDependenciesConfig
from sdkprov.dependency_provisioner import DependencyProvisioner
from sdkprov.sdkprov_config import (
    DEFAULT_CONFIG_FILE,
    PROVISION_TOML_SCHEMA,
    ProvisionConfig,
)
from sdkprov.sdkprov_exceptions import (
    ConfigurationError,
    ProvisionException,
    SourceUnavailable,
)
from sdkprov.sdkprov_logger import ProvisionLogger
from sdkprov.sdkprov_utils import PlatformId


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdkprov",
        description="Download, install and verify vendor SDKs for an accelerated build.",
    )
    parser.add_argument(
        "--config",
        help=f"Run configuration (default: ./{DEFAULT_CONFIG_FILE} when present)",
    )
    parser.add_argument("--catalogue", help="Alternative dependency catalogue (JSON)")
    parser.add_argument(
        "--only",
        nargs="+",
        metavar="NAME",
        help="Provision only these dependencies",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when an installed tree misses expected artifacts",
    )
    parser.add_argument(
        "--platform",
        choices=[p.value for p in PlatformId],
        help="Target platform (default: detected)",
    )
    parser.add_argument(
        "--print-env",
        action="store_true",
        help="Print KEY=path build variables for the installed dependencies",
    )
    parser.add_argument(
        "--example-config",
        action="store_true",
        help=f"Print an annotated {DEFAULT_CONFIG_FILE} and exit",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def load_config(args: argparse.Namespace) -> ProvisionConfig:
    config_path = args.config
    if config_path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        config_path = DEFAULT_CONFIG_FILE

    config = ProvisionConfig.from_toml(config_path) if config_path else ProvisionConfig()
    if args.only:
        config.dependencies = list(args.only)
    if args.strict:
        config.strict_verification = True
    if args.catalogue:
        config.catalogue = args.catalogue
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.example_config:
        print(PROVISION_TOML_SCHEMA.strip())
        return 0

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    logger = ProvisionLogger(level=level)

    try:
        config = load_config(args)
        catalogue = SdkDependenciesConfig.from_file(config.catalogue)
        platform_id = PlatformId(args.platform) if args.platform else None
        config_manager = DependencyConfigManager(catalogue, config, platform_id)
        config_manager.create_specs()
    except ProvisionException as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2 if isinstance(e, ConfigurationError) else 1

    provisioner = DependencyProvisioner(config_manager, logger)
    status = 0
    try:
        provisioner.provision_all()
    except SourceUnavailable as e:
        print(e.remediation_text(), file=sys.stderr)
        status = 1
    except ProvisionException as e:
        print(f"error: {e.message}", file=sys.stderr)
        status = 1

    summary = provisioner.get_summary()
    logger.log(
        f"Provisioning summary: {summary['completed']} completed, "
        f"{summary['linked']} linked, {summary['failed']} failed, "
        f"{summary['pending']} pending, {summary['verified']} verified",
        logging.INFO,
    )

    if args.print_env:
        for key, value in sorted(config_manager.build_environment().items()):
            print(f"{key}={value}")

    return status


if __name__ == "__main__":
    sys.exit(main())
