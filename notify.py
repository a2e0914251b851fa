#!/usr/bin/env python3
"""
cli-notify - Print a CLI banner with an upgrade notice when one is due.

Usage:
    notify.py my-cli 1.0.0                    # Check the registry for my-cli
    notify.py my-cli 1.0.0 --name "My"        # Custom banner name
    notify.py @scope/cli 2.0.0-beta.1 -r URL  # Prerelease check against a registry
"""

from __future__ import annotations

import argparse
import logging
import sys

from cli_notify.common import is_check_disabled, is_ci_environment
from cli_notify.config import load_config
from cli_notify.environment import MissingPackageManager
from cli_notify.logging_config import setup_logging
from cli_notify.package_managers import (
    MetadataFetchError,
    ProjectPackageManager,
    RegistryLookupError,
)
from cli_notify.process import ProcessError
from cli_notify.render import render_title
from cli_notify.upgrade import generate_title

logger = logging.getLogger("cli_notify.notify")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show an upgrade notice for an npm-distributed CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("package", help="Package name on the registry")
    parser.add_argument("current_version", help="Version currently running")
    parser.add_argument("--name", help="Display name for the banner (default: package name)")
    parser.add_argument("--context", help="Project directory used for lockfile detection")
    parser.add_argument("--package-manager", help="Force yarn, pnpm or npm")
    parser.add_argument("--install-path", help="Install directory of the running tool")
    parser.add_argument("-r", "--registry", help="Registry URL (overrides package manager config)")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="No diagnostics on the console (--log-file still records them)")
    parser.add_argument("--log-file", help="Also write diagnostics to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the notifier."""
    args = build_parser().parse_args(argv)
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        verbose=args.verbose,
        quiet=args.quiet,
    )

    config = load_config(args.config, verbose=args.verbose)
    command_name = args.name or args.package

    if not config.enabled or is_check_disabled() or is_ci_environment():
        print(render_title(command_name, args.current_version, None if config.color else False))
        return 0

    # A failed version check never fails the host CLI: fall back to the plain title
    try:
        pm = ProjectPackageManager(
            context=args.context,
            force_package_manager=args.package_manager,
            argv=sys.argv if argv is None else argv,
            config=config,
            verbose=args.verbose,
        )
        title = generate_title(
            command_name,
            args.current_version,
            args.package,
            pm=pm,
            install_path=args.install_path,
            config=config,
            verbose=args.verbose,
        )
    except (MissingPackageManager, RegistryLookupError, MetadataFetchError, ProcessError, ValueError) as e:
        logger.warning(f"Version check skipped: {e}")
        title = render_title(command_name, args.current_version, None if config.color else False)

    print(title)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
