"""
Command-line entry point.

Usage:
    tfswitch                 # pick from .tfswitch.toml, *.tf, .tfswitchrc, .terraform-version or a menu
    tfswitch 0.12.3          # switch to a specific version
    tfswitch -l              # menu including beta and rc releases
    tfswitch -b ~/bin/terraform 1.5.7
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Sequence

from . import __version__
from .catalog import fetch_catalog, merge_with_recent
from .config import Preferences, RunInputs, load_preferences, load_run_inputs
from .errors import SwitchError, VersionFormatError
from .installer import InstallResult, install
from .logging_config import setup_logging
from .prompt import select_version
from .recent import get_recent_versions
from .resolver import CatalogCache, Resolution, resolve_version
from .version import valid_version_format

logger = logging.getLogger(__name__)

Selector = Callable[[Sequence[str]], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tfswitch",
        description="Install and switch between terraform versions",
        epilog="Supply the terraform version as an argument, or choose from a menu",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "version",
        nargs="?",
        help="Terraform version to install, e.g. 0.12.3",
    )
    parser.add_argument(
        "--bin", "-b",
        dest="bin_path",
        metavar="PATH",
        help="Custom binary path. For example: /Users/username/bin/terraform",
    )
    parser.add_argument(
        "--list-all", "-l",
        action="store_true",
        help="List all versions of terraform - including beta and rc",
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Replace a regular file at the binary path (a backup is kept)",
    )
    parser.add_argument(
        "--chdir",
        metavar="DIR",
        help="Read project configuration from DIR instead of the current directory",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Preferences file (YAML)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show warnings and errors",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write a debug log to PATH",
    )
    parser.add_argument(
        "--version", "-v",
        dest="show_version",
        action="store_true",
        help="Displays the version of tfswitch",
    )
    return parser


def choose_interactively(
    resolution: Resolution,
    catalogs: CatalogCache,
    prefs: Preferences,
    selector: Selector = select_version,
) -> str:
    """Offer recent versions plus the catalog and return the user's pick."""
    catalog = catalogs.get(resolution.include_prerelease)
    recent = get_recent_versions(prefs.install_path, prefs.recent_limit)
    return selector(merge_with_recent(recent, catalog))


def switch(
    inputs: RunInputs,
    prefs: Preferences,
    catalogs: CatalogCache | None = None,
    selector: Selector = select_version,
) -> InstallResult:
    """
    Resolve the target version and install it.

    Raises:
        SwitchError: For any format, resolution, fetch or activation failure
    """
    if catalogs is None:
        catalogs = CatalogCache(lambda include_prerelease: fetch_catalog(
            prefs.mirror_url,
            include_prerelease=include_prerelease,
            timeout=prefs.timeout_seconds,
            retries=prefs.retries,
        ))

    resolution = resolve_version(inputs, catalogs)
    if resolution.interactive:
        version = choose_interactively(resolution, catalogs, prefs, selector)
    else:
        version = resolution.version

    if not version or not valid_version_format(version):
        raise VersionFormatError(version or "")

    logger.debug(f"Installing {version} (from {resolution.source}) to {inputs.bin_path}")
    return install(version, inputs.bin_path, prefs, force=inputs.force)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.show_version:
        print(f"\nVersion: {__version__}\n")
        return 0

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        prefs = load_preferences(args.config, verbose=args.verbose)
        inputs = load_run_inputs(
            args.chdir or os.getcwd(),
            prefs,
            requested_version=args.version,
            bin_path=args.bin_path,
            list_all=args.list_all,
            force=args.force,
        )
        switch(inputs, prefs)
    except SwitchError as e:
        logger.error(e.message)
        if e.remediation:
            logger.error(e.remediation)
        return 1

    return 0


def run() -> None:
    """Console script wrapper."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
