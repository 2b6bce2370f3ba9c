"""
Common utilities shared across tfswitch modules.
"""

from __future__ import annotations

import logging
import os
import platform

from .logging_config import LOGGER_NAME


# Terraform's naming for operating systems and CPU architectures in release archives
OS_NAMES = {
    "darwin": "darwin",
    "linux": "linux",
    "windows": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "sunos": "solaris",
    "solaris": "solaris",
}

ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
}


def platform_pair() -> tuple[str, str]:
    """
    Detect the (os, arch) pair used in release archive names.

    Returns:
        Tuple like ("linux", "amd64"). Unknown values are passed through lowercased.
    """
    system = platform.system().lower()
    machine = platform.machine().lower()
    return OS_NAMES.get(system, system), ARCH_NAMES.get(machine, machine)


def binary_name(os_name: str | None = None) -> str:
    """Name of the terraform executable inside a release archive."""
    if os_name is None:
        os_name = platform_pair()[0]
    return "terraform.exe" if os_name == "windows" else "terraform"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a message on the tfswitch logger when verbose or TFSWITCH_DEBUG=1.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("TFSWITCH_DEBUG", "0") == "1":
        logging.getLogger(LOGGER_NAME).info(msg)
