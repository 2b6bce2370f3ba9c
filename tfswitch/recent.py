"""
Recently installed versions.

Every install keeps its extracted binary as ``terraform_<version>`` inside the
install directory; those files are the record of what was used recently.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .version import valid_version_format

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 3

_BINARY_NAME = re.compile(r"^terraform_(.+?)(?:\.exe)?$")


def versioned_binary_name(version: str, os_name: str = "") -> str:
    """File name of an installed version inside the install directory."""
    suffix = ".exe" if os_name == "windows" else ""
    return f"terraform_{version}{suffix}"


def get_recent_versions(install_dir: str | Path, limit: int = DEFAULT_RECENT_LIMIT) -> list[str]:
    """
    List installed versions, most recently used first.

    Args:
        install_dir: Directory holding terraform_<version> binaries
        limit: Maximum number of versions to return

    Returns:
        Version strings ordered by file modification time (newest first)
    """
    path = Path(install_dir)
    if limit <= 0 or not path.is_dir():
        return []

    found: list[tuple[float, str]] = []
    for entry in path.iterdir():
        match = _BINARY_NAME.match(entry.name)
        if not match or not entry.is_file() or entry.is_symlink():
            continue
        version = match.group(1)
        if not valid_version_format(version):
            continue
        try:
            found.append((entry.stat().st_mtime, version))
        except OSError as e:
            logger.debug(f"Skipping {entry}: {e}")

    found.sort(reverse=True)
    return [version for _, version in found[:limit]]
