"""
Download, extract and activate a terraform release.

Workflow for one version:
1. Resolve the archive URL for this platform
2. Download the zip into the install directory
3. Verify it against the published SHA256SUMS
4. Extract the terraform binary
5. Rename it to terraform_<version> so versions coexist
6. Remove the zip
7. Point the bin path at the versioned binary (atomic symlink swap)

Steps 1-6 only touch the install directory; the bin path is changed last.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import stat
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path

from .common import binary_name, platform_pair
from .config import Preferences
from .errors import (
    ActivationError,
    ArchiveError,
    ChecksumError,
    DownloadError,
    FetchError,
    InstallDirError,
    VersionFormatError,
)
from .http import download_file, http_get
from .recent import versioned_binary_name
from .version import valid_version_format

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallResult:
    """
    Result of switching to a terraform version.

    Attributes:
        version: Version that is now active
        binary_path: Versioned binary inside the install directory
        bin_path: Symlink that now points at binary_path
        downloaded: False if the versioned binary was already on disk
        checksum_verified: Whether the archive was checked against SHA256SUMS
        replaced: What occupied bin_path before ("none", "symlink" or "file")
        backup_path: Copy of a replaced regular file, if any
        duration_seconds: Total time taken
    """
    version: str
    binary_path: str
    bin_path: str
    downloaded: bool = True
    checksum_verified: bool = False
    replaced: str = "none"
    backup_path: str | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "binary_path": self.binary_path,
            "bin_path": self.bin_path,
            "downloaded": self.downloaded,
            "checksum_verified": self.checksum_verified,
            "replaced": self.replaced,
            "backup_path": self.backup_path,
            "duration_seconds": self.duration_seconds,
        }


def archive_name(version: str, os_name: str, arch: str) -> str:
    return f"terraform_{version}_{os_name}_{arch}.zip"


def download_url(mirror: str, version: str, os_name: str, arch: str) -> str:
    """
    Build the release archive URL.

    Example:
        download_url("https://releases.hashicorp.com/terraform/", "0.12.3", "linux", "amd64")
        -> "https://releases.hashicorp.com/terraform/0.12.3/terraform_0.12.3_linux_amd64.zip"
    """
    return f"{mirror.rstrip('/')}/{version}/{archive_name(version, os_name, arch)}"


def checksums_url(mirror: str, version: str) -> str:
    return f"{mirror.rstrip('/')}/{version}/terraform_{version}_SHA256SUMS"


def verify_checksum(
    file_path: str | Path,
    expected_checksum: str,
    algorithm: str = "sha256",
) -> bool:
    """
    Verify file checksum matches expected value.

    Args:
        file_path: Path to file to verify
        expected_checksum: Expected checksum value
        algorithm: Hash algorithm (sha256, sha512, md5)

    Returns:
        True if checksum matches, False otherwise
    """
    try:
        hasher = hashlib.new(algorithm)
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                hasher.update(chunk)
    except (OSError, ValueError):
        return False

    return hasher.hexdigest().lower() == expected_checksum.strip().lower()


def expected_checksum(sums: str, filename: str) -> str | None:
    """Find the checksum for filename in a SHA256SUMS listing."""
    for line in sums.splitlines():
        parts = line.split()
        if len(parts) == 2 and parts[1].lstrip("*") == filename:
            return parts[0]
    return None


def extract_binary(archive: str | Path, dest: str | Path, member_name: str = "terraform") -> Path:
    """
    Extract the terraform executable from a release archive.

    Args:
        archive: Zip file path
        dest: Final path of the extracted binary (replaced if present)
        member_name: Executable name inside the archive

    Returns:
        Path to the extracted, executable binary

    Raises:
        ArchiveError: If the archive is corrupt or has no such member
    """
    dest = Path(dest)
    partial = dest.with_name(dest.name + ".partial")
    try:
        with zipfile.ZipFile(archive) as zf:
            members = [
                info for info in zf.infolist()
                if not info.is_dir() and Path(info.filename).name == member_name
            ]
            if not members:
                raise ArchiveError(f"No {member_name} binary found in {Path(archive).name}")
            with zf.open(members[0]) as src, open(partial, "wb") as out:
                shutil.copyfileobj(src, out)
        mode = partial.stat().st_mode
        partial.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        os.replace(partial, dest)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Corrupt archive {Path(archive).name}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Unable to extract {Path(archive).name}: {e}") from e
    finally:
        if partial.exists():
            partial.unlink()

    return dest


def fetch_binary(
    version: str,
    prefs: Preferences,
    os_name: str,
    arch: str,
) -> tuple[Path, bool, bool]:
    """
    Make sure terraform_<version> exists in the install directory.

    Returns:
        Tuple of (binary path, downloaded, checksum_verified)

    Raises:
        FetchError: If download, checksum verification or extraction fails
        InstallDirError: If the install directory can't be created or written
    """
    install_dir = prefs.install_path
    try:
        install_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InstallDirError(
            f"Unable to create install directory {install_dir}: {e}",
            remediation=f"Point install_dir (or TFSWITCH_INSTALL_DIR) at a writable directory instead of {install_dir}",
        ) from e
    binary = install_dir / versioned_binary_name(version, os_name)

    if binary.is_file() and not binary.is_symlink():
        logger.info(f"Terraform {version} already downloaded: {binary}")
        try:
            os.utime(binary)  # keeps the recent list ordered by last use
        except OSError as e:
            raise InstallDirError(
                f"Unable to update {binary}: {e}",
                remediation=f"Check the permissions of {install_dir}",
            ) from e
        return binary, False, False

    url = download_url(prefs.mirror_url, version, os_name, arch)
    archive = install_dir / archive_name(version, os_name, arch)
    logger.info(f"Downloading {url}")

    try:
        try:
            download_file(url, archive, timeout=prefs.timeout_seconds, retries=prefs.retries)
        except FetchError as e:
            raise DownloadError(
                f"Unable to download terraform {version} for {os_name}/{arch}",
                retryable=e.retryable,
                remediation=e.message,
            ) from e

        verified = False
        if prefs.verify_checksum:
            _check_archive(archive, version, prefs)
            verified = True

        extract_binary(archive, binary, member_name=binary_name(os_name))
    finally:
        if archive.exists():
            archive.unlink()

    logger.debug(f"Extracted {binary}")
    return binary, True, verified


def _check_archive(archive: Path, version: str, prefs: Preferences) -> None:
    url = checksums_url(prefs.mirror_url, version)
    try:
        sums = http_get(url, timeout=prefs.timeout_seconds, retries=prefs.retries)
    except FetchError as e:
        raise ChecksumError(
            f"Unable to fetch checksums for terraform {version}",
            retryable=e.retryable,
            remediation="Set verify_checksum: false in your preferences to skip verification",
        ) from e

    expected = expected_checksum(sums.decode("utf-8", "replace"), archive.name)
    if expected is None:
        raise ChecksumError(f"No checksum listed for {archive.name}")
    if not verify_checksum(archive, expected):
        raise ChecksumError(f"Checksum mismatch for {archive.name}")
    logger.debug(f"Checksum verified for {archive.name}")


def activate(binary: str | Path, bin_path: str | Path, force: bool = False) -> tuple[str, str | None]:
    """
    Point bin_path at binary.

    A symlink (or nothing) at bin_path is swapped atomically. A regular file
    is only replaced with force, after copying it to <bin_path>.bak.

    Returns:
        Tuple of (what was replaced: "none" | "symlink" | "file", backup path)

    Raises:
        ActivationError: If bin_path can't be replaced
    """
    binary = os.path.abspath(binary)
    target = Path(bin_path)
    replaced = "none"
    backup: str | None = None

    if target.is_symlink():
        replaced = "symlink"
    elif target.is_dir():
        raise ActivationError(f"Cannot install terraform at {target}: it is a directory")
    elif target.exists():
        if not force:
            raise ActivationError(
                f"{target} is a regular file, not a symlink managed by tfswitch",
                remediation="Re-run with --force to back it up and replace it, or use --bin",
            )
        replaced = "file"

    temp_link = target.with_name(f".{target.name}.tfswitch-{os.getpid()}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if replaced == "file":
            backup = str(target.with_name(target.name + ".bak"))
            shutil.copy2(target, backup)
            logger.warning(f"Backed up existing {target} to {backup}")

        if temp_link.is_symlink() or temp_link.exists():
            temp_link.unlink()
        os.symlink(binary, temp_link)
        os.replace(temp_link, target)
    except OSError as e:
        if temp_link.is_symlink():
            temp_link.unlink()
        raise ActivationError(
            f"Unable to link {target} to {binary}: {e}",
            remediation=f"The downloaded binary is kept at {binary}",
        ) from e

    return replaced, backup


def install(
    version: str,
    bin_path: str,
    prefs: Preferences | None = None,
    force: bool = False,
    platform: tuple[str, str] | None = None,
) -> InstallResult:
    """
    Install a terraform version and make it the active binary.

    Args:
        version: Literal version (e.g., "0.12.3")
        bin_path: Where the terraform symlink should live
        prefs: Preferences (defaults if None)
        force: Allow replacing a regular file at bin_path
        platform: (os, arch) override; detected if None

    Returns:
        InstallResult

    Raises:
        VersionFormatError: If version is not a literal version
        FetchError: If the release can't be downloaded or unpacked
        ActivationError: If bin_path can't be switched
    """
    if not valid_version_format(version):
        raise VersionFormatError(version)
    if prefs is None:
        prefs = Preferences()
    os_name, arch = platform or platform_pair()

    start_time = time.time()
    binary, downloaded, verified = fetch_binary(version, prefs, os_name, arch)
    replaced, backup = activate(binary, bin_path, force=force)

    logger.info(f"Switched terraform to version \"{version}\"")
    return InstallResult(
        version=version,
        binary_path=str(binary),
        bin_path=str(bin_path),
        downloaded=downloaded,
        checksum_verified=verified,
        replaced=replaced,
        backup_path=backup,
        duration_seconds=time.time() - start_time,
    )
