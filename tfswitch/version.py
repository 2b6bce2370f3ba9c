"""
Terraform version strings: grammar, parsing and semantic-version ordering.

Accepted grammar is ``MAJOR.MINOR.PATCH[-PRERELEASE]`` where the numeric parts
are ASCII digits and PRERELEASE is a run of word characters (``beta1``, ``rc2``).
Ordering is delegated to ``packaging.version``: ``1.0.0-beta2`` reads as
``1.0.0b2`` and sorts below ``1.0.0-beta10`` and ``1.0.0``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from packaging.version import InvalidVersion
from packaging.version import Version as PackagingVersion

from .errors import VersionFormatError


VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-(\w+))?$", re.ASCII)


def valid_version_format(version: str) -> bool:
    """
    Check a candidate string against the version grammar.

    Args:
        version: Candidate version (e.g., "0.11.7", "0.11.9-beta1")

    Returns:
        True if the string is a literal terraform version
    """
    if not isinstance(version, str):
        return False
    return VERSION_PATTERN.fullmatch(version) is not None


def _packaging_version(release: str, prerelease: str) -> PackagingVersion:
    if not prerelease:
        return PackagingVersion(release)
    try:
        parsed = PackagingVersion(f"{release}-{prerelease}")
    except InvalidVersion:
        parsed = None
    # Tags PEP 440 reads as post releases ("-1", "-post1") or can't read at all
    # still rank below the release they belong to
    if parsed is None or not parsed.is_prerelease:
        parsed = PackagingVersion(f"{release}.dev0")
    return parsed


@dataclass(frozen=True, order=True)
class Version:
    """Parsed literal version. Instances compare by semantic-version precedence."""

    sort_key: tuple = field(repr=False, compare=True)
    major: int = field(compare=False)
    minor: int = field(compare=False)
    patch: int = field(compare=False)
    prerelease: str = field(default="", compare=False)
    original: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a literal version string.

        Raises:
            VersionFormatError: If text does not match the grammar
        """
        match = VERSION_PATTERN.fullmatch(text) if isinstance(text, str) else None
        if match is None:
            raise VersionFormatError(str(text))

        major, minor, patch = (int(g) for g in match.group(1, 2, 3))
        prerelease = match.group(4) or ""
        parsed = _packaging_version(f"{major}.{minor}.{patch}", prerelease)
        # Raw tag breaks ties between spellings packaging treats as equal ("b1", "beta1")
        return cls(
            sort_key=(parsed, prerelease),
            major=major,
            minor=minor,
            patch=patch,
            prerelease=prerelease,
            original=text,
        )

    @property
    def parsed(self) -> PackagingVersion:
        return self.sort_key[0]

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        if self.original:
            return self.original
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}-{self.prerelease}" if self.prerelease else core


def is_prerelease(version: str) -> bool:
    """True if a version string carries a pre-release marker."""
    return "-" in version


def sort_versions(versions: Iterable[str], descending: bool = True) -> list[str]:
    """
    Sort version strings by semantic-version order.

    Entries that don't match the grammar are dropped.
    """
    parsed = []
    for text in versions:
        if valid_version_format(text):
            parsed.append(Version.parse(text))
    parsed.sort(reverse=descending)
    return [str(v) for v in parsed]
