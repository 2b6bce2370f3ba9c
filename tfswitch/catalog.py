"""
Release catalog: the list of published terraform versions.

The catalog is parsed from the HashiCorp releases index (an HTML page of
links such as ``<a href="/terraform/1.5.7/">terraform_1.5.7</a>``), kept in
index order (freshest first) and de-duplicated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from .errors import CatalogFetchError, CatalogParseError, FetchError
from .http import DEFAULT_RETRIES, DEFAULT_TIMEOUT, http_get
from .version import is_prerelease

logger = logging.getLogger(__name__)

DEFAULT_MIRROR = "https://releases.hashicorp.com/terraform/"

RECENT_MARKER = " *recent"

_VERSION_LINK = re.compile(
    r"(?:/terraform/|terraform_)(\d+\.\d+\.\d+(?:-\w+)?)(?=[/\"<\s]|$)",
    re.ASCII,
)


@dataclass(frozen=True)
class ReleaseCatalog:
    """
    Snapshot of published versions.

    Attributes:
        versions: Version strings in index order, without duplicates
        include_prerelease: Whether pre-release entries were kept
        source: Index URL the snapshot came from
    """
    versions: tuple[str, ...]
    include_prerelease: bool = False
    source: str = ""

    def __contains__(self, version: object) -> bool:
        return version in self.versions

    def __iter__(self):
        return iter(self.versions)

    def __len__(self) -> int:
        return len(self.versions)


def remove_duplicate_versions(versions: Iterable[str]) -> list[str]:
    """
    Drop repeated entries, keeping the first occurrence of each.

    Args:
        versions: Version strings, possibly with repeats

    Returns:
        List in original order without duplicates
    """
    seen: set[str] = set()
    unique = []
    for v in versions:
        if v not in seen:
            seen.add(v)
            unique.append(v)
    return unique


def parse_index(body: str, include_prerelease: bool) -> list[str]:
    """
    Extract version strings from a releases index page.

    Args:
        body: Index page content
        include_prerelease: Keep beta/rc/alpha entries

    Returns:
        De-duplicated versions in page order
    """
    found = [m.group(1) for m in _VERSION_LINK.finditer(body)]
    if not include_prerelease:
        found = [v for v in found if not is_prerelease(v)]
    return remove_duplicate_versions(found)


def fetch_catalog(
    url: str = DEFAULT_MIRROR,
    include_prerelease: bool = False,
    timeout: int = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
) -> ReleaseCatalog:
    """
    Fetch the list of published versions.

    Args:
        url: Releases index URL
        include_prerelease: Keep beta/rc/alpha entries
        timeout: Network timeout in seconds
        retries: Extra attempts for transient failures

    Returns:
        ReleaseCatalog

    Raises:
        CatalogFetchError: If the index cannot be downloaded
        CatalogParseError: If the index lists no versions
    """
    try:
        body = http_get(url, timeout=timeout, retries=retries).decode("utf-8", "replace")
    except FetchError as e:
        raise CatalogFetchError(
            f"Unable to get list of terraform versions from {url}",
            retryable=e.retryable,
            remediation=f"Check your network connection or mirror setting ({e.message})",
        ) from e

    versions = parse_index(body, include_prerelease)
    if not versions:
        raise CatalogParseError(f"No terraform versions found in release index {url}")

    logger.debug(
        f"Fetched {len(versions)} versions from {url} "
        f"({'including' if include_prerelease else 'excluding'} pre-releases)"
    )
    return ReleaseCatalog(versions=tuple(versions), include_prerelease=include_prerelease, source=url)


def version_exists(version: str, catalog: Iterable[str]) -> bool:
    """Whether a literal version is published in the catalog."""
    return version in set(catalog)


def merge_with_recent(recent: Sequence[str], versions: Iterable[str]) -> list[str]:
    """
    Build the interactive menu list: recent versions first, then the catalog.

    Recent entries are labelled with RECENT_MARKER and duplicates are dropped
    on the bare version.
    """
    merged = []
    seen: set[str] = set()
    for v in recent:
        if v not in seen:
            seen.add(v)
            merged.append(f"{v}{RECENT_MARKER}")
    for v in remove_duplicate_versions(versions):
        if v not in seen:
            seen.add(v)
            merged.append(v)
    return merged


def strip_recent_marker(item: str) -> str:
    """Turn a menu entry back into a bare version string."""
    if item.endswith(RECENT_MARKER):
        item = item[: -len(RECENT_MARKER)]
    return item.strip()
