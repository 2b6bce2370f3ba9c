"""
Version resolution across configuration sources.

Sources are consulted in a fixed order; each strategy either returns a
Resolution (conclusive) or None (defer to the next one):

1. .tfswitch.toml          (--list-all, then command-line version, then the file's version)
2. required_version in *.tf (only without a command-line version)
3. .tfswitchrc             (only without a command-line version)
4. .terraform-version      (only without a command-line version)
5. command-line version
6. interactive selection   (stable catalog, or all versions with --list-all)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from .catalog import ReleaseCatalog, version_exists
from .config import RC_FILENAME, TFV_FILENAME, TOML_FILENAME, RunInputs
from .constraint import parse_constraint, resolve_constraint
from .errors import NoMatchingVersionError, VersionFormatError, VersionNotFoundError
from .version import valid_version_format

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of version resolution.

    Attributes:
        source: Name of the configuration source that decided
        version: Literal version to install (None when interactive)
        interactive: Whether the user must pick from a list
        include_prerelease: For interactive selection, list pre-releases too
    """
    source: str
    version: str | None = None
    interactive: bool = False
    include_prerelease: bool = False


class CatalogCache:
    """
    Fetches each catalog flavor (stable / all) at most once per run.

    Args:
        fetch: Callable taking include_prerelease and returning a ReleaseCatalog
    """

    def __init__(self, fetch: Callable[[bool], ReleaseCatalog]):
        self._fetch = fetch
        self._catalogs: dict[bool, ReleaseCatalog] = {}

    def get(self, include_prerelease: bool) -> ReleaseCatalog:
        if include_prerelease not in self._catalogs:
            self._catalogs[include_prerelease] = self._fetch(include_prerelease)
        return self._catalogs[include_prerelease]


Strategy = Callable[[RunInputs, CatalogCache], Resolution | None]


def _require_published(version: str, catalogs: CatalogCache) -> str:
    # Format gate runs before any network access
    if not valid_version_format(version):
        raise VersionFormatError(version)
    if not version_exists(version, catalogs.get(True)):
        raise VersionNotFoundError(version)
    return version


def _interactive(source: str, inputs: RunInputs) -> Resolution:
    return Resolution(source=source, interactive=True, include_prerelease=inputs.list_all)


def from_project_config(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Strategy for .tfswitch.toml; conclusive whenever the file exists."""
    config = inputs.project_config
    if config is None:
        return None

    logger.info(f"Reading configuration from {TOML_FILENAME}")
    if inputs.list_all:
        return _interactive(TOML_FILENAME, inputs)
    if inputs.requested_version:
        version = _require_published(inputs.requested_version, catalogs)
        return Resolution(source="command line", version=version)
    if config.version:
        return Resolution(source=TOML_FILENAME, version=config.version)
    return _interactive(TOML_FILENAME, inputs)


def from_required_version(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Strategy for required_version constraints declared in *.tf files."""
    if not inputs.required_versions or inputs.requested_version:
        return None

    # Duplicated definitions are skipped; only the first one counts
    expression = inputs.required_versions[0]
    logger.info(f"Reading required version from terraform code, constraint: {expression}")
    constraint = parse_constraint(expression)

    version = resolve_constraint(constraint, catalogs.get(True))
    if version is None:
        raise NoMatchingVersionError(expression)

    logger.info(f"Matched version: {version}")
    return Resolution(source="required_version", version=version)


def _from_pin_file(filename: str, value: str | None, inputs: RunInputs) -> Resolution | None:
    if value is None or inputs.requested_version:
        return None
    logger.info(f"Reading required terraform version {filename}")
    return Resolution(source=filename, version=value)


def from_rc_file(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Strategy for the legacy .tfswitchrc file."""
    return _from_pin_file(RC_FILENAME, inputs.rc_version, inputs)


def from_version_file(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Strategy for the tool-agnostic .terraform-version file."""
    return _from_pin_file(TFV_FILENAME, inputs.pin_version, inputs)


def from_command_line(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Strategy for a version passed as a positional argument."""
    if not inputs.requested_version:
        return None
    version = _require_published(inputs.requested_version, catalogs)
    return Resolution(source="command line", version=version)


def from_interactive(inputs: RunInputs, catalogs: CatalogCache) -> Resolution | None:
    """Fallback strategy: let the user pick."""
    return _interactive("interactive", inputs)


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    from_project_config,
    from_required_version,
    from_rc_file,
    from_version_file,
    from_command_line,
    from_interactive,
)


def resolve_version(
    inputs: RunInputs,
    catalogs: CatalogCache,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> Resolution:
    """
    Pick the target version from the configured sources.

    Args:
        inputs: Configuration read for this run
        catalogs: Lazily fetched release catalogs
        strategies: Ordered strategies; the first conclusive one wins

    Returns:
        Resolution with a literal version or an interactive request

    Raises:
        VersionFormatError: If a literal version has the wrong format
        VersionNotFoundError: If a command-line version is not published
        NoMatchingVersionError: If no release satisfies a required_version constraint
        ConstraintParseError: If a required_version constraint is malformed
        FetchError: If a catalog is needed but cannot be fetched
    """
    for strategy in strategies:
        resolution = strategy(inputs, catalogs)
        if resolution is not None:
            logger.debug(f"Resolved by {getattr(strategy, '__name__', strategy)}: {resolution}")
            if resolution.version is not None and not valid_version_format(resolution.version):
                raise VersionFormatError(resolution.version)
            return resolution

    # from_interactive always concludes; reached only with a custom strategy list
    return _interactive("interactive", inputs)
