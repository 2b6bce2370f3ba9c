"""
tfswitch - install and switch between terraform versions.

Core Modules:
- Versions: grammar check, semver ordering, constraint resolution
- Catalog: published releases, recent installs
- Configuration: preferences, .tfswitch.toml, pin files, required_version
- Resolution: ordered precedence across configuration sources
- Installation: download, checksum, extract, atomic symlink swap
"""

__version__ = "0.7.0"

VERSION = __version__

from .version import Version, valid_version_format, sort_versions
from .constraint import Constraint, parse_constraint, resolve_constraint
from .catalog import (
    ReleaseCatalog,
    fetch_catalog,
    parse_index,
    remove_duplicate_versions,
    version_exists,
    merge_with_recent,
)
from .recent import get_recent_versions
from .config import (
    Preferences,
    ProjectConfig,
    RunInputs,
    load_preferences,
    load_project_config,
    load_run_inputs,
)
from .resolver import CatalogCache, Resolution, resolve_version
from .installer import InstallResult, install, activate, download_url
from .errors import (
    SwitchError,
    ConfigError,
    VersionFormatError,
    ResolutionError,
    VersionNotFoundError,
    NoMatchingVersionError,
    ConstraintParseError,
    FetchError,
    CatalogFetchError,
    CatalogParseError,
    DownloadError,
    ChecksumError,
    ArchiveError,
    InstallDirError,
    ActivationError,
    PromptAborted,
)
from .logging_config import setup_logging

__all__ = [
    "__version__",
    "VERSION",
    # Versions
    "Version",
    "valid_version_format",
    "sort_versions",
    "Constraint",
    "parse_constraint",
    "resolve_constraint",
    # Catalog
    "ReleaseCatalog",
    "fetch_catalog",
    "parse_index",
    "remove_duplicate_versions",
    "version_exists",
    "merge_with_recent",
    "get_recent_versions",
    # Configuration
    "Preferences",
    "ProjectConfig",
    "RunInputs",
    "load_preferences",
    "load_project_config",
    "load_run_inputs",
    # Resolution
    "CatalogCache",
    "Resolution",
    "resolve_version",
    # Installation
    "InstallResult",
    "install",
    "activate",
    "download_url",
    # Errors
    "SwitchError",
    "ConfigError",
    "VersionFormatError",
    "ResolutionError",
    "VersionNotFoundError",
    "NoMatchingVersionError",
    "ConstraintParseError",
    "FetchError",
    "CatalogFetchError",
    "CatalogParseError",
    "DownloadError",
    "ChecksumError",
    "ArchiveError",
    "InstallDirError",
    "ActivationError",
    "PromptAborted",
    # Logging
    "setup_logging",
]
