"""
Configuration loading.

Two layers feed a run:
- user preferences (YAML), merged from several locations (custom -> user -> system -> defaults)
- project files in the working directory: .tfswitch.toml, .tfswitchrc,
  .terraform-version and the required_version of *.tf files

Everything is read once into an immutable RunInputs before resolution starts.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .catalog import DEFAULT_MIRROR
from .common import vlog
from .errors import ConfigError
from .recent import DEFAULT_RECENT_LIMIT
from .tfconfig import load_required_versions


DEFAULT_BIN_PATH = "/usr/local/bin/terraform"
DEFAULT_INSTALL_DIR = "~/.terraform.versions"

TOML_FILENAME = ".tfswitch.toml"
RC_FILENAME = ".tfswitchrc"
TFV_FILENAME = ".terraform-version"

# Preference file locations (in priority order)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/tfswitch/config.yml"),
    os.path.expanduser("~/.config/tfswitch/config.yaml"),
    "/etc/tfswitch/config.yml",
    "/etc/tfswitch/config.yaml",
]

ENV_OVERRIDES = {
    "TFSWITCH_MIRROR": "mirror",
    "TFSWITCH_INSTALL_DIR": "install_dir",
}


def expand_path(path: str) -> str:
    """Expand environment variables and ~ in a path."""
    return os.path.expanduser(os.path.expandvars(path))


@dataclass(frozen=True)
class Preferences:
    """
    User preferences for installation behavior.

    Attributes:
        mirror: Releases index URL (archives live under <mirror>/<version>/)
        bin_path: Default location of the active terraform symlink
        install_dir: Directory holding downloaded, version-qualified binaries
        timeout_seconds: Timeout for each network request
        retries: Extra attempts for transient network failures
        verify_checksum: Check archives against the published SHA256SUMS
        replace_regular_file: Allow replacing a non-symlink file at bin_path
        recent_limit: Number of recently installed versions shown in the menu
    """
    mirror: str = DEFAULT_MIRROR
    bin_path: str = DEFAULT_BIN_PATH
    install_dir: str = DEFAULT_INSTALL_DIR
    timeout_seconds: int = 30
    retries: int = 1
    verify_checksum: bool = True
    replace_regular_file: bool = False
    recent_limit: int = DEFAULT_RECENT_LIMIT

    def __post_init__(self):
        """Validate preferences after initialization."""
        if not isinstance(self.mirror, str) or not self.mirror.startswith(("http://", "https://")):
            raise ValueError(f"Invalid mirror: {self.mirror!r}. Must be an http(s) URL")

        if not isinstance(self.timeout_seconds, int) or not 1 <= self.timeout_seconds <= 600:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 600"
            )

        if not isinstance(self.retries, int) or not 0 <= self.retries <= 5:
            raise ValueError(f"Invalid retries: {self.retries}. Must be between 0 and 5")

        if not isinstance(self.recent_limit, int) or not 0 <= self.recent_limit <= 20:
            raise ValueError(
                f"Invalid recent_limit: {self.recent_limit}. Must be between 0 and 20"
            )

    @property
    def mirror_url(self) -> str:
        """Mirror URL with exactly one trailing slash."""
        return self.mirror.rstrip("/") + "/"

    @property
    def install_path(self) -> Path:
        return Path(expand_path(self.install_dir))

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(Preferences)}
        return Preferences(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class ProjectConfig:
    """
    Contents of a project's .tfswitch.toml.

    Attributes:
        bin_path: Custom bin path (already expanded), if declared
        version: Declared version, if any
        source: Path of the file
    """
    bin_path: str | None = None
    version: str | None = None
    source: str = ""


@dataclass(frozen=True)
class RunInputs:
    """
    Every version signal available to one run, read once.

    Attributes:
        requested_version: Version given on the command line
        list_all: Include pre-releases in interactive selection
        bin_path: Effective bin path (command line > .tfswitch.toml > preferences)
        project_config: Parsed .tfswitch.toml, if present
        required_versions: required_version constraints from *.tf files
        rc_version: Contents of .tfswitchrc, if present
        pin_version: Contents of .terraform-version, if present
        force: Allow replacing a regular file at bin_path
    """
    requested_version: str | None = None
    list_all: bool = False
    bin_path: str = DEFAULT_BIN_PATH
    project_config: ProjectConfig | None = None
    required_versions: tuple[str, ...] = ()
    rc_version: str | None = None
    pin_version: str | None = None
    force: bool = False


def _load_yaml(file_path: str) -> dict[str, Any]:
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to read preferences from {file_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid preferences file {file_path}: expected a mapping")
    return data


def load_preferences(custom_path: str | None = None, verbose: bool = False) -> Preferences:
    """
    Load and merge preferences from all sources.

    Precedence (highest to lowest):
    1. Environment overrides (TFSWITCH_MIRROR, TFSWITCH_INSTALL_DIR)
    2. Custom path (if provided)
    3. User ~/.config/tfswitch/config.yml
    4. System /etc/tfswitch/config.yml
    5. Defaults

    Raises:
        ConfigError: If a file is unreadable or holds invalid values, or if
            custom_path does not exist
    """
    paths: list[str] = []
    if custom_path:
        if not os.path.exists(custom_path):
            raise ConfigError(f"Could not load preferences from specified path: {custom_path}")
        paths.append(custom_path)
    paths.extend(p for p in CONFIG_LOCATIONS if os.path.exists(p))

    merged: dict[str, Any] = {}
    # Apply lowest priority first so higher-priority files overwrite
    for path in reversed(paths):
        vlog(f"Loading preferences from: {path}", verbose)
        merged.update(_load_yaml(path))

    for env_var, key in ENV_OVERRIDES.items():
        if os.environ.get(env_var):
            merged[key] = os.environ[env_var]

    try:
        prefs = Preferences.from_dict(merged)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Invalid preferences: {e}") from e

    if not paths:
        vlog("No preference files found, using defaults", verbose)
    return prefs


def load_project_config(directory: str | Path) -> ProjectConfig | None:
    """
    Read .tfswitch.toml from a directory.

    Returns:
        ProjectConfig, or None if the file does not exist

    Raises:
        ConfigError: If the file exists but cannot be parsed or has bad values
    """
    path = Path(directory) / TOML_FILENAME
    if not path.exists():
        return None

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Unable to read {TOML_FILENAME} provided: {e}") from e

    bin_value = data.get("bin")
    version = data.get("version")
    for key, value in (("bin", bin_value), ("version", version)):
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"Invalid {key!r} in {path}: expected a string")

    return ProjectConfig(
        bin_path=expand_path(bin_value) if bin_value else None,
        version=version.strip() if version else None,
        source=str(path),
    )


def read_version_file(path: str | Path) -> str | None:
    """
    Read a single-line version pin file.

    Returns:
        Stripped file contents, or None if the file does not exist

    Raises:
        ConfigError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Failed to read {path.name} file: {e}",
            remediation="The file should contain a single terraform version, e.g. 0.12.3",
        ) from e


def load_run_inputs(
    directory: str | Path,
    prefs: Preferences,
    requested_version: str | None = None,
    bin_path: str | None = None,
    list_all: bool = False,
    force: bool = False,
) -> RunInputs:
    """
    Read every configuration source for one run.

    Args:
        directory: Project directory holding the pin/config files
        prefs: Loaded preferences
        requested_version: Version given on the command line
        bin_path: Bin path given on the command line (None if not given)
        list_all: Whether --list-all was given
        force: Whether --force was given

    Returns:
        Immutable RunInputs
    """
    directory = Path(directory)
    project = load_project_config(directory)

    if bin_path:
        effective_bin = expand_path(bin_path)
    elif project is not None and project.bin_path:
        effective_bin = project.bin_path
    else:
        effective_bin = expand_path(prefs.bin_path)

    return RunInputs(
        requested_version=requested_version,
        list_all=list_all,
        bin_path=effective_bin,
        project_config=project,
        required_versions=tuple(load_required_versions(directory)),
        rc_version=read_version_file(directory / RC_FILENAME),
        pin_version=read_version_file(directory / TFV_FILENAME),
        force=force or prefs.replace_regular_file,
    )

