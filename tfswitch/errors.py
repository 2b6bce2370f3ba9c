"""
Error types raised by tfswitch.

Library code raises these; only the command-line entry point turns them
into log output and an exit status.
"""

from __future__ import annotations


VERSION_FORMAT_HELP = (
    "Format should be #.#.# or #.#.#-@# where # is numbers and @ is word characters. "
    "For example, 0.11.7 and 0.11.9-beta1 are valid versions"
)


class SwitchError(Exception):
    """
    Base exception for tfswitch errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class ConfigError(SwitchError):
    """A configuration file is present but cannot be read or is invalid."""


class VersionFormatError(SwitchError):
    """A literal version does not match the accepted grammar."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Invalid terraform version format: {version!r}",
            remediation=VERSION_FORMAT_HELP,
        )


class ResolutionError(SwitchError):
    """No version could be chosen from the available sources."""


class VersionNotFoundError(ResolutionError):
    """Requested literal version is not published in the catalog."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"The provided terraform version does not exist: {version}",
            remediation="Try `tfswitch -l` to see all available versions.",
        )


class NoMatchingVersionError(ResolutionError):
    """No catalog entry satisfies a version constraint."""

    def __init__(self, constraint: str):
        self.constraint = constraint
        super().__init__(f"No version found to match constraint: {constraint}")


class ConstraintParseError(ResolutionError):
    """A version constraint expression is malformed."""


class FetchError(SwitchError):
    """
    Network or payload failure while retrieving release data.

    Attributes:
        retryable: Whether the failure looks transient
    """
    def __init__(self, message: str, retryable: bool = False, remediation: str | None = None):
        self.retryable = retryable
        super().__init__(message, remediation=remediation)


class CatalogFetchError(FetchError):
    """The release index could not be downloaded."""


class CatalogParseError(FetchError):
    """The release index was downloaded but lists no versions."""


class DownloadError(FetchError):
    """A release archive could not be downloaded."""


class ChecksumError(FetchError):
    """A downloaded archive does not match its published checksum."""


class ArchiveError(FetchError):
    """A downloaded archive is corrupt or lacks the terraform binary."""


class InstallDirError(FetchError):
    """The install directory cannot be created or written."""


class ActivationError(SwitchError):
    """The bin path could not be switched to the installed binary."""


class PromptAborted(SwitchError):
    """Interactive selection was cancelled or is not possible."""
