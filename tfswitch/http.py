"""
HTTP helpers with bounded timeouts and retry for transient failures.
"""

from __future__ import annotations

import logging
import random
import shutil
import time
import urllib.error
import urllib.request
from pathlib import Path

from . import __version__
from .errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = f"tfswitch/{__version__}"
DEFAULT_TIMEOUT = 30
DEFAULT_RETRIES = 1


def is_retryable_error(exc: BaseException) -> bool:
    """
    Determine if a network error is transient.

    Server errors (5xx) and rate limiting are retried; other HTTP status
    errors such as 404 are not.
    """
    if isinstance(exc, urllib.error.HTTPError):
        return exc.code >= 500 or exc.code == 429
    if isinstance(exc, (urllib.error.URLError, TimeoutError, ConnectionError)):
        return True
    return False


def calculate_backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Args:
        attempt: Retry attempt number (0-indexed)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Delay in seconds with jitter applied
    """
    delay = min(base_delay * (2 ** attempt), max_delay)

    # Add jitter (+/-20%)
    jitter = delay * 0.2 * (random.random() * 2 - 1)
    return max(0.1, delay + jitter)


def _open(url: str, timeout: int):
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    return urllib.request.urlopen(req, timeout=timeout)


def _with_retry(action, url: str, retries: int):
    attempts = max(0, retries) + 1
    for attempt in range(attempts):
        try:
            return action()
        except (urllib.error.URLError, TimeoutError, ConnectionError, OSError) as e:
            retryable = is_retryable_error(e)
            if not retryable or attempt == attempts - 1:
                raise FetchError(f"Failed to fetch {url}: {e}", retryable=retryable) from e

            delay = calculate_backoff_delay(attempt)
            logger.debug(f"Attempt {attempt + 1}/{attempts} for {url} failed ({e}); retrying in {delay:.1f}s")
            time.sleep(delay)

    raise FetchError(f"Failed to fetch {url}")  # pragma: no cover


def http_get(url: str, timeout: int = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES) -> bytes:
    """
    Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds per attempt
        retries: Extra attempts for transient failures

    Returns:
        Response body as bytes

    Raises:
        FetchError: If every attempt fails
    """
    def _get() -> bytes:
        with _open(url, timeout) as response:
            return response.read()

    logger.debug(f"GET {url}")
    return _with_retry(_get, url, retries)


def download_file(
    url: str,
    dest: str | Path,
    timeout: int = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
) -> Path:
    """
    Stream a URL to a local file.

    Args:
        url: URL to download
        dest: Destination file path (overwritten)
        timeout: Timeout in seconds per attempt
        retries: Extra attempts for transient failures

    Returns:
        Path to the downloaded file

    Raises:
        FetchError: If every attempt fails
    """
    dest = Path(dest)

    def _download() -> Path:
        with _open(url, timeout) as response, open(dest, "wb") as f:
            shutil.copyfileobj(response, f)
        return dest

    logger.debug(f"Downloading {url} -> {dest}")
    return _with_retry(_download, url, retries)
