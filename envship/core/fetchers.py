"""Configuration document fetchers.

The loader depends only on the ``ConfigFetcher`` Protocol: any object with
a ``fetch(path) -> bytes`` method. Two backends ship:

1. **HttpConfigFetcher**: fetches from the origin serving the artifact,
   with a bounded wait.
2. **FileConfigFetcher**: reads from a local artifact tree.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import requests

from envship.core.errors import FetchFailedError, FetchTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0


@runtime_checkable
class ConfigFetcher(Protocol):
    """Protocol for configuration document transports."""

    def fetch(self, path: str) -> bytes:
        """Return the raw document body at ``path``.

        Raises ``FetchFailedError`` (or ``FetchTimeoutError``) on failure.
        """
        ...


class HttpConfigFetcher:
    """Fetches the configuration document over HTTP(S).

    Parameters
    ----------
    base_url:
        Origin serving the deployed artifact, e.g. ``https://app.example.com``.
    timeout:
        Seconds to wait for connect and read before failing.
    session:
        Optional ``requests.Session`` (tests and connection reuse).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch(self, path: str) -> bytes:
        url = self.url_for(path)
        # Configuration must never come from an intermediate cache.
        headers = {"Cache-Control": "no-cache", "Accept": "application/json"}
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            raise FetchTimeoutError(
                f"Timed out after {self.timeout}s fetching configuration from {url}"
            ) from exc
        except requests.RequestException as exc:
            raise FetchFailedError(
                f"Failed to fetch configuration from {url}: {exc}"
            ) from exc
        logger.debug("Fetched %d bytes from %s", len(response.content), url)
        return response.content


class FileConfigFetcher:
    """Reads the configuration document from a local artifact tree.

    Parameters
    ----------
    root:
        Root directory of the artifact (the directory that is published).
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def fetch(self, path: str) -> bytes:
        file_path = self.root / path.lstrip("/")
        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise FetchFailedError(
                f"Failed to read configuration from {file_path}: {exc}"
            ) from exc
