"""HTTP client for remote directory indexes.

This module provides:
- HTTPClient: HTTP client for a static file server exposing an index page
- Index page retrieval (GET on the base address)
- Streamed file download (GET on base/<filename>)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from dirmirror.core.config import SourceConfig

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class APIError(Exception):
    """Base exception for remote errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Credentials missing or rejected."""


class NotFoundError(APIError):
    """Resource not found."""


class HTTPClient:
    """HTTP client for one remote directory index.

    Every request carries HTTP Basic authentication when the source
    configuration holds both a username and a password.
    """

    def __init__(self, config: SourceConfig) -> None:
        """Initialize the client.

        Args:
            config: Source configuration (URL, credentials, timeout).
        """
        self._config = config
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
            auth=config.auth,
            follow_redirects=True,
        )

    @property
    def config(self) -> SourceConfig:
        """Get the source configuration."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle response status and raise appropriate exceptions."""
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Access denied to {response.request.url}", response.status_code
            )
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {response.request.url}", 404)
        if response.status_code >= 400:
            raise APIError(
                f"HTTP {response.status_code} for {response.request.url}",
                response.status_code,
            )
        return response

    def get_index(self) -> str:
        """Fetch the directory index page.

        Returns:
            Response body decoded as text.

        Raises:
            AuthenticationError: If credentials are rejected.
            APIError: On any other HTTP error status.
            httpx.HTTPError: On transport failure.
        """
        response = self._handle_response(self._client.get(self._config.source_url))
        return response.text

    @contextmanager
    def stream_file(self, filename: str) -> Iterator[httpx.Response]:
        """Open a streamed download of one file.

        Args:
            filename: Name of the file as advertised by the index.

        Yields:
            Response whose body has not been read yet.

        Raises:
            NotFoundError: If the file does not exist remotely.
            APIError: On any other HTTP error status.
            httpx.HTTPError: On transport failure.
        """
        url = self._config.file_url(filename)
        logger.debug(f"GET {url}")
        with self._client.stream("GET", url) as response:
            self._handle_response(response)
            yield response

