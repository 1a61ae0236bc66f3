"""
HTTP client utilities for flakelint.

This module provides the asynchronous HTTP client shared by every update
lookup of a run. It is constructed explicitly by the caller and injected
into :class:`~flakelint.core.updates.UpdateChecker`, so tests can swap the
transport and commands can tune timeouts per invocation.
"""

from __future__ import annotations

import os
import random
import asyncio
from urllib.parse import urlsplit
from typing import Any, Dict, Mapping, Optional, cast

import httpx

from flakelint.utils.logger import get_logger
from flakelint.__version__ import __version__
from flakelint.exceptions import NetworkError, NotFoundError
from flakelint.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_MAX_KEEPALIVE,
    DEFAULT_KEEPALIVE_EXPIRY,
    ENV_GITHUB_TOKEN,
    ENV_GITLAB_TOKEN,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with a bounded connection pool.

    Args:
        timeout: Per-request timeout in seconds.
        max_retries: Retry attempts for timeouts, connection errors, 429 and
            5xx responses. ``0`` disables retries.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_connections: Size of the connection pool.
        max_keepalive: Idle connections kept in the pool.
        host_headers: Extra headers keyed by hostname, e.g. auth tokens for
            ``api.github.com``.
        transport: Optional ``httpx`` transport (``httpx.MockTransport`` in
            tests).

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json("https://api.github.com/repos/NixOS/nixpkgs")
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive: int = DEFAULT_MAX_KEEPALIVE,
        host_headers: Optional[Mapping[str, Mapping[str, str]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_connections = max_connections
        self.max_keepalive = max_keepalive
        self.host_headers: Dict[str, Dict[str, str]] = {
            host.lower(): dict(headers) for host, headers in (host_headers or {}).items()
        }

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_environment(cls, **kwargs: Any) -> "HTTPClient":
        """Build a client that authenticates with tokens from the environment.

        ``GITHUB_TOKEN`` is sent to ``api.github.com`` and ``GITLAB_TOKEN`` to
        ``gitlab.com``. Missing variables simply mean anonymous requests.
        """
        host_headers: Dict[str, Dict[str, str]] = dict(kwargs.pop("host_headers", None) or {})

        github_token = os.environ.get(ENV_GITHUB_TOKEN)
        if github_token:
            host_headers.setdefault("api.github.com", {})["Authorization"] = (
                f"Bearer {github_token}"
            )

        gitlab_token = os.environ.get(ENV_GITLAB_TOKEN)
        if gitlab_token:
            host_headers.setdefault("gitlab.com", {})["Private-Token"] = gitlab_token

        return cls(host_headers=host_headers, **kwargs)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(
                    max_connections=self.max_connections,
                    max_keepalive_connections=self.max_keepalive,
                    keepalive_expiry=DEFAULT_KEEPALIVE_EXPIRY,
                ),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers_for(self, url: str) -> Dict[str, str]:
        """Return the extra headers configured for the URL's host."""
        host = (urlsplit(url).hostname or "").lower()
        return dict(self.host_headers.get(host, {}))

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request, retrying transient failures if enabled."""
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        headers = self._headers_for(clean_url)
        headers.update(kwargs.pop("headers", None) or {})

        attempts = self.max_retries + 1
        last_exc: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                logger.debug("%s %s", method, clean_url)
                response = await self._client.request(
                    method, clean_url, headers=headers, **kwargs
                )
            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s", attempt + 1, attempts, clean_url
                )
            except httpx.TransportError as exc:
                last_exc = exc
                logger.warning(
                    "Network error (%d/%d): %s", attempt + 1, attempts, exc
                )
            else:
                status = response.status_code

                if status == 404:
                    raise NotFoundError(
                        f"Resource not found: {clean_url}",
                        url=clean_url,
                    )

                if status == 429 or status >= 500:
                    last_exc = NetworkError(
                        f"HTTP {status} error for {clean_url}",
                        url=clean_url,
                        status_code=status,
                        response_body=response.text,
                    )
                    logger.warning(
                        "HTTP %d (%d/%d): %s", status, attempt + 1, attempts, clean_url
                    )
                elif status >= 400:
                    raise NetworkError(
                        f"HTTP {status} error for {clean_url}",
                        url=clean_url,
                        status_code=status,
                        response_body=response.text,
                    )
                else:
                    return response

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)

        if isinstance(last_exc, NetworkError):
            raise last_exc

        raise NetworkError(
            f"Request failed after {attempts} attempt(s): {clean_url}",
            url=clean_url,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Fetch a URL and parse the response as a JSON object."""
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)
