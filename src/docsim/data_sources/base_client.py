"""
Base client for HTTP-backed collaborators (blob storage, OCR).

Provides: lazy aiohttp session management, a request timeout, structured
logging and translation of transport failures into the client's typed error.
Clients do not retry; only the embedding model call is retried.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from pydantic import BaseModel

from docsim.constants import DEFAULT_TIMEOUT
from docsim.errors import DataSourceError

logger = logging.getLogger("docsim.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """Transport settings shared by every HTTP client."""

    timeout_seconds: float = DEFAULT_TIMEOUT


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "blob_store", "ocr"
    method: str  # e.g. "get", "recognize"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Response wrapper
# ---------------------------------------------------------------------------


class RawResponse(BaseModel):
    """Status, headers and body of a completed HTTP response."""

    status: int
    headers: dict[str, str] = {}
    body: bytes = b""
    elapsed_seconds: float = 0.0

    def json(self) -> Any:
        return json.loads(self.body)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for the HTTP blob store and OCR clients.

    Subclasses implement `_source_name` and `_error_type`, and their own typed
    methods that call `_request()`. Every failure leaves this class as an
    instance of `_error_type`.
    """

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'blob_store'."""
        ...

    @property
    def _error_type(self) -> type[DataSourceError]:
        """Exception class raised for transport and HTTP failures."""
        return DataSourceError

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request ----------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> RawResponse:
        """
        Make a single HTTP request and return the buffered response.

        Parameters
        ----------
        method : str
            HTTP method — "GET" or "POST".
        url : str
            Full URL.
        params : dict, optional
            Query string parameters.
        data : bytes, optional
            Raw request body (for POST).
        headers : dict, optional
            Additional HTTP headers.
        context : RequestContext, optional
            Logging context.

        Raises `_error_type` for HTTP status >= 400, timeouts and connection
        errors. The status code is kept on the exception when there is one.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        error_type = self._error_type
        start = time.monotonic()

        try:
            session = await self._get_session()
            logger.debug("Request [%s.%s] %s %s", ctx.source, ctx.method, method, url)

            if method.upper() == "GET":
                resp = await session.get(url, params=params, headers=headers)
            else:
                resp = await session.post(
                    url, data=data, params=params, headers=headers
                )

            body = await resp.read()

        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start
            logger.warning(
                "Timeout [%s.%s] elapsed=%.1fs", ctx.source, ctx.method, elapsed
            )
            raise error_type(ctx.source, f"Timeout after {elapsed:.1f}s")

        except aiohttp.ClientError as e:
            logger.warning("Connection error [%s.%s]: %s", ctx.source, ctx.method, e)
            raise error_type(ctx.source, f"Connection error: {e}") from e

        elapsed = time.monotonic() - start
        if resp.status >= 400:
            text = body.decode("utf-8", errors="replace")
            raise error_type(
                ctx.source,
                f"HTTP {resp.status}: {text[:500]}",
                status_code=resp.status,
            )

        logger.debug(
            "Success [%s.%s] status=%d elapsed=%.2fs",
            ctx.source,
            ctx.method,
            resp.status,
            elapsed,
        )
        return RawResponse(
            status=resp.status,
            headers=dict(resp.headers),
            body=body,
            elapsed_seconds=elapsed,
        )
