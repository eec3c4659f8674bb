"""
OCR service interface and an HTTP client for "read"-style analyze APIs.

The client follows the long-running operation protocol used by document
intelligence services: the image is POSTed to an analyze endpoint, which
answers 202 with an ``Operation-Location`` header; that URL is then polled
until the operation reports ``succeeded`` or ``failed``.
"""

import asyncio
import logging
from typing import Protocol

from docsim.constants import (
    OCR_API_VERSION,
    OCR_MAX_POLLS,
    OCR_POLL_INTERVAL,
    OCR_READ_MODEL,
)
from docsim.data_sources.base_client import BaseClient, ClientConfig, RequestContext
from docsim.errors import DataSourceError, OcrFailure

logger = logging.getLogger(__name__)


class OcrService(Protocol):
    """Turns one image's bytes into extracted text."""

    async def recognize(self, data: bytes) -> str: ...


class ReadOcrClient(BaseClient):
    """Client for a prebuilt "read" OCR model behind an analyze/poll API."""

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        *,
        model: str = OCR_READ_MODEL,
        api_version: str = OCR_API_VERSION,
        poll_interval: float = OCR_POLL_INTERVAL,
        max_polls: int = OCR_MAX_POLLS,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.api_version = api_version
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    @property
    def _source_name(self) -> str:
        return "ocr"

    @property
    def _error_type(self) -> type[DataSourceError]:
        return OcrFailure

    def _headers(self) -> dict[str, str]:
        headers = {}
        if self.api_key:
            headers["Ocp-Apim-Subscription-Key"] = self.api_key
        return headers

    async def recognize(self, data: bytes) -> str:
        """Run OCR over *data* and return the recognized text.

        An image without any text yields "". Raises OcrFailure if the service
        rejects the image, the operation fails, or polling runs out.
        """
        url = f"{self.endpoint}/formrecognizer/documentModels/{self.model}:analyze"
        resp = await self._request(
            "POST",
            url,
            params={"api-version": self.api_version},
            data=data,
            headers={**self._headers(), "Content-Type": "application/octet-stream"},
            context=RequestContext(source=self._source_name, method="analyze"),
        )

        operation_url = resp.header("Operation-Location")
        if not operation_url:
            raise OcrFailure(self._source_name, "Analyze response has no Operation-Location")

        for poll in range(self.max_polls):
            result = await self._request(
                "GET",
                operation_url,
                headers=self._headers(),
                context=RequestContext(
                    source=self._source_name, method="poll", params={"poll": poll}
                ),
            )
            try:
                payload = result.json()
            except ValueError as e:
                raise OcrFailure(self._source_name, f"Malformed poll response: {e}") from e
            if not isinstance(payload, dict):
                raise OcrFailure(self._source_name, "Unexpected poll response shape")

            status = str(payload.get("status", "")).lower()
            if status == "succeeded":
                content = (payload.get("analyzeResult") or {}).get("content") or ""
                logger.debug("OCR succeeded after %d polls (%d chars)", poll + 1, len(content))
                return content
            if status == "failed":
                error = payload.get("error") or {}
                raise OcrFailure(
                    self._source_name,
                    f"Analyze operation failed: {error.get('message', 'unknown error')}",
                )

            await asyncio.sleep(self.poll_interval)

        raise OcrFailure(
            self._source_name, f"Analyze operation not finished after {self.max_polls} polls"
        )
