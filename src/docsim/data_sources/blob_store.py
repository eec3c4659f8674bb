"""Blob stores that return raw image bytes for an image reference."""

import asyncio
import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from docsim.data_sources.base_client import BaseClient, ClientConfig, RequestContext
from docsim.errors import BlobNotFound, DataSourceError, StorageFailure

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Returns the raw bytes stored under an image reference."""

    async def get(self, ref: str) -> bytes: ...


class LocalBlobStore:
    """Blob store rooted at a local directory.

    Image references are paths relative to the root. References that resolve
    outside the root are rejected.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if not path.is_relative_to(self.root):
            raise StorageFailure("blob_store", f"Reference '{ref}' escapes {self.root}")
        return path

    def _read(self, ref: str) -> bytes:
        path = self._resolve(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFound(ref) from None
        except OSError as e:
            raise StorageFailure("blob_store", f"Cannot read '{ref}': {e}") from e

    async def get(self, ref: str) -> bytes:
        data = await asyncio.to_thread(self._read, ref)
        logger.debug("Read blob %s (%d bytes)", ref, len(data))
        return data


class HttpBlobStore(BaseClient):
    """Blob store served over HTTP: GET {base_url}/{ref}."""

    def __init__(self, base_url: str, config: ClientConfig | None = None) -> None:
        super().__init__(config)
        self.base_url = base_url.rstrip("/")

    @property
    def _source_name(self) -> str:
        return "blob_store"

    @property
    def _error_type(self) -> type[DataSourceError]:
        return StorageFailure

    async def get(self, ref: str) -> bytes:
        """Fetch the blob for *ref*.

        Raises BlobNotFound on HTTP 404 and StorageFailure for any other
        HTTP, timeout or connection error.
        """
        url = f"{self.base_url}/{quote(ref.lstrip('/'))}"
        try:
            resp = await self._request(
                "GET",
                url,
                context=RequestContext(
                    source=self._source_name, method="get", params={"ref": ref}
                ),
            )
        except StorageFailure as e:
            if e.status_code == 404:
                raise BlobNotFound(ref, source=self._source_name) from e
            raise
        return resp.body
