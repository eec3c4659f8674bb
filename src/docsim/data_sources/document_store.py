"""Document stores and the extractor that reads text and image references."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from docsim.errors import DocumentNotFound, ExtractionFailure
from docsim.models.document import DocumentParts

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Returns the raw text and ordered image references of a document."""

    async def get(self, document_id: str) -> DocumentParts: ...


class InMemoryDocumentStore:
    """Document store backed by a dict. Useful for tests and small corpora."""

    def __init__(self, documents: dict[str, DocumentParts] | None = None) -> None:
        self._documents = dict(documents or {})

    def add(self, document_id: str, text: str, images: list[str] | None = None) -> None:
        self._documents[document_id] = DocumentParts(text=text, images=images or [])

    async def get(self, document_id: str) -> DocumentParts:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFound(document_id) from None


class JsonDocumentStore:
    """Document store backed by a JSON manifest on disk.

    The manifest maps document ids to ``{"text": ..., "images": [...]}``.
    The file is re-read on every call so edits are picked up without a
    restart.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, DocumentParts]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ExtractionFailure(
                "document_store", f"Cannot read manifest {self.path}: {e}"
            ) from e

        if not isinstance(raw, dict):
            raise ExtractionFailure(
                "document_store", f"Manifest {self.path} must be a JSON object"
            )
        try:
            return {key: DocumentParts.model_validate(value) for key, value in raw.items()}
        except (ValidationError, AttributeError) as e:
            raise ExtractionFailure(
                "document_store", f"Malformed manifest {self.path}: {e}"
            ) from e

    async def get(self, document_id: str) -> DocumentParts:
        documents = await asyncio.to_thread(self._load)
        if document_id not in documents:
            raise DocumentNotFound(document_id)
        return documents[document_id]


class DocumentExtractor:
    """Fetches a document's native text and image references. No caching."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def extract_parts(self, document_id: str) -> DocumentParts:
        """Return (text, images) for a document.

        Raises DocumentNotFound for unknown ids. Any other failure from the
        store is surfaced as ExtractionFailure.
        """
        try:
            parts = await self.store.get(document_id)
        except (DocumentNotFound, ExtractionFailure):
            raise
        except Exception as e:
            raise ExtractionFailure(
                "document_store",
                f"Unexpected error extracting '{document_id}': {e}",
            ) from e

        if not isinstance(parts, DocumentParts):
            raise ExtractionFailure(
                "document_store",
                f"Unexpected response shape for document '{document_id}'",
            )

        logger.debug(
            "Extracted document %s: %d chars, %d images",
            document_id,
            len(parts.text),
            len(parts.images),
        )
        return parts
