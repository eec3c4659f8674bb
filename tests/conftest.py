"""Pytest configuration and fixtures.

Fakes for the external collaborators (blob store, OCR, embedding model) live
here so every test can build a real pipeline without network access.
"""

import asyncio
import hashlib
import re

import pytest

from docsim.data_sources.document_store import DocumentExtractor, InMemoryDocumentStore
from docsim.errors import BlobNotFound, OcrFailure
from docsim.services.embeddings import DirectEmbeddingSource
from docsim.services.image_text import ImageTextExtractor
from docsim.services.normalizer import DocumentNormalizer
from docsim.services.retry import RetryPolicy

EMBEDDING_DIM = 32


class FakeBlobStore:
    """Blob store returning the reference's own name as bytes."""

    def __init__(self, missing: set[str] | None = None) -> None:
        self.missing = missing or set()
        self.calls: list[str] = []

    async def get(self, ref: str) -> bytes:
        self.calls.append(ref)
        await asyncio.sleep(0)
        if ref in self.missing:
            raise BlobNotFound(ref)
        return ref.encode()


class FakeOcr:
    """OCR keyed by image bytes, with optional per-image delay or failure."""

    def __init__(
        self,
        texts: dict[bytes, str] | None = None,
        delays: dict[bytes, float] | None = None,
        failing: set[bytes] | None = None,
    ) -> None:
        self.texts = texts or {}
        self.delays = delays or {}
        self.failing = failing or set()
        self.completed: list[bytes] = []

    async def recognize(self, data: bytes) -> str:
        await asyncio.sleep(self.delays.get(data, 0))
        if data in self.failing:
            raise OcrFailure("ocr", f"cannot read {data!r}")
        self.completed.append(data)
        return self.texts.get(data, "")


class FakeEmbeddingModel:
    """Deterministic bag-of-words hashing model; identical text, identical vector."""

    def __init__(self, dim: int = EMBEDDING_DIM) -> None:
        self.dim = dim
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        await asyncio.sleep(0)
        vec = [0.0] * self.dim
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            idx = int(hashlib.md5(token.encode()).hexdigest(), 16) % self.dim
            vec[idx] += 1.0
        return vec


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.add("doc1", "quarterly revenue report", ["chart.png", "table.png"])
    store.add("doc2", "quarterly revenue report", ["chart.png", "table.png"])
    store.add("doc3", "hiking trails in the alps")
    return store


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def ocr() -> FakeOcr:
    return FakeOcr(
        texts={b"chart.png": "revenue grew", b"table.png": "totals by region"}
    )


@pytest.fixture
def embedding_model() -> FakeEmbeddingModel:
    return FakeEmbeddingModel()


@pytest.fixture
def normalizer(document_store, blob_store, ocr) -> DocumentNormalizer:
    return DocumentNormalizer(
        DocumentExtractor(document_store), ImageTextExtractor(blob_store, ocr)
    )


@pytest.fixture
def direct_source(normalizer, embedding_model) -> DirectEmbeddingSource:
    return DirectEmbeddingSource(normalizer, embedding_model, RetryPolicy())


@pytest.fixture
def make_ocr() -> type[FakeOcr]:
    """The FakeOcr class, for tests that need custom delays or failures."""
    return FakeOcr


@pytest.fixture
def make_blob_store() -> type[FakeBlobStore]:
    return FakeBlobStore
