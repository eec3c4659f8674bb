"""
Per-document embedding sources.

DirectEmbeddingSource runs the full pipeline for a document every time:
normalize, then call the embedding model under the retry policy.
CachedEmbeddingSource wraps any EmbeddingSource and memoizes vectors per
document id for its own lifetime. Both satisfy the EmbeddingSource protocol,
so the similarity service does not know which one it was given.
"""

import asyncio
import logging
from typing import Protocol

from docsim.errors import PermanentEmbeddingError
from docsim.models.document import EmbeddingVector
from docsim.services.embedding_model import EmbeddingModel
from docsim.services.normalizer import DocumentNormalizer
from docsim.services.retry import RetryPolicy

logger = logging.getLogger(__name__)


class EmbeddingSource(Protocol):
    """Anything that can produce the embedding of a document by id."""

    async def embed(self, document_id: str) -> EmbeddingVector: ...


class DirectEmbeddingSource:
    """Computes a document's embedding from scratch on every call."""

    def __init__(
        self,
        normalizer: DocumentNormalizer,
        model: EmbeddingModel,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.normalizer = normalizer
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy()

    async def embed(self, document_id: str) -> EmbeddingVector:
        """Normalize the document and embed the resulting text.

        Normalization failures propagate as-is and are never retried. Model
        failures go through the retry policy, which raises
        EmbeddingUnavailable once transient retries are exhausted.
        """
        text = await self.normalizer.normalize(document_id)
        vector = await self.retry_policy.run(
            lambda: self.model.embed(text), description=f"embed:{document_id}"
        )
        if not vector:
            raise PermanentEmbeddingError(f"Empty embedding for document '{document_id}'")
        logger.info("Computed embedding for %s (dim=%d)", document_id, len(vector))
        return tuple(float(x) for x in vector)


class CachedEmbeddingSource:
    """Memoizing, single-flight wrapper around another EmbeddingSource.

    Entries live as long as this object: no TTL, no eviction. For each
    document id at most one computation is in flight; concurrent callers
    await the same task and receive the same vector or the same exception.
    Failures are not stored, so the next call starts over.

    The in-flight table is only touched from the event loop thread, and the
    check-then-claim in get_or_compute has no await between the two steps,
    so the decision per id is atomic without a lock. Ids never wait on each
    other. An instance must be used from a single event loop.
    """

    def __init__(self, inner: EmbeddingSource) -> None:
        self.inner = inner
        self._entries: dict[str, EmbeddingVector] = {}
        self._inflight: dict[str, asyncio.Task[EmbeddingVector]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._entries

    async def _compute(self, document_id: str) -> EmbeddingVector:
        try:
            vector = await self.inner.embed(document_id)
        except Exception as e:
            logger.warning("Embedding for %s failed, not caching: %s", document_id, e)
            raise
        else:
            self._entries[document_id] = vector
            return vector
        finally:
            self._inflight.pop(document_id, None)

    async def get_or_compute(self, document_id: str) -> EmbeddingVector:
        """Return the cached vector for *document_id*, computing it if absent."""
        cached = self._entries.get(document_id)
        if cached is not None:
            logger.debug("Embedding cache hit for %s", document_id)
            return cached

        task = self._inflight.get(document_id)
        if task is None:
            logger.debug("Embedding cache miss for %s", document_id)
            task = asyncio.create_task(self._compute(document_id))
            self._inflight[document_id] = task
        else:
            logger.debug("Joining in-flight embedding for %s", document_id)

        # A cancelled caller must not cancel the computation other callers share.
        return await asyncio.shield(task)

    async def embed(self, document_id: str) -> EmbeddingVector:
        return await self.get_or_compute(document_id)
