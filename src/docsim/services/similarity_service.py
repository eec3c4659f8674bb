"""Top-level similarity orchestration between two documents."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from docsim.errors import DocSimError
from docsim.services.embeddings import EmbeddingSource
from docsim.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class SimilarityService:
    """Scores two documents by the cosine similarity of their embeddings.

    The embedding source is injected; pass a CachedEmbeddingSource to reuse
    vectors across calls. ``on_close`` callbacks release adapters the
    service was built with (HTTP sessions, SDK clients).
    """

    def __init__(
        self,
        source: EmbeddingSource,
        on_close: list[Callable[[], Awaitable[None]]] | None = None,
    ) -> None:
        self.source = source
        self._on_close = list(on_close or [])

    async def similarity(self, id1: str, id2: str) -> float:
        """Return the cosine similarity between documents *id1* and *id2*.

        Both embeddings are requested concurrently and both are awaited. If
        one request fails its exception is raised; if both fail, the one for
        *id1* wins. The exception type is left unchanged and gets a note
        naming the document that failed.
        """
        results = await asyncio.gather(
            self.source.embed(id1), self.source.embed(id2), return_exceptions=True
        )

        for document_id, result in zip((id1, id2), results):
            if isinstance(result, BaseException):
                if isinstance(result, DocSimError) and result.document_id is None:
                    result.document_id = document_id
                result.add_note(f"while computing the embedding of document '{document_id}'")
                logger.error("Similarity %s vs %s failed on %s: %s", id1, id2, document_id, result)
                raise result

        score = cosine_similarity(results[0], results[1])
        logger.info("Similarity %s vs %s = %.4f", id1, id2, score)
        return score

    async def aclose(self) -> None:
        """Close every adapter registered with the service."""
        for close in self._on_close:
            await close()
