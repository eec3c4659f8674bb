"""Local sentence-transformers embedding model.

Runs the embedding model in-process instead of calling a hosted API. The
model is lazy-loaded on the first call to embed() and reused for the
lifetime of the instance, since loading takes seconds and hundreds of MB.
Encoding is CPU-bound, so it runs in a worker thread to keep the event loop
free.
"""

import asyncio
import logging
import threading

from sentence_transformers import SentenceTransformer

from docsim.constants import DEFAULT_LOCAL_EMBEDDING_MODEL
from docsim.errors import PermanentEmbeddingError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbeddingModel:
    """EmbeddingModel implementation backed by a SentenceTransformer."""

    def __init__(self, model_name: str = DEFAULT_LOCAL_EMBEDDING_MODEL) -> None:
        self.model_name = model_name
        self._model: SentenceTransformer | None = None
        self._lock = threading.Lock()

    def _get_model(self) -> SentenceTransformer:
        """Return the model, instantiating it on first call."""
        with self._lock:
            if self._model is None:
                logger.info("Loading embedding model %s", self.model_name)
                self._model = SentenceTransformer(self.model_name)
            return self._model

    def _encode(self, text: str) -> list[float]:
        model = self._get_model()
        # plain Python floats rather than numpy scalars
        vectors = model.encode([text], convert_to_numpy=True)
        return vectors[0].tolist()

    async def embed(self, text: str) -> list[float]:
        """Embed *text*. Local failures are never transient."""
        try:
            return await asyncio.to_thread(self._encode, text)
        except Exception as e:
            raise PermanentEmbeddingError(
                f"Local model {self.model_name} failed: {e}"
            ) from e
