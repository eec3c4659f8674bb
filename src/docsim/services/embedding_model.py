"""Embedding model interface and the OpenAI-backed implementation."""

import logging
from collections.abc import Sequence
from typing import Protocol

import openai
from openai import AsyncOpenAI

from docsim.constants import DEFAULT_EMBEDDING_MODEL
from docsim.errors import PermanentEmbeddingError, TransientEmbeddingError

logger = logging.getLogger(__name__)

# HTTP statuses from the embeddings API that are worth retrying.
_TRANSIENT_STATUS_CODES = {408, 409, 429}


class EmbeddingModel(Protocol):
    """Turns a text blob into a fixed-length vector.

    Implementations raise TransientEmbeddingError for failures that may pass
    on retry and PermanentEmbeddingError for everything else.
    """

    async def embed(self, text: str) -> Sequence[float]: ...


def classify_openai_error(error: openai.OpenAIError) -> TransientEmbeddingError | PermanentEmbeddingError:
    """Map an OpenAI SDK exception onto the transient/permanent split."""
    if isinstance(error, openai.APIConnectionError):  # includes APITimeoutError
        return TransientEmbeddingError(f"Connection error: {error}")
    if isinstance(error, openai.APIStatusError):
        status = error.status_code
        message = f"HTTP {status}: {error.message}"
        if status in _TRANSIENT_STATUS_CODES or status >= 500:
            return TransientEmbeddingError(message)
        return PermanentEmbeddingError(message)
    return PermanentEmbeddingError(str(error))


class OpenAIEmbeddingModel:
    """Embedding model backed by the OpenAI embeddings API.

    The SDK's own retries are disabled so that RetryPolicy is the only place
    a call is repeated.
    """

    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key or None
        self._client = client

    def _ensure_client(self) -> AsyncOpenAI:
        """Create the async client on first use."""
        if self._client is None:
            try:
                self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
            except openai.OpenAIError as e:
                raise PermanentEmbeddingError(f"Cannot create OpenAI client: {e}") from e
        return self._client

    async def embed(self, text: str) -> list[float]:
        """Embed *text* and return the first vector of the response."""
        client = self._ensure_client()
        try:
            response = await client.embeddings.create(input=[text], model=self.model)
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e

        if not response.data or not response.data[0].embedding:
            raise PermanentEmbeddingError(f"Model {self.model} returned no embedding")
        vector = list(response.data[0].embedding)
        logger.debug("Embedded %d chars with %s -> dim=%d", len(text), self.model, len(vector))
        return vector

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
