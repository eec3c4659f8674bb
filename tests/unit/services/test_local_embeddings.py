"""Unit tests for SentenceTransformerEmbeddingModel — no model loading."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from docsim.errors import PermanentEmbeddingError
from docsim.services.local_embeddings import SentenceTransformerEmbeddingModel


def _make_mock_model(dim: int = 384) -> MagicMock:
    """Return a mock SentenceTransformer whose encode() returns a (1, dim) array.

    dtype=float32 matches what sentence-transformers returns by default.
    """
    mock = MagicMock()
    mock.encode.return_value = np.ones((1, dim), dtype=np.float32)
    return mock


async def test_embed_returns_python_floats():
    mock_model = _make_mock_model()
    with patch(
        "docsim.services.local_embeddings.SentenceTransformer", return_value=mock_model
    ):
        result = await SentenceTransformerEmbeddingModel("some-model").embed("text")

    assert isinstance(result, list)
    assert len(result) == 384
    assert all(isinstance(v, float) for v in result)
    mock_model.encode.assert_called_once_with(["text"], convert_to_numpy=True)


async def test_model_is_loaded_once():
    mock_model = _make_mock_model()
    with patch(
        "docsim.services.local_embeddings.SentenceTransformer", return_value=mock_model
    ) as st_cls:
        model = SentenceTransformerEmbeddingModel("some-model")
        await model.embed("a")
        await model.embed("b")

    st_cls.assert_called_once_with("some-model")


async def test_encode_failure_is_permanent():
    mock_model = _make_mock_model()
    mock_model.encode.side_effect = RuntimeError("CUDA out of memory")
    with patch(
        "docsim.services.local_embeddings.SentenceTransformer", return_value=mock_model
    ):
        with pytest.raises(PermanentEmbeddingError, match="CUDA out of memory"):
            await SentenceTransformerEmbeddingModel("some-model").embed("text")
