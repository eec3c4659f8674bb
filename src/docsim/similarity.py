"""Cosine similarity between embedding vectors."""

from collections.abc import Sequence

import numpy as np

from docsim.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute cosine similarity between two embeddings.

    Returns dot(a, b) / (|a| * |b|), nominally in [-1, 1]. The result is not
    clipped, so rounding can push it marginally past either bound.

    If either vector has zero magnitude (including two empty vectors) the
    angle is undefined and 0.0 is returned.

    Raises:
        DimensionMismatch: if the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    a_arr = np.asarray(a, dtype=np.float64)
    b_arr = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(a_arr)
    norm_b = np.linalg.norm(b_arr)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a_arr, b_arr) / (norm_a * norm_b))
