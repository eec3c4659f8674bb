"""
Exception taxonomy for the similarity pipeline.

Storage-facing failures share the ``DataSourceError`` shape
(``[source] message`` plus an optional HTTP status code). Embedding failures
are split into transient and permanent so the retry policy can tell them
apart.
"""


class DocSimError(Exception):
    """Base exception for every failure raised by docsim."""

    document_id: str | None = None


# ---------------------------------------------------------------------------
# Storage / extraction
# ---------------------------------------------------------------------------


class DataSourceError(DocSimError):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class DocumentNotFound(DataSourceError):
    """Raised when the document store has no document with the given id."""

    def __init__(self, document_id: str, source: str = "document_store"):
        self.document_id = document_id
        super().__init__(source, f"Document '{document_id}' not found", 404)


class ExtractionFailure(DataSourceError):
    """Raised when a document exists but cannot be read or parsed."""

    pass


class BlobNotFound(DataSourceError):
    """Raised when an image reference does not resolve to a stored blob."""

    def __init__(self, ref: str, source: str = "blob_store"):
        self.ref = ref
        super().__init__(source, f"Blob '{ref}' not found", 404)


class StorageFailure(DataSourceError):
    """Raised on blob storage errors other than a missing blob."""

    pass


class OcrFailure(DataSourceError):
    """Raised when OCR rejects an image or the OCR service fails."""

    pass


# ---------------------------------------------------------------------------
# Vectors
# ---------------------------------------------------------------------------


class DimensionMismatch(DocSimError, ValueError):
    """Raised when two vectors of different lengths are compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Cannot compare vectors of length {left} and {right}")


# ---------------------------------------------------------------------------
# Embedding model
# ---------------------------------------------------------------------------


class EmbeddingError(DocSimError):
    """Base exception for embedding model failures."""

    pass


class TransientEmbeddingError(EmbeddingError):
    """Model call failed in a way that may succeed on retry (rate limit, timeout)."""

    pass


class PermanentEmbeddingError(EmbeddingError):
    """Model call failed in a way retrying cannot fix (bad request, auth)."""

    pass


class EmbeddingUnavailable(EmbeddingError):
    """Raised when every retry of a transient model failure has been used up."""

    def __init__(self, attempts: int, message: str):
        self.attempts = attempts
        super().__init__(f"Embedding unavailable after {attempts} attempts: {message}")
