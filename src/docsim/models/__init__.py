"""Data models for docsim."""

from docsim.models.document import DocumentParts, EmbeddingVector

__all__ = ["DocumentParts", "EmbeddingVector"]
