"""docsim: semantic similarity between documents via cached embeddings."""

__version__ = "0.1.0"
