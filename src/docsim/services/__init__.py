"""Embedding pipeline and similarity services."""
