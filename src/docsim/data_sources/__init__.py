"""Adapters for the external document, blob and OCR services."""
