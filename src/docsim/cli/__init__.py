"""Command-line interface for docsim."""
