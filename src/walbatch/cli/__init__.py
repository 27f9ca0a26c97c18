"""Command-line interface for walbatch."""
