"""Shared constants and errors."""
