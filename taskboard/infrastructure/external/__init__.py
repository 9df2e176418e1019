"""Adapters for external systems (file storage)."""
