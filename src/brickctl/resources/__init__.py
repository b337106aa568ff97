"""Packaged resources (JSON schemas)."""
