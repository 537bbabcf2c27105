"""Bundled data files (default theme)."""
