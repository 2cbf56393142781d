"""Taggable: tag management and tag frequency counts."""
