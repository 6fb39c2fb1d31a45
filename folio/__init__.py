"""Folio: folders and documents shared through a relationship store."""

__version__ = "1.0.0"
