"""Memoir - inline span tagging index for Markdown vaults."""

__version__ = "0.1.0"
