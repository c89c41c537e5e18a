"""Blob storage quickstart: provision, transfer and clean up in one run."""

__version__ = "0.1.0"
