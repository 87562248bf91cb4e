"""Command line entry points for pdfstamp."""

from .main import main

__all__ = ["main"]
