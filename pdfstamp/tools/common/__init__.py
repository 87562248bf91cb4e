"""Shared interfaces for pluggable pdfstamp tools."""
