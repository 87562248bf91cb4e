"""Core models, validation and configuration shared by pdfstamp tools."""
