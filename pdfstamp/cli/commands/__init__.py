"""Subcommand definitions for the pdfstamp CLI."""
