"""Command-line interface for taskspec."""
