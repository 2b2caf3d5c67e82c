"""Command-line interface for lit."""
