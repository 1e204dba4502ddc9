"""Command-line entry point for disco."""
