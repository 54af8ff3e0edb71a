"""Command-line entry point for contract runs."""
