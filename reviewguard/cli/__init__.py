"""Command-line interface for reviewguard."""
