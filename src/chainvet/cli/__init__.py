"""Command-line interface for chainvet."""
