"""Command line interface for carefeed."""
