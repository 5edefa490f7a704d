"""Command line interface for the pipeline registry."""
