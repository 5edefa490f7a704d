"""Utility modules for the pipeline registry."""
