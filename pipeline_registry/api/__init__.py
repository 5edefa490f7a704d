"""HTTP API for the pipeline registry."""
