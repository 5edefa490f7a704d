"""
Pipeline registry.

Stores versioned pipeline definitions with owner-scoped access, cursor-based
listing and schedule-aware deletion.
"""

__version__ = "0.1.0"
