"""
Top‑level package for the Event Manager API.

The HTTP service lives under ``app``; ``client`` is a small Python
client for the same API and ``cli`` the administrative command line.
"""

__all__ = []
