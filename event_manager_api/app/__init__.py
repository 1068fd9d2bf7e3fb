"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (auth, events, registrations, users) has its
schemas under ``schemas``, its business logic under ``services`` and
its routes under ``api/v1/endpoints``.  Versioning is handled by
grouping routers under the ``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
