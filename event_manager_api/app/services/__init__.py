"""
Service layer abstraction.

Each service encapsulates business logic for a domain and raises the
exceptions from ``core.errors``.  API handlers stay thin: they collect
the request's connection and current user and delegate here.
"""
