"""
Pydantic schema definitions for API payloads.

Each domain (users, events, registrations) defines its own Pydantic
models for request and response bodies.  Schemas are separated from the
SQL in the service layer to decouple API representation from
persistence.
"""
