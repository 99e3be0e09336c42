"""
Pydantic schema definitions for API payloads.

Each domain (users, messages) defines its own Pydantic models for
request and response bodies.  Schemas are separated from the stored
documents to decouple API representation from persistence.
"""
