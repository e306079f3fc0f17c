"""
Pydantic schema definitions for API payloads.

Each domain (users, groups, chat, hall) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the stored records so that the API shape (for example the party
member projection) is assembled explicitly by the services.
"""
