"""
Pydantic schema definitions for API payloads.

Schemas are separated from the database rows to decouple the API
representation from persistence: the store works with ``sqlite3.Row``
objects, while routers only ever see these models.
"""
