"""
Service layer abstraction.

Services encapsulate business logic and receive their persistence
explicitly at construction, so API handlers never talk to the database
directly and tests can point a service at a temporary store.
"""
