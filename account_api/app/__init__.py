"""
Application package initializer.

This package contains the entrypoint for the API and its submodules:
``core`` (configuration, logging, persistence, security and error
handling), ``schemas`` (request and response models), ``services``
(account business logic) and ``api`` (versioned routers).  Versioning
is handled by grouping routers under the ``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
