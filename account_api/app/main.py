"""
Main entrypoint for the Account API.

This module assembles the FastAPI application, sets up logging, wires
the user store into the service layer, registers the error handlers
and includes versioned routers.  The ``create_app`` function builds
and configures the app, which is then instantiated at module import
time as ``app``.  Run it with uvicorn or another ASGI server, e.g.::

    uvicorn account_api.app.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, settings
from .core.db import UserStore, get_database_path
from .core.errors import register_exception_handlers
from .core.logging_config import setup_logging
from .api.v1.router import router as v1_router
from .services.user_service import UserService


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    config : Optional[Settings]
        Settings to build the app with.  Defaults to the module level
        ``settings`` read from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    config = config or settings
    # Initialise logging before anything else so that the modules below
    # can safely log messages.
    setup_logging(config.log_level, config.log_file)

    app = FastAPI(title=config.project_name, version=config.api_version, debug=config.debug)
    app.state.settings = config
    app.state.user_service = UserService(UserStore(get_database_path(config.database_url)))

    register_exception_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    # Create the database file and apply migrations at startup.
    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.user_service.store.init_schema()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
