"""Entry point for serving the Account API.

Host and port are read from the ``HOST`` and ``PORT`` environment
variables (defaults ``0.0.0.0`` and ``8000``).  Application settings
such as ``SECRET_KEY`` and ``DATABASE_URL`` are read by
``account_api.app.core.config``.

Usage:
    python run.py
"""
import os

from uvicorn import Config, Server

from account_api.app.main import app


def main() -> None:
    """Serve the API with uvicorn until interrupted."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    Server(config).run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
