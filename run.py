"""Entry point for the Event Manager API server.

Starts the FastAPI application under uvicorn.  Host and port are read
from the ``HOST`` and ``PORT`` environment variables (defaults
``0.0.0.0`` and ``5000``).  SIGINT/SIGTERM trigger uvicorn's graceful
shutdown, which also runs the application's shutdown hook.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from event_manager_api.app.core.logging_config import log_asyncio_exception
from event_manager_api.app.main import app


async def main() -> None:
    """Serve the API until a termination signal arrives."""
    # Faults in background tasks are logged, not fatal.
    asyncio.get_running_loop().set_exception_handler(log_asyncio_exception)
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Server stopped")
