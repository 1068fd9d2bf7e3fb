"""
Process-wide logging for the Event Manager API.

Records go to stderr and, when ``LOG_FILE`` is set, to that file as
well.  ``create_app`` calls :func:`setup_logging` on every build; only
the first call in a process takes effect.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        path = Path(logfile).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach the application's handlers to the root logger.

    ``level`` is a level name such as ``"debug"``; unknown names fall
    back to INFO.  A root logger that already has handlers (a second
    app in the same process, pytest's capture) is left untouched.
    """
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=_handlers(logfile),
    )


def log_asyncio_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """Event loop exception handler that logs faults instead of exiting.

    Install with ``loop.set_exception_handler(log_asyncio_exception)``.
    Unhandled exceptions in tasks and callbacks end up here.
    """
    logger = logging.getLogger("event_manager_api.asyncio")
    exc = context.get("exception")
    message = context.get("message", "Unhandled exception in event loop")
    if exc is not None:
        logger.error("%s: %s", message, exc, exc_info=exc)
    else:
        logger.error("%s", message)
