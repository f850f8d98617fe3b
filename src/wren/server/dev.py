"""Serving the app with uvicorn.

uvicorn's ``run()`` takes an import string or an ASGI callable; wren
passes the live ``App`` object.
"""

import logging
import sys

import uvicorn

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Send ``wren.*`` logs to stdout at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # One line per request already comes from the dispatcher
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run_server(app: object, host: str, port: int, *, log_level: str = "info") -> None:
    """Serve *app* until interrupted.

    Args:
        app: ASGI callable (wren App instance).
        host: Bind host address.
        port: Bind port number.
        log_level: Level for wren and uvicorn loggers.
    """
    configure_logging(log_level)
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        lifespan="on",
        log_level=log_level,
        log_config=None,
    )
    uvicorn.Server(config).run()
