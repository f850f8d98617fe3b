"""``wren run`` — serve a function with uvicorn."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override config."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app.run(host=args.host, port=args.port)
