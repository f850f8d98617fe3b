"""Wren CLI — serve a function and list its routes.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren — routing and dispatch for small serverless functions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren run ---------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve a function with uvicorn")
    run_parser.add_argument(
        "app",
        help="Import string of an App or define_routes() result (e.g. accounts.main:routes)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List a function's routes")
    routes_parser.add_argument("app", help="Import string (e.g. accounts.main:routes)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from wren.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
