"""``wren routes`` — list a function's routes in resolution order."""

import argparse
import sys

from wren.app import App
from wren.cli._resolve import resolve_target
from wren.routing.table import RouteTable


def format_routes(app_or_table: App | RouteTable) -> list[str]:
    """Rows of METHOD, PATH, AUTH, HANDLER, in registration order."""
    table = app_or_table.routes if isinstance(app_or_table, App) else app_or_table
    rows: list[tuple[str, str, str, str]] = []
    for descriptor in table:
        handler_name = getattr(descriptor.action, "__qualname__", repr(descriptor.action))
        if not descriptor.has_action:
            handler_name = "(not implemented)"
        auth = "public" if descriptor.auth_disabled else "bearer"
        rows.append((descriptor.method, table.mount_path(descriptor), auth, handler_name))

    max_method = max([6, *(len(r[0]) for r in rows)])
    max_path = max([4, *(len(r[1]) for r in rows)])
    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{:<6}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "AUTH", "HANDLER")]
    sep_len = max_method + max_path + 12 + max((len(r[3]) for r in rows), default=0)
    lines.append("-" * min(sep_len, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    try:
        target = resolve_target(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for line in format_routes(target):
        print(line)
