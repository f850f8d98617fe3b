"""Authentication audit events.

The authenticator reports every bearer-token decision as a
:class:`SecurityEvent`. Nothing is delivered until a sink is registered::

    from wren.security import log_security_event, set_security_event_sink

    set_security_event_sink(log_security_event)
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

logger = logging.getLogger("wren.security")

TOKEN_MISSING = "auth.token.missing"
TOKEN_INVALID = "auth.token.invalid"
AUTH_SUCCESS = "auth.success"


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    client: str | None = None
    user_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def log_security_event(event: SecurityEvent) -> None:
    """Sink that writes events to the ``wren.security`` logger."""
    level = logging.INFO if event.name == AUTH_SUCCESS else logging.WARNING
    logger.log(
        level,
        "%s %s %s client=%s user=%s %s",
        event.name,
        event.method or "-",
        event.path or "-",
        event.client or "-",
        event.user_id or "-",
        event.details or "",
    )


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    user_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort security event to the configured sink."""
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    path = method = client = None
    if request is not None:
        path = getattr(request, "path", None)
        method = getattr(request, "method", None)
        peer = getattr(request, "client", None)
        if peer:
            client = peer[0]

    sink(
        SecurityEvent(
            name=name,
            path=path,
            method=method,
            client=client,
            user_id=user_id,
            details=details or {},
        )
    )
