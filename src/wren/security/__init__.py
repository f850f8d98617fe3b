"""Security audit events for bearer-token authentication."""

from wren.security.audit import (
    AUTH_SUCCESS,
    TOKEN_INVALID,
    TOKEN_MISSING,
    SecurityEvent,
    emit_security_event,
    log_security_event,
    set_security_event_sink,
)

__all__ = [
    "AUTH_SUCCESS",
    "TOKEN_INVALID",
    "TOKEN_MISSING",
    "SecurityEvent",
    "emit_security_event",
    "log_security_event",
    "set_security_event_sink",
]
