"""Security helpers: CSRF tokens, password hashing, and audit events."""

from migus.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from migus.security.csrf import CSRFConfig, Csrf
from migus.security.passwords import hash_password, verify_password

__all__ = [
    "CSRFConfig",
    "Csrf",
    "SecurityEvent",
    "emit_security_event",
    "hash_password",
    "set_security_event_sink",
    "verify_password",
]
