"""Security audit events.

Login, logout, and CSRF rejections are reported as structured events.
Every event is logged on the ``migus.security`` logger; applications can
also register a sink to forward them elsewhere (an audit table, a SIEM).
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

logger = logging.getLogger("migus.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    ip: str | None = None
    user_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]

_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Install a process-wide sink; ``None`` removes it."""
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    user_id: object | None = None,
    details: dict[str, Any] | None = None,
) -> SecurityEvent:
    """Log a security event and deliver it to the sink, if any."""
    event = SecurityEvent(
        name=name,
        path=getattr(request, "path", None),
        method=getattr(request, "method", None),
        ip=getattr(request, "ip", None),
        user_id=None if user_id is None else str(user_id),
        details=details or {},
    )
    logger.info("%s path=%s user=%s", event.name, event.path, event.user_id)
    with _sink_lock:
        sink = _sink
    if sink is not None:
        sink(event)
    return event
