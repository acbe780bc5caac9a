"""Routing: path compilation, the route table, registration, and handler binding."""

from migus.routing.binding import CONTEXT, REQUEST, RESPONSE, Slot, SlotKind, binds, capture
from migus.routing.builder import RouteBuilder, RouteHandle, auto_name
from migus.routing.compiler import CompiledPath, compile_path
from migus.routing.handlers import (
    BoundFunction,
    ClassMethodRef,
    Handler,
    NamedControllerRef,
    resolve_handler,
)
from migus.routing.route import Route, RouteMatch
from migus.routing.table import RouteTable

__all__ = [
    "CONTEXT",
    "REQUEST",
    "RESPONSE",
    "BoundFunction",
    "ClassMethodRef",
    "CompiledPath",
    "Handler",
    "NamedControllerRef",
    "Route",
    "RouteBuilder",
    "RouteHandle",
    "RouteMatch",
    "RouteTable",
    "Slot",
    "SlotKind",
    "auto_name",
    "binds",
    "capture",
    "compile_path",
    "resolve_handler",
]
