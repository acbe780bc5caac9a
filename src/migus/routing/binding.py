"""Declared handler binding signatures.

A handler states what it receives as an ordered tuple of slots instead
of having its parameters inspected::

    from migus.routing.binding import RESPONSE, binds, capture

    @binds(RESPONSE, capture(convert=int), capture(default="summary"))
    def show(response, user_id, view):
        ...

Without a declaration the handler receives ``(request, response, *captures)``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from migus.errors import BindingError, NotFound

if TYPE_CHECKING:
    from migus.dispatch import DispatchContext


class SlotKind(Enum):
    REQUEST = "request"
    RESPONSE = "response"
    CONTEXT = "context"
    CAPTURE = "capture"


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class Slot:
    """One positional argument of a handler."""

    kind: SlotKind
    default: Any = UNSET
    convert: Callable[[str], Any] | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET


type Binding = tuple[Slot, ...]

REQUEST = Slot(SlotKind.REQUEST)
RESPONSE = Slot(SlotKind.RESPONSE)
CONTEXT = Slot(SlotKind.CONTEXT)

BINDING_ATTR = "__migus_binding__"


def capture(*, convert: Callable[[str], Any] | None = None, default: Any = UNSET) -> Slot:
    """A slot filled by the next unused path capture.

    *convert* is applied to the captured text; a ``ValueError`` from it
    turns the request into a 404. *default* is used once the captures
    run out.
    """
    return Slot(SlotKind.CAPTURE, default=default, convert=convert)


def binds[F: Callable[..., Any]](*slots: Slot) -> Callable[[F], F]:
    """Attach a binding signature to a handler function or method."""

    def decorator(func: F) -> F:
        setattr(func, BINDING_ATTR, tuple(slots))
        return func

    return decorator


def declared_binding(obj: object) -> Binding | None:
    return getattr(obj, BINDING_ATTR, None)


def bind_arguments(
    binding: Binding | None,
    ctx: DispatchContext,
    describe: str = "handler",
) -> list[Any]:
    """Produce the positional arguments for one handler call.

    Raises:
        BindingError: A capture slot has neither a capture nor a default.
        NotFound: A capture's converter rejected the captured text.
    """
    if binding is None:
        return [ctx.request, ctx.response, *ctx.captures]

    captures = iter(ctx.captures)
    args: list[Any] = []
    for index, slot in enumerate(binding):
        match slot.kind:
            case SlotKind.REQUEST:
                args.append(ctx.request)
            case SlotKind.RESPONSE:
                args.append(ctx.response)
            case SlotKind.CONTEXT:
                args.append(ctx)
            case SlotKind.CAPTURE:
                args.append(_capture_value(slot, next(captures, UNSET), index, describe))
    return args


def _capture_value(slot: Slot, raw: Any, index: int, describe: str) -> Any:
    if raw is UNSET:
        if slot.has_default:
            return slot.default
        msg = (
            f"Cannot bind argument {index} of {describe}: "
            "no path capture left and no default declared."
        )
        raise BindingError(msg)
    if slot.convert is None:
        return raw
    try:
        return slot.convert(raw)
    except ValueError:
        raise NotFound() from None
