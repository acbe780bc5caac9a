"""Handler references, resolved once at registration.

A route handler is one of three variants:

- ``BoundFunction``: any callable (function, lambda, bound method).
- ``ClassMethodRef``: a ``(ControllerClass, "method")`` pair.
- ``NamedControllerRef``: a ``"HomeController@index"`` string, looked up
  in the controller namespace package.

``resolve_handler`` turns whatever was passed to ``router.get()`` into one
of these and fails fast with ``HandlerResolutionError`` when the class or
method does not exist, so a typo surfaces at startup instead of on the
first request. Controller classes are instantiated with no arguments on
every dispatch.
"""

import importlib
import importlib.util
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from migus.errors import HandlerResolutionError
from migus.routing.binding import Binding, declared_binding

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class BoundFunction:
    func: Callable[..., Any]
    binding: Binding | None = None

    def target(self) -> Callable[..., Any]:
        return self.func

    def describe(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True, slots=True)
class ClassMethodRef:
    cls: type
    method: str
    binding: Binding | None = None

    def target(self) -> Callable[..., Any]:
        return getattr(self.cls(), self.method)

    def describe(self) -> str:
        return f"{self.cls.__qualname__}.{self.method}"


@dataclass(frozen=True, slots=True)
class NamedControllerRef:
    reference: str
    cls: type
    method: str
    binding: Binding | None = None

    def target(self) -> Callable[..., Any]:
        return getattr(self.cls(), self.method)

    def describe(self) -> str:
        return self.reference


type Handler = BoundFunction | ClassMethodRef | NamedControllerRef
type HandlerSpec = Handler | Callable[..., Any] | tuple[type, str] | str


def resolve_handler(
    spec: HandlerSpec,
    *,
    namespace: str = "app.controllers",
    bind: Binding | None = None,
) -> Handler:
    """Resolve a handler spec into a ``Handler`` variant.

    An explicit *bind* wins over a binding declared with ``@binds``.

    Raises:
        HandlerResolutionError: Unknown class or method, or an
            unsupported spec shape.
    """
    if isinstance(spec, BoundFunction | ClassMethodRef | NamedControllerRef):
        return spec
    if isinstance(spec, str):
        cls, method = _resolve_named(spec, namespace)
        return NamedControllerRef(spec, cls, method, _pick_binding(bind, getattr(cls, method)))
    if isinstance(spec, tuple):
        if len(spec) != 2 or not isinstance(spec[0], type) or not isinstance(spec[1], str):
            msg = f"Handler tuple must be (ControllerClass, 'method'), got {spec!r}"
            raise HandlerResolutionError(msg)
        cls, method = spec
        _check_method(cls, method, f"{cls.__qualname__}.{method}")
        return ClassMethodRef(cls, method, _pick_binding(bind, getattr(cls, method)))
    if callable(spec):
        return BoundFunction(spec, _pick_binding(bind, spec))
    msg = f"Unsupported handler {spec!r}: expected a callable, (Class, 'method'), or 'Controller@method'"
    raise HandlerResolutionError(msg)


def _pick_binding(explicit: Binding | None, target: object) -> Binding | None:
    if explicit is not None:
        return tuple(explicit)
    return declared_binding(target)


def _resolve_named(reference: str, namespace: str) -> tuple[type, str]:
    controller, sep, method = reference.partition("@")
    if not sep or not controller or not method:
        msg = f"Handler string {reference!r} must look like 'Controller@method'"
        raise HandlerResolutionError(msg)
    if "." in controller:
        module_name, _, class_name = controller.rpartition(".")
        cls = _load_class(module_name, class_name, reference)
    else:
        cls = _load_from_namespace(namespace, controller, reference)
    _check_method(cls, method, reference)
    return cls, method


def controller_module(class_name: str) -> str:
    """``AdminUserController`` -> ``admin_user_controller``."""
    return _CAMEL_BOUNDARY.sub("_", class_name).lower()


def _load_from_namespace(namespace: str, class_name: str, reference: str) -> type:
    """Find *class_name* on the namespace package, or in its own submodule.

    The submodule may be named in snake case (``home_controller``) or
    after the class itself (``HomeController``).
    """
    try:
        package = importlib.import_module(namespace)
    except ModuleNotFoundError as exc:
        msg = f"Controller namespace {namespace!r} cannot be imported (resolving {reference!r})"
        raise HandlerResolutionError(msg) from exc
    cls = getattr(package, class_name, None)
    if cls is None and hasattr(package, "__path__"):
        for module_name in (f"{namespace}.{controller_module(class_name)}", f"{namespace}.{class_name}"):
            if importlib.util.find_spec(module_name) is not None:
                return _load_class(module_name, class_name, reference)
    if cls is None:
        msg = f"Controller not found: {class_name} in {namespace} (resolving {reference!r})"
        raise HandlerResolutionError(msg)
    if not isinstance(cls, type):
        msg = f"{namespace}.{class_name} is not a class (resolving {reference!r})"
        raise HandlerResolutionError(msg)
    return cls


def _load_class(module_name: str, class_name: str, reference: str) -> type:
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        msg = f"Controller not found: {class_name} (resolving {reference!r})"
        raise HandlerResolutionError(msg) from exc
    cls = getattr(module, class_name, None)
    if not isinstance(cls, type):
        msg = f"Controller not found: {module_name}.{class_name} (resolving {reference!r})"
        raise HandlerResolutionError(msg)
    return cls


def _check_method(cls: type, method: str, reference: str) -> None:
    if not callable(getattr(cls, method, None)):
        msg = f"Method not found: {cls.__qualname__}.{method} (resolving {reference!r})"
        raise HandlerResolutionError(msg)
