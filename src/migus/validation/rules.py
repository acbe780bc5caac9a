"""Built-in rules for ``Validator``.

Each rule has the signature::

    def rule(field: str, value, data: Mapping, param: str | None) -> dict[str, str] | None

It returns ``None`` when the value passes, or a dict of message
placeholder replacements (possibly empty) when it fails. Rules other
than ``required``, ``same`` and ``confirmed`` accept empty values; a
missing field is reported by ``required`` alone.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

type Rule = Callable[[str, Any, Mapping[str, Any], str | None], dict[str, str] | None]

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "El campo :field es obligatorio.",
    "email": "El campo :field debe ser un email válido.",
    "min": "El campo :field debe tener al menos :min caracteres.",
    "max": "El campo :field no puede tener más de :max caracteres.",
    "numeric": "El campo :field debe ser numérico.",
    "same": "El campo :field debe coincidir con :other.",
    "confirmed": "La confirmación de :field no coincide.",
}
FALLBACK_MESSAGE = "El campo :field no es válido."

_EMAIL = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def _empty(value: Any) -> bool:
    return value is None or value == ""


def required(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if _empty(value) or (isinstance(value, str) and not value.strip()):
        return {}
    return None


def email(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if _empty(value):
        return None
    text = str(value)
    if ".." in text or not _EMAIL.match(text):
        return {}
    return None


def min_length(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if _empty(value):
        return None
    n = _int_param(param)
    if len(str(value)) < n:
        return {":min": str(n)}
    return None


def max_length(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if _empty(value):
        return None
    n = _int_param(param)
    if len(str(value)) > n:
        return {":max": str(n)}
    return None


def numeric(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if _empty(value):
        return None
    if isinstance(value, bool):
        return {}
    if isinstance(value, int | float):
        return None
    if not _NUMERIC.match(str(value)):
        return {}
    return None


def same(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    other = param or ""
    if value != data.get(other):
        return {":other": other}
    return None


def confirmed(field: str, value: Any, data: Mapping[str, Any], param: str | None) -> dict[str, str] | None:
    if value != data.get(f"{field}_confirmation"):
        return {}
    return None


def _int_param(param: str | None) -> int:
    try:
        return int(param or 0)
    except ValueError:
        return 0


RULES: dict[str, Rule] = {
    "required": required,
    "email": email,
    "min": min_length,
    "max": max_length,
    "numeric": numeric,
    "same": same,
    "confirmed": confirmed,
}


def parse_rule(rule: str) -> tuple[str, str | None]:
    """``"min:3"`` -> ``("min", "3")``; ``"email"`` -> ``("email", None)``."""
    rule = rule.strip()
    name, sep, param = rule.partition(":")
    if not sep:
        return rule, None
    return name.strip(), param.strip()
