"""Row-to-dataclass mapping with type coercion.

SQLite hands back whatever storage class a column happened to get, so a
field annotated ``int`` may arrive as ``"42"``. ``map_row`` converts
the scalar types it knows (``int``, ``float``, ``bool``, ``str``) and
passes everything else through untouched. Columns with no matching
field are ignored, so ``SELECT *`` is fine.
"""

import dataclasses
import types
from collections.abc import Iterable, Mapping
from functools import cache
from typing import Any, get_args, get_origin

_COERCE: dict[type, Any] = {
    int: lambda v: int(v) if v != "" else 0,
    float: lambda v: float(v) if v != "" else 0.0,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


@cache
def _targets(cls: type) -> dict[str, type | None]:
    """``{field: scalar type or None}`` for *cls*, computed once per class."""
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass; rows can only be mapped to dataclasses"
        raise TypeError(msg)
    targets: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = f.type
        if get_origin(annotation) is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        targets[f.name] = annotation if annotation in _COERCE else None
    return targets


def _convert(value: Any, target: type | None) -> Any:
    if target is None or value is None or isinstance(value, target):
        return value
    return _COERCE[target](value)


def map_row[T](cls: type[T], row: Mapping[str, Any]) -> T:
    """Build a *cls* instance from one row.

    Raises:
        TypeError: *cls* is not a dataclass, or a required field is missing.
    """
    targets = _targets(cls)
    return cls(**{k: _convert(v, targets[k]) for k, v in row.items() if k in targets})


def map_rows[T](cls: type[T], rows: Iterable[Mapping[str, Any]]) -> list[T]:
    return [map_row(cls, row) for row in rows]
