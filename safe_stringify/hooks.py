"""Custom "to JSON form" hooks.

A value can replace itself before sanitizing in two ways: its type defines a
callable ``__json__`` method, or an adapter is registered for its type with
:func:`register_json_form`. Adapters for common standard-library types are
registered here.
"""

from __future__ import annotations

import datetime as dt
import functools
import uuid
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Protocol, runtime_checkable

NO_JSON_FORM: Any = object()


@runtime_checkable
class SupportsJSON(Protocol):
    """Objects that know their own JSON form."""

    def __json__(self) -> Any: ...


@functools.singledispatch
def json_form(value: Any) -> Any:
    """Return the replacement value for ``value``, or ``NO_JSON_FORM``.

    Looks the hook up on the type, never on the instance, so instance-level
    ``__getattr__`` tricks are not triggered just by probing.
    """
    method = getattr(type(value), "__json__", None)
    if callable(method):
        return method(value)
    return NO_JSON_FORM


register_json_form = json_form.register


@json_form.register(dt.datetime)
@json_form.register(dt.date)
@json_form.register(dt.time)
def _temporal_form(value: dt.date | dt.time) -> str:
    return value.isoformat()


@json_form.register
def _timedelta_form(value: dt.timedelta) -> float:
    return value.total_seconds()


@json_form.register(Decimal)
@json_form.register(uuid.UUID)
@json_form.register(PurePath)
def _string_form(value: Any) -> str:
    return str(value)


@json_form.register
def _enum_form(value: Enum) -> Any:
    return value.value


@json_form.register(bytes)
@json_form.register(bytearray)
@json_form.register(memoryview)
def _bytes_form(value: bytes | bytearray | memoryview) -> str:
    return bytes(value).decode("utf-8", errors="replace")


@json_form.register
def _exception_form(value: BaseException) -> dict[str, str]:
    """Render exceptions by their class name and message only."""
    return {"name": type(value).__name__, "message": str(value)}
