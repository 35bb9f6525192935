"""Comparing and copying the primitive values that flow to and from a database.

A *valuer* turns itself into a primitive database value through ``value()``.
The value is None, bool, int, float, str, bytes or a datetime. A *scanner*
loads itself from such a value through ``scan(src)``. Nullable wrapper types
usually implement both.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_OCTAL = re.compile(r"[+-]?0[0-7_]+")


@runtime_checkable
class Valuer(Protocol):
    """Something that can produce a primitive database value."""

    def value(self) -> Any:
        ...


@runtime_checkable
class Scanner(Protocol):
    """Something that can load itself from a primitive database value."""

    def scan(self, src: Any) -> None:
        ...


def _as_valuer(obj: Any) -> Valuer | None:
    return obj if callable(getattr(obj, "value", None)) else None


def _as_scanner(obj: Any) -> Scanner | None:
    return obj if callable(getattr(obj, "scan", None)) else None


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_numeric(text: str, like: Any) -> int | float:
    """Parse ``text`` as a number of the same kind as ``like``."""
    try:
        if isinstance(like, float):
            return float(text)
        try:
            return int(text, 0)
        except ValueError:
            if _OCTAL.fullmatch(text):
                return int(text, 8)
            raise
    except ValueError as err:
        raise ValueError(
            f"tried to parse {text!r} as {type(like).__name__} but got error: {err}"
        ) from err


def _normalise(value: Any) -> Any:
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return value


def equal(a: Any, b: Any) -> bool:
    """Compare two key-like values, looking through valuers.

    A string compared with a number is parsed as that number. Raises
    TypeError when the primitive types still differ.
    """
    if (a is None) != (b is None):
        return False

    if isinstance(a, (bytes, bytearray)) and isinstance(b, (bytes, bytearray)):
        return bytes(a) == bytes(b)

    valuer = _as_valuer(a)
    if valuer is not None:
        a = valuer.value()
    valuer = _as_valuer(b)
    if valuer is not None:
        b = valuer.value()

    # A null wrapper may just have turned into None.
    if (a is None) != (b is None):
        return False

    if isinstance(a, str) and _is_numeric(b):
        a = _parse_numeric(a, b)
    if isinstance(b, str) and _is_numeric(a):
        b = _parse_numeric(b, a)

    a = _normalise(a)
    b = _normalise(b)

    if type(a) is not type(b):
        raise TypeError(
            f"primitive type of a ({type(a).__name__}) was not the same "
            f"primitive type as b ({type(b).__name__})"
        )

    if isinstance(a, (bool, int, float, str, bytes, datetime)):
        return a == b
    return False


def _zero_of(dst: Any) -> Any:
    if isinstance(dst, datetime):
        return ZERO_TIME
    if dst is None:
        return None
    try:
        return type(dst)()
    except TypeError:
        return None


def _coerce(dst: Any, value: Any) -> Any:
    """Convert a primitive value to the type that ``dst`` holds."""
    if value is None:
        return _zero_of(dst)
    if isinstance(dst, bool):
        return bool(value)
    if isinstance(dst, int):
        return int(value)
    if isinstance(dst, float):
        return float(value)
    if isinstance(dst, str):
        return value if isinstance(value, str) else str(value)
    if isinstance(dst, (bytes, bytearray)):
        return type(dst)(value)
    return value


def assign(dst: Any, src: Any) -> Any:
    """Copy ``src`` into ``dst`` and return what ``dst`` should now hold.

    A scanner destination is loaded in place and returned. A plain
    destination gets the valuer's primitive value converted to its own type,
    or its type's zero value for a null. Byte strings are copied. Raises
    TypeError when neither side is a scanner or a valuer.
    """
    if isinstance(dst, (bytes, bytearray)) and isinstance(src, (bytes, bytearray)):
        return type(dst)(src)

    scanner = _as_scanner(dst)
    valuer = _as_valuer(src)

    if scanner is not None:
        scanner.scan(valuer.value() if valuer is not None else _normalise(src))
        return dst

    if valuer is not None:
        return _coerce(dst, valuer.value())

    raise TypeError(
        "assign needs a scanner destination or a valuer source, "
        f"got {type(dst).__name__} and {type(src).__name__}"
    )


def must_time(valuer: Valuer) -> datetime:
    """Return the datetime a valuer holds, or the zero time when it is null.

    Raises TypeError when the value is not a datetime.
    """
    value = valuer.value()
    if value is None:
        return ZERO_TIME
    if not isinstance(value, datetime):
        raise TypeError(
            f"expected a datetime from {type(valuer).__name__} "
            f"but got {type(value).__name__}"
        )
    return value


def is_valuer_nil(valuer: Valuer) -> bool:
    """Report whether a valuer's value is null."""
    return valuer.value() is None


def is_nil(value: Any) -> bool:
    """Report whether a value is None or a valuer holding null."""
    if value is None:
        return True
    valuer = _as_valuer(value)
    if valuer is not None:
        return is_valuer_nil(valuer)
    return False


def set_scanner(scanner: Scanner, value: Any) -> None:
    """Load a primitive value into a scanner; its own errors propagate."""
    scanner.scan(value)