"""Literal parsers shared by the flag parser, the decoders and the resolver.

Purpose
-------
Keep the accepted spelling of booleans, integers, durations and
``key:value`` entries in one place so a value means the same thing whether it
arrives on the command line or in a document.

Contents
--------
* :func:`parse_bool` / :func:`try_parse_bool` – ``1 t T TRUE true True`` and
  their false counterparts.
* :func:`parse_int` – decimal or ``0x``/``0o``/``0b`` prefixed integers.
* :func:`parse_duration` / :func:`format_duration` – Go-style durations such
  as ``1h30m`` or ``250ms``.
* :func:`parse_map_entry` – ``key:value`` split on the first colon.

All parsers raise :class:`ValueError`; callers translate that into the error
type of their layer.
"""

from __future__ import annotations

import re
from datetime import timedelta
from fractions import Fraction
from typing import Final

_TRUE: Final[frozenset[str]] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_PREFIXED = re.compile(r"[+-]?0[xXoObB][0-9a-fA-F_]+")

_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([a-zµμ]*)")
# durations are signed 64-bit nanosecond counts
_MAX_NANOS: Final[int] = 2**63 - 1

_UNIT_NANOS: Final[dict[str, int]] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}


def try_parse_bool(text: str) -> bool | None:
    """Return the boolean spelled by *text* or ``None`` when it is no boolean.

    Examples
    --------
    >>> try_parse_bool("T"), try_parse_bool("0"), try_parse_bool("yes")
    (True, False, None)
    """

    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def parse_bool(text: str) -> bool:
    """Parse *text* as a boolean literal or raise :class:`ValueError`."""

    value = try_parse_bool(text)
    if value is None:
        raise ValueError(f"invalid boolean value {text!r}")
    return value


def parse_int(text: str) -> int:
    """Parse a signed decimal or base-prefixed integer.

    Examples
    --------
    >>> parse_int("8500"), parse_int("-1"), parse_int("0x10")
    (8500, -1, 16)
    """

    try:
        if _DECIMAL.fullmatch(text):
            return int(text, 10)
        if _PREFIXED.fullmatch(text):
            return int(text, 0)
    except ValueError:
        pass
    raise ValueError(f"invalid integer value {text!r}")


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string into a :class:`~datetime.timedelta`.

    A duration is an optionally signed sequence of decimal numbers, each with
    an optional fraction and a mandatory unit (``ns``, ``us``, ``ms``, ``s``,
    ``m``, ``h``). The bare string ``"0"`` is accepted. Precision below one
    microsecond is truncated; values beyond the signed 64-bit nanosecond
    range are rejected.

    Examples
    --------
    >>> parse_duration("5m")
    datetime.timedelta(seconds=300)
    >>> parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    True
    >>> parse_duration("1.5s")
    datetime.timedelta(seconds=1, microseconds=500000)
    >>> parse_duration("5")
    Traceback (most recent call last):
    ...
    ValueError: missing unit in duration '5'
    >>> parse_duration("99999999999h")
    Traceback (most recent call last):
    ...
    ValueError: invalid duration '99999999999h'
    """

    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"invalid duration {text!r}")

    total = Fraction(0)
    position = 0
    while position < len(rest):
        match = _COMPONENT.match(rest, position)
        whole, fraction, unit = match.groups()  # type: ignore[union-attr]
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        if unit not in _UNIT_NANOS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        amount = Fraction(int(whole or "0"))
        if fraction:
            amount += Fraction(int(fraction), 10 ** len(fraction))
        total += amount * _UNIT_NANOS[unit]
        if total > _MAX_NANOS:
            raise ValueError(f"invalid duration {text!r}")
        position = match.end()  # type: ignore[union-attr]

    micros = int(total) // 1_000
    return timedelta(microseconds=-micros if negative else micros)


def format_duration(value: timedelta) -> str:
    """Render *value* the way Go prints durations.

    Examples
    --------
    >>> format_duration(timedelta(minutes=5))
    '5m0s'
    >>> format_duration(timedelta(milliseconds=250))
    '250ms'
    >>> format_duration(timedelta(hours=1, seconds=1.5))
    '1h0m1.5s'
    >>> format_duration(timedelta(0))
    '0s'
    """

    micros = value // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros == 0:
        return "0s"
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_decimal(micros, 1_000)}ms"
    hours, remainder = divmod(micros, 3_600_000_000)
    minutes, remainder = divmod(remainder, 60_000_000)
    seconds = f"{_decimal(remainder, 1_000_000)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


def parse_map_entry(text: str) -> tuple[str, str]:
    """Split ``key:value`` on the first colon.

    Examples
    --------
    >>> parse_map_entry("rack:r1:a")
    ('rack', 'r1:a')
    """

    key, separator, value = text.partition(":")
    if not separator:
        raise ValueError(f"missing ':' in key:value pair {text!r}")
    return key, value


def _decimal(amount: int, unit: int) -> str:
    """Render ``amount / unit`` without trailing zeros."""

    whole, fraction = divmod(amount, unit)
    if not fraction:
        return str(whole)
    digits = str(fraction).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"
