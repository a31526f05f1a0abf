"""Conversion of decoded documents into configuration fragments.

Purpose
-------
Bridge the gap between the plain mappings produced by ``json``/``tomllib``/
``yaml`` and the typed :class:`ConfigFragment`. Keys are matched against the
``key`` metadata of each fragment field; values are type-checked against the
field's :class:`FieldKind`.

Contents
--------
* :func:`fragment_from_mapping` – public converter.
* :func:`_convert_group` / :func:`_convert_value` – recursive helpers.

Rules
-----
* strings, booleans and integers must already have that type (``True`` is not
  an integer);
* durations are Go duration strings (``"30s"``);
* lists hold strings only; maps map strings to strings;
* groups are nested mappings;
* unknown keys are ignored and reported through a ``config_key_unknown``
  warning.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ...domain.errors import InvalidFormat
from ...domain.fragment import ConfigFragment, FieldKind, document_key, field_kind, group_fields
from ...domain.literals import parse_duration
from ...domain.values import Setting
from ...observability import log_warning


def fragment_from_mapping(data: Mapping[str, Any], *, path: str | None = None) -> ConfigFragment:
    """Convert a decoded document into a :class:`ConfigFragment`.

    Parameters
    ----------
    data:
        Mapping produced by a structured decoder.
    path:
        Originating file path, used in error messages and log events.

    Raises
    ------
    InvalidFormat
        When a value does not match the type of its field.

    Examples
    --------
    >>> fragment = fragment_from_mapping({"bind_addr": "0.0.0.0", "ports": {"dns": 123}})
    >>> fragment.bind_addr.value, fragment.ports.dns.value
    ('0.0.0.0', 123)
    >>> fragment_from_mapping({"bootstrap": "yes"})
    Traceback (most recent call last):
    ...
    lib_agent_config.domain.errors.InvalidFormat: bootstrap: expected bool, got str
    """

    return _convert_group(ConfigFragment, data, [], path)


def _convert_group(cls: Any, data: Mapping[str, Any], segments: list[str], path: str | None) -> Any:
    specs = {document_key(spec): spec for spec in group_fields(cls)}
    values: dict[str, Any] = {}
    for key, raw in data.items():
        dotted = ".".join([*segments, str(key)])
        spec = specs.get(key)
        if spec is None:
            log_warning("config_key_unknown", layer="file", path=path, key=dotted)
            continue
        kind = field_kind(spec)
        if kind is FieldKind.GROUP:
            if not isinstance(raw, Mapping):
                raise _mismatch(dotted, "table", raw, path)
            values[spec.name] = _convert_group(spec.default_factory, raw, [*segments, key], path)
        else:
            values[spec.name] = _convert_value(kind, raw, dotted, path)
    return cls(**values)


def _convert_value(kind: FieldKind, raw: Any, dotted: str, path: str | None) -> Any:
    if kind is FieldKind.STRING:
        if not isinstance(raw, str):
            raise _mismatch(dotted, "string", raw, path)
        return Setting.of(raw)
    if kind is FieldKind.BOOL:
        if not isinstance(raw, bool):
            raise _mismatch(dotted, "bool", raw, path)
        return Setting.of(raw)
    if kind is FieldKind.INT:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise _mismatch(dotted, "int", raw, path)
        return Setting.of(raw)
    if kind is FieldKind.DURATION:
        if not isinstance(raw, str):
            raise _mismatch(dotted, "duration string", raw, path)
        try:
            return Setting.of(parse_duration(raw))
        except ValueError as exc:
            raise InvalidFormat(_located(f"{dotted}: {exc}", path)) from exc
    if kind is FieldKind.LIST:
        if not isinstance(raw, (list, tuple)) or not all(isinstance(item, str) for item in raw):
            raise _mismatch(dotted, "list of strings", raw, path)
        return tuple(raw)
    if not isinstance(raw, Mapping) or not all(isinstance(v, str) for v in raw.values()):
        raise _mismatch(dotted, "table of strings", raw, path)
    return {str(key): value for key, value in raw.items()}


def _mismatch(dotted: str, expected: str, raw: Any, path: str | None) -> InvalidFormat:
    return InvalidFormat(_located(f"{dotted}: expected {expected}, got {type(raw).__name__}", path))


def _located(message: str, path: str | None) -> str:
    return f"{path}: {message}" if path else message
