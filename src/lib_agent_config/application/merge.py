"""Application-layer merge policy.

Purpose
-------
Fold an ordered sequence of sparse fragments into one fragment. The module
is free of I/O so it can be reused by any composition root.

Contents
    - ``merge``: public entry point driven by a simple loop.
    - ``_merge_group``: recursive stanza walking the fields of a fragment or
      sub-group.
    - ``_merge_field``: per-kind composition rule.

Precedence
----------
Fragments arrive lowest precedence first (defaults, documents, flags). Per
field kind:

* scalar – a present setting replaces the accumulator (last writer wins);
* list – a non-empty list is appended (lists only ever grow);
* map – a non-empty map replaces the accumulator wholesale;
* group – merged field by field with the rules above.

An empty list cannot reset what earlier layers contributed; that limitation
is intentional and shared with every layer format.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, TypeVar

from ..domain.fragment import ConfigFragment, FieldKind, field_kind, group_fields
from ..observability import log_debug

G = TypeVar("G")


def merge(fragments: Iterable[ConfigFragment]) -> ConfigFragment:
    """Merge *fragments* honouring precedence and per-kind rules.

    Parameters
    ----------
    fragments:
        Fragments ordered from lowest to highest precedence.

    Returns
    -------
    ConfigFragment
        A new fragment; none of the inputs is modified.

    Examples
    --------
    >>> from lib_agent_config.domain.values import Setting
    >>> merged = merge([
    ...     ConfigFragment(datacenter=Setting.of("a"), join_addrs_lan=("x",), node_meta={"a": "b"}),
    ...     ConfigFragment(datacenter=Setting.of("b"), join_addrs_lan=("y",), node_meta={"c": "d"}),
    ... ])
    >>> merged.datacenter.value, merged.join_addrs_lan, dict(merged.node_meta)
    ('b', ('x', 'y'), {'c': 'd'})
    """

    merged = ConfigFragment()
    count = 0
    for fragment in fragments:
        merged = _merge_group(merged, fragment)
        count += 1
    log_debug("configuration_merged", layer="merge", path=None, fragments=count)
    return merged


def _merge_group(current: G, incoming: G) -> G:
    """Merge the fields of *incoming* into a copy of *current*."""

    changes: dict[str, Any] = {}
    for spec in group_fields(incoming):
        ours = getattr(current, spec.name)
        combined = _merge_field(field_kind(spec), ours, getattr(incoming, spec.name))
        if combined is not ours:
            changes[spec.name] = combined
    if not changes:
        return current
    return replace(current, **changes)  # type: ignore[type-var]


def _merge_field(kind: FieldKind, ours: Any, theirs: Any) -> Any:
    if kind is FieldKind.GROUP:
        return _merge_group(ours, theirs)
    if kind is FieldKind.LIST:
        return ours + theirs if theirs else ours
    if kind is FieldKind.MAP:
        return theirs if theirs else ours
    return theirs if theirs.present else ours
