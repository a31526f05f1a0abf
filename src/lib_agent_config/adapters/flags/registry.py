"""Typed command-line flag bindings and the parse loop that drives them.

Purpose
-------
Bind each flag name to one location inside a :class:`ConfigFragment` (or to
the shared config-path list) together with an accumulation policy, and parse
argument vectors into a :class:`Flags` value.

Contents
--------
* :class:`FlagKind` – closed set of binding variants.
* :class:`FlagBinding` – one registered flag.
* :class:`Flags` – parse result: fragment, config paths, deprecated values.
* :class:`FlagRegistry` – registration, parsing, and usage rendering.

Syntax
------
``-name value``, ``-name=value`` and their ``--name`` spellings. A bare
``--`` ends flag parsing. Boolean flags accept a bare ``-name`` (true),
``-name=<bool>``, and ``-name <bool>`` where the following token is only
consumed when it is a boolean literal. Any argument left over after the flags
is an error.

Accumulation
------------
Scalars: the last occurrence wins. Lists and config paths: every occurrence
appends. Maps: every ``key:value`` occurrence inserts or overwrites one key
of a map local to this parse.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Final, Iterator, Sequence

from ...domain.errors import FlagError, HelpRequested
from ...domain.fragment import ConfigFragment, FieldKind, field_kind
from ...domain.literals import parse_bool, parse_duration, parse_int, parse_map_entry, try_parse_bool
from ...domain.values import Setting
from ...observability import log_debug, log_warning


class FlagKind(str, Enum):
    """Binding variants; the kind decides conversion and accumulation."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    DURATION = "duration"
    LIST = "list"
    MAP = "map"
    PATH = "path"


_CONVERTERS: Final[dict[FlagKind, Callable[[str], Any]]] = {
    FlagKind.STRING: str,
    FlagKind.BOOL: parse_bool,
    FlagKind.INT: parse_int,
    FlagKind.DURATION: parse_duration,
    FlagKind.LIST: str,
    FlagKind.MAP: parse_map_entry,
    FlagKind.PATH: str,
}

_FIELD_KINDS: Final[dict[FlagKind, FieldKind]] = {
    FlagKind.STRING: FieldKind.STRING,
    FlagKind.BOOL: FieldKind.BOOL,
    FlagKind.INT: FieldKind.INT,
    FlagKind.DURATION: FieldKind.DURATION,
    FlagKind.LIST: FieldKind.LIST,
    FlagKind.MAP: FieldKind.MAP,
}

_PLACEHOLDERS: Final[dict[FlagKind, str]] = {
    FlagKind.STRING: "string",
    FlagKind.BOOL: "",
    FlagKind.INT: "int",
    FlagKind.DURATION: "duration",
    FlagKind.LIST: "value",
    FlagKind.MAP: "key:value",
    FlagKind.PATH: "path",
}

_HELP_NAMES: Final[frozenset[str]] = frozenset({"h", "help"})


@dataclass(frozen=True)
class FlagBinding:
    """A registered flag.

    Attributes
    ----------
    name:
        Flag name without leading dashes.
    kind:
        Binding variant.
    target:
        Dotted attribute path inside :class:`ConfigFragment` (``"ports.dns"``),
        or ``None`` for path flags and deprecated no-op flags.
    help:
        One-line description rendered by :meth:`FlagRegistry.usage`.
    deprecated / replacement:
        Deprecated flags still parse but log a warning naming the replacement.
    """

    name: str
    kind: FlagKind
    target: str | None
    help: str
    deprecated: bool = False
    replacement: str | None = None

    def convert(self, raw: str) -> Any:
        return _CONVERTERS[self.kind](raw)


@dataclass(frozen=True)
class Flags:
    """Result of parsing one argument vector.

    Examples
    --------
    >>> Flags().config_files
    ()
    """

    fragment: ConfigFragment = field(default_factory=ConfigFragment)
    config_files: tuple[str, ...] = ()
    deprecated: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "config_files", tuple(self.config_files))
        object.__setattr__(self, "deprecated", MappingProxyType(dict(self.deprecated)))


class FlagRegistry:
    """Registry of flag bindings for one program.

    Why
    ----
    One uniform registration call (:meth:`add`) covers every value type; the
    :class:`FlagKind` tag selects the binding variant up front so parsing
    never has to inspect target types.

    Examples
    --------
    >>> registry = FlagRegistry("demo")
    >>> _ = registry.add(FlagKind.STRING, "bind", "bind_addr", "Bind address.")
    >>> _ = registry.add(FlagKind.LIST, "join", "join_addrs_lan", "Join address.")
    >>> flags = registry.parse(["-bind=10.0.0.1", "-join", "a", "--join", "b"])
    >>> flags.fragment.bind_addr.value, flags.fragment.join_addrs_lan
    ('10.0.0.1', ('a', 'b'))
    """

    def __init__(self, program: str) -> None:
        self.program = program
        self._bindings: dict[str, FlagBinding] = {}
        self._sealed = False

    def add(
        self,
        kind: FlagKind,
        name: str,
        target: str | None,
        help: str,
        *,
        deprecated: bool = False,
        replacement: str | None = None,
    ) -> FlagBinding:
        """Register flag *name* bound to *target* with accumulation *kind*.

        Raises
        ------
        RuntimeError
            When the registry has been sealed.
        ValueError
            When the name is taken or the target does not match *kind*.
        """

        if self._sealed:
            raise RuntimeError(f"flag registry {self.program!r} is sealed")
        if not name or name.startswith("-") or "=" in name:
            raise ValueError(f"invalid flag name {name!r}")
        if name in self._bindings:
            raise ValueError(f"flag redefined: -{name}")
        _check_target(kind, name, target, deprecated)
        binding = FlagBinding(name, kind, target, help, deprecated, replacement)
        self._bindings[name] = binding
        return binding

    def seal(self) -> FlagRegistry:
        """Reject further registrations; returns ``self`` for chaining."""

        self._sealed = True
        return self

    def get(self, name: str) -> FlagBinding | None:
        return self._bindings.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[FlagBinding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def parse(self, args: Sequence[str]) -> Flags:
        """Parse *args* into :class:`Flags`.

        Raises
        ------
        FlagError
            Unknown flag, bad syntax, missing or malformed value, or a
            leftover positional argument.
        HelpRequested
            ``-h``/``-help`` was given and is not a registered flag.
        """

        state = _ParseState()
        index = 0
        while index < len(args):
            arg = args[index]
            if len(arg) < 2 or arg[0] != "-":
                break
            index += 1
            if arg == "--":
                break
            name = arg[2:] if arg[1] == "-" else arg[1:]
            if not name or name[0] in "-=":
                raise FlagError(f"bad flag syntax: {arg}")

            name, has_value, raw = _split_assignment(name)
            binding = self._bindings.get(name)
            if binding is None:
                if name in _HELP_NAMES:
                    raise HelpRequested(self.usage())
                raise FlagError(f"flag provided but not defined: -{name}")

            if not has_value:
                if binding.kind is FlagKind.BOOL:
                    raw = "true"
                    if index < len(args) and try_parse_bool(args[index]) is not None:
                        raw = args[index]
                        index += 1
                elif index < len(args):
                    raw = args[index]
                    index += 1
                else:
                    raise FlagError(f"flag needs an argument: -{name}")

            try:
                value = binding.convert(raw)
            except ValueError as exc:
                raise FlagError(f"invalid value {raw!r} for flag -{name}: {exc}") from exc
            if binding.deprecated:
                log_warning("flag_deprecated", layer="flags", path=None, flag=name, replacement=binding.replacement)
            state.apply(binding, value)

        if index < len(args):
            raise FlagError(f"unexpected argument: {args[index]!r}")

        flags = state.build()
        log_debug("flags_parsed", layer="flags", path=None, args=len(args), config_files=len(flags.config_files))
        return flags

    def usage(self) -> str:
        """Render the flag surface sorted by name, deprecated flags last.

        Examples
        --------
        >>> registry = FlagRegistry("demo")
        >>> _ = registry.add(FlagKind.BOOL, "dev", "dev_mode", "Development mode.")
        >>> print(registry.usage())
        Usage of demo:
          -dev
                Development mode.
        """

        ordered = sorted(self._bindings.values(), key=lambda binding: (binding.deprecated, binding.name))
        lines = [f"Usage of {self.program}:"]
        for binding in ordered:
            placeholder = _PLACEHOLDERS[binding.kind]
            lines.append(f"  -{binding.name} {placeholder}".rstrip())
            text = binding.help
            if binding.deprecated:
                text = f"(deprecated) {text}"
                if binding.replacement:
                    text = f"{text} Use -{binding.replacement} instead."
            lines.append(f"        {text}")
        return "\n".join(lines)


class _ParseState:
    """Mutable accumulator local to one :meth:`FlagRegistry.parse` call."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.paths: list[str] = []
        self.deprecated: dict[str, object] = {}

    def apply(self, binding: FlagBinding, value: Any) -> None:
        if binding.kind is FlagKind.PATH:
            self.paths.append(value)
        elif binding.target is None:
            self.deprecated[binding.name] = value
        elif binding.kind is FlagKind.LIST:
            self.values.setdefault(binding.target, []).append(value)
        elif binding.kind is FlagKind.MAP:
            key, item = value
            self.values.setdefault(binding.target, {})[key] = item
        else:
            self.values[binding.target] = Setting.of(value)

    def build(self) -> Flags:
        return Flags(
            fragment=_build_group(ConfigFragment, self.values),
            config_files=tuple(self.paths),
            deprecated=self.deprecated,
        )


def _split_assignment(name: str) -> tuple[str, bool, str]:
    head, separator, tail = name.partition("=")
    return head, bool(separator), tail


def _build_group(cls: type, values: Mapping[str, Any]) -> Any:
    """Instantiate *cls* from dotted *values*, recursing into sub-groups."""

    direct: dict[str, Any] = {}
    nested: dict[str, dict[str, Any]] = {}
    for target, value in values.items():
        head, _, rest = target.partition(".")
        if rest:
            nested.setdefault(head, {})[rest] = value
        else:
            direct[head] = value
    specs = {spec.name: spec for spec in fields(cls)}
    for head, sub_values in nested.items():
        direct[head] = _build_group(specs[head].default_factory, sub_values)  # type: ignore[arg-type]
    return cls(**direct)


def _check_target(kind: FlagKind, name: str, target: str | None, deprecated: bool) -> None:
    """Ensure *target* names a fragment field whose kind matches *kind*."""

    if kind is FlagKind.PATH:
        if target is not None:
            raise ValueError(f"path flag -{name} cannot target a fragment field")
        return
    if target is None:
        if not deprecated:
            raise ValueError(f"flag -{name} needs a target")
        return

    cls: Any = ConfigFragment
    parts = target.split(".")
    for position, part in enumerate(parts):
        specs = {spec.name: spec for spec in fields(cls)}
        spec = specs.get(part)
        if spec is None:
            raise ValueError(f"flag -{name}: unknown target {target!r}")
        actual = field_kind(spec)
        if position < len(parts) - 1:
            if actual is not FieldKind.GROUP:
                raise ValueError(f"flag -{name}: {part!r} in {target!r} is not a group")
            cls = spec.default_factory
        elif actual is not _FIELD_KINDS[kind]:
            raise ValueError(f"flag -{name}: target {target!r} is {actual.value}, not {kind.value}")
