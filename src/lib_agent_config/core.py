"""Composition root for ``lib_agent_config``.

Purpose
-------
Provide the entry points the agent bootstrap calls: parse the command line,
expand and decode configuration documents, merge every layer in precedence
order, and resolve the runtime configuration.

Contents
--------
* :class:`LayerLoadError` – error raised when a document layer fails.
* :func:`load_fragments` – ordered fragments ``[defaults, *documents, flags]``.
* :func:`load_config` – the full pipeline returning a :class:`RuntimeConfig`.

System Role
-----------
Connects the flag adapter, the path resolver and the document loaders with the
merge engine and the resolver while emitting structured observability
signals. It is the canonical place to change layer order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .adapters.file_loaders.structured import load_file, parse_file
from .adapters.flags.agent import parse_flags, usage
from .adapters.flags.registry import Flags
from .adapters.path_resolvers.default import DefaultPathResolver
from .application.merge import merge
from .application.resolve import new_config
from .domain.errors import ConfigError, FlagError, HelpRequested, InvalidFormat, NotFound, ValidationError
from .domain.fragment import ConfigFragment, default_fragment
from .domain.runtime import RuntimeConfig
from .domain.values import ABSENT, Setting
from .observability import bind_trace_id, log_debug, log_info, make_event


class LayerLoadError(ConfigError):
    """Raised when a configuration document cannot be materialised.

    Wraps :class:`InvalidFormat` and :class:`NotFound` with the offending path
    so callers can catch a single exception family.
    """


def load_fragments(
    args: Sequence[str],
    *,
    defaults: ConfigFragment | None = None,
    cwd: str | None = None,
) -> list[ConfigFragment]:
    """Return the fragments of every layer ordered lowest precedence first.

    Parameters
    ----------
    args:
        Agent command-line arguments (without the program name).
    defaults:
        Default layer; :func:`default_fragment` when omitted.
    cwd:
        Directory relative ``-config-file``/``-config-dir`` paths resolve
        against.

    Raises
    ------
    FlagError / HelpRequested
        From the flag parser.
    LayerLoadError
        When a configuration path is missing or a document is invalid.
    """

    bind_trace_id(None)
    flags = parse_flags(args)
    fragments = [defaults if defaults is not None else default_fragment()]
    log_debug("layer_loaded", **make_event("defaults", None))
    fragments.extend(_load_documents(flags, cwd))
    fragments.append(flags.fragment)
    log_debug("layer_loaded", **make_event("flags", None, {"args": len(args)}))
    return fragments


def load_config(
    args: Sequence[str],
    *,
    defaults: ConfigFragment | None = None,
    cwd: str | None = None,
) -> RuntimeConfig:
    """Resolve the runtime configuration for the agent command line *args*.

    Examples
    --------
    >>> cfg = load_config(["-datacenter", "east", "-dns-port", "53"])
    >>> cfg.datacenter, cfg.dns_addrs_udp
    ('east', (':53',))
    """

    fragments = load_fragments(args, defaults=defaults, cwd=cwd)
    config = new_config(merge(fragments))
    log_info("configuration_resolved", layer="final", path=None, total_layers=len(fragments))
    return config


def _load_documents(flags: Flags, cwd: str | None) -> list[ConfigFragment]:
    """Decode the documents behind ``flags.config_files`` in argument order."""

    if not flags.config_files:
        return []
    resolver = DefaultPathResolver(cwd=Path(cwd) if cwd else None)
    try:
        paths = resolver.expand(flags.config_files)
    except NotFound as exc:
        log_debug("layer_error", layer="file", path=None, error=str(exc))
        raise LayerLoadError(str(exc)) from exc

    fragments: list[ConfigFragment] = []
    for path in paths:
        try:
            fragments.append(load_file(path))
        except (InvalidFormat, NotFound) as exc:
            log_debug("layer_error", layer="file", path=path, error=str(exc))
            raise LayerLoadError(f"Failed to load configuration file {path}: {exc}") from exc
        log_debug("layer_loaded", **make_event("file", path))
    return fragments


__all__ = [
    "ABSENT",
    "ConfigError",
    "ConfigFragment",
    "FlagError",
    "Flags",
    "HelpRequested",
    "InvalidFormat",
    "LayerLoadError",
    "NotFound",
    "RuntimeConfig",
    "Setting",
    "ValidationError",
    "default_fragment",
    "load_config",
    "load_fragments",
    "merge",
    "new_config",
    "parse_file",
    "parse_flags",
    "usage",
]
