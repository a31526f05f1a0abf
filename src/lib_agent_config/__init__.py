"""Public package surface of ``lib_agent_config``.

Re-exports the pipeline entry points (:func:`parse_flags`, :func:`parse_file`,
:func:`merge`, :func:`new_config`, :func:`load_config`), the value types they
exchange, the error taxonomy, and the logging hooks.
"""

from __future__ import annotations

from .core import (
    ABSENT,
    ConfigError,
    ConfigFragment,
    FlagError,
    Flags,
    HelpRequested,
    InvalidFormat,
    LayerLoadError,
    NotFound,
    RuntimeConfig,
    Setting,
    ValidationError,
    default_fragment,
    load_config,
    load_fragments,
    merge,
    new_config,
    parse_file,
    parse_flags,
    usage,
)
from .domain.fragment import Ports
from .observability import bind_trace_id, get_logger

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
    "Ports",
    "RuntimeConfig",
    "Setting",
    "ValidationError",
    "bind_trace_id",
    "default_fragment",
    "get_logger",
    "load_config",
    "load_fragments",
    "merge",
    "new_config",
    "parse_file",
    "parse_flags",
    "usage",
]
