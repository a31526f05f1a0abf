"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the flag parser, the document
decoders, the resolver, and the composition root. The hierarchy lives in the
domain layer so outer layers depend on it and never the other way round.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration issues.
* :class:`InvalidFormat` – a document could not be decoded into a fragment.
* :class:`FlagError` – the command line could not be parsed.
* :class:`HelpRequested` – the command line asked for usage text.
* :class:`ValidationError` – a merged fragment failed resolution.
* :class:`NotFound` – a configuration path does not exist.

System Role
-----------
Every stage of the pipeline raises one of these types and never swallows
them; the agent bootstrap catches :class:`ConfigError` to report and abort
startup.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_agent_config``.

    Why
    ----
    Provide a single catch-all type for callers that only need to decide
    whether startup can continue.
    """


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into a fragment.

    Typical Sources
    ---------------
    The structured decoders (:mod:`json`, :mod:`tomllib`, :mod:`yaml`) and the
    mapping-to-fragment conversion when a value has the wrong type.
    """


class FlagError(InvalidFormat):
    """Raised when command-line arguments cannot be bound to flags.

    Covers unknown flags, malformed literals (bool, int, duration, map entry),
    missing flag arguments, and stray positional arguments.
    """


class HelpRequested(ConfigError):
    """Raised when ``-h``/``-help`` appears on the command line.

    The rendered usage text travels with the exception so the caller decides
    where to print it.
    """

    def __init__(self, usage: str) -> None:
        super().__init__("help requested")
        self.usage = usage


class ValidationError(ConfigError):
    """Signifies that a merged fragment failed resolution.

    Why
    ----
    Separate structurally valid but inconsistent input (ports without a bind
    address, unparsable duration text) from syntax errors.
    """


class NotFound(ConfigError):
    """Represents a configuration file or directory that does not exist."""
