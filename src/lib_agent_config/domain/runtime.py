"""Fully resolved runtime configuration.

Purpose
-------
Anchor the immutable :class:`RuntimeConfig` value object the agent consumes.
Unlike a :class:`~lib_agent_config.domain.fragment.ConfigFragment` every field
holds a concrete value, including the listener addresses derived from bind
addresses and ports.

Contents
--------
* :class:`RuntimeConfig` – frozen dataclass with JSON export helpers.
* :func:`_plain` – internal helper turning tuples, mappings and durations into
  JSON-friendly data.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from .literals import format_duration


@dataclass(frozen=True)
class RuntimeConfig:
    """Immutable runtime configuration produced once by the resolver.

    Why
    ----
    The agent must never deal with optionality: absent settings have already
    been replaced by zero values or defaults and derived fields are computed.

    Examples
    --------
    >>> cfg = RuntimeConfig(datacenter="dc1", node_meta={"rack": "r1"})
    >>> cfg.node_meta["rack"]
    'r1'
    >>> cfg.as_dict()["check_update_interval"]
    '0s'
    """

    # simple values
    advertise_addr_lan: str = ""
    advertise_addr_wan: str = ""
    bootstrap: bool = False
    bootstrap_expect: int = 0
    check_update_interval: timedelta = timedelta(0)
    client_addr: str = ""
    data_dir: str = ""
    datacenter: str = ""
    dev_mode: bool = False
    disable_host_node_id: bool = False
    disable_keyring_file: bool = False
    dns_domain: str = ""
    enable_script_checks: bool = False
    enable_syslog: bool = False
    enable_ui: bool = False
    encrypt_key: str = ""
    log_level: str = ""
    node_id: str = ""
    node_name: str = ""
    non_voting_server: bool = False
    pid_file: str = ""
    rpc_protocol: int = 0
    raft_protocol: int = 0
    rejoin_after_leave: bool = False
    retry_join_interval_lan: timedelta = timedelta(0)
    retry_join_interval_wan: timedelta = timedelta(0)
    retry_join_max_attempts_lan: int = 0
    retry_join_max_attempts_wan: int = 0
    serf_bind_addr_lan: str = ""
    serf_bind_addr_wan: str = ""
    server_mode: bool = False
    ui_dir: str = ""

    # address values
    bind_addrs: tuple[str, ...] = ()
    dns_recursors: tuple[str, ...] = ()
    join_addrs_lan: tuple[str, ...] = ()
    join_addrs_wan: tuple[str, ...] = ()
    retry_join_lan: tuple[str, ...] = ()
    retry_join_wan: tuple[str, ...] = ()

    # server endpoint values
    dns_port: int = 0
    dns_addrs_tcp: tuple[str, ...] = ()
    dns_addrs_udp: tuple[str, ...] = ()
    http_port: int = 0
    http_addrs: tuple[str, ...] = ()
    https_port: int = 0
    https_addrs: tuple[str, ...] = ()
    serf_port_lan: int = 0
    serf_addrs_lan: tuple[str, ...] = ()
    serf_port_wan: int = 0
    serf_addrs_wan: tuple[str, ...] = ()
    server_port: int = 0
    server_addrs: tuple[str, ...] = ()

    # other values
    node_meta: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Freeze sequence fields and copy the metadata map into a read-only view."""

        for spec in fields(self):
            value = getattr(self, spec.name)
            if isinstance(value, list):
                object.__setattr__(self, spec.name, tuple(value))
        object.__setattr__(self, "node_meta", MappingProxyType(dict(self.node_meta)))

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly ``dict`` copy of the configuration.

        Durations are rendered in Go notation (``"5m0s"``), tuples become
        lists and the metadata mapping becomes a plain ``dict``.
        """

        return {spec.name: _plain(getattr(self, spec.name)) for spec in fields(self)}

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the configuration to JSON using :meth:`as_dict`.

        Examples
        --------
        >>> RuntimeConfig(bind_addrs=("0.0.0.0",)).to_json().count('"bind_addrs":["0.0.0.0"]')
        1
        """

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False)


def _plain(value: Any) -> Any:
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value
