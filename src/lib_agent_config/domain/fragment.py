"""Sparse configuration fragments contributed by one layer each.

Purpose
-------
Describe the shape every layer (defaults, documents, command-line flags)
produces: one immutable record whose scalars are :class:`Setting` values,
whose lists are tuples, and whose maps are read-only mappings. Field metadata
carries the document key and the :class:`FieldKind`, which the merge engine,
the decoders and the flag registry dispatch on.

Contents
--------
* :class:`FieldKind` – closed set of field kinds.
* :class:`Ports` – grouped port numbers.
* :class:`RetryJoinEC2` / :class:`RetryJoinAzure` / :class:`RetryJoinGCE` –
  deprecated cloud auto-join groups.
* :class:`ConfigFragment` – the sparse document shape.
* :func:`default_fragment` – the compiled-in default layer.
* :func:`group_fields` / :func:`field_kind` / :func:`document_key` – metadata
  accessors.

System Role
-----------
Pure values with no I/O. Created by the decoders, by the flag parser, or by
:func:`default_fragment`; consumed by
:func:`lib_agent_config.application.merge.merge`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import Field, dataclass, field, fields
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any

from .values import ABSENT, Setting


class FieldKind(str, Enum):
    """Kinds of configurable fields; each kind has its own merge rule."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    DURATION = "duration"
    LIST = "list"
    MAP = "map"
    GROUP = "group"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS


_SCALAR_KINDS = frozenset({FieldKind.STRING, FieldKind.BOOL, FieldKind.INT, FieldKind.DURATION})


def _scalar(key: str, kind: FieldKind) -> Any:
    return field(default=ABSENT, metadata={"key": key, "kind": kind})


def _sequence(key: str) -> Any:
    return field(default=(), metadata={"key": key, "kind": FieldKind.LIST})


def _mapping(key: str) -> Any:
    return field(default_factory=_empty_mapping, metadata={"key": key, "kind": FieldKind.MAP})


def _group(key: str, factory: type) -> Any:
    return field(default_factory=factory, metadata={"key": key, "kind": FieldKind.GROUP})


def _empty_mapping() -> Mapping[str, str]:
    return MappingProxyType({})


class _Frozen:
    """Mixin that freezes list and map fields after dataclass initialisation."""

    def __post_init__(self) -> None:
        for spec in fields(self):  # type: ignore[arg-type]
            kind = spec.metadata["kind"]
            value = getattr(self, spec.name)
            if kind is FieldKind.LIST and not isinstance(value, tuple):
                object.__setattr__(self, spec.name, tuple(value))
            elif kind is FieldKind.MAP:
                object.__setattr__(self, spec.name, MappingProxyType(dict(value or {})))


@dataclass(frozen=True)
class Ports(_Frozen):
    """Port numbers of the agent's listeners."""

    dns: Setting[int] = _scalar("dns", FieldKind.INT)
    http: Setting[int] = _scalar("http", FieldKind.INT)
    https: Setting[int] = _scalar("https", FieldKind.INT)
    serf_lan: Setting[int] = _scalar("serf_lan", FieldKind.INT)
    serf_wan: Setting[int] = _scalar("serf_wan", FieldKind.INT)
    server: Setting[int] = _scalar("server", FieldKind.INT)
    rpc: Setting[int] = _scalar("rpc", FieldKind.INT)  # deprecated, ignored


@dataclass(frozen=True)
class RetryJoinEC2(_Frozen):
    """Deprecated EC2 auto-join settings."""

    region: Setting[str] = _scalar("region", FieldKind.STRING)
    tag_key: Setting[str] = _scalar("tag_key", FieldKind.STRING)
    tag_value: Setting[str] = _scalar("tag_value", FieldKind.STRING)
    access_key_id: Setting[str] = _scalar("access_key_id", FieldKind.STRING)
    secret_access_key: Setting[str] = _scalar("secret_access_key", FieldKind.STRING)


@dataclass(frozen=True)
class RetryJoinAzure(_Frozen):
    """Deprecated Azure auto-join settings."""

    tag_name: Setting[str] = _scalar("tag_name", FieldKind.STRING)
    tag_value: Setting[str] = _scalar("tag_value", FieldKind.STRING)
    subscription_id: Setting[str] = _scalar("subscription_id", FieldKind.STRING)
    tenant_id: Setting[str] = _scalar("tenant_id", FieldKind.STRING)
    client_id: Setting[str] = _scalar("client_id", FieldKind.STRING)
    secret_access_key: Setting[str] = _scalar("secret_access_key", FieldKind.STRING)


@dataclass(frozen=True)
class RetryJoinGCE(_Frozen):
    """Deprecated Google Compute Engine auto-join settings."""

    project_name: Setting[str] = _scalar("project_name", FieldKind.STRING)
    zone_pattern: Setting[str] = _scalar("zone_pattern", FieldKind.STRING)
    tag_value: Setting[str] = _scalar("tag_value", FieldKind.STRING)
    credentials_file: Setting[str] = _scalar("credentials_file", FieldKind.STRING)


@dataclass(frozen=True)
class ConfigFragment(_Frozen):
    """Sparse configuration contributed by a single layer.

    Why
    ----
    Merging needs to know which fields a layer actually mentioned. Scalars are
    therefore :class:`Setting` values, lists are tuples (empty means "nothing
    contributed"), and maps are read-only mappings (empty means the same).

    Examples
    --------
    >>> fragment = ConfigFragment(bootstrap=Setting.of(False), join_addrs_lan=["a"])
    >>> fragment.bootstrap.present, fragment.datacenter.present
    (True, False)
    >>> fragment.join_addrs_lan
    ('a',)
    """

    advertise_addr_lan: Setting[str] = _scalar("advertise_addr", FieldKind.STRING)
    advertise_addr_wan: Setting[str] = _scalar("advertise_addr_wan", FieldKind.STRING)
    bind_addr: Setting[str] = _scalar("bind_addr", FieldKind.STRING)
    bootstrap: Setting[bool] = _scalar("bootstrap", FieldKind.BOOL)
    bootstrap_expect: Setting[int] = _scalar("bootstrap_expect", FieldKind.INT)
    check_update_interval: Setting[str] = _scalar("check_update_interval", FieldKind.STRING)
    client_addr: Setting[str] = _scalar("client_addr", FieldKind.STRING)
    data_dir: Setting[str] = _scalar("data_dir", FieldKind.STRING)
    datacenter: Setting[str] = _scalar("datacenter", FieldKind.STRING)
    dev_mode: Setting[bool] = _scalar("dev_mode", FieldKind.BOOL)
    disable_host_node_id: Setting[bool] = _scalar("disable_host_node_id", FieldKind.BOOL)
    disable_keyring_file: Setting[bool] = _scalar("disable_keyring_file", FieldKind.BOOL)
    dns_domain: Setting[str] = _scalar("domain", FieldKind.STRING)
    dns_recursors: tuple[str, ...] = _sequence("recursors")
    enable_script_checks: Setting[bool] = _scalar("enable_script_checks", FieldKind.BOOL)
    enable_syslog: Setting[bool] = _scalar("enable_syslog", FieldKind.BOOL)
    enable_ui: Setting[bool] = _scalar("ui", FieldKind.BOOL)
    encrypt_key: Setting[str] = _scalar("encrypt", FieldKind.STRING)
    join_addrs_lan: tuple[str, ...] = _sequence("start_join")
    join_addrs_wan: tuple[str, ...] = _sequence("start_join_wan")
    log_level: Setting[str] = _scalar("log_level", FieldKind.STRING)
    node_id: Setting[str] = _scalar("node_id", FieldKind.STRING)
    node_meta: Mapping[str, str] = _mapping("node_meta")
    node_name: Setting[str] = _scalar("node_name", FieldKind.STRING)
    non_voting_server: Setting[bool] = _scalar("non_voting_server", FieldKind.BOOL)
    pid_file: Setting[str] = _scalar("pid_file", FieldKind.STRING)
    ports: Ports = _group("ports", Ports)
    rpc_protocol: Setting[int] = _scalar("protocol", FieldKind.INT)
    raft_protocol: Setting[int] = _scalar("raft_protocol", FieldKind.INT)
    rejoin_after_leave: Setting[bool] = _scalar("rejoin_after_leave", FieldKind.BOOL)
    retry_join_interval_lan: Setting[timedelta] = _scalar("retry_interval", FieldKind.DURATION)
    retry_join_interval_wan: Setting[timedelta] = _scalar("retry_interval_wan", FieldKind.DURATION)
    retry_join_lan: tuple[str, ...] = _sequence("retry_join")
    retry_join_max_attempts_lan: Setting[int] = _scalar("retry_max", FieldKind.INT)
    retry_join_max_attempts_wan: Setting[int] = _scalar("retry_max_wan", FieldKind.INT)
    retry_join_wan: tuple[str, ...] = _sequence("retry_join_wan")
    serf_bind_addr_lan: Setting[str] = _scalar("serf_lan_bind", FieldKind.STRING)
    serf_bind_addr_wan: Setting[str] = _scalar("serf_wan_bind", FieldKind.STRING)
    server_mode: Setting[bool] = _scalar("server", FieldKind.BOOL)
    ui_dir: Setting[str] = _scalar("ui_dir", FieldKind.STRING)

    retry_join_ec2: RetryJoinEC2 = _group("retry_join_ec2", RetryJoinEC2)
    retry_join_azure: RetryJoinAzure = _group("retry_join_azure", RetryJoinAzure)
    retry_join_gce: RetryJoinGCE = _group("retry_join_gce", RetryJoinGCE)


def group_fields(group: object) -> tuple[Field[Any], ...]:
    """Return the dataclass fields of a fragment or sub-group."""

    return fields(group)  # type: ignore[arg-type]


def field_kind(spec: Field[Any]) -> FieldKind:
    return spec.metadata["kind"]


def document_key(spec: Field[Any]) -> str:
    return spec.metadata["key"]


def is_touched(group: object) -> bool:
    """Return ``True`` when any field of *group* was contributed by a layer.

    Examples
    --------
    >>> is_touched(Ports()), is_touched(Ports(rpc=Setting.of(0)))
    (False, True)
    """

    for spec in group_fields(group):
        value = getattr(group, spec.name)
        kind = field_kind(spec)
        if kind is FieldKind.GROUP:
            if is_touched(value):
                return True
        elif kind.is_scalar:
            if value.present:
                return True
        elif value:
            return True
    return False


def default_fragment() -> ConfigFragment:
    """Build the compiled-in default layer.

    The default layer always carries a bind address, so production merges
    never trip the "ports without bind address" check of the resolver.

    Examples
    --------
    >>> default_fragment().ports.dns
    Setting.of(8600)
    """

    return ConfigFragment(
        bind_addr=Setting.of("0.0.0.0"),
        bootstrap=Setting.of(False),
        check_update_interval=Setting.of("5m"),
        client_addr=Setting.of("127.0.0.1"),
        datacenter=Setting.of("dc1"),
        dns_domain=Setting.of("consul."),
        enable_ui=Setting.of(False),
        log_level=Setting.of("INFO"),
        ports=Ports(
            dns=Setting.of(8600),
            http=Setting.of(8500),
            serf_lan=Setting.of(8301),
            serf_wan=Setting.of(8302),
            server=Setting.of(8300),
        ),
        rpc_protocol=Setting.of(2),
        raft_protocol=Setting.of(3),
        retry_join_interval_lan=Setting.of(timedelta(seconds=30)),
        retry_join_interval_wan=Setting.of(timedelta(seconds=30)),
        retry_join_max_attempts_lan=Setting.of(0),
        retry_join_max_attempts_wan=Setting.of(0),
        server_mode=Setting.of(False),
    )
