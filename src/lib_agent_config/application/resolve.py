"""Resolution of a merged fragment into the runtime configuration.

Purpose
-------
Turn the single, fully merged :class:`ConfigFragment` into a
:class:`RuntimeConfig`: unwrap every setting with a zero-value fallback,
derive listener addresses, translate deprecated settings, and validate.

Contents
    - ``new_config``: public entry point.
    - ``join_host_port``: renders ``host:port`` with wildcard and IPv6 handling.
    - ``_listeners`` / ``_bind_addrs`` / ``_discovery_addrs``: derivation steps.

Failure Semantics
-----------------
The first violation raises :class:`ValidationError`; nothing partially
resolved escapes.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Final, Iterable

from ..domain.errors import ValidationError
from ..domain.fragment import ConfigFragment, document_key, group_fields, is_touched
from ..domain.literals import parse_duration
from ..domain.runtime import RuntimeConfig
from ..domain.values import Setting
from ..observability import log_debug, log_warning

WILDCARD_ADDR: Final[str] = "0.0.0.0"
_WILDCARD_HOSTS: Final[frozenset[str]] = frozenset({"0.0.0.0", "::"})

_NEEDS_QUOTING: Final[re.Pattern[str]] = re.compile(r'[\s"\\]')

# deprecated retry-join group attribute -> discovery provider name
_DISCOVERY_PROVIDERS: Final[tuple[tuple[str, str], ...]] = (
    ("retry_join_ec2", "aws"),
    ("retry_join_azure", "azure"),
    ("retry_join_gce", "gce"),
)


def new_config(fragment: ConfigFragment) -> RuntimeConfig:
    """Create the runtime configuration from a merged *fragment*.

    Why
    ----
    The agent needs every value concrete and every derived address computed
    before it starts listening; any inconsistency must stop startup here.

    What
    ----
    Unwraps settings (absent becomes the zero value), parses the update check
    interval, rejects ports without a bind address, and derives the listener
    addresses of every configured port.

    Raises
    ------
    ValidationError
        When duration text does not parse or ports are configured without a
        bind address.

    Examples
    --------
    >>> from lib_agent_config.domain.fragment import Ports
    >>> cfg = new_config(ConfigFragment(bind_addr=Setting.of("0.0.0.0"), ports=Ports(dns=Setting.of(123))))
    >>> cfg.dns_addrs_tcp, cfg.dns_addrs_udp
    ((':123',), (':123',))
    >>> new_config(ConfigFragment(ports=Ports(dns=Setting.of(123))))
    Traceback (most recent call last):
    ...
    lib_agent_config.domain.errors.ValidationError: no bind address specified
    """

    check_update_interval = _duration_text(fragment.check_update_interval, "check_update_interval")

    # fragments merged over the default layer always carry a bind address
    if not fragment.bind_addr.present and is_touched(fragment.ports):
        raise ValidationError("no bind address specified")

    ports = fragment.ports
    if ports.rpc.present:
        log_warning("deprecated_setting", layer="resolve", path=None, key="ports.rpc", replacement=None)

    bind_addrs = _bind_addrs(fragment.bind_addr)
    serf_lan_addrs = _serf_addrs(fragment.serf_bind_addr_lan, bind_addrs)
    serf_wan_addrs = _serf_addrs(fragment.serf_bind_addr_wan, bind_addrs)
    dns_addrs = _listeners(bind_addrs, ports.dns)

    config = RuntimeConfig(
        advertise_addr_lan=fragment.advertise_addr_lan.get(""),
        advertise_addr_wan=fragment.advertise_addr_wan.get(""),
        bootstrap=fragment.bootstrap.get(False),
        bootstrap_expect=fragment.bootstrap_expect.get(0),
        check_update_interval=check_update_interval,
        client_addr=fragment.client_addr.get(""),
        data_dir=fragment.data_dir.get(""),
        datacenter=fragment.datacenter.get(""),
        dev_mode=fragment.dev_mode.get(False),
        disable_host_node_id=fragment.disable_host_node_id.get(False),
        disable_keyring_file=fragment.disable_keyring_file.get(False),
        dns_domain=fragment.dns_domain.get(""),
        enable_script_checks=fragment.enable_script_checks.get(False),
        enable_syslog=fragment.enable_syslog.get(False),
        enable_ui=fragment.enable_ui.get(False),
        encrypt_key=fragment.encrypt_key.get(""),
        log_level=fragment.log_level.get(""),
        node_id=fragment.node_id.get(""),
        node_name=fragment.node_name.get(""),
        non_voting_server=fragment.non_voting_server.get(False),
        pid_file=fragment.pid_file.get(""),
        rpc_protocol=fragment.rpc_protocol.get(0),
        raft_protocol=fragment.raft_protocol.get(0),
        rejoin_after_leave=fragment.rejoin_after_leave.get(False),
        retry_join_interval_lan=fragment.retry_join_interval_lan.get(timedelta(0)),
        retry_join_interval_wan=fragment.retry_join_interval_wan.get(timedelta(0)),
        retry_join_max_attempts_lan=fragment.retry_join_max_attempts_lan.get(0),
        retry_join_max_attempts_wan=fragment.retry_join_max_attempts_wan.get(0),
        serf_bind_addr_lan=fragment.serf_bind_addr_lan.get(""),
        serf_bind_addr_wan=fragment.serf_bind_addr_wan.get(""),
        server_mode=fragment.server_mode.get(False),
        ui_dir=fragment.ui_dir.get(""),
        bind_addrs=bind_addrs,
        dns_recursors=fragment.dns_recursors,
        join_addrs_lan=fragment.join_addrs_lan,
        join_addrs_wan=fragment.join_addrs_wan,
        retry_join_lan=fragment.retry_join_lan + _discovery_addrs(fragment),
        retry_join_wan=fragment.retry_join_wan,
        dns_port=ports.dns.get(0),
        dns_addrs_tcp=dns_addrs,
        dns_addrs_udp=dns_addrs,
        http_port=ports.http.get(0),
        http_addrs=_listeners(bind_addrs, ports.http),
        https_port=ports.https.get(0),
        https_addrs=_listeners(bind_addrs, ports.https),
        serf_port_lan=ports.serf_lan.get(0),
        serf_addrs_lan=_listeners(serf_lan_addrs, ports.serf_lan),
        serf_port_wan=ports.serf_wan.get(0),
        serf_addrs_wan=_listeners(serf_wan_addrs, ports.serf_wan),
        server_port=ports.server.get(0),
        server_addrs=_listeners(bind_addrs, ports.server),
        node_meta=fragment.node_meta,
    )
    log_debug("configuration_resolved", layer="resolve", path=None, bind_addrs=len(bind_addrs))
    return config


def join_host_port(host: str, port: int) -> str:
    """Render *host* and *port* as a listener address.

    A wildcard host renders as an empty host component so the listener binds
    all interfaces; IPv6 literals are bracketed.

    Examples
    --------
    >>> join_host_port("0.0.0.0", 8600)
    ':8600'
    >>> join_host_port("10.0.0.1", 53)
    '10.0.0.1:53'
    >>> join_host_port("fe80::1", 53)
    '[fe80::1]:53'
    """

    if host in _WILDCARD_HOSTS:
        host = ""
    if ":" in host:
        host = f"[{host}]"
    return f"{host}:{port}"


def _duration_text(setting: Setting[str], name: str) -> timedelta:
    if not setting.present:
        return timedelta(0)
    try:
        return parse_duration(setting.value or "")
    except ValueError as exc:
        raise ValidationError(f"{name}: {exc}") from exc


def _bind_addrs(setting: Setting[str]) -> tuple[str, ...]:
    """Absent stays empty; present but empty means the wildcard address."""

    if not setting.present:
        return ()
    return (setting.value or WILDCARD_ADDR,)


def _serf_addrs(setting: Setting[str], bind_addrs: tuple[str, ...]) -> tuple[str, ...]:
    if setting.present:
        return (setting.value or WILDCARD_ADDR,)
    return bind_addrs


def _listeners(hosts: Iterable[str], port: Setting[int]) -> tuple[str, ...]:
    """Cross product of *hosts* with *port*; an absent port listens nowhere."""

    if not port.present or port.value is None:
        return ()
    return tuple(join_host_port(host, port.value) for host in hosts)


def _discovery_addrs(fragment: ConfigFragment) -> tuple[str, ...]:
    """Translate deprecated cloud auto-join groups into discovery strings."""

    addrs: list[str] = []
    for attribute, provider in _DISCOVERY_PROVIDERS:
        group = getattr(fragment, attribute)
        parts = [
            f"{document_key(spec)}={_discovery_value(getattr(group, spec.name).value)}"
            for spec in group_fields(group)
            if getattr(group, spec.name).present
        ]
        if not parts:
            continue
        addrs.append(" ".join([f"provider={provider}", *parts]))
        log_warning("deprecated_setting", layer="resolve", path=None, key=attribute, replacement="retry_join")
    return tuple(addrs)


def _discovery_value(value: str) -> str:
    """Double-quote *value* when it holds whitespace, quotes or backslashes.

    Examples
    --------
    >>> _discovery_value("us-east-1")
    'us-east-1'
    >>> print(_discovery_value('web tier "a"'))
    "web tier \\"a\\""
    """

    if not _NEEDS_QUOTING.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
