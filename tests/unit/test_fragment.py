from __future__ import annotations

import dataclasses
from datetime import timedelta
from types import MappingProxyType

import pytest

from lib_agent_config.domain.fragment import (
    ConfigFragment,
    FieldKind,
    Ports,
    RetryJoinGCE,
    default_fragment,
    document_key,
    field_kind,
    group_fields,
    is_touched,
)
from lib_agent_config.domain.values import ABSENT, Setting


def test_empty_fragment_is_all_absent() -> None:
    fragment = ConfigFragment()
    assert fragment.bind_addr is ABSENT
    assert fragment.join_addrs_lan == ()
    assert dict(fragment.node_meta) == {}
    assert not is_touched(fragment)


def test_containers_are_frozen() -> None:
    meta = {"a": "b"}
    fragment = ConfigFragment(join_addrs_lan=["x"], node_meta=meta)
    assert fragment.join_addrs_lan == ("x",)
    assert isinstance(fragment.node_meta, MappingProxyType)
    meta["c"] = "d"
    assert dict(fragment.node_meta) == {"a": "b"}
    with pytest.raises(TypeError):
        fragment.node_meta["z"] = "y"  # type: ignore[index]


def test_fragment_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        ConfigFragment().bind_addr = Setting.of("x")  # type: ignore[misc]


def test_document_keys_and_kinds() -> None:
    specs = {spec.name: spec for spec in group_fields(ConfigFragment)}
    assert document_key(specs["advertise_addr_lan"]) == "advertise_addr"
    assert document_key(specs["join_addrs_lan"]) == "start_join"
    assert document_key(specs["enable_ui"]) == "ui"
    assert field_kind(specs["check_update_interval"]) is FieldKind.STRING
    assert field_kind(specs["retry_join_interval_lan"]) is FieldKind.DURATION
    assert field_kind(specs["node_meta"]) is FieldKind.MAP
    assert field_kind(specs["ports"]) is FieldKind.GROUP
    assert FieldKind.INT.is_scalar and not FieldKind.LIST.is_scalar


def test_document_keys_are_unique() -> None:
    keys = [document_key(spec) for spec in group_fields(ConfigFragment)]
    assert len(keys) == len(set(keys))


@pytest.mark.parametrize(
    "fragment",
    [
        ConfigFragment(ports=Ports(dns=Setting.of(0))),
        ConfigFragment(retry_join_gce=RetryJoinGCE(zone_pattern=Setting.of(""))),
        ConfigFragment(dns_recursors=("8.8.8.8",)),
        ConfigFragment(node_meta={"a": "b"}),
        ConfigFragment(bootstrap=Setting.of(False)),
    ],
)
def test_is_touched(fragment: ConfigFragment) -> None:
    assert is_touched(fragment)


def test_default_fragment_values() -> None:
    fragment = default_fragment()
    assert fragment.bind_addr == Setting.of("0.0.0.0")
    assert fragment.datacenter == Setting.of("dc1")
    assert fragment.check_update_interval == Setting.of("5m")
    assert fragment.ports == Ports(
        dns=Setting.of(8600),
        http=Setting.of(8500),
        serf_lan=Setting.of(8301),
        serf_wan=Setting.of(8302),
        server=Setting.of(8300),
    )
    assert fragment.retry_join_interval_wan == Setting.of(timedelta(seconds=30))
    assert not fragment.ports.https.present
    assert not fragment.ports.rpc.present


def test_default_fragment_is_fresh_each_call() -> None:
    assert default_fragment() == default_fragment()
    assert default_fragment() is not default_fragment()


def test_read_only_map_input_is_copied() -> None:
    source = {"a": "b"}
    fragment = ConfigFragment(node_meta=MappingProxyType(source))
    source["c"] = "d"
    assert dict(fragment.node_meta) == {"a": "b"}
