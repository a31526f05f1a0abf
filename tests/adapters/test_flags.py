"""Command-line parsing into sparse fragments.

Covers the parse table of the agent flags (boolean forms, list and map
accumulation, interleaved config paths) plus the failure modes that must
abort without returning a partial result.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from lib_agent_config.adapters.flags.agent import AGENT_FLAGS, parse_flags, usage
from lib_agent_config.adapters.flags.registry import FlagKind, FlagRegistry, Flags
from lib_agent_config.domain.errors import FlagError, HelpRequested
from lib_agent_config.domain.fragment import ConfigFragment, Ports, RetryJoinEC2
from lib_agent_config.domain.values import Setting


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        ([], Flags()),
        (["-bind", "a"], Flags(fragment=ConfigFragment(bind_addr=Setting.of("a")))),
        (["-bootstrap"], Flags(fragment=ConfigFragment(bootstrap=Setting.of(True)))),
        (["-bootstrap=true"], Flags(fragment=ConfigFragment(bootstrap=Setting.of(True)))),
        (["-bootstrap=false"], Flags(fragment=ConfigFragment(bootstrap=Setting.of(False)))),
        (["-bootstrap", "true"], Flags(fragment=ConfigFragment(bootstrap=Setting.of(True)))),
        (["-bootstrap", "false"], Flags(fragment=ConfigFragment(bootstrap=Setting.of(False)))),
        (
            ["-config-file", "a", "-config-dir", "b", "-config-file", "c", "-config-dir", "d"],
            Flags(config_files=("a", "b", "c", "d")),
        ),
        (["-datacenter", "a"], Flags(fragment=ConfigFragment(datacenter=Setting.of("a")))),
        (["-dns-port", "1"], Flags(fragment=ConfigFragment(ports=Ports(dns=Setting.of(1))))),
        (["-join", "a", "-join", "b"], Flags(fragment=ConfigFragment(join_addrs_lan=("a", "b")))),
        (
            ["-node-meta", "a:b", "-node-meta", "c:d"],
            Flags(fragment=ConfigFragment(node_meta={"a": "b", "c": "d"})),
        ),
    ],
    ids=lambda value: " ".join(value) if isinstance(value, list) else None,
)
def test_parse_flags(args: list[str], expected: Flags) -> None:
    assert parse_flags(args) == expected


def test_bool_flag_leaves_non_boolean_token() -> None:
    flags = parse_flags(["-bootstrap", "-server"])
    assert flags.fragment.bootstrap == Setting.of(True)
    assert flags.fragment.server_mode == Setting.of(True)


def test_bool_flag_followed_by_positional_fails() -> None:
    with pytest.raises(FlagError, match="unexpected argument"):
        parse_flags(["-bootstrap", "maybe"])


@pytest.mark.parametrize("literal", ["1", "t", "T", "TRUE", "true", "True"])
def test_bool_literals_true(literal: str) -> None:
    assert parse_flags(["-ui", literal]).fragment.enable_ui.value is True


@pytest.mark.parametrize("literal", ["0", "f", "F", "FALSE", "false", "False"])
def test_bool_literals_false(literal: str) -> None:
    assert parse_flags([f"-ui={literal}"]).fragment.enable_ui.value is False


def test_invalid_explicit_bool_fails() -> None:
    with pytest.raises(FlagError, match="-bootstrap"):
        parse_flags(["-bootstrap=yes"])


def test_last_scalar_occurrence_wins() -> None:
    flags = parse_flags(["-datacenter", "a", "-datacenter", "b", "-bootstrap", "-bootstrap=false"])
    assert flags.fragment.datacenter.value == "b"
    assert flags.fragment.bootstrap.value is False


def test_map_value_splits_on_first_colon() -> None:
    flags = parse_flags(["-node-meta", "url:http://x", "-node-meta", "url:http://y"])
    assert dict(flags.fragment.node_meta) == {"url": "http://y"}


def test_map_entry_without_colon_fails() -> None:
    with pytest.raises(FlagError, match="missing ':'"):
        parse_flags(["-node-meta", "ab"])


def test_double_dash_spelling_is_accepted() -> None:
    flags = parse_flags(["--bind=10.0.0.1", "--join", "a"])
    assert flags.fragment.bind_addr.value == "10.0.0.1"
    assert flags.fragment.join_addrs_lan == ("a",)


def test_int_and_duration_values() -> None:
    flags = parse_flags(["-retry-max", "-1", "-retry-interval", "1m30s", "-http-port=0x1f90"])
    assert flags.fragment.retry_join_max_attempts_lan.value == -1
    assert flags.fragment.retry_join_interval_lan.value == timedelta(seconds=90)
    assert flags.fragment.ports.http.value == 8080


@pytest.mark.parametrize(
    ("args", "message"),
    [
        (["-unknown"], "flag provided but not defined: -unknown"),
        (["-dns-port", "abc"], "invalid value 'abc' for flag -dns-port"),
        (["-retry-interval", "10"], "missing unit"),
        (["-retry-interval", "10y"], "unknown unit"),
        (["-retry-interval", "99999999999h"], "invalid duration"),
        (["-datacenter"], "flag needs an argument: -datacenter"),
        (["-bind", "a", "extra"], "unexpected argument: 'extra'"),
        (["---bind", "a"], "bad flag syntax"),
        (["-=x"], "bad flag syntax"),
        (["-bind", "a", "--", "rest"], "unexpected argument: 'rest'"),
    ],
)
def test_parse_errors(args: list[str], message: str) -> None:
    with pytest.raises(FlagError, match=message):
        parse_flags(args)


def test_double_dash_terminator_alone_is_fine() -> None:
    assert parse_flags(["-bind", "a", "--"]).fragment.bind_addr.value == "a"


def test_help_flag_carries_usage() -> None:
    with pytest.raises(HelpRequested) as info:
        parse_flags(["-help"])
    assert "-bind string" in info.value.usage


def test_deprecated_dc_sets_datacenter(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_agent_config")
    flags = parse_flags(["-dc", "east"])
    assert flags.fragment.datacenter.value == "east"
    record = caplog.records[-1]
    assert record.getMessage() == "flag_deprecated"
    assert getattr(record, "context")["replacement"] == "datacenter"


def test_deprecated_atlas_flags_are_no_ops() -> None:
    flags = parse_flags(["-atlas", "infra", "-atlas-join", "-atlas-token=secret"])
    assert flags.fragment == ConfigFragment()
    assert dict(flags.deprecated) == {"atlas": "infra", "atlas-join": True, "atlas-token": "secret"}


def test_deprecated_retry_join_group_flags() -> None:
    flags = parse_flags(["-retry-join-ec2-region", "us-east-1", "-retry-join-ec2-tag-key", "role"])
    assert flags.fragment.retry_join_ec2 == RetryJoinEC2(region=Setting.of("us-east-1"), tag_key=Setting.of("role"))


def test_agent_flags_cover_core_targets() -> None:
    targets = {binding.target for binding in AGENT_FLAGS if binding.target}
    assert "bind_addr" in targets
    assert "ports.dns" in targets
    assert "node_meta" in targets


def test_agent_registry_is_sealed() -> None:
    with pytest.raises(RuntimeError):
        AGENT_FLAGS.add(FlagKind.STRING, "late", "node_name", "too late")


def test_registry_rejects_kind_mismatch() -> None:
    registry = FlagRegistry("demo")
    with pytest.raises(ValueError, match="not int"):
        registry.add(FlagKind.INT, "bind", "bind_addr", "wrong kind")


def test_registry_rejects_unknown_target_and_duplicates() -> None:
    registry = FlagRegistry("demo")
    with pytest.raises(ValueError, match="unknown target"):
        registry.add(FlagKind.STRING, "nope", "ports.nope", "missing")
    registry.add(FlagKind.STRING, "bind", "bind_addr", "bind")
    with pytest.raises(ValueError, match="redefined"):
        registry.add(FlagKind.STRING, "bind", "bind_addr", "bind again")


def test_registry_rejects_targetless_scalar() -> None:
    registry = FlagRegistry("demo")
    with pytest.raises(ValueError, match="needs a target"):
        registry.add(FlagKind.STRING, "orphan", None, "orphan")


def test_registered_help_flag_is_a_normal_flag() -> None:
    registry = FlagRegistry("demo")
    registry.add(FlagKind.STRING, "h", "node_name", "shadow")
    assert registry.parse(["-h", "x"]).fragment.node_name.value == "x"


def test_usage_lists_deprecated_flags_last() -> None:
    text = usage()
    assert text.startswith("Usage of agent:")
    assert text.index("-ui-dir string") < text.index("-atlas string")
    assert "(deprecated) Datacenter of the agent. Use -datacenter instead." in text
