"""Literal parsing shared by flags and documents."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lib_agent_config.domain.literals import (
    format_duration,
    parse_bool,
    parse_duration,
    parse_int,
    parse_map_entry,
    try_parse_bool,
)


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_true_literals(text: str) -> None:
    assert parse_bool(text) is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_false_literals(text: str) -> None:
    assert parse_bool(text) is False


@pytest.mark.parametrize("text", ["yes", "no", "tRUE", "", "2"])
def test_non_boolean_literals(text: str) -> None:
    assert try_parse_bool(text) is None
    with pytest.raises(ValueError, match="invalid boolean"):
        parse_bool(text)


@pytest.mark.parametrize(
    ("text", "expected"),
    [("0", 0), ("8500", 8500), ("-1", -1), ("+5", 5), ("0x1F", 31), ("0o17", 15), ("0b101", 5)],
)
def test_parse_int(text: str, expected: int) -> None:
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "1.5", "0xZZ", " 1", "1e3"])
def test_parse_int_rejects(text: str) -> None:
    with pytest.raises(ValueError, match="invalid integer"):
        parse_int(text)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0", timedelta(0)),
        ("30s", timedelta(seconds=30)),
        ("5m", timedelta(minutes=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("10us", timedelta(microseconds=10)),
        ("10µs", timedelta(microseconds=10)),
        ("-2s", timedelta(seconds=-2)),
        ("+2s", timedelta(seconds=2)),
        (".5s", timedelta(milliseconds=500)),
    ],
)
def test_parse_duration(text: str, expected: timedelta) -> None:
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", "invalid duration"),
        ("-", "invalid duration"),
        ("s", "invalid duration"),
        ("10", "missing unit"),
        ("1m30", "missing unit"),
        ("10y", "unknown unit"),
        ("1 s", "invalid duration|missing unit"),
    ],
)
def test_parse_duration_rejects(text: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        parse_duration(text)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=30), "30s"),
        (timedelta(minutes=5), "5m0s"),
        (timedelta(hours=2), "2h0m0s"),
        (timedelta(milliseconds=1500), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(microseconds=7), "7µs"),
        (timedelta(seconds=-90), "-1m30s"),
    ],
)
def test_format_duration(value: timedelta, expected: str) -> None:
    assert format_duration(value) == expected


def test_format_duration_reads_back() -> None:
    value = timedelta(hours=1, minutes=2, seconds=3, milliseconds=4)
    assert parse_duration(format_duration(value)) == value


def test_map_entry_splits_on_first_colon() -> None:
    assert parse_map_entry("a:b") == ("a", "b")
    assert parse_map_entry("url:http://x:80") == ("url", "http://x:80")
    assert parse_map_entry("empty:") == ("empty", "")


def test_map_entry_requires_colon() -> None:
    with pytest.raises(ValueError, match="missing ':'"):
        parse_map_entry("novalue")


@pytest.mark.parametrize("text", ["99999999999h", "2562048h", "9223372036854775808ns"])
def test_parse_duration_rejects_out_of_range(text: str) -> None:
    with pytest.raises(ValueError, match="invalid duration"):
        parse_duration(text)


def test_parse_duration_accepts_largest_value() -> None:
    assert parse_duration("9223372036854775807ns") == timedelta(microseconds=9223372036854775)
