"""Path resolver adapter tests for ``-config-file``/``-config-dir`` expansion.

Fragment order defines precedence, so these scenarios pin the expansion order:
files keep their argument position, directories contribute their supported
documents alphabetically.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_agent_config.adapters.path_resolvers.default import DefaultPathResolver
from lib_agent_config.domain.errors import NotFound


def _touch(path: Path, content: str = "{}") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_plain_file_passes_through(tmp_path: Path) -> None:
    """A file argument is returned as-is."""

    target = _touch(tmp_path / "agent.json")
    assert DefaultPathResolver().expand([str(target)]) == [str(target)]


def test_directory_expands_sorted_supported_files(tmp_path: Path) -> None:
    """Directory entries are sorted by name and filtered by suffix."""

    conf = tmp_path / "conf.d"
    _touch(conf / "20-ports.toml", "")
    _touch(conf / "10-base.json")
    _touch(conf / "30-extra.yaml", "")
    _touch(conf / "README.md", "")
    (conf / "nested.json").mkdir()

    names = [Path(p).name for p in DefaultPathResolver().expand([str(conf)])]
    assert names == ["10-base.json", "20-ports.toml", "30-extra.yaml"]


def test_argument_order_is_preserved(tmp_path: Path) -> None:
    """Files and directories interleave in the order given."""

    first = _touch(tmp_path / "z.json")
    conf = tmp_path / "dir"
    _touch(conf / "a.json")
    last = _touch(tmp_path / "a.toml", "")

    expanded = DefaultPathResolver().expand([str(first), str(conf), str(last)])
    assert expanded == [str(first), str(conf / "a.json"), str(last)]


def test_empty_directory_contributes_nothing(tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()
    assert DefaultPathResolver().expand([str(tmp_path / "empty")]) == []


def test_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(NotFound, match="missing.json"):
        DefaultPathResolver().expand([str(tmp_path / "missing.json")])


def test_relative_paths_use_cwd(tmp_path: Path) -> None:
    """Relative arguments resolve against the configured working directory."""

    _touch(tmp_path / "etc" / "agent.json")
    expanded = DefaultPathResolver(cwd=tmp_path).expand(["etc/agent.json"])
    assert expanded == [str(tmp_path / "etc" / "agent.json")]


def test_absolute_paths_ignore_cwd(tmp_path: Path) -> None:
    target = _touch(tmp_path / "agent.json")
    expanded = DefaultPathResolver(cwd=tmp_path / "elsewhere").expand([str(target)])
    assert expanded == [str(target)]


def test_empty_argument_raises(tmp_path: Path) -> None:
    """An empty argument must not silently expand to the working directory."""

    _touch(tmp_path / "agent.json")
    with pytest.raises(NotFound, match="empty path"):
        DefaultPathResolver(cwd=tmp_path).expand([""])
