"""Filesystem expansion of ``-config-file`` and ``-config-dir`` arguments.

Purpose
-------
Implement the :class:`lib_agent_config.application.ports.PathEnumerator`
protocol. The adapter is the only component that touches the filesystem to
decide *which* documents exist; reading them is left to the loaders.

Contents
--------
* :class:`DefaultPathResolver` – expands argument paths into document paths.
* :func:`_collect_dir` – yields supported files of one directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from ...domain.errors import NotFound
from ...observability import log_debug
from ..file_loaders.structured import SUFFIX_FORMATS


class DefaultPathResolver:
    """Resolve configuration paths in a stable order.

    Why
    ----
    Fragment order defines precedence, so the expansion must not depend on
    filesystem iteration order: files keep their command-line position and
    directory entries are sorted alphabetically.
    """

    def __init__(self, *, cwd: Path | None = None) -> None:
        """Store the directory relative paths are resolved against.

        Parameters
        ----------
        cwd:
            Base directory for relative arguments; defaults to the process
            working directory at expansion time.
        """

        self.cwd = cwd

    def expand(self, paths: Sequence[str]) -> list[str]:
        """Return the document paths behind *paths*.

        Raises
        ------
        NotFound
            When an argument is empty or names neither a file nor a
            directory.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> root = Path(tmp.name)
        >>> _ = (root / "b.json").write_text("{}", encoding="utf-8")
        >>> _ = (root / "a.toml").write_text("", encoding="utf-8")
        >>> _ = (root / "notes.txt").write_text("", encoding="utf-8")
        >>> [Path(p).name for p in DefaultPathResolver().expand([tmp.name])]
        ['a.toml', 'b.json']
        >>> tmp.cleanup()
        """

        expanded: list[str] = []
        for raw in paths:
            if not raw:
                raise NotFound("Configuration path not found: empty path")
            candidate = self._absolute(raw)
            if candidate.is_dir():
                entries = list(_collect_dir(candidate))
                log_debug("path_candidates", layer="file", path=str(candidate), count=len(entries))
                expanded.extend(entries)
            elif candidate.is_file():
                expanded.append(str(candidate))
            else:
                raise NotFound(f"Configuration path not found: {raw}")
        return expanded

    def _absolute(self, raw: str) -> Path:
        path = Path(raw)
        if path.is_absolute() or self.cwd is None:
            return path
        return self.cwd / path


def _collect_dir(base: Path) -> Iterable[str]:
    """Yield supported configuration files directly under *base*, sorted by name."""

    for path in sorted(base.iterdir(), key=lambda entry: entry.name):
        if path.is_file() and path.suffix.lower() in SUFFIX_FORMATS:
            yield str(path)
