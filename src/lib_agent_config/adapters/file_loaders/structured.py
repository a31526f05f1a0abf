"""Structured configuration document loaders.

Purpose
-------
Turn configuration documents into fragments. Loaders are small wrappers
around ``json``/``tomllib``/``yaml.safe_load`` so error handling and
observability live in one place; the mapping-to-fragment conversion is
delegated to :mod:`.fragment`.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`JSONFileLoader` / :class:`TOMLFileLoader` / :class:`YAMLFileLoader`
  – one loader per format; each offers ``decode(text)`` and ``load(path)``.
* :func:`parse_file` – decode document text, sniffing the format when the
  caller does not declare it.
* :func:`load_file` – read and decode a file, choosing the loader by suffix.

System Role
-----------
Invoked by :func:`lib_agent_config.core.load_fragments` for every path named
by ``-config-file`` or found under ``-config-dir``.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Final, Mapping

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...domain.fragment import ConfigFragment
from ...observability import log_debug, log_error
from .fragment import fragment_from_mapping

_BOM: Final[str] = "\ufeff"


class BaseFileLoader:
    """Common utilities shared by the structured loaders."""

    format: str = ""

    def decode(self, text: str, *, path: str | None = None) -> ConfigFragment:
        """Decode *text* into a fragment, raising :class:`InvalidFormat` on errors."""

        data = self._parse(text.removeprefix(_BOM), path)
        fragment = fragment_from_mapping(self._ensure_mapping(data, path=path), path=path)
        log_debug("config_document_decoded", layer="file", path=path, format=self.format)
        return fragment

    def load(self, path: str) -> ConfigFragment:
        """Read *path* and decode it.

        Raises
        ------
        NotFound
            When *path* is not a regular file.
        InvalidFormat
            When the content is not valid for this format.
        """

        return self.decode(self._read(path), path=path)

    def _parse(self, text: str, path: str | None) -> Any:  # pragma: no cover - overridden
        raise NotImplementedError

    def _read(self, path: str) -> str:
        """Read *path* as UTF-8 text (a leading BOM is dropped), raising :class:`NotFound` when missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        >>> _ = tmp.write('{"datacenter": "a"}')
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:3]
        '{"d'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", layer="file", path=path, size=len(payload))
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise self._invalid(path, exc) from exc

    def _invalid(self, path: str | None, exc: Exception) -> InvalidFormat:
        log_error("config_file_invalid", layer="file", path=path, format=self.format, error=str(exc))
        where = f" in {path}" if path else ""
        return InvalidFormat(f"Invalid {self.format.upper()}{where}: {exc}")

    @staticmethod
    def _ensure_mapping(data: object, *, path: str | None) -> Mapping[str, object]:
        """Ensure *data* is a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping([1], path="demo")
        Traceback (most recent call last):
        ...
        lib_agent_config.domain.errors.InvalidFormat: Document demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"Document {path or '<text>'} did not produce a mapping")
        return data  # type: ignore[return-value]


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents.

    Examples
    --------
    >>> JSONFileLoader().decode('{"bootstrap": true}').bootstrap.value
    True
    """

    format = "json"

    def _parse(self, text: str, path: str | None) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise self._invalid(path, exc) from exc


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser.

    Examples
    --------
    >>> TOMLFileLoader().decode('bind_addr = "0.0.0.0"\\n[ports]\\ndns = 123').ports.dns.value
    123
    """

    format = "toml"

    def _parse(self, text: str, path: str | None) -> Any:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise self._invalid(path, exc) from exc


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents; an empty document yields an empty fragment."""

    format = "yaml"

    def _parse(self, text: str, path: str | None) -> Any:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        return {} if data is None else data


_LOADERS: Final[dict[str, BaseFileLoader]] = {
    "json": JSONFileLoader(),
    "toml": TOMLFileLoader(),
    "yaml": YAMLFileLoader(),
}

#: Supported file suffixes mapped to their format.
SUFFIX_FORMATS: Final[dict[str, str]] = {
    ".json": "json",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def sniff_format(text: str) -> str:
    """Guess the format of *text*: a leading ``{`` means JSON, anything else TOML.

    Examples
    --------
    >>> sniff_format('  {"a": 1}'), sniff_format('a = 1')
    ('json', 'toml')
    """

    return "json" if text.removeprefix(_BOM).lstrip().startswith("{") else "toml"


def loader_for(fmt: str) -> BaseFileLoader:
    """Return the loader registered for *fmt* (``json``, ``toml`` or ``yaml``)."""

    try:
        return _LOADERS[fmt.lower()]
    except KeyError as exc:
        raise InvalidFormat(f"Unsupported configuration format: {fmt}") from exc


def parse_file(text: str, fmt: str | None = None) -> ConfigFragment:
    """Decode document *text* into a fragment.

    Parameters
    ----------
    text:
        Document content.
    fmt:
        ``"json"``, ``"toml"`` or ``"yaml"``; sniffed via :func:`sniff_format`
        when omitted.

    Examples
    --------
    >>> parse_file('{"start_join": ["a"]}').join_addrs_lan
    ('a',)
    >>> parse_file('datacenter = "a"').datacenter.value
    'a'
    """

    return loader_for(fmt or sniff_format(text)).decode(text)


def load_file(path: str) -> ConfigFragment:
    """Read and decode *path*, choosing the format from its suffix.

    Files with an unknown suffix (as can be named by ``-config-file``) are
    sniffed.
    """

    fmt = SUFFIX_FORMATS.get(Path(path).suffix.lower())
    if fmt is not None:
        return _LOADERS[fmt].load(path)
    loader = BaseFileLoader()
    text = loader._read(path)
    return loader_for(sniff_format(text)).decode(text, path=path)
