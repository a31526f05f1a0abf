"""Application-layer ports describing the collaborators outside the core.

Purpose
-------
Define the structural contracts of the two external boundaries the pipeline
consumes, so the composition root can be wired with other implementations
(for example an HCL decoder) without touching merge or resolution.

Contents
--------
* :class:`DocumentDecoder` – turns one document text into one fragment.
* :class:`PathEnumerator` – expands ``-config-file``/``-config-dir`` entries
  into an ordered list of document paths.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..domain.fragment import ConfigFragment


@runtime_checkable
class DocumentDecoder(Protocol):
    """Decode document text into a sparse fragment.

    Implementations raise :class:`~lib_agent_config.domain.errors.InvalidFormat`
    on syntax or type errors.
    """

    def decode(self, text: str) -> ConfigFragment:
        """Return the fragment described by *text*."""


@runtime_checkable
class PathEnumerator(Protocol):
    """Resolve configuration paths in a stable order.

    Directories expand to their supported files in alphabetical order; plain
    files pass through unchanged.
    """

    def expand(self, paths: Sequence[str]) -> list[str]:
        """Return the document paths behind *paths*, preserving argument order."""
