"""Optional-value wrapper that keeps "absent" apart from "zero".

Purpose
-------
Every scalar of a :class:`~lib_agent_config.domain.fragment.ConfigFragment`
is a :class:`Setting`. A layer that never mentioned a field carries
:data:`ABSENT`; a layer that set it, even to ``False``, ``0`` or ``""``,
carries a present setting. The merge engine relies on the presence bit only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, overload

T = TypeVar("T")
D = TypeVar("D")


@dataclass(frozen=True, slots=True)
class Setting(Generic[T]):
    """Scalar value with an explicit presence bit.

    Examples
    --------
    >>> Setting.of(False).present
    True
    >>> ABSENT.present
    False
    >>> Setting.of(0).get(42)
    0
    >>> ABSENT.get(42)
    42
    """

    value: T | None = None
    present: bool = False

    @classmethod
    def of(cls, value: T) -> Setting[T]:
        """Return a present setting holding *value*."""

        return cls(value, True)

    @overload
    def get(self, default: T) -> T: ...

    @overload
    def get(self, default: D) -> T | D: ...

    def get(self, default):
        """Return the value when present, otherwise *default*."""

        if self.present:
            return self.value
        return default

    def __repr__(self) -> str:
        if not self.present:
            return "ABSENT"
        return f"Setting.of({self.value!r})"


#: Shared absent setting; safe to reuse because :class:`Setting` is frozen.
ABSENT: Setting = Setting()
