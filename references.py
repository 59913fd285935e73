from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from errors import ReferenceResolutionError

_UNRESOLVED = object()


class LazyReference:
    """A name lookup deferred until the value is first read.

    ``candidates`` is called at read time, so the referenced entity may be
    declared before or after the reference as long as it exists by then.
    """

    __slots__ = ("kind", "name", "_candidates", "_resolved")

    def __init__(self, kind: str, name: str, candidates: Callable[[], Iterable[Any]]) -> None:
        self.kind = kind
        self.name = name
        self._candidates = candidates
        self._resolved: Any = _UNRESOLVED

    def resolve(self) -> str:
        if self._resolved is _UNRESOLVED:
            for entry in self._candidates():
                if entry.name == self.name:
                    self._resolved = entry.id
                    break
            else:
                raise ReferenceResolutionError(self.kind, self.name)
        return self._resolved

    def __repr__(self) -> str:
        return f"LazyReference({self.kind!r}, {self.name!r})"


def resolve_value(value: Any) -> Any:
    if isinstance(value, LazyReference):
        return value.resolve()
    return value
