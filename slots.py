from __future__ import annotations

from collections.abc import Hashable, Iterator, Sequence
from typing import Any


class Slot(Sequence):
    """Ordered output collection that holds at most one entry per instance token.

    Each entry is paired with the token of the node instance that contributed it.
    ``upsert`` retracts the token's previous entry (wherever it sits) and appends
    the new value at the tail, so a re-evaluated instance moves to the end.
    """

    __slots__ = ("_values", "_tokens")

    def __init__(self) -> None:
        self._values: list[Any] = []
        self._tokens: list[Hashable] = []

    def upsert(self, token: Hashable, value: Any) -> None:
        try:
            index = self._tokens.index(token)
        except ValueError:
            pass
        else:
            del self._values[index]
            del self._tokens[index]
        self._values.append(value)
        self._tokens.append(token)

    def __getitem__(self, index):
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Slot):
            return self._values == other._values
        if isinstance(other, list):
            return self._values == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Slot({self._values!r})"


def insert(slot: Slot, token: Hashable, value: Any) -> None:
    slot.upsert(token, value)
