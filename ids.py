from __future__ import annotations

import secrets

ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
ENTITY_ID_LENGTH = 4
TOKEN_ID_LENGTH = 32


class IdGenerator:
    """Issues random ids that never repeat within one generator.

    Every id handed out (or reserved for an explicitly authored id) is kept in
    ``issued``; a draw that hits an existing id is thrown away and redrawn.
    """

    def __init__(self) -> None:
        self.issued: set[str] = set()

    def next_id(self, length: int = ENTITY_ID_LENGTH) -> str:
        if length <= 0:
            raise ValueError(f"Id length must be positive, got {length}.")
        while True:
            raw = secrets.token_bytes(length)
            candidate = "".join(ID_ALPHABET[byte % len(ID_ALPHABET)] for byte in raw)
            if candidate in self.issued:
                continue
            self.issued.add(candidate)
            return candidate

    def reserve(self, value: str) -> str:
        self.issued.add(value)
        return value


_default_generator = IdGenerator()


def default_generator() -> IdGenerator:
    return _default_generator
