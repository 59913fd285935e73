from __future__ import annotations


class CompileError(ValueError):
    """Raised when a node tree cannot be compiled into a project document."""


class StructuralError(CompileError):
    """Raised when a node is declared outside the ancestor it requires."""

    def __init__(self, kind: str, requirement: str, message: str | None = None) -> None:
        self.kind = kind
        self.requirement = requirement
        super().__init__(message or f"{kind} requires {requirement}")


class ReferenceResolutionError(CompileError):
    """Raised when a named reference matches no entity at read time."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} named '{name}' was not found")


class ArityError(CompileError):
    """Raised when a single-value slot is given more than one child value."""

    def __init__(self, kind: str, count: int) -> None:
        self.kind = kind
        self.count = count
        super().__init__(f"{kind} accepts at most one child value, got {count}")
