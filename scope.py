from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from errors import StructuralError

if TYPE_CHECKING:
    from document import FunctionEntry, ObjectEntry, ProjectDocument
    from slots import Slot


@dataclass(frozen=True)
class Scope:
    """Ancestor bindings visible to a node while its subtree is evaluated.

    A handler never mutates the scope it receives; it passes ``scope.bind(...)``
    down to its children, so a binding disappears once that subtree is done.
    """

    root: ProjectDocument | None = None
    project: ProjectDocument | None = None
    scene_id: str | None = None
    obj: ObjectEntry | None = None
    function: FunctionEntry | None = None
    statements: Slot | None = None
    params: Slot | None = None

    def bind(self, **values: Any) -> Scope:
        return replace(self, **values)

    def require(self, kind: str, name: str, requirement: str) -> Any:
        value = getattr(self, name)
        if value is None:
            raise StructuralError(kind, requirement)
        return value
