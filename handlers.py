from __future__ import annotations

import logging
from typing import Any

from document import (
    Entity,
    FunctionEntry,
    LocalVariableEntry,
    MessageEntry,
    ObjectEntry,
    PictureEntry,
    ProjectDocument,
    SceneEntry,
    ScriptNode,
    SoundEntry,
    VariableEntry,
)
from errors import ArityError, CompileError, StructuralError
from ids import IdGenerator
from nodes import (
    EntryObject,
    Fragment,
    Function,
    LocalVariable,
    Message,
    NamedParam,
    Node,
    ObjectParam,
    Param,
    Picture,
    PictureParam,
    Project,
    Scene,
    Script,
    Sound,
    SoundParam,
    Statement,
    Table,
    Variable,
    VariableParam,
)
from references import LazyReference
from scope import Scope
from slots import Slot, insert

logger = logging.getLogger(__name__)


class NodeArena:
    """Hands out a stable integer handle per node instance, in first-seen order."""

    def __init__(self) -> None:
        self.nodes: list[Node] = []
        self._handles: dict[Node, int] = {}

    def handle(self, node: Node) -> int:
        handle = self._handles.get(node)
        if handle is None:
            handle = len(self.nodes)
            self._handles[node] = handle
            self.nodes.append(node)
        return handle

    def __len__(self) -> int:
        return len(self.nodes)


class TreeEvaluator:
    """Walks a node tree depth-first and writes each node into the document.

    Every handler reads the ancestor bindings it needs from the scope, reuses the
    id remembered for its node instance, builds its entry, and upserts it into
    the ancestor's collection under the instance's arena handle. Whatever scope
    the handler returns is what the node's children see.
    """

    def __init__(self, ids: IdGenerator) -> None:
        self.ids = ids
        self.arena = NodeArena()
        self._memory: dict[int, dict[str, Any]] = {}
        # every id handed out in this run, authored or generated, to its token
        self._owners: dict[str, int] = {}

    def evaluate(self, node: Node, scope: Scope) -> None:
        if not isinstance(node, Node):
            raise StructuralError("Literal value", "Param")
        token = self.arena.handle(node)
        logger.debug("evaluating %s #%d", node.kind, token)
        child_scope = self._dispatch(node, scope, token)
        for child in node.children:
            if not isinstance(child, Node):
                if isinstance(node, Param):
                    continue
                raise StructuralError("Literal value", "Param")
            if child_scope is None:
                raise StructuralError(child.kind, node.kind, f"{node.kind} cannot contain {child.kind}")
            self.evaluate(child, child_scope)

    def instance_id(self, token: int, explicit: str | None = None, kind: str = "Node") -> str:
        cell = self._memory.setdefault(token, {})
        if explicit:
            owner = self._owners.get(explicit)
            if owner is not None and owner != token:
                raise StructuralError(kind, "a unique id", f"id '{explicit}' is already used by another node")
            if cell.get("id") not in (None, explicit):
                del self._owners[cell["id"]]
            cell["id"] = self.ids.reserve(explicit)
            self._owners[explicit] = token
        elif "id" not in cell:
            cell["id"] = self.ids.next_id()
            self._owners[cell["id"]] = token
        return cell["id"]

    def _dispatch(self, node: Node, scope: Scope, token: int) -> Scope | None:
        if isinstance(node, Fragment):
            return scope
        if isinstance(node, Project):
            return self._emit_project(node, scope, token)
        if isinstance(node, Scene):
            return self._emit_scene(node, scope, token)
        if isinstance(node, EntryObject):
            return self._emit_object(node, scope, token)
        if isinstance(node, Picture):
            return self._emit_picture(node, scope, token)
        if isinstance(node, Sound):
            return self._emit_sound(node, scope, token)
        if isinstance(node, Variable):
            return self._emit_variable(node, scope, token)
        if isinstance(node, Message):
            return self._emit_message(node, scope, token)
        if isinstance(node, Function):
            return self._emit_function(node, scope, token)
        if isinstance(node, LocalVariable):
            return self._emit_local_variable(node, scope, token)
        if isinstance(node, Table):
            return self._emit_table(node, scope, token)
        if isinstance(node, Statement):
            return self._emit_statement(node, scope, token)
        if isinstance(node, Script):
            return self._emit_script(node, scope, token)
        if isinstance(node, Param):
            return self._emit_param(node, scope, token)
        if isinstance(node, NamedParam):
            return self._emit_named_param(node, scope, token)
        raise CompileError(f"Unsupported node type '{type(node).__name__}'.")

    def _emit_project(self, node: Project, scope: Scope, token: int) -> Scope:
        root: ProjectDocument = scope.require(node.kind, "root", "the compiler root")
        root.populate(
            token,
            name=node.name,
            speed=node.speed,
            interface=dict(node.interface),
            expansion_blocks=list(node.expansion_blocks),
            ai_utilize_blocks=list(node.ai_utilize_blocks),
            hardware_lite_blocks=list(node.hardware_lite_blocks),
            external_modules=list(node.external_modules),
            external_modules_lite=list(node.external_modules_lite),
        )
        return scope.bind(project=root)

    def _emit_scene(self, node: Scene, scope: Scope, token: int) -> Scope:
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        scene_id = self.instance_id(token, node.id, node.kind)
        insert(project.scenes, token, SceneEntry(id=scene_id, name=node.name))
        return scope.bind(scene_id=scene_id)

    def _emit_object(self, node: EntryObject, scope: Scope, token: int) -> Scope:
        scene_id: str = scope.require(node.kind, "scene_id", "Scene")
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        object_id = self.instance_id(token, node.id, node.kind)
        entity = Entity(
            x=node.x,
            y=node.y,
            reg_x=node.reg_x,
            reg_y=node.reg_y,
            scale_x=node.scale_x,
            scale_y=node.scale_y,
            rotation=node.rotation,
            direction=node.direction,
            width=node.width,
            height=node.height,
            visible=node.visible,
        )
        if node.font is not None:
            entity.font = node.font
        if node.object_type == "textBox":
            entity.font_size = node.font_size
            entity.text = node.text
            entity.text_align = node.text_align
            entity.colour = node.colour
            entity.bg_color = node.bg_color
            entity.under_line = node.under_line
            entity.strike = node.strike
            entity.line_break = node.line_break
        entry = ObjectEntry(
            id=object_id,
            name=node.name,
            scene=scene_id,
            entity=entity,
            lock=node.lock,
            object_type=node.object_type,
            rotate_method=node.rotate_method,
            text=node.text if node.object_type == "textBox" else None,
        )
        insert(project.objects, token, entry)
        if node.selected:
            project.interface["object"] = object_id
        return scope.bind(obj=entry, function=None, statements=entry.script_blocks, params=None)

    def _emit_picture(self, node: Picture, scope: Scope, token: int) -> None:
        obj: ObjectEntry = scope.require(node.kind, "obj", "SpriteObject")
        if obj.object_type != "sprite":
            raise StructuralError(node.kind, "SpriteObject")
        picture_id = self.instance_id(token, node.id, node.kind)
        picture = PictureEntry(
            id=picture_id,
            name=node.name,
            fileurl=node.fileurl,
            thumb_url=node.thumb_url,
            image_type=node.image_type,
            width=node.width,
            height=node.height,
        )
        insert(obj.pictures, token, picture)
        if node.selected:
            obj.selected_picture_id = picture_id
        return None

    def _emit_sound(self, node: Sound, scope: Scope, token: int) -> None:
        obj: ObjectEntry = scope.require(node.kind, "obj", "Object")
        sound = SoundEntry(
            id=self.instance_id(token, node.id, node.kind),
            name=node.name,
            fileurl=node.fileurl,
            duration=node.duration,
            ext=node.ext,
        )
        insert(obj.sounds, token, sound)
        return None

    def _emit_variable(self, node: Variable, scope: Scope, token: int) -> None:
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        # declared inside an object: private to that object
        owner = scope.obj.id if scope.obj is not None else None
        variable = VariableEntry(
            id=self.instance_id(token, node.id, node.kind),
            name=node.name,
            value=node.value,
            visible=node.visible,
            x=node.x,
            y=node.y,
            object=owner,
            is_cloud=node.is_cloud,
            is_real_time=node.is_real_time,
            cloud_date=node.cloud_date,
        )
        insert(project.variables, token, variable)
        return None

    def _emit_message(self, node: Message, scope: Scope, token: int) -> None:
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        insert(project.messages, token, MessageEntry(id=self.instance_id(token, node.id, node.kind), name=node.name))
        return None

    def _emit_function(self, node: Function, scope: Scope, token: int) -> Scope:
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        entry = FunctionEntry(
            id=self.instance_id(token, node.id, node.kind),
            type=node.type,
            use_local_variables=node.use_local_variables,
        )
        insert(project.functions, token, entry)
        return scope.bind(function=entry, statements=entry.content_blocks, params=None)

    def _emit_local_variable(self, node: LocalVariable, scope: Scope, token: int) -> None:
        function: FunctionEntry = scope.require(node.kind, "function", "Function")
        local_id = f"{function.id}_{self.instance_id(token)}"
        insert(function.local_variables, token, LocalVariableEntry(id=local_id, name=node.name, value=node.value))
        return None

    def _emit_table(self, node: Table, scope: Scope, token: int) -> None:
        project: ProjectDocument = scope.require(node.kind, "project", "Project")
        insert(project.tables, token, dict(node.data))
        return None

    def _emit_statement(self, node: Statement, scope: Scope, token: int) -> Scope:
        statements: Slot = scope.require(node.kind, "statements", "Script or Object")
        block = Slot()
        insert(statements, token, block)
        return scope.bind(params=block)

    def _emit_script(self, node: Script, scope: Scope, token: int) -> Scope:
        params: Slot = scope.require(node.kind, "params", "Statement or Script")
        script = ScriptNode(
            id=self.instance_id(token),
            type=node.type,
            x=node.x,
            y=node.y,
            assemble=node.assemble,
            copyable=node.copyable,
            deletable=node.deletable,
            emphasized=node.emphasized,
            movable=node.movable,
            read_only=node.read_only,
            extensions=list(node.extensions),
        )
        insert(params, token, script)
        return scope.bind(params=script.params, statements=script.statements)

    def _emit_param(self, node: Param, scope: Scope, token: int) -> None:
        params: Slot = scope.require(node.kind, "params", "Statement or Script")
        literals = [child for child in node.children if not isinstance(child, Node)]
        if node.value is not None:
            literals.insert(0, node.value)
        if len(literals) > 1:
            raise ArityError(node.kind, len(literals))
        value = literals[0] if literals else None
        insert(params, token, value)
        return None

    def _emit_named_param(self, node: NamedParam, scope: Scope, token: int) -> None:
        params: Slot = scope.require(node.kind, "params", "Script")
        if isinstance(node, VariableParam):
            project: ProjectDocument = scope.require(node.kind, "project", "Project")
            reference = LazyReference(node.target_kind, node.name, lambda: project.variables)
        elif isinstance(node, ObjectParam):
            project = scope.require(node.kind, "project", "Project")
            reference = LazyReference(node.target_kind, node.name, lambda: project.objects)
        elif isinstance(node, PictureParam):
            obj: ObjectEntry = scope.require(node.kind, "obj", "Object")
            reference = LazyReference(node.target_kind, node.name, lambda: obj.pictures)
        elif isinstance(node, SoundParam):
            obj = scope.require(node.kind, "obj", "Object")
            reference = LazyReference(node.target_kind, node.name, lambda: obj.sounds)
        else:
            raise CompileError(f"Unsupported named parameter '{type(node).__name__}'.")
        insert(params, token, reference)
        return None
