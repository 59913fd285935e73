from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from references import resolve_value
from slots import Slot

SPRITE_FONT = "undefinedpx "


def encode_value(value: Any) -> Any:
    """Turn a script value into plain JSON data, resolving lazy references."""
    if isinstance(value, ScriptNode):
        return value.to_json()
    if isinstance(value, (Slot, list, tuple)):
        return [encode_value(item) for item in value]
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    return resolve_value(value)


def dump_statements(blocks: Slot) -> str:
    return json.dumps(encode_value(blocks), ensure_ascii=False, separators=(",", ":"))


@dataclass
class ScriptNode:
    id: str
    type: str
    x: float = 0
    y: float = 0
    assemble: bool = True
    copyable: bool = True
    deletable: int | bool = 1
    emphasized: bool = False
    movable: bool | None = None
    read_only: bool | None = None
    extensions: list[str] = field(default_factory=list)
    params: Slot = field(default_factory=Slot)
    statements: Slot = field(default_factory=Slot)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "params": encode_value(self.params),
            "statements": encode_value(self.statements),
            "x": self.x,
            "y": self.y,
            "assemble": self.assemble,
            "copyable": self.copyable,
            "deletable": self.deletable,
            "emphasized": self.emphasized,
            "movable": self.movable,
            "readOnly": self.read_only,
            "extensions": list(self.extensions),
        }


@dataclass
class SceneEntry:
    id: str
    name: str

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class PictureEntry:
    id: str
    name: str
    fileurl: str
    thumb_url: str
    image_type: str
    width: float
    height: float

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "fileurl": self.fileurl,
            "thumbUrl": self.thumb_url,
            "imageType": self.image_type,
            "dimension": {"width": self.width, "height": self.height},
        }


@dataclass
class SoundEntry:
    id: str
    name: str
    fileurl: str
    duration: float
    ext: str

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "fileurl": self.fileurl,
            "duration": self.duration,
            "ext": self.ext,
        }


@dataclass
class Entity:
    x: float = 0
    y: float = 0
    reg_x: float = 0
    reg_y: float = 0
    scale_x: float = 1
    scale_y: float = 1
    rotation: float = 0
    direction: float = 90
    width: float = 0
    height: float = 0
    font: str = SPRITE_FONT
    visible: bool = False
    # text box styling, left as None on sprites
    font_size: float | None = None
    text: str | None = None
    text_align: int | None = None
    colour: str | None = None
    bg_color: str | None = None
    under_line: bool | None = None
    strike: bool | None = None
    line_break: bool | None = None

    def to_json(self) -> dict:
        data = {
            "x": self.x,
            "y": self.y,
            "regX": self.reg_x,
            "regY": self.reg_y,
            "scaleX": self.scale_x,
            "scaleY": self.scale_y,
            "rotation": self.rotation,
            "direction": self.direction,
            "width": self.width,
            "height": self.height,
            "font": self.font,
            "visible": self.visible,
        }
        styling = {
            "fontSize": self.font_size,
            "text": self.text,
            "textAlign": self.text_align,
            "colour": self.colour,
            "bgColor": self.bg_color,
            "underLine": self.under_line,
            "strike": self.strike,
            "lineBreak": self.line_break,
        }
        data.update({key: value for key, value in styling.items() if value is not None})
        return data


@dataclass
class ObjectEntry:
    """One scene object.

    ``script`` is not stored: it is re-serialized from ``script_blocks`` each
    time it is read, so statement blocks added after the object was inserted
    still show up.
    """

    id: str
    name: str
    scene: str
    entity: Entity
    lock: bool = False
    object_type: str = "sprite"
    rotate_method: str = "free"
    text: str | None = None
    selected_picture_id: str | None = None
    pictures: Slot = field(default_factory=Slot)
    sounds: Slot = field(default_factory=Slot)
    script_blocks: Slot = field(default_factory=Slot, repr=False)

    @property
    def script(self) -> str:
        return dump_statements(self.script_blocks)

    def to_json(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "lock": self.lock,
            "scene": self.scene,
            "script": self.script,
        }
        if self.selected_picture_id is not None:
            data["selectedPictureId"] = self.selected_picture_id
        if self.text is not None:
            data["text"] = self.text
        data.update(
            {
                "sprite": {
                    "pictures": [picture.to_json() for picture in self.pictures],
                    "sounds": [sound.to_json() for sound in self.sounds],
                },
                "entity": self.entity.to_json(),
                "objectType": self.object_type,
                "rotateMethod": self.rotate_method,
            }
        )
        return data


@dataclass
class VariableEntry:
    id: str
    name: str
    value: Any = None
    visible: bool = False
    x: float = 0
    y: float = 0
    object: str | None = None
    is_cloud: bool = False
    is_real_time: bool = False
    cloud_date: Any = False

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "visible": self.visible,
            "x": self.x,
            "y": self.y,
            "object": self.object,
            "isCloud": self.is_cloud,
            "isRealTime": self.is_real_time,
            "cloudDate": self.cloud_date,
        }


@dataclass
class MessageEntry:
    id: str
    name: str

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class LocalVariableEntry:
    id: str
    name: str
    value: Any = None

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "value": self.value}


@dataclass
class FunctionEntry:
    id: str
    type: str = "normal"
    use_local_variables: bool = False
    local_variables: Slot = field(default_factory=Slot)
    content_blocks: Slot = field(default_factory=Slot, repr=False)

    @property
    def content(self) -> str:
        return dump_statements(self.content_blocks)

    def to_json(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "useLocalVariables": self.use_local_variables,
        }
        if self.use_local_variables or len(self.local_variables):
            data["localVariables"] = [local.to_json() for local in self.local_variables]
        data["content"] = self.content
        return data


@dataclass
class ProjectDocument:
    """The compiled project.

    Starts out empty; the root ``Project`` node fills it in place. The tokens
    of every Project instance that did so are kept in ``populated_by`` so the
    compiler can tell a missing root from a duplicated one.
    """

    name: str | None = None
    speed: float = 60
    interface: dict = field(default_factory=dict)
    scenes: Slot = field(default_factory=Slot)
    objects: Slot = field(default_factory=Slot)
    variables: Slot = field(default_factory=Slot)
    messages: Slot = field(default_factory=Slot)
    functions: Slot = field(default_factory=Slot)
    tables: Slot = field(default_factory=Slot)
    expansion_blocks: list[str] = field(default_factory=list)
    ai_utilize_blocks: list[str] = field(default_factory=list)
    hardware_lite_blocks: list[str] = field(default_factory=list)
    external_modules: list[str] = field(default_factory=list)
    external_modules_lite: list[str] = field(default_factory=list)
    populated_by: list[Any] = field(default_factory=list, repr=False, compare=False)

    @property
    def is_populated(self) -> bool:
        return bool(self.populated_by)

    def populate(self, token: Any, **scalars: Any) -> None:
        for key, value in scalars.items():
            setattr(self, key, value)
        self.scenes = Slot()
        self.objects = Slot()
        self.variables = Slot()
        self.messages = Slot()
        self.functions = Slot()
        self.tables = Slot()
        if token not in self.populated_by:
            self.populated_by.append(token)

    def to_json(self) -> dict:
        return {
            "name": self.name,
            "speed": self.speed,
            "interface": dict(self.interface),
            "scenes": [scene.to_json() for scene in self.scenes],
            "objects": [obj.to_json() for obj in self.objects],
            "variables": [variable.to_json() for variable in self.variables],
            "messages": [message.to_json() for message in self.messages],
            "functions": [function.to_json() for function in self.functions],
            "tables": [encode_value(table) for table in self.tables],
            "expansionBlocks": list(self.expansion_blocks),
            "aiUtilizeBlocks": list(self.ai_utilize_blocks),
            "hardwareLiteBlocks": list(self.hardware_lite_blocks),
            "externalModules": list(self.external_modules),
            "externalModulesLite": list(self.external_modules_lite),
        }
