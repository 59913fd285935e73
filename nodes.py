from __future__ import annotations

"""
Node declarations for the authored tree.

A tree is built from plain dataclass instances, each carrying its attributes and
a keyword-only ``children`` list:

    Project(name="demo", children=[
        Scene(name="s1", children=[
            SpriteObject(name="bot", width=100, height=100, children=[
                Picture(name="p1", fileurl="bot.svg", selected=True),
                Statement(children=[Script(type="when_run_button_click")]),
            ]),
        ]),
    ])

Nodes compare and hash by identity: the same instance evaluated twice is the
same logical node, two equal-looking instances are not.
"""

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

OBJECT_TYPES = ("sprite", "textBox")
ROTATE_METHODS = ("free", "vertical", "none")
FUNCTION_TYPES = ("normal", "value")

DEFAULT_TEXT_BOX_TEXT = "글상자"
DEFAULT_TEXT_BOX_FONT_SIZE = 20
DEFAULT_TEXT_BOX_FONT_FAMILY = "Nanum Gothic"

_EXTENSION_PATTERN = re.compile(r"\.([^./]*)$")


@dataclass(eq=False, kw_only=True)
class Node:
    kind: ClassVar[str] = "Node"
    children: list[Any] = field(default_factory=list)


@dataclass(eq=False)
class Fragment(Node):
    """Groups children without adding anything to the document."""

    kind: ClassVar[str] = "Fragment"


@dataclass(eq=False)
class Project(Node):
    kind: ClassVar[str] = "Project"
    name: str | None = None
    speed: float = 60
    interface: dict = field(default_factory=dict)
    expansion_blocks: list[str] = field(default_factory=list)
    ai_utilize_blocks: list[str] = field(default_factory=list)
    hardware_lite_blocks: list[str] = field(default_factory=list)
    external_modules: list[str] = field(default_factory=list)
    external_modules_lite: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Scene(Node):
    kind: ClassVar[str] = "Scene"
    name: str
    id: str | None = None


@dataclass(eq=False)
class EntryObject(Node):
    kind: ClassVar[str] = "Object"
    name: str
    id: str | None = None
    object_type: str = "sprite"
    lock: bool = False
    rotate_method: str = "free"
    x: float = 0
    y: float = 0
    reg_x: float | None = None
    reg_y: float | None = None
    scale_x: float = 1
    scale_y: float = 1
    rotation: float = 0
    direction: float = 90
    width: float = 0
    height: float = 0
    visible: bool = False
    selected: bool = False
    font: str | None = None
    # text box only
    text: str | None = None
    font_size: float | None = None
    colour: str | None = None
    text_align: int | None = None
    line_break: bool | None = None
    bg_color: str | None = None
    under_line: bool | None = None
    strike: bool | None = None

    def __post_init__(self) -> None:
        if self.object_type not in OBJECT_TYPES:
            raise ValueError(f"Unknown object type '{self.object_type}' for object '{self.name}'.")
        if self.rotate_method not in ROTATE_METHODS:
            raise ValueError(f"Unknown rotate method '{self.rotate_method}' for object '{self.name}'.")
        if self.reg_x is None:
            self.reg_x = self.width / 2
        if self.reg_y is None:
            self.reg_y = self.height / 2
        if self.object_type == "textBox":
            self._apply_text_box_defaults()

    def _apply_text_box_defaults(self) -> None:
        if self.text is None:
            self.text = DEFAULT_TEXT_BOX_TEXT
        if self.font_size is None:
            self.font_size = DEFAULT_TEXT_BOX_FONT_SIZE
        if self.font is None:
            size = int(self.font_size) if float(self.font_size).is_integer() else self.font_size
            self.font = f"{size}px {DEFAULT_TEXT_BOX_FONT_FAMILY}"
        if self.colour is None:
            self.colour = "#000000"
        if self.text_align is None:
            self.text_align = 0
        if self.line_break is None:
            self.line_break = False
        if self.bg_color is None:
            self.bg_color = "#ffffff"
        if self.under_line is None:
            self.under_line = False
        if self.strike is None:
            self.strike = False


@dataclass(eq=False)
class SpriteObject(EntryObject):
    kind: ClassVar[str] = "SpriteObject"
    object_type: str = "sprite"


@dataclass(eq=False)
class TextBoxObject(EntryObject):
    kind: ClassVar[str] = "TextBoxObject"
    object_type: str = "textBox"


def _extension(fileurl: str) -> str | None:
    match = _EXTENSION_PATTERN.search(fileurl)
    if match is None or not match.group(1):
        return None
    return match.group(1)


@dataclass(eq=False)
class Picture(Node):
    kind: ClassVar[str] = "Picture"
    name: str
    fileurl: str = ""
    id: str | None = None
    thumb_url: str | None = None
    image_type: str | None = None
    width: float = 0
    height: float = 0
    selected: bool = False

    def __post_init__(self) -> None:
        if self.thumb_url is None:
            self.thumb_url = self.fileurl
        if self.image_type is None:
            self.image_type = _extension(self.fileurl) or "png"


@dataclass(eq=False)
class Sound(Node):
    kind: ClassVar[str] = "Sound"
    name: str
    fileurl: str = ""
    duration: float = 0
    id: str | None = None
    ext: str | None = None

    def __post_init__(self) -> None:
        if self.ext is None:
            suffix = _extension(self.fileurl)
            self.ext = f".{suffix}" if suffix else ".mp3"


@dataclass(eq=False)
class Variable(Node):
    kind: ClassVar[str] = "Variable"
    name: str
    value: Any = None
    id: str | None = None
    visible: bool = False
    x: float = 0
    y: float = 0
    is_cloud: bool = False
    is_real_time: bool = False
    cloud_date: Any = False


@dataclass(eq=False)
class Message(Node):
    kind: ClassVar[str] = "Message"
    name: str
    id: str | None = None


@dataclass(eq=False)
class Function(Node):
    kind: ClassVar[str] = "Function"
    id: str | None = None
    type: str = "normal"
    use_local_variables: bool = False

    def __post_init__(self) -> None:
        if self.type not in FUNCTION_TYPES:
            raise ValueError(f"Unknown function type '{self.type}'.")


@dataclass(eq=False)
class LocalVariable(Node):
    kind: ClassVar[str] = "LocalVariable"
    name: str
    value: Any = None


@dataclass(eq=False)
class Table(Node):
    kind: ClassVar[str] = "Table"
    data: dict = field(default_factory=dict)


@dataclass(eq=False)
class Statement(Node):
    kind: ClassVar[str] = "Statement"


@dataclass(eq=False)
class Script(Node):
    kind: ClassVar[str] = "Script"
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


@dataclass(eq=False)
class Param(Node):
    kind: ClassVar[str] = "Param"
    value: Any = None


@dataclass(eq=False)
class NamedParam(Node):
    kind: ClassVar[str] = "NamedParam"
    target_kind: ClassVar[str] = ""
    name: str


@dataclass(eq=False)
class VariableParam(NamedParam):
    kind: ClassVar[str] = "VariableParam"
    target_kind: ClassVar[str] = "Variable"


@dataclass(eq=False)
class ObjectParam(NamedParam):
    kind: ClassVar[str] = "ObjectParam"
    target_kind: ClassVar[str] = "Object"


@dataclass(eq=False)
class PictureParam(NamedParam):
    kind: ClassVar[str] = "PictureParam"
    target_kind: ClassVar[str] = "Picture"


@dataclass(eq=False)
class SoundParam(NamedParam):
    kind: ClassVar[str] = "SoundParam"
    target_kind: ClassVar[str] = "Sound"


NODE_KINDS: dict[str, type[Node]] = {
    "fragment": Fragment,
    "project": Project,
    "scene": Scene,
    "object": EntryObject,
    "entryobject": EntryObject,
    "sprite": SpriteObject,
    "spriteobject": SpriteObject,
    "textbox": TextBoxObject,
    "textboxobject": TextBoxObject,
    "picture": Picture,
    "sound": Sound,
    "variable": Variable,
    "message": Message,
    "function": Function,
    "localvariable": LocalVariable,
    "table": Table,
    "statement": Statement,
    "script": Script,
    "param": Param,
    "variableparam": VariableParam,
    "objectparam": ObjectParam,
    "pictureparam": PictureParam,
    "soundparam": SoundParam,
}
