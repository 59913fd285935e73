"""End-to-end tests for :func:`compiler.compile_tree`."""

from __future__ import annotations

import json
from typing import Any

import pytest

from compiler import _check_selected_pictures, compile_source, compile_tree
from document import Entity, ObjectEntry, PictureEntry, ProjectDocument
from errors import ArityError, ReferenceResolutionError, StructuralError
from ids import IdGenerator
from nodes import (
    Fragment,
    Message,
    Param,
    Picture,
    Project,
    Scene,
    Script,
    Sound,
    SpriteObject,
    Statement,
    Variable,
    VariableParam,
)
from slots import insert


def _shape(value: Any) -> Any:
    """Drop generated ids and layout flags, keeping the type/params/statements tree."""
    if isinstance(value, list):
        return [_shape(item) for item in value]
    if isinstance(value, dict) and "type" in value:
        return {
            "type": value["type"],
            "params": _shape(value["params"]),
            "statements": _shape(value["statements"]),
        }
    return value


def _collect_ids(value: Any, found: list[str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "id":
                found.append(item)
            elif key in ("script", "content") and isinstance(item, str):
                _collect_ids(json.loads(item), found)
            else:
                _collect_ids(item, found)
    elif isinstance(value, list):
        for item in value:
            _collect_ids(item, found)


def _demo_tree() -> Project:
    return Project(
        name="demo",
        children=[
            Scene(
                name="s1",
                children=[
                    SpriteObject(
                        name="bot",
                        width=100,
                        height=100,
                        children=[
                            Picture(name="p1", selected=True),
                            Statement(
                                children=[
                                    Script(type="when_run_button_click"),
                                    Script(
                                        type="repeat_basic",
                                        children=[Param(value=5), Statement()],
                                    ),
                                ]
                            ),
                        ],
                    )
                ],
            )
        ],
    )


def test_end_to_end_scenario(ids: IdGenerator) -> None:
    document = compile_tree(_demo_tree(), ids=ids)

    assert [scene.name for scene in document.scenes] == ["s1"]
    (bot,) = document.objects
    assert bot.selected_picture_id == bot.pictures[0].id
    assert bot.scene == document.scenes[0].id
    assert _shape(json.loads(bot.script)) == [
        [
            {"type": "when_run_button_click", "params": [], "statements": []},
            {"type": "repeat_basic", "params": [5], "statements": [[]]},
        ]
    ]


def test_output_uses_document_field_names(ids: IdGenerator) -> None:
    data = compile_tree(_demo_tree(), ids=ids).to_json()

    assert list(data) == [
        "name",
        "speed",
        "interface",
        "scenes",
        "objects",
        "variables",
        "messages",
        "functions",
        "tables",
        "expansionBlocks",
        "aiUtilizeBlocks",
        "hardwareLiteBlocks",
        "externalModules",
        "externalModulesLite",
    ]
    obj = data["objects"][0]
    for key in ("id", "name", "lock", "scene", "script", "selectedPictureId", "objectType", "rotateMethod"):
        assert key in obj
    assert set(obj["sprite"]) == {"pictures", "sounds"}
    assert {"x", "y", "regX", "regY", "scaleX", "scaleY", "rotation", "direction", "width", "height", "font", "visible"} <= set(
        obj["entity"]
    )
    assert obj["entity"]["regX"] == 50
    block = json.loads(obj["script"])[0][1]
    assert list(block) == [
        "id",
        "type",
        "params",
        "statements",
        "x",
        "y",
        "assemble",
        "copyable",
        "deletable",
        "emphasized",
        "movable",
        "readOnly",
        "extensions",
    ]
    assert block["deletable"] == 1 and block["movable"] is None and block["readOnly"] is None


def test_every_id_is_unique_across_entity_kinds(ids: IdGenerator) -> None:
    tree = Project(
        name="many",
        children=[
            Variable(name="g", value=0),
            Message(name="go"),
            *[
                Scene(
                    name=f"scene{i}",
                    children=[
                        SpriteObject(
                            name=f"obj{i}",
                            children=[
                                Picture(name="p"),
                                Sound(name="s"),
                                Variable(name="local", value=1),
                                Statement(children=[Script(type="when_run_button_click"), Script(type="show")]),
                            ],
                        )
                    ],
                )
                for i in range(20)
            ],
        ],
    )

    found: list[str] = []
    _collect_ids(compile_tree(tree, ids=ids).to_json(), found)

    assert len(found) == 2 + 20 * 7
    assert len(set(found)) == len(found)


def test_collections_follow_declaration_order(ids: IdGenerator) -> None:
    tree = Project(
        name="order",
        children=[
            Scene(name="a"),
            Variable(name="v1"),
            Scene(name="b", children=[SpriteObject(name="o1"), SpriteObject(name="o2")]),
            Variable(name="v2"),
            Scene(name="c", children=[SpriteObject(name="o3")]),
        ],
    )

    document = compile_tree(tree, ids=ids)

    assert [scene.name for scene in document.scenes] == ["a", "b", "c"]
    assert [obj.name for obj in document.objects] == ["o1", "o2", "o3"]
    assert [variable.name for variable in document.variables] == ["v1", "v2"]


def test_variable_reference_declared_before_variable_resolves(ids: IdGenerator) -> None:
    tree = Project(
        name="refs",
        children=[
            Scene(
                name="s",
                children=[
                    SpriteObject(
                        name="bot",
                        children=[
                            Statement(
                                children=[
                                    Script(type="set_variable", children=[VariableParam(name="score"), Param(value=1)]),
                                ]
                            )
                        ],
                    )
                ],
            ),
            Variable(name="score", value=0),
        ],
    )

    document = compile_tree(tree, ids=ids)

    (score,) = document.variables
    block = json.loads(document.objects[0].script)[0][0]
    assert block["params"] == [score.id, 1]


def test_missing_reference_fails_compilation(ids: IdGenerator) -> None:
    tree = Project(
        name="refs",
        children=[
            Scene(
                name="s",
                children=[
                    SpriteObject(
                        name="bot",
                        children=[Statement(children=[Script(type="get_variable", children=[VariableParam(name="nope")])])],
                    )
                ],
            )
        ],
    )

    with pytest.raises(ReferenceResolutionError, match="nope"):
        compile_tree(tree, ids=ids)


def test_scene_outside_project_is_a_structural_error(ids: IdGenerator) -> None:
    with pytest.raises(StructuralError) as excinfo:
        compile_tree(Scene(name="orphan"), ids=ids)

    assert excinfo.value.kind == "Scene"
    assert excinfo.value.requirement == "Project"


def test_missing_root_project(ids: IdGenerator) -> None:
    with pytest.raises(StructuralError, match="missing root Project"):
        compile_tree(Fragment(), ids=ids)


def test_duplicate_root_project(ids: IdGenerator) -> None:
    with pytest.raises(StructuralError, match="duplicate root Project"):
        compile_tree(Fragment(children=[Project(name="a"), Project(name="b")]), ids=ids)


def test_param_with_two_values_is_an_arity_error(ids: IdGenerator) -> None:
    tree = Project(
        children=[
            Scene(
                name="s",
                children=[SpriteObject(name="o", children=[Statement(children=[Param(children=[1, 2])])])],
            )
        ]
    )

    with pytest.raises(ArityError):
        compile_tree(tree, ids=ids)


def test_script_round_trip_reproduces_declared_shapes(ids: IdGenerator) -> None:
    tree = Project(
        name="round",
        children=[
            Scene(
                name="s",
                children=[
                    SpriteObject(
                        name="o",
                        children=[
                            Statement(
                                children=[
                                    Script(type="when_run_button_click"),
                                    Script(
                                        type="_if",
                                        children=[
                                            Script(type="boolean_not", children=[Param(), Script(type="True"), Param()]),
                                            Statement(children=[Script(type="show")]),
                                        ],
                                    ),
                                ]
                            ),
                            Statement(children=[Script(type="when_some_key_pressed", children=[Param(), Param(value="q")])]),
                        ],
                    )
                ],
            )
        ],
    )

    script = json.loads(compile_tree(tree, ids=ids).objects[0].script)

    assert _shape(script) == [
        [
            {"type": "when_run_button_click", "params": [], "statements": []},
            {
                "type": "_if",
                "params": [
                    {
                        "type": "boolean_not",
                        "params": [None, {"type": "True", "params": [], "statements": []}, None],
                        "statements": [],
                    }
                ],
                "statements": [[{"type": "show", "params": [], "statements": []}]],
            },
        ],
        [{"type": "when_some_key_pressed", "params": [None, "q"], "statements": []}],
    ]


def test_compile_source_builds_the_same_document(ids: IdGenerator) -> None:
    source = """
project name="demo" {
  scene name="s1" {
    sprite name="bot" width=100 height=100 {
      picture name="p1" selected
      statement {
        script type="when_run_button_click"
        script type="repeat_basic" {
          param value=5
          statement {}
        }
      }
    }
  }
}
"""
    document = compile_source(source, ids=ids)

    assert document.name == "demo"
    assert _shape(json.loads(document.objects[0].script)) == [
        [
            {"type": "when_run_button_click", "params": [], "statements": []},
            {"type": "repeat_basic", "params": [5], "statements": [[]]},
        ]
    ]


def test_selected_picture_must_belong_to_the_object() -> None:
    document = ProjectDocument()
    obj = ObjectEntry(id="o1", name="bot", scene="s1", entity=Entity(), selected_picture_id="zzzz")
    insert(obj.pictures, 0, PictureEntry("p1", "pic", "", "", "png", 0, 0))
    insert(document.objects, 0, obj)

    with pytest.raises(StructuralError, match="zzzz"):
        _check_selected_pictures(document)
