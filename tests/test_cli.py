"""Tests for the command line entry point in :mod:`compiler`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from compiler import main

SOURCE = """
project name="cli demo" {
  message name="start"
  scene name="Scene 1" {
    sprite name="bot" width=144 height=246 visible {
      picture name="walk1" fileurl="/media/bot1.svg" width=144 height=246 selected
      statement {
        script type="when_run_button_click"
      }
    }
  }
}
"""


def test_main_writes_project_json(tmp_path: Path) -> None:
    source = tmp_path / "demo.entree"
    source.write_text(SOURCE, encoding="utf-8")
    output = tmp_path / "out" / "project.json"

    exit_code = main([str(source), str(output)])

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["name"] == "cli demo"
    assert [message["name"] for message in data["messages"]] == ["start"]
    (obj,) = data["objects"]
    assert obj["selectedPictureId"] == obj["sprite"]["pictures"][0]["id"]
    assert json.loads(obj["script"])[0][0]["type"] == "when_run_button_click"


def test_main_indents_when_asked(tmp_path: Path) -> None:
    source = tmp_path / "demo.entree"
    source.write_text(SOURCE, encoding="utf-8")
    output = tmp_path / "project.json"

    main([str(source), str(output), "--indent", "2", "--verbose"])

    assert output.read_text(encoding="utf-8").startswith('{\n  "name": "cli demo"')


def test_main_rejects_missing_input(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        main([str(tmp_path / "missing.entree"), str(tmp_path / "out.json")])
