from __future__ import annotations

"""
Minimal valid .entree program example:

project name="demo" {
  scene name="Scene 1" {
    sprite name="bot" width=144 height=246 visible {
      picture name="walk1" fileurl="/media/bot1.svg" width=144 height=246 selected
      variable name="score" value=0
      statement {
        script type="when_run_button_click"
        script type="repeat_basic" {
          param value=10
          statement {
            script type="move_direction" {
              param value=10
            }
          }
        }
      }
    }
  }
}

Usage:
python compiler.py input.entree output.json
python compiler.py input.entree output.json --indent 2 --verbose
"""

import argparse
import json
import logging
from pathlib import Path

from document import ProjectDocument
from errors import StructuralError
from handlers import TreeEvaluator
from ids import IdGenerator, default_generator
from nodes import Node
from parser import Parser
from scope import Scope

logger = logging.getLogger(__name__)


def compile_tree(tree: Node, ids: IdGenerator | None = None) -> ProjectDocument:
    """Compile a node tree into a project document.

    The tree is evaluated once against an empty document handle. Afterwards the
    document is serialized once and the result thrown away, which reads every
    lazy field (object scripts, named references) so that a failed lookup is
    raised here instead of by whoever reads the document later.
    """
    document = ProjectDocument()
    evaluator = TreeEvaluator(ids=ids if ids is not None else default_generator())
    logger.debug("compiling %s tree", getattr(tree, "kind", type(tree).__name__))
    evaluator.evaluate(tree, Scope(root=document))

    if not document.is_populated:
        raise StructuralError("Project", "a root", "missing root Project")
    if len(document.populated_by) > 1:
        raise StructuralError("Project", "a single root", "duplicate root Project")
    _check_selected_pictures(document)

    json.dumps(document.to_json())
    logger.debug(
        "compiled project %r: %d node(s), %d scene(s), %d object(s)",
        document.name,
        len(evaluator.arena),
        len(document.scenes),
        len(document.objects),
    )
    return document


def compile_source(source_text: str, ids: IdGenerator | None = None) -> ProjectDocument:
    tree = Parser.from_source(source_text)
    return compile_tree(tree, ids=ids)


def compile_file(input_path: Path, output_path: Path, indent: int | None = None) -> ProjectDocument:
    document = compile_source(input_path.read_text(encoding="utf-8"))
    write_project_json(document=document, output_path=output_path, indent=indent)
    return document


def write_project_json(document: ProjectDocument, output_path: Path, indent: int | None = None) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(document.to_json(), ensure_ascii=False, indent=indent), encoding="utf-8")


def _check_selected_pictures(document: ProjectDocument) -> None:
    for obj in document.objects:
        if obj.selected_picture_id is None:
            continue
        if not any(picture.id == obj.selected_picture_id for picture in obj.pictures):
            raise StructuralError(
                "Object",
                "a selected Picture",
                f"Object '{obj.name}' selects picture '{obj.selected_picture_id}' which it does not contain",
            )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile an .entree node tree into an Entry project JSON file")
    parser.add_argument("input", type=Path, help="Path to input .entree file")
    parser.add_argument("output", type=Path, help="Path to output project .json file")
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Pretty-print the JSON with this many spaces of indentation (compact by default).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every evaluated node.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    input_path: Path = args.input
    output_path: Path = args.output

    if not input_path.exists() or not input_path.is_file():
        raise FileNotFoundError(f"Input file not found: '{input_path}'")

    document = compile_file(input_path=input_path, output_path=output_path, indent=args.indent)
    logger.info("wrote project %r to %s", document.name, output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
