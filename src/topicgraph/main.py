"""CLI entrypoint for rendering and editing module/topic graphs."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from .document import DocumentError, load_collection, store_collection
from .editor import CollectionEditor, dispatch, help_text
from .graph_render import emit_full_graph, emit_html_graph
from .html_render import DEFAULT_MAX_COLUMNS, write_html_table
from .models import ModuleCollection

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]

DEFAULT_GRAPH_YAML = "topic_graph.yaml"
DEFAULT_DOT_OUTPUT = "topic_graph.dot"
DEFAULT_HTML_OUTPUT = "topic_modules.html"
SEPARATOR = "--------------------"


def _print_error(message: str) -> None:
    print(message, file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="topicgraph", description="Render and edit module/topic dependency graphs")
    parser.add_argument("--verbose", action="store_true", help="log progress messages")
    subparsers = parser.add_subparsers(dest="command", required=True)

    graph = subparsers.add_parser("graph", help="generate a graphviz dot file")
    graph.add_argument("--graph-yaml", default=DEFAULT_GRAPH_YAML, help="path to the yaml module file")
    graph.add_argument("--output", default=DEFAULT_DOT_OUTPUT, help="filename for the generated dot file")
    graph.add_argument("--html-nodes", action="store_true", help="draw one HTML table node per module")
    graph.add_argument(
        "--dependencies", action="store_true", help="with --html-nodes, also draw topic dependency edges"
    )

    html = subparsers.add_parser("html", help="generate an HTML table of modules and topics")
    html.add_argument("--graph-yaml", default=DEFAULT_GRAPH_YAML, help="path to the yaml module file")
    html.add_argument("--output", default=DEFAULT_HTML_OUTPUT, help="filename for the generated HTML file")
    html.add_argument("--columns", type=int, default=DEFAULT_MAX_COLUMNS, help="modules per table row")

    edit = subparsers.add_parser("edit", help="interactively edit the yaml module file")
    edit.add_argument("--graph-yaml", default=DEFAULT_GRAPH_YAML, help="path to the yaml module file")
    edit.add_argument("--output", default=None, help="filename for the saved yaml file (default: input file)")
    return parser


def run(argv: list[str] | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")

    yaml_path = Path(args.graph_yaml)
    if not yaml_path.exists():
        _print_error("Yaml input file does not exist.")
        return 1

    try:
        collection = load_collection(yaml_path)
    except DocumentError as exc:
        _print_error(f"Syntax error in YAML {yaml_path}")
        _print_error(f"reason: {exc.reason}")
        return 0

    if args.command == "graph":
        if args.html_nodes:
            emit_html_graph(collection, args.output, include_dependencies=args.dependencies)
        else:
            emit_full_graph(collection, args.output)
    elif args.command == "html":
        try:
            write_html_table(collection, args.output, args.columns)
        except ValueError as exc:
            _print_error(str(exc))
            return 2
    else:
        output = Path(args.output) if args.output else yaml_path
        edit_shell(collection, output, input_fn, print_fn)
    return 0


def edit_shell(
    collection: ModuleCollection, output_path: Path, input_fn: InputFn = input, print_fn: PrintFn = print
) -> bool:
    """Run the command loop, then offer to save. Returns True when saved."""
    editor = CollectionEditor(collection)
    print_fn(help_text())
    while True:
        print_fn(f"\n\n{SEPARATOR}")
        try:
            line = input_fn("Enter command: ")
        except EOFError:
            break
        if not dispatch(editor, line, print_fn):
            break

    try:
        answer = input_fn("Save to output file (yes/no)? ").strip()
    except EOFError:
        answer = ""
    if not answer.lower().startswith("y"):
        print_fn("Changes discarded.")
        return False
    store_collection(collection, output_path)
    print_fn(f"Saved {collection.num_modules()} modules to {output_path}")
    return True


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
