"""HTML fragments for module overviews and Graphviz HTML-like labels."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from .models import Module, ModuleCollection

logger = logging.getLogger(__name__)

DEFAULT_MAX_COLUMNS = 3


def generate_html_column(module: Module) -> str:
    """Render one table cell: bold module name followed by its topic list."""
    items = "".join(f"<li>{html.escape(topic.name)}</li>" for topic in module.topics)
    return f"<td><b>{html.escape(module.name)}</b><ul>{items}</ul></td>"


def generate_html_table(collection: ModuleCollection, max_columns: int = DEFAULT_MAX_COLUMNS) -> str:
    """Lay modules out in rows of at most ``max_columns`` cells."""
    if max_columns < 1:
        raise ValueError(f"max_columns must be at least 1, got {max_columns}.")
    rows: list[str] = []
    cells: list[str] = []
    for module in collection.modules:
        cells.append(generate_html_column(module))
        if len(cells) == max_columns:
            rows.append("<tr>" + "".join(cells) + "</tr>")
            cells = []
    if cells:
        rows.append("<tr>" + "".join(cells) + "</tr>")
    return "<table>\n" + "".join(f"{row}\n" for row in rows) + "</table>\n"


def generate_dot_html_table(module: Module) -> str:
    """Render a module card for use inside a Graphviz ``label=<...>``.

    Every topic row carries the topic ID as its ``port`` so edges can attach
    to ``<module id>:<topic id>``.
    """
    rows = [f'<tr><td border="1">{html.escape(module.name)}</td></tr>']
    for topic in module.topics:
        rows.append(f'<tr><td border="0" align="left" port="{topic.id}">{html.escape(topic.name)}</td></tr>')
    return '<table border="0">' + "".join(rows) + "</table>"


def write_html_table(
    collection: ModuleCollection, output_path: Path | str, max_columns: int = DEFAULT_MAX_COLUMNS
) -> str:
    """Render the module table and write it to ``output_path``."""
    path = Path(output_path)
    text = generate_html_table(collection, max_columns)
    logger.info("Storing HTML table into %s", path)
    path.write_text(text, encoding="utf-8")
    return text
