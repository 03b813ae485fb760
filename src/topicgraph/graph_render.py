"""Graphviz DOT renderings of a module collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pydot

from .html_render import generate_dot_html_table
from .models import ModuleCollection

logger = logging.getLogger(__name__)

GRAPH_NAME = "main"
DOT_SUFFIXES = {".dot", ".gv"}
SOFT_EDGE_STYLE = "dotted"


@dataclass(frozen=True)
class GraphRender:
    """Built graph plus edge bookkeeping.

    ``skipped_edges`` counts dependencies whose target topic ID is unknown;
    those edges are left out of the graph.
    """

    graph: pydot.Dot
    edges: int
    skipped_edges: int

    def to_string(self) -> str:
        return self.graph.to_string()


def _new_graph() -> pydot.Dot:
    return pydot.Dot(graph_name=GRAPH_NAME, graph_type="digraph")


def build_full_graph(collection: ModuleCollection) -> GraphRender:
    """One cluster per module, one node per topic, one edge per dependency."""
    graph = _new_graph()
    graph.set("pack", "true")
    for module in collection.modules:
        cluster = pydot.Cluster(graph_name=str(module.id), label=module.name)
        cluster.set_node_defaults(shape="Mrecord")
        for topic in module.topics:
            cluster.add_node(pydot.Node(str(topic.id), label=topic.name))
        graph.add_subgraph(cluster)

    edges = 0
    skipped = 0
    for _, topic in collection.iter_topics():
        for dep in topic.dependencies:
            if collection.module_from_topic_id(dep) is None:
                skipped += 1
                continue
            graph.add_edge(pydot.Edge(str(topic.id), str(dep)))
            edges += 1
        for dep in topic.soft_dependencies:
            if collection.module_from_topic_id(dep) is None:
                skipped += 1
                continue
            graph.add_edge(pydot.Edge(str(topic.id), str(dep), style=SOFT_EDGE_STYLE))
            edges += 1

    if skipped:
        logger.debug("Skipped %d dependencies with unknown targets", skipped)
    return GraphRender(graph=graph, edges=edges, skipped_edges=skipped)


def build_html_graph(collection: ModuleCollection, include_dependencies: bool = False) -> GraphRender:
    """One box node per module, labelled with its topic card.

    With ``include_dependencies`` every edge joins topic ports, written as
    ``<module id>:<topic id>``.
    """
    graph = _new_graph()
    for module in collection.modules:
        graph.add_node(pydot.Node(str(module.id), shape="box", label=f"<{generate_dot_html_table(module)}>"))

    edges = 0
    skipped = 0
    if include_dependencies:
        for module, topic in collection.iter_topics():
            source = f"{module.id}:{topic.id}"
            for soft, deps in ((False, topic.dependencies), (True, topic.soft_dependencies)):
                for dep in deps:
                    dep_module = collection.module_from_topic_id(dep)
                    if dep_module is None:
                        skipped += 1
                        continue
                    attrs = {"style": SOFT_EDGE_STYLE} if soft else {}
                    graph.add_edge(pydot.Edge(source, f"{dep_module.id}:{dep}", **attrs))
                    edges += 1

    return GraphRender(graph=graph, edges=edges, skipped_edges=skipped)


def _write_graph(render: GraphRender, output_path: Path | str) -> None:
    path = Path(output_path)
    if path.suffix.lower() not in DOT_SUFFIXES:
        logger.warning("Output filename %s does not have a graphviz extension", path)
    logger.info("Storing graph into %s", path)
    path.write_text(render.to_string(), encoding="utf-8")


def emit_full_graph(collection: ModuleCollection, output_path: Path | str) -> GraphRender:
    """Build the clustered topic graph and write it as DOT."""
    render = build_full_graph(collection)
    _write_graph(render, output_path)
    return render


def emit_html_graph(
    collection: ModuleCollection, output_path: Path | str, include_dependencies: bool = False
) -> GraphRender:
    """Build the module card graph and write it as DOT."""
    render = build_html_graph(collection, include_dependencies)
    _write_graph(render, output_path)
    return render
