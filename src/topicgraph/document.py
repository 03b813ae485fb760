"""Load and store module collections as YAML documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .models import Module, ModuleCollection, Topic

logger = logging.getLogger(__name__)

MODULES_KEY = "Modules"


class DocumentError(ValueError):
    """Raised when a document cannot be parsed into a module collection."""

    def __init__(self, source: Path | str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class _FlowList(list[int]):
    """ID list that is emitted inline, e.g. ``dep: [1, 2]``."""


class _CollectionDumper(yaml.SafeDumper):
    """Safe dumper that indents nested sequences under their key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        super().increase_indent(flow, False)


def _represent_flow_list(dumper: yaml.SafeDumper, data: _FlowList) -> yaml.Node:
    return dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=True)


_CollectionDumper.add_representer(_FlowList, _represent_flow_list)

_STR_TAG = "tag:yaml.org,2002:str"
_NULL_TAG = "tag:yaml.org,2002:null"


class _CollectionLoader(yaml.SafeLoader):
    """Safe loader that keeps plain ``name`` scalars exactly as written.

    Without this ``name: 3.10`` would load as the float 3.1 and ``name: yes``
    as True, so saving the collection again would rewrite the name.
    """

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        for key_node, value_node in node.value:
            if (
                isinstance(key_node, yaml.ScalarNode)
                and key_node.value == "name"
                and isinstance(value_node, yaml.ScalarNode)
                and value_node.tag != _NULL_TAG
            ):
                value_node.tag = _STR_TAG
        return super().construct_mapping(node, deep=deep)


def _require_int(source: Path | str, raw: dict[str, Any], key: str, where: str) -> int:
    """Return an integer field, rejecting booleans and missing values."""
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocumentError(source, f"{where} needs an integer '{key}', got {value!r}.")
    return value


def _require_name(source: Path | str, raw: dict[str, Any], where: str) -> str:
    value = raw.get("name")
    if value is None or isinstance(value, (dict, list)):
        raise DocumentError(source, f"{where} needs a scalar 'name', got {value!r}.")
    return str(value)


def _id_list(source: Path | str, raw: dict[str, Any], key: str, where: str) -> list[int]:
    """Read an optional list of topic IDs."""
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(source, f"{where} field '{key}' must be a sequence.")
    ids: list[int] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            raise DocumentError(source, f"{where} field '{key}' holds non-integer {item!r}.")
        ids.append(item)
    return ids


def _topic_from_dict(source: Path | str, module_name: str, raw: object) -> Topic:
    """Build a topic from one ``sub`` entry."""
    if not isinstance(raw, dict):
        raise DocumentError(source, f"Topic entry in module '{module_name}' must be a mapping.")
    name = _require_name(source, raw, f"Topic in module '{module_name}'")
    where = f"Topic '{name}'"
    return Topic(
        id=_require_int(source, raw, "tid", where),
        name=name,
        dependencies=_id_list(source, raw, "dep", where),
        soft_dependencies=_id_list(source, raw, "softdep", where),
    )


def _module_from_dict(source: Path | str, raw: object) -> Module:
    """Build a module from one ``Modules`` entry."""
    if not isinstance(raw, dict):
        raise DocumentError(source, "Module entry must be a mapping.")
    name = _require_name(source, raw, "Module")
    module_id = _require_int(source, raw, "mid", f"Module '{name}'")
    sub = raw.get("sub")
    if sub is None:
        sub = []
    if not isinstance(sub, list):
        raise DocumentError(source, f"Module '{name}' field 'sub' must be a sequence.")
    # Topics are appended directly: documents are taken as written.
    topics = [_topic_from_dict(source, name, item) for item in sub]
    return Module(id=module_id, name=name, topics=topics)


def collection_from_dict(raw: object, source: Path | str = "<document>") -> ModuleCollection:
    """Build a collection from an already parsed document."""
    if not isinstance(raw, dict):
        raise DocumentError(source, "Document root must be a mapping.")
    modules_raw = raw.get(MODULES_KEY)
    if not isinstance(modules_raw, list):
        raise DocumentError(source, f"Top-level '{MODULES_KEY}' is missing or not a sequence.")
    return ModuleCollection([_module_from_dict(source, item) for item in modules_raw])


def load_collection(path: Path | str) -> ModuleCollection:
    """Read and parse a whole YAML document into a collection."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DocumentError(path, exc.strerror or str(exc)) from exc
    # PyYAML decodes the bytes itself; a bad encoding raises ReaderError.
    try:
        raw = yaml.load(data, Loader=_CollectionLoader)
    except yaml.YAMLError as exc:
        raise DocumentError(path, str(exc)) from exc
    collection = collection_from_dict(raw, path)
    logger.info("Loaded %d modules and %d topics from %s", collection.num_modules(), collection.num_topics(), path)
    return collection


def _topic_to_dict(topic: Topic) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": topic.name, "tid": topic.id}
    if topic.dependencies:
        entry["dep"] = _FlowList(topic.dependencies)
    if topic.soft_dependencies:
        entry["softdep"] = _FlowList(topic.soft_dependencies)
    return entry


def collection_to_dict(collection: ModuleCollection) -> dict[str, Any]:
    """Return the document structure for a collection, omitting empty dep lists."""
    return {
        MODULES_KEY: [
            {
                "name": module.name,
                "mid": module.id,
                "sub": [_topic_to_dict(topic) for topic in module.topics],
            }
            for module in collection.modules
        ]
    }


def dump_collection(collection: ModuleCollection) -> str:
    """Serialize a collection to YAML text."""
    return yaml.dump(
        collection_to_dict(collection),
        Dumper=_CollectionDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def store_collection(collection: ModuleCollection, path: Path | str) -> None:
    """Write the whole collection to ``path`` in a single write."""
    path = Path(path)
    text = dump_collection(collection)
    path.write_text(text, encoding="utf-8")
    logger.info("Stored %d modules into %s", collection.num_modules(), path)
