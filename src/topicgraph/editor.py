"""Command vocabulary for editing a module collection.

References take the forms ``MODULE``, ``MODULE:TOPIC`` and
``MODULE:TOPIC -> MODULE:TOPIC`` (``~>`` for a soft dependency). A reference
made only of digits is looked up as an ID, anything else as a name.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import Module, ModuleCollection, Topic

PrintFn = Callable[[str], None]

HARD_ARROW = "->"
SOFT_ARROW = "~>"
_DEPENDENCY_RE = re.compile(r"^\s*([^:]*):(.*?)\s+(->|~>)\s+([^:]*):(.*?)\s*$")


class CommandError(ValueError):
    """Raised when a command cannot be applied; the collection is unchanged."""


@dataclass(frozen=True)
class TopicRef:
    """Resolved ``MODULE:TOPIC`` reference."""

    module: Module
    topic: Topic


@dataclass(frozen=True)
class DependencyRef:
    """Resolved ``SOURCE -> TARGET`` reference."""

    source: TopicRef
    target: TopicRef
    soft: bool

    @property
    def arrow(self) -> str:
        return SOFT_ARROW if self.soft else HARD_ARROW


@dataclass(frozen=True)
class DependencyListing:
    """Dependencies of one topic, with targets resolved where possible."""

    ref: TopicRef
    hard: tuple[tuple[int, Topic | None], ...]
    soft: tuple[tuple[int, Topic | None], ...]


def is_number(text: str) -> bool:
    """Return True for a non-empty string of ASCII digits."""
    return bool(text) and text.isascii() and text.isdigit()


class CollectionEditor:
    """Resolves user references and applies mutations to a collection."""

    def __init__(self, collection: ModuleCollection) -> None:
        self.collection = collection

    def resolve_module(self, ref: str) -> Module:
        ref = ref.strip()
        module = self.collection.module_by_id(int(ref)) if is_number(ref) else self.collection.module_by_name(ref)
        if module is None:
            raise CommandError(f'Could not find module "{ref}"')
        return module

    def resolve_topic(self, ref: str) -> TopicRef:
        """Resolve ``MODULE:TOPIC``; the topic is searched in that module only."""
        module_ref, sep, topic_ref = ref.strip().partition(":")
        module = self.resolve_module(module_ref)
        if not sep:
            raise CommandError("Could not find topic name.")
        topic_ref = topic_ref.strip()
        topic = module.find_topic(int(topic_ref)) if is_number(topic_ref) else module.topic_by_name(topic_ref)
        if topic is None:
            raise CommandError(f'Could not find topic "{topic_ref}" in module "{module_ref.strip()}"')
        return TopicRef(module, topic)

    def resolve_dependency(self, text: str) -> DependencyRef:
        match = _DEPENDENCY_RE.match(text)
        if match is None:
            raise CommandError("Command input was wrongly formatted.")
        source_module, source_topic, arrow, target_module, target_topic = match.groups()
        source = self.resolve_topic(f"{source_module}:{source_topic}")
        target = self.resolve_topic(f"{target_module}:{target_topic}")
        return DependencyRef(source=source, target=target, soft=arrow == SOFT_ARROW)

    def list_modules(self) -> list[Module]:
        return list(self.collection.modules)

    def list_topics(self, ref: str) -> Module:
        return self.resolve_module(ref)

    def list_dependencies(self, ref: str) -> DependencyListing:
        """Resolve a topic and pair each dependency ID with its topic, if any."""
        resolved = self.resolve_topic(ref)
        topic = resolved.topic
        return DependencyListing(
            ref=resolved,
            hard=tuple((dep, self.collection.topic_by_id(dep)) for dep in topic.dependencies),
            soft=tuple((dep, self.collection.topic_by_id(dep)) for dep in topic.soft_dependencies),
        )

    def add_module(self, name: str) -> Module:
        name = name.strip()
        if not name:
            raise CommandError("Module name is required.")
        return self.collection.add_module(name)

    def delete_module(self, ref: str) -> Module:
        module = self.resolve_module(ref)
        self.collection.delete_module(module.id)
        return module

    def add_topic(self, text: str) -> TopicRef:
        module_ref, sep, topic_name = text.partition(":")
        topic_name = topic_name.strip()
        if not sep or not topic_name:
            raise CommandError("Input was wrongly formatted.")
        module = self.resolve_module(module_ref)
        try:
            topic = self.collection.add_topic_to_module(topic_name, module)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        if topic is None:
            raise CommandError(f'Could not find module "{module_ref.strip()}"')
        return TopicRef(module, topic)

    def delete_topic(self, ref: str) -> TopicRef:
        resolved = self.resolve_topic(ref)
        resolved.module.remove_topic_by_id(resolved.topic.id)
        return resolved

    def add_dependency(self, text: str) -> DependencyRef:
        dep = self.resolve_dependency(text)
        if dep.soft:
            dep.source.topic.add_soft_dependency(dep.target.topic.id)
        else:
            dep.source.topic.add_dependency(dep.target.topic.id)
        return dep

    def delete_dependency(self, text: str) -> DependencyRef:
        dep = self.resolve_dependency(text)
        if dep.soft:
            removed = dep.source.topic.remove_soft_dependency(dep.target.topic.id)
        else:
            removed = dep.source.topic.remove_dependency(dep.target.topic.id)
        if not removed:
            raise CommandError(
                f"No dependency {dep.source.topic.name} {dep.arrow} {dep.target.topic.name} to remove."
            )
        return dep


def _label(name: str, entity_id: int) -> str:
    return f"{name}  (ID: {entity_id})"


def _handle_list_modules(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    print_fn("Found the following modules:")
    for module in editor.list_modules():
        print_fn(f"Name: {_label(module.name, module.id)}")


def _handle_list_topics(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    module = editor.list_topics(args)
    print_fn(f"Found the following topics for {module.name}:")
    for topic in module.topics:
        print_fn(f"Name: {_label(topic.name, topic.id)}")


def _format_target(dep: int, topic: Topic | None) -> str:
    if topic is None:
        return f"{dep} (unknown topic)"
    return _label(topic.name, dep)


def _handle_list_dependencies(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    listing = editor.list_dependencies(args)
    name = listing.ref.topic.name
    print_fn(f"Found the following dependencies for {name}")
    for dep, topic in listing.hard:
        print_fn(f"{HARD_ARROW} {_format_target(dep, topic)}")
    print_fn(f"Found the following soft dependencies for {name}")
    for dep, topic in listing.soft:
        print_fn(f"{SOFT_ARROW} {_format_target(dep, topic)}")


def _handle_add_module(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    module = editor.add_module(args)
    print_fn(f"Created new module: {_label(module.name, module.id)}")


def _handle_delete_module(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    module = editor.delete_module(args)
    print_fn(f"Deleted module: {_label(module.name, module.id)}")


def _handle_add_topic(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    ref = editor.add_topic(args)
    print_fn(f"Created new topic: {_label(ref.topic.name, ref.topic.id)} in module {ref.module.name}")


def _handle_delete_topic(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    ref = editor.delete_topic(args)
    print_fn(f"Deleted topic: {_label(ref.topic.name, ref.topic.id)} out of module {ref.module.name}")


def _handle_add_dependency(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    dep = editor.add_dependency(args)
    kind = "soft dependency" if dep.soft else "dependency"
    print_fn(
        f"Added {kind} from {_label(dep.source.topic.name, dep.source.topic.id)} {dep.arrow} "
        f"{_label(dep.target.topic.name, dep.target.topic.id)}"
    )


def _handle_delete_dependency(editor: CollectionEditor, args: str, print_fn: PrintFn) -> None:
    dep = editor.delete_dependency(args)
    kind = "soft dependency" if dep.soft else "dependency"
    print_fn(
        f"Removed {kind} from {_label(dep.source.topic.name, dep.source.topic.id)} {dep.arrow} "
        f"{_label(dep.target.topic.name, dep.target.topic.id)}"
    )


Handler = Callable[[CollectionEditor, str, PrintFn], None]


@dataclass(frozen=True)
class Command:
    """One entry of the command table."""

    number: int
    name: str
    usage: str
    handler: Handler

    def matches(self, raw: str) -> bool:
        return raw.startswith(str(self.number)) or raw.startswith(self.name)


COMMANDS: tuple[Command, ...] = (
    Command(1, "listModules", "", _handle_list_modules),
    Command(2, "listTopic", "MODULE_NAME", _handle_list_topics),
    Command(3, "listDeps", "MODULE_NAME:TOPIC_NAME", _handle_list_dependencies),
    Command(4, "addModule", "MODULE_NAME", _handle_add_module),
    Command(5, "delModule", "MODULE_NAME", _handle_delete_module),
    Command(6, "addTopic", "MODULE_NAME:TOPIC_NAME", _handle_add_topic),
    Command(7, "delTopic", "MODULE_NAME:TOPIC_NAME", _handle_delete_topic),
    Command(8, "addDep", "MODULE_NAME:TOPIC_NAME -> MODULE_NAME:TOPIC_NAME", _handle_add_dependency),
    Command(9, "delDep", "MODULE_NAME:TOPIC_NAME -> MODULE_NAME:TOPIC_NAME", _handle_delete_dependency),
)
HELP_COMMANDS = ("h", "help")
QUIT_COMMANDS = ("q", "quit")


def help_text() -> str:
    """Return the command overview shown at startup and on ``h``."""
    lines = ["How to modify module/topic structure?"]
    for command in COMMANDS:
        lines.append(f"{command.number}) {command.name:<12} {command.usage}".rstrip())
    lines.extend(
        [
            "q) quit",
            "h) help",
            "",
            "Hints:",
            "  - every NAME can always be replaced by the corresponding ID",
            f"  - dependency arrows ({HARD_ARROW}) can be replaced with {SOFT_ARROW} to indicate soft dependencies",
        ]
    )
    return "\n".join(lines)


def parse_command(raw: str) -> Command | None:
    """Map a raw command word to its table entry by number or name prefix."""
    for command in COMMANDS:
        if command.matches(raw):
            return command
    return None


def dispatch(editor: CollectionEditor, line: str, print_fn: PrintFn) -> bool:
    """Run one command line; return False when the session should end.

    Failed commands are reported through ``print_fn`` and never end the session.
    """
    raw, _, args = line.strip().partition(" ")
    if not raw:
        return True
    command = parse_command(raw)
    if command is None:
        if raw.startswith(HELP_COMMANDS):
            print_fn(help_text())
            return True
        if raw.startswith(QUIT_COMMANDS):
            return False
        print_fn(f"Did not understand command: {raw}")
        print_fn(help_text())
        return True
    try:
        command.handler(editor, args, print_fn)
    except CommandError as exc:
        print_fn(str(exc))
    return True
