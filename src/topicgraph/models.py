"""Core domain models for the module/topic dependency catalog."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Protocol, TypeVar


class _Named(Protocol):
    name: str


NamedT = TypeVar("NamedT", bound=_Named)


def _lookup_by_name(items: Iterable[NamedT], query: str) -> NamedT | None:
    """Return the exact name match, else the first item whose name starts with query."""
    if not query:
        return None
    prefix_match: NamedT | None = None
    for item in items:
        if item.name == query:
            return item
        if prefix_match is None and item.name.startswith(query):
            prefix_match = item
    return prefix_match


@dataclass
class Topic:
    """One unit of content, owned by exactly one module.

    Dependency lists hold raw topic IDs. A target may live in any module, or in
    none at all; unresolved targets are a valid state and are resolved lazily.
    """

    id: int
    name: str
    dependencies: list[int] = field(default_factory=list)
    soft_dependencies: list[int] = field(default_factory=list)

    def add_dependency(self, topic_id: int) -> None:
        self.dependencies.append(topic_id)

    def add_soft_dependency(self, topic_id: int) -> None:
        self.soft_dependencies.append(topic_id)

    def remove_dependency(self, topic_id: int) -> bool:
        """Remove first occurrence of a hard dependency."""
        if topic_id in self.dependencies:
            self.dependencies.remove(topic_id)
            return True
        return False

    def remove_soft_dependency(self, topic_id: int) -> bool:
        """Remove first occurrence of a soft dependency."""
        if topic_id in self.soft_dependencies:
            self.soft_dependencies.remove(topic_id)
            return True
        return False

    def num_dependencies(self) -> int:
        return len(self.dependencies)

    def num_soft_dependencies(self) -> int:
        return len(self.soft_dependencies)

    def describe(self) -> str:
        """Return one-line summary of this topic."""
        deps = ", ".join(str(dep) for dep in self.dependencies)
        soft = ", ".join(str(dep) for dep in self.soft_dependencies)
        return f"Name: {self.name} ID: {self.id} Deps: [{deps}] SoftDeps: [{soft}]"


@dataclass
class Module:
    """Named curriculum unit holding an ordered list of topics."""

    id: int
    name: str
    topics: list[Topic] = field(default_factory=list)

    def num_topics(self) -> int:
        return len(self.topics)

    def add_topic(self, name: str, topic_id: int) -> Topic:
        """Append a new topic; topic names are unique within a module."""
        if any(topic.name == name for topic in self.topics):
            raise ValueError(f"Topic '{name}' already exists in module '{self.name}'.")
        topic = Topic(id=topic_id, name=name)
        self.topics.append(topic)
        return topic

    def remove_topic(self, name: str) -> Topic | None:
        """Remove the first topic whose name matches exactly.

        Edges elsewhere that point at the removed topic are left in place.
        """
        for index, topic in enumerate(self.topics):
            if topic.name == name:
                return self.topics.pop(index)
        return None

    def remove_topic_by_id(self, topic_id: int) -> Topic | None:
        for index, topic in enumerate(self.topics):
            if topic.id == topic_id:
                return self.topics.pop(index)
        return None

    def find_topic(self, topic_id: int) -> Topic | None:
        for topic in self.topics:
            if topic.id == topic_id:
                return topic
        return None

    def topic_by_name(self, query: str) -> Topic | None:
        """Find topic by exact name, falling back to the first prefix match."""
        return _lookup_by_name(self.topics, query)

    def describe(self) -> str:
        """Return multi-line summary of this module and its topics."""
        lines = [f"ModuleName: {self.name} ID: {self.id}", "  Topics:"]
        lines.extend(f"    - {topic.describe()}" for topic in self.topics)
        return "\n".join(lines)


@dataclass(frozen=True)
class DanglingDependency:
    """Dependency edge whose target ID does not resolve to any topic."""

    module_id: int
    topic_id: int
    target_id: int
    soft: bool


@dataclass
class ModuleCollection:
    """Ordered set of modules forming one catalog.

    Module IDs are unique across the collection and topic IDs are unique across
    all modules. There is deliberately no empty default: a collection is built
    from an explicit module list (normally by the document loader) and then
    changed through the mutation methods below.
    """

    modules: list[Module]

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def num_modules(self) -> int:
        return len(self.modules)

    def num_topics(self) -> int:
        return sum(module.num_topics() for module in self.modules)

    def iter_topics(self) -> Iterator[tuple[Module, Topic]]:
        """Yield every (module, topic) pair in display order."""
        for module in self.modules:
            for topic in module.topics:
                yield module, topic

    def next_free_module_id(self) -> int:
        return max((module.id for module in self.modules), default=0) + 1

    def next_free_topic_id(self) -> int:
        return max((topic.id for _, topic in self.iter_topics()), default=0) + 1

    def module_by_id(self, module_id: int) -> Module | None:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def module_by_name(self, query: str) -> Module | None:
        """Find module by exact name, falling back to the first prefix match."""
        return _lookup_by_name(self.modules, query)

    def module_from_topic_id(self, topic_id: int) -> Module | None:
        """Return the module owning the topic, or None for unknown IDs."""
        for module in self.modules:
            if module.find_topic(topic_id) is not None:
                return module
        return None

    def topic_by_id(self, topic_id: int) -> Topic | None:
        for _, topic in self.iter_topics():
            if topic.id == topic_id:
                return topic
        return None

    def add_module(self, name: str) -> Module:
        """Append a new module; module names are not checked for collisions."""
        module = Module(id=self.next_free_module_id(), name=name)
        self.modules.append(module)
        return module

    def delete_module(self, module_id: int) -> Module | None:
        """Remove first module with the ID; edges into its topics are kept."""
        for index, module in enumerate(self.modules):
            if module.id == module_id:
                return self.modules.pop(index)
        return None

    def add_topic_to_module(self, name: str, module: Module | str) -> Topic | None:
        """Create topic with a collection-wide fresh ID.

        ``module`` is either an owned module or a name to look up. Returns None
        when the name does not resolve.
        """
        target = self.module_by_name(module) if isinstance(module, str) else module
        if target is None:
            return None
        return target.add_topic(name, self.next_free_topic_id())

    def dangling_dependencies(self) -> list[DanglingDependency]:
        """List every hard and soft edge whose target ID is unknown."""
        known = {topic.id for _, topic in self.iter_topics()}
        dangling: list[DanglingDependency] = []
        for module, topic in self.iter_topics():
            for dep in topic.dependencies:
                if dep not in known:
                    dangling.append(DanglingDependency(module.id, topic.id, dep, soft=False))
            for dep in topic.soft_dependencies:
                if dep not in known:
                    dangling.append(DanglingDependency(module.id, topic.id, dep, soft=True))
        return dangling

    def prune_dangling_dependencies(self) -> int:
        """Drop edges pointing at unknown topics; return how many were removed.

        Deletions never call this on their own.
        """
        known = {topic.id for _, topic in self.iter_topics()}
        removed = 0
        for _, topic in self.iter_topics():
            kept = [dep for dep in topic.dependencies if dep in known]
            kept_soft = [dep for dep in topic.soft_dependencies if dep in known]
            removed += len(topic.dependencies) - len(kept) + len(topic.soft_dependencies) - len(kept_soft)
            topic.dependencies[:] = kept
            topic.soft_dependencies[:] = kept_soft
        return removed
