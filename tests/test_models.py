import pytest

from topicgraph.models import Module, ModuleCollection, Topic


def test_add_module_assigns_sequential_ids(empty_collection: ModuleCollection) -> None:
    intro = empty_collection.add_module("Intro")
    core = empty_collection.add_module("Core")
    assert intro.id == 1
    assert core.id == 2
    assert [module.name for module in empty_collection] == ["Intro", "Core"]


def test_add_module_uses_max_existing_id() -> None:
    collection = ModuleCollection([Module(id=7, name="Late"), Module(id=3, name="Early")])
    assert collection.add_module("New").id == 8


def test_add_module_allows_duplicate_names(empty_collection: ModuleCollection) -> None:
    first = empty_collection.add_module("Same")
    second = empty_collection.add_module("Same")
    assert first.id != second.id
    assert empty_collection.num_modules() == 2


def test_topic_ids_are_unique_across_modules(sample_collection: ModuleCollection) -> None:
    topic = sample_collection.add_topic_to_module("w", "A")
    assert topic is not None
    assert topic.id == 4

    other = sample_collection.add_topic_to_module("v", sample_collection.modules[1])
    assert other is not None
    assert other.id == 5

    ids = [topic.id for _, topic in sample_collection.iter_topics()]
    assert len(ids) == len(set(ids))


def test_first_topic_in_empty_collection_gets_id_one(empty_collection: ModuleCollection) -> None:
    module = empty_collection.add_module("Intro")
    topic = empty_collection.add_topic_to_module("basics", module)
    assert topic is not None
    assert topic.id == 1


def test_add_topic_to_unknown_module_returns_none(sample_collection: ModuleCollection) -> None:
    before = sample_collection.num_topics()
    assert sample_collection.add_topic_to_module("t", "Missing") is None
    assert sample_collection.num_topics() == before


def test_topic_names_are_unique_within_module(sample_collection: ModuleCollection) -> None:
    with pytest.raises(ValueError, match="already exists"):
        sample_collection.add_topic_to_module("x", "A")
    # Same name in another module is fine.
    assert sample_collection.add_topic_to_module("x", "B") is not None


def test_remove_topic_by_id_picks_the_right_duplicate() -> None:
    module = Module(id=1, name="A", topics=[Topic(id=4, name="x"), Topic(id=5, name="x")])
    removed = module.remove_topic_by_id(5)
    assert removed is not None
    assert removed.id == 5
    assert [topic.id for topic in module.topics] == [4]
    assert module.remove_topic_by_id(5) is None


def test_delete_module_is_non_cascading(sample_collection: ModuleCollection) -> None:
    removed = sample_collection.delete_module(1)
    assert removed is not None
    assert removed.name == "A"

    z = sample_collection.topic_by_id(3)
    assert z is not None
    assert z.soft_dependencies == [2]
    assert sample_collection.module_from_topic_id(2) is None
    assert sample_collection.topic_by_id(2) is None


def test_delete_missing_module_is_noop(sample_collection: ModuleCollection) -> None:
    assert sample_collection.delete_module(99) is None
    assert sample_collection.num_modules() == 2


def test_remove_topic_uses_exact_name() -> None:
    module = Module(id=1, name="A")
    module.add_topic("basics", 1)
    assert module.remove_topic("bas") is None
    removed = module.remove_topic("basics")
    assert removed is not None
    assert removed.id == 1
    assert module.num_topics() == 0


def test_dependency_edits_are_append_only() -> None:
    topic = Topic(id=1, name="x")
    topic.add_dependency(2)
    topic.add_dependency(2)
    topic.add_dependency(1)
    topic.add_soft_dependency(99)
    assert topic.dependencies == [2, 2, 1]
    assert topic.num_dependencies() == 3
    assert topic.num_soft_dependencies() == 1

    assert topic.remove_dependency(2) is True
    assert topic.dependencies == [2, 1]
    assert topic.remove_dependency(42) is False
    assert topic.remove_soft_dependency(99) is True
    assert topic.soft_dependencies == []


def test_module_lookup_prefers_exact_then_prefix() -> None:
    collection = ModuleCollection([Module(id=1, name="Core Advanced"), Module(id=2, name="Core")])
    exact = collection.module_by_name("Core")
    assert exact is not None
    assert exact.id == 2
    prefixed = collection.module_by_name("Core A")
    assert prefixed is not None
    assert prefixed.id == 1
    assert collection.module_by_name("") is None
    assert collection.module_by_name("Nope") is None


def test_topic_lookup_prefix(sample_collection: ModuleCollection) -> None:
    module = sample_collection.modules[0]
    module.add_topic("xylophone", 10)
    x = module.topic_by_name("x")
    assert x is not None
    assert x.id == 1
    xy = module.topic_by_name("xy")
    assert xy is not None
    assert xy.id == 10


def test_module_from_topic_id(sample_collection: ModuleCollection) -> None:
    owner = sample_collection.module_from_topic_id(3)
    assert owner is not None
    assert owner.name == "B"
    assert sample_collection.module_from_topic_id(404) is None


def test_dangling_dependencies_and_prune(sample_collection: ModuleCollection) -> None:
    assert sample_collection.dangling_dependencies() == []

    z = sample_collection.topic_by_id(3)
    assert z is not None
    z.add_dependency(50)
    a = sample_collection.modules[0]
    a.remove_topic("y")

    dangling = sample_collection.dangling_dependencies()
    assert {(item.topic_id, item.target_id, item.soft) for item in dangling} == {(3, 50, False), (3, 2, True)}

    assert sample_collection.prune_dangling_dependencies() == 2
    assert z.dependencies == []
    assert z.soft_dependencies == []
    assert sample_collection.dangling_dependencies() == []


def test_describe_lists_topics(sample_collection: ModuleCollection) -> None:
    text = sample_collection.modules[0].describe()
    assert text.splitlines()[0] == "ModuleName: A ID: 1"
    assert "Name: y ID: 2 Deps: [1] SoftDeps: []" in text
