import re
from pathlib import Path

import topicgraph


def _declared_version() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    match = re.search(r'^\[project\][^\[]*?^version = "([^"]+)"', pyproject.read_text(encoding="utf-8"), re.M | re.S)
    if match is None:
        raise AssertionError("Could not find [project].version in pyproject.toml")
    return match.group(1)


def test_package_version_matches_pyproject() -> None:
    assert topicgraph.__version__ == _declared_version()


def test_package_exports_models() -> None:
    assert topicgraph.ModuleCollection.__name__ == "ModuleCollection"
    assert {"Module", "ModuleCollection", "Topic"} <= set(topicgraph.__all__)
