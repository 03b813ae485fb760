from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from topicgraph.document import collection_from_dict  # noqa: E402
from topicgraph.models import ModuleCollection  # noqa: E402

SAMPLE_YAML = """\
Modules:
  - name: A
    mid: 1
    sub:
      - name: x
        tid: 1
      - name: y
        tid: 2
        dep: [1]
  - name: B
    mid: 2
    sub:
      - name: z
        tid: 3
        softdep: [2]
"""


def _tmp_path_fixture() -> Iterator[Path]:
    """Per-test scratch directory under ``.tmp_pytest/`` in the project root.

    The CLI and codec tests write YAML, DOT and HTML files next to each other
    and some of them assert that an output file was *not* created. A fresh
    directory per test keeps those checks independent of earlier runs. The
    base is removed again once the last test directory is gone.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Two modules: A(x, y -> x) and B(z ~> y)."""
    path = tmp_path / "graph.yaml"
    path.write_text(SAMPLE_YAML, encoding="utf-8")
    return path


@pytest.fixture
def sample_collection() -> ModuleCollection:
    return collection_from_dict(
        {
            "Modules": [
                {
                    "name": "A",
                    "mid": 1,
                    "sub": [{"name": "x", "tid": 1}, {"name": "y", "tid": 2, "dep": [1]}],
                },
                {"name": "B", "mid": 2, "sub": [{"name": "z", "tid": 3, "softdep": [2]}]},
            ]
        }
    )


@pytest.fixture
def empty_collection() -> ModuleCollection:
    return collection_from_dict({"Modules": []})
