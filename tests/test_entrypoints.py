import sys

import pytest

import topicgraph.__main__ as module_main


def test_module_entrypoint_passes_process_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(argv: list[str]) -> int:
        seen["argv"] = argv
        return 1

    monkeypatch.setattr(module_main, "run", fake_run)
    monkeypatch.setattr(sys, "argv", ["topicgraph", "graph", "--output", "x.dot"])
    with pytest.raises(SystemExit) as excinfo:
        module_main.main()
    assert excinfo.value.code == 1
    assert seen["argv"] == ["graph", "--output", "x.dot"]
