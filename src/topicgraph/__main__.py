"""Allow running the CLI as ``python -m topicgraph``."""

from __future__ import annotations

import sys

from .main import run


def main() -> None:
    """Run the CLI with the process arguments."""
    raise SystemExit(run(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover
    main()
