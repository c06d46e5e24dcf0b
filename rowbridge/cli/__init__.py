"""Command line interface (``python -m rowbridge.cli`` / ``rowbridge``)."""

from __future__ import annotations

__all__ = ["main"]


def main(argv: list[str] | None = None) -> int:
    # __main__ を遅延 import する (python -m 実行時の二重 import を避ける)
    from .__main__ import main as _main

    return _main(argv)
