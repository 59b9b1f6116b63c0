"""Formatting of queue contents when the simulation deadlocks."""

from __future__ import annotations

import sys
from typing import Any, Callable, Iterable, TextIO


def format_deadlock(
    entries: Iterable[Any],
    kind_name: str,
    fmtstr: str,
    packing_func: Callable[[Any], tuple],
) -> str:
    """Render each entry of a queue on its own line.

    ``packing_func`` turns an entry into the arguments for ``fmtstr``.
    ``None`` entries, standing for empty slots, are shown as ``empty``.
    """
    items = list(entries)
    if not items:
        return f"{kind_name} empty\n\n"

    def render(entry: Any) -> str:
        if entry is None:
            return "empty"
        return fmtstr.format(*packing_func(entry))

    lines = [f"[{kind_name}] entry: {j:>3} {render(entry)}\n" for j, entry in enumerate(items)]
    return "".join(lines) + "\n"


def print_deadlock(
    entries: Iterable[Any],
    kind_name: str,
    fmtstr: str,
    packing_func: Callable[[Any], tuple],
    file: TextIO | None = None,
) -> None:
    """Write the output of ``format_deadlock`` to ``file`` (standard output by default)."""
    out = sys.stdout if file is None else file
    out.write(format_deadlock(entries, kind_name, fmtstr, packing_func))