#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/cli/output.py
"""Output helpers for the latextree CLI, with optional Rich formatting."""

from __future__ import annotations

import argparse
import sys
from typing import TextIO

from latextree.exceptions import DependencyError


def check_rich_available() -> bool:
    """Check if the Rich library is available.

    Returns
    -------
    bool
        True if Rich is available, False otherwise

    """
    try:
        import rich  # noqa: F401

        return True
    except ImportError:
        return False


def should_use_rich_output(args: argparse.Namespace, raise_on_missing: bool = False, stream: TextIO | None = None) -> bool:
    """Determine if Rich output should be used.

    Rich output is used when ``--rich`` is set, Rich is installed and the
    output stream is a terminal.

    Raises
    ------
    DependencyError
        If ``raise_on_missing`` is set and Rich is not installed

    """
    if not getattr(args, "rich", False):
        return False

    if not check_rich_available():
        if raise_on_missing:
            raise DependencyError(
                "Rich output",
                ["rich"],
                message="Rich output requires the optional 'rich' dependency. Install with: pip install latextree[rich]",
            )
        return False

    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(callable(isatty) and isatty())


def emit(text: str, use_rich: bool = False, language: str | None = None) -> None:
    """Print a block of output, highlighted when Rich output is enabled.

    Parameters
    ----------
    text : str
        Text to print
    use_rich : bool, default False
        Print through a Rich console
    language : str, optional
        Lexer name for syntax highlighting (``latex``, ``json``, ``yaml``)

    """
    if not use_rich:
        print(text)
        return

    from rich.console import Console
    from rich.syntax import Syntax

    console = Console()
    if language:
        console.print(Syntax(text, language, word_wrap=True))
    else:
        console.print(text, markup=False, highlight=False)


def emit_status(label: str, ok: bool, detail: str = "", use_rich: bool = False) -> None:
    """Print a one-line status for an input."""
    status = "OK" if ok else "FAILED"
    line = f"{label}: {status}" + (f" ({detail})" if detail else "")
    if not use_rich:
        print(line)
        return

    from rich.console import Console
    from rich.markup import escape

    color = "green" if ok else "red"
    suffix = f" ({escape(detail)})" if detail else ""
    Console().print(f"{escape(label)}: [{color}]{status}[/{color}]{suffix}", highlight=False)
