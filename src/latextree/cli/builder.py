#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/cli/builder.py
"""Argument parser for the latextree command line."""

from __future__ import annotations

import argparse

from latextree.logging_utils import default_log_level

EPILOG = r"""
Examples:
  latextree -f paper.tex                 Print the tree dump of a file
  latextree -f paper.tex --latex         Regenerate the source from the tree
  latextree -f paper.tex --metadata --format yaml
  latextree '\section{Intro} text' -r 'Intro'
  latextree -q -f a.tex -f b.tex         One status line per file
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``latextree`` command."""
    parser = argparse.ArgumentParser(
        prog="latextree",
        description="Parse LaTeX sources into lossless parse trees and inspect them.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", nargs="*", help="LaTeX source text to parse")
    parser.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        default=[],
        metavar="FILE",
        help="LaTeX file to parse (repeatable; '-' reads standard input)",
    )

    output = parser.add_argument_group("output")
    modes = output.add_mutually_exclusive_group()
    modes.add_argument("--latex", action="store_true", help="Print the LaTeX regenerated from the tree")
    modes.add_argument("--json", action="store_true", help="Print the tree as JSON")
    modes.add_argument("--metadata", action="store_true", help="Print document metadata")
    output.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Metadata output format (default: json)",
    )
    output.add_argument("-r", "--regex", metavar="PATTERN", help="Also report the first match of PATTERN")
    verbosity = output.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Print one status line per input")
    verbosity.add_argument("-m", "--mute", action="store_true", help="Print nothing; report through the exit status")
    output.add_argument("--rich", action="store_true", help="Use Rich formatting when writing to a terminal")

    settings = parser.add_argument_group("configuration")
    settings.add_argument("--config", metavar="PATH", help="Configuration file (default: discovered)")
    settings.add_argument("--no-config", action="store_true", help="Ignore configuration files")
    settings.add_argument("--at-letter", action="store_true", default=None, help="Treat '@' as a letter in commands")
    settings.add_argument(
        "--normalize-newlines",
        action="store_true",
        default=None,
        help="Convert CRLF and CR line endings to LF before parsing",
    )

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=default_log_level(),
        help="Logging level (default: $LATEXTREE_LOG_LEVEL or WARNING)",
    )
    logging_group.add_argument("--log-file", metavar="PATH", help="Also write log output to PATH")
    logging_group.add_argument(
        "--trace",
        action="store_true",
        help="Debug logging with timestamps; print partial trees on parse errors",
    )
    return parser
