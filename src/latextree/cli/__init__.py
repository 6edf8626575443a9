#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/cli/__init__.py
"""Command-line interface for latextree.

Parse LaTeX files or literal sources and print their tree dump, the
regenerated LaTeX, a JSON rendering of the tree, or document metadata.

Examples
--------
Print the tree of a file::

    $ latextree -f paper.tex

Check several files, one status line each::

    $ latextree -q -f a.tex -f b.tex

Exit status is 0 when every input parsed, 1 when an input could not be read
or parsed, and 2 for invalid arguments or configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from latextree.cli.builder import create_parser
from latextree.cli.config import discover_config_file, load_config_file, options_from_config
from latextree.cli.output import emit, emit_status, should_use_rich_output
from latextree.constants import EXIT_PARSE_ERROR, EXIT_SUCCESS, EXIT_USAGE_ERROR
from latextree.exceptions import DependencyError, FileError, ParseError, ValidationError
from latextree.logging_utils import configure_logging
from latextree.metadata import extract_metadata, format_metadata
from latextree.options import ParserOptions
from latextree.parse_tree import ParseTree
from latextree.parser import LatexParser
from latextree.sources import LatexFile
from latextree.tree.serialization import tree_to_json
from latextree.tree.visitors import preview

logger = logging.getLogger(__name__)


@dataclass
class InputItem:
    """One thing to parse: a file path or a literal source string."""

    label: str
    path: Optional[str] = None
    text: Optional[str] = None

    def read(self) -> str:
        """Return the LaTeX text of this input."""
        if self.text is not None:
            return self.text
        if self.path == "-":
            return sys.stdin.read()
        assert self.path is not None
        return LatexFile(self.path).get_contents()


def _collect_inputs(parsed_args: argparse.Namespace) -> list[InputItem]:
    items = [InputItem(label=path, path=path) for path in parsed_args.files]
    for index, text in enumerate(parsed_args.source, start=1):
        items.append(InputItem(label=f"<source {index}>", text=text))
    return items


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    log_level = logging.DEBUG if parsed_args.trace else parsed_args.log_level
    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def build_options(parsed_args: argparse.Namespace) -> ParserOptions:
    """Resolve parser options from the config file and command-line flags.

    Raises
    ------
    argparse.ArgumentTypeError
        If the configuration file cannot be loaded
    ValidationError
        If the configuration holds unknown keys or invalid values

    """
    options = ParserOptions()
    if not parsed_args.no_config:
        config_path = parsed_args.config or discover_config_file()
        if config_path:
            logger.debug("Loading configuration from %s", config_path)
            options = options_from_config(load_config_file(config_path), options)

    overrides = {}
    if parsed_args.at_letter is not None:
        overrides["at_letter"] = parsed_args.at_letter
    if parsed_args.normalize_newlines is not None:
        overrides["normalize_newlines"] = parsed_args.normalize_newlines
    return options.create_updated(**overrides) if overrides else options


def render_output(tree: ParseTree, parsed_args: argparse.Namespace) -> tuple[str, Optional[str]]:
    """Return the text to print for a parsed input and its syntax language."""
    if parsed_args.latex:
        return tree.to_latex(), "latex"
    if parsed_args.json:
        return tree_to_json(tree.root, indent=2), "json"
    if parsed_args.metadata:
        return format_metadata(extract_metadata(tree), parsed_args.format).rstrip("\n"), parsed_args.format
    return tree.to_tree_string(), None


def describe_match(tree: ParseTree, pattern: str) -> str:
    """Describe the first match of ``pattern`` in ``tree``."""
    match = tree.search(pattern)
    if match is None:
        return f"No match for {pattern!r}"
    node = match.first_node
    return (
        f'Match "{preview(match.string)}" at [{match.start}, {match.end}) '
        f"in {node.kind.value} on line {node.line_number}"
    )


def process_item(item: InputItem, parser: LatexParser, parsed_args: argparse.Namespace, use_rich: bool) -> bool:
    """Parse one input and print the requested output; return True on success."""
    try:
        source = item.read()
        tree = parser.parse(source)
    except ParseError as e:
        logger.error("%s: %s", item.label, e.message)
        if parsed_args.trace and e.tree_dump:
            print(e.tree_dump, file=sys.stderr)
        if parsed_args.quiet:
            emit_status(item.label, False, f"line {e.line_number}", use_rich)
        return False
    except FileError as e:
        logger.error("%s", e.message)
        if parsed_args.quiet:
            emit_status(item.label, False, "unreadable", use_rich)
        return False

    if parsed_args.mute:
        return True
    if parsed_args.quiet:
        emit_status(item.label, True, use_rich=use_rich)
        return True

    text, language = render_output(tree, parsed_args)
    emit(text, use_rich, language)
    if parsed_args.regex:
        emit(describe_match(tree, parsed_args.regex), use_rich)
    return True


def main(args: list[str] | None = None) -> int:
    """Execute the latextree command line."""
    arg_parser = create_parser()
    parsed_args = arg_parser.parse_args(args)

    items = _collect_inputs(parsed_args)
    if not items:
        print("Error: no input given; pass LaTeX source text or -f FILE", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        _setup_logging_level(parsed_args)
        options = build_options(parsed_args)
        use_rich = should_use_rich_output(parsed_args, raise_on_missing=True)
    except (argparse.ArgumentTypeError, ValidationError, DependencyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    parser = LatexParser(options)
    show_headers = len(items) > 1 and not (parsed_args.quiet or parsed_args.mute)
    failures = 0
    for item in items:
        if show_headers:
            emit(f"==> {item.label} <==", use_rich)
        if not process_item(item, parser, parsed_args, use_rich):
            failures += 1

    return EXIT_PARSE_ERROR if failures else EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
