#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/metadata.py
"""Document metadata read from a parse tree.

This module collects the descriptive information of a LaTeX document (class,
title, authors, packages, pinned TeX Live version) from the commands in its
parse tree. Argument text is converted to plain text with pylatexenc, so
accents and simple markup come out readable.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

import yaml

from latextree.constants import TEX_LIVE_VERSION_COMMAND, TEX_LIVE_VERSION_DIRECTIVE
from latextree.exceptions import DependencyError, ValidationError
from latextree.parse_tree import ParseTree
from latextree.tree.nodes import Argument, Command, Node

logger = logging.getLogger(__name__)

AUTHOR_SEPARATORS = frozenset({"and", "AND"})
PACKAGE_COMMANDS = frozenset({"usepackage", "RequirePackage"})


class UsedPackage(NamedTuple):
    """A package loaded with ``\\usepackage`` and the options given to it."""

    name: str
    options: list[str]


@dataclass
class LatexMetadata:
    """Container for metadata extracted from a LaTeX document.

    Parameters
    ----------
    document_class : str | None
        Class named by ``\\documentclass``
    class_options : list[str]
        Options given to ``\\documentclass``
    title : str | None
        Plain-text title
    authors : list[str]
        Plain-text author names, one per ``\\author`` entry or ``\\and`` part
    date : str | None
        Plain-text date
    abstract : str | None
        Plain-text content of the ``abstract`` environment
    keywords : list[str]
        Entries of ``\\keywords``, split on commas
    packages : list[UsedPackage]
        Packages in load order
    tex_live_version : str | None
        Pinned TeX Live version, when the document requests one

    """

    document_class: Optional[str] = None
    class_options: list[str] = field(default_factory=list)
    title: Optional[str] = None
    authors: list[str] = field(default_factory=list)
    date: Optional[str] = None
    abstract: Optional[str] = None
    keywords: list[str] = field(default_factory=list)
    packages: list[UsedPackage] = field(default_factory=list)
    tex_live_version: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to a dictionary, leaving out empty fields."""
        result: dict[str, Any] = {}
        if self.document_class:
            result["document_class"] = self.document_class
        if self.class_options:
            result["class_options"] = list(self.class_options)
        if self.title:
            result["title"] = self.title
        if self.authors:
            result["authors"] = list(self.authors)
        if self.date:
            result["date"] = self.date
        if self.abstract:
            result["abstract"] = self.abstract
        if self.keywords:
            result["keywords"] = list(self.keywords)
        if self.packages:
            result["packages"] = [{"name": p.name, "options": list(p.options)} for p in self.packages]
        if self.tex_live_version:
            result["tex_live_version"] = self.tex_live_version
        return result


def latex_to_plain_text(latex: str) -> str:
    """Convert a LaTeX fragment to single-spaced plain text using pylatexenc.

    Raises
    ------
    DependencyError
        If pylatexenc is not installed

    """
    try:
        from pylatexenc.latex2text import LatexNodes2Text
    except ImportError as e:
        raise DependencyError("Metadata extraction", ["pylatexenc"]) from e

    text = LatexNodes2Text(math_mode="verbatim").latex_to_text(latex)
    return " ".join(text.split())


def _argument_text(command: Optional[Command]) -> Optional[str]:
    if command is None:
        return None
    required = command.required_arguments
    if not required:
        return None
    text = latex_to_plain_text(required[0].get_content_latex())
    return text or None


def _split_commas(text: Optional[str]) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def _split_authors(argument: Argument) -> list[str]:
    parts: list[list[Node]] = [[]]
    for child in argument.get_children():
        if isinstance(child, Command) and child.name in AUTHOR_SEPARATORS:
            parts.append([])
        else:
            parts[-1].append(child)
    names = []
    for part in parts:
        name = latex_to_plain_text("".join(node.to_latex() for node in part))
        if name:
            names.append(name)
    return names


def get_used_packages(tree: ParseTree) -> list[UsedPackage]:
    r"""Return the packages loaded by ``\usepackage`` and ``\RequirePackage``.

    A command naming several packages (``\usepackage[T1]{fontenc,lmodern}``)
    yields one entry per package, each with the command's options.
    """
    packages = []
    for command in tree.iter_nodes():
        if not isinstance(command, Command) or command.name not in PACKAGE_COMMANDS:
            continue
        options: list[str] = []
        for option in command.get_options():
            options.extend(_split_commas(option))
        for name in _split_commas(command.get_argument()):
            packages.append(UsedPackage(name, list(options)))
    return packages


def get_requested_latex_version(tree: ParseTree) -> Optional[str]:
    r"""Return the TeX Live version the document asks to be compiled with.

    The ``\useTexLiveVersion{N}`` command takes precedence over the
    ``%__useTexLiveVersion{N}`` comment directive.
    """
    command = tree.get_macro(TEX_LIVE_VERSION_COMMAND)
    if command is not None and command.get_argument():
        return command.get_argument()
    match = tree.search(TEX_LIVE_VERSION_DIRECTIVE)
    if match is not None:
        return match.group(1)
    return None


def extract_metadata(tree: ParseTree) -> LatexMetadata:
    """Collect document metadata from a parse tree.

    Parameters
    ----------
    tree : ParseTree
        Parsed document

    Returns
    -------
    LatexMetadata
        The metadata found; fields the document does not set stay empty

    """
    metadata = LatexMetadata()

    document_class = tree.get_macro("documentclass")
    if document_class is not None:
        metadata.document_class = document_class.get_argument() or None
        for option in document_class.get_options():
            metadata.class_options.extend(_split_commas(option))

    metadata.title = _argument_text(tree.get_macro("title"))
    metadata.date = _argument_text(tree.get_macro("date"))

    for author in tree.get_macros("author"):
        required = author.required_arguments
        if required:
            metadata.authors.extend(_split_authors(required[0]))

    keywords = tree.get_macro("keywords")
    if keywords is not None and keywords.required_arguments:
        metadata.keywords = _split_commas(_argument_text(keywords))

    abstract = tree.get_environment("abstract")
    if abstract is not None:
        metadata.abstract = latex_to_plain_text(abstract.get_content_latex()) or None

    metadata.packages = get_used_packages(tree)
    metadata.tex_live_version = get_requested_latex_version(tree)

    logger.debug(
        "Extracted metadata: class=%s, %d author(s), %d package(s)",
        metadata.document_class,
        len(metadata.authors),
        len(metadata.packages),
    )
    return metadata


def format_metadata(metadata: LatexMetadata, output_format: str = "json") -> str:
    """Format metadata as JSON or YAML text.

    Parameters
    ----------
    metadata : LatexMetadata
        Metadata to format
    output_format : {"json", "yaml"}, default "json"
        Output format

    Raises
    ------
    ValidationError
        If the format is not supported

    """
    data = metadata.to_dict()
    if output_format == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if output_format == "yaml":
        if not data:
            return "{}\n"
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    raise ValidationError(
        f"Unsupported metadata format: {output_format}",
        parameter_name="output_format",
        parameter_value=output_format,
    )
