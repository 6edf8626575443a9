"""latextree - lossless parse trees for LaTeX sources.

latextree reads LaTeX text into a tree of typed nodes (text, whitespace,
comments, commands with their arguments, groups, math and environments)
without interpreting any macro. Every character of the input ends up in
exactly one node, so regenerating LaTeX from an unmodified tree reproduces
the input byte for byte.

The tree can be queried (commands by name, environments, definitions),
searched with regular expressions that resolve back to nodes, and edited in
place by inserting text or deleting nodes.

Examples
--------
Parse and regenerate a fragment:

    >>> from latextree import parse
    >>> tree = parse(r"\\section{Intro} This is text.")
    >>> tree.to_latex()
    '\\\\section{Intro} This is text.'

Query the tree:

    >>> tree.get_macro("section").get_argument()
    'Intro'

See Also
--------
latextree.tree : Node classes, visitors and serialization
latextree.metadata : Document metadata extraction

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "latextree requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from latextree.exceptions import (
    DependencyError,
    FileError,
    LatexTreeError,
    ParseError,
    SourceNotFoundError,
    TreeStructureError,
    ValidationError,
)
from latextree.metadata import LatexMetadata, extract_metadata
from latextree.options import ParserOptions
from latextree.parse_tree import NodeMatch, ParseTree
from latextree.parser import LatexParser, parse
from latextree.sources import BibliographySource, DocumentSource, LatexFile, parse_source
from latextree.tree import (
    Argument,
    Command,
    Comment,
    Environment,
    Group,
    Math,
    MathEnvironment,
    Node,
    NodeKind,
    Root,
    Text,
    UnclosedGroup,
    Verbatim,
    Whitespace,
)

__all__ = [
    "__version__",
    "parse",
    "parse_source",
    "LatexParser",
    "ParseTree",
    "NodeMatch",
    "ParserOptions",
    "LatexFile",
    "DocumentSource",
    "BibliographySource",
    "LatexMetadata",
    "extract_metadata",
    "LatexTreeError",
    "ParseError",
    "TreeStructureError",
    "ValidationError",
    "FileError",
    "SourceNotFoundError",
    "DependencyError",
    "Node",
    "NodeKind",
    "Root",
    "Text",
    "Whitespace",
    "Comment",
    "Verbatim",
    "Command",
    "Group",
    "UnclosedGroup",
    "Argument",
    "Math",
    "Environment",
    "MathEnvironment",
]
