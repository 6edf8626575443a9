#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/tree/__init__.py
"""Parse tree nodes, visitors and serialization."""

from latextree.tree.nodes import (
    Argument,
    Command,
    Comment,
    Envelope,
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
    make_boundary_command,
    normalize_command_name,
)
from latextree.tree.serialization import dict_to_tree, json_to_tree, tree_to_dict, tree_to_json
from latextree.tree.visitors import GenericNodeVisitor, NodeVisitor, SegmentCollector, TreeStringRenderer

__all__ = [
    "Argument",
    "Command",
    "Comment",
    "Envelope",
    "Environment",
    "GenericNodeVisitor",
    "Group",
    "Math",
    "MathEnvironment",
    "Node",
    "NodeKind",
    "NodeVisitor",
    "Root",
    "SegmentCollector",
    "Text",
    "TreeStringRenderer",
    "UnclosedGroup",
    "Verbatim",
    "Whitespace",
    "dict_to_tree",
    "json_to_tree",
    "make_boundary_command",
    "normalize_command_name",
    "tree_to_dict",
    "tree_to_json",
]
