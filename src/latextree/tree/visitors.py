#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/tree/visitors.py
"""Visitor pattern implementation for parse tree traversal.

This module provides the visitor base classes used to process parse tree
nodes, together with the visitors the library itself relies on:

- ``SegmentCollector`` flattens a subtree into ``(owner, text)`` segments,
  the basis of LaTeX regeneration and of offset mapping for searches.
- ``TreeStringRenderer`` produces the indented debug dump.

Examples
--------
Count the commands in a tree:

    >>> class CommandCounter(GenericNodeVisitor):
    ...     def __init__(self):
    ...         self.count = 0
    ...     def visit_command(self, node):
    ...         self.count += 1
    ...         self.generic_visit(node)

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from latextree.constants import PREVIEW_ELLIPSIS, PREVIEW_MAX_LENGTH, TREE_INDENT
from latextree.tree.nodes import (
    Argument,
    Command,
    Comment,
    Environment,
    Group,
    Math,
    MathEnvironment,
    Node,
    Root,
    Text,
    UnclosedGroup,
    Verbatim,
    Whitespace,
)


class NodeVisitor(ABC):
    """Abstract base class for parse tree visitors.

    Every node kind has a ``visit_*`` method, so a concrete visitor handles
    the complete set of kinds.
    """

    @abstractmethod
    def visit_root(self, node: Root) -> Any:
        """Visit the root node."""

    @abstractmethod
    def visit_text(self, node: Text) -> Any:
        """Visit a Text node."""

    @abstractmethod
    def visit_whitespace(self, node: Whitespace) -> Any:
        """Visit a Whitespace node."""

    @abstractmethod
    def visit_comment(self, node: Comment) -> Any:
        """Visit a Comment node."""

    @abstractmethod
    def visit_verbatim(self, node: Verbatim) -> Any:
        """Visit a Verbatim node."""

    @abstractmethod
    def visit_command(self, node: Command) -> Any:
        """Visit a Command node."""

    @abstractmethod
    def visit_environment(self, node: Environment) -> Any:
        """Visit an Environment node."""

    @abstractmethod
    def visit_math_environment(self, node: MathEnvironment) -> Any:
        """Visit a MathEnvironment node."""

    @abstractmethod
    def visit_group(self, node: Group) -> Any:
        """Visit a Group node."""

    @abstractmethod
    def visit_unclosed_group(self, node: UnclosedGroup) -> Any:
        """Visit an UnclosedGroup node."""

    @abstractmethod
    def visit_argument(self, node: Argument) -> Any:
        """Visit an Argument node."""

    @abstractmethod
    def visit_math(self, node: Math) -> Any:
        """Visit a Math node."""


class GenericNodeVisitor(NodeVisitor):
    """Visitor that walks every node, delimiters included.

    Override the ``visit_*`` methods of interest and call ``generic_visit``
    to continue into the children.
    """

    def generic_visit(self, node: Node) -> None:
        """Visit the render children of a node in document order."""
        for child in node.get_render_children():
            child.accept(self)

    def visit_root(self, node: Root) -> Any:
        """Visit the root node's children."""
        self.generic_visit(node)

    def visit_text(self, node: Text) -> Any:
        """Text nodes have no children."""

    def visit_whitespace(self, node: Whitespace) -> Any:
        """Default to the Text handler."""
        return self.visit_text(node)

    def visit_comment(self, node: Comment) -> Any:
        """Comment nodes have no children."""

    def visit_verbatim(self, node: Verbatim) -> Any:
        """Verbatim nodes have no children."""

    def visit_command(self, node: Command) -> Any:
        """Visit the command's arguments."""
        self.generic_visit(node)

    def visit_environment(self, node: Environment) -> Any:
        """Visit the environment's delimiters and content."""
        self.generic_visit(node)

    def visit_math_environment(self, node: MathEnvironment) -> Any:
        """Default to the Environment handler."""
        return self.visit_environment(node)

    def visit_group(self, node: Group) -> Any:
        """Visit the group's delimiters and content."""
        self.generic_visit(node)

    def visit_unclosed_group(self, node: UnclosedGroup) -> Any:
        """Default to the Group handler."""
        return self.visit_group(node)

    def visit_argument(self, node: Argument) -> Any:
        """Visit the argument's delimiters and content."""
        self.generic_visit(node)

    def visit_math(self, node: Math) -> Any:
        """Visit the math span's delimiters and content."""
        self.generic_visit(node)


class SegmentCollector(GenericNodeVisitor):
    """Flatten a subtree into the literal text segments it renders.

    Each segment is paired with the node that owns it: a leaf, or the
    Command whose control sequence it is. ``collect`` walks the subtree with
    an explicit stack, so nesting depth is not limited by recursion.
    """

    def __init__(self) -> None:
        self.segments: list[tuple[Node, str]] = []

    def collect(self, node: Node) -> list[tuple[Node, str]]:
        """Return the segments of ``node`` in render order."""
        self.segments = []
        for descendant in node.iter_nodes():
            descendant.accept(self)
        return self.segments

    def generic_visit(self, node: Node) -> None:
        """Children are reached through ``collect``."""

    def visit_text(self, node: Text) -> Any:
        self.segments.append((node, node.content))

    def visit_comment(self, node: Comment) -> Any:
        self.segments.append((node, node.raw))

    def visit_verbatim(self, node: Verbatim) -> Any:
        self.segments.append((node, node.token))

    def visit_command(self, node: Command) -> Any:
        self.segments.append((node, node.token))


def preview(text: str, limit: int = PREVIEW_MAX_LENGTH) -> str:
    """Escape line breaks and tabs and truncate long text for the tree dump."""
    escaped = text.replace("\r", "\\r").replace("\n", "\\n").replace("\t", "\\t")
    if len(escaped) > limit:
        return escaped[: limit - len(PREVIEW_ELLIPSIS)] + PREVIEW_ELLIPSIS
    return escaped


class TreeStringRenderer(GenericNodeVisitor):
    """Render an indented, one-line-per-node debug dump of a subtree.

    Each line shows the node kind, its source line and a short preview.
    Envelope delimiters are listed with their envelope. Like
    ``SegmentCollector``, the walk uses an explicit stack.

    Parameters
    ----------
    base_depth : int, default 0
        Indentation depth of the first line

    """

    def __init__(self, base_depth: int = 0) -> None:
        self.base_depth = base_depth
        self._depth = base_depth
        self._lines: list[str] = []

    def render(self, node: Node) -> str:
        """Return the dump of ``node`` and its descendants."""
        self._lines = []
        stack: list[tuple[Node, int]] = [(node, self.base_depth)]
        while stack:
            current, depth = stack.pop()
            self._depth = depth
            current.accept(self)
            stack.extend((child, depth + 1) for child in reversed(current.get_render_children()))
        self._depth = self.base_depth
        return "\n".join(self._lines)

    def generic_visit(self, node: Node) -> None:
        """Children are reached through ``render``."""

    def _emit(self, node: Node, detail: str = "") -> None:
        label = f"{TREE_INDENT * self._depth}{node.kind.value} [{node.line_number}]"
        self._lines.append(f"{label}: {detail}" if detail else label)

    def visit_root(self, node: Root) -> Any:
        self._emit(node)

    def visit_text(self, node: Text) -> Any:
        self._emit(node, f'"{preview(node.content)}"')

    def visit_comment(self, node: Comment) -> Any:
        self._emit(node, f'"{preview(node.raw)}"')

    def visit_verbatim(self, node: Verbatim) -> Any:
        self._emit(node, f'"{preview(node.token)}"')

    def visit_command(self, node: Command) -> Any:
        self._emit(node, node.token)

    def visit_environment(self, node: Environment) -> Any:
        self._emit(node, node.name)

    def visit_group(self, node: Group) -> Any:
        self._emit(node)

    def visit_argument(self, node: Argument) -> Any:
        self._emit(node, "optional" if node.is_optional else "required")

    def visit_math(self, node: Math) -> Any:
        self._emit(node, node.delimiter)
