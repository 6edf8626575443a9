#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/parse_tree.py
"""The parse tree facade: lookups, regex search mapped to nodes, and edits.

Offsets used by ``search``, ``get_path_to_char`` and ``insert_text`` are
code-point offsets into the LaTeX regenerated from the tree as it is at the
time of the call, so they stay correct after edits.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Optional, Union

from latextree.constants import COMMAND_TYPE_PLAIN
from latextree.exceptions import TreeStructureError
from latextree.tree.nodes import (
    Command,
    Comment,
    Environment,
    Node,
    Root,
    Text,
    Whitespace,
    is_whitespace_text,
    normalize_command_name,
)

logger = logging.getLogger(__name__)

Pattern = Union[str, "re.Pattern[str]"]


@dataclass(eq=False)
class NodeMatch:
    """A regex match over the regenerated source, resolved to tree nodes.

    Parameters
    ----------
    string : str
        The matched text
    start : int
        Offset of the first matched character
    end : int
        Offset just past the last matched character
    first_node : Node
        Node owning the first matched character
    first_offset : int
        Offset of the match start inside ``first_node``'s rendered text
    last_node : Node
        Node owning the last matched character
    last_offset : int
        Offset just past the match end inside ``last_node``'s rendered text
    nodes : list of Node
        The run of siblings under the lowest common ancestor of the first and
        last nodes that covers the match; the ancestor itself when the run
        would be all of its children
    groups : tuple of NodeMatch or None
        Capture groups, None for groups that did not participate

    """

    string: str
    start: int
    end: int
    first_node: Node
    first_offset: int
    last_node: Node
    last_offset: int
    nodes: list[Node] = field(default_factory=list)
    groups: tuple[Optional[NodeMatch], ...] = ()

    def group(self, index: int = 0) -> Optional[str]:
        """Return the text of group ``index`` (0 is the whole match)."""
        if index == 0:
            return self.string
        captured = self.groups[index - 1]
        return captured.string if captured is not None else None

    @property
    def common_ancestor(self) -> Optional[Node]:
        """The lowest node containing the whole match."""
        if len(self.nodes) == 1:
            return self.nodes[0]
        return self.nodes[0].parent if self.nodes else None

    def __str__(self) -> str:
        return self.string


class _OffsetMap:
    """Map offsets of the regenerated source to owning nodes."""

    def __init__(self, root: Node):
        self.segments = [(node, text) for node, text in root.iter_segments() if text]
        self.starts: list[int] = []
        position = 0
        for _, text in self.segments:
            self.starts.append(position)
            position += len(text)
        self.text = "".join(text for _, text in self.segments)

    def locate(self, offset: int) -> tuple[Optional[Node], int]:
        if not self.segments:
            return None, 0
        if offset >= len(self.text):
            node, text = self.segments[-1]
            return node, len(text)
        index = max(bisect_right(self.starts, offset) - 1, 0)
        return self.segments[index][0], offset - self.starts[index]


def _path_to(node: Node) -> list[Node]:
    path = [node]
    parent = node.parent
    while parent is not None:
        path.append(parent)
        parent = parent.parent
    path.reverse()
    return path


class ParseTree:
    r"""A parsed LaTeX document.

    Regular expression matching in the style of PHP's ``preg_match`` and
    ``preg_match_all`` is provided by ``search`` and ``finditer``. Instead of
    filling an out-parameter they return ``NodeMatch`` objects, and
    ``search`` returns None where ``preg_match`` would return false.

    Parameters
    ----------
    root : Root
        Root node of the tree
    source : str, optional
        The text the tree was parsed from; defaults to the tree's rendering

    Examples
    --------
        >>> from latextree import parse
        >>> tree = parse(r"\author{A}\author{B}")
        >>> [c.get_argument() for c in tree.get_macros("author")]
        ['A', 'B']

    """

    def __init__(self, root: Root, source: Optional[str] = None):
        self.root = root
        self.source = source if source is not None else root.to_latex()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_latex(self) -> str:
        """Regenerate the LaTeX source from the current tree."""
        return self.root.to_latex()

    def to_tree_string(self) -> str:
        """Return the indented debug dump of the whole tree."""
        return self.root.to_tree_string()

    def is_modified(self) -> bool:
        """True when the tree no longer renders the text it was parsed from."""
        return self.to_latex() != self.source

    def __str__(self) -> str:
        return self.to_tree_string()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def iter_nodes(self) -> Iterator[Node]:
        """Yield every node in pre-order, delimiters included."""
        return self.root.iter_nodes()

    def get_macros(self, name: str) -> list[Command]:
        """Return every command with the given name in pre-order.

        Parameters
        ----------
        name : str
            Command name, with or without one leading backslash

        """
        key = normalize_command_name(name)
        return [node for node in self.root.iter_nodes() if isinstance(node, Command) and node.name == key]

    def get_macro(self, name: str) -> Optional[Command]:
        """Return the first command with the given name, or None."""
        key = normalize_command_name(name)
        for node in self.root.iter_nodes():
            if isinstance(node, Command) and node.name == key:
                return node
        return None

    def get_environments(self, name: str) -> list[Environment]:
        """Return every environment with the given name in pre-order."""
        return [node for node in self.root.iter_nodes() if isinstance(node, Environment) and node.name == name]

    def get_environment(self, name: str) -> Optional[Environment]:
        """Return the first environment with the given name, or None."""
        environments = self.get_environments(name)
        return environments[0] if environments else None

    def get_commands(self) -> list[Command]:
        """Return every definition command (``\\newcommand``, ``\\def``, ...)."""
        return [
            node
            for node in self.root.iter_nodes()
            if isinstance(node, Command) and node.get_type() != COMMAND_TYPE_PLAIN
        ]

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def get_path_to_node(self, node: Node) -> list[Node]:
        """Return the nodes from the root down to ``node``.

        Raises
        ------
        TreeStructureError
            If ``node`` does not belong to this tree.

        """
        path = _path_to(node)
        if path[0] is not self.root:
            raise TreeStructureError(f"{node.kind.value} node is not part of this tree")
        return path

    def get_path_to_char(self, offset: int) -> tuple[list[Node], int]:
        """Return the path to the node rendering character ``offset`` and the offset inside it.

        An offset at or past the end resolves to the end of the last node.
        An empty tree resolves to the root.
        """
        if offset < 0:
            raise TreeStructureError(f"Offset must be non-negative, got {offset}")
        node, inner = _OffsetMap(self.root).locate(offset)
        if node is None:
            return [self.root], 0
        return self.get_path_to_node(node), inner

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, pattern: Pattern, flags: int = 0, pos: int = 0) -> Optional[NodeMatch]:
        r"""Search the regenerated source and resolve the first match to nodes.

        Parameters
        ----------
        pattern : str or re.Pattern
            Regular expression
        flags : int, default 0
            ``re`` flags, used when ``pattern`` is a string
        pos : int, default 0
            Offset at which to start searching

        Returns
        -------
        NodeMatch or None
            The first match, or None

        Examples
        --------
            >>> tree = parse(r"\foo{bar}{baz}")
            >>> match = tree.search("baz")
            >>> match.first_node.parent.kind.value
            'Argument'

        """
        regex = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
        offsets = _OffsetMap(self.root)
        match = regex.search(offsets.text, pos)
        return self._resolve_match(offsets, match) if match is not None else None

    def finditer(self, pattern: Pattern, flags: int = 0) -> Iterator[NodeMatch]:
        """Yield every match of ``pattern`` resolved to nodes.

        The offset map is taken when iteration starts; edit the tree only
        after consuming the iterator.
        """
        regex = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
        offsets = _OffsetMap(self.root)
        for match in regex.finditer(offsets.text):
            yield self._resolve_match(offsets, match)

    def _resolve_match(self, offsets: _OffsetMap, match: re.Match[str]) -> NodeMatch:
        groups: list[Optional[NodeMatch]] = []
        for index in range(1, (match.re.groups or 0) + 1):
            start, end = match.span(index)
            groups.append(None if start < 0 else self._resolve_span(offsets, match.group(index), start, end))
        resolved = self._resolve_span(offsets, match.group(0), match.start(), match.end())
        resolved.groups = tuple(groups)
        return resolved

    def _resolve_span(self, offsets: _OffsetMap, string: str, start: int, end: int) -> NodeMatch:
        first_node, first_offset = offsets.locate(start)
        if end > start:
            last_node, last_char = offsets.locate(end - 1)
            last_offset = last_char + 1
        else:
            last_node, last_offset = first_node, first_offset
        if first_node is None or last_node is None:
            return NodeMatch(string, start, end, self.root, 0, self.root, 0, [self.root])
        return NodeMatch(
            string,
            start,
            end,
            first_node,
            first_offset,
            last_node,
            last_offset,
            self._covering_nodes(first_node, last_node),
        )

    @staticmethod
    def _covering_nodes(first: Node, last: Node) -> list[Node]:
        if first is last:
            return [first]
        first_path = _path_to(first)
        last_path = _path_to(last)
        depth = 0
        while depth < min(len(first_path), len(last_path)) and first_path[depth] is last_path[depth]:
            depth += 1
        ancestor = first_path[depth - 1]
        if depth >= len(first_path) or depth >= len(last_path):
            # One node contains the other.
            return [ancestor]
        siblings = ancestor.get_render_children()
        start = next(i for i, node in enumerate(siblings) if node is first_path[depth])
        stop = next(i for i, node in enumerate(siblings) if node is last_path[depth])
        if start == 0 and stop == len(siblings) - 1:
            return [ancestor]
        return siblings[start : stop + 1]

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def insert_text(self, text: str, offset: int) -> Node:
        """Insert literal text so that it appears at ``offset`` in the regenerated source.

        Text falling inside a Text, Whitespace or Comment node is spliced into
        it; text at the start of any other content node becomes a new Text
        node before it. Text at or past the end is appended to the root.

        Returns
        -------
        Node
            The node now holding the inserted text

        Raises
        ------
        TreeStructureError
            If the offset falls inside a command name, a verbatim span or a
            delimiter.

        """
        offsets = _OffsetMap(self.root)
        if offset >= len(offsets.text):
            return self._append_root_text(text)
        path, inner = self.get_path_to_char(offset)
        leaf = path[-1]
        parent = leaf.parent
        if isinstance(leaf, (Text, Comment)) and not leaf.is_delimiter and parent is not None:
            if isinstance(leaf, Comment):
                leaf.raw = leaf.raw[:inner] + text + leaf.raw[inner:]
                return leaf
            content = leaf.content[:inner] + text + leaf.content[inner:]
            if isinstance(leaf, Whitespace) and not is_whitespace_text(content):
                return parent.replace_child(leaf, Text(content, line_number=leaf.line_number))
            leaf.content = content
            return leaf
        # Walk up while the character is the first one of an enclosing content node.
        node = leaf
        while inner == 0 and node.is_delimiter and node.parent is not None:
            owner = node.parent
            if owner.get_render_children()[0] is not node or owner.parent is None:
                break
            node = owner
        if inner == 0 and node.parent is not None and node.parent.index_of(node) >= 0:
            created = Text(text, line_number=node.line_number)
            node.parent.add_child(created, node.parent.index_of(node))
            return created
        raise TreeStructureError(f"Cannot insert text inside a {leaf.kind.value} node at offset {offset}")

    def _append_root_text(self, text: str) -> Node:
        last = self.root.get_child(-1)
        if isinstance(last, Text) and not isinstance(last, Whitespace):
            last.content += text
            return last
        created = Text(text, line_number=last.line_number if last is not None else 1)
        return self.root.add_child(created)

    def delete_node(self, node: Node) -> Node:
        """Remove a content node from the tree and return it.

        An emptied root receives an empty Text node so that the tree keeps
        rendering.

        Raises
        ------
        TreeStructureError
            If ``node`` is the root, a delimiter, or not part of this tree.

        """
        if node is self.root:
            raise TreeStructureError("The root node cannot be deleted")
        if node.is_delimiter:
            raise TreeStructureError("Envelope delimiters cannot be deleted; use set_opening or set_closing")
        parent = node.parent
        self.get_path_to_node(node)
        assert parent is not None
        parent.remove_child(node)
        if self.root.child_count == 0:
            self.root.add_child(Text("", line_number=1))
        logger.debug("Deleted %s node from line %d", node.kind.value, node.line_number)
        return node
