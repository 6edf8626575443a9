#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/tree/nodes.py
"""Parse tree node classes for LaTeX documents.

This module defines the node hierarchy used to represent a LaTeX source as a
lossless parse tree. Concatenating the rendered text of every node in
document order reproduces the source exactly.

Node Hierarchy
--------------
All nodes inherit from the base Node class and support the visitor pattern.

Leaf nodes hold literal source text:
    - Text, Whitespace (a Text whose content is only spaces, tabs and newlines)
    - Comment (``%`` up to and including the line break)
    - Verbatim (``\\verb<d>...<d>``)

Command nodes hold a control sequence and the arguments attached to it.

Envelope nodes hold a content sequence framed by an opening and an optional
closing delimiter node. Delimiters are kept apart from the content children:
    - Root (no delimiters)
    - Group, UnclosedGroup (``{ ... }``)
    - Argument (``{ ... }`` or ``[ ... ]`` owned by a command)
    - Math (``$``, ``$$``, ``\\(``, ``\\[``)
    - Environment, MathEnvironment (``\\begin{name} ... \\end{name}``)

Parent links are weak references; a node is owned by exactly one parent.
Node equality is identity.

"""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from latextree.constants import (
    BEGIN_COMMAND,
    COMMAND_TYPE_DEF,
    COMMAND_TYPE_DEF_WITH_ARG,
    COMMAND_TYPE_MACRO_NO_ARG,
    COMMAND_TYPE_MACRO_OPT_ARG,
    COMMAND_TYPE_MACRO_WITH_ARG,
    COMMAND_TYPE_PLAIN,
    DEF_FAMILY,
    DISPLAY_MATH_DELIMITERS,
    END_COMMAND,
    ENVIRONMENT_TYPE_MATH,
    ENVIRONMENT_TYPE_PLAIN,
    ENVIRONMENT_TYPE_RAW,
    MATH_DELIMITERS,
    NEWCOMMAND_FAMILY,
    STAR,
    WHITESPACE_CHARS,
)
from latextree.exceptions import TreeStructureError

if TYPE_CHECKING:
    from latextree.tree.visitors import NodeVisitor


class NodeKind(str, Enum):
    """Closed set of node kinds."""

    ROOT = "Root"
    TEXT = "Text"
    WHITESPACE = "Whitespace"
    COMMENT = "Comment"
    VERBATIM = "Verbatim"
    COMMAND = "Command"
    ENVIRONMENT = "Environment"
    MATH_ENVIRONMENT = "MathEnvironment"
    GROUP = "Group"
    UNCLOSED_GROUP = "UnclosedGroup"
    ARGUMENT = "Argument"
    MATH = "Math"


def is_whitespace_text(content: str) -> bool:
    """Return True when content consists only of spaces, tabs and line breaks."""
    return content.strip(WHITESPACE_CHARS) == ""


def normalize_command_name(name: str) -> str:
    """Strip one leading backslash from a command name used for lookups."""
    return name[1:] if name.startswith("\\") and len(name) > 1 else name


@dataclass(eq=False)
class Node(ABC):
    """Base class for all parse tree nodes.

    Parameters
    ----------
    line_number : int, default -1
        1-based source line on which the node starts; -1 when synthesized

    """

    kind: ClassVar[NodeKind]
    is_leaf: ClassVar[bool] = False

    line_number: int = field(default=-1, kw_only=True)
    _parent: Optional[weakref.ReferenceType[Node]] = field(default=None, init=False, repr=False)
    _children: list[Node] = field(default_factory=list, init=False, repr=False)

    @abstractmethod
    def accept(self, visitor: NodeVisitor) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : NodeVisitor
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """

    # ------------------------------------------------------------------
    # Parent and children
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional[Node]:
        """The node owning this one, or None for a detached node or the root."""
        return self._parent() if self._parent is not None else None

    def _set_parent(self, parent: Optional[Node]) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def is_delimiter(self) -> bool:
        """True when this node is the opening or closing of its parent envelope."""
        parent = self.parent
        return isinstance(parent, Envelope) and (parent.opening is self or parent.closing is self)

    @property
    def child_count(self) -> int:
        """Number of content children."""
        return len(self._children)

    def get_children(self) -> list[Node]:
        """Return a copy of the content children in document order."""
        return list(self._children)

    def get_child(self, index: int) -> Optional[Node]:
        """Return the child at ``index`` (negative counts from the end) or None."""
        count = len(self._children)
        if index < 0:
            index += count
        if 0 <= index < count:
            return self._children[index]
        return None

    def index_of(self, node: Node) -> int:
        """Return the position of ``node`` among the content children, or -1."""
        for index, child in enumerate(self._children):
            if child is node:
                return index
        return -1

    def get_render_children(self) -> list[Node]:
        """Return every child rendered by this node, delimiters included."""
        return list(self._children)

    def add_child(self, node: Node, index: Optional[int] = None) -> Node:
        """Insert ``node`` at ``index`` (appended when None) and return it.

        The index is clamped to the valid range; a negative index counts
        from the end. A node that already has a parent is moved.

        Raises
        ------
        TreeStructureError
            If this node is a leaf or ``node`` is this node or one of its ancestors.

        """
        self.add_children([node], index)
        return node

    def add_children(self, nodes: Iterable[Node], index: Optional[int] = None) -> None:
        """Insert several nodes starting at ``index`` (appended when None)."""
        if self.is_leaf:
            raise TreeStructureError(f"{self.kind.value} nodes cannot have children")
        new_nodes = list(nodes)
        for node in new_nodes:
            self._check_insertable(node)
        for node in new_nodes:
            node._detach()
            node._set_parent(self)
        position = self._clamp_index(index)
        self._children[position:position] = new_nodes

    def remove_child(self, target: Union[int, Node]) -> Optional[Node]:
        """Remove a content child by index or identity and return it, or None."""
        if isinstance(target, Node):
            index = self.index_of(target)
            if index < 0:
                return None
        else:
            count = len(self._children)
            index = target + count if target < 0 else target
            if not 0 <= index < count:
                return None
        removed = self._children.pop(index)
        removed._set_parent(None)
        return removed

    def replace_child(self, old: Node, new: Node) -> Node:
        """Put ``new`` where the content child ``old`` is and return ``new``.

        Raises
        ------
        TreeStructureError
            If ``old`` is not a content child of this node.

        """
        index = self.index_of(old)
        if index < 0:
            raise TreeStructureError(f"{old.kind.value} node is not a child of this {self.kind.value} node")
        self._check_insertable(new)
        new._detach()
        self._children[index] = new
        old._set_parent(None)
        new._set_parent(self)
        return new

    def _clamp_index(self, index: Optional[int]) -> int:
        count = len(self._children)
        if index is None:
            return count
        if index < 0:
            index += count
        return max(0, min(index, count))

    def _check_insertable(self, node: Node) -> None:
        ancestor: Optional[Node] = self
        while ancestor is not None:
            if ancestor is node:
                raise TreeStructureError("A node cannot be inserted beneath itself")
            ancestor = ancestor.parent

    def _detach(self) -> None:
        parent = self.parent
        if parent is not None:
            parent._release(self)
        self._set_parent(None)

    def _release(self, node: Node) -> None:
        index = self.index_of(node)
        if index >= 0:
            del self._children[index]

    # ------------------------------------------------------------------
    # Traversal and rendering
    # ------------------------------------------------------------------

    def iter_nodes(self) -> Iterator[Node]:
        """Yield this node and all descendants in pre-order, delimiters included."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.get_render_children()))

    def iter_segments(self) -> list[tuple[Node, str]]:
        """Return ``(owner, text)`` pairs whose concatenation is ``to_latex()``."""
        from latextree.tree.visitors import SegmentCollector

        return SegmentCollector().collect(self)

    def to_latex(self) -> str:
        """Regenerate the exact LaTeX source of this subtree."""
        return "".join(text for _, text in self.iter_segments())

    def to_tree_string(self, depth: int = 0) -> str:
        """Render an indented debug dump of this subtree."""
        from latextree.tree.visitors import TreeStringRenderer

        return TreeStringRenderer(base_depth=depth).render(self)

    def get_text(self, trim: bool = False) -> str:
        """Return the flattened text content of this subtree.

        Command names, envelope delimiters and comments contribute nothing;
        text, whitespace and verbatim content are concatenated.

        Parameters
        ----------
        trim : bool, default False
            Strip surrounding whitespace from the result

        """
        parts: list[str] = []
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            if node.is_leaf:
                parts.append(node.get_text())
            else:
                stack.extend(reversed(node._children))
        text = "".join(parts)
        return text.strip(WHITESPACE_CHARS) if trim else text

    def __str__(self) -> str:
        return self.to_latex()


# ============================================================================
# Leaf nodes
# ============================================================================


@dataclass(eq=False)
class Text(Node):
    """A run of literal characters.

    Parameters
    ----------
    content : str
        The characters exactly as they appear in the source

    """

    kind: ClassVar[NodeKind] = NodeKind.TEXT
    is_leaf: ClassVar[bool] = True

    content: str = ""

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_text``."""
        return visitor.visit_text(self)

    def get_text(self, trim: bool = False) -> str:
        """Return the content, optionally stripped."""
        return self.content.strip(WHITESPACE_CHARS) if trim else self.content

    @property
    def is_whitespace(self) -> bool:
        """True when the content is whitespace only."""
        return is_whitespace_text(self.content)


@dataclass(eq=False)
class Whitespace(Text):
    """A Text node whose content is only spaces, tabs and line breaks."""

    kind: ClassVar[NodeKind] = NodeKind.WHITESPACE

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_whitespace``."""
        return visitor.visit_whitespace(self)


@dataclass(eq=False)
class Comment(Node):
    """A ``%`` comment including its terminating line break, when present."""

    kind: ClassVar[NodeKind] = NodeKind.COMMENT
    is_leaf: ClassVar[bool] = True

    raw: str = "%"

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_comment``."""
        return visitor.visit_comment(self)

    def get_text(self, trim: bool = False) -> str:
        """Comments carry no document text."""
        return ""

    @property
    def body(self) -> str:
        """The comment text without the ``%`` marker and line break."""
        return self.raw[1:].rstrip("\r\n")


@dataclass(eq=False)
class Verbatim(Node):
    """Inline verbatim text, ``\\verb<d>content<d>`` or ``\\verb*<d>content<d>``.

    Parameters
    ----------
    content : str
        Text between the delimiters
    delimiter : str
        The delimiter character
    starred : bool, default False
        Whether the ``\\verb*`` form was used

    """

    kind: ClassVar[NodeKind] = NodeKind.VERBATIM
    is_leaf: ClassVar[bool] = True

    content: str = ""
    delimiter: str = "|"
    starred: bool = False

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_verbatim``."""
        return visitor.visit_verbatim(self)

    def get_text(self, trim: bool = False) -> str:
        """Return the verbatim content."""
        return self.content.strip(WHITESPACE_CHARS) if trim else self.content

    @property
    def token(self) -> str:
        """The rendered source of this node."""
        star = STAR if self.starred else ""
        return f"\\verb{star}{self.delimiter}{self.content}{self.delimiter}"


# ============================================================================
# Commands
# ============================================================================


@dataclass(eq=False)
class Command(Node):
    """A control sequence with the arguments attached to it.

    The children are the command's Argument nodes, possibly interleaved with
    the whitespace and comments that separated them in the source.

    Parameters
    ----------
    name : str
        Control sequence name without the leading backslash (``section``,
        ``section*``, ``\\``, ``%``); for active characters the character itself
    active : bool, default False
        Whether this is an active character rendered without a backslash

    """

    kind: ClassVar[NodeKind] = NodeKind.COMMAND

    name: str = ""
    active: bool = False

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_command``."""
        return visitor.visit_command(self)

    @property
    def token(self) -> str:
        """The control sequence as written in the source."""
        return self.name if self.active else "\\" + self.name

    @property
    def is_starred(self) -> bool:
        """True for starred forms such as ``\\section*``."""
        return len(self.name) > 1 and self.name.endswith(STAR)

    def get_name(self) -> str:
        """Return the command name without the leading backslash."""
        return self.name

    def matches(self, name: str) -> bool:
        """Return True when this command has the given name (one leading backslash allowed)."""
        return self.name == normalize_command_name(name)

    @property
    def arguments(self) -> list[Argument]:
        """The Argument children in source order."""
        return [child for child in self._children if isinstance(child, Argument)]

    @property
    def required_arguments(self) -> list[Argument]:
        """Required ``{...}`` arguments in source order."""
        return [arg for arg in self.arguments if not arg.is_optional]

    @property
    def optional_arguments(self) -> list[Argument]:
        """Optional ``[...]`` arguments in source order."""
        return [arg for arg in self.arguments if arg.is_optional]

    def get_argument(self) -> Optional[str]:
        """Return the trimmed flattened text of the first required argument, or None."""
        required = self.required_arguments
        return required[0].get_text(trim=True) if required else None

    def get_arguments(self) -> list[str]:
        """Return the trimmed flattened text of every argument in source order."""
        return [arg.get_text(trim=True) for arg in self.arguments]

    def get_options(self) -> list[str]:
        """Return the trimmed flattened text of every optional argument."""
        return [arg.get_text(trim=True) for arg in self.optional_arguments]

    def get_snippet(self) -> str:
        """Return the LaTeX of the command and its arguments."""
        return self.to_latex()

    # ------------------------------------------------------------------
    # Definition commands
    # ------------------------------------------------------------------

    def _following_command(self) -> Optional[Command]:
        parent = self.parent
        if parent is None:
            return None
        index = parent.index_of(self)
        if index < 0:
            return None
        for sibling in parent.get_children()[index + 1 :]:
            if isinstance(sibling, (Whitespace, Comment)):
                continue
            return sibling if isinstance(sibling, Command) else None
        return None

    def _following_node(self, after: Node) -> Optional[Node]:
        parent = after.parent
        if parent is None:
            return None
        index = parent.index_of(after)
        for sibling in parent.get_children()[index + 1 :]:
            if isinstance(sibling, (Whitespace, Comment)):
                continue
            return sibling
        return None

    def _definition(self) -> Optional[tuple[str, str, Optional[Node]]]:
        """Return (type, defined name, body node) for definition commands."""
        if self.name in NEWCOMMAND_FAMILY:
            if self.required_arguments:
                target = self.required_arguments[0]
                defined = _first_command_name(target)
                carrier: Command = self
                skip = 1
            else:
                following = self._following_command()
                if following is None:
                    return None
                defined = following.name
                carrier = following
                skip = 0
            required = carrier.required_arguments[skip:]
            body = required[-1] if required else None
            optional_count = len(carrier.optional_arguments)
            if optional_count >= 2:
                kind = COMMAND_TYPE_MACRO_OPT_ARG
            elif optional_count == 1 and carrier.optional_arguments[0].get_text(trim=True) not in ("", "0"):
                kind = COMMAND_TYPE_MACRO_WITH_ARG
            else:
                kind = COMMAND_TYPE_MACRO_NO_ARG
            return kind, defined or "", body

        if self.name in DEF_FAMILY:
            following = self._following_command()
            if following is None:
                return None
            if following.required_arguments:
                return COMMAND_TYPE_DEF, following.name, following.required_arguments[0]
            body = self._following_node(following)
            while body is not None and not isinstance(body, Group):
                body = self._following_node(body)
            return COMMAND_TYPE_DEF_WITH_ARG, following.name, body
        return None

    def get_type(self) -> str:
        """Classify the command.

        Returns
        -------
        str
            ``def`` or ``def-with-arg`` for ``\\def``-style definitions,
            ``macro-no-arg``, ``macro-with-arg`` or ``macro-opt-arg`` for the
            ``\\newcommand`` family, and ``command`` otherwise

        """
        definition = self._definition()
        return definition[0] if definition is not None else COMMAND_TYPE_PLAIN

    def get_declaration(self) -> str:
        """Return the body of a definition, or the signature of an ordinary command.

        The signature of an ordinary command is its token followed by ``[]``
        or ``{}`` for each optional or required argument.
        """
        definition = self._definition()
        if definition is not None:
            body = definition[2]
            if isinstance(body, Envelope):
                return body.get_content_latex()
            return body.to_latex() if body is not None else ""
        return self.token + "".join("[]" if arg.is_optional else "{}" for arg in self.arguments)

    def get_defined_name(self) -> Optional[str]:
        """Return the name introduced by a definition command, or None."""
        definition = self._definition()
        return definition[1] if definition is not None else None


def _first_command_name(node: Node) -> Optional[str]:
    for child in node.get_children():
        if isinstance(child, Command):
            return child.name
    text = node.get_text(trim=True)
    return normalize_command_name(text) if text else None


# ============================================================================
# Envelopes
# ============================================================================


@dataclass(eq=False)
class Envelope(Node):
    """A content sequence framed by opening and closing delimiter nodes.

    Parameters
    ----------
    opening : Node, optional
        Opening delimiter node
    closing : Node, optional
        Closing delimiter node; None while the envelope is unclosed

    """

    opening: Optional[Node] = field(default=None, kw_only=True)
    closing: Optional[Node] = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        for delimiter in (self.opening, self.closing):
            if delimiter is not None:
                self._check_insertable(delimiter)
                delimiter._detach()
                delimiter._set_parent(self)

    @property
    def is_closed(self) -> bool:
        """True when the closing delimiter is present."""
        return self.closing is not None

    def get_opening(self) -> Optional[Node]:
        """Return the opening delimiter node."""
        return self.opening

    def get_closing(self) -> Optional[Node]:
        """Return the closing delimiter node, or None when unclosed."""
        return self.closing

    def set_opening(self, node: Optional[Node]) -> None:
        """Replace the opening delimiter node."""
        self.opening = self._swap_delimiter(self.opening, node)

    def set_closing(self, node: Optional[Node]) -> None:
        """Replace the closing delimiter node; None leaves the envelope unclosed."""
        self.closing = self._swap_delimiter(self.closing, node)

    def _swap_delimiter(self, old: Optional[Node], new: Optional[Node]) -> Optional[Node]:
        if new is not None:
            self._check_insertable(new)
            new._detach()
            new._set_parent(self)
        if old is not None and old is not new:
            old._set_parent(None)
        return new

    def _release(self, node: Node) -> None:
        if self.opening is node:
            self.opening = None
        elif self.closing is node:
            self.closing = None
        else:
            super()._release(node)

    def get_render_children(self) -> list[Node]:
        """Return opening, content children and closing in render order."""
        nodes: list[Node] = []
        if self.opening is not None:
            nodes.append(self.opening)
        nodes.extend(self._children)
        if self.closing is not None:
            nodes.append(self.closing)
        return nodes

    def get_content_latex(self) -> str:
        """Return the LaTeX of the content children, delimiters excluded."""
        return "".join(child.to_latex() for child in self._children)


@dataclass(eq=False)
class Root(Envelope):
    """The top of a parse tree; an envelope without delimiters."""

    kind: ClassVar[NodeKind] = NodeKind.ROOT

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_root``."""
        return visitor.visit_root(self)

    def __post_init__(self) -> None:
        if self.opening is not None or self.closing is not None:
            raise TreeStructureError("Root nodes have no delimiters")

    def set_opening(self, node: Optional[Node]) -> None:
        """Root nodes have no delimiters."""
        raise TreeStructureError("Root nodes have no delimiters")

    def set_closing(self, node: Optional[Node]) -> None:
        """Root nodes have no delimiters."""
        raise TreeStructureError("Root nodes have no delimiters")


@dataclass(eq=False)
class Group(Envelope):
    """A brace group ``{ ... }`` that is not a command argument."""

    kind: ClassVar[NodeKind] = NodeKind.GROUP

    def __post_init__(self) -> None:
        if self.opening is None:
            self.opening = Text("{", line_number=self.line_number)
        if self.closing is None and not isinstance(self, UnclosedGroup):
            self.closing = Text("}", line_number=self.line_number)
        super().__post_init__()

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_group``."""
        return visitor.visit_group(self)

    @classmethod
    def opened(cls, line_number: int = -1) -> Group:
        """Create a group whose closing brace has not been seen yet."""
        group = cls(line_number=line_number)
        group.set_closing(None)
        return group


@dataclass(eq=False)
class UnclosedGroup(Group):
    """A brace group that reached the end of input, or was cut off, without ``}``."""

    kind: ClassVar[NodeKind] = NodeKind.UNCLOSED_GROUP

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_unclosed_group``."""
        return visitor.visit_unclosed_group(self)

    def set_closing(self, node: Optional[Node]) -> None:
        """Unclosed groups never carry a closing delimiter."""
        if node is not None:
            raise TreeStructureError("UnclosedGroup nodes have no closing delimiter")
        super().set_closing(None)

    @classmethod
    def from_group(cls, group: Group) -> UnclosedGroup:
        """Build an unclosed group holding the opening and content of ``group``."""
        unclosed = cls(line_number=group.line_number, opening=group.opening)
        unclosed.add_children(group.get_children())
        return unclosed


@dataclass(eq=False)
class Argument(Envelope):
    """A command argument, required ``{...}`` or optional ``[...]``.

    Parameters
    ----------
    is_optional : bool, default False
        True for bracketed optional arguments

    """

    kind: ClassVar[NodeKind] = NodeKind.ARGUMENT

    is_optional: bool = False

    def __post_init__(self) -> None:
        if self.opening is None:
            self.opening = Text("[" if self.is_optional else "{", line_number=self.line_number)
        if self.closing is None:
            self.closing = Text("]" if self.is_optional else "}", line_number=self.line_number)
        super().__post_init__()

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_argument``."""
        return visitor.visit_argument(self)

    @classmethod
    def opened(cls, is_optional: bool, line_number: int = -1) -> Argument:
        """Create an argument whose closing delimiter has not been seen yet."""
        argument = cls(is_optional, line_number=line_number)
        argument.set_closing(None)
        return argument

    @property
    def owner(self) -> Optional[Command]:
        """The command this argument belongs to."""
        parent = self.parent
        return parent if isinstance(parent, Command) else None


@dataclass(eq=False)
class Math(Envelope):
    """An inline or display math span.

    Parameters
    ----------
    delimiter : str, default "$"
        Opening delimiter: ``$``, ``$$``, ``\\(`` or ``\\[``

    """

    kind: ClassVar[NodeKind] = NodeKind.MATH

    delimiter: str = "$"

    def __post_init__(self) -> None:
        if self.delimiter not in MATH_DELIMITERS:
            raise TreeStructureError(f"Unknown math delimiter: {self.delimiter!r}")
        if self.opening is None:
            self.opening = make_math_delimiter(self.delimiter, self.line_number)
        if self.closing is None:
            self.closing = make_math_delimiter(MATH_DELIMITERS[self.delimiter], self.line_number)
        super().__post_init__()

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_math``."""
        return visitor.visit_math(self)

    @classmethod
    def opened(cls, delimiter: str, line_number: int = -1) -> Math:
        """Create a math span whose closing delimiter has not been seen yet."""
        math = cls(delimiter, line_number=line_number)
        math.set_closing(None)
        return math

    @property
    def closing_delimiter(self) -> str:
        """The token that closes this span."""
        return MATH_DELIMITERS[self.delimiter]

    @property
    def is_display(self) -> bool:
        """True for ``$$`` and ``\\[`` spans."""
        return self.delimiter in DISPLAY_MATH_DELIMITERS


def make_math_delimiter(token: str, line_number: int = -1) -> Node:
    """Build the node for a math delimiter token: Text for `$`, Command for `\\(`."""
    if token.startswith("\\"):
        return Command(token[1:], line_number=line_number)
    return Text(token, line_number=line_number)


def make_boundary_command(keyword: str, name: str, line_number: int = -1) -> Command:
    """Build a ``\\begin{name}`` or ``\\end{name}`` command."""
    command = Command(keyword, line_number=line_number)
    argument = Argument(False, line_number=line_number)
    argument.add_child(Text(name, line_number=line_number))
    command.add_child(argument)
    return command


@dataclass(eq=False)
class Environment(Envelope):
    """A ``\\begin{name} ... \\end{name}`` environment.

    The opening is the ``\\begin`` command, including any arguments after the
    name; the closing is the ``\\end`` command.

    Parameters
    ----------
    name : str
        Environment name
    raw : bool, default False
        True when the body was read literally (``verbatim`` and friends)

    """

    kind: ClassVar[NodeKind] = NodeKind.ENVIRONMENT

    name: str = ""
    raw: bool = False

    def __post_init__(self) -> None:
        if self.opening is None:
            self.opening = make_boundary_command(BEGIN_COMMAND, self.name, self.line_number)
        if self.closing is None:
            self.closing = make_boundary_command(END_COMMAND, self.name, self.line_number)
        super().__post_init__()

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_environment``."""
        return visitor.visit_environment(self)

    def get_name(self) -> str:
        """Return the environment name."""
        return self.name

    @property
    def begin_command(self) -> Optional[Command]:
        """The opening ``\\begin`` command."""
        return self.opening if isinstance(self.opening, Command) else None

    def _parameters(self) -> list[Argument]:
        begin = self.begin_command
        if begin is None:
            return []
        arguments = begin.arguments
        for index, argument in enumerate(arguments):
            if not argument.is_optional:
                return arguments[:index] + arguments[index + 1 :]
        return arguments

    def get_argument(self) -> Optional[str]:
        """Return the first required argument after the environment name, or None."""
        for argument in self._parameters():
            if not argument.is_optional:
                return argument.get_text(trim=True)
        return None

    def get_arguments(self) -> list[str]:
        """Return the arguments of ``\\begin`` other than the environment name."""
        return [argument.get_text(trim=True) for argument in self._parameters()]

    def get_options(self) -> list[str]:
        """Return the optional arguments of ``\\begin``."""
        return [argument.get_text(trim=True) for argument in self._parameters() if argument.is_optional]

    def get_snippet(self) -> str:
        """Return the LaTeX of the whole environment."""
        return self.to_latex()

    def get_type(self) -> str:
        """Classify the environment as ``environment``, ``math-environment`` or ``raw-environment``."""
        if self.raw:
            return ENVIRONMENT_TYPE_RAW
        return ENVIRONMENT_TYPE_PLAIN

    def get_declaration(self) -> str:
        """Return the signature of the environment's ``\\begin``."""
        parameters = "".join("[]" if argument.is_optional else "{}" for argument in self._parameters())
        return f"\\begin{{{self.name}}}{parameters}"


@dataclass(eq=False)
class MathEnvironment(Environment):
    """An environment whose content is math (``equation``, ``align*``, ...)."""

    kind: ClassVar[NodeKind] = NodeKind.MATH_ENVIRONMENT

    def accept(self, visitor: NodeVisitor) -> Any:
        """Dispatch to ``visitor.visit_math_environment``."""
        return visitor.visit_math_environment(self)

    def get_type(self) -> str:
        """Math environments are classified as ``math-environment``."""
        return ENVIRONMENT_TYPE_MATH


__all__ = [
    "Argument",
    "Command",
    "Comment",
    "Envelope",
    "Environment",
    "Group",
    "Math",
    "MathEnvironment",
    "Node",
    "NodeKind",
    "Root",
    "Text",
    "UnclosedGroup",
    "Verbatim",
    "Whitespace",
    "is_whitespace_text",
    "make_boundary_command",
    "make_math_delimiter",
    "normalize_command_name",
]
