#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/parser.py
r"""LaTeX source to parse tree.

This module turns a LaTeX source string into a lossless parse tree in a
single left-to-right pass. The parser does not expand macros; it records the
shape of the source so that the tree regenerates it exactly.

Recognized Forms
----------------
- Control words (``\section``, with an optional trailing ``*``) and control
  symbols (``\\``, ``\%``), plus active characters (``~``)
- Required ``{...}`` and optional ``[...]`` arguments adjacent to a command,
  optionally separated by whitespace or comments
- Brace groups, ``$``/``$$``/``\(``/``\[`` math spans
- ``\begin{name} ... \end{name}`` environments, math environments and raw
  environments whose body is read literally
- ``%`` comments and ``\verb`` inline verbatim

Recovery
--------
Malformed input is kept in the tree instead of rejected: a stray ``}``
becomes text, unclosed groups become UnclosedGroup nodes, and unclosed math,
arguments and environments simply lack a closing delimiter. Only a
``\end{name}`` without a matching open environment raises ParseError.

Examples
--------
    >>> tree = parse(r"\section{Intro} This is text.")
    >>> tree.get_macro("section").get_argument()
    'Intro'

"""

from __future__ import annotations

import logging
from typing import Optional

from latextree.constants import (
    ARGUMENT_CONTINUATION_CHARS,
    BEGIN_COMMAND,
    COMMENT_CHAR,
    END_COMMAND,
    ESCAPE_CHAR,
    GROUP_CLOSE,
    GROUP_OPEN,
    MATH_SHIFT,
    OPTION_CLOSE,
    OPTION_OPEN,
    STAR,
    VERBATIM_COMMAND,
    WHITESPACE_CHARS,
)
from latextree.exceptions import ParseError, ValidationError
from latextree.options import ParserOptions
from latextree.parse_tree import ParseTree
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
    Root,
    Text,
    UnclosedGroup,
    Verbatim,
    Whitespace,
    is_whitespace_text,
    make_boundary_command,
    make_math_delimiter,
)

logger = logging.getLogger(__name__)

_MATH_OPENERS = ("\\(", "\\[")
_MATH_CLOSERS = ("\\)", "\\]")


def _is_open_optional(context: Envelope) -> bool:
    """True for an optional argument whose ``]`` has not been seen."""
    return isinstance(context, Argument) and context.is_optional


class _ParseRun:
    """State of one parse; discarded when the parse ends."""

    def __init__(self, source: str, options: ParserOptions):
        self.source = source
        self.length = len(source)
        self.pos = 0
        self.line = 1
        self.letters = options.letters
        self.active_characters = options.active_characters
        self.raw_environments = options.raw_environments
        self.math_environments = options.math_environments
        self.root = Root(line_number=1)
        self.stack: list[Envelope] = [self.root]
        # Command whose argument list is still open, and the whitespace and
        # comments seen since its last argument.
        self.pending: Optional[Command] = None
        self.buffer: list[Node] = []

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> Root:
        source = self.source
        while self.pos < self.length:
            char = source[self.pos]
            if self.pending is not None and self._buffer_separator(char):
                continue
            if char == ESCAPE_CHAR:
                self._read_control_sequence()
            elif char == GROUP_OPEN:
                self._read_group_open()
            elif char == GROUP_CLOSE:
                self._read_group_close()
            elif char == COMMENT_CHAR:
                self._read_comment()
            elif char == MATH_SHIFT:
                self._read_math_shift()
            elif char == OPTION_OPEN and self.pending is not None:
                self._open_argument(optional=True)
            elif char == OPTION_CLOSE and self._optional_argument_open():
                self._close_optional_argument()
            elif char in self.active_characters:
                self._read_active_character()
            else:
                self._read_text()
        self._finish()
        return self.root

    def _advance(self, end: int) -> None:
        self.line += self.source.count("\n", self.pos, end)
        self.pos = end

    def _append(self, node: Node) -> None:
        self.stack[-1].add_child(node)

    def _add_text(self, content: str, line: int) -> None:
        container = self.stack[-1]
        last = container.get_child(-1)
        whitespace = is_whitespace_text(content)
        if isinstance(last, Text) and (whitespace or not isinstance(last, Whitespace)):
            last.content += content
            return
        self._append(Whitespace(content, line_number=line) if whitespace else Text(content, line_number=line))

    def _whitespace_end(self, start: int) -> int:
        end = start
        while end < self.length and self.source[end] in WHITESPACE_CHARS:
            end += 1
        return end

    # ------------------------------------------------------------------
    # Argument lists
    # ------------------------------------------------------------------

    def _buffer_separator(self, char: str) -> bool:
        """Keep whitespace that separates a command from its next argument.

        Returns True when the whitespace was buffered. Any token that cannot
        continue the argument list ends it.
        """
        if char in ARGUMENT_CONTINUATION_CHARS:
            return False
        if char in WHITESPACE_CHARS:
            end = self._whitespace_end(self.pos)
            if end < self.length and self.source[end] in ARGUMENT_CONTINUATION_CHARS:
                self.buffer.append(Whitespace(self.source[self.pos : end], line_number=self.line))
                self._advance(end)
                return True
        self._end_arguments()
        return False

    def _end_arguments(self) -> None:
        if self.buffer:
            self.stack[-1].add_children(self.buffer)
            self.buffer = []
        self.pending = None

    def _open_argument(self, optional: bool) -> None:
        command = self.pending
        assert command is not None
        argument = Argument.opened(optional, line_number=self.line)
        if self.buffer:
            command.add_children(self.buffer)
            self.buffer = []
        command.add_child(argument)
        self.stack.append(argument)
        self.pending = None
        self._advance(self.pos + 1)

    def _optional_argument_open(self) -> bool:
        top = self.stack[-1]
        return isinstance(top, Argument) and top.is_optional

    def _close_optional_argument(self) -> None:
        argument = self.stack.pop()
        argument.set_closing(Text(OPTION_CLOSE, line_number=self.line))
        self._advance(self.pos + 1)
        assert isinstance(argument, Argument)
        self._argument_closed(argument)

    def _argument_closed(self, argument: Argument) -> None:
        command = argument.owner
        self.pending = command
        if command is None or argument.is_optional or len(command.required_arguments) != 1:
            return
        if command.name == BEGIN_COMMAND:
            self._begin_environment(command, argument)
        elif command.name == END_COMMAND:
            self._end_environment(command, argument)

    # ------------------------------------------------------------------
    # Closing contexts
    # ------------------------------------------------------------------

    def _close_context(self, index: int, closing: Node) -> Envelope:
        self._force_close_above(index)
        context = self.stack.pop()
        context.set_closing(closing)
        return context

    def _force_close_above(self, index: int) -> None:
        while len(self.stack) > index + 1:
            context = self.stack.pop()
            if isinstance(context, Group):
                parent = context.parent
                replacement = UnclosedGroup.from_group(context)
                if parent is not None:
                    parent.replace_child(context, replacement)
                logger.debug("Group opened on line %d was never closed", context.line_number)
            else:
                logger.debug("%s opened on line %d was never closed", context.kind.value, context.line_number)

    def _finish(self) -> None:
        if self.pending is not None:
            self._end_arguments()
        self._force_close_above(0)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _read_text(self) -> None:
        stops = {ESCAPE_CHAR, GROUP_OPEN, GROUP_CLOSE, COMMENT_CHAR, MATH_SHIFT, *self.active_characters}
        if self._optional_argument_open():
            stops.add(OPTION_CLOSE)
        start = self.pos
        end = start + 1
        while end < self.length and self.source[end] not in stops:
            end += 1
        line = self.line
        self._advance(end)
        self._add_text(self.source[start:end], line)

    def _read_comment(self) -> None:
        newline = self.source.find("\n", self.pos)
        end = self.length if newline < 0 else newline + 1
        comment = Comment(self.source[self.pos : end], line_number=self.line)
        self._advance(end)
        if self.pending is not None:
            self.buffer.append(comment)
        else:
            self._append(comment)

    def _read_active_character(self) -> None:
        self._append(Command(self.source[self.pos], True, line_number=self.line))
        self._advance(self.pos + 1)

    def _read_group_open(self) -> None:
        if self.pending is not None:
            self._open_argument(optional=False)
            return
        group = Group.opened(line_number=self.line)
        self._append(group)
        self.stack.append(group)
        self._advance(self.pos + 1)

    def _read_group_close(self) -> None:
        line = self.line
        index = None
        for position in range(len(self.stack) - 1, 0, -1):
            context = self.stack[position]
            if isinstance(context, Group) or (isinstance(context, Argument) and not context.is_optional):
                index = position
                break
        self._advance(self.pos + 1)
        if index is None:
            logger.debug("Unmatched '}' on line %d kept as text", line)
            self._add_text(GROUP_CLOSE, line)
            return
        context = self._close_context(index, Text(GROUP_CLOSE, line_number=line))
        if isinstance(context, Argument):
            self._argument_closed(context)

    def _read_control_sequence(self) -> None:
        source = self.source
        start, line = self.pos, self.line
        if start + 1 >= self.length:
            logger.debug("Lone backslash at end of input on line %d kept as text", line)
            self._advance(self.length)
            self._add_text(ESCAPE_CHAR, line)
            return

        first = source[start + 1]
        if first in self.letters:
            end = start + 2
            while end < self.length and source[end] in self.letters:
                end += 1
            name = source[start + 1 : end]
            if name == VERBATIM_COMMAND and self._read_verbatim(end, line):
                return
        else:
            end = start + 2
            name = first
            token = ESCAPE_CHAR + first
            if token in _MATH_OPENERS:
                self._open_math(token, line)
                self._advance(end)
                return
            if token in _MATH_CLOSERS:
                index = self._find_math(token)
                if index is not None:
                    self._advance(end)
                    self._close_context(index, make_math_delimiter(token, line))
                    return

        if end < self.length and source[end] == STAR:
            name += STAR
            end += 1
        command = Command(name, line_number=line)
        self._append(command)
        self._advance(end)
        self.pending = command

    def _read_verbatim(self, name_end: int, line: int) -> bool:
        source = self.source
        position = name_end
        starred = position < self.length and source[position] == STAR
        if starred:
            position += 1
        if position >= self.length:
            return False
        delimiter = source[position]
        if delimiter in self.letters or delimiter in WHITESPACE_CHARS:
            return False
        close = source.find(delimiter, position + 1)
        if close < 0:
            logger.debug("\\verb on line %d has no closing %r; kept as a command", line, delimiter)
            return False
        self._append(Verbatim(source[position + 1 : close], delimiter, starred, line_number=line))
        self._advance(close + 1)
        return True

    # ------------------------------------------------------------------
    # Math
    # ------------------------------------------------------------------

    def _find_math(self, closing: str) -> Optional[int]:
        r"""Return the stack index of the open math span closed by ``closing``.

        Only math spans above the innermost group, required argument or
        environment are candidates. Open optional arguments are passed over,
        so ``$x \in [0,1)$`` closes its math span.
        """
        for index in range(len(self.stack) - 1, 0, -1):
            context = self.stack[index]
            if _is_open_optional(context):
                continue
            if not isinstance(context, Math):
                return None
            if context.closing_delimiter == closing:
                return index
        return None

    def _innermost_math(self) -> Optional[Math]:
        for context in reversed(self.stack):
            if not _is_open_optional(context):
                return context if isinstance(context, Math) else None
        return None

    def _open_math(self, token: str, line: int) -> None:
        math = Math.opened(token, line_number=line)
        self._append(math)
        self.stack.append(math)

    def _read_math_shift(self) -> None:
        line = self.line
        token = "$$" if self.source.startswith("$$", self.pos) else MATH_SHIFT
        innermost = self._innermost_math()
        if token == "$$" and innermost is not None and innermost.delimiter == MATH_SHIFT:
            # "$a$$b$": the first "$" of the pair closes the inline span.
            token = MATH_SHIFT
        end = self.pos + len(token)
        index = self._find_math(token)
        self._advance(end)
        if index is not None:
            self._close_context(index, Text(token, line_number=line))
        else:
            self._open_math(token, line)

    # ------------------------------------------------------------------
    # Environments
    # ------------------------------------------------------------------

    def _begin_environment(self, command: Command, argument: Argument) -> None:
        name = argument.get_text()
        container = command.parent
        assert container is not None
        if name in self.raw_environments:
            self._read_raw_environment(command, container, name)
            return
        environment_class = MathEnvironment if name in self.math_environments else Environment
        environment = environment_class(name, line_number=command.line_number)
        container.replace_child(command, environment)
        environment.set_opening(command)
        environment.set_closing(None)
        self.stack.append(environment)
        # \begin keeps collecting arguments after the name.
        self.pending = command

    def _read_raw_environment(self, command: Command, container: Node, name: str) -> None:
        environment = Environment(name, True, line_number=command.line_number)
        container.replace_child(command, environment)
        environment.set_opening(command)
        terminator = f"\\{END_COMMAND}{{{name}}}"
        found = self.source.find(terminator, self.pos)
        body_end = self.length if found < 0 else found
        if body_end > self.pos:
            environment.add_child(Text(self.source[self.pos : body_end], line_number=self.line))
        self._advance(body_end)
        if found < 0:
            logger.debug("Raw environment '%s' from line %d runs to the end of input", name, command.line_number)
            environment.set_closing(None)
        else:
            environment.set_closing(make_boundary_command(END_COMMAND, name, self.line))
            self._advance(found + len(terminator))
        self.pending = None

    def _end_environment(self, command: Command, argument: Argument) -> None:
        name = argument.get_text()
        index = None
        for position in range(len(self.stack) - 1, 0, -1):
            context = self.stack[position]
            if _is_open_optional(context):
                continue
            if isinstance(context, Argument):
                logger.debug("\\end{%s} on line %d is inside an argument; kept as a command", name, command.line_number)
                return
            if isinstance(context, Environment):
                index = position
                break
        if index is None:
            raise ParseError(
                f"\\end{{{name}}} without a matching \\begin{{{name}}}",
                line_number=command.line_number,
                environment_name=name,
                tree_dump=self.root.to_tree_string(),
            )
        environment = self.stack[index]
        assert isinstance(environment, Environment)
        if environment.name != name:
            raise ParseError(
                f"\\end{{{name}}} does not match \\begin{{{environment.name}}} from line {environment.line_number}",
                line_number=command.line_number,
                environment_name=name,
                tree_dump=self.root.to_tree_string(),
            )
        parent = command.parent
        assert parent is not None
        parent.remove_child(command)
        self._close_context(index, command)
        self.pending = None


class LatexParser:
    r"""Parse LaTeX sources into ParseTree objects.

    A parser holds only its options, so one instance may be shared between
    threads; every call to ``parse`` works on private state.

    Parameters
    ----------
    options : ParserOptions or None, default None
        Parser configuration options

    Examples
    --------
        >>> parser = LatexParser(ParserOptions(at_letter=True))
        >>> tree = parser.parse(r"\def\my@macro{x}")

    """

    def __init__(self, options: ParserOptions | None = None):
        """Initialize the parser."""
        if options is not None and not isinstance(options, ParserOptions):
            raise ValidationError(
                f"Expected ParserOptions, got {type(options).__name__}",
                parameter_name="options",
                parameter_value=options,
            )
        self.options = options or ParserOptions()

    def parse(self, source: str) -> ParseTree:
        r"""Parse a LaTeX source string.

        Parameters
        ----------
        source : str
            LaTeX source text

        Returns
        -------
        ParseTree
            Tree whose ``to_latex()`` reproduces ``source``

        Raises
        ------
        ValidationError
            If ``source`` is not a string
        ParseError
            If an ``\end{...}`` has no matching open environment

        """
        if not isinstance(source, str):
            raise ValidationError(
                f"LaTeX source must be str, got {type(source).__name__}",
                parameter_name="source",
                parameter_value=type(source).__name__,
            )
        if self.options.normalize_newlines:
            source = source.replace("\r\n", "\n").replace("\r", "\n")
        root = _ParseRun(source, self.options).run()
        logger.debug("Parsed %d characters into %d top-level nodes", len(source), root.child_count)
        return ParseTree(root, source)


def parse(source: str, options: ParserOptions | None = None) -> ParseTree:
    """Parse a LaTeX source string with the given options.

    Parameters
    ----------
    source : str
        LaTeX source text
    options : ParserOptions or None, default None
        Parser configuration options

    Returns
    -------
    ParseTree
        The parse tree of ``source``

    """
    return LatexParser(options).parse(source)
