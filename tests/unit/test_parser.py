#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_parser.py
"""Unit tests for the LaTeX parser.

Tests cover:
- Lossless regeneration of the source
- Commands, arguments and the whitespace between them
- Groups, stray and missing braces
- Math spans and environments
- Comments, verbatim and active characters
- Line numbers and parse errors

"""

import warnings
from pathlib import Path

import pytest
from utils import kinds

import latextree
from latextree import ParseError, ParserOptions, ValidationError, parse
from latextree.parser import LatexParser
from latextree.tree import (
    Command,
    Comment,
    Environment,
    Group,
    Math,
    MathEnvironment,
    Text,
    UnclosedGroup,
    Verbatim,
    Whitespace,
)


@pytest.mark.unit
class TestRoundTrip:
    """Tests that parsing never loses a character."""

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "plain text",
            "\\section{Intro} This is text.",
            "a % comment\nb",
            "a}b}}",
            "{unclosed {nested",
            "$x$ and $$y$$ and \\(z\\) and \\[w\\]",
            "\\begin{itemize}\n  \\item one\n  \\item[b] two\n\\end{itemize}\n",
            "\\begin{verbatim}\n\\end{itemize} {\n\\end{verbatim}",
            "\\verb|{| and \\verb*+x+",
            "a~b\\\\c\\%d",
            "line\r\nwindows\rmac",
            "\\foo \n % note\n [opt] {req}",
            "\\",
            "\\begin{a}\\begin{b}",
        ],
    )
    def test_to_latex_reproduces_source(self, source):
        """Test that regenerating LaTeX yields the input exactly."""
        assert parse(source).to_latex() == source

    def test_sample_article_round_trip(self, sample_article):
        """Test a full document round trip."""
        assert parse(sample_article).to_latex() == sample_article

    def test_reparse_is_stable(self, sample_article):
        """Test that parsing the regenerated source gives the same tree."""
        tree = parse(sample_article)
        assert parse(tree.to_latex()).to_tree_string() == tree.to_tree_string()

    def test_empty_source_has_no_children(self):
        """Test that an empty source gives an empty root."""
        tree = parse("")
        assert tree.root.child_count == 0
        assert tree.to_latex() == ""


@pytest.mark.unit
class TestCommands:
    """Tests for control sequences and their arguments."""

    def test_section_followed_by_text(self):
        """Test that the text after a command's argument is a single Text node."""
        tree = parse("\\section{Intro} This is text.")
        children = tree.root.get_children()
        assert kinds(children) == ["Command", "Text"]
        command, text = children
        assert command.name == "section"
        assert command.get_argument() == "Intro"
        assert text.content == " This is text."

    def test_optional_and_required_arguments(self):
        """Test that optional and required arguments attach in order."""
        tree = parse("\\documentclass[11pt, a4paper]{article}")
        command = tree.root.get_child(0)
        assert isinstance(command, Command)
        assert [arg.is_optional for arg in command.arguments] == [True, False]
        assert command.get_options() == ["11pt, a4paper"]
        assert command.get_arguments() == ["11pt, a4paper", "article"]
        assert command.get_argument() == "article"

    def test_whitespace_before_argument_is_kept_in_command(self):
        """Test that whitespace separating a command from its argument stays with the command."""
        tree = parse("\\foo {a}")
        command = tree.root.get_child(0)
        assert tree.root.child_count == 1
        assert kinds(command.get_children()) == ["Whitespace", "Argument"]

    def test_comment_between_arguments(self):
        """Test that comments between arguments stay inside the command."""
        tree = parse("\\foo{a} % note\n {b}")
        command = tree.root.get_child(0)
        assert kinds(command.get_children()) == ["Argument", "Whitespace", "Comment", "Whitespace", "Argument"]
        assert command.get_arguments() == ["a", "b"]

    def test_whitespace_not_followed_by_argument_returns_to_parent(self):
        """Test that trailing whitespace after a command is ordinary text."""
        tree = parse("\\foo  bar")
        assert kinds(tree.root.get_children()) == ["Command", "Text"]
        assert tree.root.get_child(0).child_count == 0
        assert tree.root.get_child(1).content == "  bar"

    def test_comment_after_command_without_argument(self):
        """Test that a comment not followed by an argument is a sibling of the command."""
        tree = parse("\\foo%c\nbar")
        assert kinds(tree.root.get_children()) == ["Command", "Comment", "Text"]

    def test_command_between_commands_gets_whitespace_node(self):
        """Test that whitespace between two commands is a Whitespace node."""
        tree = parse("\\a \\b")
        assert kinds(tree.root.get_children()) == ["Command", "Whitespace", "Command"]

    def test_starred_command(self):
        """Test that a trailing star belongs to the command name."""
        tree = parse("\\section*{Preface}")
        command = tree.root.get_child(0)
        assert command.name == "section*"
        assert command.is_starred
        assert tree.get_macro("section") is None
        assert tree.get_macro("section*") is command

    def test_control_symbols(self):
        """Test one-character control sequences."""
        tree = parse("50\\% and\\\\next")
        names = [node.name for node in tree.iter_nodes() if isinstance(node, Command)]
        assert names == ["%", "\\"]
        assert tree.root.get_child(0).content == "50"

    def test_lone_backslash_at_end_is_text(self):
        """Test that a trailing backslash is kept as text."""
        tree = parse("a\\")
        assert kinds(tree.root.get_children()) == ["Text"]
        assert tree.root.get_child(0).content == "a\\"

    def test_at_letter_disabled_by_default(self):
        """Test that '@' ends a control word by default."""
        tree = parse("\\my@macro")
        assert tree.root.get_child(0).name == "my"
        assert tree.root.get_child(1).content == "@macro"

    def test_at_letter_option(self, at_letter_options):
        """Test that '@' belongs to control words when enabled."""
        tree = parse("\\my@macro", at_letter_options)
        assert tree.root.child_count == 1
        assert tree.root.get_child(0).name == "my@macro"

    def test_nested_arguments(self):
        """Test commands nested inside arguments."""
        tree = parse("\\textbf{\\emph{x}}")
        outer = tree.root.get_child(0)
        argument = outer.arguments[0]
        inner = argument.get_child(0)
        assert isinstance(inner, Command)
        assert inner.name == "emph"
        assert inner.get_argument() == "x"
        assert argument.owner is outer

    def test_square_brackets_without_command_are_text(self):
        """Test that brackets only open arguments after a command."""
        tree = parse("a [b] c")
        assert kinds(tree.root.get_children()) == ["Text"]

    def test_closing_bracket_inside_required_argument_is_text(self):
        """Test that ']' only closes an optional argument."""
        tree = parse("\\foo{a]b}")
        assert tree.root.get_child(0).get_argument() == "a]b"


@pytest.mark.unit
class TestGroups:
    """Tests for brace groups and brace recovery."""

    def test_group(self):
        """Test a closed brace group."""
        tree = parse("{\\bf x}")
        group = tree.root.get_child(0)
        assert isinstance(group, Group)
        assert group.is_closed
        assert group.get_content_latex() == "\\bf x"

    def test_stray_closing_brace_merges_into_text(self):
        """Test that an unmatched '}' becomes text merged with its neighbours."""
        tree = parse("a}b")
        assert kinds(tree.root.get_children()) == ["Text"]
        assert tree.root.get_child(0).content == "a}b"

    def test_unclosed_group_at_end(self):
        """Test that a group open at the end of input becomes an UnclosedGroup."""
        tree = parse("{a{b}")
        group = tree.root.get_child(0)
        assert isinstance(group, UnclosedGroup)
        assert group.closing is None
        assert kinds(group.get_children()) == ["Text", "Group"]
        assert tree.to_latex() == "{a{b}"

    def test_closing_brace_closes_innermost_group(self):
        """Test that '}' closes the innermost group and leaves outer ones open."""
        tree = parse("{a{b}c")
        outer = tree.root.get_child(0)
        inner = outer.get_child(1)
        assert isinstance(inner, Group) and not isinstance(inner, UnclosedGroup)
        assert inner.is_closed

    def test_closing_brace_force_closes_math(self):
        """Test that '}' closes its group even when math inside is still open."""
        tree = parse("{a $b} c")
        group = tree.root.get_child(0)
        assert isinstance(group, Group) and group.is_closed
        math = group.get_child(1)
        assert isinstance(math, Math)
        assert not math.is_closed
        assert tree.root.get_child(1).content == " c"

    def test_groups_open_at_end_become_unclosed(self):
        """Test that groups still open at the end of input become UnclosedGroup nodes."""
        tree = parse("\\foo{{a")
        argument = tree.root.get_child(0).arguments[0]
        assert not argument.is_closed
        assert kinds(argument.get_children()) == ["UnclosedGroup"]
        tree = parse("\\foo{{a}")
        argument = tree.root.get_child(0).arguments[0]
        assert not argument.is_closed
        assert kinds(argument.get_children()) == ["Group"]

    def test_unclosed_optional_argument(self):
        """Test that an optional argument open at the end stays an Argument."""
        tree = parse("\\foo[a}")
        argument = tree.root.get_child(0).arguments[0]
        assert argument.is_optional
        assert argument.closing is None
        assert argument.get_text() == "a}"


@pytest.mark.unit
class TestMath:
    """Tests for math spans."""

    @pytest.mark.parametrize(
        "source,delimiter,display",
        [
            ("$x$", "$", False),
            ("$$x$$", "$$", True),
            ("\\(x\\)", "\\(", False),
            ("\\[x\\]", "\\[", True),
        ],
    )
    def test_math_delimiters(self, source, delimiter, display):
        """Test each kind of math span."""
        tree = parse(source)
        math = tree.root.get_child(0)
        assert isinstance(math, Math)
        assert math.delimiter == delimiter
        assert math.is_display is display
        assert math.is_closed
        assert math.get_content_latex() == "x"

    def test_command_delimiters_are_commands(self):
        """Test that \\( and \\) delimiters are Command nodes."""
        math = parse("\\(x\\)").root.get_child(0)
        assert isinstance(math.opening, Command) and math.opening.name == "("
        assert isinstance(math.closing, Command) and math.closing.name == ")"

    def test_adjacent_inline_math(self):
        """Test that '$a$$b$' is two inline spans."""
        tree = parse("$a$$b$")
        assert kinds(tree.root.get_children()) == ["Math", "Math"]
        assert [math.get_content_latex() for math in tree.root.get_children()] == ["a", "b"]

    def test_commands_inside_math(self):
        """Test that commands inside math are parsed."""
        tree = parse("$\\alpha^{2}$")
        math = tree.root.get_child(0)
        command = math.get_child(0)
        assert command.name == "alpha"
        assert kinds(math.get_children()) == ["Command", "Text", "Group"]

    def test_unclosed_math_at_end(self):
        """Test that math open at the end has no closing delimiter."""
        math = parse("$x").root.get_child(0)
        assert isinstance(math, Math)
        assert math.closing is None

    def test_unmatched_closing_delimiter_is_command(self):
        """Test that \\) without an open span is an ordinary command."""
        tree = parse("a\\)b")
        assert kinds(tree.root.get_children()) == ["Text", "Command", "Text"]

    def test_open_optional_argument_does_not_hide_math_close(self):
        """Test that a half-open interval inside math does not swallow the closing dollar."""
        tree = parse("$x \\in [0,1)$ and $y$")
        assert kinds(tree.root.get_children()) == ["Math", "Text", "Math"]
        first = tree.root.get_child(0)
        assert first.is_closed
        argument = tree.get_macro("in").arguments[0]
        assert argument.is_optional
        assert not argument.is_closed
        assert argument.get_text() == "0,1)"
        assert tree.to_latex() == "$x \\in [0,1)$ and $y$"

    def test_open_optional_argument_does_not_hide_command_close(self):
        """Test that \\] closes display math across an open optional argument."""
        tree = parse("\\[\\foo[a\\]b")
        math = tree.root.get_child(0)
        assert isinstance(math, Math) and math.is_closed
        assert tree.root.get_child(1).content == "b"


@pytest.mark.unit
class TestEnvironments:
    """Tests for environments."""

    def test_environment(self):
        """Test a simple environment."""
        tree = parse("\\begin{itemize}\\item a\\end{itemize}")
        environment = tree.root.get_child(0)
        assert isinstance(environment, Environment)
        assert environment.name == "itemize"
        assert environment.get_type() == "environment"
        assert kinds(environment.get_children()) == ["Command", "Text"]
        assert environment.opening.to_latex() == "\\begin{itemize}"
        assert environment.closing.to_latex() == "\\end{itemize}"

    def test_begin_extra_arguments(self):
        """Test that arguments after the name belong to \\begin."""
        tree = parse("\\begin{tabular}[t]{ll}a & b\\end{tabular}")
        environment = tree.get_environment("tabular")
        assert environment.get_arguments() == ["t", "ll"]
        assert environment.get_options() == ["t"]
        assert environment.get_argument() == "ll"
        assert environment.get_content_latex() == "a & b"
        assert environment.get_declaration() == "\\begin{tabular}[]{}"

    def test_math_environment(self):
        """Test that configured math environments get their own node kind."""
        tree = parse("\\begin{align*}x &= 1\\end{align*}")
        environment = tree.root.get_child(0)
        assert isinstance(environment, MathEnvironment)
        assert environment.get_type() == "math-environment"

    def test_raw_environment_body_is_literal(self):
        """Test that raw environments keep their body as one Text node."""
        source = "\\begin{verbatim}\\textbf{x} { $\n\\end{verbatim}after"
        tree = parse(source)
        environment = tree.root.get_child(0)
        assert environment.raw
        assert environment.get_type() == "raw-environment"
        assert kinds(environment.get_children()) == ["Text"]
        assert environment.get_child(0).content == "\\textbf{x} { $\n"
        assert environment.is_closed
        assert tree.root.get_child(1).content == "after"
        assert tree.to_latex() == source

    def test_unterminated_raw_environment(self):
        """Test that a raw environment without \\end runs to the end."""
        tree = parse("\\begin{verbatim}abc")
        environment = tree.root.get_child(0)
        assert environment.closing is None
        assert environment.get_content_latex() == "abc"

    def test_custom_raw_environment(self):
        """Test configuring additional raw environments."""
        options = ParserOptions(raw_environments=frozenset({"code"}))
        tree = parse("\\begin{code}{\\end{verbatim}\\end{code}", options)
        assert tree.get_environment("code").raw

    def test_nested_environments(self):
        """Test environments inside environments."""
        tree = parse("\\begin{a}\\begin{b}x\\end{b}\\end{a}")
        outer = tree.get_environment("a")
        inner = tree.get_environment("b")
        assert inner.parent is outer
        assert inner.get_text() == "x"

    def test_unclosed_environment(self):
        """Test that an environment open at the end has no closing."""
        tree = parse("\\begin{document}text")
        environment = tree.root.get_child(0)
        assert environment.closing is None
        assert environment.get_text() == "text"

    def test_end_inside_argument_is_ordinary_command(self):
        """Test that \\end inside an argument does not close the environment."""
        tree = parse("\\begin{a}\\foo{\\end{a}}\\end{a}")
        environment = tree.get_environment("a")
        assert environment.is_closed
        assert len(tree.get_macros("end")) == 2

    def test_end_crosses_open_optional_argument(self):
        """Test that \\end closes its environment past an unclosed optional argument."""
        tree = parse("\\begin{document}$x\\in[0,1)$\\end{document}")
        environment = tree.get_environment("document")
        assert environment.is_closed
        assert environment.closing.name == "end"
        assert kinds(environment.get_children()) == ["Math"]
        assert tree.to_latex() == "\\begin{document}$x\\in[0,1)$\\end{document}"

    def test_end_force_closes_optional_argument(self):
        """Test that an optional argument left open inside an environment is force-closed."""
        tree = parse("\\begin{a}\\foo[x\\end{a} y")
        environment = tree.get_environment("a")
        assert environment.is_closed
        argument = tree.get_macro("foo").arguments[0]
        assert not argument.is_closed
        assert tree.root.get_child(1).content == " y"

    def test_end_closes_groups_inside_environment(self):
        """Test that \\end force-closes groups opened inside the environment."""
        tree = parse("\\begin{a}x{y\\end{a}")
        environment = tree.get_environment("a")
        assert environment.is_closed
        assert isinstance(environment.get_child(1), UnclosedGroup)

    def test_end_without_begin_raises(self):
        """Test that an orphaned \\end is a parse error with its line number."""
        with pytest.raises(ParseError) as exc_info:
            parse("a\nb\n\\end{foo}")
        error = exc_info.value
        assert error.line_number == 3
        assert error.environment_name == "foo"
        assert "line 3" in str(error)
        assert error.tree_dump.startswith("Root [1]")

    def test_mismatched_end_raises(self):
        """Test that \\end must name the innermost open environment."""
        with pytest.raises(ParseError) as exc_info:
            parse("\\begin{a}\n\\begin{b}\n\\end{a}")
        assert exc_info.value.line_number == 3
        assert exc_info.value.environment_name == "a"


@pytest.mark.unit
class TestLeaves:
    """Tests for comments, verbatim and active characters."""

    def test_comment_includes_newline(self):
        """Test that a comment runs up to and including its line break."""
        tree = parse("a % note\nb")
        assert kinds(tree.root.get_children()) == ["Text", "Comment", "Text"]
        comment = tree.root.get_child(1)
        assert comment.raw == "% note\n"
        assert comment.body == " note"
        assert tree.root.get_child(2).line_number == 2

    def test_comment_at_end_without_newline(self):
        """Test a comment that ends the input."""
        comment = parse("%end").root.get_child(0)
        assert isinstance(comment, Comment)
        assert comment.raw == "%end"

    def test_verbatim(self):
        """Test inline verbatim with any delimiter."""
        tree = parse("\\verb|x{| and \\verb*+a b+")
        first = tree.root.get_child(0)
        assert isinstance(first, Verbatim)
        assert first.content == "x{"
        assert first.delimiter == "|"
        last = tree.root.get_child(2)
        assert isinstance(last, Verbatim)
        assert last.starred
        assert last.content == "a b"

    def test_verb_without_closing_delimiter_is_command(self):
        """Test that an unterminated \\verb falls back to a command."""
        tree = parse("\\verb|abc")
        assert isinstance(tree.root.get_child(0), Command)

    def test_active_character(self):
        """Test that '~' is an active-character command."""
        tree = parse("a~b")
        assert kinds(tree.root.get_children()) == ["Text", "Command", "Text"]
        tie = tree.root.get_child(1)
        assert tie.active
        assert tie.token == "~"

    def test_custom_active_characters(self):
        """Test configuring active characters."""
        tree = parse("a~b", ParserOptions(active_characters=""))
        assert kinds(tree.root.get_children()) == ["Text"]


@pytest.mark.unit
class TestLineNumbers:
    """Tests for line tracking."""

    def test_line_numbers(self):
        """Test that nodes record the line they start on."""
        tree = parse("first\n\\foo{a\nb}\n$x$")
        command = tree.get_macro("foo")
        assert command.line_number == 2
        math = next(node for node in tree.iter_nodes() if isinstance(node, Math))
        assert math.line_number == 4

    def test_normalize_newlines(self):
        """Test that CRLF line endings can be normalized before parsing."""
        tree = parse("a\r\nb\rc", ParserOptions(normalize_newlines=True))
        assert tree.to_latex() == "a\nb\nc"
        assert tree.source == "a\nb\nc"


@pytest.mark.unit
class TestParserValidation:
    """Tests for parser argument validation."""

    def test_non_string_source_raises(self):
        """Test that bytes are rejected."""
        with pytest.raises(ValidationError):
            parse(b"\\foo")

    def test_invalid_options_type_raises(self):
        """Test that options must be ParserOptions."""
        with pytest.raises(ValidationError):
            LatexParser({"at_letter": True})

    def test_parser_reuse(self):
        """Test that one parser instance can parse many sources."""
        parser = LatexParser()
        first = parser.parse("\\a")
        second = parser.parse("\\b")
        assert first.get_macro("a") is not None
        assert second.get_macro("a") is None

    def test_text_and_whitespace_node_types(self):
        """Test that whitespace-only runs are Whitespace and others are Text."""
        tree = parse("\\a \n\\b x")
        whitespace = tree.root.get_child(1)
        assert isinstance(whitespace, Whitespace)
        assert type(tree.root.get_child(3)) is Text

    @pytest.mark.parametrize("module_path", sorted(Path(latextree.__file__).parent.rglob("*.py")), ids=str)
    def test_module_compiles_without_escape_warnings(self, module_path):
        """Test that docstrings mentioning LaTeX commands use valid escapes."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(module_path.read_text(encoding="utf-8"), str(module_path), "exec")
