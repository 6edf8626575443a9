#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_definitions.py
"""Unit tests for command classification and definition commands.

Tests cover:
- ``\\newcommand`` family classification
- ``\\def`` family classification
- Declarations and defined names
- Environment types and declarations

"""

import pytest

from latextree import parse


def _first_command(source: str):
    tree = parse(source)
    return tree, tree.root.get_child(0)


@pytest.mark.unit
class TestNewCommand:
    """Tests for the \\newcommand family."""

    def test_macro_without_arguments(self):
        """Test a definition without parameters."""
        tree, command = _first_command("\\newcommand{\\R}{\\mathbb{R}}")
        assert command.get_type() == "macro-no-arg"
        assert command.get_defined_name() == "R"
        assert command.get_declaration() == "\\mathbb{R}"

    def test_macro_with_arguments(self):
        """Test a definition with a parameter count."""
        tree, command = _first_command("\\newcommand{\\foo}[1]{#1!}")
        assert command.get_type() == "macro-with-arg"
        assert command.get_declaration() == "#1!"

    def test_macro_with_zero_arguments(self):
        """Test that an explicit parameter count of zero means no arguments."""
        tree, command = _first_command("\\newcommand{\\foo}[0]{x}")
        assert command.get_type() == "macro-no-arg"

    def test_macro_with_optional_argument(self):
        """Test a definition with a default for the first parameter."""
        tree, command = _first_command("\\newcommand{\\foo}[2][x]{#1#2}")
        assert command.get_type() == "macro-opt-arg"
        assert command.get_declaration() == "#1#2"

    def test_name_without_braces(self):
        """Test \\newcommand\\foo{...} where the name is not braced."""
        tree, command = _first_command("\\newcommand\\foo[1]{bar}")
        assert command.get_type() == "macro-with-arg"
        assert command.get_defined_name() == "foo"
        assert command.get_declaration() == "bar"

    @pytest.mark.parametrize("name", ["renewcommand", "providecommand*", "DeclareRobustCommand"])
    def test_family_members(self, name):
        """Test other members of the family."""
        tree, command = _first_command(f"\\{name}{{\\x}}{{y}}")
        assert command.get_type() == "macro-no-arg"
        assert command.get_defined_name() == "x"


@pytest.mark.unit
class TestDef:
    """Tests for the \\def family."""

    def test_def(self):
        """Test a parameterless \\def."""
        tree, command = _first_command("\\def\\half{\\frac{1}{2}}")
        assert command.get_type() == "def"
        assert command.get_defined_name() == "half"
        assert command.get_declaration() == "\\frac{1}{2}"

    def test_def_with_parameters(self):
        """Test a \\def with a parameter text."""
        tree, command = _first_command("\\def\\pair#1#2{(#1,#2)}")
        assert command.get_type() == "def-with-arg"
        assert command.get_defined_name() == "pair"
        assert command.get_declaration() == "(#1,#2)"

    def test_gdef(self):
        """Test global definitions."""
        tree, command = _first_command("\\gdef\\x{y}")
        assert command.get_type() == "def"

    def test_def_without_target(self):
        """Test that a dangling \\def is an ordinary command."""
        tree, command = _first_command("\\def")
        assert command.get_type() == "command"
        assert command.get_defined_name() is None


@pytest.mark.unit
class TestPlainCommands:
    """Tests for ordinary commands."""

    def test_declaration_signature(self):
        """Test the argument signature of an ordinary command."""
        tree, command = _first_command("\\includegraphics[width=3cm]{a.png}")
        assert command.get_type() == "command"
        assert command.get_declaration() == "\\includegraphics[]{}"
        assert command.get_defined_name() is None

    def test_environment_declarations(self):
        """Test environment types and declarations."""
        tree = parse("\\begin{figure}[h]x\\end{figure}\\begin{verbatim}y\\end{verbatim}")
        figure = tree.get_environment("figure")
        assert figure.get_type() == "environment"
        assert figure.get_declaration() == "\\begin{figure}[]"
        assert tree.get_environment("verbatim").get_declaration() == "\\begin{verbatim}"
