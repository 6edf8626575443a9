#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/constants.py
"""Constants and default values for the latextree library.

This module centralizes the character classes, environment tables and
default configuration values used by the parser, the tree model and the
command-line interface.

Constants are organized by category:
- Lexical character classes
- Environment classification tables
- Definition command tables
- Tree dump formatting
- Configuration discovery
"""

from __future__ import annotations

import string
from typing import Final

# =============================================================================
# Lexical character classes
# =============================================================================

ASCII_LETTERS: Final[frozenset[str]] = frozenset(string.ascii_letters)

# Whitespace as far as text runs are concerned. Form feeds and other exotic
# separators are ordinary text.
WHITESPACE_CHARS: Final[str] = " \t\r\n"

ESCAPE_CHAR: Final[str] = "\\"
GROUP_OPEN: Final[str] = "{"
GROUP_CLOSE: Final[str] = "}"
OPTION_OPEN: Final[str] = "["
OPTION_CLOSE: Final[str] = "]"
MATH_SHIFT: Final[str] = "$"
COMMENT_CHAR: Final[str] = "%"
STAR: Final[str] = "*"

DEFAULT_ACTIVE_CHARACTERS: Final[str] = "~"

# Tokens that may follow a command (possibly after whitespace) and still
# belong to its argument list.
ARGUMENT_CONTINUATION_CHARS: Final[str] = "{[%"

# Math span delimiters, keyed by opening token.
MATH_DELIMITERS: Final[dict[str, str]] = {
    "$": "$",
    "$$": "$$",
    "\\(": "\\)",
    "\\[": "\\]",
}
DISPLAY_MATH_DELIMITERS: Final[frozenset[str]] = frozenset({"$$", "\\["})

VERBATIM_COMMAND: Final[str] = "verb"
BEGIN_COMMAND: Final[str] = "begin"
END_COMMAND: Final[str] = "end"

# =============================================================================
# Environment classification
# =============================================================================

DEFAULT_MATH_ENVIRONMENTS: Final[frozenset[str]] = frozenset(
    {
        "math",
        "displaymath",
        "equation",
        "equation*",
        "eqnarray",
        "eqnarray*",
        "align",
        "align*",
        "alignat",
        "alignat*",
        "flalign",
        "flalign*",
        "gather",
        "gather*",
        "multline",
        "multline*",
        "cases*",
        "dcases",
        "dcases*",
        "rcases",
        "rcases*",
    }
)

DEFAULT_RAW_ENVIRONMENTS: Final[frozenset[str]] = frozenset(
    {
        "verbatim",
        "verbatim*",
        "Verbatim",
        "BVerbatim",
        "LVerbatim",
        "lstlisting",
        "minted",
        "alltt",
        "comment",
        "filecontents",
        "filecontents*",
    }
)

# =============================================================================
# Definition commands
# =============================================================================

NEWCOMMAND_FAMILY: Final[frozenset[str]] = frozenset(
    {
        "newcommand",
        "newcommand*",
        "renewcommand",
        "renewcommand*",
        "providecommand",
        "providecommand*",
        "DeclareRobustCommand",
        "DeclareRobustCommand*",
    }
)

DEF_FAMILY: Final[frozenset[str]] = frozenset({"def", "gdef", "edef", "xdef"})

COMMAND_TYPE_PLAIN: Final[str] = "command"
COMMAND_TYPE_DEF: Final[str] = "def"
COMMAND_TYPE_DEF_WITH_ARG: Final[str] = "def-with-arg"
COMMAND_TYPE_MACRO_NO_ARG: Final[str] = "macro-no-arg"
COMMAND_TYPE_MACRO_WITH_ARG: Final[str] = "macro-with-arg"
COMMAND_TYPE_MACRO_OPT_ARG: Final[str] = "macro-opt-arg"

ENVIRONMENT_TYPE_PLAIN: Final[str] = "environment"
ENVIRONMENT_TYPE_MATH: Final[str] = "math-environment"
ENVIRONMENT_TYPE_RAW: Final[str] = "raw-environment"

# =============================================================================
# Tree dump formatting
# =============================================================================

TREE_INDENT: Final[str] = "  "
PREVIEW_MAX_LENGTH: Final[int] = 40
PREVIEW_ELLIPSIS: Final[str] = "..."

# =============================================================================
# Document hooks
# =============================================================================

TEX_LIVE_VERSION_COMMAND: Final[str] = "useTexLiveVersion"
TEX_LIVE_VERSION_DIRECTIVE: Final[str] = r"%__useTexLiveVersion\{([0-9]+)\}"
BIBLIOGRAPHY_COMMANDS: Final[tuple[str, ...]] = ("bibliography", "addbibresource")
BIB_EXTENSION: Final[str] = ".bib"

# =============================================================================
# Configuration discovery
# =============================================================================

CONFIG_FILE_NAMES: Final[tuple[str, ...]] = (
    ".latextree.toml",
    ".latextree.yaml",
    ".latextree.yml",
    ".latextree.json",
)
PYPROJECT_TOOL_SECTION: Final[str] = "latextree"
LOG_LEVEL_ENV_VAR: Final[str] = "LATEXTREE_LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

EXIT_SUCCESS: Final[int] = 0
EXIT_PARSE_ERROR: Final[int] = 1
EXIT_USAGE_ERROR: Final[int] = 2
