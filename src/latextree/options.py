#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/options.py
"""Parser options for latextree.

Options are immutable; use ``create_updated`` to derive a modified copy.

Examples
--------
>>> options = ParserOptions().create_updated(at_letter=True)
>>> options.at_letter
True

"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any, Iterable

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from latextree.constants import (
    ASCII_LETTERS,
    DEFAULT_ACTIVE_CHARACTERS,
    DEFAULT_MATH_ENVIRONMENTS,
    DEFAULT_RAW_ENVIRONMENTS,
    WHITESPACE_CHARS,
)
from latextree.exceptions import ValidationError

_RESERVED_CHARACTERS = frozenset("\\{}$%[]")


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        Raises
        ------
        ValidationError
            If a keyword does not name an option

        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ValidationError(
                f"Unknown option(s): {', '.join(unknown)}",
                parameter_name=unknown[0],
                parameter_value=kwargs[unknown[0]],
            )
        return replace(self, **kwargs)


@dataclass(frozen=True)
class ParserOptions(CloneFrozenMixin):
    """Configuration options for the LaTeX parser.

    Parameters
    ----------
    raw_environments : frozenset of str
        Environments whose body is kept as literal text up to the matching
        ``\\end{name}``.
    math_environments : frozenset of str
        Environments parsed as math environments.
    at_letter : bool, default False
        Treat ``@`` as a letter inside control words, as in ``\\makeatletter``
        regions and package sources.
    active_characters : str, default "~"
        Characters that form one-character commands without a backslash.
    normalize_newlines : bool, default False
        Convert ``\\r\\n`` and ``\\r`` to ``\\n`` before parsing. The regenerated
        source then differs from the input wherever carriage returns occurred.

    """

    raw_environments: frozenset[str] = field(
        default=DEFAULT_RAW_ENVIRONMENTS,
        metadata={"help": "Environments whose body is kept verbatim", "importance": "core"},
    )
    math_environments: frozenset[str] = field(
        default=DEFAULT_MATH_ENVIRONMENTS,
        metadata={"help": "Environments parsed as math environments", "importance": "core"},
    )
    at_letter: bool = field(
        default=False,
        metadata={"help": "Treat '@' as a letter in command names", "importance": "advanced"},
    )
    active_characters: str = field(
        default=DEFAULT_ACTIVE_CHARACTERS,
        metadata={"help": "Characters parsed as one-character commands", "importance": "advanced"},
    )
    normalize_newlines: bool = field(
        default=False,
        metadata={"help": "Convert CRLF and CR line endings to LF before parsing", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Normalize environment collections and validate characters.

        Raises
        ------
        ValidationError
            If an option has an unusable value.

        """
        for name in ("raw_environments", "math_environments"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ValidationError(f"{name} must be a collection of names, not a string", name, value)
            object.__setattr__(self, name, _to_name_set(name, value))

        overlap = self.raw_environments & self.math_environments
        if overlap:
            raise ValidationError(
                f"Environments cannot be both raw and math: {', '.join(sorted(overlap))}",
                "raw_environments",
                sorted(overlap),
            )

        if not isinstance(self.active_characters, str):
            raise ValidationError("active_characters must be a string", "active_characters", self.active_characters)
        for char in self.active_characters:
            if char in _RESERVED_CHARACTERS or char in ASCII_LETTERS or char in WHITESPACE_CHARS or char == "@":
                raise ValidationError(
                    f"Character {char!r} cannot be an active character",
                    "active_characters",
                    self.active_characters,
                )

    @property
    def letters(self) -> frozenset[str]:
        """Characters that may appear in a control word."""
        return ASCII_LETTERS | {"@"} if self.at_letter else ASCII_LETTERS


def _to_name_set(name: str, value: Iterable[str]) -> frozenset[str]:
    try:
        names = frozenset(value)
    except TypeError as exc:
        raise ValidationError(f"{name} must be iterable", name, value, original_error=exc) from exc
    for item in names:
        if not isinstance(item, str) or not item:
            raise ValidationError(f"{name} entries must be non-empty strings", name, item)
    return names
