#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/sources.py
"""Document and bibliography sources.

The parser works on strings only. Objects implementing ``DocumentSource``
supply those strings; ``LatexFile`` is the implementation for files on disk
and also reports the bibliography databases a document uses, which build
tooling needs to decide whether to run a bibliography processor.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from latextree.constants import BIB_EXTENSION, BIBLIOGRAPHY_COMMANDS
from latextree.exceptions import FileError, SourceNotFoundError
from latextree.options import ParserOptions
from latextree.parse_tree import ParseTree
from latextree.parser import parse
from latextree.tree.nodes import Command
from latextree.utils.encoding import decode_latex_bytes

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentSource(Protocol):
    """Anything that can hand out and replace LaTeX source text."""

    def get_contents(self) -> str:
        """Return the current source text."""
        ...

    def set_contents(self, contents: str) -> None:
        """Replace the source text."""
        ...

    def get_path(self) -> Optional[Path]:
        """Return the location of the source, if it has one."""
        ...


@runtime_checkable
class BibliographySource(Protocol):
    """Anything that can list the bibliography databases a document uses."""

    def get_paths_to_used_bib_files(self) -> list[Path]:
        """Return the paths of the ``.bib`` files the document loads."""
        ...


class LatexFile:
    """A LaTeX document stored on disk.

    The file is read lazily on first access. ``set_contents`` replaces the
    text in memory; ``save`` writes it back.

    Parameters
    ----------
    path : str or Path
        Location of the ``.tex`` file
    encoding : str, optional
        Encoding of the file; detected when omitted

    """

    def __init__(self, path: Union[str, Path], encoding: Optional[str] = None):
        self.path = Path(path)
        self.encoding = encoding
        self._contents: Optional[str] = None

    def __repr__(self) -> str:
        return f"LatexFile({str(self.path)!r})"

    def get_path(self) -> Path:
        """Return the file location."""
        return self.path

    def get_contents(self) -> str:
        """Return the document text, reading the file on first use.

        Raises
        ------
        SourceNotFoundError
            If the file does not exist
        FileError
            If the file cannot be read or decoded

        """
        if self._contents is None:
            self._contents = self._read()
        return self._contents

    def set_contents(self, contents: str) -> None:
        """Replace the document text in memory."""
        self._contents = contents

    def _read(self) -> str:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError as e:
            raise SourceNotFoundError(str(self.path), original_error=e) from e
        except OSError as e:
            raise FileError(f"Could not read {self.path}: {e}", file_path=str(self.path), original_error=e) from e
        try:
            text, encoding = decode_latex_bytes(data, self.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise FileError(
                f"Could not decode {self.path} as {self.encoding}", file_path=str(self.path), original_error=e
            ) from e
        self.encoding = encoding
        logger.debug("Read %d characters from %s (%s)", len(text), self.path, encoding)
        return text

    def save(self, path: Union[str, Path, None] = None) -> Path:
        """Write the current text to ``path`` (the original location by default).

        Raises
        ------
        FileError
            If the file cannot be written

        """
        target = Path(path) if path is not None else self.path
        try:
            target.write_text(self.get_contents(), encoding=self.encoding or "utf-8")
        except (OSError, UnicodeEncodeError) as e:
            raise FileError(f"Could not write {target}: {e}", file_path=str(target), original_error=e) from e
        return target

    def parse(self, options: Optional[ParserOptions] = None) -> ParseTree:
        """Parse the document text."""
        return parse(self.get_contents(), options)

    def get_style(self) -> Optional[str]:
        r"""Return the document class named by ``\documentclass``, or None."""
        command = self.parse().get_macro("documentclass")
        return command.get_argument() if command is not None else None

    def get_paths_to_used_bib_files(self) -> list[Path]:
        r"""Return the ``.bib`` files named by ``\bibliography`` and ``\addbibresource``.

        Relative names are resolved against the directory of this file and
        ``.bib`` is appended where missing. Each path is listed once.
        """
        tree = self.parse()
        base = self.path.parent
        paths: list[Path] = []
        for node in tree.iter_nodes():
            if not isinstance(node, Command) or node.name not in BIBLIOGRAPHY_COMMANDS:
                continue
            for name in (node.get_argument() or "").split(","):
                name = name.strip()
                if not name:
                    continue
                if not name.endswith(BIB_EXTENSION):
                    name += BIB_EXTENSION
                path = base / name
                if path not in paths:
                    paths.append(path)
        return paths


def parse_source(source: DocumentSource, options: Optional[ParserOptions] = None) -> ParseTree:
    """Parse the text supplied by a document source."""
    return parse(source.get_contents(), options)
