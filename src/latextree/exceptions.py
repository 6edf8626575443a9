#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/exceptions.py
"""Custom exceptions for the latextree library.

This module defines the exception classes raised while parsing LaTeX sources,
editing parse trees and loading files or configuration. Malformed LaTeX is
mostly recovered into tree shape; only a mismatched or orphaned
``\\end{...}`` aborts a parse.

Exception Hierarchy
-------------------
- LatexTreeError (base exception)

  - ParseError (unrecoverable environment nesting errors)

  - TreeStructureError (invalid tree edits)

  - ValidationError (parameter/option validation)

  - FileError (file access and I/O)
    - SourceNotFoundError (file doesn't exist)

  - DependencyError (missing optional packages)

"""

from __future__ import annotations

from typing import Any


class LatexTreeError(Exception):
    """Base exception class for all latextree-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ParseError(LatexTreeError):
    """Exception raised when a LaTeX source cannot be turned into a tree.

    The only unrecoverable conditions are an ``\\end{name}`` with no open
    environment and an ``\\end{name}`` whose name differs from the innermost
    open environment.

    Parameters
    ----------
    message : str
        Description of the problem
    line_number : int
        1-based line at which the problem was detected
    environment_name : str, optional
        Name given to the offending ``\\end``
    tree_dump : str, optional
        Tree dump of the partial tree built so far

    Attributes
    ----------
    line_number : int
        Line of the offending token
    environment_name : str or None
        Environment named by the offending ``\\end``
    tree_dump : str or None
        Partial tree dump, useful when debugging

    """

    def __init__(
        self,
        message: str,
        line_number: int,
        environment_name: str | None = None,
        tree_dump: str | None = None,
    ):
        """Initialize the parse error with location details."""
        super().__init__(f"Parse error [line {line_number}]: {message}")
        self.line_number = line_number
        self.environment_name = environment_name
        self.tree_dump = tree_dump


class TreeStructureError(LatexTreeError):
    """Exception raised when a tree edit would break the tree's shape.

    Examples are adding children to a leaf node, inserting a node beneath
    itself, or deleting an envelope delimiter.
    """


class ValidationError(LatexTreeError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class FileError(LatexTreeError):
    """Exception raised when a source file cannot be read or written.

    Parameters
    ----------
    message : str
        Description of the error
    file_path : str, optional
        Path of the file involved
    original_error : Exception, optional
        The underlying I/O error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with the path involved."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class SourceNotFoundError(FileError):
    """Exception raised when a LaTeX source file does not exist."""

    def __init__(self, file_path: str, original_error: Exception | None = None):
        """Initialize with the missing path."""
        super().__init__(f"File not found: {file_path}", file_path=file_path, original_error=original_error)


class DependencyError(LatexTreeError):
    """Exception raised when an optional package needed by a feature is missing.

    Parameters
    ----------
    feature_name : str
        Feature that needs the packages
    missing_packages : list of str
        Names of the missing distributions
    message : str, optional
        Custom message; a pip hint is generated otherwise

    """

    def __init__(self, feature_name: str, missing_packages: list[str], message: str | None = None):
        """Initialize the dependency error with an install hint."""
        if message is None:
            packages = " ".join(missing_packages)
            message = f"{feature_name} requires the following packages: {packages}. Install with: pip install {packages}"
        super().__init__(message)
        self.feature_name = feature_name
        self.missing_packages = missing_packages
