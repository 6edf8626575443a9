#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/tree/serialization.py
"""JSON serialization and deserialization for parse trees.

The dictionary form keeps every node kind, its attributes, its line number
and its delimiters, so that a tree rebuilt from it regenerates the same LaTeX.

Examples
--------
Serialize a parsed document:

    >>> from latextree import parse
    >>> from latextree.tree.serialization import tree_to_json
    >>> json_str = tree_to_json(parse(r"\\emph{hi}").root, indent=2)

Rebuild it:

    >>> from latextree.tree.serialization import json_to_tree
    >>> json_to_tree(json_str).to_latex()
    '\\\\emph{hi}'

"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

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
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _serialize_base(node: Node) -> dict[str, Any]:
    return {"node_type": node.kind.value, "line_number": node.line_number}


def _serialize_children(node: Node, result: dict[str, Any]) -> dict[str, Any]:
    result["children"] = [tree_to_dict(child) for child in node.get_children()]
    return result


def _serialize_envelope(node: Envelope, result: dict[str, Any]) -> dict[str, Any]:
    result["opening"] = tree_to_dict(node.opening) if node.opening is not None else None
    result["closing"] = tree_to_dict(node.closing) if node.closing is not None else None
    return _serialize_children(node, result)


def _serialize_text(node: Text) -> dict[str, Any]:
    result = _serialize_base(node)
    result["content"] = node.content
    return result


def _serialize_comment(node: Comment) -> dict[str, Any]:
    result = _serialize_base(node)
    result["raw"] = node.raw
    return result


def _serialize_verbatim(node: Verbatim) -> dict[str, Any]:
    result = _serialize_base(node)
    result.update(content=node.content, delimiter=node.delimiter, starred=node.starred)
    return result


def _serialize_command(node: Command) -> dict[str, Any]:
    result = _serialize_base(node)
    result.update(name=node.name, active=node.active)
    return _serialize_children(node, result)


def _serialize_environment(node: Environment) -> dict[str, Any]:
    result = _serialize_base(node)
    result.update(name=node.name, raw=node.raw)
    return _serialize_envelope(node, result)


def _serialize_argument(node: Argument) -> dict[str, Any]:
    result = _serialize_base(node)
    result["is_optional"] = node.is_optional
    return _serialize_envelope(node, result)


def _serialize_math(node: Math) -> dict[str, Any]:
    result = _serialize_base(node)
    result["delimiter"] = node.delimiter
    return _serialize_envelope(node, result)


_SERIALIZATION_DISPATCH: dict[type, Callable[[Any], dict[str, Any]]] = {
    Root: lambda n: _serialize_envelope(n, _serialize_base(n)),
    Text: _serialize_text,
    Whitespace: _serialize_text,
    Comment: _serialize_comment,
    Verbatim: _serialize_verbatim,
    Command: _serialize_command,
    Environment: _serialize_environment,
    MathEnvironment: _serialize_environment,
    Group: lambda n: _serialize_envelope(n, _serialize_base(n)),
    UnclosedGroup: lambda n: _serialize_envelope(n, _serialize_base(n)),
    Argument: _serialize_argument,
    Math: _serialize_math,
}


def tree_to_dict(node: Node) -> dict[str, Any]:
    """Convert a node and its subtree to a dictionary.

    Parameters
    ----------
    node : Node
        The node to convert

    Returns
    -------
    dict
        Dictionary representation of the subtree

    Examples
    --------
    >>> tree_to_dict(Text("Hello", line_number=1))
    {'node_type': 'Text', 'line_number': 1, 'content': 'Hello'}

    """
    serializer = _SERIALIZATION_DISPATCH.get(type(node))
    if serializer is None:
        raise ValueError(f"Unknown node type for serialization: {type(node).__name__}")
    return serializer(node)


def _restore_envelope(node: Envelope, data: dict[str, Any], strict_mode: bool) -> Envelope:
    opening = data.get("opening")
    closing = data.get("closing")
    if not isinstance(node, Root):
        node.set_opening(dict_to_tree(opening, strict_mode) if opening else None)
        node.set_closing(dict_to_tree(closing, strict_mode) if closing else None)
    node.add_children(dict_to_tree(child, strict_mode) for child in data.get("children", []))
    return node


def _line(data: dict[str, Any]) -> int:
    return int(data.get("line_number", -1))


_DESERIALIZATION_DISPATCH: dict[str, Callable[[dict[str, Any], bool], Node]] = {
    "Root": lambda d, s: _restore_envelope(Root(line_number=_line(d)), d, s),
    "Text": lambda d, s: Text(d.get("content", ""), line_number=_line(d)),
    "Whitespace": lambda d, s: Whitespace(d.get("content", ""), line_number=_line(d)),
    "Comment": lambda d, s: Comment(d.get("raw", "%"), line_number=_line(d)),
    "Verbatim": lambda d, s: Verbatim(
        d.get("content", ""), d.get("delimiter", "|"), bool(d.get("starred", False)), line_number=_line(d)
    ),
    "Command": lambda d, s: _restore_command(d, s),
    "Environment": lambda d, s: _restore_envelope(
        Environment(d.get("name", ""), bool(d.get("raw", False)), line_number=_line(d)), d, s
    ),
    "MathEnvironment": lambda d, s: _restore_envelope(
        MathEnvironment(d.get("name", ""), bool(d.get("raw", False)), line_number=_line(d)), d, s
    ),
    "Group": lambda d, s: _restore_envelope(Group(line_number=_line(d)), d, s),
    "UnclosedGroup": lambda d, s: _restore_envelope(UnclosedGroup(line_number=_line(d)), d, s),
    "Argument": lambda d, s: _restore_envelope(Argument(bool(d.get("is_optional", False)), line_number=_line(d)), d, s),
    "Math": lambda d, s: _restore_envelope(Math(d.get("delimiter", "$"), line_number=_line(d)), d, s),
}


def _restore_command(data: dict[str, Any], strict_mode: bool) -> Command:
    command = Command(data.get("name", ""), bool(data.get("active", False)), line_number=_line(data))
    command.add_children(dict_to_tree(child, strict_mode) for child in data.get("children", []))
    return command


def dict_to_tree(data: dict[str, Any], strict_mode: bool = True) -> Node:
    """Convert a dictionary produced by ``tree_to_dict`` back to nodes.

    Parameters
    ----------
    data : dict
        Dictionary representation of a node
    strict_mode : bool, default True
        If True, raise ValueError on unknown node types. If False, replace
        them with an empty Text node.

    Returns
    -------
    Node
        Reconstructed subtree

    Raises
    ------
    ValueError
        If the dictionary has no or an unknown ``node_type`` and strict_mode is True

    """
    node_type = data.get("node_type")
    deserializer: Optional[Callable[[dict[str, Any], bool], Node]] = (
        _DESERIALIZATION_DISPATCH.get(node_type) if node_type else None
    )
    if deserializer is None:
        if strict_mode:
            raise ValueError(f"Unknown node type: {node_type}")
        logger.warning(f"Unknown node type '{node_type}', skipping")
        return Text("", line_number=_line(data))
    return deserializer(data, strict_mode)


def tree_to_json(node: Node, indent: int | None = None) -> str:
    """Serialize a subtree to a JSON string with a schema version.

    Parameters
    ----------
    node : Node
        The node to serialize
    indent : int or None, default None
        Number of spaces for indentation (None for compact format)

    """
    return json.dumps({"schema_version": SCHEMA_VERSION, **tree_to_dict(node)}, indent=indent, ensure_ascii=False)


def json_to_tree(json_str: str, strict_mode: bool = True) -> Node:
    """Deserialize a JSON string produced by ``tree_to_json``.

    Raises
    ------
    ValueError
        If the schema version is newer than this library understands
    json.JSONDecodeError
        If the JSON string is malformed

    """
    data = json.loads(json_str)
    schema_version = data.pop("schema_version", SCHEMA_VERSION)
    if schema_version > SCHEMA_VERSION:
        if strict_mode:
            raise ValueError(f"Unsupported schema version: {schema_version}")
        logger.warning(f"Schema version {schema_version} is newer than {SCHEMA_VERSION}; loading anyway")
    return dict_to_tree(data, strict_mode=strict_mode)
