#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/cli/config.py

"""Configuration file discovery and loading for the latextree CLI.

Parser options can be stored in ``.latextree.toml``, ``.latextree.yaml``,
``.latextree.yml`` or ``.latextree.json`` files, or in a ``[tool.latextree]``
table of ``pyproject.toml``. Keys are the ``ParserOptions`` field names.
"""

import argparse
import json
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from dataclasses import fields
from typing import Any, Dict, Mapping, Optional

import yaml

from latextree.constants import CONFIG_FILE_NAMES, PYPROJECT_TOOL_SECTION
from latextree.exceptions import ValidationError
from latextree.options import ParserOptions


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.latextree]`` table from pyproject.toml.

    Returns
    -------
    dict
        The table, or an empty dict when the file has none

    Raises
    ------
    argparse.ArgumentTypeError
        If pyproject.toml cannot be parsed or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading pyproject.toml {pyproject_path}: {e}") from e

    config = data.get("tool", {}).get(PYPROJECT_TOOL_SECTION, {})
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.{PYPROJECT_TOOL_SECTION}] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file in ``start_dir`` or one of its parents.

    Each directory is checked for the dedicated config files in priority
    order, then for a pyproject.toml with a ``[tool.latextree]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        The first configuration file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILE_NAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except argparse.ArgumentTypeError:
                # Unreadable pyproject.toml; keep searching upwards
                pass

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the standard locations.

    Searches the working directory and its parents first, then the user's
    home directory.

    Returns
    -------
    Path or None
        Path to the discovered config file

    """
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILE_NAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration mapping

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read, parsed, or has an unsupported format

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")
    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration path is not a file: {config_path}")

    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    ext = config_path.suffix.lower()
    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            if config is None:
                config = {}
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            raise argparse.ArgumentTypeError(f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml")
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise argparse.ArgumentTypeError(f"Invalid configuration in {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading config file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping at root level, got {type(config).__name__}"
        )
    return config


def options_from_config(config: Mapping[str, Any], base: Optional[ParserOptions] = None) -> ParserOptions:
    """Build parser options from a configuration mapping.

    Parameters
    ----------
    config : Mapping
        Keys are ``ParserOptions`` field names
    base : ParserOptions, optional
        Options to update; defaults to ``ParserOptions()``

    Raises
    ------
    ValidationError
        If a key is unknown or a value is invalid

    """
    known = {f.name for f in fields(ParserOptions)}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ValidationError(
            f"Unknown configuration key(s): {', '.join(unknown)}",
            parameter_name=unknown[0],
            parameter_value=config[unknown[0]],
        )
    updates: Dict[str, Any] = {}
    for key, value in config.items():
        if key in ("raw_environments", "math_environments"):
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise ValidationError(f"{key} must be a list of names", parameter_name=key, parameter_value=value)
            value = frozenset(value)
        updates[key] = value
    return (base or ParserOptions()).create_updated(**updates)
