#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/eml2md/cli/config.py
"""Configuration file loading for the eml2md CLI.

A configuration file is a YAML or JSON mapping whose keys are field names of
:class:`~eml2md.options.NoteOptions` or :class:`~eml2md.options.EmlOptions`.
Dashes and underscores are interchangeable in keys::

    eml-handling: keep
    attachment_list_position: bottom
    max_multipart_depth: 16

"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from eml2md.constants import CONFIG_ENV_VAR
from eml2md.options.eml import EmlOptions
from eml2md.options.note import NoteOptions


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    ``.json`` files are read as JSON; anything else is read as YAML.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration dictionary loaded from file

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read, parsed, or has invalid format

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")
    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration path is not a file: {config_path}")

    if config_path.suffix.lower() == ".json":
        return _load_json_config(config_path)
    return _load_yaml_config(config_path)


def _load_json_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid JSON in config file {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading JSON config {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(f"JSON config file must contain an object, got {type(config).__name__}")
    return config


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise argparse.ArgumentTypeError(f"Invalid YAML in config file {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading YAML config {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(f"YAML config file must contain a mapping, got {type(config).__name__}")
    return config


def split_config(config: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a configuration mapping into NoteOptions and EmlOptions keyword arguments.

    Returns
    -------
    tuple of (dict, dict)
        ``(note_kwargs, eml_kwargs)``

    Raises
    ------
    argparse.ArgumentTypeError
        If a key matches no option field

    """
    note_fields = NoteOptions.field_names()
    eml_fields = EmlOptions.field_names()
    note_kwargs: Dict[str, Any] = {}
    eml_kwargs: Dict[str, Any] = {}

    for raw_key, value in config.items():
        key = str(raw_key).strip().replace("-", "_")
        if key in note_fields:
            note_kwargs[key] = value
        elif key in eml_fields:
            eml_kwargs[key] = value
        else:
            raise argparse.ArgumentTypeError(f"Unknown configuration key: {raw_key!r}")
    return note_kwargs, eml_kwargs


def default_config_path() -> Path | None:
    """Return the configuration file named by the environment, if any."""
    env_config = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_config) if env_config else None
