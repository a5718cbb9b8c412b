"""YAML configuration for qtkits.

Global settings live in ``~/.qtkits/config.yaml``; a workspace may carry its
own ``qtkits.yaml``. Example::

    qt_installation_root: /opt/Qt
    additional_qt_paths:
      - /opt/custom-qt/bin/qtpaths
      - name: vcpkg-qt
        path: C:/vcpkg/installed/x64-windows/tools/Qt6/bin/qtpaths.exe
    cmake_generator: Ninja
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from qtkits.core.directory import get_global_config_file, get_workspace_config_file
from qtkits.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CMAKE_GENERATOR = "Ninja"


@dataclass
class AdditionalQtPath:
    """A qtpaths or qmake executable registered outside the installation root."""

    path: str
    name: Optional[str] = None


@dataclass
class QtKitsConfig:
    """Settings for one scope."""

    qt_installation_root: str = ""
    additional_qt_paths: List[AdditionalQtPath] = field(default_factory=list)
    cmake_generator: str = DEFAULT_CMAKE_GENERATOR
    cmake_global_kits_file: Optional[str] = None


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, or is not
            valid YAML mapping
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be a mapping: {config_file}")
    return data


def convert_additional_qt_paths(entries: List[Any]) -> List[AdditionalQtPath]:
    """
    Normalize ``additional_qt_paths`` entries.

    Entries may be plain strings or mappings with ``path`` and optional
    ``name``; anything else is skipped with a warning.
    """
    paths: List[AdditionalQtPath] = []
    for entry in entries or []:
        if isinstance(entry, str):
            paths.append(AdditionalQtPath(path=entry))
        elif isinstance(entry, dict) and entry.get("path"):
            name = entry.get("name")
            paths.append(
                AdditionalQtPath(
                    path=str(entry["path"]), name=str(name) if name else None
                )
            )
        else:
            logger.warning(f"Ignoring invalid additional Qt path entry: {entry!r}")
    return paths


def parse_config(data: Dict[str, Any]) -> QtKitsConfig:
    """Build a QtKitsConfig from a raw mapping."""
    additional = data.get("additional_qt_paths", [])
    if not isinstance(additional, list):
        raise ConfigurationError("'additional_qt_paths' must be a list")

    generator = data.get("cmake_generator") or DEFAULT_CMAKE_GENERATOR
    kits_file = data.get("cmake_global_kits_file")
    return QtKitsConfig(
        qt_installation_root=str(data.get("qt_installation_root") or ""),
        additional_qt_paths=convert_additional_qt_paths(additional),
        cmake_generator=str(generator),
        cmake_global_kits_file=str(kits_file) if kits_file else None,
    )


def load_global_config(config_file: Optional[Path] = None) -> QtKitsConfig:
    return parse_config(load_yaml_config(config_file or get_global_config_file()))


def load_workspace_config(
    workspace: Path, global_config: Optional[QtKitsConfig] = None
) -> QtKitsConfig:
    """
    Load a workspace configuration.

    The generator falls back to the global one when the workspace file does
    not set it; installation root and additional paths never fall back.
    """
    data = load_yaml_config(get_workspace_config_file(workspace))
    config = parse_config(data)
    if "cmake_generator" not in data and global_config is not None:
        config.cmake_generator = global_config.cmake_generator
    return config
