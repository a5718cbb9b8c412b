"""
Cross-platform file system utilities for qtkits.

Provides atomic writes for registry and state files, JSON loading that
degrades gracefully, and executable lookup on PATH.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"
EXE_SUFFIX = ".exe" if IS_WINDOWS else ""


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never in a partially-written state. If the write fails, the
    original file (if any) remains unchanged and the error propagates.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('cmake-kits.json', '[]')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def load_json_file(file_path: Path, default: Any = None) -> Any:
    """
    Load a JSON document, returning ``default`` if missing or malformed.

    A malformed file is logged as a warning, never raised.
    """
    if not file_path.exists():
        logger.debug(f"JSON file not found: {file_path}")
        return default

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse {file_path}: {e}")
        return default
    except OSError as e:
        logger.warning(f"Error reading {file_path}: {e}")
        return default


def find_executable(
    name: str, search_paths: Optional[list[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'ninja', 'cmake')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('ninja')
        PosixPath('/usr/bin/ninja')
    """
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        for ext in extensions:
            exe_path = directory / f"{name}{ext}"
            if exe_path.is_file() and os.access(exe_path, os.X_OK):
                return exe_path

    return None
