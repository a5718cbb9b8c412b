"""Summaries of generated kits for reporting."""

import re
from pathlib import Path
from typing import Callable, Dict, Optional

from qtkits.kits.classifier import installation_basename
from qtkits.kits.discovery import QtInfo
from qtkits.kits.models import QT_INSTALLATION_ENV, QT_QTPATHS_EXE_ENV, Kit

_VERSION_SEGMENT = re.compile(r"^\d+\.\d+(\.\d+)?$")


def analyze_toolchain(
    kit: Kit, query_info: Optional[Callable[[str], Optional[QtInfo]]] = None
) -> Optional[str]:
    """
    Toolchain type of a generated kit.

    Installation kits report their toolchain directory (``msvc2019_64``);
    qtpaths kits report ``vcpkg`` for a vcpkg toolchain file, else the
    ``QMAKE_XSPEC`` of their executable when ``query_info`` is given.
    """
    env = kit.environment_variables or {}
    installation = env.get(QT_INSTALLATION_ENV)
    qt_paths = env.get(QT_QTPATHS_EXE_ENV)

    if installation:
        return installation_basename(installation) or None
    if qt_paths:
        if kit.toolchain_file and Path(kit.toolchain_file).name == "vcpkg.cmake":
            return "vcpkg"
        if query_info is not None:
            info = query_info(qt_paths)
            if info is not None:
                return info.get("QMAKE_XSPEC")
    return None


def qt_version_from_kit(kit: Kit) -> Optional[str]:
    """
    Qt version of a generated kit, read from its paths.

    Example:
        >>> qt_version_from_kit(kit)  # VSCODE_QT_INSTALLATION=/opt/Qt/6.5.0/gcc_64
        '6.5.0'
    """
    env = kit.environment_variables or {}
    candidates = (
        env.get(QT_INSTALLATION_ENV),
        env.get(QT_QTPATHS_EXE_ENV),
        kit.toolchain_file,
    )
    for value in candidates:
        if not value:
            continue
        for part in reversed(re.split(r"[/\\]+", value)):
            if _VERSION_SEGMENT.match(part):
                return part
    return None


def analyze_kit(
    kit: Kit, query_info: Optional[Callable[[str], Optional[QtInfo]]] = None
) -> Dict[str, str]:
    """Toolchain type and Qt version of a kit; keys are omitted when unknown."""
    result = {}
    toolchain_type = analyze_toolchain(kit, query_info)
    if toolchain_type:
        result["toolchainType"] = toolchain_type
    version = qt_version_from_kit(kit)
    if version:
        result["version"] = version
    return result
