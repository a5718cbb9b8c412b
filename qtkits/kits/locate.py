"""
Locating files inside a Qt installation root.

A Qt online-installer root looks like::

    Qt/
      6.5.0/
        gcc_64/lib/cmake/Qt6/qt.toolchain.cmake
        mingw_64/
      Tools/
        mingw1120_64/bin/g++.exe
        Ninja/ninja.exe
        CMake_64/bin/cmake.exe
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

from qtkits.core.filesystem import EXE_SUFFIX, find_executable

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class QtPathLocator:
    """
    Filesystem lookups used while building kits.

    Every method returns None when the target does not exist; none of them
    raise for missing files.
    """

    def locate_toolchain_file(self, installation: PathLike) -> Optional[Path]:
        """``<installation>/lib/cmake/Qt6/qt.toolchain.cmake`` if present."""
        candidate = Path(installation) / "lib" / "cmake" / "Qt6" / "qt.toolchain.cmake"
        if candidate.is_file():
            return candidate
        logger.debug(f"No Qt toolchain file at {candidate}")
        return None

    def locate_mingw_bin_dir(self, qt_ins_root: PathLike) -> Optional[Path]:
        """
        ``<root>/Tools/mingw*/bin`` for the newest MinGW shipped with Qt.

        Directory names such as ``mingw1120_64`` are ranked by the number
        embedded in them.
        """
        tools_dir = Path(qt_ins_root) / "Tools"
        if not tools_dir.is_dir():
            return None

        best: Optional[Path] = None
        best_version = Version("0")
        for entry in tools_dir.iterdir():
            if not entry.is_dir() or not entry.name.lower().startswith("mingw"):
                continue
            bin_dir = entry / "bin"
            if not bin_dir.is_dir():
                continue
            version = _embedded_version(entry.name)
            if best is None or version > best_version:
                best, best_version = bin_dir, version
        return best

    def locate_ninja_executable(self, qt_ins_root: PathLike) -> Optional[Path]:
        candidate = Path(qt_ins_root) / "Tools" / "Ninja" / f"ninja{EXE_SUFFIX}"
        return candidate if candidate.is_file() else None

    def locate_cmake_executable(self, qt_ins_root: PathLike) -> Optional[Path]:
        """``<root>/Tools/CMake*/bin/cmake`` (macOS bundles under CMake.app)."""
        tools_dir = Path(qt_ins_root) / "Tools"
        if not tools_dir.is_dir():
            return None
        for entry in sorted(tools_dir.iterdir()):
            if not entry.is_dir() or not entry.name.startswith("CMake"):
                continue
            for relative in (
                Path("bin") / f"cmake{EXE_SUFFIX}",
                Path("CMake.app") / "Contents" / "bin" / "cmake",
            ):
                candidate = entry / relative
                if candidate.is_file():
                    return candidate
        return None

    def is_on_path(self, tool: str) -> bool:
        return find_executable(tool) is not None

    def vcpkg_toolchain_file(self) -> Optional[Path]:
        """vcpkg's CMake toolchain file, from ``VCPKG_ROOT``."""
        vcpkg_root = os.environ.get("VCPKG_ROOT")
        if not vcpkg_root:
            return None
        return Path(vcpkg_root) / "scripts" / "buildsystems" / "vcpkg.cmake"


def _embedded_version(name: str) -> Version:
    match = re.search(r"(\d+)", name)
    if not match:
        return Version("0")
    try:
        return Version(match.group(1))
    except InvalidVersion:
        return Version("0")
