"""
Discovering Qt installations and querying their properties.

``discover_installations`` walks an installation root laid out by the Qt
online installer (``<root>/<version>/<toolchain>``). ``query_installation_info``
asks a ``qtpaths`` or ``qmake`` executable for its build properties.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Union

from packaging.version import InvalidVersion, Version

from qtkits.core.filesystem import EXE_SUFFIX

logger = logging.getLogger(__name__)

QUERY_TIMEOUT = 10


def _is_qt_installation(directory: Path) -> bool:
    bin_dir = directory / "bin"
    return any(
        (bin_dir / f"{tool}{EXE_SUFFIX}").is_file() for tool in ("qmake", "qtpaths")
    )


def discover_installations(qt_ins_root: Union[str, Path]) -> List[str]:
    """
    Find Qt installations under an installation root.

    An installation is ``<root>/<version>/<toolchain>`` where ``<version>``
    parses as a version and the toolchain directory has ``bin/qmake`` or
    ``bin/qtpaths``. Results are ordered by version, then toolchain name.

    Example:
        >>> discover_installations('/opt/Qt')
        ['/opt/Qt/6.5.0/gcc_64', '/opt/Qt/6.6.1/gcc_64']
    """
    root = Path(qt_ins_root)
    if not root.is_dir():
        logger.debug(f"Qt installation root is not a directory: {root}")
        return []

    found = []
    for version_dir in root.iterdir():
        if not version_dir.is_dir():
            continue
        try:
            version = Version(version_dir.name)
        except InvalidVersion:
            continue
        for toolchain_dir in version_dir.iterdir():
            if toolchain_dir.is_dir() and _is_qt_installation(toolchain_dir):
                found.append((version, toolchain_dir.name, str(toolchain_dir)))

    found.sort()
    return [path for _, _, path in found]


class QtInfo:
    """
    Properties reported by ``qtpaths -query``.

    Attributes:
        qt_paths_bin: Executable the properties were queried from
        name: User-given name, if any
        data: Property name to value
    """

    def __init__(
        self, qt_paths_bin: str, data: Dict[str, str], name: Optional[str] = None
    ):
        self.qt_paths_bin = qt_paths_bin
        self.data = dict(data)
        self.name = name

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    @property
    def is_vcpkg(self) -> bool:
        """True for a Qt built and installed by vcpkg."""
        parts = [p.lower() for p in Path(self.qt_paths_bin).parts]
        if "vcpkg" in parts or "vcpkg_installed" in parts:
            return True
        vcpkg_root = os.environ.get("VCPKG_ROOT")
        if vcpkg_root:
            try:
                Path(self.qt_paths_bin).resolve().relative_to(
                    Path(vcpkg_root).resolve()
                )
                return True
            except ValueError:
                return False
        return False

    def __repr__(self) -> str:
        return f"QtInfo({self.qt_paths_bin!r}, {len(self.data)} properties)"


def parse_query_output(output: str) -> Dict[str, str]:
    """
    Parse ``KEY:VALUE`` lines.

    Example:
        >>> parse_query_output('QT_VERSION:6.5.0\\nQT_INSTALL_LIBS:C:/Qt/lib')
        {'QT_VERSION': '6.5.0', 'QT_INSTALL_LIBS': 'C:/Qt/lib'}
    """
    data = {}
    for line in output.splitlines():
        key, sep, value = line.strip().partition(":")
        if sep and key:
            data[key] = value.strip()
    return data


def query_installation_info(
    qt_paths_bin: Union[str, Path], name: Optional[str] = None
) -> Optional[QtInfo]:
    """
    Run ``<qt_paths_bin> -query`` and return its properties.

    Returns None if the executable cannot be run or reports nothing.
    """
    try:
        result = subprocess.run(
            [str(qt_paths_bin), "-query"],
            capture_output=True,
            text=True,
            timeout=QUERY_TIMEOUT,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Timeout querying {qt_paths_bin}")
        return None
    except OSError as e:
        logger.warning(f"Failed to run {qt_paths_bin}: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"{qt_paths_bin} -query returned {result.returncode}")
        return None

    data = parse_query_output(result.stdout)
    if not data:
        logger.warning(f"No properties reported by {qt_paths_bin}")
        return None
    return QtInfo(str(qt_paths_bin), data, name)


def generate_default_qt_paths_name(info: QtInfo) -> str:
    """
    Default kit name for a qtpaths-based kit.

    Example:
        >>> generate_default_qt_paths_name(info)
        'Qt-6.5.0-linux-g++'
    """
    parts = ["Qt", info.get("QT_VERSION") or "unknown"]
    xspec = info.get("QMAKE_XSPEC")
    if xspec:
        parts.append(xspec)
    name = "-".join(parts)
    if info.is_vcpkg:
        name = f"vcpkg-{name}"
    return name
