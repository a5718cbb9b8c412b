"""
Kit descriptor builder.

Turns a Qt installation (a directory under an installation root, or a
qtpaths executable registered by the user) into CMake kits. Most
installations give exactly one kit; iOS gives a device and a simulator kit;
MSVC gives one kit per compatible Visual Studio toolset, possibly none.

Example:
    >>> builder = KitBuilder(generator='Ninja')
    >>> kits = builder.synthesize('/opt/Qt', '/opt/Qt/6.5.0/macos', [])
    >>> kits[0].compilers
    {'C': '/usr/bin/clang', 'CXX': '/usr/bin/clang++'}
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from qtkits.core.config import DEFAULT_CMAKE_GENERATOR
from qtkits.core.exceptions import InstallationError, ToolchainFileNotFoundError
from qtkits.core.filesystem import EXE_SUFFIX, IS_WINDOWS
from qtkits.kits.classifier import PlatformTag, classify, installation_basename
from qtkits.kits.discovery import QtInfo, generate_default_qt_paths_name
from qtkits.kits.locate import QtPathLocator
from qtkits.kits.models import (
    QT_INSTALLATION_ENV,
    QT_QTPATHS_EXE_ENV,
    CMakeGenerator,
    Kit,
)
from qtkits.kits.msvc import (
    MSVC_PLATFORM_TO_QT_ARCH,
    convert_msc_ver_to_year,
    match_toolsets,
    parse_msvc_installation,
)
from qtkits.kits.naming import mangle_qt_installation

logger = logging.getLogger(__name__)

ENV_PATH = "${env:PATH}"
XCODE_GENERATOR = "Xcode"
MACOS_C_COMPILER = "/usr/bin/clang"
MACOS_CXX_COMPILER = "/usr/bin/clang++"

# Enables QML debugging and tooling in every generated kit
COMMON_CMAKE_SETTINGS = {
    "QT_QML_GENERATE_QMLLS_INI": "ON",
    "CMAKE_CXX_FLAGS_DEBUG_INIT": "-DQT_QML_DEBUG -DQT_DECLARATIVE_DEBUG",
    "CMAKE_CXX_FLAGS_RELWITHDEBINFO_INIT": "-DQT_QML_DEBUG -DQT_DECLARATIVE_DEBUG",
}

IOS_SIMULATOR_SETTINGS = {
    "CMAKE_OSX_ARCHITECTURES": "x86_64",
    "CMAKE_OSX_SYSROOT": "iphonesimulator",
}

_QT6_VERSION_DIR = re.compile(r"^6(\.|$)")

# Cross-compiling families that cannot be configured without qt.toolchain.cmake
TOOLCHAIN_FILE_REQUIRED = frozenset({PlatformTag.ANDROID})


class KitBuilder:
    """
    Build kits for Qt installations.

    Args:
        generator: Configured CMake generator, used for MSVC kits
        locator: Filesystem lookups (toolchain file, MinGW, Ninja)
        is_windows: Host is Windows; controls PATH amendment
    """

    def __init__(
        self,
        generator: str = DEFAULT_CMAKE_GENERATOR,
        locator: Optional[QtPathLocator] = None,
        is_windows: bool = IS_WINDOWS,
    ):
        self.generator = generator or DEFAULT_CMAKE_GENERATOR
        self.locator = locator or QtPathLocator()
        self.is_windows = is_windows

    @staticmethod
    def init_kit_with_common_settings(name: str = "") -> Kit:
        """A fresh kit carrying the settings shared by every generated kit."""
        return Kit(
            name=name,
            is_trusted=True,
            preferred_generator=CMakeGenerator(name=DEFAULT_CMAKE_GENERATOR),
            cmake_settings=dict(COMMON_CMAKE_SETTINGS),
        )

    # ------------------------------------------------------------------
    # Installations under an installation root
    # ------------------------------------------------------------------

    def synthesize(
        self,
        qt_ins_root: str,
        installation: str,
        toolset_kits: Sequence[Kit] = (),
    ) -> List[Kit]:
        """
        Build the kits of one installation.

        Args:
            qt_ins_root: Installation root the installation was found in
            installation: Installation directory
            toolset_kits: Host toolset kits, used for MSVC installations

        Returns:
            Zero or more kits. Problems with this installation are logged
            and produce an empty list.
        """
        toolchain = installation_basename(installation)
        platform = classify(installation)
        kit = self.init_kit_with_common_settings(
            mangle_qt_installation(qt_ins_root, installation)
        )

        bin_dir = Path(installation) / "bin"
        has_bin_dir = bin_dir.is_dir()
        try:
            toolchain_file = self._resolve_toolchain_file(
                installation, platform, has_bin_dir
            )
        except InstallationError as e:
            logger.error(f"Skipping {installation}: {e}")
            return []

        kit.environment_variables = {
            QT_INSTALLATION_ENV: str(installation),
            "PATH": self._installation_path_env(qt_ins_root, bin_dir, has_bin_dir),
        }
        if toolchain_file is not None:
            kit.toolchain_file = str(toolchain_file)

        if platform == PlatformTag.MSVC:
            year, architecture = parse_msvc_installation(toolchain)
            return match_toolsets(
                toolset_kits, architecture, year, kit, generator=self.generator
            )
        if platform == PlatformTag.MINGW:
            self._apply_mingw(kit, qt_ins_root)
        elif platform == PlatformTag.MACOS:
            kit.compilers = {"C": MACOS_C_COMPILER, "CXX": MACOS_CXX_COMPILER}
        elif platform == PlatformTag.IOS:
            return self._ios_kits(kit)

        logger.debug(f"newKit: {kit.name}")
        return [kit]

    def _resolve_toolchain_file(
        self, installation: str, platform: PlatformTag, has_bin_dir: bool
    ) -> Optional[Path]:
        """
        Toolchain file of an installation, None if it has none.

        Raises:
            InstallationError: If the directory has neither a bin directory
                nor a toolchain file
            ToolchainFileNotFoundError: If a Qt 6 installation of a family in
                ``TOOLCHAIN_FILE_REQUIRED`` lacks one
        """
        toolchain_file = self.locator.locate_toolchain_file(installation)
        if toolchain_file is not None:
            return toolchain_file
        if not has_bin_dir:
            raise InstallationError(
                f"Neither bin directory nor toolchain file found in {installation}"
            )
        if self._requires_toolchain_file(installation, platform):
            raise ToolchainFileNotFoundError(
                Path(installation) / "lib" / "cmake" / "Qt6" / "qt.toolchain.cmake"
            )
        return None

    @staticmethod
    def _requires_toolchain_file(installation: str, platform: PlatformTag) -> bool:
        if platform not in TOOLCHAIN_FILE_REQUIRED:
            return False
        parts = [p for p in re.split(r"[/\\]+", str(installation)) if p]
        version_dir = parts[-2] if len(parts) > 1 else ""
        return bool(_QT6_VERSION_DIR.match(version_dir))

    def _installation_path_env(
        self, qt_ins_root: str, bin_dir: Path, has_bin_dir: bool
    ) -> Optional[str]:
        entries = []
        if self.is_windows and has_bin_dir:
            entries.append(str(bin_dir))
        if not self.locator.is_on_path("ninja"):
            ninja = self.locator.locate_ninja_executable(qt_ins_root)
            if ninja is not None:
                entries.append(str(Path(ninja).parent))
        if not entries:
            return None
        return os.pathsep.join([*entries, ENV_PATH])

    def _apply_mingw(self, kit: Kit, qt_ins_root: str) -> None:
        mingw_dir = self.locator.locate_mingw_bin_dir(qt_ins_root)
        logger.info(f"Mingw dir path: {mingw_dir}")
        if mingw_dir is None:
            return
        env = kit.environment_variables
        if env.get("PATH"):
            env["PATH"] = os.pathsep.join([env["PATH"], str(mingw_dir)])
        else:
            env["PATH"] = os.pathsep.join([str(mingw_dir), ENV_PATH])
        kit.compilers = {
            "C": str(Path(mingw_dir) / f"gcc{EXE_SUFFIX}"),
            "CXX": str(Path(mingw_dir) / f"g++{EXE_SUFFIX}"),
        }

    def _ios_kits(self, kit: Kit) -> List[Kit]:
        kit.preferred_generator = CMakeGenerator(name=XCODE_GENERATOR)
        simulator = kit.copy()
        simulator.name = f"{kit.name}-simulator"
        simulator.cmake_settings = {
            **(kit.cmake_settings or {}),
            **IOS_SIMULATOR_SETTINGS,
        }
        return [kit, simulator]

    def synthesize_all(
        self,
        qt_ins_root: str,
        installations: Iterable[str],
        toolset_kits: Sequence[Kit] = (),
    ) -> List[Kit]:
        """Kits of every installation, in installation order."""
        kits: List[Kit] = []
        for installation in installations:
            kits.extend(self.synthesize(qt_ins_root, installation, toolset_kits))
        return kits

    # ------------------------------------------------------------------
    # Installations registered through a qtpaths/qmake executable
    # ------------------------------------------------------------------

    def build_from_qt_info(
        self, info: QtInfo, toolset_kits: Sequence[Kit] = ()
    ) -> List[Kit]:
        """
        Build the kits of an installation described by ``qtpaths -query``.

        Qt 6 installations must have a toolchain file (vcpkg's when Qt comes
        from vcpkg). MSVC builds are expanded through the host toolsets.
        """
        kit = self.init_kit_with_common_settings(
            info.name or generate_default_qt_paths_name(info)
        )
        libs = info.get("QT_INSTALL_LIBS")
        if not libs:
            logger.warning(f"QT_INSTALL_LIBS not reported by {info.qt_paths_bin}")
            return []

        version = info.get("QT_VERSION") or ""
        if version.startswith("6"):
            if info.is_vcpkg:
                toolchain_file = self.locator.vcpkg_toolchain_file()
            else:
                toolchain_file = Path(libs) / "cmake" / "Qt6" / "qt.toolchain.cmake"
            if toolchain_file is None or not Path(toolchain_file).is_file():
                logger.error(f"Toolchain file not found: {toolchain_file}")
                return []
            kit.toolchain_file = str(toolchain_file)

        kit.environment_variables = {
            QT_QTPATHS_EXE_ENV: info.qt_paths_bin,
            "PATH": self._qt_info_path_env(info.data),
        }

        xspec = info.get("QMAKE_XSPEC") or ""
        if "-msvc" in xspec:
            return self._msvc_kits_from_qt_info(info, kit, toolset_kits)
        return [kit]

    @staticmethod
    def _qt_info_path_env(data: Dict[str, str]) -> str:
        entries = []
        for key, value in data.items():
            if (
                key.startswith("QMAKE_")
                or key == "QT_VERSION"
                or not value
                or not key.startswith("QT_")
            ):
                continue
            entries.append(value)
        entries.append(ENV_PATH)
        return os.pathsep.join(dict.fromkeys(entries))

    def _msvc_kits_from_qt_info(
        self, info: QtInfo, kit: Kit, toolset_kits: Sequence[Kit]
    ) -> List[Kit]:
        try:
            msc_ver = int(info.get("MSVC_MAJOR_VERSION") or "-1") * 100 + int(
                info.get("MSVC_MINOR_VERSION") or "-1"
            )
        except ValueError:
            msc_ver = -1
        year = convert_msc_ver_to_year(msc_ver) if msc_ver >= 0 else None
        if not year:
            logger.warning(f"Cannot resolve MSVC version of {info.qt_paths_bin}")
            return []
        architecture = MSVC_PLATFORM_TO_QT_ARCH.get(info.get("ARCH") or "")
        if not architecture:
            logger.warning(f"Cannot resolve architecture of {info.qt_paths_bin}")
            return []
        return match_toolsets(
            toolset_kits,
            architecture,
            year,
            kit,
            generator=self.generator,
            kit_name=info.name,
        )
