"""
Tests for the kit descriptor builder.
"""

import os
from pathlib import Path

import pytest

from qtkits.core.filesystem import EXE_SUFFIX
from qtkits.kits.builder import (
    COMMON_CMAKE_SETTINGS,
    ENV_PATH,
    KitBuilder,
)
from qtkits.kits.discovery import QtInfo


@pytest.fixture
def builder(locator):
    return KitBuilder(generator="Ninja", locator=locator, is_windows=False)


class TestInitKit:
    """Tests for the shared kit settings."""

    def test_common_settings(self):
        kit = KitBuilder.init_kit_with_common_settings("Qt-6.5.0-gcc_64")
        assert kit.name == "Qt-6.5.0-gcc_64"
        assert kit.is_trusted is True
        assert kit.preferred_generator.name == "Ninja"
        assert kit.cmake_settings == COMMON_CMAKE_SETTINGS
        assert kit.cmake_settings["QT_QML_GENERATE_QMLLS_INI"] == "ON"

    def test_settings_are_not_shared(self):
        kit = KitBuilder.init_kit_with_common_settings()
        kit.cmake_settings["EXTRA"] = "1"
        assert "EXTRA" not in COMMON_CMAKE_SETTINGS


class TestSynthesize:
    """Tests for KitBuilder.synthesize()."""

    def test_macos(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "macos")

        kits = builder.synthesize(str(qt_root), str(installation))

        assert len(kits) == 1
        data = kits[0].to_dict()
        assert data["name"] == "Qt-6.5.0-macos"
        assert data["compilers"] == {"C": "/usr/bin/clang", "CXX": "/usr/bin/clang++"}
        assert data["preferredGenerator"] == {"name": "Ninja"}
        assert data["isTrusted"] is True
        assert data["toolchainFile"] == str(
            installation / "lib" / "cmake" / "Qt6" / "qt.toolchain.cmake"
        )
        assert data["environmentVariables"] == {
            "VSCODE_QT_INSTALLATION": str(installation)
        }

    def test_ios(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "ios")

        kits = builder.synthesize(str(qt_root), str(installation))

        assert [k.name for k in kits] == ["Qt-6.5.0-ios", "Qt-6.5.0-ios-simulator"]
        device, simulator = kits
        assert device.preferred_generator.to_dict() == {"name": "Xcode"}
        assert simulator.preferred_generator.to_dict() == {"name": "Xcode"}
        assert "CMAKE_OSX_SYSROOT" not in device.cmake_settings
        assert simulator.cmake_settings["CMAKE_OSX_ARCHITECTURES"] == "x86_64"
        assert simulator.cmake_settings["CMAKE_OSX_SYSROOT"] == "iphonesimulator"
        assert simulator.cmake_settings["QT_QML_GENERATE_QMLLS_INI"] == "ON"
        assert simulator.toolchain_file == device.toolchain_file

    def test_mingw_uses_newest_toolchain(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "mingw_64")
        for name in ("mingw900_64", "mingw1120_64"):
            (qt_root / "Tools" / name / "bin").mkdir(parents=True)
        mingw_bin = qt_root / "Tools" / "mingw1120_64" / "bin"

        kits = builder.synthesize(str(qt_root), str(installation))

        assert len(kits) == 1
        kit = kits[0]
        assert kit.compilers == {
            "C": str(mingw_bin / f"gcc{EXE_SUFFIX}"),
            "CXX": str(mingw_bin / f"g++{EXE_SUFFIX}"),
        }
        assert kit.environment_variables["PATH"] == os.pathsep.join(
            [str(mingw_bin), ENV_PATH]
        )

    def test_mingw_appends_to_existing_path(
        self, builder, locator, qt_root, make_installation
    ):
        locator.tools_on_path = set()
        installation = make_installation(qt_root, "6.5.0", "mingw_64")
        mingw_bin = qt_root / "Tools" / "mingw1120_64" / "bin"
        mingw_bin.mkdir(parents=True)
        ninja_dir = qt_root / "Tools" / "Ninja"
        ninja_dir.mkdir(parents=True)
        (ninja_dir / f"ninja{EXE_SUFFIX}").write_text("")

        kit = builder.synthesize(str(qt_root), str(installation))[0]

        assert kit.environment_variables["PATH"] == os.pathsep.join(
            [str(ninja_dir), ENV_PATH, str(mingw_bin)]
        )

    def test_mingw_without_tools(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "mingw_64")
        kits = builder.synthesize(str(qt_root), str(installation))
        assert len(kits) == 1
        assert kits[0].compilers is None

    def test_android(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "android_arm64_v8a")
        kits = builder.synthesize(str(qt_root), str(installation))
        assert [k.name for k in kits] == ["Qt-6.5.0-android_arm64_v8a"]
        assert kits[0].compilers is None
        assert kits[0].toolchain_file is not None

    def test_other(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "gcc_64")
        kits = builder.synthesize(str(qt_root), str(installation))
        assert [k.name for k in kits] == ["Qt-6.5.0-gcc_64"]
        assert kits[0].is_generated()

    def test_msvc(self, builder, qt_root, make_installation, toolset_kits):
        installation = make_installation(qt_root, "6.5.0", "msvc2019_64")

        kits = builder.synthesize(str(qt_root), str(installation), toolset_kits)

        assert [k.name for k in kits] == [
            "Qt-6.5.0-msvc2019_64_VSCommunity_2019_Release_amd64",
            "Qt-6.5.0-msvc2019_64_VSCommunity_2022_Release_amd64",
            "Qt-6.5.0-msvc2019_64_VSCommunity_2022_Release_x86_amd64",
        ]
        for kit in kits:
            assert kit.environment_variables["VSCODE_QT_INSTALLATION"] == str(
                installation
            )
            assert kit.preferred_generator.to_dict() == {"name": "Ninja"}
            assert kit.cmake_settings == COMMON_CMAKE_SETTINGS

    def test_msvc_without_toolsets(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "msvc2019_64")
        assert builder.synthesize(str(qt_root), str(installation), []) == []

    @pytest.mark.parametrize(
        "toolchain", ["macos", "ios", "gcc_64", "mingw_64", "wasm_singlethread"]
    )
    def test_qt6_without_toolchain_file_still_builds(
        self, builder, qt_root, make_installation, toolchain
    ):
        installation = make_installation(
            qt_root, "6.5.0", toolchain, toolchain_file=False
        )
        kits = builder.synthesize(str(qt_root), str(installation))
        assert kits
        assert all(k.toolchain_file is None for k in kits)

    def test_qt6_macos_without_toolchain_file(
        self, builder, qt_root, make_installation
    ):
        installation = make_installation(
            qt_root, "6.5.0", "macos", toolchain_file=False
        )

        kits = builder.synthesize(str(qt_root), str(installation))

        assert [k.name for k in kits] == ["Qt-6.5.0-macos"]
        assert kits[0].compilers == {"C": "/usr/bin/clang", "CXX": "/usr/bin/clang++"}
        assert "toolchainFile" not in kits[0].to_dict()

    def test_qt6_android_requires_toolchain_file(
        self, builder, qt_root, make_installation
    ):
        installation = make_installation(
            qt_root, "6.5.0", "android_arm64_v8a", toolchain_file=False
        )
        assert builder.synthesize(str(qt_root), str(installation)) == []

    def test_qt5_android_without_toolchain_file(
        self, builder, qt_root, make_installation
    ):
        installation = make_installation(
            qt_root, "5.15.2", "android", toolchain_file=False
        )
        kits = builder.synthesize(str(qt_root), str(installation))
        assert [k.name for k in kits] == ["Qt-5.15.2-android"]

    def test_qt5_without_toolchain_file(self, builder, qt_root, make_installation):
        installation = make_installation(
            qt_root, "5.15.2", "gcc_64", toolchain_file=False
        )
        kits = builder.synthesize(str(qt_root), str(installation))
        assert len(kits) == 1
        assert kits[0].toolchain_file is None
        assert "toolchainFile" not in kits[0].to_dict()

    def test_directory_without_bin(self, builder, qt_root):
        installation = qt_root / "6.5.0" / "docs"
        installation.mkdir(parents=True)
        assert builder.synthesize(str(qt_root), str(installation)) == []

    def test_windows_adds_bin_dir(self, locator, qt_root, make_installation):
        builder = KitBuilder(locator=locator, is_windows=True)
        installation = make_installation(qt_root, "6.5.0", "gcc_64")

        kit = builder.synthesize(str(qt_root), str(installation))[0]

        assert kit.environment_variables["PATH"] == os.pathsep.join(
            [str(installation / "bin"), ENV_PATH]
        )

    def test_bundled_ninja_added_when_missing(
        self, builder, locator, qt_root, make_installation
    ):
        locator.tools_on_path = set()
        installation = make_installation(qt_root, "6.5.0", "gcc_64")
        ninja_dir = qt_root / "Tools" / "Ninja"
        ninja_dir.mkdir(parents=True)
        (ninja_dir / f"ninja{EXE_SUFFIX}").write_text("")

        kit = builder.synthesize(str(qt_root), str(installation))[0]

        assert kit.environment_variables["PATH"] == os.pathsep.join(
            [str(ninja_dir), ENV_PATH]
        )

    def test_deterministic(self, builder, qt_root, make_installation):
        installation = make_installation(qt_root, "6.5.0", "ios")
        first = builder.synthesize(str(qt_root), str(installation))
        second = builder.synthesize(str(qt_root), str(installation))
        assert [k.to_dict() for k in first] == [k.to_dict() for k in second]

    def test_synthesize_all_keeps_order(self, builder, qt_root, make_installation):
        installations = [
            str(make_installation(qt_root, "6.5.0", "ios")),
            str(make_installation(qt_root, "6.5.0", "macos")),
        ]
        kits = builder.synthesize_all(str(qt_root), installations)
        assert [k.name for k in kits] == [
            "Qt-6.5.0-ios",
            "Qt-6.5.0-ios-simulator",
            "Qt-6.5.0-macos",
        ]


class TestBuildFromQtInfo:
    """Tests for KitBuilder.build_from_qt_info()."""

    @pytest.fixture
    def qt_libs(self, tmp_path) -> Path:
        libs = tmp_path / "qt" / "lib"
        cmake_dir = libs / "cmake" / "Qt6"
        cmake_dir.mkdir(parents=True)
        (cmake_dir / "qt.toolchain.cmake").write_text("")
        return libs

    def _info(self, tmp_path, qt_libs, **extra):
        data = {
            "QT_VERSION": "6.5.0",
            "QT_INSTALL_LIBS": str(qt_libs),
            "QT_INSTALL_BINS": str(tmp_path / "qt" / "bin"),
            "QT_HOST_BINS": str(tmp_path / "qt" / "bin"),
            "QMAKE_XSPEC": "linux-g++",
            "QMAKE_VERSION": "3.1",
        }
        data.update(extra)
        return QtInfo(str(tmp_path / "qt" / "bin" / "qtpaths"), data)

    def test_linux(self, builder, tmp_path, qt_libs):
        info = self._info(tmp_path, qt_libs)

        kits = builder.build_from_qt_info(info)

        assert len(kits) == 1
        kit = kits[0]
        assert kit.name == "Qt-6.5.0-linux-g++"
        toolchain_file = qt_libs / "cmake" / "Qt6" / "qt.toolchain.cmake"
        assert kit.toolchain_file == str(toolchain_file)
        env = kit.environment_variables
        assert env["VSCODE_QT_QTPATHS_EXE"] == info.qt_paths_bin
        assert env["PATH"] == os.pathsep.join(
            [str(qt_libs), str(tmp_path / "qt" / "bin"), ENV_PATH]
        )

    def test_user_name(self, builder, tmp_path, qt_libs):
        info = self._info(tmp_path, qt_libs)
        info.name = "my-qt"
        assert builder.build_from_qt_info(info)[0].name == "my-qt"

    def test_missing_libs(self, builder, tmp_path, qt_libs):
        info = self._info(tmp_path, qt_libs)
        del info.data["QT_INSTALL_LIBS"]
        assert builder.build_from_qt_info(info) == []

    def test_qt6_missing_toolchain_file(self, builder, tmp_path):
        info = self._info(tmp_path, tmp_path / "nowhere")
        assert builder.build_from_qt_info(info) == []

    def test_qt5_without_toolchain_file(self, builder, tmp_path):
        info = self._info(tmp_path, tmp_path / "nowhere", QT_VERSION="5.15.2")
        kits = builder.build_from_qt_info(info)
        assert len(kits) == 1
        assert kits[0].toolchain_file is None

    def test_vcpkg(self, builder, tmp_path, monkeypatch):
        vcpkg_root = tmp_path / "vcpkg"
        toolchain = vcpkg_root / "scripts" / "buildsystems" / "vcpkg.cmake"
        toolchain.parent.mkdir(parents=True)
        toolchain.write_text("")
        monkeypatch.setenv("VCPKG_ROOT", str(vcpkg_root))
        triplet_dir = vcpkg_root / "installed" / "x64-linux"
        info = QtInfo(
            str(triplet_dir / "tools" / "Qt6" / "bin" / "qtpaths"),
            {
                "QT_VERSION": "6.6.0",
                "QT_INSTALL_LIBS": str(triplet_dir / "lib"),
                "QMAKE_XSPEC": "linux-g++",
            },
        )

        kits = builder.build_from_qt_info(info)

        assert len(kits) == 1
        assert kits[0].name == "vcpkg-Qt-6.6.0-linux-g++"
        assert kits[0].toolchain_file == str(toolchain)

    def test_msvc(self, builder, tmp_path, qt_libs, toolset_kits):
        info = self._info(
            tmp_path,
            qt_libs,
            QMAKE_XSPEC="win32-msvc",
            MSVC_MAJOR_VERSION="19",
            MSVC_MINOR_VERSION="29",
            ARCH="x86_64",
        )

        kits = builder.build_from_qt_info(info, toolset_kits)

        assert [k.name for k in kits] == [
            "Qt-6.5.0-win32-msvc_VSCommunity_2019_Release_amd64",
            "Qt-6.5.0-win32-msvc_VSCommunity_2022_Release_amd64",
            "Qt-6.5.0-win32-msvc_VSCommunity_2022_Release_x86_amd64",
        ]
        assert all(k.environment_variables["VSCODE_QT_QTPATHS_EXE"] for k in kits)

    def test_msvc_unknown_version(self, builder, tmp_path, qt_libs, toolset_kits):
        info = self._info(tmp_path, qt_libs, QMAKE_XSPEC="win32-msvc", ARCH="x86_64")
        assert builder.build_from_qt_info(info, toolset_kits) == []

    def test_msvc_unknown_arch(self, builder, tmp_path, qt_libs, toolset_kits):
        info = self._info(
            tmp_path,
            qt_libs,
            QMAKE_XSPEC="win32-msvc",
            MSVC_MAJOR_VERSION="19",
            MSVC_MINOR_VERSION="39",
            ARCH="arm64",
        )
        assert builder.build_from_qt_info(info, toolset_kits) == []
