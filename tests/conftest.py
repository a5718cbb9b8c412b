"""
Pytest configuration and shared fixtures for qtkits tests.
"""

import json
from pathlib import Path
from typing import List, Optional

import pytest

from qtkits.core.filesystem import EXE_SUFFIX
from qtkits.core.state import StateStore
from qtkits.kits.locate import QtPathLocator
from qtkits.kits.models import Kit


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch) -> Path:
    """Keep every test away from the real per-user directories."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("LOCALAPPDATA", str(home / "AppData" / "Local"))
    monkeypatch.delenv("VCPKG_ROOT", raising=False)
    return home


def _make_installation(
    root: Path,
    version: str,
    toolchain: str,
    toolchain_file: bool = True,
    tools: tuple = ("qmake", "qtpaths"),
) -> Path:
    """
    Create a fake Qt installation ``<root>/<version>/<toolchain>``.

    Returns:
        Installation directory
    """
    installation = root / version / toolchain
    bin_dir = installation / "bin"
    bin_dir.mkdir(parents=True)
    for tool in tools:
        (bin_dir / f"{tool}{EXE_SUFFIX}").write_text("")
    if toolchain_file:
        cmake_dir = installation / "lib" / "cmake" / "Qt6"
        cmake_dir.mkdir(parents=True)
        (cmake_dir / "qt.toolchain.cmake").write_text("# Qt toolchain\n")
    return installation


class FakeLocator(QtPathLocator):
    """Locator with a controllable PATH lookup; every other lookup is real."""

    def __init__(self, tools_on_path=("ninja",)):
        self.tools_on_path = set(tools_on_path)

    def is_on_path(self, tool):
        return tool in self.tools_on_path


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()


@pytest.fixture
def qt_root(tmp_path) -> Path:
    """Empty Qt installation root named ``Qt``."""
    root = tmp_path / "Qt"
    root.mkdir()
    return root


@pytest.fixture
def global_kits_file(tmp_path) -> Path:
    return tmp_path / "CMakeTools" / "cmake-tools-kits.json"


@pytest.fixture
def state_store(tmp_path) -> StateStore:
    return StateStore(state_files={"global": tmp_path / "state" / "global.json"})


def _toolset_kit(
    name: str,
    arch: str = "amd64",
    platform: Optional[str] = "x64",
    cmake_settings: Optional[dict] = None,
) -> Kit:
    """A host toolset kit as written by CMake Tools' compiler scan."""
    data = {
        "name": name,
        "visualStudio": "c7b1f2a0",
        "visualStudioArchitecture": arch,
        "isTrusted": True,
        "preferredGenerator": {"name": "Visual Studio 17 2022", "toolset": "host=x64"},
    }
    if platform is not None:
        data["preferredGenerator"]["platform"] = platform
    if cmake_settings is not None:
        data["cmakeSettings"] = cmake_settings
    return Kit.from_dict(data)


@pytest.fixture
def toolset_kits() -> List[Kit]:
    return [
        _toolset_kit("Visual Studio Community 2019 Release - amd64"),
        _toolset_kit("Visual Studio Community 2022 Release - amd64"),
        _toolset_kit("Visual Studio Community 2022 Release - x86", "x86", "win32"),
        _toolset_kit(
            "Visual Studio Community 2022 Release - amd64_x86", "amd64_x86", "win32"
        ),
        _toolset_kit(
            "Visual Studio Community 2022 Release - x86_amd64", "x86_amd64", "x64"
        ),
    ]


def _write_registry(path: Path, entries: list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(entries, indent=2))


def _read_registry(path: Path) -> list:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def make_installation():
    """Factory creating fake Qt installations."""
    return _make_installation


@pytest.fixture
def make_toolset_kit():
    """Factory creating host toolset kits."""
    return _toolset_kit


@pytest.fixture
def write_registry():
    return _write_registry


@pytest.fixture
def read_registry():
    return _read_registry
