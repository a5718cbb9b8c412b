"""
Tests for well-known directory resolution.
"""

from pathlib import Path

import pytest

from qtkits.core.directory import (
    get_global_config_file,
    get_global_kits_file,
    get_global_state_dir,
    get_host_system,
    get_user_local_dir,
    get_workspace_config_file,
    get_workspace_kits_file,
    get_workspace_state_dir,
)
from qtkits.core.exceptions import ConfigurationError


class TestUserLocalDir:
    """Tests for get_user_local_dir()."""

    def test_linux(self, isolated_home):
        assert get_user_local_dir("Linux") == isolated_home / ".local" / "share"

    def test_macos(self, isolated_home):
        assert get_user_local_dir("Darwin") == (
            isolated_home / "Library" / "Application Support"
        )

    def test_windows(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
        assert get_user_local_dir("Windows") == tmp_path / "Local"

    def test_windows_without_localappdata(self, monkeypatch):
        monkeypatch.delenv("LOCALAPPDATA", raising=False)
        with pytest.raises(ConfigurationError, match="LOCALAPPDATA"):
            get_user_local_dir("Windows")

    def test_unsupported_platform(self):
        with pytest.raises(ConfigurationError, match="Unsupported host platform"):
            get_user_local_dir("FreeBSD")

    def test_host_system_detection(self, monkeypatch):
        monkeypatch.setattr("platform.system", lambda: "SunOS")
        with pytest.raises(ConfigurationError):
            get_host_system()


class TestKitsFiles:
    """Tests for registry locations."""

    def test_global_kits_file(self, isolated_home):
        assert get_global_kits_file("Linux") == (
            isolated_home / ".local" / "share" / "CMakeTools" / "cmake-tools-kits.json"
        )

    def test_workspace_kits_file(self):
        assert get_workspace_kits_file(Path("/work/app")) == Path(
            "/work/app/.vscode/cmake-kits.json"
        )

    def test_workspace_kits_file_from_string(self):
        assert get_workspace_kits_file("/work/app") == Path(
            "/work/app/.vscode/cmake-kits.json"
        )


class TestStateAndConfigLocations:
    """Tests for state and configuration locations."""

    def test_global(self, isolated_home):
        assert get_global_state_dir() == isolated_home / ".qtkits"
        assert get_global_config_file() == isolated_home / ".qtkits" / "config.yaml"

    def test_workspace(self):
        assert get_workspace_state_dir(Path("/work/app")) == Path("/work/app/.qtkits")
        assert get_workspace_config_file(Path("/work/app")) == Path(
            "/work/app/qtkits.yaml"
        )
