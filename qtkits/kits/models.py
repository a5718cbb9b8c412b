"""
Kit data model.

A kit is a named build configuration profile consumed by the CMake Tools
extension. The field names of ``to_dict`` are the registry's JSON field
names. Fields this module does not model are kept in ``extra`` so that
kits written by other producers round-trip unchanged.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Environment markers placed on every kit generated by this package
QT_INSTALLATION_ENV = "VSCODE_QT_INSTALLATION"
QT_QTPATHS_EXE_ENV = "VSCODE_QT_QTPATHS_EXE"


@dataclass
class CMakeGenerator:
    """Preferred CMake generator of a kit."""

    name: str
    toolset: Optional[str] = None
    platform: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {"name": self.name}
        if self.toolset is not None:
            data["toolset"] = self.toolset
        if self.platform is not None:
            data["platform"] = self.platform
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CMakeGenerator":
        return cls(
            name=data.get("name", ""),
            toolset=data.get("toolset"),
            platform=data.get("platform"),
        )


@dataclass
class Kit:
    """
    A named CMake kit.

    Attributes:
        name: Unique name within a registry; the merge/removal key
        preferred_generator: Generator name plus optional toolset/platform
        cmake_settings: Additional -D settings passed to CMake
        environment_variables: Environment additions (None when unset)
        compilers: Map of language (C, CXX) to compiler path
        toolchain_file: Path to a CMake toolchain file
        visual_studio: Visual Studio installation id
        visual_studio_architecture: Architecture passed to vcvars
        environment_setup_script: Script sourced before configuring
        description: Free-form description
        keep: Survive pruning even if stale
        is_trusted: Kit comes from a trusted path
        extra: Unmodelled fields, preserved verbatim
    """

    name: str
    preferred_generator: Optional[CMakeGenerator] = None
    cmake_settings: Optional[Dict[str, str]] = None
    environment_variables: Optional[Dict[str, Optional[str]]] = None
    compilers: Optional[Dict[str, str]] = None
    toolchain_file: Optional[str] = None
    visual_studio: Optional[str] = None
    visual_studio_architecture: Optional[str] = None
    environment_setup_script: Optional[str] = None
    description: Optional[str] = None
    keep: Optional[bool] = None
    is_trusted: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "Kit":
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the registry's JSON representation, omitting unset fields."""
        data: Dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        if self.preferred_generator is not None:
            data["preferredGenerator"] = self.preferred_generator.to_dict()
        if self.cmake_settings is not None:
            data["cmakeSettings"] = dict(self.cmake_settings)
        if self.environment_variables is not None:
            data["environmentVariables"] = {
                k: v for k, v in self.environment_variables.items() if v is not None
            }
        if self.compilers is not None:
            data["compilers"] = dict(self.compilers)
        if self.visual_studio is not None:
            data["visualStudio"] = self.visual_studio
        if self.visual_studio_architecture is not None:
            data["visualStudioArchitecture"] = self.visual_studio_architecture
        if self.environment_setup_script is not None:
            data["environmentSetupScript"] = self.environment_setup_script
        if self.toolchain_file is not None:
            data["toolchainFile"] = self.toolchain_file
        if self.keep is not None:
            data["keep"] = self.keep
        data["isTrusted"] = self.is_trusted
        for key, value in self.extra.items():
            data.setdefault(key, copy.deepcopy(value))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Kit":
        """Build a Kit from a registry entry."""
        generator = data.get("preferredGenerator")
        extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in _JSON_FIELDS}
        return cls(
            name=str(data.get("name", "")),
            preferred_generator=(
                CMakeGenerator.from_dict(generator)
                if isinstance(generator, dict)
                else None
            ),
            cmake_settings=_copy_mapping(data.get("cmakeSettings")),
            environment_variables=_copy_mapping(data.get("environmentVariables")),
            compilers=_copy_mapping(data.get("compilers")),
            toolchain_file=data.get("toolchainFile"),
            visual_studio=data.get("visualStudio"),
            visual_studio_architecture=data.get("visualStudioArchitecture"),
            environment_setup_script=data.get("environmentSetupScript"),
            description=data.get("description"),
            keep=data.get("keep"),
            is_trusted=bool(data.get("isTrusted", False)),
            extra=extra,
        )

    def is_generated(self) -> bool:
        """True if the kit carries one of this package's environment markers."""
        env = self.environment_variables or {}
        return bool(env.get(QT_INSTALLATION_ENV) or env.get(QT_QTPATHS_EXE_ENV))


def _copy_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, dict):
        return dict(value)
    return None


_JSON_FIELDS = {
    "name",
    "description",
    "preferredGenerator",
    "cmakeSettings",
    "environmentVariables",
    "compilers",
    "visualStudio",
    "visualStudioArchitecture",
    "environmentSetupScript",
    "toolchainFile",
    "keep",
    "isTrusted",
}
