"""Deterministic kit names derived from installation paths."""

import re
from pathlib import PurePath
from typing import Union

_PATH_SPLIT = re.compile(r"[/\\]+")
_MSVC_NAME_SPLIT = re.compile(r"[/\\:]+")


def mangle_qt_installation(
    qt_ins_root: Union[str, PurePath], installation: Union[str, PurePath]
) -> str:
    """
    Name a kit after an installation's path relative to its root.

    The root's own directory name is kept as the first component.

    Example:
        >>> mangle_qt_installation('/opt/Qt', '/opt/Qt/6.5.0/gcc_64')
        'Qt-6.5.0-gcc_64'
    """
    root_parts = [p for p in _PATH_SPLIT.split(str(qt_ins_root)) if p]
    ins_parts = [p for p in _PATH_SPLIT.split(str(installation)) if p]

    if ins_parts[: len(root_parts)] == root_parts:
        relative = ins_parts[len(root_parts) :]
    else:
        relative = ins_parts
    root_name = root_parts[-1] if root_parts else ""
    return "-".join(p for p in [root_name, *relative] if p)


def mangle_msvc_kit_name(name: str) -> str:
    """
    Normalize a composed MSVC kit name.

    Splits on path separators and drive colons and joins the parts with
    ``-``, starting from the first ``Qt`` component if there is one.

    Example:
        >>> mangle_msvc_kit_name('C:/Qt/6.5.0/msvc2019_64_VS2019')
        'Qt-6.5.0-msvc2019_64_VS2019'
    """
    parts = [p for p in _MSVC_NAME_SPLIT.split(name) if p]
    qt_index = next((i for i, p in enumerate(parts) if p.lower() == "qt"), 0)
    return "-".join(parts[qt_index:])


def toolset_suffix(toolset_kit_name: str) -> str:
    """
    Short suffix for a host toolset kit name.

    Example:
        >>> toolset_suffix('Visual Studio 2019 Release - amd64')
        'VS2019_Release_amd64'
    """
    return re.sub(r"[-_ ]+", "_", toolset_kit_name.replace("Visual Studio ", "VS", 1))
