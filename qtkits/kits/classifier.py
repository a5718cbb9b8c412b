"""
Toolchain classification of Qt installations.

An installation directory is named after its toolchain, e.g. ``msvc2019_64``,
``mingw_64``, ``gcc_64``, ``macos``, ``ios`` or ``android_arm64_v8a``. The
first ``_``-separated token of the final path segment selects the family.
"""

import re
from enum import Enum
from typing import Union
from pathlib import PurePath


class PlatformTag(str, Enum):
    """Toolchain family of an installation."""

    MSVC = "msvc"
    MINGW = "mingw"
    MACOS = "macos"
    IOS = "ios"
    ANDROID = "android"
    OTHER = "other"


_KNOWN_PREFIXES = (
    PlatformTag.MSVC,
    PlatformTag.MINGW,
    PlatformTag.MACOS,
    PlatformTag.IOS,
    PlatformTag.ANDROID,
)

_SEPARATORS = re.compile(r"[/\\]+")


def installation_basename(installation: Union[str, PurePath]) -> str:
    """
    Final path segment of an installation, for either separator style.

    Example:
        >>> installation_basename('C:\\\\Qt\\\\6.5.0\\\\msvc2019_64')
        'msvc2019_64'
    """
    parts = [p for p in _SEPARATORS.split(str(installation)) if p]
    return parts[-1] if parts else ""


def classify(installation: Union[str, PurePath]) -> PlatformTag:
    """
    Derive the toolchain family from an installation path.

    Matching is case-sensitive on the first token of the last path segment.
    Unrecognized names yield ``PlatformTag.OTHER``.

    Example:
        >>> classify('/opt/Qt/6.5.0/msvc2019_64')
        <PlatformTag.MSVC: 'msvc'>
        >>> classify('/opt/Qt/6.5.0/gcc_64')
        <PlatformTag.OTHER: 'other'>
    """
    token = installation_basename(installation).split("_")[0]
    for tag in _KNOWN_PREFIXES:
        if token.startswith(tag.value):
            return tag
    return PlatformTag.OTHER
