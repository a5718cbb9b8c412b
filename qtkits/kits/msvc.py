"""
MSVC toolset matching.

Qt's MSVC builds are tied to a Visual Studio year and a target architecture
but carry no compiler setup of their own. CMake Tools, on the other hand,
scans for Visual Studio installations and writes one kit per toolset, e.g.
``Visual Studio Community 2022 Release - amd64``. This module pairs the two:
every host toolset kit that is new enough and targets the requested
architecture is turned into a Qt kit.

Example:
    >>> base = Kit(name='Qt-6.5.0-msvc2019_64', is_trusted=True)
    >>> kits = match_toolsets(toolset_kits, '64', '2019', base, generator='Ninja')
    >>> [k.name for k in kits]
    ['Qt-6.5.0-msvc2019_64_VS2019_Release_amd64']
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from qtkits.kits.models import CMakeGenerator, Kit
from qtkits.kits.naming import mangle_msvc_kit_name, toolset_suffix

logger = logging.getLogger(__name__)

# Visual Studio platform names to Qt's bitness naming
MSVC_PLATFORM_TO_QT_ARCH = {
    "x64": "64",
    "amd64_x86": "32",
    "x86_amd64": "64",
    "amd64": "64",
    "win32": "32",
    "x86": "32",
    "x86_64": "64",
    "i386": "32",
}

MSVC_INFO_REGEX = re.compile(r"msvc(\d\d\d\d)_(.+)")  # msvcYEAR_ARCH
MSVC_INFO_NO_ARCH_REGEX = re.compile(r"msvc(\d\d\d\d)")  # msvcYEAR
MSVC_YEAR_REGEX = re.compile(r" (\d\d\d\d) ")
MSVC_MAJOR_VERSION_REGEX = re.compile(r"VisualStudio\.(\d\d)\.\d ")

MSVC_MAJOR_VERSION_TO_YEAR = {
    "11": "2008",
    "12": "2010",
    "13": "2012",
    "14": "2015",
    "15": "2017",
    "16": "2019",
    "17": "2022",
}

DEFAULT_MSVC_ARCHITECTURE = "32"

_YEAR_PATTERN = re.compile(r"^\d{4}$")


def parse_msvc_installation(toolchain: str) -> Tuple[str, str]:
    """
    Extract the Visual Studio year and architecture from a toolchain name.

    ``msvcYEAR_ARCH`` is tried first, then ``msvcYEAR`` with the
    architecture defaulting to ``32``. An unmatched name gives an empty year.

    Example:
        >>> parse_msvc_installation('msvc2019_64')
        ('2019', '64')
        >>> parse_msvc_installation('msvc2017')
        ('2017', '32')
    """
    match = MSVC_INFO_REGEX.search(toolchain)
    if match:
        return match.group(1), match.group(2)
    match = MSVC_INFO_NO_ARCH_REGEX.search(toolchain)
    if match:
        return match.group(1), DEFAULT_MSVC_ARCHITECTURE
    return "", DEFAULT_MSVC_ARCHITECTURE


def get_msvc_year(kit: Kit) -> str:
    """
    Visual Studio year of a host toolset kit, or '' if it has none.

    The year is read from `` YYYY `` in the kit name, else from a
    ``VisualStudio.NN.N `` major version through MSVC_MAJOR_VERSION_TO_YEAR.
    """
    match = MSVC_YEAR_REGEX.search(kit.name)
    if match:
        return match.group(1)
    match = MSVC_MAJOR_VERSION_REGEX.search(kit.name)
    if match:
        return MSVC_MAJOR_VERSION_TO_YEAR.get(match.group(1), "")
    return ""


def convert_msc_ver_to_year(msc_ver: int) -> Optional[str]:
    """
    Map an _MSC_VER value to its Visual Studio year.

    Example:
        >>> convert_msc_ver_to_year(1929)
        '2019'
    """
    exact = {1600: "2010", 1700: "2012", 1800: "2013", 1900: "2015"}
    if msc_ver in exact:
        return exact[msc_ver]
    if 1910 <= msc_ver <= 1916:
        return "2017"
    if 1920 <= msc_ver <= 1929:
        return "2019"
    if 1930 <= msc_ver <= 1939:
        return "2022"
    return None


def is_valid_year(year: str) -> bool:
    return bool(year and _YEAR_PATTERN.match(year))


def is_architecture_match(kit: Kit, architecture: str) -> bool:
    """
    True if both the kit's vcvars architecture and generator platform map to
    ``architecture``.

    Requiring both rules out cross-compiling toolsets whose host and target
    architectures differ.
    """
    target_arch = MSVC_PLATFORM_TO_QT_ARCH.get(kit.visual_studio_architecture or "")
    platform = kit.preferred_generator.platform if kit.preferred_generator else None
    target_platform_arch = MSVC_PLATFORM_TO_QT_ARCH.get(platform or "")
    return target_arch == architecture and target_platform_arch == architecture


def select_toolsets(
    candidates: Iterable[Kit], architecture: str, min_year: str
) -> List[Kit]:
    """
    Filter host toolset kits to those usable for a Qt MSVC build.

    Candidates keep their input order. Returned kits are independent copies.
    """
    selected = []
    for candidate in candidates:
        year = get_msvc_year(candidate)
        if not year:
            continue
        logger.debug(f"Toolset '{candidate.name}' year: {year}")
        if not is_architecture_match(candidate, architecture):
            continue
        if year >= min_year:
            selected.append(candidate.copy())
    return selected


def derive_toolset_kit(
    base_kit: Kit,
    toolset: Kit,
    generator: CMakeGenerator,
    kit_name: Optional[str] = None,
) -> Kit:
    """
    Turn one selected toolset kit into a Qt kit.

    The toolset kit is renamed ``<base>_<suffix>`` and given the configured
    generator. Ninja generators accept neither platform nor toolset, so those
    are cleared and the base CMake settings are merged in under the toolset's
    own. Environment and toolchain file always come from ``base_kit``.
    """
    kit = toolset.copy()
    kit.name = mangle_msvc_kit_name(
        f"{kit_name or base_kit.name}_{toolset_suffix(toolset.name)}"
    )

    if kit.preferred_generator is not None:
        kit.preferred_generator.name = generator.name
        if generator.name.startswith("Ninja"):
            if base_kit.cmake_settings:
                kit.cmake_settings = {
                    **base_kit.cmake_settings,
                    **(kit.cmake_settings or {}),
                }
            kit.preferred_generator.platform = None
            kit.preferred_generator.toolset = None
    else:
        kit.preferred_generator = CMakeGenerator(
            name=generator.name,
            toolset=generator.toolset,
            platform=generator.platform,
        )

    kit.environment_variables = (
        dict(base_kit.environment_variables)
        if base_kit.environment_variables is not None
        else None
    )
    kit.toolchain_file = base_kit.toolchain_file
    return kit


def match_toolsets(
    candidates: Iterable[Kit],
    architecture: str,
    min_year: str,
    base_kit: Kit,
    generator: str = "Ninja",
    kit_name: Optional[str] = None,
) -> List[Kit]:
    """
    Expand ``base_kit`` into one kit per compatible host toolset.

    Args:
        candidates: Host toolset kits (not generated by qtkits)
        architecture: Requested Qt architecture ('32' or '64')
        min_year: Minimum Visual Studio year, 4 digits
        base_kit: Kit carrying the Qt environment and toolchain file
        generator: Configured CMake generator name
        kit_name: Name prefix overriding ``base_kit.name``

    Returns:
        Derived kits in candidate order; empty when year or architecture
        cannot be resolved or nothing matches.
    """
    logger.info(f"vsYear: {min_year}")
    logger.info(f"architecture: {architecture}")
    if not is_valid_year(min_year):
        logger.warning(f"Cannot resolve Visual Studio year for {base_kit.name}")
        return []
    if not architecture:
        logger.warning(f"Cannot resolve architecture for {base_kit.name}")
        return []

    base_generator = base_kit.preferred_generator or CMakeGenerator(name=generator)
    resolved = CMakeGenerator(
        name=generator,
        toolset=base_generator.toolset,
        platform=base_generator.platform,
    )

    kits = []
    for toolset in select_toolsets(candidates, architecture, min_year):
        kit = derive_toolset_kit(base_kit, toolset, resolved, kit_name)
        logger.debug(f"Derived MSVC kit: {kit.name}")
        kits.append(kit)

    if not kits:
        logger.info(
            f"No Visual Studio toolset matches {base_kit.name} "
            f"(year >= {min_year}, architecture {architecture})"
        )
    return kits
