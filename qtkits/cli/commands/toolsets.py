"""
Toolsets command.

Prints the host toolset kits that MSVC Qt installations are matched against.
"""

from qtkits.cli.utils import create_manager, print_error
from qtkits.core.exceptions import ConfigurationError
from qtkits.kits.msvc import MSVC_PLATFORM_TO_QT_ARCH, get_msvc_year


def run(args) -> int:
    try:
        manager = create_manager(args)
    except ConfigurationError as e:
        print_error("Invalid configuration", str(e))
        return 1

    toolsets = manager.get_toolset_kits()
    if not toolsets:
        print(f"No toolset kits found in {manager.global_kits_file}")
        return 0

    for kit in toolsets:
        year = get_msvc_year(kit) or "-"
        arch = MSVC_PLATFORM_TO_QT_ARCH.get(kit.visual_studio_architecture or "", "-")
        print(f"  {kit.name} (year: {year}, arch: {arch})")
    return 0
