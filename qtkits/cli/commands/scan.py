"""
Scan command.

Generates kits for the Qt installations of one scope and reconciles them
into that scope's kit registry.
"""

import logging

from qtkits.cli.utils import create_manager, print_error, print_warning, resolve_scope
from qtkits.core.exceptions import ConfigurationError, RegistryError
from qtkits.kits.analysis import analyze_kit

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the scan command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    scope = resolve_scope(args)
    logger.info(f"Updating kits for {scope}")

    try:
        manager = create_manager(args)
    except ConfigurationError as e:
        print_error("Invalid configuration", str(e))
        return 1

    config = manager.config_for(scope)
    if not config.qt_installation_root and not config.additional_qt_paths:
        print_warning(
            "No Qt installation root or additional Qt paths configured. "
            "Previously generated kits will be removed."
        )

    try:
        kits = manager.check_for_installations(scope)
    except RegistryError as e:
        logger.error(f"Failed to update kits: {e}")
        print_error("Failed to update kits", str(e))
        return 1

    print(f"Generated {len(kits)} kit(s) in {manager.kits_file(scope)}")
    for kit in kits:
        info = analyze_kit(kit)
        details = ", ".join(f"{k}={v}" for k, v in info.items())
        print(f"  ✓ {kit.name}" + (f" ({details})" if details else ""))

    cmake = manager.bundled_cmake(scope)
    if cmake is not None:
        print(f"cmake is not on PATH; Qt ships one at {cmake}")
    return 0
