"""
Reset command.

Removes generated kits from a scope's registry and clears its state.
"""

import logging

from qtkits.cli.utils import create_manager, print_error, resolve_scope
from qtkits.core.exceptions import ConfigurationError, QtKitsError

logger = logging.getLogger(__name__)


def run(args) -> int:
    scope = resolve_scope(args)
    try:
        manager = create_manager(args)
    except ConfigurationError as e:
        print_error("Invalid configuration", str(e))
        return 1

    try:
        manager.reset_scope(scope)
    except QtKitsError as e:
        logger.error(f"Failed to reset kits: {e}")
        print_error("Failed to reset kits", str(e))
        return 1

    print(f"Removed generated kits from {manager.kits_file(scope)}")
    return 0
