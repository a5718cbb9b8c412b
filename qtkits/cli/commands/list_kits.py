"""
List command.

Prints the kits of a registry; generated kits are marked with ``*``.
"""

import logging

from qtkits.cli.utils import create_manager, print_error, resolve_scope
from qtkits.core.exceptions import ConfigurationError
from qtkits.core.state import KitSource
from qtkits.kits.reconciler import load_kits

logger = logging.getLogger(__name__)


def run(args) -> int:
    scope = resolve_scope(args)
    try:
        manager = create_manager(args)
    except ConfigurationError as e:
        print_error("Invalid configuration", str(e))
        return 1

    kits_file = manager.kits_file(scope)
    kits = load_kits(kits_file)
    generated = set()
    for source in KitSource:
        generated |= manager.previous_state(scope, source).last_generated_kit_names

    print(f"{len(kits)} kit(s) in {kits_file}")
    for kit in kits:
        marker = "*" if kit.name in generated else " "
        print(f"  {marker} {kit.name}")
    return 0
