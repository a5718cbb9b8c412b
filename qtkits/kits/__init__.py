"""
Kit generation and registry reconciliation.
"""

from qtkits.kits.models import Kit, CMakeGenerator
from qtkits.kits.classifier import PlatformTag, classify
from qtkits.kits.msvc import match_toolsets
from qtkits.kits.builder import KitBuilder
from qtkits.kits.reconciler import reconcile, merge_registry, load_registry
from qtkits.kits.manager import KitManager

__all__ = [
    "Kit",
    "CMakeGenerator",
    "PlatformTag",
    "classify",
    "match_toolsets",
    "KitBuilder",
    "reconcile",
    "merge_registry",
    "load_registry",
    "KitManager",
]
