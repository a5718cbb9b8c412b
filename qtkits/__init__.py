"""
qtkits - CMake kit generation for Qt installations.

Discovers Qt installations, builds CMake Tools kits for them and keeps the
shared kit registries in sync without touching kits owned by others.
"""

__version__ = "0.1.0"
