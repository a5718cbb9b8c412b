"""
Registry reconciliation.

A kit registry file (``cmake-tools-kits.json`` or ``.vscode/cmake-kits.json``)
is shared with CMake Tools and with the user. On every pass the kits this
package generated *last time* are removed and the freshly generated kits are
appended; every other entry is left exactly as it was, in place.

Example:
    >>> previous = store.get(scope, KitSource.INSTALLATIONS)
    >>> state = reconcile(scope.kits_file(), previous, new_kits)
    >>> store.set(scope, KitSource.INSTALLATIONS, state)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from qtkits.core.exceptions import RegistryWriteError
from qtkits.core.filesystem import atomic_write, load_json_file
from qtkits.core.locking import registry_lock
from qtkits.core.state import ScopedState
from qtkits.kits.models import Kit

logger = logging.getLogger(__name__)

RegistryEntry = Dict[str, Any]


def load_registry(kits_file: Path) -> List[RegistryEntry]:
    """
    Load the raw entries of a registry file.

    A missing file gives an empty list. A malformed file is logged and
    also treated as empty; it is rewritten on the next successful pass.
    """
    data = load_json_file(Path(kits_file), default=[])
    if not isinstance(data, list):
        logger.error(f"Error parsing {kits_file}: expected a list of kits")
        return []

    entries = []
    for entry in data:
        if isinstance(entry, dict):
            entries.append(entry)
        else:
            logger.warning(f"Dropping malformed kit entry in {kits_file}: {entry!r}")
    return entries


def load_kits(kits_file: Path) -> List[Kit]:
    return [Kit.from_dict(entry) for entry in load_registry(kits_file)]


def load_toolset_kits(kits_file: Path) -> List[Kit]:
    """
    Host toolset kits of a registry.

    Kits generated by this package are excluded; only kits written by CMake
    Tools' own scan (or by the user) serve as MSVC templates.
    """
    kits = [kit for kit in load_kits(kits_file) if not kit.is_generated()]
    logger.debug(f"Loaded {len(kits)} toolset kit(s) from {kits_file}")
    return kits


def merge_registry(
    current: Sequence[RegistryEntry],
    previous_names: Iterable[str],
    new_kits: Sequence[Kit],
) -> List[RegistryEntry]:
    """
    Compute the new registry contents.

    Entries named in ``previous_names`` are dropped; all others keep their
    relative order. ``new_kits`` are appended at the end; when the new set
    repeats a name, the last kit with that name wins.
    """
    previous = set(previous_names)
    merged = [entry for entry in current if entry.get("name") not in previous]

    latest: Dict[str, Kit] = {}
    for kit in new_kits:
        latest.pop(kit.name, None)
        latest[kit.name] = kit
    merged.extend(kit.to_dict() for kit in latest.values())
    return merged


def write_registry(kits_file: Path, entries: Sequence[RegistryEntry]) -> None:
    """
    Atomically rewrite a registry file.

    Raises:
        RegistryWriteError: If the file cannot be written
    """
    content = json.dumps(list(entries), indent=2, ensure_ascii=False)
    try:
        atomic_write(kits_file, content)
    except OSError as e:
        logger.error(f"Error writing to {kits_file}: {e}")
        raise RegistryWriteError(kits_file, str(e)) from e
    logger.info(f"Successfully wrote to {kits_file}")


def reconcile(
    kits_file: Path,
    previous: ScopedState,
    new_kits: Sequence[Kit],
    lock_timeout: float = 30,
) -> ScopedState:
    """
    Merge ``new_kits`` into the registry at ``kits_file``.

    Args:
        kits_file: Registry file of the scope
        previous: Names generated by the previous successful pass
        new_kits: Kits generated by this pass
        lock_timeout: Seconds to wait for the registry lock

    Returns:
        The state to record once the caller accepts this pass.

    Raises:
        RegistryWriteError: If the registry cannot be written; the caller
            must not record the returned state in that case.
        RegistryLockTimeout: If another process holds the registry
    """
    kits_file = Path(kits_file)
    if not new_kits and not kits_file.exists():
        logger.debug(f"Nothing to write to {kits_file}")
        return ScopedState()

    with registry_lock(kits_file, timeout=lock_timeout):
        current = load_registry(kits_file)
        merged = merge_registry(current, previous.last_generated_kit_names, new_kits)
        if merged or kits_file.exists():
            write_registry(kits_file, merged)
        else:
            logger.debug(f"Nothing to write to {kits_file}")
    return ScopedState.from_kits(new_kits)
