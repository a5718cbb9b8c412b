"""
Concurrent access control for kit registries.

Two mechanisms are provided:

- ``registry_lock``: a cross-process file lock (``filelock``) held while a
  registry file is read, merged and rewritten.
- ``PassSequencer``: an in-process, per-scope sequencer that orders
  reconciliation passes by the time they were initiated. A pass that was
  started before another one that has already written is discarded, so a
  stale pass never overwrites a fresher result.

Usage:
    from qtkits.core.locking import PassSequencer, registry_lock

    sequencer = PassSequencer()
    ticket = sequencer.begin("global")
    ...  # generate kits
    with sequencer.commit("global", ticket) as should_write:
        if should_write:
            with registry_lock(kits_file):
                write_registry(kits_file)
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict

from filelock import FileLock, Timeout

from qtkits.core.exceptions import RegistryLockTimeout

logger = logging.getLogger(__name__)


@contextmanager
def registry_lock(registry_file: Path, timeout: float = 30):
    """
    Acquire the lock guarding one registry file.

    The lock file lives next to the registry as ``<name>.lock``.

    Args:
        registry_file: Registry file to protect
        timeout: Maximum wait time in seconds (default: 30)

    Raises:
        RegistryLockTimeout: If lock can't be acquired within timeout

    Example:
        >>> with registry_lock(Path('.vscode/cmake-kits.json')):
        ...     rewrite_registry()
    """
    registry_file = Path(registry_file)
    registry_file.parent.mkdir(parents=True, exist_ok=True)
    lock_path = registry_file.with_name(registry_file.name + ".lock")
    lock = FileLock(lock_path, timeout=timeout)

    try:
        with lock:
            logger.debug(f"Acquired registry lock: {lock_path}")
            yield
            logger.debug(f"Released registry lock: {lock_path}")
    except Timeout as e:
        logger.error(f"Could not acquire registry lock after {timeout}s: {lock_path}")
        raise RegistryLockTimeout(
            f"Could not acquire registry lock after {timeout}s. "
            "Another process may be updating the kits."
        ) from e


class PassSequencer:
    """
    Order reconciliation passes per scope, latest-initiated wins.

    Each pass calls ``begin`` when it starts and receives a ticket. When it
    is ready to persist, it enters ``commit``; the body runs with the scope
    lock held and ``should_write`` is False if a pass initiated later has
    already committed.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._issued: Dict[str, int] = {}
        self._committed: Dict[str, int] = {}

    def begin(self, scope_key: str) -> int:
        """Issue a ticket for a pass initiated now."""
        with self._guard:
            ticket = self._issued.get(scope_key, 0) + 1
            self._issued[scope_key] = ticket
            return ticket

    def is_busy(self, scope_key: str) -> bool:
        """True while a pass for the scope is committing."""
        return self._scope_lock(scope_key).locked()

    @contextmanager
    def commit(self, scope_key: str, ticket: int):
        with self._scope_lock(scope_key):
            last = self._committed.get(scope_key, 0)
            if ticket < last:
                logger.info(
                    f"Discarding stale pass {ticket} for {scope_key} "
                    f"(pass {last} already written)"
                )
                yield False
                return
            yield True
            self._committed[scope_key] = ticket

    def _scope_lock(self, scope_key: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(scope_key, threading.Lock())
