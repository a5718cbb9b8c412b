"""
State store for generated kit names.

The reconciler needs to know which kit names it generated on the previous
pass of a scope, so it can remove exactly those from the shared registry.
That record is kept here, one JSON file per scope:

    global:     ~/.qtkits/state.json
    workspace:  <workspace>/.qtkits/state.json

Each file holds one name list per kit source::

    {
      "version": 1,
      "generated_kits": {
        "installations": ["Qt-6.5.0-gcc_64"],
        "qtpaths": []
      }
    }

Example:
    >>> store = StateStore()
    >>> scope = Scope.workspace(Path('/work/app'))
    >>> state = store.get(scope, KitSource.INSTALLATIONS)
    >>> store.set(scope, KitSource.INSTALLATIONS, ScopedState({'Qt-6.5.0-gcc_64'}))
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from qtkits.core.directory import (
    STATE_FILE_NAME,
    get_global_kits_file,
    get_global_state_dir,
    get_workspace_kits_file,
    get_workspace_state_dir,
)
from qtkits.core.exceptions import StateError
from qtkits.core.filesystem import atomic_write, load_json_file

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class KitSource(str, Enum):
    """Producer of a generated kit set; each source is tracked independently."""

    INSTALLATIONS = "installations"
    QTPATHS = "qtpaths"


@dataclass(frozen=True)
class Scope:
    """
    Namespace under which a kit registry and its state are tracked.

    ``folder`` is None for the global scope.
    """

    folder: Optional[Path] = None

    @classmethod
    def global_scope(cls) -> "Scope":
        return cls()

    @classmethod
    def workspace(cls, folder: Path) -> "Scope":
        return cls(Path(folder).resolve())

    @property
    def is_global(self) -> bool:
        return self.folder is None

    @property
    def key(self) -> str:
        return "global" if self.folder is None else str(self.folder)

    def kits_file(self, global_kits_file: Optional[Path] = None) -> Path:
        """Registry file for this scope."""
        if self.folder is None:
            return global_kits_file or get_global_kits_file()
        return get_workspace_kits_file(self.folder)

    def state_file(self) -> Path:
        if self.folder is None:
            return get_global_state_dir() / STATE_FILE_NAME
        return get_workspace_state_dir(self.folder) / STATE_FILE_NAME

    def __str__(self) -> str:
        return "global" if self.folder is None else f"workspace {self.folder}"


@dataclass(frozen=True)
class ScopedState:
    """Names of the kits generated by the last successful pass."""

    last_generated_kit_names: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(
            self, "last_generated_kit_names", frozenset(self.last_generated_kit_names)
        )

    @classmethod
    def from_kits(cls, kits) -> "ScopedState":
        return cls(kit.name for kit in kits)


class StateStore:
    """
    Persistent record of generated kit names, one file per scope.

    Reads are cached per scope file; writes are atomic. A corrupted state
    file is logged and treated as empty.
    """

    def __init__(self, state_files: Optional[Dict[str, Path]] = None):
        """
        Initialize the store.

        Args:
            state_files: Optional mapping of scope key to state file, overriding
                the default locations (used by tests and custom setups)
        """
        self._state_files = dict(state_files or {})
        self._cache: Dict[Path, Dict[str, list]] = {}

    def state_file(self, scope: Scope) -> Path:
        return self._state_files.get(scope.key) or scope.state_file()

    def get(self, scope: Scope, source: KitSource) -> ScopedState:
        """Return the recorded state, empty on first run."""
        records = self._load(self.state_file(scope))
        return ScopedState(records.get(KitSource(source).value, []))

    def set(self, scope: Scope, source: KitSource, state: ScopedState) -> None:
        """Record ``state`` for ``scope``/``source`` and persist it."""
        state_file = self.state_file(scope)
        records = dict(self._load(state_file))
        records[KitSource(source).value] = sorted(state.last_generated_kit_names)
        self._save(state_file, records)
        logger.debug(
            f"Recorded {len(state.last_generated_kit_names)} "
            f"{KitSource(source).value} kit(s) for {scope}"
        )

    def reset(self, scope: Scope) -> None:
        """Forget every generated name recorded for ``scope``."""
        state_file = self.state_file(scope)
        self._cache.pop(state_file, None)
        if state_file.exists():
            try:
                state_file.unlink()
            except OSError as e:
                raise StateError(f"Failed to reset state {state_file}: {e}") from e
        logger.info(f"Reset kit state for {scope}")

    def _load(self, state_file: Path) -> Dict[str, list]:
        if state_file in self._cache:
            return self._cache[state_file]

        data = load_json_file(state_file, default={})
        records: Dict[str, list] = {}
        if not isinstance(data, dict):
            logger.warning(f"Invalid state file {state_file}, resetting to default")
        else:
            if data.get("version", STATE_VERSION) != STATE_VERSION:
                logger.warning(
                    f"State version {data.get('version')} not supported, ignoring"
                )
            else:
                generated = data.get("generated_kits", {})
                if isinstance(generated, dict):
                    records = {
                        str(k): [str(n) for n in v]
                        for k, v in generated.items()
                        if isinstance(v, list)
                    }

        self._cache[state_file] = records
        return records

    def _save(self, state_file: Path, records: Dict[str, list]) -> None:
        content = json.dumps(
            {"version": STATE_VERSION, "generated_kits": records}, indent=2
        )
        try:
            atomic_write(state_file, content + "\n")
        except OSError as e:
            raise StateError(f"Failed to save state {state_file}: {e}") from e
        self._cache[state_file] = records
