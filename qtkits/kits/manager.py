"""
Kit manager: the entry point tying discovery, building and reconciliation.

A pass for one scope and one kit source runs as::

    installations -> KitBuilder -> new kits
    StateStore.get -> StateStore.set(previous + new) -> reconcile(registry)
        -> StateStore.set(new) -> observers

Passes for the same scope/source are sequenced by initiation time, so a
pass started earlier never overwrites the registry after a later one.

Example:
    >>> manager = KitManager()
    >>> manager.add_workspace(Path('/work/app'))
    >>> manager.check_for_all_installations()
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from qtkits.core.config import (
    AdditionalQtPath,
    QtKitsConfig,
    load_global_config,
    load_workspace_config,
)
from qtkits.core.directory import get_global_kits_file
from qtkits.core.locking import PassSequencer
from qtkits.core.state import KitSource, Scope, ScopedState, StateStore
from qtkits.kits.builder import KitBuilder
from qtkits.kits.discovery import (
    QtInfo,
    discover_installations,
    query_installation_info,
)
from qtkits.kits.locate import QtPathLocator
from qtkits.kits.models import Kit
from qtkits.kits.reconciler import load_toolset_kits, reconcile

logger = logging.getLogger(__name__)

KitsGeneratedCallback = Callable[[Scope, KitSource, List[str]], None]


def show_qt_installations_message(
    qt_ins_root: str, installations: Sequence[str]
) -> str:
    """Log and return the summary of an installation scan."""
    if not installations:
        message = f'Cannot find a Qt installation in "{qt_ins_root}".'
        logger.warning(message)
    else:
        message = f'Found {len(installations)} Qt installation(s) in "{qt_ins_root}".'
        logger.info(message)
    return message


class KitManager:
    """
    Generate Qt kits and keep the kit registries of every scope up to date.

    Args:
        global_config: Global settings (loaded from disk when omitted)
        state_store: Generated-name store (default locations when omitted)
        locator: Filesystem lookups used by the builder
        discover: Collaborator returning installations under a root
        query_info: Collaborator returning qtpaths properties
        global_kits_file: Override for the global registry path

    Raises:
        ConfigurationError: If the host platform is unsupported
    """

    def __init__(
        self,
        global_config: Optional[QtKitsConfig] = None,
        state_store: Optional[StateStore] = None,
        locator: Optional[QtPathLocator] = None,
        discover: Callable[[str], List[str]] = discover_installations,
        query_info: Callable[..., Optional[QtInfo]] = query_installation_info,
        global_kits_file: Optional[Path] = None,
    ):
        self.global_config = global_config or load_global_config()
        self.state_store = state_store or StateStore()
        self.locator = locator or QtPathLocator()
        self.discover = discover
        self.query_info = query_info

        if global_kits_file is None and self.global_config.cmake_global_kits_file:
            global_kits_file = Path(self.global_config.cmake_global_kits_file)
        self.global_kits_file = Path(global_kits_file or get_global_kits_file())

        self.workspaces: Dict[Path, QtKitsConfig] = {}
        self._sequencer = PassSequencer()
        self._observers: List[KitsGeneratedCallback] = []

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def add_workspace(
        self, folder: Path, config: Optional[QtKitsConfig] = None
    ) -> Scope:
        scope = Scope.workspace(folder)
        self.workspaces[scope.folder] = config or load_workspace_config(
            scope.folder, self.global_config
        )
        logger.info(f"Adding workspace: {scope.folder}")
        return scope

    def remove_workspace(self, folder: Path) -> None:
        """Stop tracking a workspace; its registry and state are left as is."""
        self.workspaces.pop(Scope.workspace(folder).folder, None)

    def scopes(self) -> List[Scope]:
        return [Scope.global_scope()] + [Scope(folder) for folder in self.workspaces]

    def config_for(self, scope: Scope) -> QtKitsConfig:
        if scope.is_global:
            return self.global_config
        config = self.workspaces.get(scope.folder)
        if config is None:
            config = load_workspace_config(scope.folder, self.global_config)
            self.workspaces[scope.folder] = config
        return config

    def kits_file(self, scope: Scope) -> Path:
        return scope.kits_file(self.global_kits_file)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on_kits_generated(self, callback: KitsGeneratedCallback) -> None:
        """Register ``callback(scope, source, names)`` run after each write."""
        self._observers.append(callback)

    def _notify(self, scope: Scope, source: KitSource, kits: Sequence[Kit]) -> None:
        names = [kit.name for kit in kits]
        for callback in self._observers:
            callback(scope, source, names)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def get_toolset_kits(self) -> List[Kit]:
        """Host toolset kits from the global registry, for MSVC expansion."""
        return load_toolset_kits(self.global_kits_file)

    def bundled_cmake(self, scope: Scope) -> Optional[Path]:
        """
        CMake shipped under the scope's installation root.

        Only reported when ``cmake`` is not on PATH; None otherwise.
        """
        qt_ins_root = self.config_for(scope).qt_installation_root
        if not qt_ins_root or self.locator.is_on_path("cmake"):
            return None
        cmake = self.locator.locate_cmake_executable(qt_ins_root)
        if cmake is not None:
            logger.info(f"CMake found in Qt tools: {cmake}")
        return cmake

    def _builder(self, scope: Scope) -> KitBuilder:
        return KitBuilder(
            generator=self.config_for(scope).cmake_generator, locator=self.locator
        )

    def check_for_all_installations(self) -> Dict[Scope, List[Kit]]:
        """Regenerate kits of the global scope and of every workspace."""
        return {scope: self.check_for_installations(scope) for scope in self.scopes()}

    def check_for_installations(self, scope: Scope) -> List[Kit]:
        """
        Regenerate both kit sources of a scope from its configuration.

        Returns:
            All kits generated for the scope.
        """
        config = self.config_for(scope)
        qt_ins_root = config.qt_installation_root
        installations = self.discover(qt_ins_root) if qt_ins_root else []
        if qt_ins_root:
            show_qt_installations_message(qt_ins_root, installations)

        kits = self.update_qt_kits(scope, qt_ins_root, installations)
        kits += self.update_qt_paths_kits(scope, config.additional_qt_paths)
        return kits

    def update_qt_kits(
        self, scope: Scope, qt_ins_root: str, installations: Sequence[str]
    ) -> List[Kit]:
        """Regenerate kits for the installations found under ``qt_ins_root``."""
        ticket = self._sequencer.begin(self._pass_key(scope, KitSource.INSTALLATIONS))
        logger.info(f'qtInstallationRoot: "{qt_ins_root}"')
        toolset_kits = self.get_toolset_kits() if installations else []
        kits = self._builder(scope).synthesize_all(
            qt_ins_root, installations, toolset_kits
        )
        logger.info(f"New generated kits: {[k.name for k in kits]}")
        self._commit(scope, KitSource.INSTALLATIONS, ticket, kits)
        return kits

    def update_qt_paths_kits(
        self, scope: Scope, paths: Sequence[AdditionalQtPath]
    ) -> List[Kit]:
        """Regenerate kits for additional qtpaths/qmake executables."""
        ticket = self._sequencer.begin(self._pass_key(scope, KitSource.QTPATHS))
        toolset_kits = self.get_toolset_kits() if paths else []
        builder = self._builder(scope)
        kits: List[Kit] = []
        for qt_path in paths:
            info = self.query_info(qt_path.path, qt_path.name)
            if info is None:
                logger.warning(f'qtPaths info not found for "{qt_path.path}".')
                continue
            kits.extend(builder.build_from_qt_info(info, toolset_kits))
        logger.info(f"QtPaths generated kits: {[k.name for k in kits]}")
        self._commit(scope, KitSource.QTPATHS, ticket, kits)
        return kits

    def _commit(
        self, scope: Scope, source: KitSource, ticket: int, kits: Sequence[Kit]
    ) -> None:
        pass_key = self._pass_key(scope, source)
        with self._sequencer.commit(pass_key, ticket) as should_write:
            if not should_write:
                return
            previous = self.state_store.get(scope, source)
            # Names that may be in the registry while it is being rewritten
            pending = ScopedState(
                previous.last_generated_kit_names | {kit.name for kit in kits}
            )
            if pending != previous:
                self.state_store.set(scope, source, pending)
            try:
                state = reconcile(self.kits_file(scope), previous, kits)
            except Exception:
                if pending != previous:
                    self.state_store.set(scope, source, previous)
                raise
            self.state_store.set(scope, source, state)
        self._notify(scope, source, kits)

    @staticmethod
    def _pass_key(scope: Scope, source: KitSource) -> str:
        return f"{scope.key}:{source.value}"

    def is_updating(self, scope: Scope) -> bool:
        return any(
            self._sequencer.is_busy(self._pass_key(scope, source))
            for source in KitSource
        )

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Remove every generated kit from all scopes and forget their state."""
        logger.info("Resetting KitManager")
        for scope in self.scopes():
            self.reset_scope(scope)

    def reset_scope(self, scope: Scope) -> None:
        self.update_qt_kits(scope, "", [])
        self.update_qt_paths_kits(scope, [])
        self.state_store.reset(scope)

    def previous_state(self, scope: Scope, source: KitSource) -> ScopedState:
        return self.state_store.get(scope, source)
