"""PluginManager: finds plugins and calls their hooks.

Plugins come from the ``linkmend.plugins`` entry-point group and from
single ``*.py`` files in the workspace's local plugin directory
(``.linkmend/plugins/`` by default). A plugin that fails to import or
instantiate is logged and skipped.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import Any

import pluggy

from linkmend.plugins.hookspecs import LinkmendHookSpec

PROJECT_NAME = "linkmend"
ENTRY_POINT_GROUP = "linkmend.plugins"
LOCAL_MODULE_PREFIX = "linkmend_local_plugin_"

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

logger = logging.getLogger(__name__)


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with linkmend's hookspecs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(LinkmendHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then any local plugin files; return all names."""
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        if count:
            logger.debug("Loaded %d entry-point plugin(s)", count)
        self._instantiate_registered_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> list[Any]:
        """Call *hook_name* with *payload* as keyword arguments.

        Returns the non-None results; exceptions from plugins propagate.
        """
        caller: pluggy.HookCaller = getattr(self._pm.hook, hook_name)
        return caller(**payload)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_local(self, path: Path) -> None:
        module = _import_file(LOCAL_MODULE_PREFIX + path.stem, path)
        if module is None:
            return
        for cls in self._hook_classes(module):
            try:
                instance = cls()
            except Exception:
                logger.warning(
                    "Could not instantiate %s from %s", cls.__name__, path, exc_info=True
                )
                continue
            name = f"{module.__name__}.{cls.__name__}"
            try:
                self.register_plugin(instance, name=name)
            except ValueError:
                logger.warning("Plugin %s from %s is already registered", name, path)

    def _instantiate_registered_classes(self) -> None:
        # an entry point may name a class rather than an instance
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hooks(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                self._pm.register(plugin(), name=name)
            except Exception:
                logger.warning("Could not instantiate entry-point plugin %s", name, exc_info=True)

    def _hook_classes(self, module: ModuleType) -> Iterator[type]:
        for _name, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ == module.__name__ and self._has_hooks(cls):
                yield cls

    def _has_hooks(self, cls: type) -> bool:
        return any(
            self._pm.parse_hookimpl_opts(cls, name) is not None
            for name in dir(cls)
            if not name.startswith("_")
        )


def _import_file(module_name: str, path: Path) -> ModuleType | None:
    """Import *path* as *module_name*, or log why it could not be."""
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Not an importable plugin file: %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to import local plugin %s", path, exc_info=True)
        return None
    return module
