"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) and single-file local plugins.
INVARIANT: Plugin failures are warnings, never errors.
"""

from linkmend.plugins.manager import PluginManager, hookimpl

__all__ = ["PluginManager", "hookimpl"]
