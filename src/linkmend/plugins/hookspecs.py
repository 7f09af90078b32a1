"""Pluggy hook specifications for linkmend rename events.

Hooks run synchronously after the corresponding service step succeeds.
Paths are passed as strings so plugins need no linkmend types.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("linkmend")


class LinkmendHookSpec:
    """Hook specifications for the linkmend plugin system."""

    @hookspec
    def post_plan(
        self,
        old_path: str,
        new_path: str,
        documents_changed: list[str],
        total_edits: int,
    ) -> None:
        """Called after a rename plan is computed (including dry runs)."""

    @hookspec
    def post_rename(
        self,
        old_path: str,
        new_path: str,
        documents_changed: list[str],
        total_edits: int,
    ) -> None:
        """Called after edits are applied and the document has moved."""
