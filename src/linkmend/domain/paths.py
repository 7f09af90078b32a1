"""Path resolver — classify link paths and reduce them to canonical form.

Pure string algebra over POSIX-style paths. No filesystem access: the
workspace root comes from the :class:`WorkspaceContext` passed in, and
external forms (``/abs``, ``~/x``, ``https://…``) are never resolved here.

Canonical form is ``$/<root-relative path>`` with ``.``/``..`` collapsed::

    >>> normalize("$/a/b/../c")
    '$/a/c'
"""

from __future__ import annotations

import re
from pathlib import PurePath

from linkmend.domain.errors import PathEscapesWorkspaceError
from linkmend.domain.types import DOCUMENT_SUFFIX, LinkKind, WorkspaceContext

WORKSPACE_SIGIL = "$"

# scheme://… (https://, file://, …)
_URI_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_NON_WORD = re.compile(r"^\W")


def classify(raw_path: str) -> LinkKind:
    """Classify a raw link path by its leading characters.

    ``$…`` is workspace-relative. A URI scheme or any other leading
    non-word character (``/``, ``~``) is external, except ``.`` which
    starts ``./`` and ``../`` document-relative paths.
    """
    if raw_path.startswith(WORKSPACE_SIGIL):
        return LinkKind.WORKSPACE_RELATIVE
    if _URI_SCHEME.match(raw_path):
        return LinkKind.EXTERNAL
    if raw_path.startswith("."):
        return LinkKind.DOCUMENT_RELATIVE
    if _NON_WORD.match(raw_path):
        return LinkKind.EXTERNAL
    return LinkKind.DOCUMENT_RELATIVE


def _can_collapse(previous: str, *, is_head: bool) -> bool:
    """Whether *previous* may be removed by a following ``..``."""
    if previous == "..":
        return False
    # The sigil component anchors the path; ``$/..`` escapes, it does not vanish.
    return not (is_head and previous.startswith(WORKSPACE_SIGIL))


def normalize(path: str) -> str:
    """Collapse ``segment/..`` pairs, ``.`` and empty components.

    A left fold over the components with a stack: one pass reaches the
    fixpoint, so ``normalize(normalize(p)) == normalize(p)``. Leading
    ``..`` components that have nothing to cancel are kept.

    Examples:
        >>> normalize("a/b/../c")
        'a/c'
        >>> normalize("a/../../b")
        '../b'
        >>> normalize("$/x/./y//z/..")
        '$/x/y'
    """
    if not path:
        return path
    absolute = path.startswith("/")
    stack: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == ".." and stack:
            is_head = len(stack) == 1 and not absolute
            if _can_collapse(stack[-1], is_head=is_head):
                stack.pop()
                continue
        stack.append(part)
    joined = "/".join(stack)
    if absolute:
        return "/" + joined
    return joined or "."


def strip_suffix(path: str, suffix: str = DOCUMENT_SUFFIX) -> str:
    """Drop a trailing document suffix; link targets omit it."""
    if suffix and path.endswith(suffix) and len(path) > len(suffix):
        return path[: -len(suffix)]
    return path


def host_dir(path: str | PurePath) -> str:
    """Directory containing the document at *path*, as a POSIX string."""
    posix = path.as_posix() if isinstance(path, PurePath) else path
    head, _sep, _tail = posix.rstrip("/").rpartition("/")
    return head or "/"


def _strip_root(workspace: WorkspaceContext, absolute_path: str) -> str:
    """Return *absolute_path* relative to the workspace root, or raise."""
    root = workspace.root_str
    if absolute_path == root:
        return ""
    prefix = root if root.endswith("/") else root + "/"
    if absolute_path.startswith(prefix):
        return absolute_path[len(prefix) :]
    raise PathEscapesWorkspaceError(absolute_path, root)


def to_workspace_relative(
    workspace: WorkspaceContext,
    host_directory: str | PurePath,
    raw_path: str,
) -> str:
    """Pin a document-relative *raw_path* to canonical workspace-relative form.

    Joins *raw_path* onto *host_directory*, collapses it, strips the
    workspace root and prepends the sigil.

    Raises:
        PathEscapesWorkspaceError: The joined path leaves the workspace.
    """
    base = host_directory.as_posix() if isinstance(host_directory, PurePath) else host_directory
    joined = normalize(f"{base}/{raw_path}")
    relative = _strip_root(workspace, joined)
    if not relative:
        return WORKSPACE_SIGIL
    return normalize(f"{WORKSPACE_SIGIL}/{relative}")


def document_identity(workspace: WorkspaceContext, path: str | PurePath) -> str:
    """Canonical identity of a document: ``$/dir/name`` without suffix.

    Raises:
        PathEscapesWorkspaceError: *path* is not inside the workspace.
    """
    posix = path.as_posix() if isinstance(path, PurePath) else path
    relative = _strip_root(workspace, normalize(posix))
    return strip_suffix(f"{WORKSPACE_SIGIL}/{relative}")


def _rebase_named_workspace(workspace: WorkspaceContext, raw_path: str) -> str:
    """Rewrite ``$<own name>/…`` to ``$/…``; other workspaces are left alone."""
    named = f"{WORKSPACE_SIGIL}{workspace.name}"
    if raw_path == named or raw_path.startswith(named + "/"):
        return WORKSPACE_SIGIL + raw_path[len(named) :]
    return raw_path


def canonical_target(
    workspace: WorkspaceContext,
    host_directory: str | PurePath,
    raw_path: str,
) -> str | None:
    """Canonical, suffix-less form of a link target, for identity comparison.

    Returns None for external links; they never point inside the workspace.

    Raises:
        PathEscapesWorkspaceError: The target resolves outside the workspace.
    """
    kind = classify(raw_path)
    if kind is LinkKind.EXTERNAL:
        return None
    if kind is LinkKind.WORKSPACE_RELATIVE:
        canonical = normalize(_rebase_named_workspace(workspace, raw_path))
        parts = canonical.split("/")
        if len(parts) > 1 and parts[1] == "..":
            raise PathEscapesWorkspaceError(raw_path, workspace.root_str)
    else:
        canonical = to_workspace_relative(workspace, host_directory, raw_path)
    return strip_suffix(canonical)
