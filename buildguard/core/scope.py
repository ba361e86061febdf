"""Restricts working-tree changes to the directory the build was invoked from."""

import logging
import posixpath
from typing import List

from buildguard.core.git import ChangeRecord

logger = logging.getLogger(__name__)

SCOPE_MODES = ("prefix", "path")


def is_in_scope(absolute_path: str, cwd: str, mode: str = "prefix") -> bool:
    """Checks whether an absolute path falls under the working directory.

    Args:
        absolute_path (str): The normalised absolute path of a changed file.
        cwd (str): The directory the guard was invoked from.
        mode (str): "prefix" performs a plain string prefix test, so a sibling
            such as `/repo/foobar` counts as inside `/repo/foo`. "path" only
            accepts `cwd` itself or paths below it on a segment boundary.

    Returns:
        bool: True if the path is in scope.
    """
    if mode == "prefix":
        return absolute_path.startswith(cwd)
    if mode == "path":
        base = cwd.rstrip("/")
        return absolute_path == (base or "/") or absolute_path.startswith(base + "/")
    raise ValueError(f"Unknown scope mode: {mode!r}. Expected one of {SCOPE_MODES}")


def filter_changes_in_scope(
    repo_root: str, cwd: str, changes: List[ChangeRecord], mode: str = "prefix"
) -> List[ChangeRecord]:
    """Returns the changes located under `cwd`, preserving their order."""
    in_scope = [
        change
        for change in changes
        if is_in_scope(
            posixpath.normpath(posixpath.join(repo_root, change.path)), cwd, mode
        )
    ]
    logger.info(
        "Scoped working tree changes",
        extra={
            "cwd": cwd,
            "scope_mode": mode,
            "total_changes": len(changes),
            "in_scope_changes": len(in_scope),
        },
    )
    return in_scope
