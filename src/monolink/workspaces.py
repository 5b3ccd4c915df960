"""Workspace selection."""

from __future__ import annotations

from pathlib import PurePosixPath

from .manifest import Manifest


def select_workspaces(target: Manifest, root: Manifest) -> list[str]:
    """Return the root's workspace members that ``target`` depends on.

    A member matches when the last component of its path names one of the
    target's dependencies. Declared order is preserved.
    """
    wanted = set(target.dependencies)
    return [
        member for member in root.workspaces if PurePosixPath(member).name in wanted
    ]
