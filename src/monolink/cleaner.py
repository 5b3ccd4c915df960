"""Symlink teardown — the inverse of linking.

Removes every symlink directly inside a dependency directory, recurses into
scope directories (``@scope``), and drops directories left empty. Real
package directories are never touched.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

SCOPE_MARKER = "@"


def _list_entries(directory: Path) -> list[tuple[Path, os.stat_result]]:
    return [(entry, entry.lstat()) for entry in directory.iterdir()]


def _is_scope_dir(entry: Path, st: os.stat_result) -> bool:
    return stat.S_ISDIR(st.st_mode) and entry.name.startswith(SCOPE_MARKER)


def _is_empty(directory: Path) -> bool:
    return not any(directory.iterdir())


async def clean(directory: Path) -> int:
    """Remove links under ``directory`` and prune it if empty.

    Returns:
        The number of symlinks removed, including those inside scopes.
    """
    if not await asyncio.to_thread(os.path.exists, directory):
        return 0

    entries = await asyncio.to_thread(_list_entries, directory)
    links = [entry for entry, st in entries if stat.S_ISLNK(st.st_mode)]
    scopes = [entry for entry, st in entries if _is_scope_dir(entry, st)]

    results = await asyncio.gather(
        *(asyncio.to_thread(link.unlink) for link in links),
        *(clean(scope) for scope in scopes),
    )
    removed = len(links) + sum(results[len(links) :])

    if await asyncio.to_thread(_is_empty, directory):
        await asyncio.to_thread(directory.rmdir)
        logger.debug("Removed empty directory %s", directory)
    return removed
