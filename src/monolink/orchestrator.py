"""MonoRepoLinker — sequences linking and cleanup for one target package.

Setup runs one linkage pass per selected workspace member and one for the
target itself; each pass reads that directory's direct dependencies and
links their trees into its own node_modules with a fresh LinkPass.
Teardown cleans the same set of node_modules directories.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .cleaner import clean
from .linker import LinkGraphBuilder, LinkPass, fan_out
from .manifest import load_manifest
from .settings import LinkConfig
from .workspaces import select_workspaces

logger = logging.getLogger(__name__)


class MonoRepoLinker:
    """Creates and removes dependency symlinks for ``config.service_path``."""

    def __init__(self, config: LinkConfig, builder: LinkGraphBuilder | None = None) -> None:
        self.config = config
        self.builder = builder or LinkGraphBuilder(config)

    async def selected_workspaces(self) -> list[Path]:
        """Workspace member directories the target depends on directly."""
        target = await load_manifest(self.config.manifest_for(self.config.service_path))
        root = await load_manifest(self.config.root_manifest, root=True)
        return [self.config.workspace_dir_for(m) for m in select_workspaces(target, root)]

    async def process_linkages(self, linkage_path: Path) -> LinkPass:
        """Run one linkage pass rooted at ``linkage_path``."""
        manifest = await load_manifest(self.config.manifest_for(linkage_path))
        link_pass = LinkPass(to_dir=self.config.modules_dir_for(linkage_path))
        await fan_out(
            self.builder.link_package(name, linkage_path, link_pass)
            for name in manifest.dependencies
        )
        logger.info("Linked %d package(s) into %s", len(link_pass.linked), link_pass.to_dir)
        return link_pass

    async def setup(self) -> list[LinkPass]:
        logger.info("Creating dependency symlinks")
        workspaces = await self.selected_workspaces()
        passes = list(
            await asyncio.gather(*(self.process_linkages(ws) for ws in workspaces))
        )
        passes.append(await self.process_linkages(self.config.service_path))
        return passes

    async def teardown(self) -> int:
        logger.info("Cleaning dependency symlinks")
        removed = await clean(self.config.modules_dir)
        workspaces = await self.selected_workspaces()
        results = await asyncio.gather(
            *(clean(self.config.modules_dir_for(ws)) for ws in workspaces)
        )
        removed += sum(results)
        logger.info("Removed %d dependency symlink(s)", removed)
        return removed

    async def refresh(self) -> list[LinkPass]:
        """Tear down stale links, then set up again."""
        await self.teardown()
        return await self.setup()
