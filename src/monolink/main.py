"""Application entry point — CLI dispatcher.

Handles three commands:
  1. `monolink setup [DIR]` — link the package's dependency tree (default).
  2. `monolink teardown [DIR]` — remove the links setup created.
  3. `monolink refresh [DIR]` — teardown followed by setup.

DIR is the package to prepare and defaults to the current directory.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .orchestrator import MonoRepoLinker

USAGE = """\
Usage: monolink [setup|teardown|refresh] [SERVICE_DIR]

  setup     Symlink the package's dependencies into its node_modules (default)
  teardown  Remove those symlinks and any directories left empty
  refresh   Run teardown, then setup
"""

COMMANDS = ("setup", "teardown", "refresh")


def _parse_args(argv: list[str]) -> tuple[str, Path | None]:
    """Split argv into (command, service_dir). Raises ValueError on bad input."""
    args = list(argv)
    command = "setup"
    if args and args[0] in COMMANDS:
        command = args.pop(0)
    elif args and not Path(args[0]).exists():
        if os.sep in args[0] or "/" in args[0] or args[0].startswith("."):
            raise ValueError(f"Directory not found: {args[0]}")
        raise ValueError(f"Unknown command: {args[0]}")
    if len(args) > 1:
        raise ValueError("Too many arguments")
    return command, Path(args[0]) if args else None


async def _run(command: str, linker: "MonoRepoLinker") -> str:
    if command == "teardown":
        removed = await linker.teardown()
        return f"Removed {removed} dependency symlink(s)."
    if command == "refresh":
        passes = await linker.refresh()
    else:
        passes = await linker.setup()
    created = sum(len(p.linked) for p in passes)
    return f"Created {created} dependency symlink(s) across {len(passes)} pass(es)."


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] in ("-h", "--help", "help"):
        print(USAGE, end="")
        return

    try:
        command, service_dir = _parse_args(sys.argv[1:])
    except ValueError as e:
        print(f"Error: {e}\n")
        print(USAGE, end="")
        sys.exit(2)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    from .errors import MonolinkError
    from .orchestrator import MonoRepoLinker
    from .settings import load_settings

    try:
        config = load_settings(service_dir)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}\n")
        print("Check your monolink.toml configuration.")
        sys.exit(1)

    logging.getLogger("monolink").setLevel(config.log_level)
    logger = logging.getLogger(__name__)
    logger.debug("Running '%s' for %s", command, config.service_path)

    try:
        summary = asyncio.run(_run(command, MonoRepoLinker(config)))
    except (MonolinkError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(summary)


if __name__ == "__main__":
    main()
