"""monolink - flatten a workspace member's dependency tree into symlinks.

Reads package.json manifests across a monorepo, resolves every runtime
dependency of one member the way Node would, and links each hoisted package
into that member's node_modules so it can be packaged in isolation. The
inverse teardown removes those links again.

Package entry point. Exports the version string only; the CLI lives in
main.py.
"""

__version__ = "0.1.0"
