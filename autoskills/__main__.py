"""
Package entry point for launching the autoskills MCP server.

This allows running:
  - python -m autoskills            -> starts the stdio MCP server
  - python -m autoskills.server     -> also available directly via the server module

The command line tool for managing skills by hand is `autoskills` (autoskills.cli).
"""

from autoskills.server import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
