"""
autoskills: a personal library of agent skills served over MCP.

This package provides the skill repository, the public skill installer, the FastMCP
stdio server and the `autoskills` command line tool.
"""

__version__: str = "1.0.0"


def version() -> str:
    return __version__


__all__: list[str] = ["__version__", "version"]
