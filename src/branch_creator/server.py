"""MCP stdio server entrypoint for the branch creator.

The server runs over standard input/output using the Model Context Protocol.
It registers the branch tools that clients invoke to list repositories,
preview branch names and create work item branches.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

from mcp.server.fastmcp import FastMCP

from .state import CONFIG
from .tools import branch_tools


def build_tools_dispatch() -> dict[str, Callable[..., dict[str, Any]]]:
    """Return a mapping from tool names to callables.

    Each callable accepts keyword arguments and returns a JSON-serializable
    dictionary.
    """
    return {
        "list_repositories": branch_tools.list_repositories,
        "preview_branch_names": branch_tools.preview_branch_names,
        "create_branches": branch_tools.create_branches,
    }


def main() -> None:
    """Entrypoint for the branch creator MCP server."""
    # Configure logging to stderr (stdout is used for MCP protocol)
    logging.basicConfig(
        level=getattr(logging, CONFIG.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)
    logger.info("Starting branch creator MCP server")

    mcp = FastMCP("branch-creator-mcp")

    dispatch = build_tools_dispatch()
    for name, func in dispatch.items():
        mcp.add_tool(func, name=name)

    logger.info("Registered %d tools", len(dispatch))

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
