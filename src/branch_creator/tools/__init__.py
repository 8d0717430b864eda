"""Tool module exports for the branch creator MCP server.

Usage:

    from branch_creator.tools import branch_tools
    branch_tools.preview_branch_names(...)

The server imports these modules and registers their functions as tools.
"""

from . import branch_tools  # noqa: F401

__all__ = ["branch_tools"]
