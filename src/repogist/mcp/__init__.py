"""Integration Layer for repogist: FastMCP tools and server entry point."""

from repogist.mcp.mcp_tools import create_mcp_server
from repogist.mcp.wrappers import (
    format_mcp_response,
    ingest_repository_wrapper,
    sweep_workspaces_wrapper,
)

__all__ = [
    "create_mcp_server",
    "format_mcp_response",
    "ingest_repository_wrapper",
    "sweep_workspaces_wrapper",
]
