#!/usr/bin/env python3
"""
MCP Tools for repogist

This module provides MCP tool definitions that let an agent ingest a
repository into a single text document and clean up temporary storage.

This module is part of the Integration Layer and can depend on both
Core Layer and Presentation Layer components.

Sample input:
- MCP server configuration

Expected output:
- Configured MCP server with registered tools
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from mcp.server.fastmcp import FastMCP

from repogist.mcp.wrappers import ingest_repository_wrapper, sweep_workspaces_wrapper


def create_mcp_server(
    name: str = "Repogist Tools",
    host: str = "localhost",
    port: int = 3001,
) -> FastMCP:
    """
    Create and configure MCP server with repository ingestion tools

    Args:
        name: Name for the MCP server
        host: Host to listen on
        port: Port to listen on

    Returns:
        FastMCP: Configured MCP server instance
    """
    mcp = FastMCP(name, host=host, port=port)
    logger.info(f"Initialized FastMCP server: {name} on {host}:{port}")

    register_ingest_tool(mcp)
    register_sweep_tool(mcp)

    return mcp


def register_ingest_tool(mcp: FastMCP) -> None:
    """
    Register repository ingestion tool with the MCP server

    Args:
        mcp: MCP server instance
    """
    @mcp.tool()
    def ingest_repository(
        url: str,
        ignore_patterns: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Downloads a GitHub or GitLab repository and returns its directory tree and the
        contents of every text file, ready to be read as context.

        Args:
            url (str): Repository URL, e.g. https://github.com/owner/repo, https://github.com/owner/repo/tree/branch,
                       https://gitlab.com/owner/repo or a .git URL.
            ignore_patterns (list, optional): Extra gitignore-style patterns to exclude, e.g. ["**/*.md", "docs/"].

        Returns:
            dict: MCP-compliant response containing:
                - tree: Indented directory tree.
                - content: "File: <path>" sections with each file's text.
                - normalized: Tree and content combined under headers.
                - branch: Branch that was fetched.
                - diagnostics: Files that could not be read.
                On error:
                - error: Error message as a string.
                - success: Boolean indicating success/failure.
        """
        logger.info(f"Ingestion requested for {url} with ignore_patterns={ignore_patterns}")
        return ingest_repository_wrapper(url, ignore_patterns)


def register_sweep_tool(mcp: FastMCP) -> None:
    """
    Register temporary storage cleanup tool with the MCP server

    Args:
        mcp: MCP server instance
    """
    @mcp.tool()
    def sweep_workspaces(all_entries: bool = False) -> Dict[str, Any]:
        """
        Removes temporary repository workspaces and archives left by earlier ingestions.

        Args:
            all_entries (bool, optional): Remove every entry regardless of age. Defaults to False,
                                          which removes only entries older than the configured age.

        Returns:
            dict: MCP-compliant response with removed paths and any failures.
        """
        logger.info(f"Workspace sweep requested (all_entries={all_entries})")
        return sweep_workspaces_wrapper(all_entries)
