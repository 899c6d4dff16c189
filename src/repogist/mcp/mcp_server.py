#!/usr/bin/env python3
"""
MCP Server Entry Point for repogist

This module provides the main entry point for running the repogist MCP
server, plus small info and health commands.

This module is part of the Integration Layer and can depend on both
Core Layer and Presentation Layer components.

Sample input:
    python -m repogist.mcp.mcp_server start --port 3001
    python -m repogist.mcp.mcp_server health

Expected output:
- Running MCP server exposing ingest_repository and sweep_workspaces
- JSON health report on stdout
"""

import argparse
import json
import platform
import sys
from typing import Any, Dict

from loguru import logger

from repogist import __version__
from repogist.config import CONFIG
from repogist.core.disk_space import DiskSpaceGuard
from repogist.log_utils import configure_logging
from repogist.mcp.mcp_tools import create_mcp_server


def get_server_info() -> Dict[str, Any]:
    """
    Get server information.

    Returns:
        Dict[str, Any]: Server information
    """
    return {
        "name": "Repogist MCP Server",
        "version": __version__,
        "description": "Turns a Git repository URL into a directory tree and concatenated file contents",
        "tools": ["ingest_repository", "sweep_workspaces"],
    }


def health_check() -> Dict[str, Any]:
    """
    Perform a health check on the temporary storage volume.

    Returns:
        Dict[str, Any]: Health check results
    """
    root = CONFIG["workspace"]["root"]
    guard = DiskSpaceGuard(root)
    enough = guard.has_enough_space(CONFIG["workspace"]["min_free_bytes"])
    return {
        "status": "healthy" if enough else "unhealthy",
        "platform": platform.system(),
        "python_version": platform.python_version(),
        "temp_root": str(root),
        "free_bytes": guard.available_bytes(),
    }


def main() -> int:
    """
    Main entry point for the MCP server.

    Returns:
        int: Exit code
    """
    parser = argparse.ArgumentParser(description="Repogist MCP Server")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    start_parser = subparsers.add_parser("start", help="Start the MCP server")
    start_parser.add_argument("--host", type=str, default="localhost", help="Host to listen on")
    start_parser.add_argument("--port", type=int, default=3001, help="Port to listen on")
    start_parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    subparsers.add_parser("health", help="Check server health")
    subparsers.add_parser("info", help="Display server information")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "start":
        log_level = "DEBUG" if args.debug else CONFIG["logging"]["level"]
        configure_logging(log_level, log_file="logs/mcp_server.log")

        logger.info("Starting MCP server for repogist")
        logger.info(f"Host: {args.host}, Port: {args.port}, Debug: {args.debug}")

        try:
            mcp = create_mcp_server(host=args.host, port=args.port)
            mcp.run()
        except KeyboardInterrupt:
            logger.info("Server stopped by user")
            return 0

    elif args.command == "health":
        result = health_check()
        print(json.dumps(result, indent=2))
        return 0 if result["status"] == "healthy" else 1

    elif args.command == "info":
        print(json.dumps(get_server_info(), indent=2))
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
