#!/usr/bin/env python3
"""
MCP Wrappers for repogist

This module provides MCP-specific wrapper functions around the ingestion
pipeline, handling parameter validation and turning pipeline errors into
MCP-compatible response dictionaries instead of exceptions.

This module is part of the Integration Layer and can depend on both
Core Layer and Presentation Layer components.

Sample input:
    ingest_repository_wrapper("https://github.com/acme/widgets", ["**/*.md"])

Expected output:
    {"success": True, "tree": "...", "content": "...", "normalized": "...",
     "branch": "main", "diagnostics": []}
    or
    {"success": False, "error": "Invalid Git repository URL"}
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from repogist.config import CONFIG
from repogist.core.archive_fetcher import ArchiveFetcher
from repogist.core.errors import IngestionError
from repogist.core.pipeline import build_components, ingest_repository
from repogist.core.supervisor import RequestTimedOut, run_with_deadline
from repogist.core.url_normalizer import is_git_url
from repogist.core.workspace import WorkspaceManager


def format_mcp_response(
    success: bool,
    data: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None
) -> Dict[str, Any]:
    """
    Format a response in MCP-compatible format.

    Args:
        success: Whether the operation was successful
        data: Response data (for successful operations)
        error: Error message (for failed operations)

    Returns:
        Dict[str, Any]: MCP-compatible response
    """
    response = {"success": success}

    if success and data is not None:
        response.update(data)
    elif not success and error is not None:
        response["error"] = error

    return response


def ingest_repository_wrapper(
    url: str,
    ignore_patterns: Optional[List[str]] = None,
    timeout_seconds: Optional[float] = None,
    manager: Optional[WorkspaceManager] = None,
    fetcher: Optional[ArchiveFetcher] = None,
) -> Dict[str, Any]:
    """
    MCP wrapper for repository ingestion.

    Args:
        url: Repository URL
        ignore_patterns: Extra gitignore-style patterns to exclude
        timeout_seconds: Deadline for the whole ingestion (defaults to CONFIG)
        manager: Workspace manager override (defaults to one built from CONFIG)
        fetcher: Archive fetcher override

    Returns:
        Dict[str, Any]: MCP-compatible response
    """
    url = (url or "").strip()
    if not url:
        return format_mcp_response(False, error="URL is required")
    if not is_git_url(url):
        return format_mcp_response(False, error="Invalid Git repository URL")

    if manager is None or fetcher is None:
        default_manager, default_fetcher = build_components(CONFIG)
        manager = manager or default_manager
        fetcher = fetcher or default_fetcher
    timeout = timeout_seconds or CONFIG["server"]["request_timeout_seconds"]
    patterns = [p for p in (ignore_patterns or []) if p and p.strip()]

    try:
        result = run_with_deadline(
            lambda: ingest_repository(url, patterns, manager, fetcher),
            manager,
            timeout,
        )
    except RequestTimedOut as e:
        return format_mcp_response(False, error=f"Request timed out: {e}")
    except IngestionError as e:
        logger.error(f"MCP ingestion of {url} failed: {e}")
        return format_mcp_response(False, error=f"Failed to process repository: {e}")

    data = result.to_dict()
    data["branch"] = result.branch
    data["file_count"] = result.file_count
    data["diagnostics"] = [str(d) for d in result.diagnostics]
    return format_mcp_response(True, data=data)


def sweep_workspaces_wrapper(
    all_entries: bool = False,
    manager: Optional[WorkspaceManager] = None,
) -> Dict[str, Any]:
    """
    MCP wrapper for removing leftover temporary workspaces.

    Args:
        all_entries: Remove every entry regardless of age
        manager: Workspace manager override

    Returns:
        Dict[str, Any]: MCP-compatible response listing removed paths and failures
    """
    if manager is None:
        manager, _ = build_components(CONFIG)
    report = manager.sweep_all() if all_entries else manager.sweep_stale()
    data = {
        "removed": [str(path) for path in report.removed],
        "failures": [str(failure) for failure in report.failures],
    }
    if report.failures:
        response = format_mcp_response(False, error=f"{len(report.failures)} entries could not be removed")
        response.update(data)
        return response
    return format_mcp_response(True, data=data)
