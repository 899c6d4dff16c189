#!/usr/bin/env python3
"""
Ingestion Pipeline Module

Runs one repository ingestion end to end:

    normalize URL -> allocate workspace -> fetch archive
        -> build ignore filter -> render tree + extract content -> release

The URL is validated before any resource is touched. The workspace is
released on every exit path, and a release failure never replaces the
primary result or error.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    result = ingest_repository(
        "https://github.com/acme/widgets/tree/main",
        ["**/*.md"],
        manager=WorkspaceManager("/tmp"),
    )

Expected output:
    result.tree       -> "├── src\\n│   └── main.go\\n└── go.mod\\n"
    result.content    -> "File: go.mod\\nmodule acme/widgets\\n\\nFile: src/main.go\\n..."
    result.normalized -> "Repository Tree Structure:\\n...\\n\\nRepository Content:\\n..."
"""

import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from repogist.core.archive_fetcher import ArchiveFetcher
from repogist.core.constants import CONTENT_HEADER, SECTION_SEPARATOR, TREE_HEADER
from repogist.core.content_extractor import extract_content
from repogist.core.disk_space import DiskSpaceGuard
from repogist.core.ignore_rules import build_ignore_filter
from repogist.core.results import Diagnostic
from repogist.core.tree_renderer import render_tree
from repogist.core.url_normalizer import RepositoryReference, normalize_url
from repogist.core.workspace import WorkspaceManager


def build_normalized_output(tree: str, content: str) -> str:
    """Compose the single-document view handed to language models."""
    return f"{TREE_HEADER}{tree}{SECTION_SEPARATOR}{CONTENT_HEADER}{content}"


@dataclass
class IngestionResult:
    tree: str
    content: str
    reference: Optional[RepositoryReference] = None
    branch: Optional[str] = None
    file_count: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def normalized(self) -> str:
        return build_normalized_output(self.tree, self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {"tree": self.tree, "content": self.content, "normalized": self.normalized}


def ingest_repository(
    url: str,
    ignore_patterns: Optional[Sequence[str]] = None,
    manager: Optional[WorkspaceManager] = None,
    fetcher: Optional[ArchiveFetcher] = None,
) -> IngestionResult:
    """
    Fetch a repository and return its tree and concatenated text content.

    Args:
        url: Repository URL in any recognized form
        ignore_patterns: Extra gitignore-style patterns to exclude
        manager: Workspace manager (defaults to the system temp directory)
        fetcher: Archive fetcher (defaults to one bound to ``manager``)

    Returns:
        IngestionResult with tree, content and any non-fatal diagnostics

    Raises:
        InvalidReference: Before any allocation, if the URL is not a Git reference
        IngestionError: Any other pipeline failure
    """
    reference = normalize_url(url)

    manager = manager or WorkspaceManager(tempfile.gettempdir())
    fetcher = fetcher or ArchiveFetcher(manager)

    with manager.workspace() as workspace:
        branch = fetcher.fetch(reference, workspace)
        ignore = build_ignore_filter(workspace.path, ignore_patterns)

        tree_outcome = render_tree(workspace.path, ignore)
        report = extract_content(workspace.path, ignore)

        diagnostics = [*ignore.diagnostics, *report.skipped]
        if tree_outcome.is_degraded:
            diagnostics.insert(0, tree_outcome.diagnostic)

        result = IngestionResult(
            tree=tree_outcome.value_or(""),
            content=report.content,
            reference=reference,
            branch=branch,
            file_count=len(report.files),
            diagnostics=diagnostics,
        )
        logger.info(
            f"Ingested {reference.canonical_url}@{branch}: "
            f"{len(report.files)} files, {len(diagnostics)} diagnostics"
        )
        return result


def build_components(settings: Dict[str, Dict[str, Any]]) -> Tuple[WorkspaceManager, ArchiveFetcher]:
    """
    Build a workspace manager and fetcher from a CONFIG-shaped settings dict.

    Transports call this with ``repogist.config.CONFIG``; tests pass their own
    dict pointing at a temporary root.
    """
    ws = settings["workspace"]
    fetch = settings["fetch"]
    manager = WorkspaceManager(
        root=ws["root"],
        workspace_prefix=ws["prefix"],
        archive_prefix=ws["archive_prefix"],
        min_free_bytes=ws["min_free_bytes"],
        max_age_hours=ws["max_age_hours"],
        disk_guard=DiskSpaceGuard(ws["root"]),
    )
    fetcher = ArchiveFetcher(
        manager,
        max_download_bytes=fetch["max_download_bytes"],
        chunk_size=fetch["chunk_size"],
        timeout=fetch["timeout_seconds"],
        user_agent=fetch["user_agent"],
        metadata_retries=fetch["metadata_retries"],
    )
    return manager, fetcher
