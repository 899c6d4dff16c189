"""
Core Layer for repogist

Pure pipeline logic with no dependency on the CLI, MCP or HTTP layers.
Every component takes its collaborators (temp root, HTTP session, disk
guard) as constructor arguments so it can be exercised in isolation.
"""

from repogist.core.archive_fetcher import ArchiveFetcher
from repogist.core.content_extractor import (
    ExtractedFile,
    ExtractionReport,
    extract_content,
    is_binary_file,
)
from repogist.core.disk_space import DiskSpaceGuard
from repogist.core.errors import (
    DownloadFailed,
    DownloadTooLarge,
    ExtractionFailed,
    IngestionError,
    InsufficientDiskSpace,
    InvalidReference,
    UnsupportedHost,
    UpstreamLookupFailed,
    WorkspaceUnavailable,
)
from repogist.core.ignore_rules import IgnoreFilter, build_ignore_filter
from repogist.core.pipeline import (
    IngestionResult,
    build_components,
    build_normalized_output,
    ingest_repository,
)
from repogist.core.results import Diagnostic, Outcome, SweepReport
from repogist.core.supervisor import (
    RequestSupervisor,
    RequestTimedOut,
    SupervisorState,
    run_with_deadline,
    supervised,
)
from repogist.core.tree_renderer import render_tree
from repogist.core.url_normalizer import RepositoryReference, is_git_url, normalize_url
from repogist.core.workspace import Workspace, WorkspaceManager

__all__ = [
    "ArchiveFetcher",
    "Diagnostic",
    "DiskSpaceGuard",
    "DownloadFailed",
    "DownloadTooLarge",
    "ExtractedFile",
    "ExtractionFailed",
    "ExtractionReport",
    "IgnoreFilter",
    "IngestionError",
    "IngestionResult",
    "InsufficientDiskSpace",
    "InvalidReference",
    "Outcome",
    "RepositoryReference",
    "RequestSupervisor",
    "RequestTimedOut",
    "SupervisorState",
    "SweepReport",
    "UnsupportedHost",
    "UpstreamLookupFailed",
    "Workspace",
    "WorkspaceManager",
    "WorkspaceUnavailable",
    "build_components",
    "build_ignore_filter",
    "build_normalized_output",
    "extract_content",
    "ingest_repository",
    "is_binary_file",
    "is_git_url",
    "normalize_url",
    "render_tree",
    "run_with_deadline",
    "supervised",
]
