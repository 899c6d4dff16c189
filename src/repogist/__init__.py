"""
repogist

Turns a GitHub or GitLab repository URL into a single text document: an
indented tree of the repository followed by the contents of every text file,
ready to paste into a language model prompt.

This package uses the same three-layer split throughout:

1. Core Layer: the ingestion pipeline (``repogist.core``)
2. Presentation Layer: Typer CLI with Rich output (``repogist.cli``)
3. Integration Layer: FastMCP server (``repogist.mcp``) and HTTP API (``repogist.api``)

Usage:
    # Direct API usage (Core Layer)
    from repogist import ingest_repository
    result = ingest_repository("https://github.com/acme/widgets", ["**/*.md"])
    print(result.normalized)

    # CLI usage (Presentation Layer)
    # repogist ingest https://github.com/acme/widgets -i "**/*.md"

    # HTTP / MCP usage (Integration Layer)
    # repogist serve --port 3000
    # python -m repogist.mcp.mcp_server start
"""

__version__ = "0.1.0"

from repogist.core import (
    IngestionError,
    IngestionResult,
    InvalidReference,
    build_normalized_output,
    ingest_repository,
    normalize_url,
)

__all__ = [
    "__version__",
    "IngestionError",
    "IngestionResult",
    "InvalidReference",
    "build_normalized_output",
    "ingest_repository",
    "normalize_url",
]
