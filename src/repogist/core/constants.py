#!/usr/bin/env python3
"""
Constants for the Repository Ingestion Pipeline

This module defines constants used throughout the ingestion pipeline:
built-in ignore patterns, resource limits, temporary-storage naming prefixes
and the headers used when composing the normalized output.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- None (module contains only constants)

Expected output:
- None (module contains only constants)
"""

from typing import List

GIB: int = 1024 * 1024 * 1024

# Lock files and package-manager debug logs never worth sending to a model
DEFAULT_IGNORE_PATTERNS: List[str] = [
    "**/*.lock",
    "**/package-lock.json",
    "**/yarn.lock",
    "**/pnpm-lock.yaml",
    "**/Gemfile.lock",
    "**/Cargo.lock",
    "**/composer.lock",
    "**/poetry.lock",
    "**/go.sum",
    "**/bun.lockb",
    "**/npm-debug.log*",
    "**/yarn-debug.log*",
    "**/yarn-error.log*",
]

# Version-control metadata, excluded regardless of any other layer
VCS_METADATA_PATTERNS: List[str] = [".git"]

GITIGNORE_FILENAME: str = ".gitignore"

# Resource limits
MAX_DOWNLOAD_BYTES: int = GIB
MIN_FREE_BYTES: int = GIB
FREE_SPACE_FACTOR: int = 2  # archive and extracted copy coexist on disk
BINARY_PROBE_BYTES: int = 512
DEFAULT_CHUNK_SIZE: int = 64 * 1024
STALE_WORKSPACE_HOURS: float = 24.0
DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 30.0

# Temporary-storage naming
WORKSPACE_PREFIX: str = "repogist-"
ARCHIVE_PREFIX: str = "repogist-zip-"
SCRATCH_DIRNAME: str = "extracted"
RANDOM_SUFFIX_BYTES: int = 6

USER_AGENT: str = "repogist-api"

# Normalized output
TREE_HEADER: str = "Repository Tree Structure:\n"
CONTENT_HEADER: str = "Repository Content:\n"
SECTION_SEPARATOR: str = "\n\n"
