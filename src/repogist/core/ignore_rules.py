#!/usr/bin/env python3
"""
Ignore Engine Module

Composes three layers of gitignore-style patterns into one exclusion
predicate over workspace-relative paths:

1. built-in defaults (lock files, package-manager debug logs) plus ``.git``
2. the repository's own ``.gitignore`` when present at the workspace root
3. patterns supplied by the caller

Each layer is compiled into its own ``pathspec.GitIgnoreSpec``. Lines git
itself would reject (a lone ``!``, a trailing backslash) are dropped and
reported as diagnostics instead of failing the request. A path is excluded
if ANY layer matches it, so a negation line can only re-include paths within
the layer it appears in. Adding a pattern to any layer therefore never
un-excludes a path.

A path is also excluded when one of its ancestor directories is, which keeps
the tree listing (which prunes directories) and the content listing (which
visits files) in agreement.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- pathspec: https://python-path-specification.readthedocs.io/en/latest/
- gitignore format: https://git-scm.com/docs/gitignore

Sample input:
    ignore = build_ignore_filter("/tmp/repogist-abc123", ["**/*.md"])
    ignore("docs/guide.md")
    ignore("src", is_dir=True)

Expected output:
    True
    False
"""

from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import pathspec
from loguru import logger

from repogist.core.constants import (
    DEFAULT_IGNORE_PATTERNS,
    GITIGNORE_FILENAME,
    VCS_METADATA_PATTERNS,
)
from repogist.core.results import Diagnostic

INVALID_PATTERN = "InvalidIgnorePattern"


def compile_patterns(
    patterns: Iterable[str],
    source: str = "patterns",
    diagnostics: Optional[List[Diagnostic]] = None,
) -> pathspec.GitIgnoreSpec:
    """
    Compile gitignore-style lines, dropping blanks and lines git would reject.

    Each rejected line is logged and, when ``diagnostics`` is given, appended
    to it as an ``InvalidIgnorePattern`` diagnostic naming ``source``.
    """
    valid = []
    for raw in patterns:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except ValueError as e:
            logger.warning(f"Skipping invalid ignore pattern {line!r} from {source}: {e}")
            if diagnostics is not None:
                diagnostics.append(Diagnostic(INVALID_PATTERN, str(e), source))
            continue
        valid.append(line)
    return pathspec.GitIgnoreSpec.from_lines(valid)


def read_gitignore(workspace_root: Union[str, Path]) -> List[str]:
    """Return the lines of ``<workspace_root>/.gitignore`` or [] when absent or unreadable."""
    path = Path(workspace_root) / GITIGNORE_FILENAME
    if not path.is_file():
        return []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read().splitlines()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return []


class IgnoreFilter:
    """Callable predicate: ``ignore(relative_path, is_dir=False) -> bool`` (True means excluded)."""

    def __init__(
        self,
        layers: Sequence[Tuple[str, pathspec.PathSpec]],
        diagnostics: Optional[Sequence[Diagnostic]] = None,
    ):
        self.layers = list(layers)
        self.diagnostics = list(diagnostics or [])

    @property
    def layer_names(self) -> List[str]:
        return [name for name, _ in self.layers]

    def _matches(self, rel_path: str) -> bool:
        return any(spec.match_file(rel_path) for _, spec in self.layers)

    def matches(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check one path against the layers without considering its ancestors."""
        rel = PurePosixPath(relative_path).as_posix().lstrip("/")
        if is_dir:
            return self._matches(rel + "/") or self._matches(rel)
        return self._matches(rel)

    def __call__(self, relative_path: str, is_dir: bool = False) -> bool:
        parts = PurePosixPath(relative_path).parts
        for depth in range(1, len(parts)):
            if self.matches("/".join(parts[:depth]), is_dir=True):
                return True
        return self.matches(relative_path, is_dir=is_dir)


def build_ignore_filter(
    workspace_root: Union[str, Path],
    caller_patterns: Optional[Sequence[str]] = None,
) -> IgnoreFilter:
    """
    Build the exclusion predicate for one request.

    Args:
        workspace_root: Extracted repository root; its ``.gitignore`` is read if present
        caller_patterns: Extra glob patterns supplied with the request

    Returns:
        IgnoreFilter shared by the tree renderer and the content extractor.
        Lines that could not be compiled are listed in its ``diagnostics``.
    """
    diagnostics: List[Diagnostic] = []
    layers = [("defaults", compile_patterns([*DEFAULT_IGNORE_PATTERNS, *VCS_METADATA_PATTERNS], "defaults"))]

    gitignore_lines = read_gitignore(workspace_root)
    if gitignore_lines:
        layers.append(("gitignore", compile_patterns(gitignore_lines, GITIGNORE_FILENAME, diagnostics)))
        logger.debug(f"Loaded {len(gitignore_lines)} .gitignore lines from {workspace_root}")

    caller = [p for p in (caller_patterns or []) if p and p.strip()]
    if caller:
        layers.append(("caller", compile_patterns(caller, "ignorePatterns", diagnostics)))

    return IgnoreFilter(layers, diagnostics)
