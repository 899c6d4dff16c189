#!/usr/bin/env python3
"""
Content Extractor Module

Walks every file under a workspace, drops ignored and binary files, and
concatenates the text of the rest under ``File: <relative path>`` headers.

A file is binary when its first 512 bytes contain a null byte. Failure to
read those probe bytes counts as "not binary"; failure of the full read skips
the file with a recorded diagnostic and extraction carries on.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- os.walk: https://docs.python.org/3/library/os.html#os.walk

Sample input:
    report = extract_content("/tmp/repogist-abc123", ignore)

Expected output:
    report.files   -> [ExtractedFile(relative_path="main.go", text_content="package main\\n")]
    report.content -> "File: main.go\\npackage main\\n\\n"
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Union

from loguru import logger

from repogist.core.constants import BINARY_PROBE_BYTES
from repogist.core.errors import PARTIAL_FILE_READ, WorkspaceUnavailable
from repogist.core.results import Diagnostic


@dataclass(frozen=True)
class ExtractedFile:
    relative_path: str
    text_content: str

    def render(self) -> str:
        return f"File: {self.relative_path}\n{self.text_content}\n"


@dataclass
class ExtractionReport:
    """Accepted files in output order plus per-file read failures."""

    files: List[ExtractedFile] = field(default_factory=list)
    skipped: List[Diagnostic] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "\n".join(f.render() for f in self.files)


def is_binary_file(path: Union[str, Path], probe_bytes: int = BINARY_PROBE_BYTES) -> bool:
    """Return True if the first ``probe_bytes`` of the file contain a null byte."""
    try:
        with open(path, "rb") as f:
            chunk = f.read(probe_bytes)
    except OSError as e:
        logger.debug(f"Binary probe failed for {path}, treating as text: {e}")
        return False
    return b"\x00" in chunk


def read_text_file(path: Union[str, Path]) -> str:
    # newline="" keeps line endings exactly as stored in the repository
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def iter_candidate_files(root: Path, ignore: Callable[..., bool]) -> Iterator[str]:
    """Yield workspace-relative POSIX paths of non-ignored files, sorted."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(os.path.relpath(dirpath, root)).as_posix()
        base = "" if rel_dir == "." else rel_dir + "/"
        dirnames[:] = [d for d in dirnames if not ignore(base + d, is_dir=True)]
        for name in filenames:
            rel_path = base + name
            if not ignore(rel_path, is_dir=False):
                found.append(rel_path)
    yield from sorted(found)


def extract_content(workspace_root: Union[str, Path], ignore: Callable[..., bool]) -> ExtractionReport:
    """
    Collect the text of every non-ignored, non-binary file under ``workspace_root``.

    Args:
        workspace_root: Extracted repository root
        ignore: Predicate shared with the tree renderer

    Returns:
        ExtractionReport with accepted files and skipped-file diagnostics

    Raises:
        WorkspaceUnavailable: If ``workspace_root`` does not exist
    """
    root = Path(workspace_root)
    if not root.is_dir():
        raise WorkspaceUnavailable(f"Workspace does not exist: {root}")

    report = ExtractionReport()
    binary_count = 0
    for rel_path in iter_candidate_files(root, ignore):
        path = root / rel_path
        if is_binary_file(path):
            binary_count += 1
            continue
        try:
            text = read_text_file(path)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {rel_path}: {e}")
            report.skipped.append(Diagnostic(PARTIAL_FILE_READ, str(e), rel_path))
            continue
        report.files.append(ExtractedFile(rel_path, text))

    logger.info(
        f"Extracted {len(report.files)} files from {root} "
        f"({binary_count} binary, {len(report.skipped)} unreadable)"
    )
    return report


if __name__ == "__main__":
    import sys
    import tempfile

    all_validation_failures = []
    total_tests = 0

    with tempfile.TemporaryDirectory() as tmp:
        Path(tmp, "main.go").write_text("package main\n")
        Path(tmp, "logo.png").write_bytes(b"\x89PNG\x00\x00data")
        result = extract_content(tmp, lambda path, is_dir=False: False)

        total_tests += 1
        if [f.relative_path for f in result.files] != ["main.go"]:
            all_validation_failures.append(f"Expected only main.go, got {result.files}")

        total_tests += 1
        if result.content != "File: main.go\npackage main\n\n":
            all_validation_failures.append(f"Unexpected content: {result.content!r}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
    sys.exit(0)
