#!/usr/bin/env python3
"""
Workspace Lifecycle Manager Module

This module allocates uniquely named per-request working directories under a
temporary-storage root and guarantees their removal. It also sweeps entries
left behind by earlier runs: stale ones before each allocation and all of
them when a request is abandoned by the deadline supervisor.

The root directory and both naming prefixes are injected so tests can point
the manager at a throwaway directory instead of the system temp location.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- pathlib: https://docs.python.org/3/library/pathlib.html
- shutil.rmtree: https://docs.python.org/3/library/shutil.html#shutil.rmtree
- secrets: https://docs.python.org/3/library/secrets.html

Sample input:
- root: "/tmp"
- workspace_prefix: "repogist-", archive_prefix: "repogist-zip-"

Expected output:
- Workspace(path=PosixPath('/tmp/repogist-3fa94c0b12de'))
- release() -> Outcome.ok(None)
- sweep_all() -> SweepReport(removed=[...], failures=[])
"""

import os
import secrets
import shutil
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from loguru import logger

from repogist.core.constants import (
    ARCHIVE_PREFIX,
    MIN_FREE_BYTES,
    RANDOM_SUFFIX_BYTES,
    STALE_WORKSPACE_HOURS,
    WORKSPACE_PREFIX,
)
from repogist.core.disk_space import DiskSpaceGuard
from repogist.core.errors import InsufficientDiskSpace, WorkspaceUnavailable
from repogist.core.results import Diagnostic, Outcome, SweepReport

MAX_ALLOCATION_ATTEMPTS = 8


@dataclass(frozen=True)
class Workspace:
    """A per-request directory owned by exactly one in-flight ingestion."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


def _remove_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class WorkspaceManager:
    """
    Creates, releases and sweeps prefixed entries under a temporary-storage root.

    Two prefixes are owned: one for workspace directories and one for
    downloaded archive files. Nothing else under the root is ever touched.
    """

    def __init__(
        self,
        root: Union[str, Path],
        workspace_prefix: str = WORKSPACE_PREFIX,
        archive_prefix: str = ARCHIVE_PREFIX,
        min_free_bytes: int = MIN_FREE_BYTES,
        max_age_hours: float = STALE_WORKSPACE_HOURS,
        disk_guard: Optional[DiskSpaceGuard] = None,
    ):
        self.root = Path(root)
        self.workspace_prefix = workspace_prefix
        self.archive_prefix = archive_prefix
        self.min_free_bytes = min_free_bytes
        self.max_age_hours = max_age_hours
        self.disk_guard = disk_guard or DiskSpaceGuard(self.root)

    @property
    def prefixes(self) -> Tuple[str, ...]:
        return (self.workspace_prefix, self.archive_prefix)

    def _owned_entries(self) -> Iterator[Path]:
        try:
            entries = list(self.root.iterdir())
        except OSError as e:
            logger.warning(f"Could not list temporary storage {self.root}: {e}")
            return
        for entry in entries:
            if entry.name.startswith(self.prefixes):
                yield entry

    def _sweep(self, max_age_seconds: Optional[float]) -> SweepReport:
        report = SweepReport()
        now = time.time()
        for entry in self._owned_entries():
            try:
                if max_age_seconds is not None:
                    age = now - entry.lstat().st_mtime
                    if age <= max_age_seconds:
                        continue
                _remove_entry(entry)
                report.removed.append(entry)
                logger.debug(f"Swept {entry}")
            except FileNotFoundError:
                # Removed concurrently by its owner
                continue
            except OSError as e:
                logger.warning(f"Failed to sweep {entry}: {e}")
                report.failures.append(Diagnostic("CleanupError", str(e), str(entry)))
        return report

    def sweep_stale(self, max_age_hours: Optional[float] = None) -> SweepReport:
        """Remove owned entries older than ``max_age_hours`` (default from constructor)."""
        hours = self.max_age_hours if max_age_hours is None else max_age_hours
        report = self._sweep(hours * 3600)
        if report.removed:
            logger.info(f"Removed {report.removed_count} stale entries from {self.root}")
        return report

    def sweep_all(self) -> SweepReport:
        """Remove every owned entry regardless of age."""
        report = self._sweep(None)
        logger.info(f"Swept {report.removed_count} entries from {self.root} regardless of age")
        return report

    def allocate(self) -> Workspace:
        """
        Create a fresh, uniquely named workspace directory.

        Raises:
            InsufficientDiskSpace: If the root volume lacks the minimum headroom
            WorkspaceUnavailable: If the directory cannot be created
        """
        self.sweep_stale()

        if not self.disk_guard.has_enough_space(self.min_free_bytes):
            raise InsufficientDiskSpace(
                f"Insufficient disk space in {self.root} to allocate a workspace"
            )

        for _ in range(MAX_ALLOCATION_ATTEMPTS):
            path = self.root / f"{self.workspace_prefix}{secrets.token_hex(RANDOM_SUFFIX_BYTES)}"
            try:
                path.mkdir(parents=False, exist_ok=False)
            except FileExistsError:
                continue
            except OSError as e:
                raise WorkspaceUnavailable(f"Could not create workspace {path}: {e}") from e
            logger.info(f"Allocated workspace {path}")
            return Workspace(path)

        raise WorkspaceUnavailable(f"Could not find a free workspace name under {self.root}")

    def new_archive_path(self, suffix: str = ".zip") -> Path:
        """Return an unused path for a downloaded archive under the root."""
        while True:
            path = self.root / f"{self.archive_prefix}{secrets.token_hex(RANDOM_SUFFIX_BYTES)}{suffix}"
            if not os.path.lexists(path):
                return path

    def release(self, workspace: Workspace) -> Outcome[None]:
        """Remove a workspace and everything in it. Never raises."""
        try:
            shutil.rmtree(workspace.path)
        except FileNotFoundError:
            return Outcome.ok(None)
        except OSError as e:
            logger.error(f"Failed to release workspace {workspace.path}: {e}")
            return Outcome.degraded(Diagnostic("CleanupError", str(e), str(workspace.path)))
        logger.debug(f"Released workspace {workspace.path}")
        return Outcome.ok(None)

    @contextmanager
    def workspace(self) -> Iterator[Workspace]:
        """Allocate a workspace and release it on every exit path."""
        ws = self.allocate()
        try:
            yield ws
        finally:
            release = self.release(ws)
            if release.is_degraded:
                logger.warning(f"Workspace cleanup degraded: {release.diagnostic}")
