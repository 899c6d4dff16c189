#!/usr/bin/env python3
"""
Archive Fetcher Module

Populates a workspace with a repository snapshot downloaded as a zip archive
from GitHub or GitLab:

1. resolve the default branch from the provider's metadata API when the
   reference does not name one
2. build the provider's archive download URL
3. stream the archive to a prefixed file under temporary storage, refusing
   anything larger than the download cap or than the free disk allows
4. unpack into a scratch directory inside the workspace and lift the
   contents of the provider's single ``<repo>-<branch>`` wrapper folder up
   into the workspace root

The archive file and the scratch directory are removed on every exit path.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- requests streaming: https://requests.readthedocs.io/en/latest/user/advanced/#body-content-workflow
- tenacity: https://tenacity.readthedocs.io/en/latest/
- zipfile: https://docs.python.org/3/library/zipfile.html

Sample input:
- reference: RepositoryReference("https://github.com/acme/widgets.git", "main")
- workspace: Workspace(Path("/tmp/repogist-3fa94c0b12de"))

Expected output:
- /tmp/repogist-3fa94c0b12de/README.md, /tmp/repogist-3fa94c0b12de/src/..., etc.
- Raises an IngestionError subclass whose message starts with
  "Failed to download and extract repository:" on failure
"""

import os
import secrets
import shutil
import zipfile
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

import requests
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from repogist.core.constants import (
    DEFAULT_CHUNK_SIZE,
    MAX_DOWNLOAD_BYTES,
    SCRATCH_DIRNAME,
    USER_AGENT,
)
from repogist.core.disk_space import DiskSpaceGuard
from repogist.core.errors import (
    DownloadFailed,
    DownloadTooLarge,
    ExtractionFailed,
    IngestionError,
    InsufficientDiskSpace,
    UnsupportedHost,
    UpstreamLookupFailed,
)
from repogist.core.url_normalizer import RepositoryReference, parse_owner_repo
from repogist.core.workspace import Workspace, WorkspaceManager

FETCH_ERROR_PREFIX = "Failed to download and extract repository"
GITHUB_ACCEPT = "application/vnd.github.v3+json"


@retry(
    wait=wait_exponential(multiplier=1, min=1, max=8),
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)
def fetch_repository_metadata(
    session: requests.Session, url: str, headers: Dict[str, str], timeout: float
) -> requests.Response:
    """GET a provider metadata endpoint, retrying transient connection failures."""
    return session.get(url, headers=headers, timeout=timeout)


class ArchiveFetcher:
    """
    Downloads and unpacks provider archives into workspaces.

    The HTTP session, disk guard and workspace manager are injected so tests
    can run the whole fetch against in-memory zips and throwaway directories.
    """

    def __init__(
        self,
        workspace_manager: WorkspaceManager,
        session: Optional[requests.Session] = None,
        disk_guard: Optional[DiskSpaceGuard] = None,
        max_download_bytes: int = MAX_DOWNLOAD_BYTES,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float = 60.0,
        user_agent: str = USER_AGENT,
        metadata_retries: int = 3,
    ):
        self.workspace_manager = workspace_manager
        self.session = session or requests.Session()
        self.disk_guard = disk_guard or workspace_manager.disk_guard
        self.max_download_bytes = max_download_bytes
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.user_agent = user_agent
        self.metadata_retries = metadata_retries

    # -- provider conventions -------------------------------------------------

    def resolve_default_branch(self, canonical_url: str) -> str:
        """
        Ask the hosting provider for the repository's default branch.

        Raises:
            UnsupportedHost: URL is not a GitHub or GitLab repository
            UpstreamLookupFailed: Non-success status, unreachable API or bad payload
        """
        try:
            host, owner, repo = parse_owner_repo(canonical_url)
        except ValueError as e:
            raise UnsupportedHost(f"Unsupported Git host: {canonical_url}") from e

        headers = {"User-Agent": self.user_agent}
        if host == "github.com":
            api_url = f"https://api.github.com/repos/{owner}/{repo}"
            headers["Accept"] = GITHUB_ACCEPT
        else:
            api_url = f"https://gitlab.com/api/v4/projects/{quote(f'{owner}/{repo}', safe='')}"

        lookup = fetch_repository_metadata.retry_with(stop=stop_after_attempt(self.metadata_retries))
        try:
            response = lookup(self.session, api_url, headers, self.timeout)
        except requests.RequestException as e:
            raise UpstreamLookupFailed(f"Failed to fetch default branch: {e}") from e

        if not response.ok:
            raise UpstreamLookupFailed(
                f"Failed to fetch default branch: {response.status_code} {response.reason}"
            )
        try:
            branch = response.json().get("default_branch")
        except ValueError as e:
            raise UpstreamLookupFailed(f"Invalid metadata response from {api_url}") from e
        if not branch:
            raise UpstreamLookupFailed(f"No default branch reported for {owner}/{repo}")

        logger.info(f"Resolved default branch for {owner}/{repo}: {branch}")
        return branch

    def archive_url(self, canonical_url: str, branch: str) -> str:
        try:
            host, owner, repo = parse_owner_repo(canonical_url)
        except ValueError as e:
            raise UnsupportedHost(f"Unsupported Git host: {canonical_url}") from e
        if host == "github.com":
            return f"https://github.com/{owner}/{repo}/archive/{branch}.zip"
        return f"https://gitlab.com/{owner}/{repo}/-/archive/{branch}/{repo}-{branch}.zip"

    # -- download ---------------------------------------------------------------

    def _check_declared_size(self, response: requests.Response) -> None:
        declared = response.headers.get("content-length")
        if not declared:
            return
        try:
            size = int(declared)
        except ValueError:
            logger.warning(f"Ignoring malformed content-length: {declared!r}")
            return
        if size > self.max_download_bytes:
            raise DownloadTooLarge(
                f"Repository archive is too large: {size} bytes (limit {self.max_download_bytes})"
            )
        if not self.disk_guard.has_enough_space(size):
            raise InsufficientDiskSpace(f"Insufficient disk space for a {size} byte archive")

    def download(self, url: str, destination: Path) -> int:
        """
        Stream ``url`` into ``destination`` chunk by chunk.

        Returns:
            Number of bytes written

        Raises:
            DownloadTooLarge: Declared or streamed size exceeds the cap
            InsufficientDiskSpace: Declared size does not fit on disk
            DownloadFailed: Network error, non-success status or write error
        """
        logger.info(f"Downloading {url}")
        try:
            response = self.session.get(
                url,
                headers={"User-Agent": self.user_agent},
                stream=True,
                allow_redirects=True,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DownloadFailed(f"Failed to download archive: {e}") from e

        with response:
            if not response.ok:
                raise DownloadFailed(
                    f"Failed to download archive: {response.status_code} {response.reason}"
                )
            self._check_declared_size(response)

            written = 0
            try:
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if not chunk:
                            continue
                        written += len(chunk)
                        if written > self.max_download_bytes:
                            raise DownloadTooLarge(
                                f"Repository archive exceeded {self.max_download_bytes} bytes while streaming"
                            )
                        f.write(chunk)
            except DownloadTooLarge:
                self._discard(destination)
                raise
            except (requests.RequestException, OSError) as e:
                self._discard(destination)
                raise DownloadFailed(f"Failed to download archive: {e}") from e

        logger.info(f"Downloaded {written} bytes to {destination}")
        return written

    # -- extraction -------------------------------------------------------------

    @staticmethod
    def _check_member(name: str, scratch: Path) -> None:
        target = os.path.normpath(os.path.join(scratch, name))
        if os.path.isabs(name) or os.path.commonpath([str(scratch), target]) != str(scratch):
            raise ExtractionFailed(f"Archive member escapes extraction directory: {name}")

    def extract(self, archive_path: Path, workspace: Workspace) -> None:
        """
        Unpack ``archive_path`` into ``workspace``, stripping the provider's wrapper folder.

        Raises:
            ExtractionFailed: Corrupt archive, unsafe member path or filesystem error
        """
        scratch = workspace.path / f"{SCRATCH_DIRNAME}-{secrets.token_hex(4)}"
        try:
            with zipfile.ZipFile(archive_path) as zf:
                for member in zf.infolist():
                    self._check_member(member.filename, scratch)
                zf.extractall(scratch)

            children = list(scratch.iterdir())
            if len(children) == 1 and children[0].is_dir():
                source = children[0]
            else:
                source = scratch
            for child in source.iterdir():
                shutil.move(str(child), str(workspace.path / child.name))
            logger.debug(f"Extracted {archive_path} into {workspace.path}")
        except ExtractionFailed:
            raise
        except (zipfile.BadZipFile, OSError) as e:
            raise ExtractionFailed(f"Failed to extract archive: {e}") from e
        finally:
            if scratch.exists():
                try:
                    shutil.rmtree(scratch)
                except OSError as e:
                    logger.warning(f"Could not remove scratch directory {scratch}: {e}")

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove archive {path}: {e}")

    # -- entry point ------------------------------------------------------------

    def fetch(self, reference: RepositoryReference, workspace: Workspace) -> str:
        """
        Populate ``workspace`` with the repository at the referenced or default branch.

        Returns:
            The branch that was fetched

        Raises:
            IngestionError: Any failure, re-raised with the fetch error prefix
        """
        try:
            branch = reference.branch or self.resolve_default_branch(reference.canonical_url)
            url = self.archive_url(reference.canonical_url, branch)
            archive_path = self.workspace_manager.new_archive_path()
            try:
                self.download(url, archive_path)
                self.extract(archive_path, workspace)
            finally:
                self._discard(archive_path)
        except IngestionError as e:
            logger.error(f"{FETCH_ERROR_PREFIX}: {e}")
            raise type(e)(f"{FETCH_ERROR_PREFIX}: {e}") from e
        return branch
