#!/usr/bin/env python3
"""
Unit tests for core/archive_fetcher.py

All HTTP traffic goes through a mocked requests session serving in-memory
zip archives; nothing touches the network.
"""

import io
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests
from tenacity import wait_none

from repogist.core import archive_fetcher
from repogist.core.archive_fetcher import ArchiveFetcher
from repogist.core.constants import GIB
from repogist.core.disk_space import DiskSpaceGuard
from repogist.core.errors import (
    DownloadFailed,
    DownloadTooLarge,
    ExtractionFailed,
    InsufficientDiskSpace,
    UnsupportedHost,
    UpstreamLookupFailed,
)
from repogist.core.url_normalizer import RepositoryReference
from repogist.core.workspace import WorkspaceManager


def make_zip(files, wrapper="widgets-main"):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        if wrapper:
            zf.writestr(f"{wrapper}/", "")
        for name, data in files.items():
            zf.writestr(f"{wrapper}/{name}" if wrapper else name, data)
    return buffer.getvalue()


def make_response(body=b"", status=200, headers=None, json_data=None):
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.reason = "OK" if status < 400 else "Not Found"
    response.headers = headers or {}
    response.iter_content.side_effect = lambda chunk_size: (
        body[i:i + chunk_size] for i in range(0, len(body), chunk_size)
    )
    response.json.return_value = json_data
    return response


class FetcherTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.guard = MagicMock(spec=DiskSpaceGuard)
        self.guard.has_enough_space.return_value = True
        self.manager = WorkspaceManager(self.root, disk_guard=self.guard)
        self.session = MagicMock()
        self.fetcher = ArchiveFetcher(self.manager, session=self.session, chunk_size=4)
        self.workspace = self.manager.allocate()

    def tearDown(self):
        self.tmp.cleanup()

    def owned_archives(self):
        return [p for p in self.root.iterdir() if p.name.startswith("repogist-zip-")]


class TestDefaultBranch(FetcherTestCase):
    """Test cases for provider metadata lookups"""

    def test_github_lookup(self):
        self.session.get.return_value = make_response(json_data={"default_branch": "develop"})

        branch = self.fetcher.resolve_default_branch("https://github.com/acme/widgets.git")

        self.assertEqual(branch, "develop")
        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://api.github.com/repos/acme/widgets")
        self.assertEqual(kwargs["headers"]["Accept"], "application/vnd.github.v3+json")
        self.assertEqual(kwargs["headers"]["User-Agent"], "repogist-api")

    def test_gitlab_lookup_encodes_project_path(self):
        self.session.get.return_value = make_response(json_data={"default_branch": "master"})

        branch = self.fetcher.resolve_default_branch("https://gitlab.com/acme/widgets.git")

        self.assertEqual(branch, "master")
        self.assertEqual(
            self.session.get.call_args[0][0],
            "https://gitlab.com/api/v4/projects/acme%2Fwidgets",
        )

    def test_unsupported_host(self):
        with self.assertRaises(UnsupportedHost):
            self.fetcher.resolve_default_branch("git@bitbucket.org:acme/widgets.git")
        self.session.get.assert_not_called()

    def test_non_success_status(self):
        self.session.get.return_value = make_response(status=404)
        with self.assertRaises(UpstreamLookupFailed):
            self.fetcher.resolve_default_branch("https://github.com/acme/widgets.git")

    def test_missing_branch_field(self):
        self.session.get.return_value = make_response(json_data={})
        with self.assertRaises(UpstreamLookupFailed):
            self.fetcher.resolve_default_branch("https://github.com/acme/widgets.git")

    def test_transient_errors_retried(self):
        """Connection errors are retried before giving up"""
        self.session.get.side_effect = [
            requests.ConnectionError("reset"),
            make_response(json_data={"default_branch": "main"}),
        ]
        fast = archive_fetcher.fetch_repository_metadata.retry_with(wait=wait_none())
        with patch("repogist.core.archive_fetcher.fetch_repository_metadata", fast):
            branch = self.fetcher.resolve_default_branch("https://github.com/acme/widgets.git")

        self.assertEqual(branch, "main")
        self.assertEqual(self.session.get.call_count, 2)

    def test_retries_exhausted(self):
        self.session.get.side_effect = requests.Timeout("slow")
        fast = archive_fetcher.fetch_repository_metadata.retry_with(wait=wait_none())
        with patch("repogist.core.archive_fetcher.fetch_repository_metadata", fast):
            with self.assertRaises(UpstreamLookupFailed):
                self.fetcher.resolve_default_branch("https://github.com/acme/widgets.git")
        self.assertEqual(self.session.get.call_count, 3)


class TestArchiveUrl(FetcherTestCase):
    def test_provider_conventions(self):
        self.assertEqual(
            self.fetcher.archive_url("https://github.com/acme/widgets.git", "main"),
            "https://github.com/acme/widgets/archive/main.zip",
        )
        self.assertEqual(
            self.fetcher.archive_url("https://gitlab.com/acme/widgets.git", "dev"),
            "https://gitlab.com/acme/widgets/-/archive/dev/widgets-dev.zip",
        )

    def test_unsupported_host(self):
        with self.assertRaises(UnsupportedHost):
            self.fetcher.archive_url("https://git.example.com/acme/widgets.git", "main")


class TestDownload(FetcherTestCase):
    """Test cases for the streaming download"""

    def test_streams_to_file(self):
        body = b"0123456789"
        self.session.get.return_value = make_response(body, headers={"content-length": "10"})
        destination = self.manager.new_archive_path()

        written = self.fetcher.download("https://example/a.zip", destination)

        self.assertEqual(written, 10)
        self.assertEqual(destination.read_bytes(), body)
        kwargs = self.session.get.call_args[1]
        self.assertTrue(kwargs["stream"])
        self.assertTrue(kwargs["allow_redirects"])
        self.session.get.return_value.iter_content.assert_called_once_with(chunk_size=4)

    def test_declared_size_over_cap(self):
        """A 2 GiB archive is refused before anything is written"""
        response = make_response(b"x", headers={"content-length": str(2 * GIB)})
        self.session.get.return_value = response
        destination = self.manager.new_archive_path()

        with self.assertRaises(DownloadTooLarge):
            self.fetcher.download("https://example/a.zip", destination)
        self.assertFalse(destination.exists())
        response.iter_content.assert_not_called()

    def test_declared_size_exceeds_free_space(self):
        self.guard.has_enough_space.return_value = False
        self.session.get.return_value = make_response(b"x", headers={"content-length": "1000"})
        destination = self.manager.new_archive_path()

        with self.assertRaises(InsufficientDiskSpace):
            self.fetcher.download("https://example/a.zip", destination)
        self.guard.has_enough_space.assert_called_with(1000)
        self.assertFalse(destination.exists())

    def test_streamed_size_over_cap(self):
        fetcher = ArchiveFetcher(self.manager, session=self.session, max_download_bytes=10, chunk_size=4)
        self.session.get.return_value = make_response(b"x" * 20)
        destination = self.manager.new_archive_path()

        with self.assertRaises(DownloadTooLarge):
            fetcher.download("https://example/a.zip", destination)
        self.assertFalse(destination.exists())

    def test_http_error(self):
        self.session.get.return_value = make_response(status=404)
        with self.assertRaises(DownloadFailed):
            self.fetcher.download("https://example/a.zip", self.manager.new_archive_path())

    def test_network_error(self):
        self.session.get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(DownloadFailed):
            self.fetcher.download("https://example/a.zip", self.manager.new_archive_path())

    def test_stream_interrupted(self):
        response = make_response(b"")
        response.iter_content.side_effect = requests.exceptions.ChunkedEncodingError("cut")
        self.session.get.return_value = response
        destination = self.manager.new_archive_path()

        with self.assertRaises(DownloadFailed):
            self.fetcher.download("https://example/a.zip", destination)
        self.assertFalse(destination.exists())


class TestExtract(FetcherTestCase):
    """Test cases for unpacking into the workspace"""

    def write_archive(self, data):
        path = self.manager.new_archive_path()
        path.write_bytes(data)
        return path

    def test_wrapper_folder_stripped(self):
        archive = self.write_archive(make_zip({"README.md": "# Widgets\n", "src/main.go": "package main\n"}))

        self.fetcher.extract(archive, self.workspace)

        self.assertEqual((self.workspace.path / "README.md").read_text(), "# Widgets\n")
        self.assertEqual((self.workspace.path / "src" / "main.go").read_text(), "package main\n")
        self.assertEqual(sorted(p.name for p in self.workspace.path.iterdir()), ["README.md", "src"])

    def test_unwrapped_archive(self):
        archive = self.write_archive(make_zip({"a.txt": "a", "b.txt": "b"}, wrapper=None))
        self.fetcher.extract(archive, self.workspace)
        self.assertEqual(sorted(p.name for p in self.workspace.path.iterdir()), ["a.txt", "b.txt"])

    def test_corrupt_archive(self):
        archive = self.write_archive(b"this is not a zip")
        with self.assertRaises(ExtractionFailed):
            self.fetcher.extract(archive, self.workspace)
        self.assertEqual(list(self.workspace.path.iterdir()), [])

    def test_member_escaping_workspace(self):
        archive = self.write_archive(make_zip({"../../evil.txt": "x"}, wrapper=None))
        with self.assertRaises(ExtractionFailed):
            self.fetcher.extract(archive, self.workspace)
        self.assertFalse((self.root / "evil.txt").exists())
        self.assertEqual(list(self.workspace.path.iterdir()), [])


class TestFetch(FetcherTestCase):
    """Test cases for the full fetch"""

    def test_fetch_default_branch(self):
        self.session.get.side_effect = [
            make_response(json_data={"default_branch": "main"}),
            make_response(make_zip({"main.go": "package main\n"})),
        ]
        reference = RepositoryReference("https://github.com/acme/widgets.git")

        branch = self.fetcher.fetch(reference, self.workspace)

        self.assertEqual(branch, "main")
        self.assertEqual(
            self.session.get.call_args_list[1][0][0],
            "https://github.com/acme/widgets/archive/main.zip",
        )
        self.assertTrue((self.workspace.path / "main.go").exists())
        self.assertEqual(self.owned_archives(), [])

    def test_fetch_named_branch_skips_lookup(self):
        self.session.get.return_value = make_response(make_zip({"x.txt": "x"}, wrapper="widgets-dev"))
        reference = RepositoryReference("https://gitlab.com/acme/widgets.git", "dev")

        self.assertEqual(self.fetcher.fetch(reference, self.workspace), "dev")
        self.session.get.assert_called_once()
        self.assertTrue((self.workspace.path / "x.txt").exists())

    def test_fetch_failure_wrapped_and_archive_removed(self):
        self.session.get.return_value = make_response(b"not a zip")
        reference = RepositoryReference("https://github.com/acme/widgets.git", "main")

        with self.assertRaises(ExtractionFailed) as ctx:
            self.fetcher.fetch(reference, self.workspace)

        self.assertTrue(str(ctx.exception).startswith("Failed to download and extract repository:"))
        self.assertEqual(self.owned_archives(), [])

    def test_fetch_unsupported_host(self):
        reference = RepositoryReference("git@bitbucket.org:acme/widgets.git")
        with self.assertRaises(UnsupportedHost):
            self.fetcher.fetch(reference, self.workspace)
        self.session.get.assert_not_called()


if __name__ == "__main__":
    unittest.main()
