#!/usr/bin/env python3
"""
Unit tests for mcp/wrappers.py and mcp/mcp_tools.py
"""

import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from mcp.server.fastmcp import FastMCP

from repogist.core.errors import DownloadFailed
from repogist.core.pipeline import IngestionResult
from repogist.core.results import Diagnostic, SweepReport
from repogist.core.supervisor import RequestTimedOut
from repogist.mcp.mcp_tools import create_mcp_server
from repogist.mcp.wrappers import (
    format_mcp_response,
    ingest_repository_wrapper,
    sweep_workspaces_wrapper,
)


class TestIngestWrapper(unittest.TestCase):
    """Test cases for the ingest_repository MCP wrapper"""

    def setUp(self):
        self.manager = MagicMock()
        self.manager.sweep_all.return_value = SweepReport()
        self.fetcher = MagicMock()

    def call(self, url, patterns=None):
        return ingest_repository_wrapper(url, patterns, 5, manager=self.manager, fetcher=self.fetcher)

    def test_format_mcp_response(self):
        """Test MCP response formatting"""
        success_response = format_mcp_response(True, data={"tree": "t"})
        self.assertTrue(success_response["success"])
        self.assertEqual(success_response["tree"], "t")

        error_response = format_mcp_response(False, error="Test error")
        self.assertFalse(error_response["success"])
        self.assertEqual(error_response["error"], "Test error")

    def test_missing_url(self):
        self.assertEqual(self.call(""), {"success": False, "error": "URL is required"})

    def test_invalid_url(self):
        self.assertEqual(
            self.call("ftp://example.com/repo"),
            {"success": False, "error": "Invalid Git repository URL"},
        )

    @patch("repogist.mcp.wrappers.ingest_repository")
    def test_success(self, mock_ingest):
        mock_ingest.return_value = IngestionResult(
            tree="└── a.txt\n",
            content="File: a.txt\nx\n\n",
            branch="main",
            file_count=1,
            diagnostics=[Diagnostic("PartialFileReadError", "denied", "b.txt")],
        )

        result = self.call("https://github.com/acme/widgets", ["**/*.md", " "])

        self.assertTrue(result["success"])
        self.assertEqual(result["tree"], "└── a.txt\n")
        self.assertEqual(result["branch"], "main")
        self.assertEqual(result["file_count"], 1)
        self.assertEqual(result["diagnostics"], ["PartialFileReadError: b.txt: denied"])
        self.assertTrue(result["normalized"].startswith("Repository Tree Structure:\n"))
        mock_ingest.assert_called_once_with(
            "https://github.com/acme/widgets", ["**/*.md"], self.manager, self.fetcher
        )

    @patch("repogist.mcp.wrappers.ingest_repository")
    def test_pipeline_error(self, mock_ingest):
        mock_ingest.side_effect = DownloadFailed("boom")
        result = self.call("https://github.com/acme/widgets")
        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "Failed to process repository: boom")

    @patch("repogist.mcp.wrappers.run_with_deadline")
    def test_timeout(self, mock_run):
        mock_run.side_effect = RequestTimedOut("Request timed out after 5 seconds")
        result = self.call("https://github.com/acme/widgets")
        self.assertFalse(result["success"])
        self.assertIn("timed out", result["error"])


class TestSweepWrapper(unittest.TestCase):
    def test_sweep_stale(self):
        manager = MagicMock()
        manager.sweep_stale.return_value = SweepReport(removed=[Path("/tmp/repogist-a")])

        result = sweep_workspaces_wrapper(manager=manager)

        self.assertTrue(result["success"])
        self.assertEqual(result["removed"], ["/tmp/repogist-a"])
        manager.sweep_all.assert_not_called()

    def test_sweep_all_with_failures(self):
        manager = MagicMock()
        manager.sweep_all.return_value = SweepReport(
            failures=[Diagnostic("CleanupError", "denied", "/tmp/repogist-b")]
        )

        result = sweep_workspaces_wrapper(all_entries=True, manager=manager)

        self.assertFalse(result["success"])
        self.assertEqual(result["failures"], ["CleanupError: /tmp/repogist-b: denied"])


class TestMcpServer(unittest.TestCase):
    def test_create_mcp_server(self):
        server = create_mcp_server(name="Test Tools", host="127.0.0.1", port=3999)
        self.assertIsInstance(server, FastMCP)


if __name__ == "__main__":
    unittest.main()
