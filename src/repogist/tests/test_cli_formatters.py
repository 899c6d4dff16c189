#!/usr/bin/env python3
"""
Unit tests for cli/formatters.py and config.py
"""

import unittest
from pathlib import Path
from unittest.mock import patch

from rich.console import Console

from repogist.cli import formatters
from repogist.config import CONFIG, validate_config
from repogist.core.pipeline import IngestionResult
from repogist.core.results import Diagnostic, SweepReport
from repogist.core.url_normalizer import RepositoryReference


def recording_console():
    return Console(record=True, width=120, force_terminal=False)


class TestFormatters(unittest.TestCase):
    """Test cases for Rich formatters"""

    def test_print_success(self):
        console = recording_console()
        with patch.object(formatters, "console", console):
            formatters.print_success("Repository ingested successfully")
        self.assertIn("Repository ingested successfully", console.export_text())

    def test_print_ingestion_summary(self):
        console = recording_console()
        result = IngestionResult(
            tree="├── src\n│   └── main.go\n└── go.mod\n",
            content="File: go.mod\nmodule widgets\n\n",
            reference=RepositoryReference("https://github.com/acme/widgets.git", "main"),
            branch="main",
            file_count=2,
        )
        with patch.object(formatters, "console", console):
            formatters.print_ingestion_summary(result)

        text = console.export_text()
        self.assertIn("https://github.com/acme/widgets.git", text)
        self.assertIn("Branch: main", text)
        self.assertIn("Files: 2", text)
        self.assertIn("Tree entries: 3", text)

    def test_print_sweep_report(self):
        console = recording_console()
        report = SweepReport(
            removed=[Path("/tmp/repogist-a")],
            failures=[Diagnostic("CleanupError", "denied", "/tmp/repogist-b")],
        )
        with patch.object(formatters, "console", console):
            formatters.print_sweep_report(report)

        text = console.export_text()
        self.assertIn("/tmp/repogist-a", text)
        self.assertIn("denied", text)

    def test_print_sweep_report_empty(self):
        console = recording_console()
        with patch.object(formatters, "console", console):
            formatters.print_sweep_report(SweepReport())
        self.assertIn("Nothing to sweep", console.export_text())

    def test_print_diagnostics_skips_empty(self):
        console = recording_console()
        with patch.object(formatters, "console", console):
            formatters.print_diagnostics([])
        self.assertEqual(console.export_text(), "")

    def test_print_diagnostics_warns(self):
        console = recording_console()
        diagnostics = [Diagnostic("InvalidIgnorePattern", "Invalid git pattern: '!'", ".gitignore")]
        with patch.object(formatters, "console", console):
            formatters.print_diagnostics(diagnostics)

        text = console.export_text()
        self.assertIn("InvalidIgnorePattern", text)
        self.assertIn(".gitignore", text)
        self.assertIn("Warning:", text)
        self.assertIn("Completed with 1 diagnostics", text)


class TestConfig(unittest.TestCase):
    def test_defaults_are_valid(self):
        self.assertEqual(validate_config(), [])
        self.assertEqual(CONFIG["workspace"]["prefix"], "repogist-")
        self.assertEqual(CONFIG["fetch"]["user_agent"], "repogist-api")

    def test_invalid_values_reported(self):
        with patch.dict(CONFIG["fetch"], {"chunk_size": 0}):
            problems = validate_config()
        self.assertEqual(len(problems), 1)
        self.assertIn("CHUNK_SIZE", problems[0])


if __name__ == "__main__":
    unittest.main()
