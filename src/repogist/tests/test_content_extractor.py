#!/usr/bin/env python3
"""
Unit tests for core/content_extractor.py
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from repogist.core import content_extractor
from repogist.core.content_extractor import extract_content, is_binary_file
from repogist.core.errors import PARTIAL_FILE_READ, WorkspaceUnavailable
from repogist.core.ignore_rules import build_ignore_filter


def keep_everything(path, is_dir=False):
    return False


class TestIsBinaryFile(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_null_byte_in_leading_bytes(self):
        path = self.root / "logo.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
        self.assertTrue(is_binary_file(path))

    def test_null_byte_after_leading_bytes_is_text(self):
        path = self.root / "long.txt"
        path.write_bytes(b"a" * 600 + b"\x00")
        self.assertFalse(is_binary_file(path))

    def test_unreadable_header_is_text(self):
        self.assertFalse(is_binary_file(self.root / "missing.txt"))


class TestExtractContent(unittest.TestCase):
    """Test cases for content extraction"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, rel, data):
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data)

    def test_section_format(self):
        """Each file becomes 'File: <path>\\n<text>\\n', separated by a blank line"""
        self.write("a.txt", "x")
        self.write("b.txt", "y\n")
        report = extract_content(self.root, keep_everything)
        self.assertEqual(report.content, "File: a.txt\nx\n\nFile: b.txt\ny\n\n")

    def test_binary_files_skipped(self):
        self.write("notes.md", "# Notes\n")
        self.write("main.go", "package main\n")
        self.write("logo.png", b"\x89PNG\x00\x00\x00data")
        report = extract_content(self.root, keep_everything)

        paths = [f.relative_path for f in report.files]
        self.assertEqual(paths, ["main.go", "notes.md"])
        self.assertNotIn("logo.png", report.content)
        self.assertEqual(report.skipped, [])

    def test_nested_paths_are_relative_posix(self):
        self.write("src/app/main.py", "print('hi')\n")
        report = extract_content(self.root, keep_everything)
        self.assertEqual(report.files[0].relative_path, "src/app/main.py")

    def test_ignore_rules_applied(self):
        self.write(".gitignore", "*.log\n")
        self.write("debug.log", "noise")
        self.write("yarn.lock", "lock")
        self.write(".git/HEAD", "ref: refs/heads/main\n")
        self.write("docs/guide.md", "guide")
        self.write("main.go", "package main\n")
        ignore = build_ignore_filter(self.root, ["**/*.md"])

        report = extract_content(self.root, ignore)
        self.assertEqual([f.relative_path for f in report.files], [".gitignore", "main.go"])

    def test_invalid_utf8_replaced(self):
        self.write("latin1.txt", b"caf\xe9\n")
        report = extract_content(self.root, keep_everything)
        self.assertEqual(report.files[0].text_content, "caf\ufffd\n")

    def test_line_endings_preserved(self):
        self.write("win.txt", b"one\r\ntwo\r\n")
        report = extract_content(self.root, keep_everything)
        self.assertEqual(report.files[0].text_content, "one\r\ntwo\r\n")

    def test_unreadable_file_skipped(self):
        """A failed full read is recorded and extraction continues"""
        self.write("secret.txt", "hidden")
        self.write("public.txt", "visible")
        real_read = content_extractor.read_text_file

        def failing_read(path):
            if Path(path).name == "secret.txt":
                raise PermissionError(13, "Permission denied")
            return real_read(path)

        with patch("repogist.core.content_extractor.read_text_file", side_effect=failing_read):
            report = extract_content(self.root, keep_everything)

        self.assertEqual([f.relative_path for f in report.files], ["public.txt"])
        self.assertEqual(len(report.skipped), 1)
        self.assertEqual(report.skipped[0].kind, PARTIAL_FILE_READ)
        self.assertEqual(report.skipped[0].path, "secret.txt")

    def test_missing_workspace_raises(self):
        with self.assertRaises(WorkspaceUnavailable):
            extract_content(self.root / "gone", keep_everything)

    def test_empty_workspace(self):
        report = extract_content(self.root, keep_everything)
        self.assertEqual(report.content, "")


if __name__ == "__main__":
    unittest.main()
