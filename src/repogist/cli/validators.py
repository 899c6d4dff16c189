"""Input validators for the repogist CLI.

These are Typer option/argument callbacks. Each returns the (possibly
cleaned) value or raises ``typer.BadParameter`` with a helpful message.

Links to third-party package documentation:
- Typer: https://typer.tiangolo.com/tutorial/options/callback-and-context/

Sample input:
    validate_git_url("https://github.com/acme/widgets/tree/main")
    validate_ignore_patterns(["**/*.md", "  "])

Expected output:
    "https://github.com/acme/widgets/tree/main"
    ["**/*.md"]
"""

import os
from typing import List, Optional

import typer

from repogist.core.url_normalizer import is_git_url


def validate_git_url(url: str) -> str:
    """Validate a Git repository URL.

    Raises:
        typer.BadParameter: If the URL is empty or not a recognized Git reference
    """
    url = (url or "").strip()
    if not url:
        raise typer.BadParameter("Repository URL cannot be empty")
    if not is_git_url(url):
        raise typer.BadParameter(
            f"Invalid Git repository URL: {url}. Expected https://github.com/<owner>/<repo>, "
            "https://gitlab.com/<owner>/<repo>, an https URL ending in .git, or git@host:owner/repo.git"
        )
    return url


def validate_ignore_patterns(patterns: Optional[List[str]]) -> List[str]:
    """Strip whitespace and drop blank patterns."""
    if not patterns:
        return []
    return [p.strip() for p in patterns if p and p.strip()]


def validate_output_file(path: Optional[str]) -> Optional[str]:
    if path is None:
        return None
    directory = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(directory):
        raise typer.BadParameter(f"Output directory does not exist: {directory}")
    if os.path.isdir(path):
        raise typer.BadParameter(f"Output path is a directory: {path}")
    return path


def validate_timeout(seconds: float) -> float:
    if seconds <= 0:
        raise typer.BadParameter("Timeout must be greater than zero")
    return seconds
