#!/usr/bin/env python3
"""
Repository URL Normalizer Module

This module decides whether a user-supplied string denotes a Git repository
and canonicalizes GitHub and GitLab browse URLs into the ``.git``-suffixed
form that archive and metadata lookups are derived from.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers. It performs no network or filesystem
activity.

Links to documentation:
- re: https://docs.python.org/3/library/re.html

Sample input:
- "https://github.com/acme/widgets/tree/main"
- "https://gitlab.com/acme/widgets"
- "git@bitbucket.org:acme/widgets.git"

Expected output:
- RepositoryReference(canonical_url="https://github.com/acme/widgets.git", branch="main")
- RepositoryReference(canonical_url="https://gitlab.com/acme/widgets.git", branch=None)
- RepositoryReference(canonical_url="git@bitbucket.org:acme/widgets.git", branch=None)
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from repogist.core.errors import InvalidReference

GIT_URL_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^git@[^:]+:.+\.git$"),
    re.compile(r"^https://[^/]+/.+\.git$"),
    re.compile(r"^https://github\.com/[^/]+/[^/]+(/tree/[^/]+)?$"),
    re.compile(r"^https://gitlab\.com/[^/]+/[^/]+(/-/tree/[^/]+)?$"),
)

# Browse URLs are canonicalized; anything after the branch segment is dropped
BROWSE_URL_PATTERNS: Tuple[Tuple[str, re.Pattern], ...] = (
    ("github.com", re.compile(r"^https://github\.com/([^/]+)/([^/]+)(/tree/([^/]+))?")),
    ("gitlab.com", re.compile(r"^https://gitlab\.com/([^/]+)/([^/]+)(/-/tree/([^/]+))?")),
)


@dataclass(frozen=True)
class RepositoryReference:
    """A validated repository reference.

    ``canonical_url`` is the ``.git`` form for recognized hosts and the raw
    input for everything else.
    """

    canonical_url: str
    branch: Optional[str] = None


def _strip_git_suffix(name: str) -> str:
    return name[: -len(".git")] if name.endswith(".git") else name


def is_git_url(url: str) -> bool:
    """Return True if ``url`` matches one of the recognized Git reference forms."""
    if not url:
        return False
    return any(pattern.match(url) for pattern in GIT_URL_PATTERNS)


def normalize_url(url: str) -> RepositoryReference:
    """
    Validate and canonicalize a repository URL.

    Args:
        url: Raw URL as received from the caller

    Returns:
        RepositoryReference with the canonical URL and optional branch

    Raises:
        InvalidReference: If the string is not a recognized Git reference
    """
    url = (url or "").strip()
    if not is_git_url(url):
        raise InvalidReference(f"Invalid Git repository URL: {url!r}")

    for host, pattern in BROWSE_URL_PATTERNS:
        match = pattern.match(url)
        if match:
            owner = match.group(1)
            repo = _strip_git_suffix(match.group(2))
            branch = match.group(4)
            canonical = f"https://{host}/{owner}/{repo}.git"
            logger.debug(f"Normalized {url} -> {canonical} (branch={branch})")
            return RepositoryReference(canonical_url=canonical, branch=branch)

    # Valid but not a recognized browse URL: pass through untouched
    return RepositoryReference(canonical_url=url)


def parse_owner_repo(canonical_url: str) -> Tuple[str, str, str]:
    """
    Split a canonical GitHub/GitLab URL into (host, owner, repo).

    Raises:
        ValueError: If the URL does not belong to a recognized provider
    """
    for host, pattern in BROWSE_URL_PATTERNS:
        match = pattern.match(canonical_url)
        if match:
            return host, match.group(1), _strip_git_suffix(match.group(2))
    raise ValueError(f"Not a recognized provider URL: {canonical_url}")


if __name__ == "__main__":
    import sys

    all_validation_failures = []
    total_tests = 0

    total_tests += 1
    ref = normalize_url("https://github.com/acme/widgets/tree/main")
    if ref != RepositoryReference("https://github.com/acme/widgets.git", "main"):
        all_validation_failures.append(f"GitHub browse URL: got {ref}")

    total_tests += 1
    ref = normalize_url("https://gitlab.com/acme/widgets.git")
    if ref != RepositoryReference("https://gitlab.com/acme/widgets.git", None):
        all_validation_failures.append(f"GitLab .git URL: got {ref}")

    total_tests += 1
    if is_git_url("https://example.com/not-a-repo"):
        all_validation_failures.append("Plain web URL accepted as Git URL")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
    sys.exit(0)
