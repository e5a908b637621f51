# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Branch and tag naming for release lines.

Release branches are named ``release/X.Y`` and start at the ``X.Y.0-rc.0``
release candidate. Git tags created for a version carry a configurable
prefix (``v`` by default, matching ``npm version``).

References:
    - git-check-ref-format: https://git-scm.com/docs/git-check-ref-format
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from homer.version import DEFAULT_MAIN_BRANCH, RELEASE_BRANCH_PREFIX, Version, short_form

logger = logging.getLogger(__name__)

# Release branch created by a fork: release/X.Y, no leading zeros
RELEASE_BRANCH_PATTERN = re.compile(r"^release/(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)$")

# Characters invalid in git refs (branch names and tags)
# See: https://git-scm.com/docs/git-check-ref-format
INVALID_PREFIX_CHARS = ["..", "~", "^", ":", "\\", " ", "\t", "\n", "*", "?", "["]


class BranchKind(Enum):
    """How a branch participates in the release workflow."""

    MAIN = "main"
    RELEASE = "release"
    OTHER = "other"


@dataclass
class BranchVersion:
    """Version information extracted from a release branch name."""

    major: int
    minor: int

    def __str__(self) -> str:
        """Return the version as a string (e.g., '1.2')."""
        return f"{self.major}.{self.minor}"


def release_branch_name(short_version: str) -> str:
    """Return the release branch name for a ``major.minor`` version.

    Examples:
        >>> release_branch_name("2.0")
        'release/2.0'
    """
    return f"{RELEASE_BRANCH_PREFIX}{short_form(short_version)}"


def initial_rc_tag_name(short_version: str) -> str:
    """Return the first release candidate version for a release line.

    Examples:
        >>> initial_rc_tag_name("1.3")
        '1.3.0-rc.0'
    """
    return f"{short_form(short_version)}.0-rc.0"


def git_tag_name(version: str | Version, tag_prefix: str = "v") -> str:
    """Return the git tag name created for ``version``.

    Examples:
        >>> git_tag_name("1.2.0-rc.0")
        'v1.2.0-rc.0'
        >>> git_tag_name("1.2.0", tag_prefix="")
        '1.2.0'
    """
    return f"{tag_prefix}{version}"


def is_release_branch(branch_name: str | None) -> bool:
    """Check whether a branch is a release branch (``release/...``)."""
    return bool(branch_name) and branch_name.startswith(RELEASE_BRANCH_PREFIX)


def classify_branch(branch_name: str, main_branch: str = DEFAULT_MAIN_BRANCH) -> BranchKind:
    """Classify a branch for prerelease tagging.

    Examples:
        >>> classify_branch("main")
        <BranchKind.MAIN: 'main'>
        >>> classify_branch("release/1.2")
        <BranchKind.RELEASE: 'release'>
        >>> classify_branch("feature/login")
        <BranchKind.OTHER: 'other'>
    """
    if branch_name == main_branch:
        return BranchKind.MAIN
    if is_release_branch(branch_name):
        return BranchKind.RELEASE
    return BranchKind.OTHER


def extract_release_version(branch_name: str) -> BranchVersion | None:
    """Extract major and minor version numbers from a release branch name.

    Args:
        branch_name: The branch name to extract version from (e.g., 'release/1.2').

    Returns:
        BranchVersion with major and minor numbers, or None if the branch does
        not follow the release/X.Y pattern.

    Examples:
        >>> str(extract_release_version("release/1.2"))
        '1.2'
        >>> extract_release_version("release/next") is None
        True
    """
    if not branch_name:
        logger.warning("Empty branch name provided")
        return None

    match = RELEASE_BRANCH_PATTERN.match(branch_name)
    if not match:
        logger.debug("Branch '%s' does not match release/X.Y pattern", branch_name)
        return None

    return BranchVersion(major=int(match.group(1)), minor=int(match.group(2)))


def validate_prefix(prefix: str, allow_empty: bool = False) -> bool:
    """Validate that a prefix is valid for git branch names and tags.

    A valid prefix must not contain characters that are invalid in git refs.
    Empty prefixes are rejected unless ``allow_empty`` is set.

    Args:
        prefix: The prefix string to validate.
        allow_empty: Accept an empty prefix (e.g., unprefixed tags).

    Returns:
        True if the prefix is valid, False otherwise.

    Examples:
        >>> validate_prefix("v")
        True
        >>> validate_prefix("", allow_empty=True)
        True
        >>> validate_prefix("bad..prefix")
        False
    """
    if not prefix:
        if allow_empty:
            return True
        logger.warning("Empty prefix provided")
        return False

    for invalid_char in INVALID_PREFIX_CHARS:
        if invalid_char in prefix:
            logger.warning(
                "Prefix '%s' contains invalid character %s",
                prefix,
                repr(invalid_char),
            )
            return False

    return True
