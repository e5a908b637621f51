# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Semantic version parsing and successor computation.

This module is the version state machine behind every release command. All
functions are pure: they take a version (string or ``Version``) and return a
newly constructed ``Version``, raising a ``HomerError`` subclass when the input
is invalid or out of sequence.

Versions have the shape ``MAJOR.MINOR.PATCH[-IDENTIFIER.NUMBER]``.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum

from homer.errors import InvalidVersion, NotPrerelease, UnsupportedBranch

logger = logging.getLogger(__name__)

# A prerelease identifier: numeric without leading zeros, or alphanumeric
_IDENTIFIER = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"

# SemVer 2.0.0 compliant: no leading zeros in numeric components
VERSION_PATTERN = re.compile(
    r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    rf"(?:-({_IDENTIFIER})\.(0|[1-9][0-9]*))?$"
)

# Loose pattern accepted by short_form: X.Y, X.Y.Z, X.Y.Z-anything
SHORT_FORM_PATTERN = re.compile(r"^(\d+)\.(\d+)(\.\d+.*)?$")

IDENTIFIER_PATTERN = re.compile(rf"^{_IDENTIFIER}$")

# Runs of characters that cannot appear in a prerelease identifier
_BRANCH_SEPARATORS = re.compile(r"[^0-9A-Za-z-]+")

RC_IDENTIFIER = "rc"
DEV_IDENTIFIER = "dev"
RELEASE_BRANCH_PREFIX = "release/"
DEFAULT_MAIN_BRANCH = "main"


class ForkType(Enum):
    """Which release line a fork starts."""

    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class Prerelease:
    """Prerelease segment of a version (e.g., ``rc.3``)."""

    identifier: str
    number: int

    def __str__(self) -> str:
        return f"{self.identifier}.{self.number}"


@dataclass(frozen=True)
class Version:
    """An immutable semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: Prerelease | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Args:
            text: Version string (e.g., '1.2.3' or '1.2.0-rc.1').

        Returns:
            The parsed Version.

        Raises:
            InvalidVersion: If the string is not a valid version.

        Examples:
            >>> Version.parse("1.2.0-rc.1").prerelease
            Prerelease(identifier='rc', number=1)
        """
        if not isinstance(text, str):
            raise InvalidVersion(text, "expected a string")

        match = VERSION_PATTERN.match(text.strip())
        if not match:
            raise InvalidVersion(text)

        prerelease = None
        if match.group(4) is not None:
            prerelease = Prerelease(match.group(4), int(match.group(5)))

        return cls(
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=int(match.group(3)),
            prerelease=prerelease,
        )

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def short(self) -> str:
        """Return the ``major.minor`` release identifier."""
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        core = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is None:
            return core
        return f"{core}-{self.prerelease}"


def parse_version(version: str | Version) -> Version:
    """Return ``version`` as a Version, parsing it if needed."""
    if isinstance(version, Version):
        return version
    return Version.parse(version)


def next_major_prerelease(version: str | Version) -> Version:
    """Start a new major release line at ``rc.0``.

    Examples:
        >>> str(next_major_prerelease("1.2.3"))
        '2.0.0-rc.0'
    """
    current = parse_version(version)
    return Version(current.major + 1, 0, 0, Prerelease(RC_IDENTIFIER, 0))


def next_minor_prerelease(version: str | Version) -> Version:
    """Bump the RC counter of a version that is mid release-candidate cycle.

    A version already on ``rc`` gets its counter incremented. A version on any
    other identifier (such as main's ``dev``) moves to ``rc.0`` with the same
    ``major.minor.patch``.

    Raises:
        NotPrerelease: If the version is a final release.
        InvalidVersion: If the version does not parse.

    Examples:
        >>> str(next_minor_prerelease("3.5.0-rc.0"))
        '3.5.0-rc.1'
        >>> str(next_minor_prerelease("1.3.0-dev.4"))
        '1.3.0-rc.0'
    """
    current = parse_version(version)
    if current.prerelease is None:
        raise NotPrerelease(current, "bump the release candidate")
    return _bump_prerelease(current, RC_IDENTIFIER)


def next_dev_prerelease(version: str | Version, fork_type: ForkType) -> Version:
    """Compute main's development version after a fork.

    A major fork moves main two increments ahead (next major, then its first
    minor) so the upcoming minor release has a free slot. A minor fork moves
    main to the next minor.

    Examples:
        >>> str(next_dev_prerelease("1.3.0-dev.2", ForkType.MAJOR))
        '2.1.0-dev.0'
        >>> str(next_dev_prerelease("1.3.0-dev.2", ForkType.MINOR))
        '1.4.0-dev.0'
    """
    current = parse_version(version)
    dev = Prerelease(DEV_IDENTIFIER, 0)

    if fork_type is ForkType.MAJOR:
        premajor = Version(current.major + 1, 0, 0, dev)
        return Version(premajor.major, premajor.minor + 1, 0, dev)

    return Version(current.major, current.minor + 1, 0, dev)


def prerelease_identifier_for_branch(branch_name: str, main_branch: str = DEFAULT_MAIN_BRANCH) -> str:
    """Map a branch name to its prerelease identifier.

    Args:
        branch_name: The branch being tagged.
        main_branch: Name of the development line.

    Returns:
        'dev' for the main branch, 'rc' for release branches, otherwise the
        branch name with '/' (and any other character not allowed in an
        identifier, such as '.' or '_') replaced by '-'.

    Raises:
        UnsupportedBranch: If the sanitized name is a number with a leading
            zero, which SemVer does not allow.

    Examples:
        >>> prerelease_identifier_for_branch("feature/login")
        'feature-login'
        >>> prerelease_identifier_for_branch("hotfix/1.2.1")
        'hotfix-1-2-1'
    """
    if branch_name == main_branch:
        return DEV_IDENTIFIER
    if branch_name.startswith(RELEASE_BRANCH_PREFIX):
        return RC_IDENTIFIER

    identifier = _BRANCH_SEPARATORS.sub("-", branch_name)
    if not IDENTIFIER_PATTERN.match(identifier):
        raise UnsupportedBranch(
            branch_name,
            f"'{identifier}' is not a valid prerelease identifier (numbers must not have leading zeros)",
        )
    return identifier


def next_prerelease_for_branch(
    version: str | Version,
    branch_name: str,
    main_branch: str = DEFAULT_MAIN_BRANCH,
) -> Version:
    """Compute the next prerelease version for a tag on ``branch_name``.

    The counter continues when the identifier is unchanged and resets to 0
    when it differs. A final version gets its patch bumped first so the new
    prerelease sorts after it.

    Examples:
        >>> str(next_prerelease_for_branch("1.4.0-dev.1", "main"))
        '1.4.0-dev.2'
        >>> str(next_prerelease_for_branch("1.4.0-dev.1", "feature/x"))
        '1.4.0-feature-x.0'
        >>> str(next_prerelease_for_branch("1.4.0", "release/1.4"))
        '1.4.1-rc.0'
    """
    current = parse_version(version)
    identifier = prerelease_identifier_for_branch(branch_name, main_branch)
    logger.debug("Branch '%s' uses prerelease identifier '%s'", branch_name, identifier)

    if current.prerelease is None:
        return Version(current.major, current.minor, current.patch + 1, Prerelease(identifier, 0))

    return _bump_prerelease(current, identifier)


def finalize(version: str | Version) -> Version:
    """Drop the prerelease component to produce the stable release.

    Raises:
        NotPrerelease: If there is nothing to finalize.

    Examples:
        >>> str(finalize("1.2.0-rc.3"))
        '1.2.0'
    """
    current = parse_version(version)
    if current.prerelease is None:
        raise NotPrerelease(current, "determine the final version")
    return replace(current, prerelease=None)


def short_form(version: str | Version) -> str:
    """Return the ``major.minor`` part of a version.

    Accepts anything of the form X.Y, X.Y.Z or X.Y.Z-suffix.

    Raises:
        InvalidVersion: If major and minor cannot be extracted.

    Examples:
        >>> short_form("5.4.3-beta.1")
        '5.4'
        >>> short_form("2.1")
        '2.1'
    """
    if isinstance(version, Version):
        return version.short

    if not isinstance(version, str):
        raise InvalidVersion(version, "expected 'X.Y.Z' or 'X.Y'")

    match = SHORT_FORM_PATTERN.match(version)
    if not match:
        raise InvalidVersion(version, "expected 'X.Y.Z' or 'X.Y'")

    return f"{match.group(1)}.{match.group(2)}"


def _bump_prerelease(current: Version, identifier: str) -> Version:
    if current.prerelease is not None and current.prerelease.identifier == identifier:
        number = current.prerelease.number + 1
    else:
        number = 0
    return replace(current, prerelease=Prerelease(identifier, number))
