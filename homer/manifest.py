# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Package manifest access.

The version lives in the ``version`` field of the nearest ``package.json``.
Writing a version mirrors ``npm version``: the manifest (and its lockfile, if
present) is rewritten, committed, and tagged as one unit.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from homer.errors import ManifestError
from homer.naming import git_tag_name

if TYPE_CHECKING:
    from homer.git_repo import GitRepository
    from homer.version import Version

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
LOCKFILE_NAME = "package-lock.json"

_INDENT_PATTERN = re.compile(r"^[ \t]+", re.MULTILINE)


def find_manifest(start: str | os.PathLike[str] | None = None, name: str = MANIFEST_NAME) -> Path | None:
    """Find ``name`` in ``start`` or the nearest ancestor directory.

    Args:
        start: Directory to start searching from. Defaults to the cwd.
        name: File name to look for.

    Returns:
        Path to the manifest, or None if no ancestor contains one.
    """
    directory = Path(start or os.getcwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / name
        if candidate.is_file():
            return candidate
    return None


def detect_indent(text: str) -> str | int:
    """Return the indentation used by a JSON document (2 spaces if unknown)."""
    match = _INDENT_PATTERN.search(text)
    if not match:
        return 2
    indent = match.group(0)
    return len(indent) if set(indent) == {" "} else indent


def _load_json(path: Path) -> tuple[dict[str, Any], str]:
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except OSError as e:
        raise ManifestError(path, f"Cannot read manifest: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(path, f"Manifest is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise ManifestError(path, "Manifest must contain a JSON object")
    return data, text


def _dump_json(path: Path, data: dict[str, Any], original: str) -> None:
    rendered = json.dumps(data, indent=detect_indent(original), ensure_ascii=False)
    if original.endswith("\n"):
        rendered += "\n"
    path.write_text(rendered, encoding="utf-8")


class PackageManifest:
    """Reads and writes the version stored in ``package.json``."""

    def __init__(
        self,
        vcs: GitRepository,
        path: str | os.PathLike[str] | None = None,
        tag_prefix: str = "v",
    ) -> None:
        """Initialize the manifest collaborator.

        Args:
            vcs: Repository used to commit and tag the version change.
            path: Explicit manifest path. When omitted the nearest
                ``package.json`` above the cwd is used.
            tag_prefix: Prefix for the git tag created for each version.
        """
        self._vcs = vcs
        self._path = Path(path) if path is not None else None
        self.tag_prefix = tag_prefix

    @property
    def path(self) -> Path:
        """Location of the manifest file.

        Raises:
            ManifestError: If no manifest can be found.
        """
        if self._path is None:
            found = find_manifest()
            if found is None:
                raise ManifestError(
                    Path.cwd(),
                    f"{MANIFEST_NAME} not found",
                    hint="Run homer from inside a package directory.",
                )
            self._path = found
        return self._path

    def read_version(self) -> str:
        """Return the ``version`` field of the manifest.

        Raises:
            ManifestError: If the manifest is missing, unreadable or has no version.
        """
        data, _ = _load_json(self.path)
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ManifestError(self.path, "Manifest has no 'version' field")
        logger.debug("Read version %s from %s", version, self.path)
        return version

    def write_version(self, version: str | Version) -> str:
        """Persist ``version`` as a commit plus annotated tag.

        Args:
            version: The new version.

        Returns:
            The name of the created git tag (e.g., 'v1.2.0-rc.0').

        Raises:
            ManifestError: If the working tree has uncommitted changes or the
                manifest cannot be rewritten.
            SubprocessFailure: If committing or tagging fails.
        """
        new_version = str(version)
        if self._vcs.is_dirty():
            raise ManifestError(
                self.path,
                "Git working directory not clean",
                hint="Commit or stash your changes before creating a version.",
            )

        changed = [self._set_version(self.path, new_version)]

        lockfile = self.path.with_name(LOCKFILE_NAME)
        if lockfile.is_file():
            changed.append(self._set_version(lockfile, new_version))

        tag_name = git_tag_name(new_version, self.tag_prefix)
        self._vcs.commit([str(p) for p in changed], new_version)
        self._vcs.create_tag(tag_name, new_version)
        logger.info("New tag created: %s", tag_name)
        return tag_name

    def _set_version(self, path: Path, version: str) -> Path:
        data, text = _load_json(path)
        data["version"] = version

        # Lockfile v2+ repeats the root package version under packages[""]
        packages = data.get("packages")
        if isinstance(packages, dict) and isinstance(packages.get(""), dict):
            packages[""]["version"] = version

        try:
            _dump_json(path, data, text)
        except OSError as e:
            raise ManifestError(path, f"Cannot write manifest: {e.strerror}") from e
        logger.debug("Wrote version %s to %s", version, path)
        return path
