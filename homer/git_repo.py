# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Git wrapper for branch, tag and remote operations.

Every call runs synchronously and failures surface as ``SubprocessFailure``
carrying git's own error output.

References:
    - GitPython Documentation: https://gitpython.readthedocs.io/
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import git

from homer.errors import SubprocessFailure, WrongBranch

logger = logging.getLogger(__name__)

# GitPython wraps captured output as "\n  stderr: '...'"
_WRAPPED_OUTPUT = re.compile(r"^\s*(?:stderr|stdout): '(.*)'\s*$", re.DOTALL)


def _command_output(error: git.CommandError) -> str:
    """Return the output of a failed git command as git printed it."""
    for output in (error.stderr, error.stdout):
        if output:
            match = _WRAPPED_OUTPUT.match(output)
            return (match.group(1) if match else output).strip()
    return str(error)


class GitRepository:
    """Wrapper around GitPython for the operations the release workflow needs.

    The repository is discovered from ``path`` (default: the current
    directory) by searching parent directories, the way git itself does.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None, remote: str = "origin") -> None:
        """Open the git repository containing ``path``.

        Args:
            path: Any directory inside the working tree. Defaults to the cwd.
            remote: Name of the remote to pull from and push to.

        Raises:
            SubprocessFailure: If ``path`` is not inside a git repository.
        """
        self.remote = remote
        try:
            self._repo = git.Repo(path or os.getcwd(), search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise SubprocessFailure(
                "open_repository",
                f"not a git repository: {e}",
                hint="Make sure you are inside a Git repository.",
            ) from e

    @contextmanager
    def _git_operation(self, operation: str, hint: str | None = None) -> Iterator[None]:
        """Translate git command errors into SubprocessFailure."""
        logger.debug("git: %s", operation)
        try:
            yield
        except git.CommandError as e:
            detail = _command_output(e)
            raise SubprocessFailure(operation, detail, hint=hint) from e

    def current_branch(self) -> str:
        """Return the name of the checked-out branch.

        Raises:
            WrongBranch: If HEAD is detached.
        """
        try:
            return self._repo.active_branch.name
        except TypeError as e:
            raise WrongBranch(None, "a named branch") from e

    def create_branch(self, name: str) -> None:
        """Create a branch at HEAD and switch to it."""
        with self._git_operation(f"checkout -b {name}"):
            self._repo.git.checkout("-b", name)

    def checkout(self, name: str) -> None:
        with self._git_operation(f"checkout {name}"):
            self._repo.git.checkout(name)

    def is_dirty(self) -> bool:
        """Return True if tracked files have uncommitted changes."""
        return self._repo.is_dirty(untracked_files=False)

    def commit(self, paths: Sequence[str], message: str) -> None:
        """Stage ``paths`` and commit them with ``message``."""
        with self._git_operation("commit"):
            self._repo.git.add("--", *paths)
            self._repo.git.commit("-m", message)

    def create_tag(self, name: str, message: str | None = None) -> None:
        """Create an annotated tag at HEAD.

        Args:
            name: Name of the tag to create (e.g., 'v1.2.0-rc.0').
            message: Tag annotation message. Defaults to the tag name.
        """
        with self._git_operation(f"tag {name}"):
            self._repo.create_tag(name, message=message or name)

    def push(self, branch: str) -> None:
        with self._git_operation(f"push {self.remote} {branch}"):
            self._repo.git.push(self.remote, branch)

    def push_tags(self) -> None:
        with self._git_operation(f"push {self.remote} --tags"):
            self._repo.git.push(self.remote, "--tags")

    def pull(self, branch: str) -> None:
        with self._git_operation(
            f"pull {self.remote} {branch}",
            hint="Make sure the branch has been pushed to remote.",
        ):
            self._repo.git.pull(self.remote, branch)

    def fetch(self) -> None:
        with self._git_operation(f"fetch {self.remote}"):
            self._repo.git.fetch(self.remote)
