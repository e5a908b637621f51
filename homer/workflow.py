# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release workflow orchestration.

Each operation is a straight-line sequence of steps: branch preconditions are
checked first, then the version is read and its successor computed, and only
then are side effects requested from the VCS and manifest collaborators.
A failing step aborts the remaining steps; completed steps are not rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from homer.errors import UnsupportedBranch, WrongBranch
from homer.naming import (
    BranchKind,
    classify_branch,
    extract_release_version,
    initial_rc_tag_name,
    is_release_branch,
    release_branch_name,
)
from homer.version import (
    DEFAULT_MAIN_BRANCH,
    ForkType,
    finalize,
    next_dev_prerelease,
    next_major_prerelease,
    next_minor_prerelease,
    next_prerelease_for_branch,
    parse_version,
    short_form,
)

if TYPE_CHECKING:
    from homer.git_repo import GitRepository
    from homer.manifest import PackageManifest
    from homer.prompt import ConsolePrompt

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_ABORTED = "aborted"
STATUS_DRY_RUN = "dry-run"


@dataclass
class Settings:
    """Resolved configuration for a single invocation."""

    debug: bool = False
    dry_run: bool = False
    remote: str = "origin"
    tag_prefix: str = "v"
    main_branch: str = DEFAULT_MAIN_BRANCH
    tag_other_branches: bool = True


@dataclass
class WorkflowResult:
    """Outcome of one release operation."""

    command: str
    status: str = STATUS_CREATED
    branch: str = ""
    version: str = ""
    tags: list[str] = field(default_factory=list)
    main_version: str = ""

    @property
    def aborted(self) -> bool:
        return self.status == STATUS_ABORTED


class ReleaseWorkflow:
    """Runs the fork, tag and final-tag operations against collaborators."""

    def __init__(
        self,
        vcs: GitRepository,
        manifest: PackageManifest,
        prompt: ConsolePrompt,
        settings: Settings | None = None,
    ) -> None:
        self.vcs = vcs
        self.manifest = manifest
        self.prompt = prompt
        self.settings = settings or Settings()

    @property
    def dry_run(self) -> bool:
        return self.settings.dry_run

    def fork(self, fork_type: ForkType, skip_prompt: bool = False) -> WorkflowResult:
        """Fork a new release branch off main and advance main's dev version.

        Args:
            fork_type: Whether this starts a major or a minor release line.
            skip_prompt: Create the branch without asking for confirmation.

        Returns:
            WorkflowResult describing the release branch and tags.

        Raises:
            WrongBranch: If the current branch is not the main branch.
            NotPrerelease: If a minor fork starts from a final version.
            SubprocessFailure: If any git operation fails.
        """
        main_branch = self.settings.main_branch
        command = f"fork {fork_type.value}"
        current = self.vcs.current_branch()
        logger.info("Current branch: %s", current)

        if current != main_branch:
            raise WrongBranch(current, f"the '{main_branch}' branch", command=command)

        self._sync(current)

        current_version = parse_version(self.manifest.read_version())
        if fork_type is ForkType.MAJOR:
            release_version = next_major_prerelease(current_version)
        else:
            release_version = next_minor_prerelease(current_version)

        short_version = short_form(release_version)
        release_branch = release_branch_name(short_version)
        rc_version = initial_rc_tag_name(short_version)
        main_version = next_dev_prerelease(current_version, fork_type)

        result = WorkflowResult(
            command=command,
            branch=release_branch,
            version=rc_version,
            main_version=str(main_version),
        )

        if not skip_prompt and not self.prompt.confirm(f"Create branch: {release_branch}?"):
            logger.info("Branch creation aborted.")
            result.status = STATUS_ABORTED
            return result

        logger.info("Creating branch: %s", release_branch)
        if self.dry_run:
            logger.info("[DRY-RUN] Would create branch '%s'", release_branch)
            logger.info("[DRY-RUN] Would set version %s and tag it", rc_version)
            logger.info("[DRY-RUN] Would push '%s' and tags", release_branch)
            logger.info("[DRY-RUN] Would set '%s' version to %s and push", main_branch, main_version)
            result.status = STATUS_DRY_RUN
            return result

        self.vcs.create_branch(release_branch)
        logger.info("New branch created: %s", release_branch)
        result.tags.append(self.manifest.write_version(rc_version))
        self._push(release_branch)

        logger.info("Incrementing %s branch...", main_branch)
        self.vcs.checkout(main_branch)
        result.tags.append(self.manifest.write_version(main_version))
        self._push(main_branch)

        logger.info("%s fork completed successfully!", fork_type.value.capitalize())
        return result

    def tag(self) -> WorkflowResult:
        """Create the next prerelease tag on the current branch.

        Raises:
            WrongBranch: If HEAD is detached.
            UnsupportedBranch: If the branch cannot be mapped to an identifier,
                or is neither main nor a release branch while tagging other
                branches is disabled.
            SubprocessFailure: If any git operation fails.
        """
        branch = self.vcs.current_branch()
        logger.info("Current branch: %s", branch)

        kind = classify_branch(branch, self.settings.main_branch)
        if kind is BranchKind.OTHER and not self.settings.tag_other_branches:
            raise UnsupportedBranch(branch, "only main and release branches are tagged")

        self._sync(branch)

        current_version = self.manifest.read_version()
        next_version = next_prerelease_for_branch(current_version, branch, self.settings.main_branch)
        logger.info("Next version: %s -> %s", current_version, next_version)

        result = WorkflowResult(command="tag", branch=branch, version=str(next_version))
        if self.dry_run:
            logger.info("[DRY-RUN] Would set version %s, tag it and push '%s'", next_version, branch)
            result.status = STATUS_DRY_RUN
            return result

        result.tags.append(self.manifest.write_version(next_version))
        self._push(branch)
        logger.info("Prerelease tag created successfully!")
        return result

    def tag_final(self, skip_prompt: bool = False) -> WorkflowResult:
        """Turn the release branch's latest prerelease into a final version.

        Args:
            skip_prompt: Tag without asking for confirmation.

        Raises:
            WrongBranch: If the current branch is not a release branch.
            NotPrerelease: If the current version has no prerelease to drop.
            SubprocessFailure: If any git operation fails.
        """
        branch = self.vcs.current_branch()
        if not is_release_branch(branch):
            raise WrongBranch(branch, "a 'release/X.Y' branch", command="tag final")

        logger.info("Current branch: %s", branch)

        current_version = self.manifest.read_version()
        final_version = finalize(current_version)

        branch_version = extract_release_version(branch)
        if branch_version is not None and str(branch_version) != final_version.short:
            logger.warning(
                "Version %s does not belong to release line %s",
                final_version,
                branch_version,
            )

        result = WorkflowResult(command="tag final", branch=branch, version=str(final_version))

        if not skip_prompt and not self.prompt.confirm(f"Create final tag: {final_version}?"):
            logger.info("Tag creation aborted.")
            result.status = STATUS_ABORTED
            return result

        self._sync(branch)
        synced_version = self.manifest.read_version()
        if synced_version != current_version:
            final_version = finalize(synced_version)
            logger.info("Remote moved the version to %s; finalizing as %s", synced_version, final_version)
            result.version = str(final_version)

        if self.dry_run:
            logger.info("[DRY-RUN] Would set version %s, tag it and push '%s'", final_version, branch)
            result.status = STATUS_DRY_RUN
            return result

        result.tags.append(self.manifest.write_version(final_version))
        self._push(branch)
        logger.info("Final version updated successfully!")
        return result

    def _sync(self, branch: str) -> None:
        if self.dry_run:
            logger.info("[DRY-RUN] Would pull '%s' from %s and fetch", branch, self.settings.remote)
            return
        logger.info("Pulling latest from remote...")
        self.vcs.pull(branch)
        self.vcs.fetch()

    def _push(self, branch: str) -> None:
        logger.info("Pushing '%s' and tags to remote...", branch)
        self.vcs.push(branch)
        self.vcs.push_tags()
