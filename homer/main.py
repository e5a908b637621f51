# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Command-line entry point for homer.

This module parses arguments, builds the command table, and maps errors raised
by the release workflow to exit codes in a single place.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass

from homer import __version__
from homer.errors import HomerError, InvalidSetting
from homer.git_repo import GitRepository
from homer.manifest import PackageManifest
from homer.naming import validate_prefix
from homer.prompt import ConsolePrompt, print_banner
from homer.version import ForkType
from homer.workflow import ReleaseWorkflow, Settings, WorkflowResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

CommandKey = tuple[str, str | None]
CommandHandler = Callable[[ReleaseWorkflow, argparse.Namespace], WorkflowResult]


@dataclass(frozen=True)
class Command:
    """A dispatchable CLI command."""

    name: str
    help: str
    handler: CommandHandler


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() in ("1", "true", "yes")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Global options default to ``HOMER_*`` environment variables; CLI arguments
    take precedence.
    """
    parser = argparse.ArgumentParser(
        prog="homer",
        description="CLI for managing release branches and tags in git repositories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (used as defaults when CLI args not provided):
  HOMER_DEBUG          Enable debug logging (true/false)
  HOMER_DRY_RUN        Log actions instead of performing them (true/false)
  HOMER_REMOTE         Remote to pull from and push to
  HOMER_TAG_PREFIX     Prefix for version tags
  HOMER_MAIN_BRANCH    Name of the development branch
  HOMER_RELEASE_ONLY   Only tag the main and release branches (true/false)

Examples:
  homer tag                 # next prerelease on the current branch
  homer fork minor          # release/X.Y from main, main moves to X.Y+1
  homer tag final --yes     # finalize the release branch version
        """,
    )
    parser.add_argument("-v", "--version", action="version", version=__version__)
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("HOMER_DEBUG"),
        help="Enable debug logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_flag("HOMER_DRY_RUN"),
        help="Dry-run mode - don't create branches, commits, tags or pushes",
    )
    parser.add_argument(
        "--remote",
        default=os.environ.get("HOMER_REMOTE", "origin"),
        help="Remote to pull from and push to (default: origin)",
    )
    parser.add_argument(
        "--tag-prefix",
        default=os.environ.get("HOMER_TAG_PREFIX", "v"),
        help="Prefix for version tags (default: v)",
    )
    parser.add_argument(
        "--main-branch",
        default=os.environ.get("HOMER_MAIN_BRANCH", "main"),
        help="Name of the development branch (default: main)",
    )
    parser.add_argument(
        "--release-only",
        action="store_true",
        default=_env_flag("HOMER_RELEASE_ONLY"),
        help="Refuse to tag branches other than the main and release branches",
    )

    commands = parser.add_subparsers(dest="command", metavar="<command>")

    tag_parser = commands.add_parser("tag", help="Create a new tag in the current branch")
    tag_actions = tag_parser.add_subparsers(dest="action", metavar="<action>")
    final_parser = tag_actions.add_parser("final", help="Create a final tag in a release branch")
    _add_yes(final_parser)

    fork_parser = commands.add_parser("fork", help="Create a new release branch from the main branch")
    fork_actions = fork_parser.add_subparsers(dest="action", metavar="<type>", required=True)
    for fork_type in ForkType:
        fork_type_parser = fork_actions.add_parser(fork_type.value, help=f"Create a new {fork_type.value} release")
        _add_yes(fork_type_parser)

    return parser


def _add_yes(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")


def parse_settings(parsed: argparse.Namespace) -> Settings:
    """Validate global options and turn them into Settings.

    Raises:
        InvalidSetting: If a prefix or branch name is invalid.
    """
    if not validate_prefix(parsed.tag_prefix, allow_empty=True):
        raise InvalidSetting(
            "tag-prefix",
            parsed.tag_prefix,
            "must not contain invalid git ref characters (.. ~ ^ : \\ space tab newline * ? [)",
        )

    for option, value in (("remote", parsed.remote), ("main-branch", parsed.main_branch)):
        if not validate_prefix(value):
            raise InvalidSetting(option, value, "must be a non-empty, valid git ref name")

    return Settings(
        debug=parsed.debug,
        dry_run=parsed.dry_run,
        remote=parsed.remote,
        tag_prefix=parsed.tag_prefix,
        main_branch=parsed.main_branch,
        tag_other_branches=not parsed.release_only,
    )


def configure_logging(debug: bool) -> None:
    """Configure logging based on debug flag.

    Args:
        debug: If True, enable DEBUG level logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _run_tag(workflow: ReleaseWorkflow, args: argparse.Namespace) -> WorkflowResult:
    return workflow.tag()


def _run_tag_final(workflow: ReleaseWorkflow, args: argparse.Namespace) -> WorkflowResult:
    return workflow.tag_final(skip_prompt=args.yes)


def _fork_handler(fork_type: ForkType) -> CommandHandler:
    def run(workflow: ReleaseWorkflow, args: argparse.Namespace) -> WorkflowResult:
        return workflow.fork(fork_type, skip_prompt=args.yes)

    return run


def build_command_table() -> dict[CommandKey, Command]:
    """Map (command, action) pairs to their handlers."""
    table: dict[CommandKey, Command] = {
        ("tag", None): Command("tag", "Create a new prerelease tag", _run_tag),
        ("tag", "final"): Command("tag final", "Create a final tag", _run_tag_final),
    }
    for fork_type in ForkType:
        table[("fork", fork_type.value)] = Command(
            f"fork {fork_type.value}",
            f"Create a new {fork_type.value} release",
            _fork_handler(fork_type),
        )
    return table


def create_workflow(settings: Settings) -> ReleaseWorkflow:
    """Wire the release workflow to the real git, manifest and prompt."""
    vcs = GitRepository(remote=settings.remote)
    manifest = PackageManifest(vcs, tag_prefix=settings.tag_prefix)
    return ReleaseWorkflow(vcs, manifest, ConsolePrompt(), settings)


def dispatch(
    table: dict[CommandKey, Command],
    args: argparse.Namespace,
    workflow_factory: Callable[[Settings], ReleaseWorkflow] | None = None,
) -> int:
    """Run the command selected by ``args`` and return the exit code.

    All HomerError failures end here: the message (and hint) is logged and
    the error's exit code is returned.
    """
    key = (args.command, getattr(args, "action", None))
    command = table.get(key)
    if command is None:
        logger.error("Unknown command: %s", " ".join(part for part in key if part))
        return EXIT_FAILURE

    try:
        settings = parse_settings(args)
        workflow = (workflow_factory or create_workflow)(settings)
        result = command.handler(workflow, args)
    except HomerError as e:
        logger.error("%s", e.message)
        if e.hint:
            logger.error("Tip: %s", e.hint)
        return e.exit_code

    logger.debug("Result: %s", result)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.debug)

    if args.command is None:
        print_banner()
        parser.print_help()
        return EXIT_OK

    return dispatch(build_command_table(), args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
