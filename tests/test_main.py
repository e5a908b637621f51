# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Unit tests for main.py argument parsing, command dispatch and exit codes."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import git
import pytest

from homer import __version__
from homer.errors import InvalidSetting, InvalidVersion, NotPrerelease, WrongBranch
from homer.main import (
    EXIT_FAILURE,
    EXIT_OK,
    build_command_table,
    build_parser,
    dispatch,
    main,
    parse_settings,
)
from homer.version import ForkType
from homer.workflow import STATUS_ABORTED, ReleaseWorkflow, Settings, WorkflowResult


def _parse(*argv: str):
    return build_parser().parse_args(list(argv))


class TestParser:
    """Tests for build_parser()."""

    def test_tag(self) -> None:
        args = _parse("tag")
        assert (args.command, args.action) == ("tag", None)

    def test_tag_final_with_yes(self) -> None:
        args = _parse("tag", "final", "-y")
        assert (args.command, args.action, args.yes) == ("tag", "final", True)

    @pytest.mark.parametrize("fork_type", ["minor", "major"])
    def test_fork(self, fork_type: str) -> None:
        args = _parse("fork", fork_type, "--yes")
        assert (args.command, args.action, args.yes) == ("fork", fork_type, True)

    def test_fork_requires_type(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _parse("fork")
        assert exc_info.value.code == 2

    def test_fork_rejects_unknown_type(self) -> None:
        with pytest.raises(SystemExit):
            _parse("fork", "patch")

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _parse("-v")
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestParseSettings:
    """Tests for parse_settings() defaults, env vars and validation."""

    def test_defaults(self) -> None:
        settings = parse_settings(_parse("tag"))
        assert settings == Settings()

    def test_cli_options(self) -> None:
        settings = parse_settings(
            _parse(
                "--dry-run",
                "--debug",
                "--remote",
                "upstream",
                "--tag-prefix",
                "",
                "--main-branch",
                "trunk",
                "--release-only",
                "tag",
            )
        )
        assert settings == Settings(
            debug=True,
            dry_run=True,
            remote="upstream",
            tag_prefix="",
            main_branch="trunk",
            tag_other_branches=False,
        )

    def test_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOMER_DRY_RUN", "true")
        monkeypatch.setenv("HOMER_TAG_PREFIX", "pkg-v")
        monkeypatch.setenv("HOMER_MAIN_BRANCH", "develop")

        settings = parse_settings(_parse("tag"))

        assert settings.dry_run is True
        assert settings.tag_prefix == "pkg-v"
        assert settings.main_branch == "develop"

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOMER_REMOTE", "env-remote")
        settings = parse_settings(_parse("--remote", "cli-remote", "tag"))
        assert settings.remote == "cli-remote"

    def test_invalid_tag_prefix_raises(self) -> None:
        with pytest.raises(InvalidSetting) as exc_info:
            parse_settings(_parse("--tag-prefix", "bad..prefix", "tag"))
        assert exc_info.value.option == "tag-prefix"
        assert exc_info.value.hint == "Check --tag-prefix or HOMER_TAG_PREFIX."

    def test_empty_main_branch_raises(self) -> None:
        with pytest.raises(InvalidSetting) as exc_info:
            parse_settings(_parse("--main-branch", "", "tag"))
        assert exc_info.value.option == "main-branch"


class TestCommandTable:
    """Tests for build_command_table()."""

    def test_contains_every_command(self) -> None:
        assert set(build_command_table()) == {
            ("tag", None),
            ("tag", "final"),
            ("fork", "minor"),
            ("fork", "major"),
        }

    def test_fork_handlers_pass_fork_type(self) -> None:
        table = build_command_table()
        workflow = MagicMock()

        table[("fork", "major")].handler(workflow, _parse("fork", "major", "-y"))
        table[("fork", "minor")].handler(workflow, _parse("fork", "minor"))

        assert workflow.fork.call_args_list[0].args == (ForkType.MAJOR,)
        assert workflow.fork.call_args_list[0].kwargs == {"skip_prompt": True}
        assert workflow.fork.call_args_list[1].args == (ForkType.MINOR,)
        assert workflow.fork.call_args_list[1].kwargs == {"skip_prompt": False}

    def test_tag_final_handler_passes_yes(self) -> None:
        workflow = MagicMock()
        build_command_table()[("tag", "final")].handler(workflow, _parse("tag", "final", "--yes"))
        workflow.tag_final.assert_called_once_with(skip_prompt=True)


class TestDispatch:
    """Tests for dispatch() error-to-exit-code mapping."""

    @pytest.fixture
    def workflow(self) -> MagicMock:
        workflow = MagicMock(spec=ReleaseWorkflow)
        workflow.tag.return_value = WorkflowResult(command="tag", version="1.3.0-dev.3")
        return workflow

    def _dispatch(self, workflow: MagicMock, *argv: str) -> int:
        return dispatch(build_command_table(), _parse(*argv), lambda settings: workflow)

    def test_success_returns_zero(self, workflow: MagicMock) -> None:
        assert self._dispatch(workflow, "tag") == EXIT_OK
        workflow.tag.assert_called_once_with()

    def test_declined_prompt_returns_zero(self, workflow: MagicMock) -> None:
        workflow.tag_final.return_value = WorkflowResult(command="tag final", status=STATUS_ABORTED)
        assert self._dispatch(workflow, "tag", "final") == EXIT_OK

    @pytest.mark.parametrize(
        "error",
        [
            WrongBranch("release/1.2", "the 'main' branch", command="fork minor"),
            NotPrerelease("1.0.1", "bump the release candidate"),
            InvalidVersion("unknown"),
        ],
    )
    def test_errors_return_one(
        self, workflow: MagicMock, error: Exception, caplog: pytest.LogCaptureFixture
    ) -> None:
        workflow.fork.side_effect = error

        assert self._dispatch(workflow, "fork", "minor") == EXIT_FAILURE
        assert str(error) in caplog.text

    def test_hint_is_logged(self, workflow: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
        workflow.fork.side_effect = WrongBranch("develop", "the 'main' branch", command="fork major")

        self._dispatch(workflow, "fork", "major")

        assert "Tip: The command should be run from the 'main' branch." in caplog.text

    def test_settings_reach_factory(self, workflow: MagicMock) -> None:
        factory = MagicMock(return_value=workflow)

        dispatch(build_command_table(), _parse("--dry-run", "tag"), factory)

        settings = factory.call_args.args[0]
        assert settings.dry_run is True

    @pytest.mark.parametrize(
        "argv",
        [("--tag-prefix", "bad..prefix", "tag"), ("--remote", "", "tag"), ("--main-branch", "a b", "fork", "minor")],
    )
    def test_invalid_settings_return_one_without_a_workflow(
        self, argv: tuple[str, ...], caplog: pytest.LogCaptureFixture
    ) -> None:
        factory = MagicMock()

        assert dispatch(build_command_table(), _parse(*argv), factory) == EXIT_FAILURE
        factory.assert_not_called()
        assert "Invalid" in caplog.text

    def test_unknown_command(self, workflow: MagicMock) -> None:
        args = _parse("tag")
        args.action = "bogus"
        assert dispatch(build_command_table(), args, lambda settings: workflow) == EXIT_FAILURE


class TestMain:
    """Tests for main()."""

    def test_no_arguments_prints_banner_and_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Homer CLI" in out
        assert "usage: homer" in out

    def test_main_dispatches_to_workflow(self) -> None:
        with patch("homer.main.create_workflow") as factory:
            factory.return_value.tag.return_value = WorkflowResult(command="tag")
            assert main(["tag"]) == EXIT_OK
            factory.return_value.tag.assert_called_once_with()

    def test_main_outside_repository_fails(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        with patch("homer.git_repo.git.Repo", side_effect=git.InvalidGitRepositoryError(str(tmp_path))):
            assert main(["tag"]) == EXIT_FAILURE
