# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Exception hierarchy for release workflow failures.

Every error carries an optional remediation hint and the process exit code
the CLI should use when the error reaches the top-level handler.
"""

from __future__ import annotations


class HomerError(Exception):
    """Base exception for all homer errors."""

    exit_code = 1

    def __init__(self, message: str, hint: str | None = None) -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)


class InvalidVersion(HomerError):
    """Raised when a string is not a valid semantic version."""

    def __init__(self, version: object, reason: str | None = None) -> None:
        self.version = version
        message = f"Invalid version '{version}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, hint="Expected 'MAJOR.MINOR.PATCH' or 'MAJOR.MINOR.PATCH-IDENTIFIER.NUMBER'.")


class NotPrerelease(HomerError):
    """Raised when an operation needs a prerelease version but got a final one."""

    def __init__(self, version: object, operation: str) -> None:
        self.version = version
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: version '{version}' has no prerelease component",
            hint="Ensure an RC tag has been created in this branch.",
        )


class WrongBranch(HomerError):
    """Raised when a command runs on a branch it does not support."""

    def __init__(self, branch: str | None, required: str, command: str | None = None) -> None:
        self.branch = branch
        self.required = required
        self.command = command
        current = branch or "(detached HEAD)"
        if command:
            message = f"'homer {command}' cannot run on branch '{current}'"
        else:
            message = f"Not on a supported branch: '{current}'"
        super().__init__(message, hint=f"The command should be run from {required}.")


class UnsupportedBranch(HomerError):
    """Raised when a branch does not map to a prerelease identifier policy."""

    def __init__(self, branch: str, reason: str | None = None) -> None:
        self.branch = branch
        message = f"Branch '{branch}' is not supported for tagging"
        if reason:
            message += f": {reason}"
        super().__init__(message, hint="Tag from 'main' or a 'release/X.Y' branch.")


class SubprocessFailure(HomerError):
    """Raised when an underlying git operation fails."""

    def __init__(self, operation: str, message: str | None = None, hint: str | None = None) -> None:
        self.operation = operation
        self.detail = message

        error_msg = f"Git operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg, hint=hint)


class ManifestError(HomerError):
    """Raised when the package manifest cannot be read or written."""

    def __init__(self, path: object, message: str, hint: str | None = None) -> None:
        self.path = path
        super().__init__(f"{message} ({path})", hint=hint)


class InvalidSetting(HomerError):
    """Raised when a configuration option has an unusable value."""

    def __init__(self, option: str, value: str, reason: str | None = None) -> None:
        self.option = option
        self.value = value
        message = f"Invalid {option} '{value}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, hint=f"Check --{option} or HOMER_{option.upper().replace('-', '_')}.")
