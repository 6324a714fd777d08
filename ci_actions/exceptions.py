"""Custom exception hierarchy for the ci-actions toolkit.

This module defines a structured exception hierarchy so that every action
can tell fatal failures (which end the run with a non-zero exit) apart from
advisory ones (which are logged and swallowed at the call site).

Exception Hierarchy:
    CIActionsError (base)
    ├── ConfigurationError
    │   ├── InputError
    │   └── ValidationError
    ├── CommandError
    ├── GitOperationError
    ├── ExternalServiceError
    │   └── JiraError
    │       ├── UnknownStatusError
    │       └── ReleaseVersionError
    └── ReleaseError
        ├── IssueComputationError
        └── TaggingError

Example Usage:
    >>> from ci_actions.exceptions import ConfigurationError
    >>> try:
    ...     lockfile = read_lockfile(path)
    ... except FileNotFoundError as e:
    ...     raise ConfigurationError(f"Lockfile not found: {path}") from e
"""

from typing import Any


class CIActionsError(Exception):
    """Base exception for all ci-actions errors.

    All custom exceptions inherit from this base class, allowing the CLI to
    catch every toolkit-specific error with a single except clause.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(CIActionsError):
    """Configuration-related errors.

    Raised when configuration files or action inputs are invalid, missing,
    or contain incompatible settings.

    Examples:
        - Lockfile not found
        - Invalid YAML/JSON syntax
        - Missing required configuration fields
    """

    pass


class InputError(ConfigurationError):
    """An action input is missing or cannot be parsed.

    Attributes:
        input_name: Name of the offending input, when known
    """

    def __init__(self, message: str, input_name: str | None = None) -> None:
        self.input_name = input_name
        super().__init__(message)


class ValidationError(ConfigurationError):
    """Inputs parsed fine but describe an invalid request.

    Examples:
        - No resource properties set
        - Unsupported requested-execution-level
    """

    pass


class CommandError(CIActionsError):
    """An external process exited with a non-zero code.

    Attributes:
        command: The argv that was executed
        exit_code: Process exit code
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        command: tuple[str, ...] | list[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialize exception.

        Args:
            command: The argv that was executed
            exit_code: Process exit code
            stdout: Captured standard output
            stderr: Captured standard error
        """
        self.command = tuple(command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Process completed with exit code {exit_code}")

    @property
    def output(self) -> str:
        """Trimmed stdout and stderr joined by a newline, empty parts omitted."""
        parts = [part for part in (self.stdout.strip(), self.stderr.strip()) if part]
        return "\n".join(parts)


class GitOperationError(CIActionsError):
    """Local git operation errors.

    Raised when tagging, pushing or reading from the local repository fails.
    """

    pass


class ExternalServiceError(CIActionsError):
    """External service communication errors.

    Raised when communication with Jira or GitHub fails.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class JiraError(ExternalServiceError):
    """A Jira REST call failed."""

    pass


class UnknownStatusError(JiraError):
    """The issue sits in a status the release workflow does not know.

    Attributes:
        issue_key: The issue that was being transitioned
        status: The unrecognised status name
    """

    def __init__(self, status: str, issue_key: str | None = None) -> None:
        self.status = status
        self.issue_key = issue_key
        message = f"Unknown status {status}"
        if issue_key:
            message = f"{message} (issue: {issue_key})"
        super().__init__(message)


class ReleaseVersionError(JiraError):
    """The Jira release version could not be looked up or created.

    Attributes:
        payload: The request body that was sent, if any
    """

    def __init__(
        self,
        message: str,
        payload: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        self.payload = payload
        super().__init__(message, status_code=status_code)


# =============================================================================
# Release Errors
# =============================================================================


class ReleaseError(CIActionsError):
    """Base exception for fatal release orchestration failures.

    Attributes:
        phase: Release phase during which the failure happened
    """

    def __init__(self, message: str, phase: str | None = None) -> None:
        self.phase = phase
        full_message = message if not phase else f"{message} (phase: {phase})"
        super().__init__(full_message)
        self.message = message


class IssueComputationError(ReleaseError):
    """The set of Jira issues implicated by the release could not be built."""

    def __init__(self, message: str) -> None:
        super().__init__(message, phase="compute_issues")


class TaggingError(ReleaseError):
    """One or more repositories could not be tagged.

    Attributes:
        failures: Mapping of repository name to error text
    """

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = failures
        names = ", ".join(sorted(failures))
        super().__init__(f"Failed to tag {len(failures)} repositories: {names}", phase="tag_sub_repos")
