"""
Domain models for the release actions.

This module contains the data classes exchanged between the providers, the
Jira transition walker and the release orchestrator. They are the normalized
internal representation, converted from provider-specific payloads (PyGithub
objects, Jira REST JSON).

Example:
    Building a changelog entry from a GitHub commit::

        entry = ChangelogEntry(
            repository="api",
            sha="abc123",
            message="PROJ-42 Fix login redirect",
            url="https://github.com/acme/api/commit/abc123",
        )
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class IssueLink:
    """A Jira issue referenced by a changelog entry."""

    slug: str
    """Issue key, e.g. ``PROJ-42``."""

    url: str | None = None


@dataclass
class CommitInfo:
    """A commit returned by the repository host when comparing two refs."""

    sha: str
    message: str
    url: str = ""
    author: str = ""


@dataclass
class ChangelogEntry:
    """One line of the release changelog.

    Entries are produced per commit and enriched by changelog plugins. The
    only field the orchestrator consumes is ``issues``.
    """

    repository: str
    sha: str
    message: str
    url: str = ""
    issues: list[IssueLink] = field(default_factory=list)

    @property
    def title(self) -> str:
        """First line of the commit message."""
        return self.message.splitlines()[0] if self.message else ""


@dataclass
class JiraIssue:
    """The slice of a Jira issue the release workflow reads."""

    key: str
    status: str
    transitions: list[dict[str, Any]] = field(default_factory=list)

    def transition_ids(self) -> set[str]:
        """Ids of the transitions available from the current status."""
        return {str(t["id"]) for t in self.transitions if t.get("id") is not None}


@dataclass
class ReleaseVersion:
    """A Jira project version (the "fix version" of released issues)."""

    id: str
    name: str
    release_date: date | None = None


@dataclass(frozen=True)
class TransitionEdge:
    """The single outgoing edge of a workflow status."""

    transition_id: str
    to_status: str


@dataclass
class TransitionOutcome:
    """Result of driving one issue toward ``Released``.

    ``applied`` lists the transition ids that the API accepted, in order.
    ``error`` is set when a transition call failed or the status was unknown.
    """

    issue_key: str
    from_status: str | None
    to_status: str | None
    applied: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return bool(self.applied)


class TagStatus(str, Enum):
    """Outcome of tagging one repository."""

    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TagResult:
    """Result of tagging one repository."""

    repository: str
    tag: str
    sha: str | None
    status: TagStatus
    error: str | None = None


@dataclass
class FixVersionOutcome:
    """Result of assigning the release version to one issue."""

    issue_key: str
    version: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
