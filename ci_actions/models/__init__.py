"""Domain models shared by providers and actions."""

from ci_actions.models.domain import (
    ChangelogEntry,
    CommitInfo,
    FixVersionOutcome,
    IssueLink,
    JiraIssue,
    ReleaseVersion,
    TagResult,
    TagStatus,
    TransitionEdge,
    TransitionOutcome,
)

__all__ = [
    "ChangelogEntry",
    "CommitInfo",
    "FixVersionOutcome",
    "IssueLink",
    "JiraIssue",
    "ReleaseVersion",
    "TagResult",
    "TagStatus",
    "TransitionEdge",
    "TransitionOutcome",
]
