"""
Jira release workflow: the status graph and the walker that drives issues
through it.

The release workflow is a fixed chain ending in ``Released``::

    No action needed -> New -> Accepted -> In Progress -> Done -> Released
                                            In review --^

Every non-terminal status has exactly one outgoing edge. The walker reads an
issue's current status, looks the edge up in ``TRANSITIONS`` and applies it.
By default one edge is applied per call, so an issue moves one status
closer to ``Released`` per release run; ``walk_to_released=True`` keeps
going until the terminal status is reached.

Example:
    >>> walker = TransitionWalker(jira)
    >>> outcome = await walker.transition_to_released("PROJ-42")
    >>> outcome.from_status, outcome.to_status
    ('Done', 'Released')
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

import structlog

from ci_actions.exceptions import ExternalServiceError, UnknownStatusError
from ci_actions.models.domain import TransitionEdge, TransitionOutcome
from ci_actions.providers.base import IssueTracker

log = structlog.get_logger(__name__)


class JiraStatus(str, Enum):
    """Status names of the release workflow, exactly as Jira reports them."""

    NO_ACTION_NEEDED = "No action needed"
    NEW = "New"
    ACCEPTED = "Accepted"
    IN_PROGRESS = "In Progress"
    IN_REVIEW = "In review"
    DONE = "Done"
    RELEASED = "Released"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATUS = JiraStatus.RELEASED

TRANSITIONS: Mapping[JiraStatus, TransitionEdge] = MappingProxyType(
    {
        JiraStatus.NO_ACTION_NEEDED: TransitionEdge("201", JiraStatus.NEW.value),
        JiraStatus.NEW: TransitionEdge("171", JiraStatus.ACCEPTED.value),
        JiraStatus.ACCEPTED: TransitionEdge("71", JiraStatus.IN_PROGRESS.value),
        JiraStatus.IN_PROGRESS: TransitionEdge("91", JiraStatus.DONE.value),
        JiraStatus.IN_REVIEW: TransitionEdge("91", JiraStatus.DONE.value),
        JiraStatus.DONE: TransitionEdge("211", JiraStatus.RELEASED.value),
    }
)


def _check_transitions() -> None:
    """Fail at import if the table and the enum drift apart."""
    missing = [s for s in JiraStatus if s is not TERMINAL_STATUS and s not in TRANSITIONS]
    if missing or TERMINAL_STATUS in TRANSITIONS:
        raise RuntimeError(f"Release workflow table is not exhaustive: missing={missing}")
    for edge in TRANSITIONS.values():
        JiraStatus(edge.to_status)


_check_transitions()


def next_edge(status: str, issue_key: str | None = None) -> TransitionEdge | None:
    """The edge leaving ``status``.

    Returns:
        None for the terminal status.

    Raises:
        UnknownStatusError: If ``status`` is not part of the workflow.
    """
    try:
        current = JiraStatus(status)
    except ValueError:
        raise UnknownStatusError(status, issue_key=issue_key) from None

    if current is TERMINAL_STATUS:
        return None
    return TRANSITIONS[current]


class TransitionWalker:
    """Drive issues toward ``Released`` through an IssueTracker."""

    def __init__(self, jira: IssueTracker, walk_to_released: bool = False) -> None:
        self.jira = jira
        self.walk_to_released = walk_to_released

    async def transition_to_released(self, issue_key: str) -> TransitionOutcome:
        """Advance one issue along the release workflow.

        Calls on an issue that is already ``Released`` are no-ops. A transition
        Jira does not offer is not attempted. A refused or rejected transition
        is logged and recorded in the outcome; the issue keeps its current
        status and no exception escapes.

        Raises:
            UnknownStatusError: If the issue is in a status outside the
                workflow. No transition is attempted.
            JiraError: If the issue itself cannot be read.
        """
        issue = await self.jira.get_issue(issue_key, fields=["status"], expand=["transitions"])
        status = issue.status
        outcome = TransitionOutcome(issue_key=issue_key, from_status=status, to_status=status)
        # ids Jira offers from the current status; empty means not listed
        offered = issue.transition_ids()

        while (edge := next_edge(status, issue_key)) is not None:
            if offered and edge.transition_id not in offered:
                log.warning(
                    "transition_not_offered",
                    issue_key=issue_key,
                    status=status,
                    transition_id=edge.transition_id,
                    offered=sorted(offered),
                )
                outcome.error = f"Transition {edge.transition_id} is not available for {issue_key} in status {status}"
                break

            try:
                await self.jira.do_transition(issue_key, edge.transition_id)
            except ExternalServiceError as e:
                log.warning(
                    "transition_failed",
                    issue_key=issue_key,
                    status=status,
                    transition_id=edge.transition_id,
                    error=str(e),
                )
                outcome.error = f"Could not transition {issue_key}: {e}"
                break

            log.info("issue_transitioned", issue_key=issue_key, from_status=status, to_status=edge.to_status)
            status = edge.to_status
            offered = set()
            outcome.applied.append(edge.transition_id)
            outcome.to_status = status

            if not self.walk_to_released:
                break

        return outcome
