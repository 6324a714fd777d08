"""
Abstract base classes for providers.

This module defines the two external collaborators the release orchestrator
talks to: a repository host (GitHub) and an issue tracker (Jira). Concrete
implementations normalize their APIs into the domain models defined in
models.domain, which keeps the orchestrator testable with simple fakes.
"""

from abc import ABC, abstractmethod
from datetime import date

from ci_actions.models.domain import CommitInfo, JiraIssue, ReleaseVersion


class RepositoryHost(ABC):
    """Abstract base class for repository host implementations.

    All methods are async to support non-blocking I/O.
    """

    @abstractmethod
    async def create_lightweight_tag(self, owner: str, repo: str, tag: str, sha: str) -> None:
        """Create a lightweight tag (a bare ref) pointing at ``sha``.

        Args:
            owner: Repository owner
            repo: Repository name
            tag: Tag name without the ``refs/tags/`` prefix
            sha: Commit to tag

        Raises:
            GithubException: If the API request fails (GitHub).
        """
        pass

    @abstractmethod
    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> list[CommitInfo]:
        """List the commits reachable from ``head`` but not from ``base``.

        Returns:
            Commits in chronological order (oldest first).
        """
        pass


class IssueTracker(ABC):
    """Abstract base class for issue tracker implementations.

    The method set mirrors the five Jira operations the release workflow
    needs and nothing more.
    """

    @abstractmethod
    async def get_issue(
        self,
        issue_key: str,
        fields: list[str] | None = None,
        expand: list[str] | None = None,
    ) -> JiraIssue:
        """Fetch an issue with its current status.

        Raises:
            JiraError: If the API request fails or the issue does not exist.
        """
        pass

    @abstractmethod
    async def do_transition(self, issue_key: str, transition_id: str) -> None:
        """Apply a workflow transition to an issue.

        Raises:
            JiraError: If Jira rejects the transition.
        """
        pass

    @abstractmethod
    async def get_project_versions(self, project_id_or_key: str) -> list[ReleaseVersion]:
        """List every version of a project."""
        pass

    @abstractmethod
    async def create_version(self, name: str, project_id: str, release_date: date) -> ReleaseVersion:
        """Create a project version."""
        pass

    @abstractmethod
    async def edit_issue(self, issue_key: str, fix_version_ids: list[str]) -> None:
        """Replace the fix versions of an issue."""
        pass
