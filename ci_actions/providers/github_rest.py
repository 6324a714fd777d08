"""GitHub provider implementation using PyGithub and REST API."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Github, GithubException  # type: ignore[import-not-found]
from github.Commit import Commit as GHCommit  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from ci_actions.models.domain import CommitInfo
from ci_actions.providers.base import RepositoryHost

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubRestProvider(RepositoryHost):
    """GitHub implementation using PyGithub library.

    Unlike a single-repository client, the release flow touches every
    repository in the lockfile, so repository handles are looked up lazily
    and cached by ``owner/name``.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub token with contents:write on the tagged repositories
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        # Normalize base_url by removing trailing slash
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repos: dict[str, GHRepository] = {}

    async def connect(self) -> None:
        """Initialize GitHub client."""
        self._client = await _run_sync(lambda: Github(self.token, base_url=self.base_url))
        log.info("github_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repos = {}

    async def __aenter__(self) -> "GitHubRestProvider":
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.disconnect()

    async def _get_repo(self, owner: str, repo: str) -> GHRepository:
        if self._client is None:
            raise ConnectionError("GitHub provider is not connected")

        full_name = f"{owner}/{repo}"
        if full_name not in self._repos:
            client = self._client
            self._repos[full_name] = await _run_sync(lambda: client.get_repo(full_name))
        return self._repos[full_name]

    async def create_lightweight_tag(self, owner: str, repo: str, tag: str, sha: str) -> None:
        """Create ``refs/tags/<tag>`` pointing at ``sha``."""
        log.info("create_lightweight_tag", owner=owner, repo=repo, tag=tag, sha=sha)

        try:
            gh_repo = await self._get_repo(owner, repo)
            await _run_sync(lambda: gh_repo.create_git_ref(ref=f"refs/tags/{tag}", sha=sha))

        except GithubException as e:
            log.error("github_create_tag_failed", owner=owner, repo=repo, tag=tag, error=str(e))
            raise

    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> list[CommitInfo]:
        """List commits between two refs."""
        log.info("compare_commits", owner=owner, repo=repo, base=base, head=head)

        try:
            gh_repo = await self._get_repo(owner, repo)

            def _compare() -> list[GHCommit]:
                comparison = gh_repo.compare(base, head)
                return list(comparison.commits)

            gh_commits = await _run_sync(_compare)
            return [self._convert_commit(c) for c in gh_commits]

        except GithubException as e:
            log.error("github_compare_failed", owner=owner, repo=repo, base=base, head=head, error=str(e))
            raise

    def _convert_commit(self, gh_commit: GHCommit) -> CommitInfo:
        """Convert GitHub Commit to our CommitInfo model."""
        git_commit = gh_commit.commit
        return CommitInfo(
            sha=gh_commit.sha,
            message=git_commit.message or "",
            url=gh_commit.html_url or "",
            author=git_commit.author.name if git_commit.author else "",
        )
