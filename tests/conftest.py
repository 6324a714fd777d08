"""Pytest configuration and shared fixtures."""

import json
from datetime import date
from pathlib import Path

import pytest
import structlog

from ci_actions.config.settings import GitHubConfig, JiraConfig, ReleaseSettings
from ci_actions.exceptions import JiraError
from ci_actions.models.domain import CommitInfo, JiraIssue, ReleaseVersion
from ci_actions.providers.base import IssueTracker, RepositoryHost


class FakeIssueTracker(IssueTracker):
    """In-memory Jira that applies transitions according to the workflow table."""

    def __init__(
        self,
        statuses: dict[str, str] | None = None,
        versions: list[ReleaseVersion] | None = None,
    ) -> None:
        self.statuses = dict(statuses or {})
        self.versions = list(versions or [])
        self.transitions: list[tuple[str, str]] = []
        self.created_versions: list[tuple[str, str, date]] = []
        self.fix_versions: dict[str, list[str]] = {}
        self.edit_order: list[str] = []
        self.failing_transitions: set[str] = set()
        self.failing_edits: set[str] = set()
        self.fail_versions_lookup = False
        self.fail_version_create = False

    async def get_issue(self, issue_key, fields=None, expand=None):
        if issue_key not in self.statuses:
            raise JiraError(f"Issue {issue_key} does not exist", status_code=404)
        return JiraIssue(key=issue_key, status=self.statuses[issue_key])

    async def do_transition(self, issue_key, transition_id):
        if issue_key in self.failing_transitions:
            raise JiraError("Transition is not valid", status_code=400)
        self.transitions.append((issue_key, transition_id))

    async def get_project_versions(self, project_id_or_key):
        if self.fail_versions_lookup:
            raise JiraError("Forbidden", status_code=403)
        return list(self.versions)

    async def create_version(self, name, project_id, release_date):
        if self.fail_version_create:
            raise JiraError("Bad request", status_code=400)
        version = ReleaseVersion(id=str(10000 + len(self.versions)), name=name, release_date=release_date)
        self.versions.append(version)
        self.created_versions.append((name, project_id, release_date))
        return version

    async def edit_issue(self, issue_key, fix_version_ids):
        self.edit_order.append(issue_key)
        if issue_key in self.failing_edits:
            raise JiraError("Field fixVersions cannot be set", status_code=400)
        self.fix_versions[issue_key] = list(fix_version_ids)


class FakeRepositoryHost(RepositoryHost):
    """In-memory GitHub recording tags and serving canned comparisons."""

    def __init__(self, commits: dict[str, list[CommitInfo]] | None = None) -> None:
        self.commits = commits or {}
        self.tags: list[tuple[str, str, str, str]] = []
        self.comparisons: list[tuple[str, str, str, str]] = []
        self.failing_repos: set[str] = set()

    async def create_lightweight_tag(self, owner, repo, tag, sha):
        if repo in self.failing_repos:
            raise RuntimeError(f"Reference already exists: {repo}")
        self.tags.append((owner, repo, tag, sha))

    async def compare_commits(self, owner, repo, base, head):
        self.comparisons.append((owner, repo, base, head))
        return list(self.commits.get(repo, []))


@pytest.fixture
def fake_jira() -> FakeIssueTracker:
    """Jira holding two issues in Done and New."""
    return FakeIssueTracker(statuses={"PROJ-1": "Done", "PROJ-2": "New"})


@pytest.fixture
def fake_host() -> FakeRepositoryHost:
    """GitHub whose repoA gained two commits referencing PROJ-1 and PROJ-2."""
    return FakeRepositoryHost(
        commits={
            "repoA": [
                CommitInfo(sha="c1", message="PROJ-1 Fix login redirect"),
                CommitInfo(sha="c2", message="Merge pull request #7\n\nPROJ-2: add export"),
            ]
        }
    )


@pytest.fixture
def release_dir(tmp_path: Path) -> Path:
    """Working directory with a lockfile and repositories manifest."""
    (tmp_path / "lockfile.json").write_text(
        json.dumps({"version": "v2.0.0", "repositories": {"repoA": "abc123"}}), encoding="utf-8"
    )
    (tmp_path / "repositories.json").write_text(json.dumps({"repoA": {}}), encoding="utf-8")
    return tmp_path


@pytest.fixture
def previous_lockfile() -> str:
    """Lockfile content at the previous release tag."""
    return json.dumps({"version": "v1.9.0", "repositories": {"repoA": "0001111"}})


@pytest.fixture
def release_settings(release_dir: Path) -> ReleaseSettings:
    """Non-dry-run release settings pointing at release_dir."""
    return ReleaseSettings(
        lockfile_path=release_dir / "lockfile.json",
        repositories_path=release_dir / "repositories.json",
        dry_run=False,
        github=GitHubConfig(token="ghp_test", repository="acme/product", sha="f00"),
        jira=JiraConfig(
            base_url="https://acme.atlassian.net",
            username="bot@acme.test",
            token="jira-token",
            project_id="10001",
            project_key="PROJ",
        ),
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore structlog defaults after tests that configure logging."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
