"""Providers for the external services the release flow talks to.

- RepositoryHost / GitHubRestProvider: tags and commit comparisons (PyGithub)
- IssueTracker / JiraRestProvider: issue status, transitions and versions (httpx)
"""

from ci_actions.providers.base import IssueTracker, RepositoryHost
from ci_actions.providers.github_rest import GitHubRestProvider
from ci_actions.providers.jira_rest import JiraRestProvider

__all__ = [
    "GitHubRestProvider",
    "IssueTracker",
    "JiraRestProvider",
    "RepositoryHost",
]
