"""Release orchestration: lockfile, changelog issues, tagging and Jira bookkeeping."""

from ci_actions.release.changelog import compute_release_issues, link_jira_issues
from ci_actions.release.lockfile import Lockfile, read_lockfile, read_repositories_manifest
from ci_actions.release.orchestrator import ReleaseOrchestrator, ReleasePhase, ReleaseReport

__all__ = [
    "Lockfile",
    "ReleaseOrchestrator",
    "ReleasePhase",
    "ReleaseReport",
    "compute_release_issues",
    "link_jira_issues",
    "read_lockfile",
    "read_repositories_manifest",
]
