"""Jira release bookkeeping: status transitions and fix versions."""

from ci_actions.jira.versions import get_or_create_release_version, release_version_name, update_fix_versions
from ci_actions.jira.workflow import TRANSITIONS, JiraStatus, TransitionWalker, next_edge

__all__ = [
    "TRANSITIONS",
    "JiraStatus",
    "TransitionWalker",
    "get_or_create_release_version",
    "next_edge",
    "release_version_name",
    "update_fix_versions",
]
