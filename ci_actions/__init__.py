"""ci-actions: CI/CD automation actions for release pipelines.

Provides the release orchestrator (git tagging, GitHub tags, Jira issue
transitions and fix versions), the Windows resource editor wrapper and the
shared input/exec helpers used by GitHub Actions steps.
"""

__version__ = "0.1.0"
