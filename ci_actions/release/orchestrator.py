"""
Release orchestration.

A release run walks a fixed sequence of phases::

    COMPUTE_ISSUES -> TAG_CURRENT_REPO -> TAG_SUB_REPOS
        -> TRANSITION_ISSUES -> UPDATE_FIX_VERSIONS -> DONE

Error policy:
    - COMPUTE_ISSUES failing ends the run (IssueComputationError).
    - Tagging failures end the run. Every sub-repository is attempted first
      and the failures are reported together (TaggingError).
    - Jira bookkeeping is advisory: transition and fix-version failures are
      logged as warnings and recorded in the report, never raised.

In dry-run mode the issue set is still computed and logged; every phase
that would mutate git, GitHub or Jira is skipped.

Example:
    >>> orchestrator = ReleaseOrchestrator(settings, host=github, jira=jira)
    >>> report = await orchestrator.run()
    >>> report.summary()["transitions_failed"]
    0
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

from ci_actions.config.settings import ReleaseSettings
from ci_actions.exceptions import IssueComputationError, TaggingError, UnknownStatusError
from ci_actions.git.local import git_push_tags, git_tag
from ci_actions.jira.versions import get_or_create_release_version, update_fix_versions
from ci_actions.jira.workflow import TransitionWalker
from ci_actions.models.domain import (
    FixVersionOutcome,
    TagResult,
    TagStatus,
    TransitionOutcome,
)
from ci_actions.providers.base import IssueTracker, RepositoryHost
from ci_actions.release.changelog import ChangelogPlugin, compute_release_issues, link_jira_issues
from ci_actions.release.lockfile import (
    Lockfile,
    RepositoryEntry,
    check_repositories,
    read_lockfile,
    read_repositories_manifest,
    repository_owner,
)
from ci_actions.utils.helpers import table

log = structlog.get_logger(__name__)


class ReleasePhase(str, Enum):
    """Phases of a release run, in execution order."""

    COMPUTE_ISSUES = "compute_issues"
    TAG_CURRENT_REPO = "tag_current_repo"
    TAG_SUB_REPOS = "tag_sub_repos"
    TRANSITION_ISSUES = "transition_issues"
    UPDATE_FIX_VERSIONS = "update_fix_versions"
    DONE = "done"


@dataclass
class ReleaseReport:
    """Everything a release run did (or would have done, in dry-run mode)."""

    version: str
    dry_run: bool
    issue_keys: list[str] = field(default_factory=list)
    tags: list[TagResult] = field(default_factory=list)
    transitions: list[TransitionOutcome] = field(default_factory=list)
    fix_versions: list[FixVersionOutcome] = field(default_factory=list)
    completed_phases: list[ReleasePhase] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def phase(self) -> ReleasePhase | None:
        """Last completed phase."""
        return self.completed_phases[-1] if self.completed_phases else None

    def summary(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "dry_run": self.dry_run,
            "issues": len(self.issue_keys),
            "tags_created": sum(1 for t in self.tags if t.status == TagStatus.CREATED),
            "transitions_succeeded": sum(1 for t in self.transitions if t.succeeded and t.changed),
            "transitions_unchanged": sum(1 for t in self.transitions if t.succeeded and not t.changed),
            "transitions_failed": sum(1 for t in self.transitions if not t.succeeded),
            "fix_versions_set": sum(1 for f in self.fix_versions if f.succeeded),
            "fix_versions_failed": sum(1 for f in self.fix_versions if not f.succeeded),
            "warnings": len(self.warnings),
        }


class ReleaseOrchestrator:
    """Sequence a release: tags first, Jira bookkeeping after."""

    def __init__(
        self,
        settings: ReleaseSettings,
        host: RepositoryHost,
        jira: IssueTracker | None = None,
        plugins: Sequence[ChangelogPlugin] | None = None,
        cwd: Path | str | None = None,
        today: date | None = None,
    ) -> None:
        self.settings = settings
        self.host = host
        self.jira = jira
        self.cwd = cwd
        self.today = today
        self.manifest: dict[str, RepositoryEntry] = {}
        if plugins is None:
            jira_config = settings.jira
            plugins = [
                link_jira_issues(
                    project_key=jira_config.project_key if jira_config else None,
                    base_url=jira_config.base_url if jira_config else None,
                )
            ]
        self.plugins = list(plugins)

    async def run(self) -> ReleaseReport:
        """Execute every phase.

        Raises:
            ConfigurationError: If the lockfile cannot be read.
            IssueComputationError: If the issue set cannot be computed.
            GitOperationError: If the current repository cannot be tagged or pushed.
            TaggingError: If any sub-repository could not be tagged.
        """
        lockfile = read_lockfile(self.settings.lockfile_path)
        report = ReleaseReport(version=lockfile.version, dry_run=self.settings.dry_run)

        table("Version", lockfile.version)
        table("Dry run", str(self.settings.dry_run))
        table("Repositories", ", ".join(lockfile.repositories) or "-")

        report.issue_keys = await self.compute_issues(lockfile)
        report.completed_phases.append(ReleasePhase.COMPUTE_ISSUES)

        await self.tag_current_repo(lockfile)
        report.completed_phases.append(ReleasePhase.TAG_CURRENT_REPO)

        report.tags = await self.tag_sub_repos(lockfile, self.manifest)
        report.completed_phases.append(ReleasePhase.TAG_SUB_REPOS)

        report.transitions = await self.transition_issues(report.issue_keys)
        report.completed_phases.append(ReleasePhase.TRANSITION_ISSUES)

        try:
            report.fix_versions = await self.update_fix_versions(lockfile.version, report.issue_keys)
        except Exception as e:
            log.warning("fix_version_update_failed", version=lockfile.version, error=str(e))
            report.warnings.append(f"Got error while trying to update release version of tickets: {e}")
        report.completed_phases.append(ReleasePhase.UPDATE_FIX_VERSIONS)

        report.completed_phases.append(ReleasePhase.DONE)
        log.info("release_complete", **report.summary())
        return report

    async def compute_issues(self, lockfile: Lockfile) -> list[str]:
        """Jira issues changed since the previous release.

        Also loads the repositories manifest into ``self.manifest``.

        Raises:
            IssueComputationError: Wrapping whatever went wrong.
        """
        try:
            manifest: dict[str, RepositoryEntry] = read_repositories_manifest(self.settings.repositories_path)
            check_repositories(lockfile, manifest)
            self.manifest = manifest
            issue_keys = await compute_release_issues(
                self.host,
                lockfile,
                self.settings.lockfile_path,
                default_owner=self.settings.owner,
                manifest=manifest,
                plugins=self.plugins,
                cwd=self.cwd,
            )
        except Exception as e:
            log.error("issue_computation_failed", error=str(e))
            raise IssueComputationError(f"Could not compute release issues: {e}") from e

        log.info("release_issues", count=len(issue_keys), issues=issue_keys)
        return issue_keys

    async def tag_current_repo(self, lockfile: Lockfile) -> None:
        repository = self.settings.github.repository or "current repository"
        if self.settings.dry_run:
            log.info("dry_run_skip_tag", repository=repository, tag=lockfile.version)
            return

        await git_tag(lockfile.version, cwd=self.cwd)
        await git_push_tags(cwd=self.cwd)
        log.info("tag_pushed", repository=repository, tag=lockfile.version)

    async def tag_sub_repos(
        self, lockfile: Lockfile, manifest: dict[str, RepositoryEntry] | None = None
    ) -> list[TagResult]:
        """Tag every lockfile repository at its pinned commit.

        Each repository is tagged under its manifest owner, falling back to
        the settings owner.

        Raises:
            TaggingError: After all repositories were attempted, if any failed.
        """
        results: list[TagResult] = []

        for repository, sha in lockfile.repositories.items():
            owner = repository_owner(repository, manifest, self.settings.owner)
            if self.settings.dry_run:
                log.info("dry_run_skip_tag", repository=repository, owner=owner, tag=lockfile.version, sha=sha)
                results.append(TagResult(repository, lockfile.version, sha, TagStatus.SKIPPED))
                continue

            try:
                await self.host.create_lightweight_tag(owner=owner, repo=repository, tag=lockfile.version, sha=sha)
            except Exception as e:
                log.error("tag_failed", repository=repository, tag=lockfile.version, sha=sha, error=str(e))
                results.append(TagResult(repository, lockfile.version, sha, TagStatus.FAILED, error=str(e)))
                continue

            log.info("tag_created", repository=repository, owner=owner, tag=lockfile.version, sha=sha)
            results.append(TagResult(repository, lockfile.version, sha, TagStatus.CREATED))

        failures = {r.repository: r.error or "" for r in results if r.status == TagStatus.FAILED}
        if failures:
            raise TaggingError(failures)
        return results

    async def transition_issues(self, issue_keys: list[str]) -> list[TransitionOutcome]:
        """Move every issue toward Released concurrently.

        Never raises; each issue's fate is in its outcome.
        """
        if self.settings.dry_run:
            log.info("dry_run_skip_transitions", issues=issue_keys)
            return []
        if self.jira is None:
            log.warning("jira_not_configured_skip_transitions")
            return []
        if not issue_keys:
            log.info("no_issues_to_transition")
            return []

        walker = TransitionWalker(
            self.jira,
            walk_to_released=bool(self.settings.jira and self.settings.jira.walk_to_released),
        )
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_transitions)

        async def _transition(issue_key: str) -> TransitionOutcome:
            async with semaphore:
                try:
                    return await walker.transition_to_released(issue_key)
                except UnknownStatusError as e:
                    log.warning("unknown_issue_status", issue_key=issue_key, status=e.status)
                    return TransitionOutcome(issue_key, e.status, e.status, error=e.message)
                except Exception as e:
                    log.warning("transition_error", issue_key=issue_key, error=str(e))
                    return TransitionOutcome(issue_key, None, None, error=str(e))

        log.info("transitioning_issues", issues=issue_keys)
        outcomes = list(await asyncio.gather(*(_transition(key) for key in issue_keys)))

        log.info(
            "transitions_complete",
            succeeded=sum(1 for o in outcomes if o.succeeded and o.changed),
            unchanged=sum(1 for o in outcomes if o.succeeded and not o.changed),
            failed=[o.issue_key for o in outcomes if not o.succeeded],
        )
        return outcomes

    async def update_fix_versions(self, version: str, issue_keys: list[str]) -> list[FixVersionOutcome]:
        """Attach the release version to every issue, serially.

        Raises:
            ReleaseVersionError: If the release version cannot be found or created.
        """
        if self.settings.dry_run:
            log.info("dry_run_skip_fix_versions", issues=issue_keys)
            return []
        if self.jira is None or self.settings.jira is None:
            log.warning("jira_not_configured_skip_fix_versions")
            return []
        if not issue_keys:
            log.info("no_issues_to_update")
            return []

        project_id = self.settings.jira.project_id or self.settings.jira.project_key
        if not project_id:
            log.warning("jira_project_not_configured_skip_fix_versions")
            return []

        release_version = await get_or_create_release_version(self.jira, project_id, version, today=self.today)
        return await update_fix_versions(self.jira, release_version, issue_keys)
