"""Changelog construction and issue-set computation.

The changelog of a release is the list of commits each repository gained
since the previous release. Previous commits come from the lockfile as it
was at the most recent tag; current commits from the working lockfile.
Plugins then enrich the entries, most importantly with the Jira issues they
reference, and the issue keys are flattened into the release work-set.
"""

import re
from collections.abc import Awaitable, Callable, Iterable, Sequence
from pathlib import Path

import structlog

from ci_actions.git.local import get_latest_version, read_file_at_ref
from ci_actions.models.domain import ChangelogEntry, IssueLink
from ci_actions.providers.base import RepositoryHost
from ci_actions.release.lockfile import Lockfile, RepositoryEntry, parse_lockfile, repository_owner

log = structlog.get_logger(__name__)

ChangelogPlugin = Callable[[list[ChangelogEntry]], Awaitable[list[ChangelogEntry]]]

ISSUE_KEY_PATTERN = re.compile(r"\b([A-Z][A-Z0-9_]+-[1-9]\d*)\b")


def extract_issue_keys(text: str, project_key: str | None = None) -> list[str]:
    """Jira keys mentioned in ``text``, in order of first appearance."""
    keys: list[str] = []
    for key in ISSUE_KEY_PATTERN.findall(text):
        if project_key and not key.startswith(f"{project_key}-"):
            continue
        if key not in keys:
            keys.append(key)
    return keys


def link_jira_issues(project_key: str | None = None, base_url: str | None = None) -> ChangelogPlugin:
    """Plugin attaching the Jira issues each commit message mentions.

    Args:
        project_key: Only link issues of this project
        base_url: Jira site URL used to build browse links
    """

    async def plugin(changelog: list[ChangelogEntry]) -> list[ChangelogEntry]:
        for entry in changelog:
            linked = {link.slug for link in entry.issues}
            for key in extract_issue_keys(entry.message, project_key):
                if key in linked:
                    continue
                url = f"{base_url.rstrip('/')}/browse/{key}" if base_url else None
                entry.issues.append(IssueLink(slug=key, url=url))
                linked.add(key)
        return changelog

    return plugin


async def run_plugins(changelog: list[ChangelogEntry], plugins: Sequence[ChangelogPlugin]) -> list[ChangelogEntry]:
    """Apply plugins in order, each receiving the previous one's output."""
    for plugin in plugins:
        changelog = await plugin(changelog)
    return changelog


async def build_changelog(
    host: RepositoryHost,
    previous: Lockfile,
    current: Lockfile,
    default_owner: str,
    manifest: dict[str, RepositoryEntry] | None = None,
) -> list[ChangelogEntry]:
    """One entry per commit added to each repository since ``previous``.

    Repositories without a previous commit are new to the product; they are
    skipped with a warning since there is no range to compare.
    """
    changelog: list[ChangelogEntry] = []

    for name, sha in current.repositories.items():
        base = previous.repositories.get(name)
        if base is None:
            log.warning("repository_without_previous_release", repository=name)
            continue
        if base == sha:
            log.debug("repository_unchanged", repository=name, sha=sha)
            continue

        owner = repository_owner(name, manifest, default_owner)
        commits = await host.compare_commits(owner, name, base, sha)
        log.info("repository_compared", repository=name, base=base, head=sha, commits=len(commits))

        changelog.extend(
            ChangelogEntry(repository=name, sha=c.sha, message=c.message, url=c.url) for c in commits
        )

    return changelog


def collect_issue_keys(changelog: Iterable[ChangelogEntry]) -> list[str]:
    """Flatten linked issues into a de-duplicated, order-preserving list."""
    seen: dict[str, None] = {}
    for entry in changelog:
        for link in entry.issues:
            if isinstance(link.slug, str) and link.slug:
                seen.setdefault(link.slug, None)
    return list(seen)


async def compute_release_issues(
    host: RepositoryHost,
    lockfile: Lockfile,
    lockfile_path: Path | str,
    default_owner: str,
    manifest: dict[str, RepositoryEntry] | None = None,
    plugins: Sequence[ChangelogPlugin] = (),
    cwd: Path | str | None = None,
) -> list[str]:
    """Issue keys implicated by the release.

    Must run before the current commit is tagged, otherwise the latest tag
    would be the release being made.
    """
    latest_version = await get_latest_version(cwd=cwd)
    log.info("previous_release", version=latest_version)

    previous_content = await read_file_at_ref(latest_version, lockfile_path, cwd=cwd)
    previous = parse_lockfile(previous_content, source=f"{latest_version}:{lockfile_path}")

    changelog = await build_changelog(host, previous, lockfile, default_owner, manifest)
    changelog = await run_plugins(changelog, plugins)
    return collect_issue_keys(changelog)
