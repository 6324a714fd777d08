"""Jira release versions and fix-version assignment."""

import json
from datetime import date

import structlog

from ci_actions.exceptions import ExternalServiceError, ReleaseVersionError
from ci_actions.models.domain import FixVersionOutcome, ReleaseVersion
from ci_actions.providers.base import IssueTracker

log = structlog.get_logger(__name__)


def release_version_name(version: str) -> str:
    """Jira version name for a lockfile version: ``v1.2.3`` -> ``1.2.3``."""
    return version.removeprefix("v")


async def get_or_create_release_version(
    jira: IssueTracker,
    project_id: str,
    version: str,
    today: date | None = None,
) -> ReleaseVersion:
    """Find the project version named after ``version``, creating it if absent.

    There is no locking: two concurrent releases of the same version may both
    create it.

    Args:
        jira: Issue tracker client
        project_id: Project id or key owning the versions
        version: Lockfile version, with or without a leading ``v``
        today: Release date for a newly created version (defaults to today)

    Raises:
        ReleaseVersionError: If the versions cannot be listed or created.
    """
    name = release_version_name(version)

    try:
        versions = await jira.get_project_versions(project_id)
    except ExternalServiceError as e:
        raise ReleaseVersionError(
            f"Could not connect with project versions: {e}", status_code=e.status_code
        ) from e

    existing = next((v for v in versions if v.name == name), None)
    if existing is not None:
        log.info("release_version_found", name=name, version_id=existing.id)
        return existing

    release_date = today or date.today()
    try:
        created = await jira.create_version(name=name, project_id=project_id, release_date=release_date)
    except ExternalServiceError as e:
        payload = {"name": name, "projectId": project_id, "releaseDate": release_date.isoformat()}
        raise ReleaseVersionError(
            f"Could not create new release version in Jira: {e}\nPayload: {json.dumps(payload, indent=2)}",
            payload=payload,
            status_code=e.status_code,
        ) from e

    log.info("release_version_created", name=name, version_id=created.id, release_date=release_date.isoformat())
    return created


async def update_fix_versions(
    jira: IssueTracker,
    version: ReleaseVersion,
    issue_keys: list[str],
) -> list[FixVersionOutcome]:
    """Set ``version`` as the fix version of every issue, one at a time.

    Issues are updated serially so the log reads in issue order. A failed
    update is logged as a warning and the loop moves on.
    """
    outcomes: list[FixVersionOutcome] = []

    for issue_key in issue_keys:
        try:
            await jira.edit_issue(issue_key, [version.id])
        except ExternalServiceError as e:
            log.warning("fix_version_failed", issue_key=issue_key, version=version.name, error=str(e))
            outcomes.append(FixVersionOutcome(issue_key=issue_key, version=version.name, error=str(e)))
            continue

        log.info("fix_version_set", issue_key=issue_key, version=version.name)
        outcomes.append(FixVersionOutcome(issue_key=issue_key, version=version.name))

    return outcomes
