"""Jira provider implementation using direct REST API calls."""

from datetime import date
from typing import Any

import httpx
import structlog

from ci_actions.exceptions import JiraError
from ci_actions.models.domain import JiraIssue, ReleaseVersion
from ci_actions.providers.base import IssueTracker

log = structlog.get_logger(__name__)


class JiraRestProvider(IssueTracker):
    """Jira Cloud implementation using REST API v3 with basic auth."""

    def __init__(
        self,
        base_url: str,
        username: str,
        token: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Jira provider.

        Args:
            base_url: Jira site URL (e.g., https://acme.atlassian.net)
            username: Account e-mail
            token: API token
            timeout: Per-request timeout in seconds; None waits indefinitely
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/rest/api/3"
        self.username = username
        self.token = token.strip() if token else token
        self.timeout = timeout
        self.transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Open the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_base,
                auth=(self.username, self.token),
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                timeout=self.timeout,
                transport=self.transport,
            )
            log.info("jira_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "JiraRestProvider":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    async def get_issue(
        self,
        issue_key: str,
        fields: list[str] | None = None,
        expand: list[str] | None = None,
    ) -> JiraIssue:
        """Fetch an issue with its status."""
        log.debug("get_issue", issue_key=issue_key)

        params: dict[str, str] = {}
        if fields:
            params["fields"] = ",".join(fields)
        if expand:
            params["expand"] = ",".join(expand)

        data = await self._request("GET", f"/issue/{issue_key}", params=params)
        return self._parse_issue(data)

    async def do_transition(self, issue_key: str, transition_id: str) -> None:
        """Apply a workflow transition."""
        log.debug("do_transition", issue_key=issue_key, transition_id=transition_id)
        await self._request(
            "POST",
            f"/issue/{issue_key}/transitions",
            json={"transition": {"id": transition_id}},
        )

    async def get_project_versions(self, project_id_or_key: str) -> list[ReleaseVersion]:
        """List project versions."""
        log.debug("get_project_versions", project=project_id_or_key)
        data = await self._request("GET", f"/project/{project_id_or_key}/versions")
        return [self._parse_version(item) for item in data or []]

    async def create_version(self, name: str, project_id: str, release_date: date) -> ReleaseVersion:
        """Create a project version."""
        log.info("create_version", name=name, project=project_id)
        data = await self._request("POST", "/version", json=self.version_payload(name, project_id, release_date))
        return self._parse_version(data)

    async def edit_issue(self, issue_key: str, fix_version_ids: list[str]) -> None:
        """Replace the fix versions of an issue."""
        log.debug("edit_issue", issue_key=issue_key, fix_versions=fix_version_ids)
        await self._request(
            "PUT",
            f"/issue/{issue_key}",
            json={"fields": {"fixVersions": [{"id": version_id} for version_id in fix_version_ids]}},
        )

    @staticmethod
    def version_payload(name: str, project_id: str, release_date: date) -> dict[str, Any]:
        """Request body for version creation.

        Numeric project ids are sent as ``projectId``, keys as ``project``.
        """
        payload: dict[str, Any] = {"name": name, "releaseDate": release_date.isoformat()}
        if project_id.isdigit():
            payload["projectId"] = int(project_id)
        else:
            payload["project"] = project_id
        return payload

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON body.

        Returns:
            Decoded JSON, or None for empty (204) responses.

        Raises:
            JiraError: On transport errors or non-2xx responses.
        """
        if self._client is None:
            await self.connect()
        assert self._client is not None

        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error(
                "jira_request_failed",
                method=method,
                path=path,
                status_code=e.response.status_code,
            )
            raise JiraError(
                f"Jira {method} {path} failed",
                status_code=e.response.status_code,
                response_text=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            log.error("jira_request_error", method=method, path=path, error=str(e))
            raise JiraError(f"Jira {method} {path} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _parse_issue(self, data: dict[str, Any]) -> JiraIssue:
        fields = data.get("fields") or {}
        status = (fields.get("status") or {}).get("name", "")
        return JiraIssue(
            key=data.get("key", ""),
            status=status,
            transitions=data.get("transitions") or [],
        )

    def _parse_version(self, data: dict[str, Any]) -> ReleaseVersion:
        release_date = data.get("releaseDate")
        return ReleaseVersion(
            id=str(data["id"]),
            name=data.get("name", ""),
            release_date=date.fromisoformat(release_date) if release_date else None,
        )
