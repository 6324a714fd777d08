"""Tests for ci_actions/jira/versions.py - release versions and fix versions."""

from datetime import date

import pytest

from ci_actions.exceptions import ReleaseVersionError
from ci_actions.jira.versions import get_or_create_release_version, release_version_name, update_fix_versions
from ci_actions.models.domain import ReleaseVersion


class TestReleaseVersionName:
    @pytest.mark.parametrize(
        ("version", "expected"),
        [("v1.2.3", "1.2.3"), ("1.2.3", "1.2.3"), ("vv2", "v2"), ("release-1", "release-1")],
    )
    def test_strips_single_leading_v(self, version, expected):
        assert release_version_name(version) == expected


class TestGetOrCreateReleaseVersion:
    """Tests for get_or_create_release_version."""

    @pytest.mark.asyncio
    async def test_reuses_existing(self, fake_jira):
        fake_jira.versions = [ReleaseVersion(id="7", name="1.2.2"), ReleaseVersion(id="8", name="1.2.3")]

        version = await get_or_create_release_version(fake_jira, "10001", "v1.2.3")

        assert version.id == "8"
        assert fake_jira.created_versions == []

    @pytest.mark.asyncio
    async def test_creates_missing_with_today(self, fake_jira):
        version = await get_or_create_release_version(fake_jira, "10001", "v2.0.0", today=date(2024, 3, 1))

        assert version.name == "2.0.0"
        assert fake_jira.created_versions == [("2.0.0", "10001", date(2024, 3, 1))]

    @pytest.mark.asyncio
    async def test_lookup_failure(self, fake_jira):
        fake_jira.fail_versions_lookup = True

        with pytest.raises(ReleaseVersionError, match="Could not connect with project versions") as exc_info:
            await get_or_create_release_version(fake_jira, "10001", "v2.0.0")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_create_failure_includes_payload(self, fake_jira):
        fake_jira.fail_version_create = True

        with pytest.raises(ReleaseVersionError) as exc_info:
            await get_or_create_release_version(fake_jira, "10001", "v2.0.0", today=date(2024, 3, 1))

        error = exc_info.value
        assert error.message.startswith("Could not create new release version in Jira")
        assert "Payload:" in error.message
        assert error.payload == {"name": "2.0.0", "projectId": "10001", "releaseDate": "2024-03-01"}


class TestUpdateFixVersions:
    """Tests for update_fix_versions."""

    @pytest.mark.asyncio
    async def test_sets_version_on_every_issue_in_order(self, fake_jira):
        version = ReleaseVersion(id="8", name="2.0.0")

        outcomes = await update_fix_versions(fake_jira, version, ["PROJ-2", "PROJ-1"])

        assert fake_jira.edit_order == ["PROJ-2", "PROJ-1"]
        assert fake_jira.fix_versions == {"PROJ-2": ["8"], "PROJ-1": ["8"]}
        assert all(o.succeeded for o in outcomes)
        assert [o.version for o in outcomes] == ["2.0.0", "2.0.0"]

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_loop(self, fake_jira):
        fake_jira.failing_edits = {"PROJ-1"}
        version = ReleaseVersion(id="8", name="2.0.0")

        outcomes = await update_fix_versions(fake_jira, version, ["PROJ-1", "PROJ-2"])

        assert fake_jira.edit_order == ["PROJ-1", "PROJ-2"]
        assert [o.succeeded for o in outcomes] == [False, True]
        assert "fixVersions" in outcomes[0].error

    @pytest.mark.asyncio
    async def test_no_issues(self, fake_jira):
        assert await update_fix_versions(fake_jira, ReleaseVersion(id="8", name="2.0.0"), []) == []
