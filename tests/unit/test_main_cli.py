"""Unit tests for the ci_actions.main CLI module.

Covers the release, rcedit and unzip commands, exit-code mapping and the
provider lifecycle of run_release.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from ci_actions.exceptions import InputError, TaggingError
from ci_actions.main import cli, run_release
from ci_actions.release.orchestrator import ReleaseReport

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_config():
    """Keep the CLI from reconfiguring structlog during tests."""
    with patch("ci_actions.main.configure_logging") as mock:
        yield mock


@pytest.fixture
def report():
    return ReleaseReport(version="v2.0.0", dry_run=False, issue_keys=["PROJ-1", "PROJ-2"])


# =============================================================================
# release
# =============================================================================


class TestReleaseCommand:
    """Tests for the release command."""

    def test_success(self, cli_runner, release_settings, report):
        with (
            patch("ci_actions.main.ReleaseSettings.from_action_inputs", return_value=release_settings),
            patch("ci_actions.main.run_release", new_callable=AsyncMock, return_value=report) as mock_run,
            patch("ci_actions.main.set_output") as mock_output,
        ):
            result = cli_runner.invoke(cli, ["release"])

        assert result.exit_code == 0, result.output
        mock_run.assert_awaited_once_with(release_settings)
        mock_output.assert_called_once_with("issues", '["PROJ-1", "PROJ-2"]')
        summary = json.loads(result.output.strip().splitlines()[-1])
        assert summary["version"] == "v2.0.0"
        assert summary["issues"] == 2

    def test_dry_run_flag(self, cli_runner, release_settings, report):
        with (
            patch("ci_actions.main.ReleaseSettings.from_action_inputs", return_value=release_settings),
            patch("ci_actions.main.run_release", new_callable=AsyncMock, return_value=report) as mock_run,
            patch("ci_actions.main.set_output"),
        ):
            result = cli_runner.invoke(cli, ["release", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert mock_run.await_args.args[0].dry_run is True

    def test_config_file(self, cli_runner, tmp_path, report):
        config = tmp_path / "release.yaml"
        config.write_text("lockfile_path: build/lockfile.json\ngithub:\n  repository: acme/product\n")

        with (
            patch("ci_actions.main.run_release", new_callable=AsyncMock, return_value=report) as mock_run,
            patch("ci_actions.main.set_output"),
        ):
            result = cli_runner.invoke(cli, ["release", "--config", str(config)])

        assert result.exit_code == 0, result.output
        settings = mock_run.await_args.args[0]
        assert settings.lockfile_path == Path("build/lockfile.json")
        assert settings.owner == "acme"

    def test_input_error_exits_1(self, cli_runner):
        with patch(
            "ci_actions.main.ReleaseSettings.from_action_inputs",
            side_effect=InputError("Input required and not supplied: jira-token", input_name="jira-token"),
        ):
            result = cli_runner.invoke(cli, ["release"])

        assert result.exit_code == 1
        assert "Error: Input required and not supplied: jira-token" in result.output

    def test_release_error_exits_1(self, cli_runner, release_settings):
        with (
            patch("ci_actions.main.ReleaseSettings.from_action_inputs", return_value=release_settings),
            patch("ci_actions.main.run_release", new_callable=AsyncMock, side_effect=TaggingError({"web": "x"})),
        ):
            result = cli_runner.invoke(cli, ["release"])

        assert result.exit_code == 1
        assert "Error: Failed to tag 1 repositories: web" in result.output

    def test_unexpected_error_exits_1(self, cli_runner, release_settings):
        with (
            patch("ci_actions.main.ReleaseSettings.from_action_inputs", return_value=release_settings),
            patch("ci_actions.main.run_release", new_callable=AsyncMock, side_effect=RuntimeError("boom")),
        ):
            result = cli_runner.invoke(cli, ["release"])

        assert result.exit_code == 1
        assert "Unexpected error: boom" in result.output

    def test_logging_options(self, cli_runner, no_logging_config, release_settings, report):
        with (
            patch("ci_actions.main.ReleaseSettings.from_action_inputs", return_value=release_settings),
            patch("ci_actions.main.run_release", new_callable=AsyncMock, return_value=report),
            patch("ci_actions.main.set_output"),
        ):
            cli_runner.invoke(cli, ["--log-level", "DEBUG", "--no-json", "release"])

        no_logging_config.assert_called_once_with("DEBUG", json_output=False)

    @pytest.mark.parametrize(("log_format", "expected"), [("console", False), ("", True), ("json", True)])
    def test_log_format_input(self, cli_runner, no_logging_config, monkeypatch, log_format, expected):
        monkeypatch.setenv("INPUT_LOG-FORMAT", log_format)

        cli_runner.invoke(cli, ["unzip", "--help"])

        no_logging_config.assert_called_once_with("INFO", json_output=expected)


class TestRunRelease:
    """Tests for provider lifecycle in run_release."""

    @pytest.mark.asyncio
    async def test_connects_and_disconnects(self, release_settings, report):
        with (
            patch("ci_actions.main.GitHubRestProvider") as mock_github_class,
            patch("ci_actions.main.JiraRestProvider") as mock_jira_class,
            patch("ci_actions.main.ReleaseOrchestrator") as mock_orchestrator_class,
        ):
            github = mock_github_class.return_value = MagicMock(connect=AsyncMock(), disconnect=AsyncMock())
            jira = mock_jira_class.return_value = MagicMock(connect=AsyncMock(), disconnect=AsyncMock())
            mock_orchestrator_class.return_value.run = AsyncMock(return_value=report)

            assert await run_release(release_settings) is report

        mock_github_class.assert_called_once_with("ghp_test", base_url="https://api.github.com")
        mock_jira_class.assert_called_once_with("https://acme.atlassian.net", "bot@acme.test", "jira-token")
        mock_orchestrator_class.assert_called_once_with(release_settings, host=github, jira=jira)
        github.disconnect.assert_awaited_once()
        jira.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disconnects_on_failure(self, release_settings):
        with (
            patch("ci_actions.main.GitHubRestProvider") as mock_github_class,
            patch("ci_actions.main.JiraRestProvider") as mock_jira_class,
            patch("ci_actions.main.ReleaseOrchestrator") as mock_orchestrator_class,
        ):
            github = mock_github_class.return_value = MagicMock(connect=AsyncMock(), disconnect=AsyncMock())
            jira = mock_jira_class.return_value = MagicMock(connect=AsyncMock(), disconnect=AsyncMock())
            mock_orchestrator_class.return_value.run = AsyncMock(side_effect=TaggingError({"web": "x"}))

            with pytest.raises(TaggingError):
                await run_release(release_settings)

        github.disconnect.assert_awaited_once()
        jira.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_without_jira(self, release_settings, report):
        settings = release_settings.model_copy(update={"jira": None})

        with (
            patch("ci_actions.main.GitHubRestProvider") as mock_github_class,
            patch("ci_actions.main.JiraRestProvider") as mock_jira_class,
            patch("ci_actions.main.ReleaseOrchestrator") as mock_orchestrator_class,
        ):
            mock_github_class.return_value = MagicMock(connect=AsyncMock(), disconnect=AsyncMock())
            mock_orchestrator_class.return_value.run = AsyncMock(return_value=report)

            await run_release(settings)

        mock_jira_class.assert_not_called()
        assert mock_orchestrator_class.call_args.kwargs["jira"] is None


# =============================================================================
# rcedit / unzip
# =============================================================================


class TestRceditCommand:
    def test_success(self, cli_runner):
        with (
            patch("ci_actions.main.ResourceEditSettings.from_action_inputs") as mock_inputs,
            patch(
                "ci_actions.main.edit_resources",
                new_callable=AsyncMock,
                return_value=[Path("a.exe"), Path("b.exe")],
            ) as mock_edit,
        ):
            result = cli_runner.invoke(cli, ["rcedit"])

        assert result.exit_code == 0, result.output
        mock_edit.assert_awaited_once_with(mock_inputs.return_value)
        assert "Edited 2 file(s)" in result.output

    def test_missing_path_input(self, cli_runner, monkeypatch):
        monkeypatch.delenv("INPUT_PATH", raising=False)

        result = cli_runner.invoke(cli, ["rcedit"])

        assert result.exit_code == 1
        assert "Error: Input required and not supplied: path" in result.output


class TestUnzipCommand:
    def test_success(self, cli_runner, tmp_path):
        with patch(
            "ci_actions.main.unzip_all", new_callable=AsyncMock, return_value=[tmp_path / "a.zip"]
        ) as mock_unzip:
            result = cli_runner.invoke(cli, ["unzip", str(tmp_path)])

        assert result.exit_code == 0, result.output
        mock_unzip.assert_awaited_once_with(tmp_path)
        assert "Extracted 1 archive(s)" in result.output

    def test_missing_directory(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["unzip", str(tmp_path / "missing")])

        assert result.exit_code == 2


class TestHelp:
    def test_lists_commands(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("release", "rcedit", "unzip"):
            assert command in result.output
