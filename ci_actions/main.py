"""CLI entry point for the CI actions."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click
import structlog

from ci_actions.config.settings import ReleaseSettings, ResourceEditSettings
from ci_actions.exceptions import CIActionsError
from ci_actions.providers.github_rest import GitHubRestProvider
from ci_actions.providers.jira_rest import JiraRestProvider
from ci_actions.rcedit.editor import edit_resources
from ci_actions.release.orchestrator import ReleaseOrchestrator, ReleaseReport
from ci_actions.utils.archives import unzip_all
from ci_actions.utils.inputs import get_input, set_output
from ci_actions.utils.logging_config import bind_run_context, configure_logging

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _execute(command: str, func: Callable[[], Awaitable[T]]) -> T:
    """Run an action coroutine, mapping failures to exit codes.

    Toolkit errors exit 1 with their message, Ctrl-C exits 130 and anything
    else is logged with its traceback and exits 1.
    """
    bind_run_context(command)
    try:
        return asyncio.run(func())
    except CIActionsError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug(f"{command}_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error(f"{command}_unexpected", exc_info=True)
        sys.exit(1)


@click.group()
@click.option("--log-level", default="INFO", help="Logging level")
@click.option(
    "--json/--no-json",
    "json_output",
    default=None,
    help="Emit JSON log lines (default unless the log-format input is \"console\")",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, json_output: bool | None) -> None:
    """ci-actions: release, resource editing and archive helpers for CI pipelines."""
    if json_output is None:
        json_output = get_input("log-format") != "console"
    configure_logging(log_level, json_output=json_output)
    ctx.ensure_object(dict)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file (defaults to GitHub Actions inputs)",
)
@click.option("--dry-run", is_flag=True, default=None, help="Compute and log, but mutate nothing")
def release(config_path: Path | None, dry_run: bool | None) -> None:
    """Tag the release and update the Jira issues it contains."""

    async def _release() -> ReleaseReport:
        settings = ReleaseSettings.from_yaml(config_path) if config_path else ReleaseSettings.from_action_inputs()
        if dry_run:
            settings = settings.model_copy(update={"dry_run": True})
        report = await run_release(settings)
        set_output("issues", json.dumps(report.issue_keys))
        return report

    report = _execute("release", _release)
    click.echo(json.dumps(report.summary()))


async def run_release(settings: ReleaseSettings) -> ReleaseReport:
    """Connect the providers described by ``settings`` and run the release."""
    github = GitHubRestProvider(settings.github.token.get_secret_value(), base_url=settings.github.api_url)
    jira: JiraRestProvider | None = None
    if settings.jira is not None:
        jira = JiraRestProvider(
            settings.jira.base_url,
            settings.jira.username,
            settings.jira.token.get_secret_value(),
        )

    await github.connect()
    try:
        if jira is not None:
            await jira.connect()
        return await ReleaseOrchestrator(settings, host=github, jira=jira).run()
    finally:
        if jira is not None:
            await jira.disconnect()
        await github.disconnect()


@cli.command()
def rcedit() -> None:
    """Edit Windows resources of the executables matched by the path input."""

    async def _rcedit() -> list[Path]:
        settings = ResourceEditSettings.from_action_inputs()
        return await edit_resources(settings)

    paths = _execute("rcedit", _rcedit)
    click.echo(f"Edited {len(paths)} file(s)")


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
def unzip(path: Path) -> None:
    """Extract every zip archive below PATH in place."""

    async def _unzip() -> list[Path]:
        return await unzip_all(path)

    archives = _execute("unzip", _unzip)
    click.echo(f"Extracted {len(archives)} archive(s)")


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
