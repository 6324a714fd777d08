"""Local git operations used by the release action.

All commands run through exec_command in the current working directory (or
``cwd``); failures are re-raised as GitOperationError with the git output.
"""

from pathlib import Path

import structlog

from ci_actions.exceptions import CommandError, GitOperationError
from ci_actions.utils.async_subprocess import exec_command

log = structlog.get_logger(__name__)


async def _git(*args: str, cwd: Path | str | None = None) -> str:
    try:
        return await exec_command("git", *args, cwd=cwd)
    except CommandError as e:
        detail = e.output or e.message
        raise GitOperationError(f"git {' '.join(args)} failed: {detail}") from e


async def git_tag(version: str, cwd: Path | str | None = None) -> None:
    """Create a lightweight tag on HEAD."""
    await _git("tag", version, cwd=cwd)
    log.info("git_tagged", tag=version)


async def git_push_tags(cwd: Path | str | None = None) -> None:
    """Push all local tags to the default remote."""
    await _git("push", "--tags", cwd=cwd)
    log.info("git_tags_pushed")


async def get_latest_version(cwd: Path | str | None = None) -> str:
    """Most recent tag reachable from HEAD."""
    output = await _git("describe", "--tags", "--abbrev=0", cwd=cwd)
    return output.strip()


async def read_file_at_ref(ref: str, path: Path | str, cwd: Path | str | None = None) -> str:
    """Contents of ``path`` as it was at ``ref``.

    A relative ``path`` is taken relative to ``cwd`` (the process working
    directory when None). An absolute ``path`` must lie inside the repository and
    is mapped onto the repository root.

    Raises:
        GitOperationError: If ``path`` is outside the repository or git fails.
    """
    return await _git("show", f"{ref}:{await _object_path(Path(path), cwd)}", cwd=cwd)


async def _object_path(path: Path, cwd: Path | str | None) -> str:
    if not path.is_absolute():
        relative = path.as_posix()
        # git resolves "./" and "../" prefixes against its working directory
        return relative if relative.startswith("../") else f"./{relative}"

    toplevel = Path((await _git("rev-parse", "--show-toplevel", cwd=cwd)).strip())
    try:
        return path.resolve().relative_to(toplevel.resolve()).as_posix()
    except ValueError as e:
        raise GitOperationError(f"{path} is outside the repository {toplevel}") from e
