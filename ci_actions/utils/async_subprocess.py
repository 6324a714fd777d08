"""Async subprocess utilities.

Provides non-blocking subprocess execution for the external tools the
actions shell out to (git, 7z, rcedit).

This module offers two functions:
    - run_command: Execute a command with list arguments and return its output
    - exec_command: Run a command silently and fail loudly on non-zero exit

Example:
    >>> from ci_actions.utils.async_subprocess import exec_command
    >>> stdout = await exec_command("git", "describe", "--tags", "--abbrev=0")

Thread Safety:
    These functions are safe to call concurrently from multiple async tasks.
    Each call creates an independent subprocess with no shared state.
"""

import asyncio
from pathlib import Path

import structlog

from ci_actions.exceptions import CommandError

log = structlog.get_logger(__name__)


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
) -> tuple[str, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Command and arguments as separate strings. The first argument
            is the executable, subsequent arguments are passed to it.
        cwd: Working directory for command execution. If None, uses the
            current working directory of the parent process.

    Returns:
        Tuple of (stdout, stderr, return_code) where stdout and stderr are
        decoded UTF-8 strings (with replacement for invalid bytes).

    Raises:
        FileNotFoundError: If the command executable is not found.
        PermissionError: If the executable cannot be executed.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout_bytes, stderr_bytes = await process.communicate()

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")

    return stdout, stderr, process.returncode or 0


async def exec_command(
    command: str,
    *args: str,
    cwd: Path | str | None = None,
) -> str:
    """Run an external tool and return its stdout.

    Output is captured rather than streamed. When the process exits with a
    non-zero code the trimmed stdout and stderr are logged as a single
    warning and a CommandError is raised.

    Args:
        command: Executable to run
        *args: Arguments passed to the executable
        cwd: Working directory for the process

    Returns:
        The captured standard output.

    Raises:
        CommandError: If the process exits with a non-zero code.
    """
    log.debug("exec_command", command=command, args=list(args))
    stdout, stderr, returncode = await run_command(command, *args, cwd=cwd)

    if returncode != 0:
        error = CommandError((command, *args), returncode, stdout, stderr)
        log.warning("command_failed", command=command, exit_code=returncode, output=error.output)
        raise error

    return stdout
