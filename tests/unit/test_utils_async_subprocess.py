"""Tests for ci_actions/utils/async_subprocess.py."""

import sys

import pytest

from ci_actions.exceptions import CommandError
from ci_actions.utils.async_subprocess import exec_command, run_command


class TestRunCommand:
    """Tests for run_command."""

    @pytest.mark.asyncio
    async def test_captures_output_and_code(self):
        stdout, stderr, code = await run_command(
            sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
        )

        assert stdout == "out\n"
        assert stderr == "err\n"
        assert code == 3

    @pytest.mark.asyncio
    async def test_runs_in_cwd(self, tmp_path):
        stdout, _, code = await run_command(sys.executable, "-c", "import os; print(os.getcwd())", cwd=tmp_path)

        assert code == 0
        assert stdout.strip() == str(tmp_path.resolve())

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with pytest.raises(FileNotFoundError):
            await run_command("definitely-not-a-real-binary-xyz")


class TestExecCommand:
    """Tests for exec_command."""

    @pytest.mark.asyncio
    async def test_returns_stdout(self):
        assert await exec_command(sys.executable, "-c", "print('hello')") == "hello\n"

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        with pytest.raises(CommandError) as exc_info:
            await exec_command(
                sys.executable, "-c", "import sys; print('partial'); print('broken', file=sys.stderr); sys.exit(2)"
            )

        error = exc_info.value
        assert error.exit_code == 2
        assert error.message == "Process completed with exit code 2"
        assert error.output == "partial\nbroken"
        assert error.command[0] == sys.executable
