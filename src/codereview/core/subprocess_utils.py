"""Subprocess execution with enriched error reporting.

Git operations shell out to the git binary. When a command fails, the raw
CalledProcessError says little about what was being attempted, so failures
are re-raised as CommandFailedError carrying the operation context and the
captured output.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandFailedError(RuntimeError):
    """A subprocess exited non-zero or its binary could not be found."""

    def __init__(self, message: str, *, cmd: Sequence[str], returncode: int | None) -> None:
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = returncode


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute subprocess with enriched error reporting.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        cwd: Working directory for command execution

    Returns:
        CompletedProcess instance from subprocess.run()

    Raises:
        CommandFailedError: If the command fails or its binary is not found
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    logger.debug("$ %s (cwd=%s)", cmd_str, cwd)

    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        stdout_stripped = (e.stdout or "").strip()
        if stdout_stripped:
            error_msg += f"\nstdout: {stdout_stripped}"

        stderr_stripped = (e.stderr or "").strip()
        if stderr_stripped:
            error_msg += f"\nstderr: {stderr_stripped}"

        raise CommandFailedError(error_msg, cmd=cmd, returncode=e.returncode) from e
    except FileNotFoundError as e:
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise CommandFailedError(error_msg, cmd=cmd, returncode=None) from e
