"""Tests for subprocess wrapper with rich error context."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from codereview.core.subprocess_utils import CommandFailedError, run_subprocess_with_context


def test_success_case_returns_completed_process() -> None:
    with patch("codereview.core.subprocess_utils.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "main\n"
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "branch", "--show-current"],
            operation_context="get current branch",
            cwd=Path("/repo"),
        )

        assert result == mock_result
        mock_run.assert_called_once_with(
            ["git", "branch", "--show-current"],
            cwd=Path("/repo"),
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )


def test_failure_includes_command_exit_code_and_stderr() -> None:
    with patch("codereview.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1,
            cmd=["git", "push", "origin", "abc:refs/for/main"],
            stderr="! [remote rejected] (no new changes)\n",
        )

        with pytest.raises(CommandFailedError) as exc_info:
            run_subprocess_with_context(
                ["git", "push", "origin", "abc:refs/for/main"],
                operation_context="push abc:refs/for/main to origin",
                cwd=Path("/repo"),
            )

    error = exc_info.value
    assert error.returncode == 1
    assert error.cmd == ["git", "push", "origin", "abc:refs/for/main"]
    message = str(error)
    assert "Failed to push abc:refs/for/main to origin" in message
    assert "Command: git push origin abc:refs/for/main" in message
    assert "Exit code: 1" in message
    assert "stderr: ! [remote rejected] (no new changes)" in message
    assert isinstance(error.__cause__, subprocess.CalledProcessError)


def test_missing_binary_is_reported() -> None:
    with patch("codereview.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError("git")

        with pytest.raises(CommandFailedError) as exc_info:
            run_subprocess_with_context(["git", "status"], operation_context="check status")

    assert exc_info.value.returncode is None
    assert "Command not found while trying to check status: git" in str(exc_info.value)


def test_command_failure_is_a_runtime_error() -> None:
    assert issubclass(CommandFailedError, RuntimeError)
