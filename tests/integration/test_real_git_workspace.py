"""Integration tests for the workspace check against a real git repository.

These tests run real git so the porcelain status the submit precondition
sees includes every file codereview itself writes.
"""

import shutil
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from codereview.cli.cli import cli
from codereview.cli.commands.submit.errors import DirtyWorkspaceError
from codereview.cli.commands.submit.validation import check_clean_workspace
from codereview.core.context import create_context
from codereview.core.gitops import RealGitOps
from tests.fakes.context import create_test_context

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository with one commit and a non-googlesource origin."""
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    _git(repo_dir, "init", "-b", "main")
    _git(repo_dir, "config", "user.email", "test@example.com")
    _git(repo_dir, "config", "user.name", "Test User")
    (repo_dir / "README.md").write_text("hello\n", encoding="utf-8")
    _git(repo_dir, "add", "README.md")
    _git(repo_dir, "commit", "-m", "Initial commit")
    _git(repo_dir, "remote", "add", "origin", "https://review.example.com/infra/deploy")
    return repo_dir.resolve()


def test_config_set_keeps_workspace_clean(repo: Path) -> None:
    git_ops = RealGitOps()
    ctx = create_test_context(git_ops=git_ops, cwd=repo, with_repo=False)

    runner = CliRunner()
    for key, value in [("gerrit_url", "https://review.example.com"), ("remote", "origin")]:
        result = runner.invoke(cli, ["config", "set", key, value], obj=ctx)
        assert result.exit_code == 0, result.output

    assert (repo / ".git" / "codereview.toml").exists()
    assert git_ops.get_uncommitted_changes(repo).is_clean
    check_clean_workspace(git_ops, repo)


def test_saved_repo_config_is_used_for_discovery(
    repo: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    ctx = create_test_context(git_ops=RealGitOps(), cwd=repo, with_repo=False)
    runner = CliRunner()
    result = runner.invoke(
        cli, ["config", "set", "gerrit_url", "https://review.example.com"], obj=ctx
    )
    assert result.exit_code == 0, result.output

    monkeypatch.chdir(repo)
    real_ctx = create_context(dry_run=False)

    assert real_ctx.repo is not None
    assert real_ctx.repo.gerrit_url == "https://review.example.com"
    assert real_ctx.repo.project == "infra/deploy"


def test_untracked_file_blocks_submit(repo: Path) -> None:
    (repo / "scratch.txt").write_text("notes\n", encoding="utf-8")

    with pytest.raises(DirtyWorkspaceError) as exc_info:
        check_clean_workspace(RealGitOps(), repo)

    assert exc_info.value.unstaged == ["scratch.txt"]


def test_tracked_modifications_block_submit(repo: Path) -> None:
    (repo / "README.md").write_text("changed\n", encoding="utf-8")
    _git(repo, "add", "README.md")
    (repo / "README.md").write_text("changed again\n", encoding="utf-8")

    with pytest.raises(DirtyWorkspaceError) as exc_info:
        check_clean_workspace(RealGitOps(), repo)

    assert exc_info.value.staged == ["README.md"]
    assert exc_info.value.unstaged == ["README.md"]


def test_git_common_dir_is_absolute(repo: Path) -> None:
    assert RealGitOps().get_git_common_dir(repo) == repo / ".git"
