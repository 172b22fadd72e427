"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
codebase more testable and maintainable.

Architecture:
- GitOps: Abstract base class defining the interface
- RealGitOps: Production implementation using git CLI
- DryRunGitOps: Dry-run wrapper that delegates reads, prints write intentions
"""

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from codereview.cli.output import user_output
from codereview.core.subprocess_utils import run_subprocess_with_context

# Separators used in `git log` formats; neither can appear in commit text.
_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"


@dataclass(frozen=True)
class CommitInfo:
    """A local commit as reported by git log."""

    hash: str
    subject: str
    message: str  # Full commit message, including trailers


@dataclass(frozen=True)
class WorkspaceChanges:
    """Files with uncommitted modifications.

    Untracked files count as unstaged: the workspace must be fully clean.
    """

    staged: list[str]
    unstaged: list[str]

    @property
    def is_clean(self) -> bool:
        return not self.staged and not self.unstaged


def parse_porcelain_status(output: str) -> WorkspaceChanges:
    """Parse `git status --porcelain` output into staged and unstaged files."""
    staged: list[str] = []
    unstaged: list[str] = []

    for line in output.splitlines():
        if len(line) < 4:
            continue

        status_code = line[:2]
        filename = line[3:]

        if status_code == "??":
            unstaged.append(filename)
            continue

        if status_code[0] != " ":
            staged.append(filename)
        if status_code[1] != " ":
            unstaged.append(filename)

    return WorkspaceChanges(staged=staged, unstaged=unstaged)


def parse_commit_log(output: str) -> list[CommitInfo]:
    """Parse `git log --format=%H%x00%s%x00%B%x1e` output.

    Records keep the order git printed them in.
    """
    commits: list[CommitInfo] = []
    for record in output.split(_RECORD_SEP):
        record = record.lstrip("\n")
        if not record:
            continue
        parts = record.split(_FIELD_SEP)
        if len(parts) != 3:
            continue
        commit_hash, subject, message = parts
        commits.append(CommitInfo(hash=commit_hash, subject=subject, message=message.strip()))
    return commits


class GitOps(ABC):
    """Abstract interface for git operations.

    All implementations (real, dry-run and fake) must implement this interface.
    """

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path:
        """Get the top-level directory of the repository containing cwd."""
        ...

    @abstractmethod
    def get_git_common_dir(self, repo_root: Path) -> Path:
        """Get the git directory shared by all worktrees of the repository."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch, or None for detached HEAD."""
        ...

    @abstractmethod
    def get_upstream_branch(self, repo_root: Path, branch: str) -> str | None:
        """Get the upstream tracking branch name (e.g. "origin/main").

        Returns None if the branch has no upstream configured.
        """
        ...

    @abstractmethod
    def list_pending_commits(self, repo_root: Path, branch: str, upstream: str) -> list[CommitInfo]:
        """List commits on branch that are not on upstream, oldest first."""
        ...

    @abstractmethod
    def get_uncommitted_changes(self, repo_root: Path) -> WorkspaceChanges:
        """Get staged and unstaged modifications, including untracked files."""
        ...

    @abstractmethod
    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        """Get the fetch URL of a remote, or None if the remote does not exist."""
        ...

    @abstractmethod
    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch remote-tracking refs from remote."""
        ...

    @abstractmethod
    def checkout_and_reset(self, repo_root: Path, branch: str, revision: str) -> None:
        """Check out branch, resetting it to point at revision."""
        ...

    @abstractmethod
    def push_reference(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Push a refspec (e.g. "<hash>:refs/for/main") to remote."""
        ...


class RealGitOps(GitOps):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--show-toplevel"],
            operation_context="find repository root",
            cwd=cwd,
        )
        return Path(result.stdout.strip())

    def get_git_common_dir(self, repo_root: Path) -> Path:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--git-common-dir"],
            operation_context="find git directory",
            cwd=repo_root,
        )
        # Relative to repo_root unless git prints an absolute path.
        return (repo_root / result.stdout.strip()).resolve()

    def get_current_branch(self, cwd: Path) -> str | None:
        result = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def get_upstream_branch(self, repo_root: Path, branch: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "--symbolic-full-name", f"{branch}@{{upstream}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        upstream = result.stdout.strip()
        return upstream or None

    def list_pending_commits(self, repo_root: Path, branch: str, upstream: str) -> list[CommitInfo]:
        result = run_subprocess_with_context(
            [
                "git",
                "log",
                "--reverse",
                "--format=%H%x00%s%x00%B%x1e",
                f"{upstream}..{branch}",
                "--",
            ],
            operation_context=f"list pending commits on {branch}",
            cwd=repo_root,
        )
        return parse_commit_log(result.stdout)

    def get_uncommitted_changes(self, repo_root: Path) -> WorkspaceChanges:
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain"],
            operation_context="get workspace status",
            cwd=repo_root,
        )
        return parse_porcelain_status(result.stdout)

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def fetch(self, repo_root: Path, remote: str) -> None:
        run_subprocess_with_context(
            ["git", "fetch", "-q", remote],
            operation_context=f"fetch from {remote}",
            cwd=repo_root,
        )

    def checkout_and_reset(self, repo_root: Path, branch: str, revision: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", "-q", "-B", branch, revision, "--"],
            operation_context=f"reset branch {branch} to {revision}",
            cwd=repo_root,
        )

    def push_reference(self, repo_root: Path, remote: str, refspec: str) -> None:
        run_subprocess_with_context(
            ["git", "push", "-q", remote, refspec],
            operation_context=f"push {refspec} to {remote}",
            cwd=repo_root,
        )


class DryRunGitOps(GitOps):
    """Wrapper that prints write operations instead of executing them.

    Read-only operations are delegated to the wrapped implementation.
    """

    def __init__(self, wrapped: GitOps) -> None:
        self._wrapped = wrapped

    def get_repository_root(self, cwd: Path) -> Path:
        return self._wrapped.get_repository_root(cwd)

    def get_git_common_dir(self, repo_root: Path) -> Path:
        return self._wrapped.get_git_common_dir(repo_root)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_upstream_branch(self, repo_root: Path, branch: str) -> str | None:
        return self._wrapped.get_upstream_branch(repo_root, branch)

    def list_pending_commits(self, repo_root: Path, branch: str, upstream: str) -> list[CommitInfo]:
        return self._wrapped.list_pending_commits(repo_root, branch, upstream)

    def get_uncommitted_changes(self, repo_root: Path) -> WorkspaceChanges:
        return self._wrapped.get_uncommitted_changes(repo_root)

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._wrapped.get_remote_url(repo_root, remote)

    def fetch(self, repo_root: Path, remote: str) -> None:
        user_output(f"[DRY RUN] Would run: git fetch -q {remote}")

    def checkout_and_reset(self, repo_root: Path, branch: str, revision: str) -> None:
        user_output(f"[DRY RUN] Would run: git checkout -q -B {branch} {revision} --")

    def push_reference(self, repo_root: Path, remote: str, refspec: str) -> None:
        user_output(f"[DRY RUN] Would run: git push -q {remote} {refspec}")
