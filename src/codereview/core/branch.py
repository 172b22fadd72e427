"""Local branch and pending-commit model.

A branch tracks an upstream branch on the Gerrit remote. Its pending commits
are the local commits not yet on the upstream, each of which maps to a Gerrit
change through the Change-Id trailer in its message.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from codereview.core.gitops import CommitInfo, GitOps

_CHANGE_ID_TRAILER = re.compile(r"^Change-Id:\s*(I[0-9a-fA-F]{8,})\s*$", re.MULTILINE)


class BranchError(Exception):
    """The local branch is not in a state that can be submitted from."""


class CommitSelectionError(Exception):
    """The commit to submit could not be determined unambiguously."""


@dataclass(frozen=True)
class PendingCommit:
    """A local commit waiting to be merged upstream."""

    hash: str
    subject: str
    message: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def change_id(self) -> str | None:
        """The Change-Id trailer value, or None if the message has none.

        When several trailers are present the last one wins, as in Gerrit.
        """
        matches = _CHANGE_ID_TRAILER.findall(self.message)
        if not matches:
            return None
        return matches[-1]

    @classmethod
    def from_commit_info(cls, info: CommitInfo) -> "PendingCommit":
        return cls(hash=info.hash, subject=info.subject, message=info.message)


@dataclass(frozen=True)
class Branch:
    """A local branch with its upstream and pending commits (oldest first)."""

    name: str
    remote: str
    upstream: str  # Remote-tracking ref, e.g. "origin/main"
    pending: list[PendingCommit]

    @property
    def upstream_branch(self) -> str:
        """Upstream branch name on the remote, e.g. "main" for "origin/main"."""
        prefix = self.remote + "/"
        if self.upstream.startswith(prefix):
            return self.upstream[len(prefix) :]
        return self.upstream

    def push_spec(self, commit: PendingCommit) -> str:
        """Refspec that uploads commit to Gerrit for review on the upstream branch."""
        return f"{commit.hash}:refs/for/{self.upstream_branch}"

    def full_change_id(self, project: str, commit: PendingCommit) -> str:
        """Gerrit's "project~branch~Change-Id" identifier for commit."""
        change_id = commit.change_id
        if change_id is None:
            raise CommitSelectionError(
                f"commit {commit.short_hash} has no Change-Id line; cannot find its Gerrit change"
            )
        return f"{project}~{self.upstream_branch}~{change_id}"


def load_branch(git_ops: GitOps, repo_root: Path, cwd: Path, remote: str) -> Branch:
    """Load the checked-out branch and its pending commits.

    Raises:
        BranchError: On detached HEAD or when the branch has no upstream
    """
    name = git_ops.get_current_branch(cwd)
    if name is None:
        raise BranchError("not on a branch (detached HEAD)")

    upstream = git_ops.get_upstream_branch(repo_root, name)
    if upstream is None:
        raise BranchError(f"branch {name} has no upstream; set one with 'git branch -u'")

    commits = git_ops.list_pending_commits(repo_root, name, upstream)
    return Branch(
        name=name,
        remote=remote,
        upstream=upstream,
        pending=[PendingCommit.from_commit_info(c) for c in commits],
    )


def select_commit(branch: Branch, commit_ref: str | None) -> PendingCommit:
    """Choose the pending commit to submit.

    With commit_ref, it must be a full hash or unique hash prefix of a pending
    commit. Without it, the branch must have exactly one pending commit.

    Raises:
        CommitSelectionError: If no single commit can be chosen
    """
    if commit_ref is not None:
        matches = [c for c in branch.pending if c.hash.startswith(commit_ref.lower())]
        if not matches:
            raise CommitSelectionError(
                f"cannot submit: commit {commit_ref} is not pending on branch {branch.name}"
            )
        if len(matches) > 1:
            raise CommitSelectionError(
                f"cannot submit: commit prefix {commit_ref} is ambiguous on branch {branch.name}"
            )
        return matches[0]

    if not branch.pending:
        raise CommitSelectionError(f"cannot submit: no pending commits on branch {branch.name}")
    if len(branch.pending) > 1:
        listing = "\n".join(f"\t{c.short_hash} {c.subject}" for c in branch.pending)
        raise CommitSelectionError(
            f"cannot submit: multiple pending commits on branch {branch.name}; "
            f"name the commit to submit:\n{listing}"
        )
    return branch.pending[0]
