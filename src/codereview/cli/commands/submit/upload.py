"""Upload the commit being submitted if Gerrit does not have it yet."""

import logging
from pathlib import Path

from codereview.cli.commands.submit.errors import NotMergeableError
from codereview.cli.output import user_output
from codereview.core.branch import Branch, PendingCommit
from codereview.core.gerrit_ops import GerritChange, GerritOps
from codereview.core.gitops import GitOps

logger = logging.getLogger(__name__)


def ensure_revision_uploaded(
    git_ops: GitOps,
    gerrit_ops: GerritOps,
    repo_root: Path,
    branch: Branch,
    commit: PendingCommit,
    change_id: str,
    change: GerritChange,
) -> GerritChange:
    """Push commit for review unless it already is the change's current revision.

    After a push the change is fetched again: the new patch set changes the
    current revision and Gerrit recomputes mergeability for it.

    Returns:
        The change as it stands after the upload (the input change if no push happened)
    """
    if commit.hash == change.current_revision:
        logger.debug("Revision %s already on Gerrit; skipping push", commit.hash)
        return change

    push_spec = branch.push_spec(commit)
    user_output(f"Uploading {commit.short_hash} to {branch.remote} ({push_spec})")
    git_ops.push_reference(repo_root, branch.remote, push_spec)

    return gerrit_ops.get_change(change_id)


def check_mergeable(change: GerritChange) -> None:
    """Stop if Gerrit cannot merge the change without a manual rebase.

    Raises:
        NotMergeableError: If Gerrit reports the change as not mergeable
    """
    if not change.mergeable:
        raise NotMergeableError()
