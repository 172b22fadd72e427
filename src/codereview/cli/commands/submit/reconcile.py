"""Bring the local branch in line with what Gerrit merged.

Runs only after the change is confirmed MERGED. Nothing here can turn the
submit into a failure: problems become a ReconcileWarning for the user.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from codereview.cli.commands.submit.errors import SYNC_HINT, ReconcileWarning
from codereview.core.branch import Branch
from codereview.core.gitops import GitOps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling the local branch."""

    reset_to: str | None  # Revision the branch now points at, None if left alone
    warning: ReconcileWarning | None


def _sync_failed_warning(branch: Branch, detail: str) -> ReconcileWarning:
    return ReconcileWarning(
        "submit succeeded, but cannot sync local branch"
        f" ({detail})\n"
        f"\trun '{SYNC_HINT}' to sync, or\n"
        f"\trun 'git checkout --detach {branch.upstream}; git branch -D {branch.name}'"
        " to discard local branch"
    )


def reconcile_branch(
    git_ops: GitOps,
    repo_root: Path,
    branch: Branch,
    merged_revision: str | None,
) -> ReconcileResult:
    """Reset the branch to the merged revision when that is unambiguous.

    After fetching, a branch whose only pending commit (as loaded before
    the submit) is the one just submitted is moved to Gerrit's merged
    revision. With more pending commits the branch is left as is; collapsing
    them safely is the job of a full sync.
    """
    try:
        git_ops.fetch(repo_root, branch.remote)
    except RuntimeError as e:
        logger.debug("Fetch after merge failed: %s", e)
        return ReconcileResult(reset_to=None, warning=_sync_failed_warning(branch, "fetch failed"))

    logger.debug("Pending commits on %s: %d", branch.name, len(branch.pending))

    if len(branch.pending) != 1:
        return ReconcileResult(
            reset_to=None,
            warning=ReconcileWarning(f"submit succeeded; run '{SYNC_HINT}' to sync"),
        )

    if merged_revision is None:
        return ReconcileResult(
            reset_to=None,
            warning=_sync_failed_warning(branch, "Gerrit did not report the merged revision"),
        )

    try:
        git_ops.checkout_and_reset(repo_root, branch.name, merged_revision)
    except RuntimeError as e:
        logger.debug("Reset to %s failed: %s", merged_revision, e)
        return ReconcileResult(reset_to=None, warning=_sync_failed_warning(branch, "reset failed"))

    return ReconcileResult(reset_to=merged_revision, warning=None)
