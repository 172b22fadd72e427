"""Linear submit pipeline.

clean workspace -> fetch change -> status and approval checks -> upload if
needed -> mergeability check -> submit -> wait for merge -> reconcile.

Any step may raise a SubmitError (or let a GerritError / git failure
propagate), which aborts the run. Nothing local is modified before the merge
is confirmed, so there is nothing to roll back.
"""

import logging
from dataclasses import dataclass

from codereview.cli.commands.submit.errors import StoppedBeforeSubmitError
from codereview.cli.commands.submit.execution import submit_change, wait_for_merge
from codereview.cli.commands.submit.reconcile import ReconcileResult, reconcile_branch
from codereview.cli.commands.submit.upload import check_mergeable, ensure_revision_uploaded
from codereview.cli.commands.submit.validation import check_clean_workspace, check_submittable
from codereview.core.branch import Branch, PendingCommit
from codereview.core.context import CodereviewContext, RepoContext
from codereview.core.gerrit_ops import GerritOps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    """A successfully merged change and what happened to the local branch."""

    change_id: str
    change_number: int | None
    merged_revision: str | None
    reconcile: ReconcileResult


def run_submit(
    ctx: CodereviewContext,
    repo: RepoContext,
    gerrit_ops: GerritOps,
    branch: Branch,
    commit: PendingCommit,
) -> SubmitResult:
    """Submit commit's Gerrit change and sync the branch to the merge result.

    Raises:
        SubmitError: Any fatal pre- or post-submit condition
        GerritError: Fetching the change failed before the submit request
    """
    check_clean_workspace(ctx.git_ops, repo.root)

    change_id = branch.full_change_id(repo.project, commit)
    logger.debug("Submitting commit %s as %s", commit.hash, change_id)

    change = gerrit_ops.get_change(change_id)
    check_submittable(change)

    change = ensure_revision_uploaded(
        ctx.git_ops, gerrit_ops, repo.root, branch, commit, change_id, change
    )
    check_mergeable(change)

    if ctx.dry_run:
        raise StoppedBeforeSubmitError()

    submit_change(gerrit_ops, change_id)
    merged = wait_for_merge(gerrit_ops, ctx.time, change_id)
    logger.debug("Change %s merged at %s", change_id, merged.current_revision)

    reconcile = reconcile_branch(ctx.git_ops, repo.root, branch, merged.current_revision)
    return SubmitResult(
        change_id=change_id,
        change_number=merged.number,
        merged_revision=merged.current_revision,
        reconcile=reconcile,
    )
