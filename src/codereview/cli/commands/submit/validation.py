"""Pre-submit checks: clean workspace, change status and label approvals."""

import logging
from pathlib import Path

from codereview.cli.commands.submit.errors import (
    AbandonedError,
    AlreadySubmittedError,
    DirtyWorkspaceError,
    MissingApprovalError,
    RejectedError,
    UnexpectedStatusError,
)
from codereview.core.gerrit_ops import GerritChange
from codereview.core.gitops import GitOps

logger = logging.getLogger(__name__)


def check_clean_workspace(git_ops: GitOps, repo_root: Path) -> None:
    """Require no staged or unstaged modifications.

    The final reset of the branch must not destroy or be blocked by
    uncommitted work, so this runs before anything touches Gerrit.

    Raises:
        DirtyWorkspaceError: If any tracked file has uncommitted changes
    """
    changes = git_ops.get_uncommitted_changes(repo_root)
    logger.debug("Workspace: staged=%s, unstaged=%s", changes.staged, changes.unstaged)
    if not changes.is_clean:
        raise DirtyWorkspaceError(changes.staged, changes.unstaged)


def check_change_status(change: GerritChange) -> None:
    """Allow only changes that can still be submitted.

    SUBMITTED means submit was requested before but the merge did not happen
    (often a merge failure). The user may have synced since, so it is treated
    like NEW and the submit is retried.

    Raises:
        AlreadySubmittedError: Change is already MERGED
        AbandonedError: Change is ABANDONED
        UnexpectedStatusError: Any status this tool does not know
    """
    logger.debug("Change %s status: %s", change.change_id, change.raw_status)
    match change.status:
        case "NEW" | "SUBMITTED":
            return
        case "MERGED":
            raise AlreadySubmittedError()
        case "ABANDONED":
            raise AbandonedError()
        case _:
            raise UnexpectedStatusError(change.raw_status)


def check_label_approvals(change: GerritChange) -> None:
    """Require every non-optional label to be approved and not rejected.

    Gerrit enforces the same rules on submit; checking here fails fast with
    a message naming the label. Labels are visited in name order and the
    first failing one is reported. A rejection wins over an approval on the
    same label.

    Raises:
        RejectedError: A non-optional label carries a rejection
        MissingApprovalError: A non-optional label carries no approval
    """
    for name in change.label_names():
        label = change.labels[name]
        if label.optional:
            continue
        if label.is_rejected:
            raise RejectedError(name)
        if not label.is_approved:
            raise MissingApprovalError(name)


def check_submittable(change: GerritChange) -> None:
    """Status triage followed by label approval checks."""
    check_change_status(change)
    check_label_approvals(change)
