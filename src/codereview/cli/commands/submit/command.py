"""CLI command entry point for submit."""

import logging

import click

from codereview.cli.commands.submit.errors import SubmitError
from codereview.cli.commands.submit.pipeline import SubmitResult, run_submit
from codereview.cli.ensure import Ensure
from codereview.cli.output import machine_output, user_output
from codereview.core.branch import BranchError, CommitSelectionError, load_branch, select_commit
from codereview.core.context import CodereviewContext, require_repo
from codereview.core.gerrit_ops import GerritError
from codereview.core.remote import ConfigurationError
from codereview.core.subprocess_utils import CommandFailedError

logger = logging.getLogger(__name__)

# Errors reported as a single "Error: ..." line with exit status 1.
_FATAL_ERRORS = (
    SubmitError,
    GerritError,
    ConfigurationError,
    BranchError,
    CommitSelectionError,
    CommandFailedError,
)


def _report_success(result: SubmitResult, branch_name: str) -> None:
    label = f"change {result.change_number}" if result.change_number else result.change_id
    check = click.style("✓", fg="green")
    user_output(f"{check} Submitted {label}")
    if result.merged_revision is not None:
        machine_output(result.merged_revision)

    warning = result.reconcile.warning
    if warning is not None:
        user_output(click.style(warning.message, fg="yellow"))
    elif result.reconcile.reset_to is not None:
        user_output(f"{check} Reset {branch_name} to {result.reconcile.reset_to[:7]}")


@click.command("submit")
@click.argument("commit", required=False, metavar="[COMMIT]")
@click.pass_obj
def submit_cmd(ctx: CodereviewContext, commit: str | None) -> None:
    """Submit the pending commit's Gerrit change and sync the branch.

    COMMIT is the hash (or unique prefix) of the pending commit to submit.
    Without it, the branch must have exactly one pending commit.

    The change must be approved on every required label. If Gerrit does not
    have the commit as the change's current revision it is uploaded first.
    After the merge, a branch whose only pending commit was submitted is
    reset to the merged revision.
    """
    try:
        repo, gerrit_ops = require_repo(ctx)
        branch = load_branch(ctx.git_ops, repo.root, ctx.cwd, repo.remote)
        selected = select_commit(branch, commit)
        logger.debug(
            "Selected %s on %s (pending=%d)", selected.hash, branch.name, len(branch.pending)
        )
        result = run_submit(ctx, repo, gerrit_ops, branch, selected)
    except _FATAL_ERRORS as e:
        logger.debug("Exception caught: %s: %s", type(e).__name__, str(e))
        logger.debug("Exception details:", exc_info=True)
        Ensure.fail(str(e))

    _report_success(result, branch.name)
