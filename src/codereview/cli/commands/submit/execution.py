"""Submit request and the merge-wait polling loop.

Gerrit's wait_for_merge does not always mean the change is merged when the
submit call returns. It is common to see SUBMITTED for a moment afterwards:
the change was queued, but the first merge attempt failed on a spurious
condition and is retried on the server. The status usually flips to MERGED
shortly after, so the change is polled a bounded number of times with
exponentially growing sleeps before giving up.
"""

import logging

from codereview.cli.commands.submit.errors import (
    PollError,
    SubmitRejectedError,
    SubmitTimeoutError,
    UnexpectedPostSubmitStatusError,
)
from codereview.core.gerrit_ops import GerritChange, GerritError, GerritOps
from codereview.core.time import Time

logger = logging.getLogger(__name__)

# Longest single sleep; it is also the last one.
MAX_WAIT_SECONDS = 2.0
# Number of poll attempts after the submit request.
POLL_STEPS = 6


def merge_wait_delays(max_wait: float = MAX_WAIT_SECONDS, steps: int = POLL_STEPS) -> list[float]:
    """Sleep before each poll attempt: max_wait * 2**i / 2**steps for i in 1..steps.

    With the defaults the sleeps are 1/16s, 1/8s, ... 2s, under 4s in total.
    """
    return [max_wait * (1 << i) / (1 << steps) for i in range(1, steps + 1)]


def submit_change(gerrit_ops: GerritOps, change_id: str) -> None:
    """Ask Gerrit to submit the change and wait for the merge where it can.

    Not retried: whether a failed submit had any effect is for the user to check.

    Raises:
        SubmitRejectedError: If Gerrit refuses the submit or the request fails
    """
    logger.debug("Submitting %s", change_id)
    try:
        gerrit_ops.submit(change_id, wait_for_merge=True)
    except GerritError as e:
        raise SubmitRejectedError(str(e)) from e


def wait_for_merge(
    gerrit_ops: GerritOps,
    time: Time,
    change_id: str,
    *,
    delays: list[float] | None = None,
) -> GerritChange:
    """Poll the change until it leaves SUBMITTED or the attempts run out.

    Each attempt sleeps, then fetches the change. Any status other than
    SUBMITTED ends the loop early; only MERGED counts as success.

    Returns:
        The MERGED change

    Raises:
        PollError: If fetching the change fails
        SubmitTimeoutError: If the change is still SUBMITTED after the last attempt
        UnexpectedPostSubmitStatusError: If the change ends in any other status
    """
    if delays is None:
        delays = merge_wait_delays()

    change: GerritChange | None = None
    attempts = 0
    for delay in delays:
        time.sleep(delay)
        attempts += 1
        try:
            change = gerrit_ops.get_change(change_id)
        except GerritError as e:
            raise PollError(str(e)) from e
        logger.debug("Poll %d/%d: status=%s", attempts, len(delays), change.raw_status)
        if change.status != "SUBMITTED":
            break

    if change is None:
        raise SubmitTimeoutError(attempts)

    match change.status:
        case "MERGED":
            return change
        case "SUBMITTED":
            raise SubmitTimeoutError(attempts)
        case _:
            raise UnexpectedPostSubmitStatusError(change.raw_status)
