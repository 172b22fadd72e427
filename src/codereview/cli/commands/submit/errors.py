"""Errors raised while submitting a change.

Every error here is fatal to the invocation: the submit stops where it is,
nothing local has been modified yet, and the message is shown to the user.
ReconcileWarning is the exception to the rule: it is a value returned after a
successful merge, never raised.
"""

from dataclasses import dataclass

# Suggested to the user whenever the local branch needs manual syncing.
SYNC_HINT = "git pull --rebase"


class SubmitError(Exception):
    """Base class for fatal submit errors."""


class DirtyWorkspaceError(SubmitError):
    def __init__(self, staged: list[str], unstaged: list[str]) -> None:
        self.staged = staged
        self.unstaged = unstaged
        lines = ["cannot submit: uncommitted changes in workspace"]
        lines.extend(f"\t{path} (staged)" for path in staged)
        lines.extend(f"\t{path} (unstaged)" for path in unstaged)
        super().__init__("\n".join(lines))


class UnexpectedStatusError(SubmitError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"cannot submit: unexpected Gerrit change status {status!r}")


class AlreadySubmittedError(SubmitError):
    def __init__(self) -> None:
        super().__init__(f"cannot submit: change already submitted, run '{SYNC_HINT}'")


class AbandonedError(SubmitError):
    def __init__(self) -> None:
        super().__init__("cannot submit: change abandoned")


class RejectedError(SubmitError):
    def __init__(self, label_name: str) -> None:
        self.label_name = label_name
        super().__init__(f"cannot submit: change has {label_name} rejection")


class MissingApprovalError(SubmitError):
    def __init__(self, label_name: str) -> None:
        self.label_name = label_name
        super().__init__(f"cannot submit: change missing {label_name} approval")


class NotMergeableError(SubmitError):
    def __init__(self) -> None:
        super().__init__(
            f"cannot submit: conflicting changes submitted, run '{SYNC_HINT}' and try again"
        )


class StoppedBeforeSubmitError(SubmitError):
    """Dry run reached the point where the submit request would be sent."""

    def __init__(self) -> None:
        super().__init__("stopped before submit")


class SubmitRejectedError(SubmitError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"cannot submit: {detail}")


class PollError(SubmitError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"waiting for merge: {detail}")


class SubmitTimeoutError(SubmitError):
    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            "cannot submit: timed out waiting for change to be submitted by Gerrit; "
            f"it may still merge, run '{SYNC_HINT}' later"
        )


class UnexpectedPostSubmitStatusError(SubmitError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"submit error: unexpected post-submit Gerrit change status {status!r}")


@dataclass(frozen=True)
class ReconcileWarning:
    """The merge succeeded but the local branch was not updated automatically."""

    message: str
