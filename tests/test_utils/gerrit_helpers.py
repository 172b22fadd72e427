"""Test utilities for building Gerrit changes and local commits."""

from codereview.core.gerrit_ops import GerritChange, Label, classify_status
from codereview.core.gitops import CommitInfo

COMMIT_HASH = "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"
OTHER_HASH = "ffeeddccbbaa99887766554433221100ffeeddcc"
MERGED_HASH = "0123456789abcdef0123456789abcdef01234567"
CHANGE_ID = "I8473b95934b5732ac55d26311a706c9c2bde9940"
FULL_CHANGE_ID = f"tools~main~{CHANGE_ID}"


def approved_label(name: str = "Code-Review") -> Label:
    return Label(name=name, optional=False, approved_by="Reviewer", rejected_by=None)


def unapproved_label(name: str = "Code-Review") -> Label:
    return Label(name=name, optional=False, approved_by=None, rejected_by=None)


def rejected_label(name: str = "Code-Review", *, also_approved: bool = False) -> Label:
    return Label(
        name=name,
        optional=False,
        approved_by="Reviewer" if also_approved else None,
        rejected_by="Objector",
    )


def optional_label(name: str = "Hold") -> Label:
    return Label(name=name, optional=True, approved_by=None, rejected_by=None)


def make_change(
    status: str = "NEW",
    *,
    revision: str | None = COMMIT_HASH,
    mergeable: bool = True,
    labels: list[Label] | None = None,
    number: int | None = 12345,
) -> GerritChange:
    """Factory for GerritChange with sensible defaults.

    By default the change is NEW, mergeable, has COMMIT_HASH as its current
    revision and a single approved Code-Review label.
    """
    if labels is None:
        labels = [approved_label()]
    return GerritChange(
        change_id=FULL_CHANGE_ID,
        number=number,
        status=classify_status(status),
        raw_status=status,
        current_revision=revision,
        mergeable=mergeable,
        labels={label.name: label for label in labels},
    )


def make_commit(
    commit_hash: str = COMMIT_HASH,
    *,
    subject: str = "internal/lsp: fix hover",
    change_id: str | None = CHANGE_ID,
) -> CommitInfo:
    message = f"{subject}\n\nLonger description.\n"
    if change_id is not None:
        message += f"\nChange-Id: {change_id}"
    return CommitInfo(hash=commit_hash, subject=subject, message=message.strip())
