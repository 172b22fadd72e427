"""Tests for the dry-run wrappers around git and Gerrit writes."""

from pathlib import Path

import pytest

from codereview.core.gerrit_ops import DryRunGerritOps
from codereview.core.gitops import DryRunGitOps
from tests.fakes.gerrit_ops import FakeGerritOps
from tests.fakes.git_ops import FakeGitOps
from tests.test_utils.gerrit_helpers import FULL_CHANGE_ID, make_change, make_commit

REPO_ROOT = Path("/repo")


def test_git_reads_are_delegated() -> None:
    commit = make_commit()
    dry_run = DryRunGitOps(FakeGitOps(pending_commits={"feature": [commit]}))

    assert dry_run.get_current_branch(REPO_ROOT) == "feature"
    assert dry_run.get_upstream_branch(REPO_ROOT, "feature") == "origin/main"
    assert dry_run.list_pending_commits(REPO_ROOT, "feature", "origin/main") == [commit]
    assert dry_run.get_git_common_dir(REPO_ROOT) == REPO_ROOT / ".git"


def test_git_writes_are_printed(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGitOps()
    dry_run = DryRunGitOps(fake)

    dry_run.fetch(REPO_ROOT, "origin")
    dry_run.push_reference(REPO_ROOT, "origin", "abc:refs/for/main")
    dry_run.checkout_and_reset(REPO_ROOT, "feature", "def")

    err = capsys.readouterr().err
    assert "[DRY RUN] Would run: git fetch -q origin" in err
    assert "[DRY RUN] Would run: git push -q origin abc:refs/for/main" in err
    assert "[DRY RUN] Would run: git checkout -q -B feature def --" in err
    assert fake.fetched_remotes == []
    assert fake.pushed_refs == []
    assert fake.checkouts == []


def test_gerrit_submit_is_printed(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGerritOps(change_responses=[make_change()])
    dry_run = DryRunGerritOps(fake)

    assert dry_run.get_change(FULL_CHANGE_ID).status == "NEW"
    dry_run.submit(FULL_CHANGE_ID)

    assert f"[DRY RUN] Would submit change {FULL_CHANGE_ID}" in capsys.readouterr().err
    assert fake.submit_calls == []
