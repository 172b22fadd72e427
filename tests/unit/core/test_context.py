"""Tests for repository discovery and require_repo()."""

from pathlib import Path

import pytest

from codereview.core.context import discover_repo, require_repo
from codereview.core.remote import ConfigurationError
from codereview.core.repo_config import RepoConfig
from tests.fakes.context import create_test_context
from tests.fakes.git_ops import FakeGitOps

REPO_ROOT = Path("/repo")


def test_discover_googlesource_repo() -> None:
    repo = discover_repo(FakeGitOps(), RepoConfig(), REPO_ROOT)

    assert repo.root == REPO_ROOT
    assert repo.remote == "origin"
    assert repo.project == "tools"
    assert repo.gerrit_url == "https://go-review.googlesource.com"


def test_discover_uses_configured_remote_and_url() -> None:
    git_ops = FakeGitOps(remote_urls={"gerrit": "ssh://review.example.com:29418/infra/deploy"})
    config = RepoConfig(gerrit_url="https://review.example.com/", remote="gerrit")

    repo = discover_repo(git_ops, config, REPO_ROOT)

    assert repo.remote == "gerrit"
    assert repo.project == "infra/deploy"
    assert repo.gerrit_url == "https://review.example.com"


def test_discover_missing_remote() -> None:
    with pytest.raises(ConfigurationError, match="'origin' is not configured"):
        discover_repo(FakeGitOps(remote_urls={}), RepoConfig(), REPO_ROOT)


def test_discover_unknown_host_needs_configuration() -> None:
    git_ops = FakeGitOps(remote_urls={"origin": "git@github.com:golang/tools.git"})

    with pytest.raises(ConfigurationError, match="gerrit_url"):
        discover_repo(git_ops, RepoConfig(), REPO_ROOT)


def test_require_repo_returns_resolved_repo() -> None:
    ctx = create_test_context()

    repo, gerrit_ops = require_repo(ctx)

    assert repo is ctx.repo
    assert gerrit_ops is ctx.gerrit_ops


def test_require_repo_outside_git_repository() -> None:
    ctx = create_test_context(git_ops=FakeGitOps(repository_root=None), with_repo=False)

    with pytest.raises(ConfigurationError, match="not in a git repository"):
        require_repo(ctx)


def test_require_repo_reports_discovery_problem() -> None:
    git_ops = FakeGitOps(remote_urls={"origin": "https://github.com/golang/tools"})
    ctx = create_test_context(git_ops=git_ops, with_repo=False)

    with pytest.raises(ConfigurationError, match="gerrit_url"):
        require_repo(ctx)
