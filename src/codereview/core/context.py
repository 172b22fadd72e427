"""Application context with dependency injection."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from codereview.core.gerrit_ops import (
    DryRunGerritOps,
    GerritOps,
    RealGerritOps,
    resolve_gerrit_auth,
)
from codereview.core.gitops import DryRunGitOps, GitOps, RealGitOps
from codereview.core.global_config import (
    GlobalConfig,
    GlobalConfigNotFound,
    global_config_exists,
    load_global_config,
)
from codereview.core.remote import ConfigurationError, derive_gerrit_url, parse_remote_url
from codereview.core.repo_config import RepoConfig, load_repo_config
from codereview.core.time import RealTime, Time

logger = logging.getLogger(__name__)

GERRIT_USER_ENV = "CODEREVIEW_GERRIT_USER"
GERRIT_PASSWORD_ENV = "CODEREVIEW_GERRIT_PASSWORD"


@dataclass(frozen=True)
class RepoContext:
    """The repository a command operates on."""

    root: Path
    remote: str
    project: str  # Gerrit project name derived from the remote URL
    gerrit_url: str


@dataclass(frozen=True)
class CodereviewContext:
    """Immutable context holding all dependencies for codereview operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    repo and gerrit_ops are None unless the Gerrit server for the current
    repository could be determined; commands that need them call
    require_repo() first.
    """

    git_ops: GitOps
    gerrit_ops: GerritOps | None
    time: Time
    cwd: Path  # Current working directory at CLI invocation
    global_config: GlobalConfig | GlobalConfigNotFound
    repo_config: RepoConfig
    repo: RepoContext | None
    dry_run: bool


def _credentials(
    global_config: GlobalConfig | GlobalConfigNotFound,
) -> tuple[str | None, str | None]:
    user: str | None = None
    password: str | None = None
    if isinstance(global_config, GlobalConfig):
        user = global_config.gerrit_user
        password = global_config.gerrit_password
    return os.environ.get(GERRIT_USER_ENV) or user, os.environ.get(GERRIT_PASSWORD_ENV) or password


def discover_repo(git_ops: GitOps, repo_config: RepoConfig, repo_root: Path) -> RepoContext:
    """Resolve the remote, Gerrit project and Gerrit server for a repository.

    Raises:
        ConfigurationError: If the remote is missing or no Gerrit URL can be determined
    """
    remote_url = git_ops.get_remote_url(repo_root, repo_config.remote)
    if remote_url is None:
        raise ConfigurationError(f"remote {repo_config.remote!r} is not configured")

    location = parse_remote_url(remote_url)
    gerrit_url = derive_gerrit_url(location, repo_config.gerrit_url)
    return RepoContext(
        root=repo_root,
        remote=repo_config.remote,
        project=location.project,
        gerrit_url=gerrit_url,
    )


def create_context(*, dry_run: bool) -> CodereviewContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution. Outside a git repository, or when the Gerrit server
    cannot be determined, repo and gerrit_ops are None; commands that need
    them report the problem via require_repo().

    Args:
        dry_run: If True, wrap write operations with dry-run wrappers that
                 print intended actions without executing them
    """
    cwd = Path.cwd()

    global_config: GlobalConfig | GlobalConfigNotFound
    if global_config_exists():
        global_config = load_global_config()
    else:
        global_config = GlobalConfigNotFound()

    git_ops: GitOps = RealGitOps()

    repo: RepoContext | None = None
    repo_config = RepoConfig()
    gerrit_ops: GerritOps | None = None
    repo_root: Path | None
    try:
        repo_root = git_ops.get_repository_root(cwd)
    except RuntimeError as e:
        logger.debug("Not in a git repository: %s", e)
        repo_root = None

    if repo_root is not None:
        repo_config = load_repo_config(git_ops.get_git_common_dir(repo_root))
        try:
            repo = discover_repo(git_ops, repo_config, repo_root)
        except ConfigurationError as e:
            logger.debug("Repository not usable with Gerrit: %s", e)

    if repo is not None:
        user, password = _credentials(global_config)
        auth = resolve_gerrit_auth(repo.gerrit_url, user=user, password=password)
        gerrit_ops = RealGerritOps(repo.gerrit_url, auth=auth)

    if dry_run:
        git_ops = DryRunGitOps(git_ops)
        if gerrit_ops is not None:
            gerrit_ops = DryRunGerritOps(gerrit_ops)

    return CodereviewContext(
        git_ops=git_ops,
        gerrit_ops=gerrit_ops,
        time=RealTime(),
        cwd=cwd,
        global_config=global_config,
        repo_config=repo_config,
        repo=repo,
        dry_run=dry_run,
    )


def require_repo(ctx: CodereviewContext) -> tuple[RepoContext, GerritOps]:
    """Return the repository and Gerrit ops, re-deriving the error if unavailable.

    Raises:
        ConfigurationError: If the current directory is not a usable Gerrit repository
    """
    if ctx.repo is not None and ctx.gerrit_ops is not None:
        return ctx.repo, ctx.gerrit_ops

    try:
        repo_root = ctx.git_ops.get_repository_root(ctx.cwd)
    except RuntimeError as e:
        raise ConfigurationError("not in a git repository") from e

    # Re-run discovery to surface the specific configuration problem.
    discover_repo(ctx.git_ops, ctx.repo_config, repo_root)
    raise ConfigurationError("Gerrit is not configured for this repository")
