"""Repository configuration stored in `<git dir>/codereview.toml`.

The file lives inside the repository's git directory, so it is shared by all
worktrees and never shows up in the workspace as an untracked file.

Example config:
  gerrit_url = "https://review.example.com"
  remote = "origin"
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomlkit

DEFAULT_REMOTE = "origin"
REPO_CONFIG_FILENAME = "codereview.toml"


@dataclass(frozen=True)
class RepoConfig:
    """In-memory representation of `codereview.toml`."""

    gerrit_url: str | None = None  # None = derive from the remote URL
    remote: str = DEFAULT_REMOTE


def repo_config_path(git_dir: Path) -> Path:
    return git_dir / REPO_CONFIG_FILENAME


def load_repo_config(git_dir: Path) -> RepoConfig:
    """Load codereview.toml from the git directory if present; otherwise return defaults.

    Raises:
        ValueError: If the file is not valid TOML
    """
    cfg_path = repo_config_path(git_dir)
    if not cfg_path.exists():
        return RepoConfig()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {cfg_path}: {e}") from e

    gerrit_url = data.get("gerrit_url")
    remote = data.get("remote")
    return RepoConfig(
        gerrit_url=str(gerrit_url) if gerrit_url else None,
        remote=str(remote) if remote else DEFAULT_REMOTE,
    )


def save_repo_config_value(git_dir: Path, key: str, value: str) -> None:
    """Set a single key in `codereview.toml`, preserving formatting.

    Creates the file if it doesn't exist. Existing keys, comments and layout
    are left untouched.
    """
    git_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = repo_config_path(git_dir)

    if cfg_path.exists():
        doc = tomlkit.parse(cfg_path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()

    doc[key] = value
    cfg_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
