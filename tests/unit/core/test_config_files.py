"""Tests for reading and writing the global and repository config files."""

from pathlib import Path

import pytest

from codereview.core.global_config import GlobalConfig, load_global_config, save_global_config
from codereview.core.repo_config import (
    DEFAULT_REMOTE,
    RepoConfig,
    load_repo_config,
    save_repo_config_value,
)


def test_global_config_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    config = GlobalConfig(gerrit_user="gopher", gerrit_password='p"w\\rd')

    save_global_config(config, path)

    assert load_global_config(path) == config


def test_global_config_tightens_existing_permissions(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("", encoding="utf-8")
    path.chmod(0o644)

    save_global_config(GlobalConfig(gerrit_user="gopher", gerrit_password="pw"), path)

    assert path.stat().st_mode & 0o777 == 0o600
    assert load_global_config(path).gerrit_password == "pw"


def test_global_config_new_file_is_owner_only(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.toml"

    save_global_config(GlobalConfig(gerrit_user=None, gerrit_password="pw"), path)

    assert path.stat().st_mode & 0o777 == 0o600


def test_global_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path / "missing.toml")


def test_global_config_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("gerrit_user = ", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_global_config(path)


def test_repo_config_defaults_without_file(tmp_path: Path) -> None:
    assert load_repo_config(tmp_path) == RepoConfig(gerrit_url=None, remote=DEFAULT_REMOTE)


def test_repo_config_set_preserves_comments(tmp_path: Path) -> None:
    cfg_path = tmp_path / "codereview.toml"
    cfg_path.write_text('# team settings\nremote = "gerrit"\n', encoding="utf-8")

    save_repo_config_value(tmp_path, "gerrit_url", "https://review.example.com")

    content = cfg_path.read_text(encoding="utf-8")
    assert "# team settings" in content
    assert load_repo_config(tmp_path) == RepoConfig(
        gerrit_url="https://review.example.com", remote="gerrit"
    )


def test_repo_config_invalid_toml(tmp_path: Path) -> None:
    (tmp_path / "codereview.toml").write_text("remote = [", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_repo_config(tmp_path)
