from pathlib import Path

import click

from codereview.cli.ensure import Ensure
from codereview.cli.output import machine_output
from codereview.core.context import CodereviewContext
from codereview.core.global_config import (
    GlobalConfig,
    GlobalConfigNotFound,
    global_config_path,
    save_global_config,
)
from codereview.core.repo_config import DEFAULT_REMOTE, save_repo_config_value
from codereview.core.subprocess_utils import CommandFailedError

GLOBAL_KEYS = ("gerrit_user", "gerrit_password")
REPO_KEYS = ("gerrit_url", "remote")


def _repo_root(ctx: CodereviewContext) -> Path:
    """Repository root for repo-level keys, whether or not Gerrit is reachable."""
    if ctx.repo is not None:
        return ctx.repo.root
    try:
        return ctx.git_ops.get_repository_root(ctx.cwd)
    except CommandFailedError:
        Ensure.fail("Not in a git repository")


def _mask(secret: str | None) -> str | None:
    if secret is None:
        return None
    return "*" * 8


def _update_global_config_field(
    current_config: GlobalConfig | GlobalConfigNotFound,
    field_name: str,
    value: str,
) -> GlobalConfig:
    """Return a new GlobalConfig with one field replaced."""
    user: str | None = None
    password: str | None = None
    if isinstance(current_config, GlobalConfig):
        user = current_config.gerrit_user
        password = current_config.gerrit_password

    match field_name:
        case "gerrit_user":
            return GlobalConfig(gerrit_user=value, gerrit_password=password)
        case "gerrit_password":
            return GlobalConfig(gerrit_user=user, gerrit_password=value)
        case _:
            Ensure.fail(f"Invalid global config field: {field_name}")


@click.group("config")
def config_group() -> None:
    """Manage codereview configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: CodereviewContext) -> None:
    """Print a list of configuration keys and values."""
    machine_output(click.style("Global configuration:", bold=True))
    if isinstance(ctx.global_config, GlobalConfigNotFound):
        machine_output(f"  (not configured - {global_config_path()} does not exist)")
    else:
        if ctx.global_config.gerrit_user is not None:
            machine_output(f"  gerrit_user={ctx.global_config.gerrit_user}")
        if ctx.global_config.gerrit_password is not None:
            machine_output(f"  gerrit_password={_mask(ctx.global_config.gerrit_password)}")

    machine_output(click.style("\nRepository configuration:", bold=True))
    cfg = ctx.repo_config
    if cfg.gerrit_url is not None:
        machine_output(f"  gerrit_url={cfg.gerrit_url}")
    machine_output(f"  remote={cfg.remote}")

    if ctx.repo is not None:
        machine_output(click.style("\nResolved:", bold=True))
        machine_output(f"  gerrit={ctx.repo.gerrit_url}")
        machine_output(f"  project={ctx.repo.project}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: CodereviewContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key in GLOBAL_KEYS:
        if isinstance(ctx.global_config, GlobalConfigNotFound):
            Ensure.fail(f"Global config not found at {global_config_path()}")
        match key:
            case "gerrit_user":
                value = ctx.global_config.gerrit_user
            case _:
                value = _mask(ctx.global_config.gerrit_password)
        machine_output(Ensure.not_none(value, f"Key not found: {key}"))
        return

    match key:
        case "gerrit_url":
            machine_output(Ensure.not_none(ctx.repo_config.gerrit_url, f"Key not found: {key}"))
        case "remote":
            machine_output(ctx.repo_config.remote)
        case _:
            Ensure.fail(f"Invalid key: {key}")


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: CodereviewContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    if key in GLOBAL_KEYS:
        new_config = _update_global_config_field(ctx.global_config, key, value)
        save_global_config(new_config)
        shown = _mask(value) if key == "gerrit_password" else value
        machine_output(f"Set {key}={shown}")
        return

    Ensure.invariant(key in REPO_KEYS, f"Invalid key: {key}")
    Ensure.invariant(bool(value.strip()), f"Empty value for {key}")
    if key == "gerrit_url":
        Ensure.invariant(
            value.startswith(("https://", "http://")),
            f"gerrit_url must be an http(s) URL, got {value!r}",
        )

    repo_root = _repo_root(ctx)
    if key == "remote" and value != DEFAULT_REMOTE:
        Ensure.invariant(
            ctx.git_ops.get_remote_url(repo_root, value) is not None,
            f"Remote '{value}' does not exist in repository.",
        )

    save_repo_config_value(ctx.git_ops.get_git_common_dir(repo_root), key, value)
    machine_output(f"Set {key}={value}")
