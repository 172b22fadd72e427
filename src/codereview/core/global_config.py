"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.codereview/config.toml.
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomlkit


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in CodereviewContext.
    """

    gerrit_user: str | None
    gerrit_password: str | None  # Gerrit HTTP password, not the account password


class GlobalConfigNotFound:
    """Sentinel value indicating global config file was not found."""

    pass


def global_config_path() -> Path:
    """Get the path to the global config file."""
    return Path.home() / ".codereview" / "config.toml"


def global_config_exists(path: Path | None = None) -> bool:
    config_path = path if path is not None else global_config_path()
    return config_path.exists()


def load_global_config(path: Path | None = None) -> GlobalConfig:
    """Load global config from ~/.codereview/config.toml.

    Args:
        path: Config file path (defaults to ~/.codereview/config.toml)

    Returns:
        GlobalConfig instance with loaded values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is not valid TOML
    """
    config_path = path if path is not None else global_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Global config not found at {config_path}")

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    user = data.get("gerrit_user")
    password = data.get("gerrit_password")
    return GlobalConfig(
        gerrit_user=str(user) if user else None,
        gerrit_password=str(password) if password else None,
    )


def save_global_config(config: GlobalConfig, path: Path | None = None) -> None:
    """Save global config to ~/.codereview/config.toml.

    The file may hold a credential, so it is written readable by the owner only.
    """
    config_path = path if path is not None else global_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()
    doc.add(tomlkit.comment("Global codereview configuration"))
    if config.gerrit_user is not None:
        doc["gerrit_user"] = config.gerrit_user
    if config.gerrit_password is not None:
        doc["gerrit_password"] = config.gerrit_password
    # Restrict permissions before the password is written.
    config_path.touch(mode=0o600, exist_ok=True)
    config_path.chmod(0o600)
    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
