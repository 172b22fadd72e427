"""Remote URL parsing and Gerrit server discovery."""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

_SCP_LIKE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


class ConfigurationError(Exception):
    """The repository or user configuration is missing something required."""


@dataclass(frozen=True)
class RemoteLocation:
    """Host and project path parsed from a git remote URL."""

    host: str
    project: str


def parse_remote_url(url: str) -> RemoteLocation:
    """Parse a git remote URL into host and project.

    Supports URL forms (https://, ssh://, git://) and scp-like
    "user@host:path" forms. A trailing ".git" and slashes are dropped from
    the project.

    Example:
        >>> parse_remote_url("https://go.googlesource.com/tools")
        RemoteLocation(host='go.googlesource.com', project='tools')
        >>> parse_remote_url("ssh://me@review.example.com:29418/infra/deploy.git")
        RemoteLocation(host='review.example.com', project='infra/deploy')
    """
    if "://" in url:
        parts = urlsplit(url)
        host = parts.hostname or ""
        path = parts.path
    else:
        match = _SCP_LIKE.match(url)
        if match is None:
            raise ConfigurationError(f"cannot parse remote URL {url!r}")
        host = match.group("host")
        path = match.group("path")

    project = path.strip("/")
    project = project.removesuffix(".git")
    if not host or not project:
        raise ConfigurationError(f"cannot determine Gerrit project from remote URL {url!r}")
    return RemoteLocation(host=host, project=project)


def derive_gerrit_url(location: RemoteLocation, configured_url: str | None) -> str:
    """Determine the Gerrit base URL for a remote.

    A configured gerrit_url always wins. Googlesource hosts follow the
    "<name>.googlesource.com" -> "<name>-review.googlesource.com" convention.

    Raises:
        ConfigurationError: If no URL is configured and none can be derived
    """
    if configured_url:
        return configured_url.rstrip("/")

    suffix = ".googlesource.com"
    if location.host.endswith(suffix) and not location.host.endswith("-review" + suffix):
        name = location.host.removesuffix(suffix)
        return f"https://{name}-review{suffix}"
    if location.host.endswith("-review" + suffix):
        return f"https://{location.host}"

    raise ConfigurationError(
        f"cannot determine Gerrit server for {location.host}; "
        "run 'codereview config set gerrit_url <url>'"
    )
