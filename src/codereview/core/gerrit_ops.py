"""High-level Gerrit operations interface.

This module provides a clean abstraction over the Gerrit REST API, making the
codebase more testable and maintainable.

Architecture:
- GerritOps: Abstract base class defining the interface
- RealGerritOps: Production implementation using httpx
- DryRunGerritOps: Dry-run wrapper that delegates reads, prints write intentions
"""

import json
import logging
import netrc
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote

import httpx

from codereview.cli.output import user_output

logger = logging.getLogger(__name__)

ChangeStatus = Literal["NEW", "SUBMITTED", "MERGED", "ABANDONED", "UNEXPECTED"]

_KNOWN_STATUSES: frozenset[str] = frozenset({"NEW", "SUBMITTED", "MERGED", "ABANDONED"})

# Gerrit prefixes every JSON response with this line to defeat XSSI.
XSSI_PREFIX = ")]}'"

DEFAULT_TIMEOUT_SECONDS = 30.0


class GerritError(Exception):
    """A Gerrit request failed at the transport level or returned an error status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def classify_status(raw_status: str) -> ChangeStatus:
    """Map Gerrit's status string onto the statuses the submit flow understands.

    Anything unrecognised becomes "UNEXPECTED" so callers cannot mistake a new
    server-side status for one they know how to handle.
    """
    if raw_status in _KNOWN_STATUSES:
        return raw_status  # type: ignore[return-value]
    return "UNEXPECTED"


@dataclass(frozen=True)
class Label:
    """Approval state of a single Gerrit label (e.g. Code-Review)."""

    name: str
    optional: bool
    approved_by: str | None  # None when the label carries no approval
    rejected_by: str | None  # None when the label carries no rejection

    @property
    def is_approved(self) -> bool:
        return self.approved_by is not None

    @property
    def is_rejected(self) -> bool:
        return self.rejected_by is not None


@dataclass(frozen=True)
class GerritChange:
    """Snapshot of a Gerrit change, fetched fresh at each decision point."""

    change_id: str
    number: int | None
    status: ChangeStatus
    raw_status: str
    current_revision: str | None
    mergeable: bool
    labels: dict[str, Label]

    def label_names(self) -> list[str]:
        """Label names in sorted order, for deterministic reporting."""
        return sorted(self.labels)


def _describe_account(account: Any) -> str | None:
    if account is None:
        return None
    if not isinstance(account, dict):
        return str(account)
    for key in ("name", "username", "email"):
        value = account.get(key)
        if value:
            return str(value)
    account_id = account.get("_account_id")
    if account_id is not None:
        return str(account_id)
    return ""


def parse_gerrit_json(text: str) -> Any:
    """Decode a Gerrit JSON response body, stripping the XSSI prefix."""
    if text.startswith(XSSI_PREFIX):
        text = text[len(XSSI_PREFIX) :]
    return json.loads(text)


def parse_change(data: dict[str, Any]) -> GerritChange:
    """Build a GerritChange from a Gerrit ChangeInfo JSON object.

    Missing fields take the values Gerrit implies by omitting them: a change
    with no "mergeable" field is not known to be mergeable.
    """
    raw_status = str(data.get("status", ""))
    labels: dict[str, Label] = {}
    for name, label_data in (data.get("labels") or {}).items():
        labels[name] = Label(
            name=name,
            optional=bool(label_data.get("optional", False)),
            approved_by=_describe_account(label_data.get("approved")),
            rejected_by=_describe_account(label_data.get("rejected")),
        )

    return GerritChange(
        change_id=str(data.get("id") or data.get("change_id", "")),
        number=data.get("_number"),
        status=classify_status(raw_status),
        raw_status=raw_status,
        current_revision=data.get("current_revision"),
        mergeable=bool(data.get("mergeable", False)),
        labels=labels,
    )


def resolve_gerrit_auth(
    gerrit_url: str,
    *,
    user: str | None,
    password: str | None,
    netrc_path: Path | None = None,
) -> httpx.Auth | None:
    """Pick credentials for talking to Gerrit.

    Explicit user/password win. Otherwise a ~/.netrc entry for the Gerrit
    host is used. Returns None for anonymous access.
    """
    if user and password:
        return httpx.BasicAuth(user, password)

    path = netrc_path if netrc_path is not None else Path.home() / ".netrc"
    if not path.exists():
        return None

    host = httpx.URL(gerrit_url).host
    try:
        entry = netrc.netrc(str(path)).authenticators(host)
    except netrc.NetrcParseError as e:
        logger.debug("Ignoring unreadable netrc %s: %s", path, e)
        return None
    if entry is None:
        return None
    return httpx.NetRCAuth(file=str(path))


class GerritOps(ABC):
    """Abstract interface for Gerrit operations.

    All implementations (real, dry-run and fake) must implement this interface.
    """

    @abstractmethod
    def get_change(self, change_id: str) -> GerritChange:
        """Fetch a change with its labels, current revision and mergeability.

        Args:
            change_id: Full change identifier ("project~branch~Change-Id")

        Raises:
            GerritError: If the request fails
        """
        ...

    @abstractmethod
    def submit(self, change_id: str, *, wait_for_merge: bool = True) -> None:
        """Request submission of a change.

        Args:
            change_id: Full change identifier ("project~branch~Change-Id")
            wait_for_merge: Ask Gerrit to return only once the merge completes

        Raises:
            GerritError: If Gerrit refuses the submit or the request fails
        """
        ...


class RealGerritOps(GerritOps):
    """Production implementation using the Gerrit REST API over httpx."""

    def __init__(
        self,
        gerrit_url: str,
        *,
        auth: httpx.Auth | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize RealGerritOps.

        Args:
            gerrit_url: Base URL of the Gerrit server
            auth: Credentials; when present, requests use the authenticated /a/ prefix
            client: Optional preconfigured client (for testing). If None, one is
                    created for gerrit_url.
        """
        self._authenticated = auth is not None
        if client is None:
            client = httpx.Client(
                base_url=gerrit_url.rstrip("/"),
                auth=auth,
                timeout=DEFAULT_TIMEOUT_SECONDS,
                follow_redirects=True,
            )
        self._client = client

    def _path(self, path: str) -> str:
        if self._authenticated:
            return "/a" + path
        return path

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._path(path)
        logger.debug("Gerrit %s %s", method, url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GerritError(f"{method} {url}: {e}") from e

        if response.status_code >= 400:
            body = response.text.strip()
            message = f"{method} {url}: {response.status_code} {response.reason_phrase}"
            if body:
                message += f"\n{body}"
            raise GerritError(message, status_code=response.status_code)

        if not response.text.strip():
            return None
        try:
            return parse_gerrit_json(response.text)
        except json.JSONDecodeError as e:
            raise GerritError(f"{method} {url}: invalid JSON in response: {e}") from e

    def get_change(self, change_id: str) -> GerritChange:
        data = self._request(
            "GET",
            f"/changes/{quote(change_id, safe='~')}",
            params=[("o", "LABELS"), ("o", "CURRENT_REVISION")],
        )
        if not isinstance(data, dict):
            raise GerritError(f"unexpected response for change {change_id}")
        return parse_change(data)

    def submit(self, change_id: str, *, wait_for_merge: bool = True) -> None:
        self._request(
            "POST",
            f"/changes/{quote(change_id, safe='~')}/submit",
            json={"wait_for_merge": wait_for_merge},
        )


class DryRunGerritOps(GerritOps):
    """Wrapper that prints the submit request instead of sending it.

    Reads are delegated to the wrapped implementation.
    """

    def __init__(self, wrapped: GerritOps) -> None:
        self._wrapped = wrapped

    def get_change(self, change_id: str) -> GerritChange:
        return self._wrapped.get_change(change_id)

    def submit(self, change_id: str, *, wait_for_merge: bool = True) -> None:
        user_output(f"[DRY RUN] Would submit change {change_id}")
