"""
Authentication
--------------
The REST client authenticates every request with HTTP basic auth built from the
credentials handed to connect():

    endpoint  https://myorg.atlassian.net
    username  me@example.com
    password  <token from https://id.atlassian.com/manage-profile/security/api-tokens>

connect() checks the credentials once against /myself, so a bad token fails the
connection instead of every later call.

Dependencies:
    uv add requests

"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import requests
from requests.auth import HTTPBasicAuth

from jira_client_impl.jira_issue import JiraIssue, get_issue as _make_issue
from work_mgmt_client_interface.client import IssueTrackerClient
from work_mgmt_client_interface.issue import Transition, Version
from work_mgmt_client_interface.result import Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

#only the fields the updater reads are requested from search
_SEARCH_FIELDS = "summary,project,fixVersions"

#Jira Cloud caps one search page at 100 issues
_PAGE_SIZE = 100


class JiraError(Exception):
    """Raised when the Jira API returns an unexpected response."""


class IssueNotFoundError(JiraError):
    """Raised when a requested Jira resource does not exist."""


@dataclass
class RestSession:
    """Authenticated HTTP session bound to one Jira instance."""

    base_url: str
    http: requests.Session


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class JiraRestClient(IssueTrackerClient):
    """
    IssueTrackerClient backed by the Jira REST API v3.

    The client itself holds no connection state; everything lives in the
    RestSession returned by connect(), so one client can serve several builds.
    """

    _API_PREFIX = "/rest/api/3"

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _url(self, session: RestSession, path: str) -> str:
        return f"{session.base_url}{self._API_PREFIX}{path}"

    def _get(self, session: RestSession, path: str, params: dict | None = None) -> Any:
        response = session.http.get(self._url(session, path), params=params, timeout=self._timeout)
        self._raise_for_status(response)
        return response.json()

    def _post(self, session: RestSession, path: str, body: dict) -> Any:
        response = session.http.post(self._url(session, path), json=body, timeout=self._timeout)
        self._raise_for_status(response)
        # transitions answer 204 No Content on success
        if response.status_code == 204:
            return {}
        return response.json()

    def _put(self, session: RestSession, path: str, body: dict) -> Any:
        response = session.http.put(self._url(session, path), json=body, timeout=self._timeout)
        self._raise_for_status(response)
        # Jira PUT /issue returns 204 No Content on success
        if response.status_code == 204:
            return {}
        return response.json()

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.status_code == 404:
            raise IssueNotFoundError(f"Resource not found: {response.url}")
        if not response.ok:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise JiraError(f"Jira API error {response.status_code}: {detail}")

    @staticmethod
    def _guard(action: str, call: Callable[[], T]) -> Outcome[T]:
        """Run one API interaction and turn any transport or API error into a failed Outcome."""
        try:
            return Outcome.success(call())
        except (requests.RequestException, JiraError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.debug("%s failed", action, exc_info=True)
            return Outcome.failure(f"{action}: {exc}")

    @classmethod
    def _send(cls, action: str, call: Callable[[], Any]) -> Outcome[None]:
        """Like _guard, for calls whose response body is of no interest."""
        outcome = cls._guard(action, call)
        return Outcome.success() if outcome else Outcome.failure(outcome.message or action)

    def _build_issue(self, issue: dict) -> JiraIssue:
        return _make_issue(issue["key"], issue.get("fields") or {})

    # ------------------------------------------------------------------
    # IssueTrackerClient contract
    # ------------------------------------------------------------------

    def connect(self, endpoint: str, username: str, password: str) -> Outcome[RestSession]:
        """Open a session and verify the credentials against /myself."""
        http = requests.Session()
        http.auth = HTTPBasicAuth(username, password)
        http.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
        session = RestSession(endpoint.rstrip("/"), http)

        outcome = self._guard(f"Connecting to {session.base_url} as {username}", lambda: self._get(session, "/myself"))
        if not outcome:
            http.close()
            return Outcome.failure(outcome.message or "connection failed")
        logger.info("Connected to %s as %s", session.base_url, username)
        return Outcome.success(session)

    def find_issues_by_query(self, session: RestSession, query: str, max_results: int) -> Outcome[list[JiraIssue]]:
        """
        Fetch pages until "max_results" issues have been collected or no more results exist.
        """
        return self._guard(f"Searching issues with '{query}'", lambda: self._search(session, query, max_results))

    def _search(self, session: RestSession, query: str, max_results: int) -> list[JiraIssue]:
        found: list[JiraIssue] = []
        next_page_token: str | None = None

        #Each iteration makes one API request, fetching the next page
        #/search/jql reports no total; follow nextPageToken until Jira says isLast
        while len(found) < max_results:
            params: dict[str, Any] = {
                "jql": query,
                "maxResults": min(max_results - len(found), _PAGE_SIZE),
                "fields": _SEARCH_FIELDS,
            }
            if next_page_token:
                params["nextPageToken"] = next_page_token
            data = self._get(session, "/search/jql", params=params)
            if not isinstance(data, dict):
                raise JiraError(f"Unexpected search response: {data!r}")

            issues: list[dict] = data.get("issues") or []
            for issue in issues[: max_results - len(found)]:
                found.append(self._build_issue(issue))

            next_page_token = data.get("nextPageToken")
            if not issues or data.get("isLast", True) or not next_page_token:
                break
        return found

    def list_available_transitions(self, session: RestSession, issue_key: str) -> Outcome[list[Transition]]:
        """Return the transitions Jira offers for the issue right now."""
        def fetch() -> list[Transition]:
            data = self._get(session, f"/issue/{issue_key}/transitions")
            return [Transition(id=str(t["id"]), name=t.get("name", "")) for t in data.get("transitions", [])]

        return self._guard(f"Listing transitions of {issue_key}", fetch)

    def apply_transition(self, session: RestSession, issue_key: str, transition_id: str) -> Outcome[None]:
        """Trigger a transition by id."""
        return self._send(
            f"Transitioning {issue_key}",
            lambda: self._post(session, f"/issue/{issue_key}/transitions", {"transition": {"id": transition_id}}),
        )

    def add_comment(self, session: RestSession, issue_key: str, text: str) -> Outcome[None]:
        """Add a plain-text comment, wrapped in ADF."""
        return self._send(
            f"Commenting on {issue_key}",
            lambda: self._post(session, f"/issue/{issue_key}/comment", {"body": _text_to_adf(text)}),
        )

    def set_custom_field(self, session: RestSession, issue_key: str, field_id: str, value: str) -> Outcome[None]:
        """Set one field through the issue edit endpoint."""
        return self._send(
            f"Setting field {field_id} on {issue_key}",
            lambda: self._put(session, f"/issue/{issue_key}", {"fields": {field_id: value}}),
        )

    def list_versions(self, session: RestSession, project_key: str) -> Outcome[list[Version]]:
        """Return every version of the project."""
        def fetch() -> list[Version]:
            data = self._get(session, f"/project/{project_key}/versions")
            return [Version(id=str(v["id"]), name=v.get("name", "")) for v in data]

        return self._guard(f"Listing versions of project {project_key}", fetch)

    def create_version(self, session: RestSession, project_key: str, name: str) -> Outcome[Version]:
        """Create an unreleased version in the project."""
        def create() -> Version:
            data = self._post(session, "/version", {"name": name, "project": project_key})
            return Version(id=str(data["id"]), name=data.get("name", name))

        return self._guard(f"Creating version '{name}' in project {project_key}", create)

    def replace_fixed_versions(self, session: RestSession, issue_key: str, version_ids: set[str]) -> Outcome[None]:
        """Overwrite the fixVersions field with exactly the given ids."""
        #sorted so the request body does not depend on set ordering
        body = {"fields": {"fixVersions": [{"id": version_id} for version_id in sorted(version_ids)]}}
        return self._send(
            f"Updating fixed versions of {issue_key}",
            lambda: self._put(session, f"/issue/{issue_key}", body),
        )


# ---------------------------------------------------------------------------
# ADF builder -  Jira requires comment bodies to be in this format
# ---------------------------------------------------------------------------

def _text_to_adf(text: str) -> dict:
    """
    Notes on usage:
        Jira Cloud requires that rich text, including comment bodies, is sent to the API in Atlassian Document Format (ADF), otherwise it will be rejected
    """
    if not isinstance(text, str):
        raise JiraError("Input must be a string")
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }
