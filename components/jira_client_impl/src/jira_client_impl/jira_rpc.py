"""
Legacy RPC transport
--------------------
Older Jira servers expose a token based remote API next to (or instead of) REST.
It mirrors the historic SOAP service: log in once, then pass the token as the
first argument of every ``jira1.*`` call.

    endpoint  https://jira.example.com      ->  https://jira.example.com/rpc/xmlrpc

Version and field updates use the ``{field id: [values]}`` shape of updateIssue.
"""
from __future__ import annotations

import logging
import xmlrpc.client
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from xml.parsers.expat import ExpatError

from jira_client_impl.jira_issue import JiraIssue, get_issue as _make_issue
from work_mgmt_client_interface.client import IssueTrackerClient
from work_mgmt_client_interface.issue import Transition, Version
from work_mgmt_client_interface.result import Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RPC_PATH = "/rpc/xmlrpc"

#errors the remote API, the response parser and the underlying socket can raise
_RPC_ERRORS = (
    xmlrpc.client.Fault,
    xmlrpc.client.ProtocolError,
    xmlrpc.client.ResponseError,
    ExpatError,
    OSError,
    KeyError,
    TypeError,
    AttributeError,
)


@dataclass
class RpcSession:
    """Server proxy plus the token issued by login."""

    proxy: Any
    token: str


class JiraRpcClient(IssueTrackerClient):
    """IssueTrackerClient backed by the legacy Jira RPC endpoint."""

    def __init__(self, proxy_factory: Callable[[str], Any] | None = None) -> None:
        #the factory is swapped out in tests
        self._proxy_factory = proxy_factory or (lambda url: xmlrpc.client.ServerProxy(url, allow_none=True))

    # ------------------------------------------------------------------
    # Internal RPC helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _call(session: RpcSession, method: str, *args: Any) -> Any:
        return getattr(session.proxy.jira1, method)(session.token, *args)

    @staticmethod
    def _guard(action: str, call: Callable[[], T]) -> Outcome[T]:
        try:
            return Outcome.success(call())
        except _RPC_ERRORS as exc:
            logger.debug("%s failed", action, exc_info=True)
            return Outcome.failure(f"{action}: {exc}")

    @staticmethod
    def _build_issue(remote: dict) -> JiraIssue:
        #remote issues are flat structs; reshape them into the REST "fields" layout
        project = remote.get("project")
        fields = {
            "summary": remote.get("summary", ""),
            "project": {"key": project} if isinstance(project, str) else project,
            "fixVersions": remote.get("fixVersions") or [],
        }
        return _make_issue(remote["key"], fields)

    # ------------------------------------------------------------------
    # IssueTrackerClient contract
    # ------------------------------------------------------------------

    def connect(self, endpoint: str, username: str, password: str) -> Outcome[RpcSession]:
        """Log in and keep the returned token."""
        url = endpoint.rstrip("/") + _RPC_PATH
        logger.info("Connecting via RPC to %s as %s", url, username)

        def login() -> RpcSession:
            proxy = self._proxy_factory(url)
            return RpcSession(proxy, proxy.jira1.login(username, password))

        outcome = self._guard(f"Authentication to {url} failed", login)
        if outcome:
            logger.info("Connected")
        return outcome

    def find_issues_by_query(self, session: RpcSession, query: str, max_results: int) -> Outcome[list[JiraIssue]]:
        """Run a JQL search; the server applies ``max_results``."""
        def search() -> list[JiraIssue]:
            remote_issues = self._call(session, "getIssuesFromJqlSearch", query, max_results) or []
            return [self._build_issue(remote) for remote in remote_issues]

        return self._guard(f"Cannot execute issue search by JQL '{query}'", search)

    def list_available_transitions(self, session: RpcSession, issue_key: str) -> Outcome[list[Transition]]:
        def fetch() -> list[Transition]:
            actions = self._call(session, "getAvailableActions", issue_key) or []
            return [Transition(id=str(a["id"]), name=a.get("name", "")) for a in actions]

        return self._guard(f"Error getting available workflow actions of {issue_key}", fetch)

    def apply_transition(self, session: RpcSession, issue_key: str, transition_id: str) -> Outcome[None]:
        return self._send(
            f"Error updating workflow status of {issue_key}",
            lambda: self._call(session, "progressWorkflowAction", issue_key, transition_id, {}),
        )

    def add_comment(self, session: RpcSession, issue_key: str, text: str) -> Outcome[None]:
        return self._send(
            f"Error adding comment to {issue_key}",
            lambda: self._call(session, "addComment", issue_key, text),
        )

    def set_custom_field(self, session: RpcSession, issue_key: str, field_id: str, value: str) -> Outcome[None]:
        return self._send(
            f"Error setting field {field_id} on {issue_key}",
            lambda: self._call(session, "updateIssue", issue_key, {field_id: [value]}),
        )

    def list_versions(self, session: RpcSession, project_key: str) -> Outcome[list[Version]]:
        def fetch() -> list[Version]:
            remote_versions = self._call(session, "getVersions", project_key) or []
            return [Version(id=str(v["id"]), name=v.get("name", "")) for v in remote_versions]

        return self._guard(f"Error getting versions for project {project_key}", fetch)

    def create_version(self, session: RpcSession, project_key: str, name: str) -> Outcome[Version]:
        def create() -> Version:
            remote = self._call(session, "addVersion", project_key, {"name": name})
            return Version(id=str(remote["id"]), name=remote.get("name", name))

        return self._guard(f"Error creating version '{name}' in project {project_key}", create)

    def replace_fixed_versions(self, session: RpcSession, issue_key: str, version_ids: set[str]) -> Outcome[None]:
        return self._send(
            f"Error setting fixed versions of {issue_key}",
            lambda: self._call(session, "updateIssue", issue_key, {"fixVersions": sorted(version_ids)}),
        )

    @classmethod
    def _send(cls, action: str, call: Callable[[], Any]) -> Outcome[None]:
        outcome = cls._guard(action, call)
        return Outcome.success() if outcome else Outcome.failure(outcome.message or action)
