"""Jira implementations of the issue tracker contract."""

from jira_client_impl.jira_impl import IssueNotFoundError, JiraError, JiraRestClient
from jira_client_impl.jira_issue import JiraIssue
from jira_client_impl.jira_rpc import JiraRpcClient
from work_mgmt_client_interface.client import IssueTrackerClient

__all__ = [
    "IssueNotFoundError",
    "JiraError",
    "JiraIssue",
    "JiraRestClient",
    "JiraRpcClient",
    "TRANSPORTS",
    "get_client",
]

TRANSPORTS = ("rest", "rpc")


def get_client(transport: str = "rest") -> IssueTrackerClient:
    """Return a Jira client for the given transport.

    Args:
        transport: "rest" for the REST API v3, "rpc" for the legacy RPC endpoint.

    Raises:
        ValueError: If the transport is unknown.

    """
    if transport == "rest":
        return JiraRestClient()
    if transport == "rpc":
        return JiraRpcClient()
    raise ValueError(f"Unknown Jira transport '{transport}'. Expected one of: {', '.join(TRANSPORTS)}")
