"""Jira Issue implementation."""

from work_mgmt_client_interface.issue import Issue, Version


# ------------------------------------------------------------------
# Issue implementation
# ------------------------------------------------------------------
class JiraIssue(Issue):
    """Concrete Issue backed by a Jira search result.

    Construct via the module-level ``get_issue()`` factory rather than
    instantiating directly.

    Args:
        issue_key: The Jira issue key (e.g. 'PROJ-42').
        raw_data:  The ``fields``-level dict of the search result.

    """

    def __init__(self, issue_key: str, raw_data: dict) -> None:
        """Initialize JiraIssue."""
        self._key = issue_key
        self._raw = raw_data

    @property
    def key(self) -> str:
        """Return key."""
        return self._key

    @property
    def summary(self) -> str:
        """Return summary."""
        return self._raw.get("summary") or ""

    @property
    def project_key(self) -> str:
        """Return the project key, falling back to the issue key prefix."""
        project = self._raw.get("project")
        if isinstance(project, dict) and project.get("key"):
            return project["key"]
        #'PROJ-42' -> 'PROJ'
        return self._key.rsplit("-", 1)[0]

    @property
    def fixed_versions(self) -> list[Version]:
        """Return the fixed versions currently assigned."""
        return [
            Version(id=str(v["id"]), name=v.get("name", ""))
            for v in self._raw.get("fixVersions") or []
            if isinstance(v, dict) and v.get("id") is not None
        ]

    @property
    def fixed_version_ids(self) -> set[str]:
        """Return fixed version ids."""
        return {v.id for v in self.fixed_versions}


# ---------------------------------------------------------------------------
# Get issue
# ---------------------------------------------------------------------------

def get_issue(issue_key: str, raw_data: dict) -> JiraIssue:
    """Return a JiraIssue from the ``fields`` dict of a Jira issue payload."""
    return JiraIssue(issue_key, raw_data)
