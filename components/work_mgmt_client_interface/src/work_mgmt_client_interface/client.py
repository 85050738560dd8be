"""Core client contract definitions."""

from abc import ABC, abstractmethod
from typing import Any

from work_mgmt_client_interface.issue import Issue, Transition, Version
from work_mgmt_client_interface.result import Outcome

__all__ = ["IssueTrackerClient", "Session"]

#opaque per-transport handle returned by connect(); only the client that produced it understands it
Session = Any


class IssueTrackerClient(ABC):
    """Query and update primitives of an issue tracker.

    Every operation reports success or failure through an Outcome instead of
    raising, so callers can decide how fatal each failure is.
    """

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @abstractmethod
    def connect(self, endpoint: str, username: str, password: str) -> Outcome[Session]:
        """Open an authenticated session."""
        """Args:
            endpoint: Base URL of the tracker
            username: Account name or email
            password: Password or API token

        Returns:
            Outcome carrying the session on success
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @abstractmethod
    def find_issues_by_query(self, session: Session, query: str, max_results: int) -> Outcome[list[Issue]]:
        """Find issues matching a query."""
        """Args:
            query:       Filter expression (JQL for Jira)
            max_results: Upper bound on the number of issues returned

        Notes on usage:
            A failed query is an Outcome with ok=False. A query that matched
            nothing is a successful Outcome carrying an empty list.
        """
        raise NotImplementedError

    @abstractmethod
    def list_available_transitions(self, session: Session, issue_key: str) -> Outcome[list[Transition]]:
        """List the workflow transitions reachable from the issue's current state."""
        raise NotImplementedError

    @abstractmethod
    def list_versions(self, session: Session, project_key: str) -> Outcome[list[Version]]:
        """List the full version catalog of a project."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    @abstractmethod
    def apply_transition(self, session: Session, issue_key: str, transition_id: str) -> Outcome[None]:
        """Move an issue through the transition with the given id."""
        raise NotImplementedError

    @abstractmethod
    def add_comment(self, session: Session, issue_key: str, text: str) -> Outcome[None]:
        """Append a comment to an issue."""
        raise NotImplementedError

    @abstractmethod
    def set_custom_field(self, session: Session, issue_key: str, field_id: str, value: str) -> Outcome[None]:
        """Set a custom field of an issue."""
        raise NotImplementedError

    @abstractmethod
    def replace_fixed_versions(self, session: Session, issue_key: str, version_ids: set[str]) -> Outcome[None]:
        """Replace the complete set of fixed versions of an issue."""
        """Notes on usage:
            The given set replaces whatever was assigned before, it is not merged
        """
        raise NotImplementedError

    def create_version(self, session: Session, project_key: str, name: str) -> Outcome[Version]:
        """Create a version in a project and return it."""
        """Notes on usage:
            Optional capability. Implementations that cannot create versions
            keep this default, which always reports failure.
        """
        return Outcome.failure(f"{type(self).__name__} cannot create versions")
