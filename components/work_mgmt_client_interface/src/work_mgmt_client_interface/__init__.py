"""Tracker-independent issue tracker contract."""

from work_mgmt_client_interface.client import IssueTrackerClient, Session
from work_mgmt_client_interface.issue import Issue, Transition, Version
from work_mgmt_client_interface.result import Outcome

__all__ = ["Issue", "IssueTrackerClient", "Outcome", "Session", "Transition", "Version"]
