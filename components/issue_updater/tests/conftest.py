"""Shared fixtures: a mocked tracker client and a factory for issues."""

from unittest.mock import MagicMock

import pytest

from work_mgmt_client_interface.client import IssueTrackerClient
from work_mgmt_client_interface.issue import Issue, Transition, Version
from work_mgmt_client_interface.result import Outcome


class FakeIssue(Issue):
    def __init__(self, key, project_key, fixed_version_ids=()):
        self._key = key
        self._project_key = project_key
        self._fixed_version_ids = set(fixed_version_ids)

    @property
    def key(self):
        return self._key

    @property
    def summary(self):
        return f"summary of {self._key}"

    @property
    def project_key(self):
        return self._project_key

    @property
    def fixed_version_ids(self):
        return set(self._fixed_version_ids)


@pytest.fixture
def make_issue():
    def factory(key, project_key=None, fixed_version_ids=()):
        return FakeIssue(key, project_key or key.rsplit("-", 1)[0], fixed_version_ids)

    return factory


@pytest.fixture
def client():
    """A tracker client on which every operation succeeds."""
    client = MagicMock(spec=IssueTrackerClient)
    client.connect.return_value = Outcome.success("session")
    client.find_issues_by_query.return_value = Outcome.success([])
    client.list_available_transitions.return_value = Outcome.success(
        [Transition("21", "Start Progress"), Transition("31", "Close Issue")]
    )
    client.apply_transition.return_value = Outcome.success()
    client.add_comment.return_value = Outcome.success()
    client.set_custom_field.return_value = Outcome.success()
    client.list_versions.return_value = Outcome.success([Version("10505", "1.0"), Version("10506", "1.1")])
    client.create_version.return_value = Outcome.failure("version creation disabled")
    client.replace_fixed_versions.return_value = Outcome.success()
    return client
