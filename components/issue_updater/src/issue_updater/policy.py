"""Turns the terminal state of a run into an overall pass or fail."""

from dataclasses import dataclass
from enum import Enum


class RunState(str, Enum):
    CONNECTION_FAILED = "connection_failed"
    QUERY_FAILED = "query_failed"
    EMPTY_RESULT = "empty_result"
    COMPLETED = "completed"


@dataclass(frozen=True)
class OutcomePolicy:
    """
    Independent gates, each checked at most once per run.

    Per-issue step failures are not part of the policy: they are reported in
    the log and never fail the build.
    """

    fail_if_query_fails: bool = False
    fail_if_no_issues: bool = False
    fail_if_no_connection: bool = False

    def decide(self, state: RunState) -> bool:
        """Return True if a run that ended in ``state`` counts as successful."""
        if state is RunState.CONNECTION_FAILED:
            return not self.fail_if_no_connection
        if state is RunState.QUERY_FAILED:
            return not self.fail_if_query_fails
        if state is RunState.EMPTY_RESULT:
            return not self.fail_if_no_issues
        return True
