"""
Update orchestration.

One run: substitute the templates, connect, query the tracker, then apply the
configured transition, comment, custom field and fixed versions to every
matched issue. Only connection and query level problems can fail a run; a
failing step of a single issue is logged and the run carries on.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from issue_updater.config import Credentials, UpdaterSettings
from issue_updater.policy import OutcomePolicy, RunState
from issue_updater.substitution import ResolvedTemplates, resolve_templates
from issue_updater.versions import VersionCache, VersionResolver
from work_mgmt_client_interface.client import IssueTrackerClient, Session
from work_mgmt_client_interface.issue import Issue
from work_mgmt_client_interface.result import Outcome

logger = logging.getLogger(__name__)

#safety bound on the number of issues touched by one run, not a paging size
MAX_ISSUES = 10000

_BANNER = "-------------------------------------------------------"


class Step(str, Enum):
    CONNECT = "connect"
    QUERY = "query"
    TRANSITION = "transition"
    COMMENT = "comment"
    CUSTOM_FIELD = "custom_field"
    FIXED_VERSIONS = "fixed_versions"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one attempted step; issue_key is None for run level steps."""

    issue_key: str | None
    step: Step
    outcome: Outcome


@dataclass
class RunReport:
    """Everything a run attempted, plus the state it ended in."""

    policy: OutcomePolicy
    state: RunState | None = None
    steps: list[StepResult] = field(default_factory=list)
    truncated: bool = False

    def record(self, issue_key: str | None, step: Step, outcome: Outcome) -> Outcome:
        self.steps.append(StepResult(issue_key, step, outcome))
        return outcome

    @property
    def succeeded(self) -> bool:
        return self.state is not None and self.policy.decide(self.state)

    @property
    def failures(self) -> list[StepResult]:
        return [result for result in self.steps if not result.outcome.ok]

    def issue_steps(self, issue_key: str) -> list[StepResult]:
        return [result for result in self.steps if result.issue_key == issue_key]


@dataclass
class RunContext:
    """State of a single run. Created when the run starts and dropped when it ends."""

    session: Session
    templates: ResolvedTemplates
    versions: VersionResolver
    report: RunReport


class IssueUpdater:
    """Applies a batch of updates to every issue matched by the configured query.

    Args:
        client:      Tracker client, REST or RPC
        credentials: Where and as whom to connect
        settings:    Templates, fixed version behavior and outcome policy

    The updater keeps no state between runs, so one instance may be shared
    by builds running at the same time.
    """

    def __init__(self, client: IssueTrackerClient, credentials: Credentials, settings: UpdaterSettings) -> None:
        self._client = client
        self._credentials = credentials
        self._settings = settings

    def run(self, variables: Mapping[str, str]) -> bool:
        """Run all updates and return True if the build should pass."""
        return self.execute(variables).succeeded

    def execute(self, variables: Mapping[str, str]) -> RunReport:
        """Run all updates and return the full report."""
        logger.info(_BANNER)
        logger.info("Jira Update Build Step")
        logger.info(_BANNER)

        report = RunReport(self._settings.policy)
        templates = resolve_templates(self._settings.templates, variables)

        connection = report.record(None, Step.CONNECT, self._client.connect(
            self._credentials.endpoint, self._credentials.username, self._credentials.password,
        ))
        if not connection:
            logger.error("Could not connect to Jira: %s", connection.message)
            return self._finish(report, RunState.CONNECTION_FAILED)

        # Find the list of issues we are interested in, maximum of MAX_ISSUES
        query = report.record(None, Step.QUERY, self._client.find_issues_by_query(
            connection.value, templates.query, MAX_ISSUES + 1,
        ))
        if not query:
            logger.error("Unable to find issues: %s", query.message)
            return self._finish(report, RunState.QUERY_FAILED)

        issues: list[Issue] = list(query.value or [])
        if not issues:
            logger.info("Your JQL, '%s' did not return any issues. No issues will be updated during this build.", templates.query)
            return self._finish(report, RunState.EMPTY_RESULT)
        if len(issues) > MAX_ISSUES:
            logger.warning("Your JQL, '%s' matched more than %d issues. Only the first %d will be updated.",
                           templates.query, MAX_ISSUES, MAX_ISSUES)
            issues = issues[:MAX_ISSUES]
            report.truncated = True

        # fresh version cache for this run
        context = RunContext(
            session=connection.value,
            templates=templates,
            versions=VersionResolver(
                self._client, connection.value, VersionCache(),
                create_missing=self._settings.create_missing_versions,
            ),
            report=report,
        )
        for issue in issues:
            logger.info("Updating %s  \t%s", issue.key, issue.summary)
            self._update_issue(context, issue)

        failed = len(report.failures)
        logger.info("Updated %d issue(s), %d step(s) failed", len(issues), failed)
        return self._finish(report, RunState.COMPLETED)

    def _finish(self, report: RunReport, state: RunState) -> RunReport:
        report.state = state
        if not report.succeeded:
            logger.error("Failing build: run ended with %s", state.value)
        elif state is not RunState.COMPLETED:
            logger.warning("Run ended with %s; build not failed", state.value)
        return report

    # ------------------------------------------------------------------
    # Per issue steps
    # ------------------------------------------------------------------

    def _update_issue(self, context: RunContext, issue: Issue) -> None:
        templates = context.templates
        record = context.report.record

        if templates.transition_name.strip():
            record(issue.key, Step.TRANSITION, self._transition(context, issue))

        if templates.comment.strip():
            outcome = self._client.add_comment(context.session, issue.key, templates.comment)
            if not outcome:
                logger.error("Could not add comment to issue %s: %s", issue.key, outcome.message)
            record(issue.key, Step.COMMENT, outcome)

        if templates.custom_field_id.strip():
            outcome = self._client.set_custom_field(
                context.session, issue.key, templates.custom_field_id.strip(), templates.custom_field_value,
            )
            if not outcome:
                logger.error("Could not set field %s in issue %s: %s", templates.custom_field_id, issue.key, outcome.message)
            record(issue.key, Step.CUSTOM_FIELD, outcome)

        # NOT resetting and no version names: nothing to update
        if self._settings.reset_fixed_versions or templates.fixed_version_names:
            record(issue.key, Step.FIXED_VERSIONS, self._fixed_versions(context, issue))

    def _transition(self, context: RunContext, issue: Issue) -> Outcome:
        target = context.templates.transition_name.strip()
        available = self._client.list_available_transitions(context.session, issue.key)
        if not available:
            logger.error("Unable to find transitions of %s: %s", issue.key, available.message)
            return available

        match = next((t for t in available.value or [] if t.matches(target)), None)
        if match is None:
            logger.error("Not possible to transition %s to status %s because the transition is not possible", issue.key, target)
            logger.error("Possible transitions: %s", [t.name for t in available.value or []])
            return Outcome.failure(f"transition '{target}' not available for {issue.key}")

        outcome = self._client.apply_transition(context.session, issue.key, match.id)
        if not outcome:
            logger.error("Could not update status for issue %s: %s", issue.key, outcome.message)
        return outcome

    def _fixed_versions(self, context: RunContext, issue: Issue) -> Outcome:
        final_ids: set[str] = set()
        if context.templates.fixed_version_names:
            final_ids |= context.versions.resolve(issue.project_key, context.templates.fixed_version_names)
        # if not resetting, keep the versions the issue already has
        if not self._settings.reset_fixed_versions:
            final_ids |= issue.fixed_version_ids

        outcome = self._client.replace_fixed_versions(context.session, issue.key, final_ids)
        if not outcome:
            logger.error("Could not update fixed versions for issue %s to %s: %s", issue.key, sorted(final_ids), outcome.message)
        return outcome
