"""Applies build-time updates to the Jira issues matched by a query."""

from issue_updater.config import Credentials, UpdaterSettings, load_credentials
from issue_updater.orchestrator import MAX_ISSUES, IssueUpdater, RunReport, Step, StepResult
from issue_updater.policy import OutcomePolicy, RunState
from issue_updater.substitution import TemplateSet, resolve_templates, substitute_variable, substitute_variables
from issue_updater.versions import VersionCache, VersionResolver

__all__ = [
    "MAX_ISSUES",
    "Credentials",
    "IssueUpdater",
    "OutcomePolicy",
    "RunReport",
    "RunState",
    "Step",
    "StepResult",
    "TemplateSet",
    "UpdaterSettings",
    "VersionCache",
    "VersionResolver",
    "load_credentials",
    "resolve_templates",
    "substitute_variable",
    "substitute_variables",
]
