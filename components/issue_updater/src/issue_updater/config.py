"""
Configuration
-------------
Credentials come from the environment, the way CI servers hand secrets to a
build step:

    JIRA_BASE_URL   https://myorg.atlassian.net
    JIRA_USER_EMAIL me@example.com
    JIRA_API_TOKEN  <API token, or the password for the legacy RPC endpoint>
    JIRA_TRANSPORT  rest (default) or rpc

With interactive=True the user is prompted for whatever is missing.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from getpass import getpass

from issue_updater.policy import OutcomePolicy
from issue_updater.substitution import TemplateSet

_HTTP_PREFIXES = ("http://", "https://")


@dataclass(frozen=True)
class Credentials:
    endpoint: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class UpdaterSettings:
    """What a run does with the issues it finds."""

    templates: TemplateSet
    reset_fixed_versions: bool = False
    create_missing_versions: bool = False
    policy: OutcomePolicy = field(default_factory=OutcomePolicy)


def load_credentials(*, interactive: bool = False, environ: Mapping[str, str] | None = None) -> Credentials:
    """Return the Jira credentials.

    Reads credentials from environment variables. If "interactive = True" and
    any variable is missing, the user will be prompted.

    Raises:
        EnvironmentError: If values are missing and interactive is False
        ValueError: If the base URL is not an http(s) URL

    """
    environ = os.environ if environ is None else environ
    base_url = environ.get("JIRA_BASE_URL", "")
    user_email = environ.get("JIRA_USER_EMAIL", "")
    api_token = environ.get("JIRA_API_TOKEN", "")

    if interactive:
        if not base_url:
            base_url = input("Jira base URL (e.g. https://myorg.atlassian.net): ").strip()
        if not user_email:
            user_email = input("Jira user email: ").strip()
        if not api_token:
            api_token = getpass("Jira API token: ")
    else:
        #collects the missing fields and raises an error alerting to the missing values
        missing = [name for name, val in [
            ("JIRA_BASE_URL", base_url),
            ("JIRA_USER_EMAIL", user_email),
            ("JIRA_API_TOKEN", api_token),
        ] if not val]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Set them or pass --interactive."
            )

    if not base_url.startswith(_HTTP_PREFIXES):
        raise ValueError("The Jira URL is mandatory and must start with http:// or https://")
    return Credentials(base_url, user_email, api_token)


def transport_from_env(environ: Mapping[str, str] | None = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get("JIRA_TRANSPORT", "rest").strip().lower() or "rest"
