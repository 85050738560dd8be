"""Command line entry point, meant to run as the last step of a CI build."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from issue_updater.config import UpdaterSettings, load_credentials, transport_from_env
from issue_updater.orchestrator import IssueUpdater
from issue_updater.policy import OutcomePolicy
from issue_updater.substitution import TemplateSet
from jira_client_impl import TRANSPORTS, get_client

logger = logging.getLogger(__name__)


def _variable(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-updater",
        description="Update the Jira issues matched by a JQL query. "
        "$NAME placeholders are expanded from the environment and --var values.",
    )
    parser.add_argument("--jql", required=True, help="query selecting the issues to update")
    parser.add_argument("--transition", default="", help="workflow action to execute on each issue")
    comment = parser.add_mutually_exclusive_group()
    comment.add_argument("--comment", default="", help="comment to add to each issue")
    comment.add_argument("--comment-file", default="", help="file whose content is added as comment")
    parser.add_argument("--custom-field-id", default="", help="id of a custom field to set, e.g. customfield_10862")
    parser.add_argument("--custom-field-value", default="", help="value for --custom-field-id")
    parser.add_argument("--fixed-versions", default="", help="comma separated fixed version names")
    parser.add_argument("--reset-fixed-versions", action="store_true",
                        help="replace the fixed versions of each issue instead of adding to them")
    parser.add_argument("--create-missing-versions", action="store_true",
                        help="create fixed versions that do not exist yet")
    parser.add_argument("--fail-if-query-fails", action="store_true")
    parser.add_argument("--fail-if-no-issues", action="store_true")
    parser.add_argument("--fail-if-no-connection", action="store_true")
    parser.add_argument("--transport", choices=TRANSPORTS, default=None,
                        help="Jira API to use (default: $JIRA_TRANSPORT or rest)")
    parser.add_argument("--var", dest="variables", type=_variable, action="append", default=[],
                        metavar="NAME=VALUE", help="build variable, overrides the environment (repeatable)")
    parser.add_argument("--interactive", action="store_true", help="prompt for missing credentials")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> UpdaterSettings:
    return UpdaterSettings(
        templates=TemplateSet(
            query=args.jql,
            transition_name=args.transition,
            comment=args.comment,
            comment_file=args.comment_file,
            custom_field_id=args.custom_field_id,
            custom_field_value=args.custom_field_value,
            fixed_versions=args.fixed_versions,
        ),
        reset_fixed_versions=args.reset_fixed_versions,
        create_missing_versions=args.create_missing_versions,
        policy=OutcomePolicy(
            fail_if_query_fails=args.fail_if_query_fails,
            fail_if_no_issues=args.fail_if_no_issues,
            fail_if_no_connection=args.fail_if_no_connection,
        ),
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        credentials = load_credentials(interactive=args.interactive)
    except (EnvironmentError, ValueError) as exc:
        logger.error("%s", exc)
        return 2

    #build variables win over the environment
    variables = dict(os.environ)
    variables.update(args.variables)

    try:
        client = get_client(args.transport or transport_from_env())
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    updater = IssueUpdater(client, credentials, settings_from_args(args))
    return 0 if updater.run(variables) else 1


if __name__ == "__main__":
    sys.exit(main())
