"""Unit tests for credential loading and the command line entry point."""

import argparse

import pytest

from issue_updater import cli, config
from issue_updater.config import load_credentials, transport_from_env
from work_mgmt_client_interface.result import Outcome

JIRA_ENV = {
    "JIRA_BASE_URL": "https://test.atlassian.net",
    "JIRA_USER_EMAIL": "test@example.com",
    "JIRA_API_TOKEN": "dummy_token",
}


#--------------------------- tests for load_credentials --------------------------

def test_load_credentials_from_environment():
    credentials = load_credentials(environ=JIRA_ENV)

    assert credentials.endpoint == "https://test.atlassian.net"
    assert credentials.username == "test@example.com"
    assert credentials.password == "dummy_token"
    assert "dummy_token" not in repr(credentials)


def test_load_credentials_raises_when_env_vars_missing():
    with pytest.raises(EnvironmentError) as exc_info:
        load_credentials(environ={"JIRA_BASE_URL": "https://test.atlassian.net"})

    assert "JIRA_USER_EMAIL" in str(exc_info.value)
    assert "JIRA_API_TOKEN" in str(exc_info.value)


def test_load_credentials_rejects_non_http_url():
    with pytest.raises(ValueError):
        load_credentials(environ={**JIRA_ENV, "JIRA_BASE_URL": "jira.example.com"})


def test_load_credentials_prompts_for_missing_values(monkeypatch):
    answers = iter(["https://prompted.atlassian.net", "prompted@example.com"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    monkeypatch.setattr(config, "getpass", lambda prompt: "prompted_token")

    credentials = load_credentials(interactive=True, environ={})

    assert credentials == config.Credentials("https://prompted.atlassian.net", "prompted@example.com", "prompted_token")


def test_transport_defaults_to_rest():
    assert transport_from_env({}) == "rest"
    assert transport_from_env({"JIRA_TRANSPORT": " RPC "}) == "rpc"


#--------------------------- tests for the cli --------------------------

def test_var_argument_must_be_name_value():
    assert cli._variable("BUILD=4=2") == ("BUILD", "4=2")
    with pytest.raises(argparse.ArgumentTypeError):
        cli._variable("BUILD")


def test_settings_from_args():
    args = cli.build_parser().parse_args([
        "--jql", "project=$PROJECT",
        "--transition", "Close Issue",
        "--fixed-versions", "1.0,$VERSION",
        "--reset-fixed-versions",
        "--fail-if-no-issues",
    ])

    settings = cli.settings_from_args(args)

    assert settings.templates.query == "project=$PROJECT"
    assert settings.templates.transition_name == "Close Issue"
    assert settings.templates.fixed_versions == "1.0,$VERSION"
    assert settings.reset_fixed_versions is True
    assert settings.create_missing_versions is False
    assert settings.policy.fail_if_no_issues is True
    assert settings.policy.fail_if_query_fails is False


def test_comment_and_comment_file_are_exclusive():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--jql", "x", "--comment", "a", "--comment-file", "b"])


@pytest.fixture
def jira_env(monkeypatch):
    for name, value in JIRA_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("JIRA_TRANSPORT", raising=False)


def test_main_exits_with_2_without_credentials(monkeypatch):
    for name in JIRA_ENV:
        monkeypatch.delenv(name, raising=False)

    assert cli.main(["--jql", "project=PROJ"]) == 2


def test_main_build_variables_override_environment(jira_env, monkeypatch, client):
    monkeypatch.setenv("PROJECT", "FROM_ENV")
    transports = []
    monkeypatch.setattr(cli, "get_client", lambda transport: transports.append(transport) or client)

    status = cli.main(["--jql", "project=$PROJECT", "--var", "PROJECT=FROM_VAR"])

    assert status == 0
    assert transports == ["rest"]
    assert client.find_issues_by_query.call_args[0][1] == "project=FROM_VAR"


def test_main_exits_with_1_when_run_fails(jira_env, monkeypatch, client):
    client.find_issues_by_query.return_value = Outcome.failure("bad JQL")
    monkeypatch.setattr(cli, "get_client", lambda transport: client)

    assert cli.main(["--jql", "project=PROJ", "--fail-if-query-fails"]) == 1


def test_main_transport_option_wins_over_environment(jira_env, monkeypatch, client):
    monkeypatch.setenv("JIRA_TRANSPORT", "rest")
    transports = []
    monkeypatch.setattr(cli, "get_client", lambda transport: transports.append(transport) or client)

    cli.main(["--jql", "project=PROJ", "--transport", "rpc"])

    assert transports == ["rpc"]


def test_main_exits_with_2_for_unknown_transport(jira_env, monkeypatch, caplog):
    monkeypatch.setenv("JIRA_TRANSPORT", "soap")

    assert cli.main(["--jql", "project=PROJ"]) == 2
    assert "Unknown Jira transport 'soap'" in caplog.text
