import json

from typer.testing import CliRunner

from driverhire.cli.app import app

runner = CliRunner()


def test_user_create_with_manager_role_then_list_jobs() -> None:
    created = runner.invoke(
        app,
        ["user", "create", "--email", "ops@example.com", "--password", "secret123", "--manager"],
    )
    assert created.exit_code == 0, created.output
    body = json.loads(created.stdout)
    assert body["email"] == "ops@example.com"
    assert body["roles"] == ["candidate", "manager"]

    listed = runner.invoke(app, ["jobs", "list", "--include-inactive"])
    assert listed.exit_code == 0, listed.output
    assert json.loads(listed.stdout) == []


def test_user_create_rejects_short_password() -> None:
    result = runner.invoke(app, ["user", "create", "--email", "ops@example.com", "--password", "abc"])
    assert result.exit_code != 0


def test_grant_role_to_existing_user(make_account) -> None:
    make_account("driver@example.com")
    result = runner.invoke(app, ["user", "grant-role", "--email", "driver@example.com", "--role", "manager"])
    assert result.exit_code == 0, result.output
    assert "manager" in json.loads(result.stdout)["roles"]
