"""Tests for the mezmurhub command line."""

import pytest

from mezmurhub import cli
from mezmurhub.context import AppContext


@pytest.fixture
def ctx(monkeypatch):
    context = AppContext.in_memory()
    monkeypatch.setattr(cli, "_load_context", lambda: context)
    return context


def test_create_user_and_set_admin(ctx):
    assert cli.main(["create-user", "Lead@Example.com", "--password", "password123"]) == 0
    assert not ctx.auth.users.get_by_email("lead@example.com").is_admin

    assert cli.main(["set-admin", "lead@example.com"]) == 0
    assert ctx.auth.users.get_by_email("lead@example.com").is_admin

    assert cli.main(["set-admin", "lead@example.com", "--revoke"]) == 0
    assert not ctx.auth.users.get_by_email("lead@example.com").is_admin


def test_create_user_errors_return_1(ctx):
    assert cli.main(["create-user", "a@example.com", "--password", "short"]) == 1
    assert cli.main(["create-user", "a@example.com", "--password", "password123"]) == 0
    assert cli.main(["create-user", "a@example.com", "--password", "password123"]) == 1


def test_set_admin_unknown_user(ctx):
    assert cli.main(["set-admin", "nobody@example.com"]) == 1


def test_list_users(ctx, capsys):
    ctx.auth.create_user("a@example.com", "password123", is_admin=True)
    assert cli.main(["list-users"]) == 0
    assert "a@example.com" in capsys.readouterr().out


def test_no_subcommand_prints_help():
    assert cli.main([]) == 1
