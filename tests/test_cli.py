"""Tests for CLI commands."""

import re

import pytest
from estateledger.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database, as the default super admin."""

    def invoke(*args, actor=None, role=None, community=None):
        options = ["--db-path", temp_db.database_path]
        if actor is not None:
            options += ["--actor", actor]
        if role is not None:
            options += ["--role", role]
        if community is not None:
            options += ["--actor-community", str(community)]
        return cli_runner.invoke(cli, options + list(args))

    return invoke


def created_id(output: str) -> str:
    match = re.search(r"ID: (\d+)", output)
    assert match is not None, output
    return match.group(1)


@pytest.fixture
def community_id(run):
    result = run("community", "create", "Green Meadows", "--type", "Apartment", "--rate", "2.5")
    assert result.exit_code == 0, result.output
    return created_id(result.output)


@pytest.fixture
def unit_id(run, community_id):
    result = run("unit", "add", community_id, "A-101", "--area", "1200", "--resident", "rita")
    assert result.exit_code == 0, result.output
    return created_id(result.output)


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "community" in result.output
    assert "ledger" in result.output


def test_community_create_and_list(run, community_id):
    result = run("community", "list")
    assert result.exit_code == 0
    assert "Green Meadows" in result.output
    assert "AreaRate" in result.output


def test_community_create_standalone_is_fixed(run):
    result = run("community", "create", "Palm Villas", "--type", "Standalone Houses", "--fixed", "3000")
    assert result.exit_code == 0
    assert "FixedAmount" in result.output


def test_community_list_empty(run):
    result = run("community", "list")
    assert result.exit_code == 0
    assert "No communities found" in result.output


def test_community_create_requires_super_admin(run):
    result = run("community", "create", "Mine", actor="alice", role="Admin", community=1)
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "super admin" in result.output


def test_community_show(run, community_id):
    result = run("community", "show", community_id)
    assert result.exit_code == 0
    assert "Green Meadows" in result.output
    assert "Unset" in result.output


def test_community_show_unknown(run):
    result = run("community", "show", "99")
    assert result.exit_code == 1
    assert "Community 99 not found" in result.output


def test_set_start_backfills(run, unit_id):
    result = run("unit", "set-start", unit_id, "2024-01-01", "--as-of", "2024-03-15")
    assert result.exit_code == 0, result.output
    assert "Generated 3 ledger records" in result.output
    assert "2024-01: 3,000.00" in result.output


def test_billing_generate_is_idempotent(run, unit_id):
    run("unit", "set-start", unit_id, "2024-01-01", "--as-of", "2024-02-01")

    result = run("billing", "generate", "--as-of", "2024-02-20")
    assert result.exit_code == 0, result.output
    assert "Generated 0 ledger records" in result.output

    result = run("billing", "generate", "--unit", unit_id, "--as-of", "2024-03-20")
    assert result.exit_code == 0, result.output
    assert "Generated 1 ledger record " in result.output


def test_billing_generate_invalid_date(run):
    result = run("billing", "generate", "--as-of", "not a date")
    assert result.exit_code == 1
    assert "Invalid as-of date" in result.output


def test_opening_balance_dual_control(run, community_id):
    result = run("balance", "set", community_id, "100000")
    assert result.exit_code == 0, result.output
    assert "locked at 100,000.00" in result.output

    result = run("balance", "request", community_id, "120000", "--reason", "Missed deposit")
    assert result.exit_code == 0, result.output

    result = run("balance", "approve", community_id)
    assert result.exit_code == 1
    assert "cannot review your own" in result.output

    result = run("balance", "approve", community_id, actor="bob", role="Admin", community=community_id)
    assert result.exit_code == 0, result.output
    assert "now 120,000.00" in result.output

    result = run("balance", "show", community_id)
    assert "120,000.00 (Locked)" in result.output


def test_opening_balance_reject(run, community_id):
    run("balance", "set", community_id, "100000")
    run("balance", "request", community_id, "1", "--reason", "Typo")

    result = run("balance", "reject", community_id, actor="bob", role="Admin", community=community_id)
    assert result.exit_code == 0, result.output
    assert "stays 100,000.00" in result.output


def test_balance_set_twice_fails(run, community_id):
    run("balance", "set", community_id, "100000")
    result = run("balance", "set", community_id, "5")
    assert result.exit_code == 1
    assert "already locked" in result.output


def test_payment_and_ledger_report(run, community_id, unit_id):
    run("balance", "set", community_id, "100000")
    run("unit", "set-start", unit_id, "2024-01-01", "--as-of", "2024-01-31")

    result = run("payment", "list", community_id)
    assert result.exit_code == 0
    record_id = re.search(r"ID:\s+(\d+)", result.output).group(1)

    result = run("payment", "submit", record_id, "UPI-1", actor="rita", role="Resident", community=community_id)
    assert result.exit_code == 0, result.output
    assert "awaiting verification" in result.output

    result = run("payment", "verify", record_id)
    assert result.exit_code == 0, result.output
    assert "marked Paid" in result.output

    result = run("ledger", "month", community_id, "2024-01")
    assert result.exit_code == 0, result.output
    assert "Collected:" in result.output
    assert "3,000.00" in result.output
    assert "103,000.00" in result.output


def test_expense_workflow(run, community_id):
    result = run("expense", "add", community_id, "Lift service", "1200", "--date", "2024-02-10")
    assert result.exit_code == 0, result.output
    expense_id = created_id(result.output)

    result = run("expense", "approve", expense_id)
    assert result.exit_code == 1
    assert "cannot review your own expense" in result.output

    result = run("expense", "approve", expense_id, actor="bob", role="Admin", community=community_id)
    assert result.exit_code == 0, result.output

    result = run("expense", "list", community_id, "--status", "Approved")
    assert "Lift service" in result.output

    result = run("ledger", "year", community_id, "2024")
    assert result.exit_code == 0, result.output
    assert "Total expenses: 1,200.00" in result.output


def test_ledger_month_invalid(run, community_id):
    result = run("ledger", "month", community_id, "2024-13")
    assert result.exit_code == 1
    assert "Invalid month" in result.output


def test_ledger_portfolio_and_years(run, community_id, unit_id):
    run("unit", "set-start", unit_id, "2023-12-01", "--as-of", "2024-01-31")

    result = run("ledger", "portfolio", "2024-01")
    assert result.exit_code == 0
    assert "Green Meadows" in result.output

    result = run("ledger", "years", "--community", community_id)
    assert result.output.split() == ["2024", "2023"]


def test_audit_log_shows_changes(run, community_id):
    run("community", "configure", community_id, "--rate", "3")

    result = run("audit", "log", community_id, "--entity", "Community", "--entity-id", community_id)
    assert result.exit_code == 0, result.output
    assert "CREATE Community#" in result.output
    assert 'rate_per_area: "2.5" -> "3"' in result.output


def test_audit_log_outside_perimeter(run, community_id):
    result = run("audit", "log", community_id, actor="eve", role="Admin", community=99)
    assert result.exit_code == 1
    assert "outside community" in result.output
