"""Tests for the period and date-range options shared by CLI commands."""

from datetime import date

import pytest
from dateutil.relativedelta import relativedelta

from caixa.cli.date_filters import period_flags_from
from caixa.cli.main import cli
from caixa.domain.entities import TransactionType
from caixa.utils.date_parser import get_date_range


@pytest.fixture
def run(cli_runner, temp_db):
    def invoke(*args):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])
        temp_db.disconnect()
        return result

    return invoke


@pytest.fixture
def dated(transaction_service):
    """One pending expense due in each of last month and this month."""
    this_start, _ = get_date_range("this-month")
    last_start, _ = get_date_range("last-month")
    last_day = last_start + relativedelta(days=9)
    this_day = this_start + relativedelta(days=1)
    transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="30.00", description="Material", due_date=last_day
    )
    transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="45.00", description="Frete", due_date=this_day
    )
    return last_day, this_day


def test_daily_last_month(run, dated):
    last_day, this_day = dated

    result = run("report", "daily", "--last-month")

    assert result.exit_code == 0
    assert last_day.strftime("%Y-%m-%d") in result.output
    assert this_day.strftime("%Y-%m-%d") not in result.output


def test_daily_explicit_range(run, dated):
    last_day, this_day = dated

    result = run("report", "daily", "--start-date", this_day.isoformat(), "--end-date", this_day.isoformat())

    assert result.exit_code == 0
    assert this_day.strftime("%Y-%m-%d") in result.output
    assert last_day.strftime("%Y-%m-%d") not in result.output


def test_export_this_month(run, dated):
    result = run("export", "--this-month")

    assert result.exit_code == 0
    assert "Frete" in result.output
    assert "Material" not in result.output
    assert "Exported 1 transaction(s)" in result.output


def test_transaction_list_last_month(run, dated):
    result = run("transaction", "list", "--last-month")

    assert "Found 1 transaction(s)" in result.output
    assert "Material" in result.output


def test_cash_flow_defaults_to_current_year(run):
    year = date.today().year

    result = run("report", "cash-flow")

    assert result.exit_code == 0
    assert f"Cash flow {date(year, 1, 1)} to {date(year, 12, 31)}" in result.output


def test_multiple_periods_rejected(run):
    result = run("report", "daily", "--this-month", "--last-month")

    assert result.exit_code == 1
    assert "Only one period option" in result.output


def test_period_with_explicit_date_rejected(run):
    result = run("report", "cash-flow", "--this-year", "--start-date", "2024-01-01")

    assert result.exit_code == 1
    assert "cannot be combined" in result.output


def test_invalid_start_date(run):
    result = run("transaction", "list", "--start-date", "not-a-date")

    assert result.exit_code == 1
    assert "Invalid start date" in result.output


def test_inverted_range_rejected(run):
    result = run("report", "statement", "--start-date", "01/02/2024", "--end-date", "01/01/2024")

    assert result.exit_code == 1
    assert "must not be after" in result.output


def test_period_flags_from_pops_command_kwargs():
    kwargs = {"this_month": True, "last_week": False, "account": "Itaú"}

    flags = period_flags_from(kwargs)

    assert flags["this-month"] is True
    assert flags["last-week"] is False
    assert set(flags) == {"this-month", "this-year", "this-week", "last-month", "last-year", "last-week"}
    assert kwargs == {"account": "Itaú"}
