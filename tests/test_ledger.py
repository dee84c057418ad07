"""Tests for ledger aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from estateledger.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def active_ledger(
    generator,
    opening_balance_service,
    payment_service,
    expense_service,
    billed_unit,
    admin,
    second_admin,
):
    """Three months of dues (Jan and Feb paid), one approved and one pending expense."""
    community_id = billed_unit.community_id
    opening_balance_service.set_initial(community_id, admin, "100000")
    records = generator.generate_periods(billed_unit.id, community_id, date(2024, 3, 10))
    for record in records[:2]:
        payment_service.verify_payment(record.id, admin)

    approved = expense_service.create_expense(
        community_id, admin, "Garden upkeep", "500", date(2024, 2, 20)
    )
    expense_service.approve_expense(approved.id, second_admin)
    expense_service.create_expense(community_id, admin, "Unapproved", "999", date(2024, 2, 21))
    return community_id


class TestAggregateMonth:
    def test_month_totals(self, ledger_service, active_ledger):
        feb = ledger_service.aggregate_month(active_ledger, "2024-02")

        assert feb.period == date(2024, 2, 1)
        assert feb.opening_balance == Decimal("103000")
        assert feb.collected == Decimal("3000")
        assert feb.expenses == Decimal("500")
        assert feb.pending_dues == Decimal("0")
        assert feb.closing_balance == Decimal("105500")

    def test_unpaid_dues_are_pending(self, ledger_service, active_ledger):
        march = ledger_service.aggregate_month(active_ledger, date(2024, 3, 15))

        assert march.collected == Decimal("0")
        assert march.pending_dues == Decimal("3000")
        assert march.closing_balance == Decimal("105500")

    def test_empty_month_is_zeroed(self, ledger_service, sample_community):
        rollup = ledger_service.aggregate_month(sample_community.id, "2030-01")

        assert rollup.collected == 0
        assert rollup.expenses == 0
        assert rollup.pending_dues == 0
        assert rollup.closing_balance == 0

    def test_draft_balance_is_not_a_starting_point(
        self, ledger_service, opening_balance_service, sample_community, admin
    ):
        opening_balance_service.save_draft(sample_community.id, admin, "5000")
        assert ledger_service.aggregate_month(sample_community.id, "2024-01").closing_balance == 0

    def test_unknown_community(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.aggregate_month(999, "2024-01")

    def test_invalid_month(self, ledger_service, sample_community):
        with pytest.raises(ValidationError):
            ledger_service.aggregate_month(sample_community.id, "2024-13")

    def test_last_representable_month(self, ledger_service, sample_community):
        rollup = ledger_service.aggregate_month(sample_community.id, "9999-12")
        assert rollup.period == date(9999, 12, 1)
        assert rollup.closing_balance == 0


class TestAggregateYear:
    def test_year_breakdown(self, ledger_service, active_ledger):
        year = ledger_service.aggregate_year(active_ledger, 2024)

        assert len(year.monthly_breakdown) == 12
        assert year.total_collected == Decimal("6000")
        assert year.total_expenses == Decimal("500")
        assert year.closing_balance == Decimal("105500")
        assert year.monthly_breakdown[0].opening_balance == Decimal("100000")

    def test_reconciliation_identity(self, ledger_service, active_ledger):
        months = ledger_service.aggregate_year(active_ledger, 2024).monthly_breakdown

        previous_closing = Decimal("100000")
        for month in months:
            assert month.opening_balance == previous_closing
            assert month.closing_balance == previous_closing + month.collected - month.expenses
            previous_closing = month.closing_balance

    def test_following_year_carries_balance(self, ledger_service, active_ledger):
        year = ledger_service.aggregate_year(active_ledger, 2025)
        assert year.monthly_breakdown[0].opening_balance == Decimal("105500")
        assert year.total_collected == 0

    def test_series_matches_single_months(self, ledger_service, active_ledger):
        series = ledger_service.monthly_series(active_ledger, "2024-01", "2024-03")
        singles = [ledger_service.aggregate_month(active_ledger, m) for m in ("2024-01", "2024-02", "2024-03")]
        assert series == singles

    def test_reversed_range(self, ledger_service, active_ledger):
        with pytest.raises(ValidationError):
            ledger_service.monthly_series(active_ledger, "2024-03", "2024-01")

    def test_last_representable_year(self, ledger_service, sample_community):
        year = ledger_service.aggregate_year(sample_community.id, 9999)
        assert year.monthly_breakdown[-1].period == date(9999, 12, 1)
        assert year.total_collected == 0


def test_portfolio_sorted_by_collection(
    ledger_service, active_ledger, fixed_community, sample_community
):
    totals = ledger_service.aggregate_all_communities("2024-01")

    assert [t.community_id for t in totals] == [sample_community.id, fixed_community.id]
    assert totals[0].collected == Decimal("3000")
    assert totals[1].collected == 0


class TestFinancialYears:
    def test_years_with_activity(self, ledger_service, active_ledger):
        assert ledger_service.list_financial_years(active_ledger) == [2024]

    def test_defaults_to_as_of_year(self, ledger_service, sample_community):
        assert ledger_service.list_financial_years(sample_community.id, as_of=date(2026, 5, 1)) == [2026]
