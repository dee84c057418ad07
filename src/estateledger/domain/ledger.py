"""Ledger aggregation.

Rolls per-unit ledger records and approved expenses up into monthly,
annual and portfolio totals. Balances chain month over month:

    closing(p) = closing(p - 1) + collected(p) - expenses(p)

starting from the community's locked opening balance.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from estateledger.database.base import Database
from estateledger.domain.entities import (
    Community,
    CommunityMonthTotal,
    ExpenseStatus,
    LedgerStatus,
    MonthlyRollup,
    YearlyRollup,
)
from estateledger.domain.errors import NotFoundError, ValidationError, community_not_found
from estateledger.utils.date_parser import utc_today
from estateledger.utils.periods import (
    DateLike,
    add_months,
    iter_periods,
    month_bounds,
    parse_year_month,
    to_utc_date,
)

ZERO = Decimal("0")

MonthInput = Union[str, DateLike]


def _to_period(year_month: MonthInput) -> date:
    try:
        return parse_year_month(year_month)
    except ValueError as e:
        raise ValidationError(str(e))


class LedgerAggregatorService:
    """Service for building ledger reports."""

    def __init__(self, db: Database):
        """Initialize ledger aggregator.

        Args:
            db: Database instance
        """
        self.db = db

    def _get_community(self, community_id: int) -> Community:
        community = self.db.get_community(community_id)
        if community is None:
            raise NotFoundError(community_not_found(community_id))
        return community

    @staticmethod
    def starting_balance(community: Community) -> Decimal:
        """Balance before the first period: the locked opening balance, else zero."""
        if community.opening_balance_locked and community.opening_balance is not None:
            return Decimal(community.opening_balance)
        return ZERO

    def monthly_series(
        self, community_id: int, start_month: MonthInput, end_month: MonthInput
    ) -> list[MonthlyRollup]:
        """Build chained rollups for every month from start to end inclusive.

        Activity before ``start_month`` is folded into the first month's
        opening balance.

        Raises:
            NotFoundError: If the community does not exist
            ValidationError: If a month cannot be parsed or the range is reversed
        """
        community = self._get_community(community_id)
        start = _to_period(start_month)
        end = _to_period(end_month)
        if end < start:
            raise ValidationError(f"End month {end:%Y-%m} precedes start month {start:%Y-%m}")
        return self._series(community, start, end)

    def _series(self, community: Community, start: date, end: date) -> list[MonthlyRollup]:
        _, last_day = month_bounds(end)
        records = self.db.list_ledger_records(community_id=community.id, end_period=end)
        expenses = self.db.list_expenses(
            community_id=community.id, end_date=last_day, status=ExpenseStatus.APPROVED
        )

        collected_by_period: dict[date, Decimal] = {}
        pending_by_period: dict[date, Decimal] = {}
        for record in records:
            target = collected_by_period if record.status == LedgerStatus.PAID else pending_by_period
            target[record.period] = target.get(record.period, ZERO) + record.amount

        expenses_by_period: dict[date, Decimal] = {}
        for expense in expenses:
            period = expense.expense_date.replace(day=1)
            expenses_by_period[period] = expenses_by_period.get(period, ZERO) + expense.amount

        balance = self.starting_balance(community)
        balance += sum((v for p, v in collected_by_period.items() if p < start), ZERO)
        balance -= sum((v for p, v in expenses_by_period.items() if p < start), ZERO)

        rollups = []
        for period in iter_periods(start, end):
            collected = collected_by_period.get(period, ZERO)
            spent = expenses_by_period.get(period, ZERO)
            closing = balance + collected - spent
            rollups.append(
                MonthlyRollup(
                    community_id=community.id,
                    period=period,
                    opening_balance=balance,
                    collected=collected,
                    expenses=spent,
                    pending_dues=pending_by_period.get(period, ZERO),
                    closing_balance=closing,
                )
            )
            balance = closing
        return rollups

    def aggregate_month(self, community_id: int, year_month: MonthInput) -> MonthlyRollup:
        """Totals for one community and month.

        Raises:
            NotFoundError: If the community does not exist
            ValidationError: If the month cannot be parsed
        """
        community = self._get_community(community_id)
        period = _to_period(year_month)
        return self._series(community, period, period)[0]

    def aggregate_year(self, community_id: int, year: int) -> YearlyRollup:
        """Monthly breakdown and totals for a calendar year.

        Raises:
            NotFoundError: If the community does not exist
            ValidationError: If the year is out of range
        """
        community = self._get_community(community_id)
        if not 1 <= int(year) <= 9999:
            raise ValidationError(f"Invalid year: {year}")
        start = date(int(year), 1, 1)
        months = self._series(community, start, add_months(start, 11))
        return YearlyRollup(
            community_id=community.id,
            year=int(year),
            monthly_breakdown=tuple(months),
            total_collected=sum((m.collected for m in months), ZERO),
            total_expenses=sum((m.expenses for m in months), ZERO),
            closing_balance=months[-1].closing_balance,
        )

    def aggregate_all_communities(self, year_month: MonthInput) -> list[CommunityMonthTotal]:
        """Per-community totals for one month, highest collection first."""
        period = _to_period(year_month)
        totals = []
        for community in self.db.list_communities():
            rollup = self._series(community, period, period)[0]
            totals.append(
                CommunityMonthTotal(
                    community_id=community.id,
                    community_name=community.name,
                    collected=rollup.collected,
                    expenses=rollup.expenses,
                    pending_dues=rollup.pending_dues,
                    closing_balance=rollup.closing_balance,
                )
            )
        totals.sort(key=lambda t: (-t.collected, t.community_name))
        return totals

    def list_financial_years(
        self, community_id: Optional[int] = None, as_of: Optional[DateLike] = None
    ) -> list[int]:
        """Years that have ledger or expense activity, newest first.

        When there is no activity at all, the ``as_of`` year (default: the
        current UTC year) is returned so reports always have an option.
        """
        if community_id is not None:
            self._get_community(community_id)

        years = {r.period.year for r in self.db.list_ledger_records(community_id=community_id)}
        years.update(e.expense_date.year for e in self.db.list_expenses(community_id=community_id))
        if not years:
            years.add(to_utc_date(as_of).year if as_of is not None else utc_today().year)
        return sorted(years, reverse=True)
