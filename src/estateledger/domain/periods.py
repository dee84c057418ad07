"""Pro-rata period generation.

Backfills one ledger record per elapsed billing month for a unit. Only the
unit's first month is pro-rated; every later month bills the full amount.
Re-running is safe: the (unit, period) uniqueness constraint decides which
insert wins, and existing records are never touched.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from estateledger.database.base import Database
from estateledger.domain.audit import AuditService
from estateledger.domain.billing import compute_monthly_amount
from estateledger.domain.entities import (
    AuditAction,
    Community,
    CommunityStatus,
    GenerationSummary,
    LedgerRecord,
    MaintenanceConfig,
    Unit,
)
from estateledger.domain.errors import (
    NotFoundError,
    community_not_found,
    unit_not_found,
    unit_not_in_community,
)
from estateledger.utils.periods import (
    DateLike,
    days_in_month,
    format_period,
    iter_periods,
    normalize_period,
    round_half_up,
    to_utc_date,
)

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def prorate(monthly_amount: Decimal, start_date: date) -> Decimal:
    """Scale a monthly charge to the days left in the start month.

    A start on the 1st bills the full month.
    """
    total_days = days_in_month(start_date)
    days_remaining = total_days - start_date.day + 1
    if days_remaining >= total_days:
        return round_half_up(monthly_amount)
    return round_half_up(Decimal(monthly_amount) * days_remaining / total_days)


def billing_schedule(
    community: Community,
    unit: Unit,
    as_of: DateLike,
    configs: Sequence[MaintenanceConfig] = (),
) -> list[tuple[date, Decimal]]:
    """Compute the (period, amount) pairs a unit owes up to ``as_of``.

    Periods whose amount is not positive are left out, so a unit without
    a start date, area or rate yields an empty schedule.
    """
    if unit.billing_start_date is None:
        return []

    start_date = to_utc_date(unit.billing_start_date)
    start_period = normalize_period(start_date)
    current_period = normalize_period(as_of)
    if current_period < start_period:
        # Clock skew can put as_of before the start; bill the start month anyway
        current_period = start_period

    schedule = []
    for period in iter_periods(start_period, current_period):
        monthly_amount = compute_monthly_amount(community, unit, period=period, configs=configs)
        if monthly_amount <= 0:
            continue
        if period == start_period:
            amount = prorate(monthly_amount, start_date)
        else:
            amount = round_half_up(monthly_amount)
        if amount > 0:
            schedule.append((period, amount))
    return schedule


class PeriodGeneratorService:
    """Service that backfills ledger records for units."""

    def __init__(self, db: Database):
        """Initialize period generator.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)

    def generate_periods(
        self,
        unit_id: int,
        community_id: int,
        as_of: DateLike,
        actor_id: str = SYSTEM_ACTOR,
    ) -> list[LedgerRecord]:
        """Create the missing ledger records for a unit up to ``as_of``.

        Args:
            unit_id: Unit to bill
            community_id: Community the unit belongs to
            as_of: Reference moment; its UTC month is the last period billed
            actor_id: Identity recorded in the audit trail

        Returns:
            Newly created records only (empty when everything already exists)

        Raises:
            NotFoundError: If the unit or community does not exist, or the
                unit belongs to another community
        """
        unit = self.db.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(unit_not_found(unit_id))
        community = self.db.get_community(community_id)
        if community is None:
            raise NotFoundError(community_not_found(community_id))
        if unit.community_id != community.id:
            raise NotFoundError(unit_not_in_community(unit_id, community_id))

        return self._generate(unit, community, as_of, actor_id=actor_id)

    def generate_for_community(
        self, community_id: int, as_of: DateLike, actor_id: str = SYSTEM_ACTOR
    ) -> GenerationSummary:
        """Run the generator for every unit of a community that has a start date.

        Raises:
            NotFoundError: If the community does not exist
        """
        community = self.db.get_community(community_id)
        if community is None:
            raise NotFoundError(community_not_found(community_id))

        units, created = self._generate_community(community, as_of, actor_id)
        return GenerationSummary(
            as_of=to_utc_date(as_of), communities=1, units=units, created=tuple(created)
        )

    def generate_all(self, as_of: DateLike, actor_id: str = SYSTEM_ACTOR) -> GenerationSummary:
        """Run the generator for every active community."""
        communities = self.db.list_communities(status=CommunityStatus.ACTIVE)
        unit_count = 0
        created: list[LedgerRecord] = []
        for community in communities:
            units, community_created = self._generate_community(community, as_of, actor_id)
            unit_count += units
            created.extend(community_created)

        logger.info(
            "Generation up to %s complete: %d new records across %d communities",
            format_period(normalize_period(as_of)),
            len(created),
            len(communities),
        )
        return GenerationSummary(
            as_of=to_utc_date(as_of),
            communities=len(communities),
            units=unit_count,
            created=tuple(created),
        )

    def _generate_community(
        self, community: Community, as_of: DateLike, actor_id: str
    ) -> tuple[int, list[LedgerRecord]]:
        units = self.db.list_units(community.id, billable_only=True)
        configs = self.db.list_maintenance_configs(community.id)
        created: list[LedgerRecord] = []
        for unit in units:
            created.extend(self._generate(unit, community, as_of, actor_id, configs=configs))
        return len(units), created

    def _generate(
        self,
        unit: Unit,
        community: Community,
        as_of: DateLike,
        actor_id: str,
        configs: Optional[Sequence[MaintenanceConfig]] = None,
    ) -> list[LedgerRecord]:
        if configs is None:
            configs = self.db.list_maintenance_configs(community.id)

        schedule = billing_schedule(community, unit, as_of, configs=configs)
        if not schedule:
            logger.debug("Unit %s has nothing to bill", unit.id)
            return []

        existing = {
            record.period
            for record in self.db.list_ledger_records(
                unit_id=unit.id, start_period=schedule[0][0], end_period=schedule[-1][0]
            )
        }

        created = []
        for period, amount in schedule:
            if period in existing:
                continue
            with self.db.atomic():
                record = self.db.insert_ledger_record_if_absent(
                    unit_id=unit.id,
                    community_id=community.id,
                    period=period,
                    amount=amount,
                    resident_id=unit.resident_id,
                )
                if record is None:
                    # Lost the race to a concurrent run; that run owns the record
                    continue
                created.append(record)
                self.audit.record(
                    entity_kind="LedgerRecord",
                    entity_id=record.id,
                    action=AuditAction.CREATE,
                    actor_id=actor_id,
                    community_id=community.id,
                    new=record,
                    description=f"Maintenance due for {format_period(period)} generated: {amount}",
                )

        if created:
            logger.info("Generated %d ledger records for unit %s", len(created), unit.id)
        return created
