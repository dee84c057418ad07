"""Community and unit domain services."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from estateledger.database.base import Database
from estateledger.domain.access import require_admin, require_member, require_super_admin
from estateledger.domain.audit import AuditService
from estateledger.domain.billing import classify_billing_mode
from estateledger.domain.entities import (
    AuditAction,
    BillingMode,
    Community,
    CommunityStatus,
    LedgerRecord,
    MaintenanceConfig,
    Principal,
    Unit,
)
from estateledger.domain.errors import (
    NotFoundError,
    ValidationError,
    community_not_found,
    unit_not_found,
)
from estateledger.domain.periods import PeriodGeneratorService
from estateledger.utils.amount_parser import MONEY_PLACES, RATE_PLACES, parse_amount
from estateledger.utils.date_parser import utc_today
from estateledger.utils.periods import DateLike, normalize_period, to_utc_date

logger = logging.getLogger(__name__)

NumberInput = Union[Decimal, int, float, str, None]


def _to_non_negative(
    value: NumberInput, field: str, max_places: int = MONEY_PLACES
) -> Optional[Decimal]:
    """Parse an optional rate/area; negatives and excess precision are rejected."""
    if value is None:
        return None
    try:
        amount = parse_amount(value, max_places)
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {e}")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount


class CommunityService:
    """Service for managing communities and their billing policy."""

    def __init__(self, db: Database):
        """Initialize community service.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)

    def create_community(
        self,
        principal: Principal,
        name: str,
        community_type: Optional[str] = None,
        billing_mode: Optional[BillingMode] = None,
        rate_per_area: NumberInput = None,
        fixed_amount: NumberInput = None,
    ) -> Community:
        """Create a new community.

        Args:
            principal: Acting user; must be a super admin
            name: Unique community name
            community_type: Free-text label such as "Apartment" or "Standalone Houses"
            billing_mode: Explicit billing mode; derived from ``community_type`` if omitted
            rate_per_area: Rate per unit of floor area (area-rate billing)
            fixed_amount: Flat charge per unit (fixed-amount billing)

        Returns:
            The created community

        Raises:
            AuthorizationError: If the principal is not a super admin
            ValidationError: If the name is blank or a rate is malformed
            ConflictError: If the name is taken
        """
        require_super_admin(principal)
        if not name or not name.strip():
            raise ValidationError("Community name is required")

        mode = billing_mode if billing_mode is not None else classify_billing_mode(community_type)
        community_id = self.db.create_community(
            name=name.strip(),
            billing_mode=mode,
            community_type=community_type,
            rate_per_area=_to_non_negative(rate_per_area, "rate per area", RATE_PLACES),
            fixed_amount=_to_non_negative(fixed_amount, "fixed amount"),
        )
        community = self.db.get_community(community_id)
        self.audit.record(
            entity_kind="Community",
            entity_id=community_id,
            action=AuditAction.CREATE,
            actor_id=principal.id,
            community_id=community_id,
            new=community,
            description=f"Community '{community.name}' created ({mode.value})",
        )
        logger.info("Created community %s '%s' billed by %s", community_id, community.name, mode.value)
        return community

    def get_community(self, community_id: int) -> Optional[Community]:
        """Get community by ID.

        Returns:
            Community entity or None if not found
        """
        return self.db.get_community(community_id)

    def require_community(self, community_id: int) -> Community:
        """Get community by ID, raising NotFoundError if missing."""
        community = self.db.get_community(community_id)
        if community is None:
            raise NotFoundError(community_not_found(community_id))
        return community

    def list_communities(self, status: Optional[CommunityStatus] = None) -> list[Community]:
        return self.db.list_communities(status=status)

    def update_billing(
        self,
        community_id: int,
        admin: Principal,
        community_type: Optional[str] = None,
        billing_mode: Optional[BillingMode] = None,
        rate_per_area: NumberInput = None,
        fixed_amount: NumberInput = None,
    ) -> Community:
        """Change a community's billing policy.

        A new ``community_type`` re-derives the billing mode unless an
        explicit ``billing_mode`` is also given. Records already generated
        keep their amounts.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            NotFoundError: If the community does not exist
        """
        require_admin(admin, community_id)
        before = self.require_community(community_id)

        mode = billing_mode
        if mode is None and community_type is not None:
            mode = classify_billing_mode(community_type)

        self.db.update_community_billing(
            community_id,
            billing_mode=mode,
            community_type=community_type,
            rate_per_area=_to_non_negative(rate_per_area, "rate per area", RATE_PLACES),
            fixed_amount=_to_non_negative(fixed_amount, "fixed amount"),
        )
        after = self.require_community(community_id)
        self.audit.record(
            entity_kind="Community",
            entity_id=community_id,
            action=AuditAction.UPDATE,
            actor_id=admin.id,
            community_id=community_id,
            old=before,
            new=after,
            description="Billing configuration updated",
        )
        return after

    def add_maintenance_config(
        self,
        community_id: int,
        admin: Principal,
        effective_date: DateLike,
        rate_per_area: NumberInput = None,
        fixed_amount: NumberInput = None,
    ) -> MaintenanceConfig:
        """Add a rate change effective from the month containing ``effective_date``.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            ValidationError: If neither rate is given
        """
        require_admin(admin, community_id)
        self.require_community(community_id)
        rate = _to_non_negative(rate_per_area, "rate per area", RATE_PLACES)
        fixed = _to_non_negative(fixed_amount, "fixed amount")
        if rate is None and fixed is None:
            raise ValidationError("A maintenance configuration needs a rate or a fixed amount")

        config_id = self.db.add_maintenance_config(
            community_id,
            effective_date=normalize_period(effective_date),
            rate_per_area=rate,
            fixed_amount=fixed,
        )
        config = next(c for c in self.db.list_maintenance_configs(community_id) if c.id == config_id)
        self.audit.record(
            entity_kind="MaintenanceConfig",
            entity_id=config_id,
            action=AuditAction.CREATE,
            actor_id=admin.id,
            community_id=community_id,
            new=config,
            description=f"Maintenance rates effective {config.effective_date:%Y-%m}",
        )
        return config

    def list_maintenance_configs(self, community_id: int) -> list[MaintenanceConfig]:
        self.require_community(community_id)
        return self.db.list_maintenance_configs(community_id)

    def set_status(
        self, community_id: int, principal: Principal, status: CommunityStatus
    ) -> Community:
        """Enable or disable a community. Disabled communities are not billed.

        Raises:
            AuthorizationError: If the principal is not a super admin
        """
        require_super_admin(principal)
        before = self.require_community(community_id)
        self.db.update_community_status(community_id, status)
        after = self.require_community(community_id)
        self.audit.record(
            entity_kind="Community",
            entity_id=community_id,
            action=AuditAction.UPDATE,
            actor_id=principal.id,
            community_id=community_id,
            old=before,
            new=after,
            description=f"Community status set to {status.value}",
        )
        return after


class UnitService:
    """Service for managing units and their billing start."""

    def __init__(self, db: Database):
        """Initialize unit service.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)
        self.generator = PeriodGeneratorService(db)

    def create_unit(
        self,
        community_id: int,
        admin: Principal,
        label: str,
        floor_area: NumberInput = None,
        resident_id: Optional[str] = None,
    ) -> Unit:
        """Register a unit in a community.

        Billing does not start until ``set_billing_start`` is called.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            NotFoundError: If the community does not exist
            ValidationError: If the label is blank or the area is malformed
            ConflictError: If the label is taken within the community
        """
        require_admin(admin, community_id)
        if self.db.get_community(community_id) is None:
            raise NotFoundError(community_not_found(community_id))
        if not label or not label.strip():
            raise ValidationError("Unit label is required")

        unit_id = self.db.create_unit(
            community_id=community_id,
            label=label.strip(),
            floor_area=_to_non_negative(floor_area, "floor area"),
            resident_id=resident_id,
        )
        unit = self.db.get_unit(unit_id)
        self.audit.record(
            entity_kind="Unit",
            entity_id=unit_id,
            action=AuditAction.CREATE,
            actor_id=admin.id,
            community_id=community_id,
            new=unit,
            description=f"Unit '{unit.label}' added",
        )
        return unit

    def get_unit(self, unit_id: int) -> Optional[Unit]:
        return self.db.get_unit(unit_id)

    def list_units(self, community_id: int, principal: Principal) -> list[Unit]:
        """List a community's units.

        Raises:
            AuthorizationError: If the community is outside the principal's perimeter
        """
        require_member(principal, community_id)
        return self.db.list_units(community_id)

    def set_billing_start(
        self,
        unit_id: int,
        admin: Principal,
        start_date: DateLike,
        as_of: Optional[DateLike] = None,
    ) -> list[LedgerRecord]:
        """Set when a unit starts paying maintenance and backfill its dues.

        Existing ledger records are never rewritten, so moving the start
        date only adds months that are still missing.

        Args:
            unit_id: Unit ID
            admin: Acting community administrator
            start_date: First billable day
            as_of: Last moment to bill up to (default: today, UTC)

        Returns:
            Ledger records created by the backfill

        Raises:
            AuthorizationError: If ``admin`` does not administer the unit's community
            NotFoundError: If the unit does not exist
        """
        unit = self.db.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(unit_not_found(unit_id))
        require_admin(admin, unit.community_id)

        start: date = to_utc_date(start_date)
        self.db.update_unit_billing_start(unit_id, start)
        updated = self.db.get_unit(unit_id)
        self.audit.record(
            entity_kind="Unit",
            entity_id=unit_id,
            action=AuditAction.UPDATE,
            actor_id=admin.id,
            community_id=unit.community_id,
            old=unit,
            new=updated,
            description=f"Billing start set to {start.isoformat()}",
        )

        created = self.generator.generate_periods(
            unit_id,
            unit.community_id,
            as_of if as_of is not None else utc_today(),
            actor_id=admin.id,
        )
        logger.info(
            "Billing start of unit %s set to %s; %d records backfilled",
            unit_id,
            start.isoformat(),
            len(created),
        )
        return created
