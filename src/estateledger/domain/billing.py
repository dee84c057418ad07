"""Billing model resolution.

Turns a community's billing policy and a unit's metadata into the unit's
nominal monthly charge. Missing inputs bill nothing rather than failing.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Union

from estateledger.database.base import Database
from estateledger.domain.entities import BillingMode, Community, MaintenanceConfig, Unit
from estateledger.domain.errors import NotFoundError, community_not_found, unit_not_found

ZERO = Decimal("0")

# Substrings of legacy community labels that mean a flat charge per unit
_FIXED_AMOUNT_TOKENS = ("standalone", "fixed")


def classify_billing_mode(label: Union[BillingMode, str, None]) -> BillingMode:
    """Map a legacy free-text community label onto a billing mode.

    Any label containing "standalone" (or "fixed") is a fixed amount per
    unit; everything else, including a missing label, bills by area.
    """
    if isinstance(label, BillingMode):
        return label
    normalized = (label or "").strip().lower()
    if any(token in normalized for token in _FIXED_AMOUNT_TOKENS):
        return BillingMode.FIXED_AMOUNT
    return BillingMode.AREA_RATE


def active_config(
    configs: Sequence[MaintenanceConfig], period: Optional[date]
) -> Optional[MaintenanceConfig]:
    """Return the latest configuration effective on or before ``period``."""
    if period is None:
        return None
    eligible = [c for c in configs if c.effective_date <= period]
    if not eligible:
        return None
    return max(eligible, key=lambda c: (c.effective_date, c.id))


def compute_monthly_amount(
    community: Community,
    unit: Unit,
    period: Optional[date] = None,
    configs: Sequence[MaintenanceConfig] = (),
) -> Decimal:
    """Compute a unit's nominal monthly charge.

    Args:
        community: Community whose billing mode and rates apply
        unit: Unit being billed
        period: Period being billed, used to pick an effective-dated config
        configs: Rate history for the community

    Returns:
        Monthly amount, or zero when the required rate/area is absent
    """
    config = active_config(configs, period)
    rate = community.rate_per_area
    fixed = community.fixed_amount
    if config is not None:
        if config.rate_per_area is not None:
            rate = config.rate_per_area
        if config.fixed_amount is not None:
            fixed = config.fixed_amount

    if community.billing_mode == BillingMode.FIXED_AMOUNT:
        return Decimal(fixed) if fixed is not None else ZERO

    if rate is None or not unit.floor_area:
        return ZERO
    return Decimal(rate) * Decimal(unit.floor_area)


class BillingService:
    """Service resolving monthly charges from stored configuration."""

    def __init__(self, db: Database):
        """Initialize billing service.

        Args:
            db: Database instance
        """
        self.db = db

    def compute_monthly_amount(
        self,
        community: Community,
        unit: Unit,
        period: Optional[date] = None,
        configs: Optional[Sequence[MaintenanceConfig]] = None,
    ) -> Decimal:
        """Compute a unit's monthly charge, loading rate history if not given."""
        if configs is None:
            configs = self.db.list_maintenance_configs(community.id)
        return compute_monthly_amount(community, unit, period=period, configs=configs)

    def monthly_amount_for_unit(self, unit_id: int, period: Optional[date] = None) -> Decimal:
        """Look up a unit and its community, then compute the monthly charge.

        Raises:
            NotFoundError: If the unit or its community does not exist
        """
        unit = self.db.get_unit(unit_id)
        if unit is None:
            raise NotFoundError(unit_not_found(unit_id))
        community = self.db.get_community(unit.community_id)
        if community is None:
            raise NotFoundError(community_not_found(unit.community_id))
        return self.compute_monthly_amount(community, unit, period=period)
