"""Tests for the billing model resolver."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from estateledger.domain.billing import (
    BillingService,
    active_config,
    classify_billing_mode,
    compute_monthly_amount,
)
from estateledger.domain.entities import (
    BillingMode,
    Community,
    CommunityStatus,
    MaintenanceConfig,
    Unit,
)
from estateledger.domain.errors import NotFoundError

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def make_community(mode=BillingMode.AREA_RATE, rate=None, fixed=None) -> Community:
    return Community(
        id=1,
        name="Test",
        billing_mode=mode,
        community_type=None,
        rate_per_area=rate,
        fixed_amount=fixed,
        opening_balance=None,
        opening_balance_locked=False,
        status=CommunityStatus.ACTIVE,
        created_at=NOW,
    )


def make_unit(area=None) -> Unit:
    return Unit(
        id=1,
        community_id=1,
        label="A-1",
        floor_area=area,
        billing_start_date=None,
        resident_id=None,
        created_at=NOW,
    )


def make_config(config_id, effective, rate=None, fixed=None) -> MaintenanceConfig:
    return MaintenanceConfig(
        id=config_id,
        community_id=1,
        effective_date=effective,
        rate_per_area=rate,
        fixed_amount=fixed,
        created_at=NOW,
    )


class TestClassifyBillingMode:
    @pytest.mark.parametrize(
        "label",
        ["Standalone", "standalone houses", "Independent STANDALONE villas", "Fixed"],
    )
    def test_fixed_labels(self, label):
        assert classify_billing_mode(label) == BillingMode.FIXED_AMOUNT

    @pytest.mark.parametrize("label", ["Apartment", "Gated Community", "", None])
    def test_area_labels(self, label):
        assert classify_billing_mode(label) == BillingMode.AREA_RATE

    def test_enum_passes_through(self):
        assert classify_billing_mode(BillingMode.FIXED_AMOUNT) == BillingMode.FIXED_AMOUNT


class TestComputeMonthlyAmount:
    def test_fixed_amount_ignores_unit(self):
        community = make_community(BillingMode.FIXED_AMOUNT, fixed=Decimal("3000"))
        assert compute_monthly_amount(community, make_unit(Decimal("1500"))) == Decimal("3000")
        assert compute_monthly_amount(community, make_unit(None)) == Decimal("3000")

    def test_area_rate(self):
        community = make_community(rate=Decimal("2.5"))
        assert compute_monthly_amount(community, make_unit(Decimal("1200"))) == Decimal("3000")

    def test_missing_area_is_zero(self):
        community = make_community(rate=Decimal("2.5"))
        assert compute_monthly_amount(community, make_unit(None)) == 0
        assert compute_monthly_amount(community, make_unit(Decimal("0"))) == 0

    def test_missing_rate_is_zero(self):
        assert compute_monthly_amount(make_community(), make_unit(Decimal("1200"))) == 0

    def test_missing_fixed_amount_is_zero(self):
        community = make_community(BillingMode.FIXED_AMOUNT)
        assert compute_monthly_amount(community, make_unit(Decimal("1200"))) == 0

    def test_effective_config_overrides_rate(self):
        community = make_community(rate=Decimal("2"))
        configs = [make_config(1, date(2024, 4, 1), rate=Decimal("3"))]
        unit = make_unit(Decimal("100"))

        assert compute_monthly_amount(community, unit, date(2024, 3, 1), configs) == Decimal("200")
        assert compute_monthly_amount(community, unit, date(2024, 4, 1), configs) == Decimal("300")

    def test_config_without_rate_falls_back_to_community(self):
        community = make_community(rate=Decimal("2"), fixed=Decimal("500"))
        configs = [make_config(1, date(2024, 1, 1), fixed=Decimal("700"))]
        unit = make_unit(Decimal("100"))

        assert compute_monthly_amount(community, unit, date(2024, 6, 1), configs) == Decimal("200")


def test_active_config_picks_latest_eligible():
    configs = [
        make_config(1, date(2024, 1, 1), rate=Decimal("1")),
        make_config(2, date(2024, 6, 1), rate=Decimal("2")),
        make_config(3, date(2025, 1, 1), rate=Decimal("3")),
    ]
    assert active_config(configs, date(2024, 7, 1)).id == 2
    assert active_config(configs, date(2023, 12, 1)) is None
    assert active_config(configs, None) is None


def test_billing_service_uses_stored_configuration(temp_db, sample_community, sample_unit):
    service = BillingService(temp_db)
    assert service.monthly_amount_for_unit(sample_unit.id) == Decimal("3000")


def test_billing_service_unknown_unit(temp_db):
    with pytest.raises(NotFoundError):
        BillingService(temp_db).monthly_amount_for_unit(999)
