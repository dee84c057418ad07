"""Shared pytest fixtures for estateledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from estateledger.database.factories import create_sqlite_database
from estateledger.domain.audit import AuditService
from estateledger.domain.community import CommunityService, UnitService
from estateledger.domain.entities import BillingMode, Principal, Role
from estateledger.domain.expenses import ExpenseService
from estateledger.domain.ledger import LedgerAggregatorService
from estateledger.domain.opening_balance import OpeningBalanceService
from estateledger.domain.payments import PaymentService
from estateledger.domain.periods import PeriodGeneratorService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def super_admin():
    return Principal(id="root", role=Role.SUPER_ADMIN)


@pytest.fixture
def community_service(temp_db):
    """Create a CommunityService with a temporary database."""
    return CommunityService(temp_db)


@pytest.fixture
def unit_service(temp_db):
    """Create a UnitService with a temporary database."""
    return UnitService(temp_db)


@pytest.fixture
def generator(temp_db):
    """Create a PeriodGeneratorService with a temporary database."""
    return PeriodGeneratorService(temp_db)


@pytest.fixture
def opening_balance_service(temp_db):
    """Create an OpeningBalanceService with a temporary database."""
    return OpeningBalanceService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerAggregatorService with a temporary database."""
    return LedgerAggregatorService(temp_db)


@pytest.fixture
def payment_service(temp_db):
    """Create a PaymentService with a temporary database."""
    return PaymentService(temp_db)


@pytest.fixture
def expense_service(temp_db):
    """Create an ExpenseService with a temporary database."""
    return ExpenseService(temp_db)


@pytest.fixture
def audit_service(temp_db):
    """Create an AuditService with a temporary database."""
    return AuditService(temp_db)


@pytest.fixture
def sample_community(community_service, super_admin):
    """Area-rate community billing 2.5 per unit of area."""
    return community_service.create_community(
        super_admin,
        "Green Meadows",
        community_type="Apartment",
        rate_per_area=Decimal("2.5"),
    )


@pytest.fixture
def fixed_community(community_service, super_admin):
    """Fixed-amount community billing 3000 per unit."""
    return community_service.create_community(
        super_admin,
        "Palm Villas",
        community_type="Standalone Houses",
        fixed_amount=Decimal("3000"),
    )


@pytest.fixture
def admin(sample_community):
    """Community administrator of the sample community."""
    return Principal(id="alice", role=Role.ADMIN, community_id=sample_community.id)


@pytest.fixture
def second_admin(sample_community):
    """Another administrator of the sample community."""
    return Principal(id="bob", role=Role.ADMIN, community_id=sample_community.id)


@pytest.fixture
def resident(sample_community):
    """Resident of the sample unit."""
    return Principal(id="rita", role=Role.RESIDENT, community_id=sample_community.id)


@pytest.fixture
def sample_unit(unit_service, sample_community, admin, resident):
    """1200 sq. ft. unit with no billing start yet (monthly charge 3000)."""
    return unit_service.create_unit(
        sample_community.id, admin, "A-101", floor_area=Decimal("1200"), resident_id=resident.id
    )


@pytest.fixture
def billed_unit(temp_db, sample_unit):
    """Sample unit billed from 2024-01-01."""
    temp_db.update_unit_billing_start(sample_unit.id, date(2024, 1, 1))
    return temp_db.get_unit(sample_unit.id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
