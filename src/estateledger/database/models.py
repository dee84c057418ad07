"""SQLAlchemy models for estateledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    Index,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, scoped_session, sessionmaker

from estateledger.domain.entities import (
    AuditAction,
    BillingMode,
    CommunityStatus,
    ExpenseStatus,
    LedgerStatus,
    RevisionStatus,
)

Base = declarative_base()


def _enum_column(enum_cls, name: str) -> Enum:
    """Store enum values (e.g. 'Pending') rather than member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Community(Base):
    """Community model with billing policy and opening balance."""

    __tablename__ = "communities"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    billing_mode = Column(_enum_column(BillingMode, "billing_mode"), nullable=False)
    community_type = Column(String, nullable=True)
    rate_per_area = Column(Numeric(12, 4), nullable=True)
    fixed_amount = Column(Numeric(12, 2), nullable=True)
    opening_balance = Column(Numeric(14, 2), nullable=True)
    opening_balance_locked = Column(Boolean, default=False, nullable=False)
    status = Column(
        _enum_column(CommunityStatus, "community_status"),
        default=CommunityStatus.ACTIVE,
        nullable=False,
    )
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    units = relationship("Unit", back_populates="community")
    maintenance_configs = relationship("MaintenanceConfig", back_populates="community")


class MaintenanceConfig(Base):
    """Effective-dated billing rates."""

    __tablename__ = "maintenance_configs"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id"), nullable=False)
    effective_date = Column(Date, nullable=False)
    rate_per_area = Column(Numeric(12, 4), nullable=True)
    fixed_amount = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    community = relationship("Community", back_populates="maintenance_configs")


class Unit(Base):
    """Unit model."""

    __tablename__ = "units"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id"), nullable=False)
    label = Column(String, nullable=False)
    floor_area = Column(Numeric(12, 2), nullable=True)
    billing_start_date = Column(Date, nullable=True)
    resident_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("community_id", "label", name="uq_community_unit_label"),)

    # Relationships
    community = relationship("Community", back_populates="units")
    ledger_records = relationship("LedgerRecord", back_populates="unit")


class LedgerRecord(Base):
    """Ledger record model: one unit, one period."""

    __tablename__ = "ledger_records"

    id = Column(Integer, primary_key=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)
    community_id = Column(Integer, ForeignKey("communities.id"), nullable=False)
    resident_id = Column(String, nullable=True)
    period = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(
        _enum_column(LedgerStatus, "ledger_status"), default=LedgerStatus.PENDING, nullable=False
    )
    payment_reference = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # The generator's idempotency relies on this constraint
    __table_args__ = (
        UniqueConstraint("unit_id", "period", name="uq_ledger_unit_period"),
        Index("ix_ledger_community_period", "community_id", "period"),
    )

    unit = relationship("Unit", back_populates="ledger_records")


class OpeningBalanceRevisionRequest(Base):
    """Opening balance revision request model."""

    __tablename__ = "opening_balance_revision_requests"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id"), nullable=False)
    requester_id = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(String, nullable=False)
    status = Column(
        _enum_column(RevisionStatus, "revision_status"),
        default=RevisionStatus.PENDING,
        nullable=False,
    )
    resolved_by = Column(String, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # At most one outstanding request per community
    __table_args__ = (
        Index(
            "uq_pending_revision_per_community",
            "community_id",
            unique=True,
            sqlite_where=text("status = 'Pending'"),
            postgresql_where=text("status = 'Pending'"),
        ),
    )


class Expense(Base):
    """Community expense model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, ForeignKey("communities.id"), nullable=False)
    title = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    expense_date = Column(Date, nullable=False)
    status = Column(
        _enum_column(ExpenseStatus, "expense_status"), default=ExpenseStatus.PENDING, nullable=False
    )
    submitted_by = Column(String, nullable=False)
    approved_by = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class AuditLogEntry(Base):
    """Append-only audit log model."""

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True)
    community_id = Column(Integer, nullable=True)
    entity_kind = Column(String, nullable=False)
    entity_id = Column(String, nullable=False)
    action = Column(_enum_column(AuditAction, "audit_action"), nullable=False)
    actor_id = Column(String, nullable=False)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("ix_audit_entity", "entity_kind", "entity_id"),)


def create_session_factory(database_url: str) -> scoped_session:
    """Create a thread-local SQLAlchemy session registry.

    SQLite connections get a busy timeout so that concurrent writers wait
    for each other instead of failing with "database is locked".
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"timeout": 30, "check_same_thread": False}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return scoped_session(sessionmaker(bind=engine))
