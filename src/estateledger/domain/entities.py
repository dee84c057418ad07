"""Domain model entities for estateledger.

These are pure data classes representing business concepts, independent of
database schema. Services pass them around and the database layer maps its
ORM rows into them, so the billing rules never see SQLAlchemy objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class BillingMode(str, Enum):
    """How a community derives a unit's nominal monthly charge."""

    AREA_RATE = "AreaRate"
    FIXED_AMOUNT = "FixedAmount"


class Role(str, Enum):
    """Roles carried by an authenticated principal."""

    SUPER_ADMIN = "SuperAdmin"
    ADMIN = "Admin"
    HELPDESK_ADMIN = "HelpdeskAdmin"
    RESIDENT = "Resident"
    SECURITY = "Security"


class CommunityStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class LedgerStatus(str, Enum):
    PENDING = "Pending"
    SUBMITTED = "Submitted"
    PAID = "Paid"


class ExpenseStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RevisionStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class OpeningBalanceState(str, Enum):
    """Lifecycle of a community's opening balance."""

    UNSET = "Unset"
    DRAFT = "Draft"
    LOCKED = "Locked"
    REVISION_REQUESTED = "RevisionRequested"


@dataclass(frozen=True)
class Principal:
    """Authenticated actor supplied by the external session provider."""

    id: str
    role: Role
    community_id: Optional[int] = None


@dataclass(frozen=True)
class Community:
    """Community domain entity."""

    id: int
    name: str
    billing_mode: BillingMode
    community_type: Optional[str]
    rate_per_area: Optional[Decimal]
    fixed_amount: Optional[Decimal]
    opening_balance: Optional[Decimal]
    opening_balance_locked: bool
    status: CommunityStatus
    created_at: datetime


@dataclass(frozen=True)
class MaintenanceConfig:
    """Effective-dated billing rates for a community."""

    id: int
    community_id: int
    effective_date: date
    rate_per_area: Optional[Decimal]
    fixed_amount: Optional[Decimal]
    created_at: datetime


@dataclass(frozen=True)
class Unit:
    """Unit domain entity."""

    id: int
    community_id: int
    label: str
    floor_area: Optional[Decimal]
    billing_start_date: Optional[date]
    resident_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class LedgerRecord:
    """One unit's billing obligation for one period."""

    id: int
    unit_id: int
    community_id: int
    resident_id: Optional[str]
    period: date
    amount: Decimal
    status: LedgerStatus
    payment_reference: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class OpeningBalanceRevisionRequest:
    """Request to alter a locked opening balance."""

    id: int
    community_id: int
    requester_id: str
    amount: Decimal
    reason: str
    status: RevisionStatus
    resolved_by: Optional[str]
    resolved_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class Expense:
    """Community expense domain entity."""

    id: int
    community_id: int
    title: str
    amount: Decimal
    expense_date: date
    status: ExpenseStatus
    submitted_by: str
    approved_by: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class AuditLogEntry:
    """Append-only record of a mutation."""

    id: int
    community_id: Optional[int]
    entity_kind: str
    entity_id: str
    action: AuditAction
    actor_id: str
    old_values: Optional[dict[str, Any]]
    new_values: Optional[dict[str, Any]]
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class FieldChange:
    """One changed key between two snapshots."""

    key: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class AuditDiff:
    """Result of comparing two snapshots.

    When no key differs, ``snapshot`` holds the full non-null snapshot so
    creation and deletion events still render something meaningful.
    """

    changes: tuple[FieldChange, ...] = ()
    snapshot: Optional[dict[str, Any]] = None

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True)
class MonthlyRollup:
    """Ledger totals for one community and one month."""

    community_id: int
    period: date
    opening_balance: Decimal
    collected: Decimal
    expenses: Decimal
    pending_dues: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class YearlyRollup:
    """Twelve monthly rollups plus annual totals."""

    community_id: int
    year: int
    monthly_breakdown: tuple[MonthlyRollup, ...]
    total_collected: Decimal
    total_expenses: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class CommunityMonthTotal:
    """Portfolio report row."""

    community_id: int
    community_name: str
    collected: Decimal
    expenses: Decimal
    pending_dues: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class GenerationSummary:
    """Outcome of a batch generation run."""

    as_of: date
    communities: int = 0
    units: int = 0
    created: tuple[LedgerRecord, ...] = field(default_factory=tuple)

    @property
    def created_count(self) -> int:
        return len(self.created)
