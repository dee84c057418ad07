"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, ContextManager, Iterable, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from estateledger.domain.entities import (
    AuditAction,
    AuditLogEntry,
    BillingMode,
    Community,
    CommunityStatus,
    Expense,
    ExpenseStatus,
    LedgerRecord,
    LedgerStatus,
    MaintenanceConfig,
    OpeningBalanceRevisionRequest,
    RevisionStatus,
    Unit,
)


class Database(ABC):
    """Abstract persistence interface for estateledger.

    Implementations must enforce two storage-level constraints: at most one
    ledger record per (unit_id, period), and at most one pending opening
    balance revision request per community.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> ContextManager[None]:
        """Group the writes made inside the block into one transaction.

        Writes become visible together when the outermost block exits and are
        all discarded if it raises. Blocks may be nested.
        """
        pass

    # Community operations
    @abstractmethod
    def create_community(
        self,
        name: str,
        billing_mode: BillingMode,
        community_type: Optional[str] = None,
        rate_per_area: Optional[Decimal] = None,
        fixed_amount: Optional[Decimal] = None,
    ) -> int:
        """Create a community. Returns community ID."""
        pass

    @abstractmethod
    def get_community(self, community_id: int) -> Optional[Community]:
        """Get community by ID."""
        pass

    @abstractmethod
    def list_communities(self, status: Optional[CommunityStatus] = None) -> list[Community]:
        """List communities, optionally filtered by status."""
        pass

    @abstractmethod
    def update_community_billing(
        self,
        community_id: int,
        billing_mode: Optional[BillingMode] = None,
        community_type: Optional[str] = None,
        rate_per_area: Optional[Decimal] = None,
        fixed_amount: Optional[Decimal] = None,
    ) -> None:
        """Update billing configuration fields that are not None."""
        pass

    @abstractmethod
    def update_community_status(self, community_id: int, status: CommunityStatus) -> None:
        """Set community status."""
        pass

    @abstractmethod
    def save_opening_balance_draft(self, community_id: int, amount: Decimal) -> bool:
        """Set the opening balance only while it is unlocked.

        Returns False when the balance was already locked.
        """
        pass

    @abstractmethod
    def lock_opening_balance(self, community_id: int, amount: Decimal) -> bool:
        """Set and lock the opening balance only while it is unlocked.

        Returns False when another actor locked it first.
        """
        pass

    # Maintenance configuration history
    @abstractmethod
    def add_maintenance_config(
        self,
        community_id: int,
        effective_date: date,
        rate_per_area: Optional[Decimal] = None,
        fixed_amount: Optional[Decimal] = None,
    ) -> int:
        """Add an effective-dated rate configuration. Returns config ID."""
        pass

    @abstractmethod
    def list_maintenance_configs(self, community_id: int) -> list[MaintenanceConfig]:
        """List configurations for a community, newest effective date first."""
        pass

    # Unit operations
    @abstractmethod
    def create_unit(
        self,
        community_id: int,
        label: str,
        floor_area: Optional[Decimal] = None,
        billing_start_date: Optional[date] = None,
        resident_id: Optional[str] = None,
    ) -> int:
        """Create a unit. Returns unit ID."""
        pass

    @abstractmethod
    def get_unit(self, unit_id: int) -> Optional[Unit]:
        """Get unit by ID."""
        pass

    @abstractmethod
    def list_units(self, community_id: int, billable_only: bool = False) -> list[Unit]:
        """List units of a community.

        Args:
            community_id: Community ID
            billable_only: If True, only return units with a billing start date
        """
        pass

    @abstractmethod
    def update_unit_billing_start(self, unit_id: int, billing_start_date: Optional[date]) -> None:
        """Update a unit's billing start date."""
        pass

    # Ledger record operations
    @abstractmethod
    def get_ledger_record(self, record_id: int) -> Optional[LedgerRecord]:
        """Get ledger record by ID."""
        pass

    @abstractmethod
    def list_ledger_records(
        self,
        community_id: Optional[int] = None,
        unit_id: Optional[int] = None,
        start_period: Optional[date] = None,
        end_period: Optional[date] = None,
        statuses: Optional[Iterable[LedgerStatus]] = None,
    ) -> list[LedgerRecord]:
        """List ledger records with optional filters, ordered by period."""
        pass

    @abstractmethod
    def insert_ledger_record_if_absent(
        self,
        unit_id: int,
        community_id: int,
        period: date,
        amount: Decimal,
        resident_id: Optional[str] = None,
    ) -> Optional[LedgerRecord]:
        """Insert a Pending ledger record unless (unit_id, period) exists.

        Returns the new record, or None when a record already existed,
        including when a concurrent insert won the race.
        """
        pass

    @abstractmethod
    def transition_ledger_record(
        self,
        record_id: int,
        from_statuses: Iterable[LedgerStatus],
        to_status: LedgerStatus,
        payment_reference: Optional[str] = None,
    ) -> bool:
        """Change status only if the current status is one of ``from_statuses``."""
        pass

    # Opening balance revision requests
    @abstractmethod
    def create_revision_request(
        self, community_id: int, requester_id: str, amount: Decimal, reason: str
    ) -> int:
        """Create a pending revision request. Returns request ID.

        Raises:
            ConflictError: If the community already has a pending request
        """
        pass

    @abstractmethod
    def get_revision_request(self, request_id: int) -> Optional[OpeningBalanceRevisionRequest]:
        """Get revision request by ID."""
        pass

    @abstractmethod
    def get_pending_revision_request(
        self, community_id: int
    ) -> Optional[OpeningBalanceRevisionRequest]:
        """Get the community's pending revision request, if any."""
        pass

    @abstractmethod
    def resolve_revision_request(
        self,
        request_id: int,
        status: RevisionStatus,
        resolver_id: str,
        apply_amount: Optional[Decimal] = None,
    ) -> bool:
        """Resolve a pending request, applying ``apply_amount`` to the balance.

        The status change and balance update happen atomically and only if
        the request is still pending. Returns False when it was not.
        """
        pass

    # Expense operations
    @abstractmethod
    def create_expense(
        self,
        community_id: int,
        title: str,
        amount: Decimal,
        expense_date: date,
        submitted_by: str,
        notes: Optional[str] = None,
    ) -> int:
        """Create a pending expense. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        community_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[ExpenseStatus] = None,
    ) -> list[Expense]:
        """List expenses with optional filters, ordered by date."""
        pass

    @abstractmethod
    def transition_expense(
        self,
        expense_id: int,
        from_status: ExpenseStatus,
        to_status: ExpenseStatus,
        approved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Change expense status only if it is still ``from_status``."""
        pass

    # Audit log operations (append-only)
    @abstractmethod
    def append_audit_entry(
        self,
        entity_kind: str,
        entity_id: str,
        action: AuditAction,
        actor_id: str,
        community_id: Optional[int] = None,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> int:
        """Append an audit entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_audit_entries(
        self,
        community_id: Optional[int] = None,
        entity_kind: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        ascending: bool = False,
        limit: Optional[int] = None,
    ) -> list[AuditLogEntry]:
        """List audit entries with optional filters."""
        pass
