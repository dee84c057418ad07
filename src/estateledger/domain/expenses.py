"""Community expense workflow.

Staff record expenses as Pending; an administrator other than the
submitter approves or rejects them. Only approved expenses count against
the community balance.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from estateledger.database.base import Database
from estateledger.domain.access import require_admin, require_member, require_staff
from estateledger.domain.audit import AuditService
from estateledger.domain.entities import AuditAction, Expense, ExpenseStatus, Principal
from estateledger.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    community_not_found,
    expense_not_found,
    self_review_forbidden,
)
from estateledger.utils.amount_parser import MONEY_PLACES, parse_amount
from estateledger.utils.periods import DateLike, to_utc_date

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "Expense"


class ExpenseService:
    """Service for managing community expenses."""

    def __init__(self, db: Database):
        """Initialize expense service.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)

    def _get_expense(self, expense_id: int) -> Expense:
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))
        return expense

    def create_expense(
        self,
        community_id: int,
        principal: Principal,
        title: str,
        amount: Union[Decimal, int, str],
        expense_date: DateLike,
        notes: Optional[str] = None,
    ) -> Expense:
        """Record a pending expense.

        Args:
            community_id: Community ID
            principal: Staff member recording the expense
            title: Short description
            amount: Positive amount
            expense_date: Date the money was spent
            notes: Optional free text

        Returns:
            The created expense

        Raises:
            AuthorizationError: If the principal is not staff of the community
            NotFoundError: If the community does not exist
            ValidationError: If the title is blank or the amount is not positive
        """
        require_staff(principal, community_id)
        if self.db.get_community(community_id) is None:
            raise NotFoundError(community_not_found(community_id))
        if not title or not title.strip():
            raise ValidationError("Expense title is required")
        try:
            value = parse_amount(amount, MONEY_PLACES)
        except ValueError as e:
            raise ValidationError(f"Invalid expense amount: {e}")
        if value <= 0:
            raise ValidationError("Expense amount must be positive")

        with self.db.atomic():
            expense_id = self.db.create_expense(
                community_id=community_id,
                title=title.strip(),
                amount=value,
                expense_date=to_utc_date(expense_date),
                submitted_by=principal.id,
                notes=notes,
            )
            expense = self._get_expense(expense_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=expense_id,
                action=AuditAction.CREATE,
                actor_id=principal.id,
                community_id=community_id,
                new=expense,
                description=f"Expense '{expense.title}' recorded: {value}",
            )
        return expense

    def approve_expense(self, expense_id: int, admin: Principal) -> Expense:
        """Approve a pending expense.

        Raises:
            AuthorizationError: If ``admin`` is outside the admin perimeter or submitted it
            ConflictError: If the expense is no longer pending
        """
        return self._review(expense_id, admin, ExpenseStatus.APPROVED)

    def reject_expense(
        self, expense_id: int, admin: Principal, notes: Optional[str] = None
    ) -> Expense:
        """Reject a pending expense.

        Raises:
            AuthorizationError: If ``admin`` is outside the admin perimeter or submitted it
            ConflictError: If the expense is no longer pending
        """
        return self._review(expense_id, admin, ExpenseStatus.REJECTED, notes=notes)

    def _review(
        self,
        expense_id: int,
        admin: Principal,
        status: ExpenseStatus,
        notes: Optional[str] = None,
    ) -> Expense:
        expense = self._get_expense(expense_id)
        require_admin(admin, expense.community_id)
        if expense.submitted_by == admin.id:
            raise AuthorizationError(self_review_forbidden("expense"))

        with self.db.atomic():
            if not self.db.transition_expense(
                expense_id,
                from_status=ExpenseStatus.PENDING,
                to_status=status,
                approved_by=admin.id,
                notes=notes,
            ):
                current = self._get_expense(expense_id)
                raise ConflictError(f"Expense {expense_id} is already {current.status.value}")

            updated = self._get_expense(expense_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=expense_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=expense.community_id,
                old=expense,
                new=updated,
                description=f"Expense '{expense.title}' {status.value.lower()}",
            )
        logger.info("Expense %s %s by %s", expense_id, status.value.lower(), admin.id)
        return updated

    def list_expenses(
        self,
        community_id: int,
        principal: Principal,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[ExpenseStatus] = None,
    ) -> list[Expense]:
        """List a community's expenses.

        Raises:
            AuthorizationError: If the community is outside the principal's perimeter
        """
        require_member(principal, community_id)
        return self.db.list_expenses(
            community_id=community_id, start_date=start_date, end_date=end_date, status=status
        )
