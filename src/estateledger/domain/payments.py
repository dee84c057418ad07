"""Maintenance dues payment workflow.

Pending -> Submitted (resident reports a payment) -> Paid (admin verifies).
An admin may also mark a pending record paid directly, e.g. for cash.
"""

import logging
from typing import Optional

from estateledger.database.base import Database
from estateledger.domain.access import require_admin, require_member, is_elevated
from estateledger.domain.audit import AuditService
from estateledger.domain.entities import (
    AuditAction,
    LedgerRecord,
    LedgerStatus,
    Principal,
)
from estateledger.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    ledger_record_not_found,
    self_review_forbidden,
)
from estateledger.utils.periods import format_period

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "LedgerRecord"


class PaymentService:
    """Service for submitting and verifying dues payments."""

    def __init__(self, db: Database):
        """Initialize payment service.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)

    def _get_record(self, record_id: int) -> LedgerRecord:
        record = self.db.get_ledger_record(record_id)
        if record is None:
            raise NotFoundError(ledger_record_not_found(record_id))
        return record

    def submit_payment(self, record_id: int, principal: Principal, reference: str) -> LedgerRecord:
        """Report a payment for a pending dues record.

        Args:
            record_id: Ledger record ID
            principal: The unit's resident
            reference: Payment reference (transaction ID, cheque number...)

        Returns:
            The updated record

        Raises:
            AuthorizationError: If the principal is not the record's resident
            ValidationError: If the reference is blank
            ConflictError: If the record is no longer pending
        """
        record = self._get_record(record_id)
        if record.resident_id is None or record.resident_id != principal.id:
            raise AuthorizationError(
                f"User '{principal.id}' cannot pay dues of another resident"
            )
        if not reference or not reference.strip():
            raise ValidationError("A payment reference is required")

        with self.db.atomic():
            if not self.db.transition_ledger_record(
                record_id,
                from_statuses=[LedgerStatus.PENDING],
                to_status=LedgerStatus.SUBMITTED,
                payment_reference=reference.strip(),
            ):
                raise ConflictError(
                    f"Ledger record {record_id} is {self._get_record(record_id).status.value}, not Pending"
                )

            updated = self._get_record(record_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=record_id,
                action=AuditAction.UPDATE,
                actor_id=principal.id,
                community_id=record.community_id,
                old=record,
                new=updated,
                description=f"Payment submitted for {format_period(record.period)}",
            )
        return updated

    def verify_payment(self, record_id: int, admin: Principal) -> LedgerRecord:
        """Mark a dues record as paid.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community,
                or the dues are the admin's own
            ConflictError: If the record is already paid
        """
        record = self._get_record(record_id)
        require_admin(admin, record.community_id)
        if record.resident_id is not None and record.resident_id == admin.id:
            raise AuthorizationError(self_review_forbidden("maintenance payment"))

        with self.db.atomic():
            if not self.db.transition_ledger_record(
                record_id,
                from_statuses=[LedgerStatus.PENDING, LedgerStatus.SUBMITTED],
                to_status=LedgerStatus.PAID,
            ):
                raise ConflictError(f"Ledger record {record_id} is already Paid")

            updated = self._get_record(record_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=record_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=record.community_id,
                old=record,
                new=updated,
                description=f"Payment verified for {format_period(record.period)}: {record.amount}",
            )
        logger.info("Ledger record %s marked paid by %s", record_id, admin.id)
        return updated

    def list_dues(
        self,
        community_id: int,
        principal: Principal,
        unit_id: Optional[int] = None,
        status: Optional[LedgerStatus] = None,
    ) -> list[LedgerRecord]:
        """List dues records; residents only see their own.

        Raises:
            AuthorizationError: If the community is outside the principal's perimeter
        """
        require_member(principal, community_id)
        records = self.db.list_ledger_records(
            community_id=community_id,
            unit_id=unit_id,
            statuses=[status] if status is not None else None,
        )
        if not is_elevated(principal):
            records = [r for r in records if r.resident_id == principal.id]
        return records
