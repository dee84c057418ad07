"""Opening balance dual-control workflow.

States: Unset -> Draft -> Locked. Once locked, the balance only changes
through a revision request raised by one administrator and approved by a
different administrator of the same community (or a super admin).
Every precondition failure raises; nothing is silently ignored.
"""

import logging
from decimal import Decimal
from typing import Any, Optional, Union

from estateledger.database.base import Database
from estateledger.domain.access import require_admin
from estateledger.domain.audit import AuditService
from estateledger.domain.entities import (
    AuditAction,
    Community,
    OpeningBalanceRevisionRequest,
    OpeningBalanceState,
    Principal,
    RevisionStatus,
)
from estateledger.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    community_not_found,
    no_pending_revision,
    self_review_forbidden,
)
from estateledger.utils.amount_parser import MONEY_PLACES, parse_amount

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "Community"

AmountInput = Union[Decimal, int, str]


def _to_amount(amount: AmountInput) -> Decimal:
    try:
        return parse_amount(amount, MONEY_PLACES)
    except ValueError as e:
        raise ValidationError(f"Invalid opening balance amount: {e}")


class OpeningBalanceService:
    """Service governing who may set or alter a community's opening balance."""

    def __init__(self, db: Database):
        """Initialize opening balance service.

        Args:
            db: Database instance
        """
        self.db = db
        self.audit = AuditService(db)

    def _get_community(self, community_id: int) -> Community:
        community = self.db.get_community(community_id)
        if community is None:
            raise NotFoundError(community_not_found(community_id))
        return community

    @staticmethod
    def _state(
        community: Community, pending: Optional[OpeningBalanceRevisionRequest]
    ) -> OpeningBalanceState:
        if community.opening_balance_locked:
            if pending is not None:
                return OpeningBalanceState.REVISION_REQUESTED
            return OpeningBalanceState.LOCKED
        if community.opening_balance is None:
            return OpeningBalanceState.UNSET
        return OpeningBalanceState.DRAFT

    def _snapshot(self, community_id: int) -> dict[str, Any]:
        community = self._get_community(community_id)
        pending = self.db.get_pending_revision_request(community_id)
        return {
            "opening_balance": community.opening_balance,
            "opening_balance_locked": community.opening_balance_locked,
            "state": self._state(community, pending),
            "pending_revision": None
            if pending is None
            else {
                "amount": pending.amount,
                "reason": pending.reason,
                "requester_id": pending.requester_id,
            },
        }

    def get_state(self, community_id: int) -> OpeningBalanceState:
        """Return the workflow state of a community's opening balance.

        Raises:
            NotFoundError: If the community does not exist
        """
        community = self._get_community(community_id)
        return self._state(community, self.db.get_pending_revision_request(community_id))

    def get_pending_request(self, community_id: int) -> Optional[OpeningBalanceRevisionRequest]:
        """Return the outstanding revision request, if any."""
        self._get_community(community_id)
        return self.db.get_pending_revision_request(community_id)

    def save_draft(self, community_id: int, admin: Principal, amount: AmountInput) -> Community:
        """Record an editable opening balance without locking it.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            ConflictError: If the balance is already locked
        """
        require_admin(admin, community_id)
        value = _to_amount(amount)
        community = self._get_community(community_id)
        if community.opening_balance_locked:
            raise ConflictError(
                f"Opening balance of community {community_id} is locked; request a revision instead"
            )

        with self.db.atomic():
            before = self._snapshot(community_id)
            if not self.db.save_opening_balance_draft(community_id, value):
                raise ConflictError(
                    f"Opening balance of community {community_id} was locked by another administrator"
                )
            after = self._snapshot(community_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=community_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=community_id,
                old=before,
                new=after,
                description=f"Opening balance draft saved: {value}",
            )
        return self._get_community(community_id)

    def set_initial(self, community_id: int, admin: Principal, amount: AmountInput) -> Community:
        """Fix the opening balance and lock it.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            ConflictError: If the balance is already locked
        """
        require_admin(admin, community_id)
        value = _to_amount(amount)
        community = self._get_community(community_id)
        if community.opening_balance_locked:
            raise ConflictError(f"Opening balance of community {community_id} is already locked")

        with self.db.atomic():
            before = self._snapshot(community_id)
            if not self.db.lock_opening_balance(community_id, value):
                raise ConflictError(f"Opening balance of community {community_id} is already locked")
            after = self._snapshot(community_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=community_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=community_id,
                old=before,
                new=after,
                description=f"Initial opening balance secured: {value}",
            )
        logger.info("Opening balance of community %s locked at %s by %s", community_id, value, admin.id)
        return self._get_community(community_id)

    def request_revision(
        self, community_id: int, admin: Principal, amount: AmountInput, reason: str
    ) -> OpeningBalanceRevisionRequest:
        """Ask for a locked opening balance to be changed.

        Raises:
            AuthorizationError: If ``admin`` does not administer the community
            ValidationError: If the amount is malformed or the reason is blank
            ConflictError: If the balance is not locked or a request is pending
        """
        require_admin(admin, community_id)
        value = _to_amount(amount)
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to revise the opening balance")

        community = self._get_community(community_id)
        if not community.opening_balance_locked:
            raise ConflictError(
                f"Opening balance of community {community_id} is not locked; set it directly"
            )
        if self.db.get_pending_revision_request(community_id) is not None:
            raise ConflictError(
                f"Community {community_id} already has a pending opening balance revision"
            )

        with self.db.atomic():
            before = self._snapshot(community_id)
            # The partial unique index rejects a concurrent duplicate with ConflictError
            request_id = self.db.create_revision_request(
                community_id=community_id,
                requester_id=admin.id,
                amount=value,
                reason=reason.strip(),
            )
            after = self._snapshot(community_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=community_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=community_id,
                old=before,
                new=after,
                description=f"Opening balance revision requested: {value}",
            )
        logger.info(
            "Opening balance revision %s requested for community %s by %s",
            request_id,
            community_id,
            admin.id,
        )
        return self.db.get_revision_request(request_id)

    def approve_revision(self, community_id: int, admin: Principal) -> Community:
        """Apply the pending revision; the approver must not be the requester.

        Raises:
            AuthorizationError: On self-approval or outside the admin perimeter
            ConflictError: If no request is pending or another admin resolved it first
        """
        request = self._reviewable_request(community_id, admin)
        with self.db.atomic():
            before = self._snapshot(community_id)
            if not self.db.resolve_revision_request(
                request.id, RevisionStatus.APPROVED, admin.id, apply_amount=request.amount
            ):
                raise ConflictError(
                    f"Opening balance revision {request.id} was already resolved by another administrator"
                )
            after = self._snapshot(community_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=community_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=community_id,
                old=before,
                new=after,
                description=f"Opening balance revision approved and applied: {request.amount}",
            )
        logger.info(
            "Opening balance revision %s approved for community %s by %s",
            request.id,
            community_id,
            admin.id,
        )
        return self._get_community(community_id)

    def reject_revision(self, community_id: int, admin: Principal) -> Community:
        """Discard the pending revision; the balance stays as it was.

        Raises:
            AuthorizationError: On self-rejection or outside the admin perimeter
            ConflictError: If no request is pending or another admin resolved it first
        """
        request = self._reviewable_request(community_id, admin)
        with self.db.atomic():
            before = self._snapshot(community_id)
            if not self.db.resolve_revision_request(request.id, RevisionStatus.REJECTED, admin.id):
                raise ConflictError(
                    f"Opening balance revision {request.id} was already resolved by another administrator"
                )
            after = self._snapshot(community_id)
            self.audit.record(
                entity_kind=AUDIT_ENTITY,
                entity_id=community_id,
                action=AuditAction.UPDATE,
                actor_id=admin.id,
                community_id=community_id,
                old=before,
                new=after,
                description="Opening balance revision rejected",
            )
        logger.info(
            "Opening balance revision %s rejected for community %s by %s",
            request.id,
            community_id,
            admin.id,
        )
        return self._get_community(community_id)

    def _reviewable_request(
        self, community_id: int, admin: Principal
    ) -> OpeningBalanceRevisionRequest:
        require_admin(admin, community_id)
        self._get_community(community_id)
        request = self.db.get_pending_revision_request(community_id)
        if request is None:
            raise ConflictError(no_pending_revision(community_id))
        if request.requester_id == admin.id:
            raise AuthorizationError(self_review_forbidden("opening balance revision request"))
        return request
