"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Missing or malformed required input."""


class NotFoundError(DomainError):
    """Referenced community, unit, record or request does not exist."""


class AuthorizationError(DomainError):
    """Actor lacks the role or community scope for the action."""


class ConflictError(DomainError):
    """State-machine precondition violated, such as an already locked balance."""


def community_not_found(community_id: int) -> str:
    """Return message for missing community."""
    return f"Community {community_id} not found"


def unit_not_found(unit_id: int) -> str:
    """Return message for missing unit."""
    return f"Unit {unit_id} not found"


def unit_not_in_community(unit_id: int, community_id: int) -> str:
    """Return message for a unit looked up under the wrong community."""
    return f"Unit {unit_id} not found in community {community_id}"


def ledger_record_not_found(record_id: int) -> str:
    """Return message for missing ledger record."""
    return f"Ledger record {record_id} not found"


def expense_not_found(expense_id: int) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def no_pending_revision(community_id: int) -> str:
    """Return message when no opening balance revision is awaiting review."""
    return f"Community {community_id} has no pending opening balance revision"


def not_community_admin(actor_id: str, community_id: int) -> str:
    """Return message for actors outside the community's admin perimeter."""
    return f"User '{actor_id}' is not an administrator of community {community_id}"


def self_review_forbidden(subject: str) -> str:
    """Return message for dual-control violations."""
    return f"Integrity violation: you cannot review your own {subject}"
