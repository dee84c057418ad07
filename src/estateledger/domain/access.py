"""Role and community-perimeter checks for principals."""

from estateledger.domain.entities import Principal, Role
from estateledger.domain.errors import AuthorizationError, not_community_admin

ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
ELEVATED_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.HELPDESK_ADMIN, Role.SECURITY})
STAFF_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.HELPDESK_ADMIN})


def is_super_admin(principal: Principal) -> bool:
    """Super admins hold the cross-community override."""
    return principal.role == Role.SUPER_ADMIN


def is_elevated(principal: Principal) -> bool:
    return principal.role in ELEVATED_ROLES


def in_community(principal: Principal, community_id: int) -> bool:
    """True if the principal may act within the community's perimeter."""
    return is_super_admin(principal) or principal.community_id == community_id


def require_admin(principal: Principal, community_id: int) -> None:
    """Require a community admin of ``community_id`` or a super admin.

    Raises:
        AuthorizationError: If the principal is outside the admin perimeter
    """
    if is_super_admin(principal):
        return
    if principal.role != Role.ADMIN or principal.community_id != community_id:
        raise AuthorizationError(not_community_admin(principal.id, community_id))


def require_staff(principal: Principal, community_id: int) -> None:
    """Require an admin or helpdesk admin of the community, or a super admin."""
    if is_super_admin(principal):
        return
    if principal.role not in STAFF_ROLES or principal.community_id != community_id:
        raise AuthorizationError(
            f"User '{principal.id}' is not staff of community {community_id}"
        )


def require_member(principal: Principal, community_id: int) -> None:
    """Require the principal to belong to the community (or be a super admin)."""
    if not in_community(principal, community_id):
        raise AuthorizationError(
            f"Access denied: user '{principal.id}' is outside community {community_id}"
        )


def require_super_admin(principal: Principal) -> None:
    """Require the cross-community override.

    Raises:
        AuthorizationError: If the principal is not a super admin
    """
    if not is_super_admin(principal):
        raise AuthorizationError(f"User '{principal.id}' is not a super admin")
