"""Audit trail and snapshot diffing.

``diff`` is a pure function used to render change history; ``AuditService``
appends entries and reads them back within the caller's perimeter.
"""

import dataclasses
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional

from estateledger.database.base import Database
from estateledger.domain.access import is_elevated, is_super_admin
from estateledger.domain.entities import (
    AuditAction,
    AuditDiff,
    AuditLogEntry,
    FieldChange,
    Principal,
)
from estateledger.domain.errors import AuthorizationError

logger = logging.getLogger(__name__)

# Identifiers, timestamps and display-only joined names
DEFAULT_IGNORED_FIELDS = (
    "created_at",
    "updated_at",
    "id",
    "community_id",
    "user_id",
    "author",
    "assigned_to_name",
    "resident_name",
    "submitted_by_name",
    "approved_by_name",
    "payment_receipt_url",
    "receipt_url",
    "image_url",
)

_NUMBER_TYPES = (bool, int, float, Decimal)


def _as_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return Decimal(0)
        try:
            return Decimal(stripped)
        except InvalidOperation:
            return None
    return None


def loose_equals(a: Any, b: Any) -> bool:
    """Compare two snapshot values with coercive equality.

    ``"5"`` equals ``5`` and ``True`` equals ``1``, but ``None`` only equals
    ``None`` and two strings compare exactly.
    """
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if isinstance(a, _NUMBER_TYPES + (str,)) and isinstance(b, _NUMBER_TYPES + (str,)):
        left, right = _as_number(a), _as_number(b)
        if left is None or right is None:
            return False
        return left == right
    return a == b


def diff(
    old: Optional[dict[str, Any]],
    new: Optional[dict[str, Any]],
    ignored_fields: Iterable[str] = DEFAULT_IGNORED_FIELDS,
) -> AuditDiff:
    """Compute the change-set between two snapshots.

    Args:
        old: Snapshot before the mutation (None for creations)
        new: Snapshot after the mutation (None for deletions)
        ignored_fields: Keys never reported, whatever their values

    Returns:
        AuditDiff with one FieldChange per differing key. When nothing
        differs, ``snapshot`` carries ``new`` (or ``old``) as a whole.
    """
    if old is None and new is None:
        return AuditDiff()

    ignored = set(ignored_fields)
    old_values = old or {}
    new_values = new or {}

    keys = list(old_values)
    keys.extend(key for key in new_values if key not in old_values)

    changes = tuple(
        FieldChange(key=key, old_value=old_values.get(key), new_value=new_values.get(key))
        for key in keys
        if key not in ignored and not loose_equals(old_values.get(key), new_values.get(key))
    )
    if changes:
        return AuditDiff(changes=changes)
    return AuditDiff(snapshot=new if new is not None else old)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return value


def snapshot(obj: Any, fields: Optional[Iterable[str]] = None) -> Optional[dict[str, Any]]:
    """Convert an entity or mapping into a JSON-safe dict.

    Args:
        obj: Dataclass instance, mapping, or None
        fields: Optional subset of keys to keep
    """
    if obj is None:
        return None
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    else:
        data = dict(obj)
    if fields is not None:
        data = {key: data.get(key) for key in fields}
    return _jsonable(data)


class AuditService:
    """Service for appending and reading audit entries."""

    def __init__(self, db: Database):
        """Initialize audit service.

        Args:
            db: Database instance
        """
        self.db = db

    def record(
        self,
        entity_kind: str,
        entity_id: Any,
        action: AuditAction,
        actor_id: str,
        community_id: Optional[int] = None,
        old: Any = None,
        new: Any = None,
        description: Optional[str] = None,
    ) -> int:
        """Append an audit entry; snapshots are converted to JSON-safe dicts."""
        entry_id = self.db.append_audit_entry(
            entity_kind=entity_kind,
            entity_id=str(entity_id),
            action=action,
            actor_id=actor_id,
            community_id=community_id,
            old_values=snapshot(old),
            new_values=snapshot(new),
            description=description,
        )
        logger.debug(
            "Audit %s %s:%s by %s", action.value, entity_kind, entity_id, actor_id
        )
        return entry_id

    def history(
        self,
        community_id: int,
        principal: Principal,
        entity_kind: Optional[str] = None,
        entity_id: Optional[Any] = None,
        limit: int = 200,
    ) -> list[AuditLogEntry]:
        """Read a community's audit history as seen by ``principal``.

        Super admins see every community; everyone else only their own.
        Non-elevated users only see their own actions unless they ask for a
        specific entity's thread. A single entity's thread reads oldest first.

        Raises:
            AuthorizationError: If the community is outside the principal's perimeter
        """
        if not is_super_admin(principal) and principal.community_id != community_id:
            raise AuthorizationError(
                f"Access denied: user '{principal.id}' is outside community {community_id}"
            )

        actor_filter = None
        if not is_elevated(principal) and entity_id is None:
            actor_filter = principal.id

        return self.db.list_audit_entries(
            community_id=community_id,
            entity_kind=entity_kind,
            entity_id=None if entity_id is None else str(entity_id),
            actor_id=actor_filter,
            ascending=entity_id is not None,
            limit=limit,
        )

    @staticmethod
    def describe(
        entry: AuditLogEntry, ignored_fields: Iterable[str] = DEFAULT_IGNORED_FIELDS
    ) -> AuditDiff:
        """Diff an entry's before/after snapshots."""
        return diff(entry.old_values, entry.new_values, ignored_fields)
