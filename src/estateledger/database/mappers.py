"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic so services only ever handle
frozen domain dataclasses.
"""

from estateledger.domain import entities as domain
from estateledger.database.models import (
    AuditLogEntry as ORMAuditLogEntry,
    Community as ORMCommunity,
    Expense as ORMExpense,
    LedgerRecord as ORMLedgerRecord,
    MaintenanceConfig as ORMMaintenanceConfig,
    OpeningBalanceRevisionRequest as ORMRevisionRequest,
    Unit as ORMUnit,
)


def community_to_domain(orm_community: ORMCommunity) -> domain.Community:
    """Convert SQLAlchemy Community model to domain Community entity."""
    return domain.Community(
        id=orm_community.id,
        name=orm_community.name,
        billing_mode=domain.BillingMode(orm_community.billing_mode),
        community_type=orm_community.community_type,
        rate_per_area=orm_community.rate_per_area,
        fixed_amount=orm_community.fixed_amount,
        opening_balance=orm_community.opening_balance,
        opening_balance_locked=bool(orm_community.opening_balance_locked),
        status=domain.CommunityStatus(orm_community.status),
        created_at=orm_community.created_at,
    )


def maintenance_config_to_domain(orm_config: ORMMaintenanceConfig) -> domain.MaintenanceConfig:
    """Convert SQLAlchemy MaintenanceConfig model to domain entity."""
    return domain.MaintenanceConfig(
        id=orm_config.id,
        community_id=orm_config.community_id,
        effective_date=orm_config.effective_date,
        rate_per_area=orm_config.rate_per_area,
        fixed_amount=orm_config.fixed_amount,
        created_at=orm_config.created_at,
    )


def unit_to_domain(orm_unit: ORMUnit) -> domain.Unit:
    """Convert SQLAlchemy Unit model to domain Unit entity."""
    return domain.Unit(
        id=orm_unit.id,
        community_id=orm_unit.community_id,
        label=orm_unit.label,
        floor_area=orm_unit.floor_area,
        billing_start_date=orm_unit.billing_start_date,
        resident_id=orm_unit.resident_id,
        created_at=orm_unit.created_at,
    )


def ledger_record_to_domain(orm_record: ORMLedgerRecord) -> domain.LedgerRecord:
    """Convert SQLAlchemy LedgerRecord model to domain LedgerRecord entity."""
    return domain.LedgerRecord(
        id=orm_record.id,
        unit_id=orm_record.unit_id,
        community_id=orm_record.community_id,
        resident_id=orm_record.resident_id,
        period=orm_record.period,
        amount=orm_record.amount,
        status=domain.LedgerStatus(orm_record.status),
        payment_reference=orm_record.payment_reference,
        created_at=orm_record.created_at,
    )


def revision_request_to_domain(
    orm_request: ORMRevisionRequest,
) -> domain.OpeningBalanceRevisionRequest:
    """Convert SQLAlchemy revision request model to domain entity."""
    return domain.OpeningBalanceRevisionRequest(
        id=orm_request.id,
        community_id=orm_request.community_id,
        requester_id=orm_request.requester_id,
        amount=orm_request.amount,
        reason=orm_request.reason,
        status=domain.RevisionStatus(orm_request.status),
        resolved_by=orm_request.resolved_by,
        resolved_at=orm_request.resolved_at,
        created_at=orm_request.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        community_id=orm_expense.community_id,
        title=orm_expense.title,
        amount=orm_expense.amount,
        expense_date=orm_expense.expense_date,
        status=domain.ExpenseStatus(orm_expense.status),
        submitted_by=orm_expense.submitted_by,
        approved_by=orm_expense.approved_by,
        notes=orm_expense.notes,
        created_at=orm_expense.created_at,
    )


def audit_entry_to_domain(orm_entry: ORMAuditLogEntry) -> domain.AuditLogEntry:
    """Convert SQLAlchemy AuditLogEntry model to domain entity."""
    return domain.AuditLogEntry(
        id=orm_entry.id,
        community_id=orm_entry.community_id,
        entity_kind=orm_entry.entity_kind,
        entity_id=orm_entry.entity_id,
        action=domain.AuditAction(orm_entry.action),
        actor_id=orm_entry.actor_id,
        old_values=orm_entry.old_values,
        new_values=orm_entry.new_values,
        description=orm_entry.description,
        created_at=orm_entry.created_at,
    )
