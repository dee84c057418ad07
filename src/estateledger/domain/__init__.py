"""Domain layer for estateledger application."""

_SERVICES = {
    "AuditService": "estateledger.domain.audit",
    "BillingService": "estateledger.domain.billing",
    "CommunityService": "estateledger.domain.community",
    "UnitService": "estateledger.domain.community",
    "ExpenseService": "estateledger.domain.expenses",
    "LedgerAggregatorService": "estateledger.domain.ledger",
    "OpeningBalanceService": "estateledger.domain.opening_balance",
    "PaymentService": "estateledger.domain.payments",
    "PeriodGeneratorService": "estateledger.domain.periods",
}

__all__ = sorted(_SERVICES)


# Services import the database layer, which imports domain entities;
# resolve them lazily to avoid circular imports
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
