"""Cash register rules and bookkeeping."""

from .flow import CashFlowMetrics, calculate_cash_flow_metrics, generate_cash_reference
from .register import CashRegister
from .validation import (
    CashContext,
    CashMovementData,
    CashValidationResult,
    validate_cash_movement,
    validate_cash_reconciliation,
    validate_caution_amount,
)

__all__ = [
    "CashFlowMetrics",
    "calculate_cash_flow_metrics",
    "generate_cash_reference",
    "CashRegister",
    "CashContext",
    "CashMovementData",
    "CashValidationResult",
    "validate_cash_movement",
    "validate_cash_reconciliation",
    "validate_caution_amount",
]
