"""Business rules for cash register movements.

Every function here is pure: it returns a CashValidationResult listing the
blocking errors and the non-blocking warnings, and never writes anything.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

CURRENCY = "MAD"

MOVEMENT_TYPES = ("in", "out")
PAYMENT_METHODS = ("cash", "check", "transfer", "card")

MIN_REFERENCE_LENGTH = 3
MIN_REASON_LENGTH = 5
LARGE_AMOUNT_WARNING = 100000
LARGE_WITHDRAWAL_WARNING = 5000
RAPID_MOVEMENT_SECONDS = 30
RECONCILIATION_TOLERANCE = 10


@dataclass
class CashValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class CashMovementData:
    """A proposed movement, before it is written."""
    type: str
    amount: Optional[float]
    payment_method: str
    reason: str
    reference: str
    client_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class CashContext:
    """Register state the proposed movement is checked against.

    ``today_movements`` may hold CashMovement objects or raw documents;
    only their reference is read.
    """
    current_balance: float
    today_movements: List[Any] = field(default_factory=list)
    pending_collections: List[Any] = field(default_factory=list)
    last_movement_time: Optional[datetime] = None


def _reference_of(movement: Any) -> Optional[str]:
    if isinstance(movement, dict):
        return movement.get("reference")
    return getattr(movement, "reference", None)


def _result(errors: List[str], warnings: List[str]) -> CashValidationResult:
    return CashValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_cash_movement(
    data: CashMovementData,
    context: CashContext,
    now: Optional[datetime] = None,
) -> CashValidationResult:
    """Validate a proposed cash movement against the register state."""
    errors: List[str] = []
    warnings: List[str] = []
    amount = data.amount
    if amount is not None and not math.isfinite(amount):
        amount = None
    reference = (data.reference or "").strip()

    if not amount or amount <= 0:
        errors.append("Amount must be greater than 0")
    elif amount > LARGE_AMOUNT_WARNING:
        warnings.append(f"Large amount detected (>{LARGE_AMOUNT_WARNING:,} {CURRENCY}). Please check.")

    if data.type not in MOVEMENT_TYPES:
        errors.append(f"Invalid movement type: {data.type}")

    if data.type == "out" and amount and amount > context.current_balance:
        errors.append(f"Insufficient balance. Current balance: {context.current_balance} {CURRENCY}")

    if len(reference) < MIN_REFERENCE_LENGTH:
        errors.append(f"Reference must be at least {MIN_REFERENCE_LENGTH} characters")

    if not data.reason or len(data.reason.strip()) < MIN_REASON_LENGTH:
        errors.append(f"Reason must be detailed (at least {MIN_REASON_LENGTH} characters)")

    if data.payment_method not in PAYMENT_METHODS:
        errors.append("Invalid payment method")

    if reference and any((_reference_of(m) or "").strip() == reference for m in context.today_movements):
        errors.append("A movement with this reference already exists today")

    if data.type == "out" and amount and amount > LARGE_WITHDRAWAL_WARNING:
        warnings.append("Large cash withdrawal. Make sure it is authorized.")

    if context.last_movement_time is not None:
        elapsed = ((now or datetime.now()) - context.last_movement_time).total_seconds()
        if elapsed < RAPID_MOVEMENT_SECONDS:
            warnings.append("Rapid consecutive movement detected. Check the entry.")

    return _result(errors, warnings)


def validate_caution_amount(
    amount: Optional[float],
    deposit_per_crate: float,
    max_crates: int,
) -> CashValidationResult:
    """Validate a crate deposit against the per-crate deposit and crate limit."""
    errors: List[str] = []
    warnings: List[str] = []

    if not amount or amount <= 0:
        errors.append("Deposit amount must be greater than 0")
        amount = amount or 0

    max_amount = max_crates * deposit_per_crate
    if amount > max_amount:
        errors.append(f"Amount exceeds the maximum allowed ({max_amount} {CURRENCY})")

    if deposit_per_crate > 0:
        if amount // deposit_per_crate == 0:
            warnings.append("Amount too small to take any crate")
        remaining = amount % deposit_per_crate
        if remaining > 0:
            warnings.append(
                f"Amount is not a multiple of the deposit. Remainder: {remaining} {CURRENCY} "
                f"({deposit_per_crate} {CURRENCY} per crate)"
            )

    return _result(errors, warnings)


def validate_cash_reconciliation(
    expected_balance: float,
    actual_balance: float,
    tolerance: float = RECONCILIATION_TOLERANCE,
) -> CashValidationResult:
    """Compare a counted drawer with the expected balance."""
    errors: List[str] = []
    warnings: List[str] = []

    difference = abs(expected_balance - actual_balance)
    if difference > tolerance:
        errors.append(f"Large reconciliation gap: {difference} {CURRENCY}")
    elif difference > 0:
        warnings.append(f"Small gap detected: {difference} {CURRENCY}")

    return _result(errors, warnings)


def find_duplicate_references(movements: Iterable[Any]) -> List[str]:
    """References that appear more than once, in first-seen order."""
    seen = set()
    duplicates: List[str] = []
    for movement in movements:
        reference = _reference_of(movement)
        if reference in seen and reference not in duplicates:
            duplicates.append(reference)
        seen.add(reference)
    return duplicates
