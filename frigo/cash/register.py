"""Tenant cash register backed by the document store."""

import dataclasses
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from frigo.shared.errors import ValidationError
from frigo.shared.models import CashMovement
from frigo.shared.store import DocumentStore
from .flow import CashFlowMetrics, calculate_cash_flow_metrics, generate_cash_reference
from .validation import CashContext, CashMovementData, validate_cash_movement

logger = logging.getLogger(__name__)


class CashRegister:
    """Reads and records the cash movements of one tenant.

    The balance is ``initial_balance`` plus every entry minus every exit.
    """

    def __init__(self, store: DocumentStore, tenant_id: str, initial_balance: float = 0.0):
        self.store = store
        self.tenant_id = tenant_id
        self.initial_balance = initial_balance

    @property
    def collection(self) -> str:
        return f"tenants/{self.tenant_id}/cashMovements"

    def list_movements(self) -> List[CashMovement]:
        """All movements, newest first. No tenant means no movements."""
        if not self.tenant_id:
            return []
        movements = [CashMovement.from_doc(doc.id, doc.data) for doc in self.store.query(self.collection)]
        movements.sort(key=lambda m: m.created_at or datetime.min, reverse=True)
        return movements

    def balance(self, movements: Optional[List[CashMovement]] = None) -> float:
        if movements is None:
            movements = self.list_movements()
        total = self.initial_balance
        for movement in movements:
            total += movement.amount if movement.type == "in" else -movement.amount
        return total

    def context(self, now: Optional[datetime] = None) -> CashContext:
        """Register state a new movement is validated against."""
        now = now or datetime.now()
        movements = self.list_movements()
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        dated = [m for m in movements if m.created_at is not None]
        return CashContext(
            current_balance=self.balance(movements),
            today_movements=[m for m in dated if m.created_at >= today_start],
            last_movement_time=max((m.created_at for m in dated), default=None),
        )

    def next_reference(self, movement_type: str, year: Optional[int] = None) -> str:
        references = [m.reference for m in self.list_movements()]
        return generate_cash_reference(movement_type, references, year)

    def record(
        self,
        data: CashMovementData,
        user: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[CashMovement, List[str]]:
        """Validate and store a movement.

        Returns:
            The stored movement and the validation warnings.

        Raises:
            ValidationError: If any blocking rule fails. Nothing is written.
        """
        if not self.tenant_id:
            raise ValidationError(["No tenant selected"])

        now = now or datetime.now()
        data = dataclasses.replace(data, reference=(data.reference or "").strip(), reason=(data.reason or "").strip())
        result = validate_cash_movement(data, self.context(now), now)
        if not result.is_valid:
            logger.warning(f"Rejected cash movement {data.reference!r}: {'; '.join(result.errors)}")
            raise ValidationError(result.errors)

        movement = CashMovement(
            id=None,
            type=data.type,
            amount=float(data.amount),
            payment_method=data.payment_method,
            reason=data.reason,
            reference=data.reference,
            client_id=data.client_id,
            notes=data.notes,
            created_at=now,
            created_by=user,
        )
        movement.id = self.store.add(self.collection, movement.to_doc())
        logger.info(f"Recorded cash movement {movement.reference} ({movement.type} {movement.amount})")
        return movement, result.warnings

    def metrics(self, now: Optional[datetime] = None) -> CashFlowMetrics:
        return calculate_cash_flow_metrics(self.list_movements(), now)
