"""Cash flow figures and movement reference numbering."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from frigo.shared.models import CashMovement

REFERENCE_PREFIXES = {"in": "ENT", "out": "SORT"}


@dataclass
class CashFlowMetrics:
    total_in: float = 0.0
    total_out: float = 0.0
    net_flow: float = 0.0
    today_in: float = 0.0
    today_out: float = 0.0
    weekly_in: float = 0.0
    weekly_out: float = 0.0
    movement_count: int = 0
    average_movement: float = 0.0


def generate_cash_reference(
    movement_type: str,
    existing_references: Iterable[str],
    year: Optional[int] = None,
) -> str:
    """Next sequential reference for the year, e.g. ``ENT-2024-007``.

    Numbering continues from the highest number already used for the same
    prefix and year; gaps are not reused.
    """
    prefix = REFERENCE_PREFIXES.get(movement_type)
    if prefix is None:
        raise ValueError(f"Unknown movement type: {movement_type}")
    year = year or datetime.now().year

    pattern = re.compile(rf"^{prefix}-{year}-(\d+)$")
    numbers = [
        int(match.group(1))
        for match in (pattern.match(ref or "") for ref in existing_references)
        if match
    ]
    next_number = max(numbers, default=0) + 1
    return f"{prefix}-{year}-{next_number:03d}"


def calculate_cash_flow_metrics(
    movements: List[CashMovement],
    now: Optional[datetime] = None,
) -> CashFlowMetrics:
    """Totals over all movements, today and the last seven days.

    Movements without ``created_at`` only count toward the overall totals.
    """
    now = now or datetime.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = now - timedelta(days=7)

    metrics = CashFlowMetrics(movement_count=len(movements))
    for movement in movements:
        is_in = movement.type == "in"
        if is_in:
            metrics.total_in += movement.amount
        else:
            metrics.total_out += movement.amount

        created = movement.created_at
        if created is None:
            continue
        if created >= today_start:
            if is_in:
                metrics.today_in += movement.amount
            else:
                metrics.today_out += movement.amount
        if created >= week_start:
            if is_in:
                metrics.weekly_in += movement.amount
            else:
                metrics.weekly_out += movement.amount

    metrics.net_flow = metrics.total_in - metrics.total_out
    if movements:
        metrics.average_movement = (metrics.total_in + metrics.total_out) / len(movements)
    return metrics
