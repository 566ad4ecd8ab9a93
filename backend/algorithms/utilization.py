"""
Utilization Reporter
Per-step minutes used, minutes available and orders accepted.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from algorithms.allocator import Allocation
from algorithms.capacity import StepCapacity, ConstraintLevel


@dataclass
class StepUtilization:
    step_name: str
    total_minutes: float
    used_minutes: float = 0
    count: int = 0
    constraint_level: ConstraintLevel = ConstraintLevel.UNCONSTRAINED
    overtime_minutes: float = 0
    order_capacity: Optional[int] = None

    @property
    def is_unlimited(self) -> bool:
        return math.isinf(self.total_minutes)

    @property
    def utilization_pct(self) -> Optional[float]:
        """Percent of budget used; None for unlimited or zero budgets."""
        if self.is_unlimited or self.total_minutes <= 0:
            return None
        return round(self.used_minutes / self.total_minutes * 100, 1)

    def to_dict(self) -> Dict:
        return {
            'stepName': self.step_name,
            'totalMinutes': None if self.is_unlimited else self.total_minutes,
            'usedMinutes': self.used_minutes,
            'count': self.count,
            'constraintLevel': self.constraint_level.value,
            'isUnlimited': self.is_unlimited,
            'overtimeMinutes': self.overtime_minutes,
        }


def summarize_utilization(accepted: List[Allocation],
                          capacity: Dict[str, StepCapacity]) -> Dict[str, StepUtilization]:
    """
    Sum accepted minutes and orders per step.

    Derived purely from the accepted allocations; steps with no accepted
    orders (including zero-capacity steps) still get an entry.
    """
    report = {
        step: StepUtilization(
            step_name=step,
            total_minutes=cap.total_minutes,
            constraint_level=cap.constraint_level,
            overtime_minutes=cap.overtime_minutes,
            order_capacity=cap.order_capacity,
        )
        for step, cap in capacity.items()
    }

    for allocation in accepted:
        entry = report[allocation.candidate.step_name]
        entry.used_minutes += allocation.duration_minutes
        entry.count += 1

    return report
