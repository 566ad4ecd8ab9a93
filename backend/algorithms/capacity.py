"""
Capacity Model
Converts per-step resource configuration into a minutes budget per scheduling run.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional

from algorithms.product import ProductConfig


# Slack for float minute sums (e.g. 100 x 4.8 min against 480)
CAPACITY_EPSILON = 1e-6


class ConstraintLevel(Enum):
    """What limits a step's capacity."""
    UNCONSTRAINED = 'unconstrained'       # no staff or machine count configured
    MACHINE_LIMITED = 'machine_limited'
    STAFF_LIMITED = 'staff_limited'
    BLOCKED = 'blocked'                   # zero resources configured
    OVERRIDE = 'override'                 # caller supplied the budget


@dataclass
class StepCapacity:
    """Throughput budget for one step in one scheduling run."""
    step_name: str
    total_minutes: float                  # math.inf when unconstrained
    duration_minutes: float               # per order; 0 = instantaneous
    constraint_level: ConstraintLevel
    resource_count: Optional[int] = None
    overtime_minutes: float = 0           # reporting only unless overtime is included
    override_reason: Optional[str] = None

    @property
    def is_unlimited(self) -> bool:
        return math.isinf(self.total_minutes)

    @property
    def is_blocked(self) -> bool:
        return self.total_minutes <= 0

    def fits(self, used_minutes: float) -> bool:
        """True if one more order fits on top of `used_minutes`."""
        if self.is_blocked:
            return False
        if self.is_unlimited:
            return True
        return used_minutes + self.duration_minutes <= self.total_minutes + CAPACITY_EPSILON

    @property
    def order_capacity(self) -> Optional[int]:
        """
        Whole orders the budget holds, or None when unbounded.

        Zero-duration steps are instantaneous and never divide the budget.
        """
        if self.is_blocked:
            return 0
        if self.is_unlimited or self.duration_minutes <= 0:
            return None
        return int((self.total_minutes + CAPACITY_EPSILON) // self.duration_minutes)


def _resource(counts: Dict[str, int], step: str) -> float:
    """Configured resource count, or infinity when not configured."""
    value = counts.get(step)
    if value is None:
        return math.inf
    return value


def build_capacity_model(product: ProductConfig,
                         include_overtime: bool = False,
                         shift_hours: float = None,
                         overtime_hours: float = None,
                         capacity_overrides: Dict[str, Dict[str, Any]] = None) -> Dict[str, StepCapacity]:
    """
    Compute the minutes budget for every step of a product.

    totalMinutes = min(staff, machines) * shift hours * 60

    A resource that is not configured is unconstrained, never zero. A step
    configured with zero staff or zero machines is blocked (budget 0).

    Args:
        product: Validated product configuration
        include_overtime: Add overtime hours to the budget
        shift_hours: Manual override for the product's standard hours
        overtime_hours: Manual override for the product's overtime hours
        capacity_overrides: {step: {'capacityMinutes': float, 'reason': str}}

    Returns:
        Dict of step name -> StepCapacity, in process sequence
    """
    standard = product.standard_hours if shift_hours is None else float(shift_hours)
    overtime = product.overtime_hours if overtime_hours is None else float(overtime_hours)
    hours = standard + overtime if include_overtime else standard
    capacity_overrides = capacity_overrides or {}

    model = {}
    for step in product.steps:
        duration = product.duration_minutes(step)

        override = capacity_overrides.get(step)
        if override is not None:
            model[step] = StepCapacity(
                step_name=step,
                total_minutes=max(float(override.get('capacityMinutes', 0) or 0), 0.0),
                duration_minutes=duration,
                constraint_level=ConstraintLevel.OVERRIDE,
                override_reason=override.get('reason'),
            )
            continue

        staff = _resource(product.step_staff_counts, step)
        machines = _resource(product.step_machine_counts, step)
        resources = min(staff, machines)

        if math.isinf(resources):
            model[step] = StepCapacity(
                step_name=step,
                total_minutes=math.inf,
                duration_minutes=duration,
                constraint_level=ConstraintLevel.UNCONSTRAINED,
            )
            continue

        resources = int(resources)
        if resources <= 0:
            level = ConstraintLevel.BLOCKED
        elif staff < machines:
            level = ConstraintLevel.STAFF_LIMITED
        else:
            level = ConstraintLevel.MACHINE_LIMITED

        model[step] = StepCapacity(
            step_name=step,
            total_minutes=max(resources, 0) * max(hours, 0) * 60,
            duration_minutes=duration,
            constraint_level=level,
            resource_count=resources,
            overtime_minutes=max(resources, 0) * max(overtime, 0) * 60,
        )

    return model
