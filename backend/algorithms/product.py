"""
Product Configuration
Read-only view of a product line's process steps, resources and weights.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from settings import SchedulerSettings


DEFAULT_STANDARD_HOURS = 8.0
DEFAULT_OVERTIME_HOURS = 0.0


def _hours(value: Any, default: float) -> float:
    """Shift hours from config; None means not configured."""
    return float(default) if value is None else float(value)


@dataclass
class ProductConfig:
    """
    Product configuration as consumed by the recommendation engine.

    `steps` is the only authority for process sequence. Per-step mappings
    are keyed by step name; a missing key means "not configured".
    """
    steps: List[str]
    step_durations: Dict[str, float] = field(default_factory=dict)    # hours per order
    step_staff_counts: Dict[str, int] = field(default_factory=dict)
    step_machine_counts: Dict[str, int] = field(default_factory=dict)
    standard_hours: float = DEFAULT_STANDARD_HOURS
    overtime_hours: float = DEFAULT_OVERTIME_HOURS
    date_weight: float = 30
    aging_weight: float = 20
    flow_weight: float = 500
    monthly_target: Optional[int] = None
    include_saturday: bool = False
    include_sunday: bool = False
    product_id: str = ''
    name: str = ''

    @classmethod
    def from_dict(cls, product: Dict[str, Any], settings=None) -> 'ProductConfig':
        """
        Build a ProductConfig from the application's product dict.

        Expects a product that already passed validate_product_config().
        Weights absent from `schedulingConfig` fall back to `settings`.
        """
        settings = settings or SchedulerSettings()

        shift = product.get('shiftConfig') or {}
        weights = product.get('schedulingConfig') or {}

        def weight(key: str, default: float) -> float:
            value = weights.get(key)
            return float(value) if value is not None else float(default)

        return cls(
            steps=[str(s) for s in product.get('steps') or []],
            step_durations={k: float(v) for k, v in (product.get('stepDurations') or {}).items()
                            if v is not None},
            step_staff_counts={k: int(float(v)) for k, v in (product.get('stepStaffCounts') or {}).items()
                               if v is not None},
            step_machine_counts={k: int(float(v)) for k, v in (product.get('stepMachineCounts') or {}).items()
                                 if v is not None},
            standard_hours=_hours(shift.get('standardHours'), DEFAULT_STANDARD_HOURS),
            overtime_hours=_hours(shift.get('overtimeHours'), DEFAULT_OVERTIME_HOURS),
            date_weight=weight('dateWeight', settings.default_date_weight),
            aging_weight=weight('agingWeight', settings.default_aging_weight),
            flow_weight=weight('flowWeight', settings.default_flow_weight),
            monthly_target=product.get('monthlyTarget'),
            include_saturday=bool(product.get('includeSaturday', False)),
            include_sunday=bool(product.get('includeSunday', False)),
            product_id=str(product.get('id', '') or ''),
            name=str(product.get('name', '') or ''),
        )

    def duration_minutes(self, step: str) -> float:
        """Minutes one order occupies `step`. Missing or zero means instantaneous."""
        hours = self.step_durations.get(step) or 0
        return max(float(hours), 0.0) * 60

    def step_index(self, step: str) -> int:
        return self.steps.index(step)
