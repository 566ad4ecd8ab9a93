"""
Production Scheduling Recommender
Decides which open work orders should be advanced into which process step
next, within each step's capacity for one shift.

    recommend(orders, product) -> SchedulingResult

Pure function of (orders, product, now): no I/O, no state kept between
calls. The caller applies the result by writing 'P' into each recommended
order's target step (only if that cell is still empty) and re-invokes after
any manual change.
"""

import calendar
import math
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Dict, List, Any, Optional

from algorithms.allocator import Candidate, FlowStep, allocate
from algorithms.capacity import build_capacity_model
from algorithms.errors import ConfigurationError
from algorithms.product import ProductConfig
from algorithms.scoring import OrderScore, Priority, score_position
from algorithms.step_state import (
    classify_orders, parse_timestamp,
    EXCLUDED_BLOCKED, EXCLUDED_MATERIAL, EXCLUDED_COMPLETED
)
from algorithms.utilization import StepUtilization, summarize_utilization
from settings import SchedulerSettings, clamp_planning_hours
from validators import validate_product_config


@dataclass
class Recommendation:
    """Advance order `wo_id` into `step_name`."""
    wo_id: str
    step_name: str
    score: float
    order_id: Optional[str] = None
    priority: Priority = Priority.NORMAL
    predicted_flow: List[FlowStep] = field(default_factory=list)
    score_details: Optional[OrderScore] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'orderId': self.order_id,
            'woId': self.wo_id,
            'stepName': self.step_name,
            'score': round(self.score, 2),
            'priority': self.priority.value,
            'predictedFlow': [
                {'stepName': f.step_name, 'etaOffset': f.eta_offset, 'etaEnd': f.eta_end}
                for f in self.predicted_flow
            ],
        }


@dataclass
class SchedulingSummary:
    total_planned: int = 0
    high_priority_planned: int = 0
    skipped_due_to_capacity: int = 0
    skipped_due_to_material: int = 0
    skipped_due_to_block: int = 0
    skipped_due_to_limit: int = 0
    skipped_invalid: int = 0
    completed_orders: int = 0
    skipped_due_to_target: int = 0
    daily_capacity_from_goal: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalPlanned': self.total_planned,
            'highPriorityPlanned': self.high_priority_planned,
            'skippedDueToCapacity': self.skipped_due_to_capacity,
            'skippedDueToMaterial': self.skipped_due_to_material,
            'skippedDueToBlock': self.skipped_due_to_block,
            'skippedDueToLimit': self.skipped_due_to_limit,
            'skippedInvalid': self.skipped_invalid,
            'completedOrders': self.completed_orders,
            'skippedDueToTarget': self.skipped_due_to_target,
            'dailyCapacityFromGoal': self.daily_capacity_from_goal,
        }


@dataclass
class SchedulingResult:
    recommendations: List[Recommendation] = field(default_factory=list)
    step_utilization: Dict[str, StepUtilization] = field(default_factory=dict)
    summary: SchedulingSummary = field(default_factory=SchedulingSummary)
    diagnostics: List[Dict[str, str]] = field(default_factory=list)
    generated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recommendations': [r.to_dict() for r in self.recommendations],
            'stepUtilization': {step: u.to_dict() for step, u in self.step_utilization.items()},
            'summary': self.summary.to_dict(),
            'diagnostics': list(self.diagnostics),
            'generatedAt': self.generated_at.isoformat() if self.generated_at else None,
        }


def daily_capacity_from_monthly_goal(monthly_target: Optional[int],
                                     include_saturday: bool = False,
                                     include_sunday: bool = False,
                                     today: date = None) -> Optional[int]:
    """
    Orders per working day needed to hit a monthly target.

    Working days are counted over the calendar month of `today`.

    Returns:
        ceil(target / working days), or None without a positive target
    """
    if not monthly_target or monthly_target <= 0:
        return None

    today = today or date.today()
    days_in_month = calendar.monthrange(today.year, today.month)[1]

    working_days = 0
    for day in range(1, days_in_month + 1):
        weekday = date(today.year, today.month, day).weekday()
        if weekday == 5 and not include_saturday:
            continue
        if weekday == 6 and not include_sunday:
            continue
        working_days += 1

    if working_days == 0:
        return None
    return math.ceil(monthly_target / working_days)


def recommend(orders: List[Dict[str, Any]], product: Dict[str, Any],
              settings: SchedulerSettings = None,
              now: datetime = None,
              shift_hours: float = None,
              overtime_hours: float = None,
              planning_hours: float = None,
              capacity_overrides: Dict[str, Dict[str, Any]] = None,
              verbose: bool = False) -> SchedulingResult:
    """
    Recommend which orders to advance into which step.

    Args:
        orders: Order snapshots (woId, createdAt, Priority, WO DUE, material
                status and one field per step name)
        product: Product configuration dict (steps, stepDurations,
                 stepStaffCounts, stepMachineCounts, shiftConfig,
                 schedulingConfig, monthlyTarget)
        settings: Engine constants (default: SchedulerSettings())
        now: Reference time (default: datetime.now())
        shift_hours: Manual override for standard shift hours
        overtime_hours: Manual override for overtime hours
        planning_hours: Horizon for predicted flow (1-72, default from settings)
        capacity_overrides: {step: {'capacityMinutes': float, 'reason': str}}
        verbose: Print a run summary and skipped orders

    Returns:
        SchedulingResult with ranked recommendations and per-step utilization

    Raises:
        ConfigurationError: product configuration is unusable
    """
    report = validate_product_config(product, capacity_overrides)
    if not report.is_valid:
        raise ConfigurationError(report.errors)

    settings = settings or SchedulerSettings()
    now = parse_timestamp(now) if now is not None else datetime.now()
    config = ProductConfig.from_dict(product, settings)
    horizon = clamp_planning_hours(planning_hours if planning_hours is not None
                                   else settings.planning_hours)
    orders = orders or []

    if verbose:
        print(f"\n{'='*70}")
        print(f"SCHEDULING RECOMMENDATION: {len(orders)} ORDERS, {len(config.steps)} STEPS")
        print(f"Product: {config.name or config.product_id or '(unnamed)'}")
        print(f"Reference time: {now}")
        print(f"{'='*70}")

    capacity = build_capacity_model(
        config,
        include_overtime=settings.include_overtime,
        shift_hours=shift_hours,
        overtime_hours=overtime_hours,
        capacity_overrides=capacity_overrides,
    )

    summary = SchedulingSummary()
    diagnostics = []

    positions, invalid = classify_orders(orders, config, now)
    for error in invalid:
        summary.skipped_invalid += 1
        diagnostics.append({'woId': error.wo_id or '', 'reason': error.reason})
        if verbose:
            print(f"   [WARN] Skipping order {error.wo_id or 'UNKNOWN'}: {error.reason}")

    candidates = []
    for position in positions:
        if position.is_candidate:
            candidates.append(Candidate(position, score_position(position, config, settings, now)))
            continue
        if position.exclusion == EXCLUDED_COMPLETED:
            summary.completed_orders += 1
            continue
        if position.exclusion == EXCLUDED_BLOCKED:
            summary.skipped_due_to_block += 1
        elif position.exclusion == EXCLUDED_MATERIAL:
            summary.skipped_due_to_material += 1
        diagnostics.append({'woId': position.wo_id, 'reason': position.exclusion_detail})
        if verbose:
            print(f"   [SKIP] {position.wo_id}: {position.exclusion_detail}")

    allocation = allocate(candidates, capacity, config, horizon)
    summary.skipped_due_to_capacity = len(allocation.rejected)

    accepted = allocation.accepted
    if len(accepted) > settings.max_recommendations:
        summary.skipped_due_to_limit = len(accepted) - settings.max_recommendations
        accepted = accepted[:settings.max_recommendations]

    recommendations = []
    for allocation_entry in accepted:
        candidate = allocation_entry.candidate
        order_id = candidate.position.order.get('id')
        recommendations.append(Recommendation(
            wo_id=candidate.wo_id,
            step_name=candidate.step_name,
            score=candidate.score.combined_score,
            order_id=str(order_id) if order_id is not None else None,
            priority=candidate.score.priority,
            predicted_flow=allocation_entry.predicted_flow,
            score_details=candidate.score,
        ))

    summary.total_planned = len(recommendations)
    summary.high_priority_planned = sum(1 for r in recommendations if r.priority == Priority.RED)

    summary.daily_capacity_from_goal = daily_capacity_from_monthly_goal(
        config.monthly_target, config.include_saturday, config.include_sunday, now.date()
    )
    if summary.daily_capacity_from_goal:
        standard = config.standard_hours if shift_hours is None else float(shift_hours)
        overtime = config.overtime_hours if overtime_hours is None else float(overtime_hours)
        shift_total = standard + overtime
        planning_days = math.ceil(horizon / shift_total) if shift_total > 0 else 1
        summary.skipped_due_to_target = max(
            0, summary.total_planned - summary.daily_capacity_from_goal * planning_days
        )

    result = SchedulingResult(
        recommendations=recommendations,
        step_utilization=summarize_utilization(accepted, capacity),
        summary=summary,
        diagnostics=diagnostics,
        generated_at=now,
    )

    if verbose:
        print_summary(result)

    return result


def print_summary(result: SchedulingResult):
    """Print a human-readable run summary."""
    summary = result.summary
    print(f"\n[OK] Planned: {summary.total_planned} orders ({summary.high_priority_planned} red)")
    print(f"   Skipped - capacity: {summary.skipped_due_to_capacity}, "
          f"material: {summary.skipped_due_to_material}, "
          f"blocked: {summary.skipped_due_to_block}, "
          f"invalid: {summary.skipped_invalid}")
    if summary.skipped_due_to_limit:
        print(f"[WARN] {summary.skipped_due_to_limit} recommendations dropped by the output limit")

    print(f"\nSTEP UTILIZATION:")
    for step, util in result.step_utilization.items():
        total = 'unlimited' if util.is_unlimited else f"{util.total_minutes:.0f}"
        print(f"   {step}: {util.used_minutes:.0f}/{total} min, {util.count} orders "
              f"({util.constraint_level.value})")
