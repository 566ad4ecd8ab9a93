"""
Order Scoring
Desirability score for advancing an order into its candidate step.

    score = red bonus
          + (dateWeight% * urgency + agingWeight% * aging) * yellow multiplier
          + flow bonus

Every term is non-negative and depends only on (order, step, now), so the
ranking is reproducible for a fixed snapshot.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, Tuple

from algorithms.product import ProductConfig
from algorithms.step_state import OrderPosition, classify_order, is_blank, parse_timestamp
from settings import SchedulerSettings


class Priority(Enum):
    RED = 'Red'
    YELLOW = 'Yellow'
    NORMAL = 'Normal'


PRIORITY_FIELDS = ('Priority', '优先级')
DUE_DATE_FIELDS = ('WO DUE', 'WO_DUE', '到期日期')

RED_WORDS = {'red', 'urgent', 'high', '3'}
YELLOW_WORDS = {'yellow', 'medium', '2'}
RED_CJK = ('紧急', '高')
YELLOW_CJK = ('中',)


@dataclass
class OrderScore:
    """Score of one (order, step) candidate with its components."""
    wo_id: str
    step_name: str
    priority: Priority
    priority_bonus: float
    urgency_score: float     # 0..100+, before weighting
    aging_score: float       # 0..100, before weighting
    date_term: float
    aging_term: float
    flow_score: float
    combined_score: float

    @property
    def sort_key(self) -> Tuple[float, str]:
        """Highest score first, then ascending woId."""
        return (-self.combined_score, self.wo_id)


def _first_present(order: Dict[str, Any], keys) -> Any:
    for key in keys:
        value = order.get(key)
        if not is_blank(value):
            return value
    return None


def parse_priority(value: Any) -> Priority:
    """Map planner priority values ('Red', 'Urgent', '3', 'Yellow', ...) onto Priority."""
    if is_blank(value):
        return Priority.NORMAL
    p = str(value).strip().lower()
    words = set(re.findall(r'[a-z0-9]+', p))
    if words & RED_WORDS or any(token in p for token in RED_CJK):
        return Priority.RED
    if words & YELLOW_WORDS or any(token in p for token in YELLOW_CJK):
        return Priority.YELLOW
    return Priority.NORMAL


def order_priority(order: Dict[str, Any]) -> Priority:
    return parse_priority(_first_present(order, PRIORITY_FIELDS))


def order_due_date(order: Dict[str, Any]) -> Optional[datetime]:
    return parse_timestamp(_first_present(order, DUE_DATE_FIELDS))


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up."""
    return math.ceil((end - start).total_seconds() / 86400)


def urgency_curve(days_left: int) -> float:
    """
    Due-date urgency, decreasing in days left.

    Overdue orders keep climbing past 100 (+1 per day late) so they do not
    flatten out against each other; ten or more days out scores zero.
    """
    if days_left <= 0:
        return 100.0 + abs(days_left)
    return max(0.0, 100.0 - days_left * 10)


def aging_curve(age_days: int) -> float:
    """Order age, non-decreasing, capped at 100."""
    return float(min(100, max(0, age_days * 5)))


def score_position(position: OrderPosition, product: ProductConfig,
                   settings: SchedulerSettings = None,
                   now: datetime = None) -> OrderScore:
    """
    Score a classified candidate.

    Args:
        position: OrderPosition with a target step
        product: Product configuration (weights, step order)
        settings: Bonus / multiplier constants
        now: Reference time

    Returns:
        OrderScore for (order, target step)
    """
    settings = settings or SchedulerSettings()
    now = now or datetime.now()
    order = position.order

    priority = order_priority(order)

    urgency = 0.0
    due = order_due_date(order)
    if due is not None:
        urgency = urgency_curve(days_between(now, due))

    created = parse_timestamp(order.get('createdAt')) or now
    aging = aging_curve(days_between(created, now))

    date_term = max(product.date_weight, 0) / 100 * urgency
    aging_term = max(product.aging_weight, 0) / 100 * aging

    priority_bonus = 0.0
    multiplier = 1.0
    if priority == Priority.RED:
        priority_bonus = float(settings.red_priority_bonus)
    elif priority == Priority.YELLOW:
        multiplier = float(settings.yellow_multiplier)

    flow_score = 0.0
    previous = position.preceding_state(product.steps)
    if previous is not None and previous.is_moving(now, settings.flow_recent_hours):
        flow_score = max(product.flow_weight, 0)

    combined = priority_bonus + (date_term + aging_term) * multiplier + flow_score

    return OrderScore(
        wo_id=position.wo_id,
        step_name=position.target_step,
        priority=priority,
        priority_bonus=priority_bonus,
        urgency_score=urgency,
        aging_score=aging,
        date_term=date_term,
        aging_term=aging_term,
        flow_score=flow_score,
        combined_score=combined,
    )


def score_order(order: Dict[str, Any], product: ProductConfig,
                settings: SchedulerSettings = None,
                now: datetime = None) -> Optional[OrderScore]:
    """
    Classify and score a single order.

    Returns None when the order has no schedulable step (blocked, material
    not ready, or fully complete).
    """
    position = classify_order(order, product, now)
    if not position.is_candidate:
        return None
    return score_position(position, product, settings, now)
