"""
Step-State Classifier
Works out where each order sits in the process sequence and whether it can
be advanced in this run.

Step cells hold loosely typed strings in the planner table ('', 'P', 'WIP',
'Hold', a completion timestamp, 'N/A', operator notes...). Every cell is
normalized into a StepState first so the skip/exclude rules below only ever
deal with a closed set of kinds.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from enum import Enum
from typing import Dict, List, Any, Optional, Tuple

import pandas as pd

from algorithms.errors import DataError
from algorithms.product import ProductConfig
from validators import is_blank


class StepKind(Enum):
    EMPTY = 'empty'                   # not started, can be planned
    PLANNED = 'planned'               # 'P' - advanced, not yet worked
    IN_PROGRESS = 'in_progress'       # 'WIP'
    BLOCKED = 'blocked'               # Hold / QN / DIFA
    COMPLETED = 'completed'           # timestamp or DONE
    NOT_APPLICABLE = 'not_applicable'
    MEMO = 'memo'                     # free text, never overwritten


class BlockKind(Enum):
    HOLD = 'HOLD'
    QN = 'QN'
    DIFA = 'DIFA'


@dataclass(frozen=True)
class StepState:
    """Normalized value of one step cell."""
    kind: StepKind
    raw: str = ''
    block: Optional[BlockKind] = None
    completed_at: Optional[datetime] = None

    @property
    def is_satisfied(self) -> bool:
        return self.kind in (StepKind.COMPLETED, StepKind.NOT_APPLICABLE)

    def is_moving(self, now: datetime, recent_hours: float) -> bool:
        """
        True if work is flowing through this step right now.

        Planned and WIP cells count; a completion counts when it is within
        `recent_hours` of `now` (or carries no usable timestamp, e.g. DONE).
        """
        if self.kind in (StepKind.PLANNED, StepKind.IN_PROGRESS):
            return True
        if self.kind != StepKind.COMPLETED:
            return False
        if self.completed_at is None:
            return True
        return now - self.completed_at <= timedelta(hours=recent_hours)


EMPTY_STATE = StepState(StepKind.EMPTY)

EMPTY_VALUES = {'', 'RESET'}
STATUS_KINDS = {
    'P': StepKind.PLANNED,
    'WIP': StepKind.IN_PROGRESS,
    'N/A': StepKind.NOT_APPLICABLE,
    'DONE': StepKind.COMPLETED,
}

# 02-Jan, 19:30 (planner table format, no year); trailing notes allowed
DAY_MONTH_TIME = re.compile(r'(\d{1,2})-([A-Za-z]{3}),\s*(\d{1,2}):(\d{2})')
# 2026-01-02 19:30 / 2026-01-02T19:30:00 / 2026/01/02
YEAR_FIRST_DATE = re.compile(r'^\d{4}[-/]\d{1,2}[-/]\d{1,2}(?:[ T]\s*\d{1,2}:\d{2}(?::\d{2})?.*)?$')

# Exclusion reasons
EXCLUDED_BLOCKED = 'blocked'
EXCLUDED_MATERIAL = 'material'
EXCLUDED_COMPLETED = 'completed'

MATERIAL_FIELDS = ('Material_Status', 'Material Status', '物料状态')
MATERIAL_READY_VALUES = {'', 'READY', 'OK', '齐套'}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a date-like value into a naive datetime.

    Returns None for blanks and anything pandas cannot parse.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts.to_pydatetime()


def _parse_day_month(match, now: Optional[datetime]) -> Optional[datetime]:
    day, month, hour, minute = match.groups()
    reference = now or datetime.now()
    try:
        stamp = datetime.strptime(f"{int(day)}-{month.title()}-{reference.year} {hour}:{minute}",
                                  '%d-%b-%Y %H:%M')
    except ValueError:
        return None
    # No year in the cell: a stamp "in the future" belongs to last year
    if stamp > reference + timedelta(days=1):
        stamp = stamp.replace(year=stamp.year - 1)
    return stamp


def classify_step_value(value: Any, now: datetime = None) -> StepState:
    """
    Normalize a raw step cell into a StepState.

    Args:
        value: Cell value from the order snapshot
        now: Reference time, used to place year-less timestamps

    Returns:
        StepState for the cell
    """
    if is_blank(value):
        return EMPTY_STATE

    if isinstance(value, (datetime, date)):
        return StepState(StepKind.COMPLETED, raw=str(value), completed_at=parse_timestamp(value))

    raw = str(value).strip()
    status = raw.upper()

    if status in EMPTY_VALUES:
        return EMPTY_STATE
    if status in STATUS_KINDS:
        return StepState(STATUS_KINDS[status], raw=raw)
    if status in BlockKind.__members__:
        return StepState(StepKind.BLOCKED, raw=raw, block=BlockKind[status])

    match = DAY_MONTH_TIME.search(raw)
    if match:
        return StepState(StepKind.COMPLETED, raw=raw, completed_at=_parse_day_month(match, now))
    if YEAR_FIRST_DATE.match(raw):
        return StepState(StepKind.COMPLETED, raw=raw, completed_at=parse_timestamp(raw))

    return StepState(StepKind.MEMO, raw=raw)


def get_wo_id(order: Any) -> str:
    """Work order id of a snapshot. Raises DataError when missing."""
    if not isinstance(order, dict):
        raise DataError(f"expected a mapping, got {type(order).__name__}")
    for key in ('woId', 'WO ID'):
        value = order.get(key)
        if not is_blank(value):
            return str(value).strip()
    raise DataError('missing woId', wo_id=str(order.get('id', '') or '') or None)


def is_material_ready(order: Dict[str, Any]) -> bool:
    """
    Material gating check.

    An explicit boolean `materialReady` wins; otherwise the first non-empty
    material status column decides. No material information means ready.
    """
    flag = order.get('materialReady')
    if isinstance(flag, bool):
        return flag
    for key in MATERIAL_FIELDS:
        value = order.get(key)
        if not is_blank(value):
            return str(value).strip().upper() in MATERIAL_READY_VALUES
    return True


@dataclass
class OrderPosition:
    """Where one order stands in the process sequence."""
    order: Dict[str, Any]
    wo_id: str
    step_states: Dict[str, StepState] = field(default_factory=dict)
    target_step: Optional[str] = None
    target_index: int = -1
    exclusion: Optional[str] = None
    exclusion_detail: str = ''

    @property
    def is_candidate(self) -> bool:
        return self.exclusion is None and self.target_step is not None

    def preceding_state(self, steps: List[str]) -> Optional[StepState]:
        """State of the nearest earlier step that applies to this order."""
        for i in range(self.target_index - 1, -1, -1):
            state = self.step_states[steps[i]]
            if state.kind != StepKind.NOT_APPLICABLE:
                return state
        return None


def classify_order(order: Dict[str, Any], product: ProductConfig,
                   now: datetime = None) -> OrderPosition:
    """
    Find an order's candidate target step.

    The target is the first EMPTY step in sequence order. Planned, WIP,
    completed, not-applicable and memo cells are stepped over. Orders with a
    Hold/QN/DIFA cell anywhere, or with material not ready, are excluded.

    Raises:
        DataError: if the snapshot has no usable woId
    """
    wo_id = get_wo_id(order)
    states = {step: classify_step_value(order.get(step), now) for step in product.steps}
    position = OrderPosition(order=order, wo_id=wo_id, step_states=states)

    for step, state in states.items():
        if state.kind == StepKind.BLOCKED:
            position.exclusion = EXCLUDED_BLOCKED
            position.exclusion_detail = f"{state.block.value} at {step}"
            return position

    if not is_material_ready(order):
        position.exclusion = EXCLUDED_MATERIAL
        position.exclusion_detail = 'material not ready'
        return position

    for index, step in enumerate(product.steps):
        if states[step].kind == StepKind.EMPTY:
            position.target_step = step
            position.target_index = index
            return position

    position.exclusion = EXCLUDED_COMPLETED
    position.exclusion_detail = 'no open step'
    return position


def classify_orders(orders: List[Dict[str, Any]], product: ProductConfig,
                    now: datetime = None) -> Tuple[List[OrderPosition], List[DataError]]:
    """
    Classify every order snapshot.

    Returns:
        (positions, invalid) - one OrderPosition per usable order in input
        order, and a DataError for every snapshot that was skipped
    """
    positions = []
    invalid = []
    seen = set()

    for order in orders:
        try:
            position = classify_order(order, product, now)
        except DataError as e:
            invalid.append(e)
            continue

        if position.wo_id in seen:
            invalid.append(DataError('duplicate woId', wo_id=position.wo_id))
            continue
        seen.add(position.wo_id)
        positions.append(position)

    return positions, invalid
