"""
Capacity Allocator
Greedy assignment of ranked candidates to steps, bounded by each step's
minutes budget, plus the predicted downstream flow of every accepted order.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from algorithms.capacity import StepCapacity
from algorithms.product import ProductConfig
from algorithms.scoring import OrderScore
from algorithms.step_state import OrderPosition, StepKind


@dataclass
class Candidate:
    """An (order, step) pair eligible for this run, with its score."""
    position: OrderPosition
    score: OrderScore

    @property
    def wo_id(self) -> str:
        return self.position.wo_id

    @property
    def step_name(self) -> str:
        return self.position.target_step


@dataclass
class FlowStep:
    """One step of an order's predicted path, in hours from now."""
    step_name: str
    eta_offset: float
    eta_end: float


@dataclass
class Allocation:
    """An accepted candidate."""
    candidate: Candidate
    duration_minutes: float
    predicted_flow: List[FlowStep] = field(default_factory=list)


@dataclass
class AllocationResult:
    accepted: List[Allocation] = field(default_factory=list)     # ranked
    rejected: List[Candidate] = field(default_factory=list)      # over capacity


def rank_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """Score descending, ties broken by ascending woId."""
    return sorted(candidates, key=lambda c: c.score.sort_key)


def predict_flow(position: OrderPosition, product: ProductConfig,
                 planning_hours: float) -> List[FlowStep]:
    """
    Project the steps an order would occupy if advanced now.

    Walks forward from the target step through steps still ahead of the
    order (empty or planned), accumulating durations until the planning
    horizon is reached. Display only: no capacity is reserved downstream.
    """
    steps = product.steps
    planning_minutes = planning_hours * 60
    accumulated = 0.0
    flow = []

    for index in range(position.target_index, len(steps)):
        step = steps[index]
        if index > position.target_index:
            kind = position.step_states[step].kind
            if kind not in (StepKind.EMPTY, StepKind.PLANNED):
                continue

        if accumulated >= planning_minutes:
            break

        duration = product.duration_minutes(step)
        start_hour = accumulated / 60
        end_hour = min((accumulated + duration) / 60, planning_hours)
        flow.append(FlowStep(
            step_name=step,
            eta_offset=round(start_hour, 1),
            eta_end=round(end_hour, 1),
        ))
        accumulated += duration

    return flow


def allocate(candidates: List[Candidate], capacity: Dict[str, StepCapacity],
             product: ProductConfig, planning_hours: float) -> AllocationResult:
    """
    Fill each step's budget with its best candidates.

    For every step in process sequence, candidates targeting that step are
    taken in rank order while usedMinutes + duration <= totalMinutes. Once
    a candidate does not fit, the step is closed for this run and the rest
    are rejected (they are re-evaluated on the next call).

    Args:
        candidates: Scored candidates, any order
        capacity: Output of build_capacity_model()
        product: Product configuration
        planning_hours: Horizon for predicted flow

    Returns:
        AllocationResult with accepted allocations in rank order
    """
    ranked = rank_candidates(candidates)
    by_step: Dict[str, List[Candidate]] = {step: [] for step in product.steps}
    for candidate in ranked:
        by_step[candidate.step_name].append(candidate)

    result = AllocationResult()
    for step in product.steps:
        step_capacity = capacity[step]
        used_minutes = 0.0
        closed = False

        for candidate in by_step[step]:
            if closed or not step_capacity.fits(used_minutes):
                closed = True
                result.rejected.append(candidate)
                continue

            used_minutes += step_capacity.duration_minutes
            result.accepted.append(Allocation(
                candidate=candidate,
                duration_minutes=step_capacity.duration_minutes,
                predicted_flow=predict_flow(candidate.position, product, planning_hours),
            ))

    result.accepted.sort(key=lambda a: a.candidate.score.sort_key)
    return result
