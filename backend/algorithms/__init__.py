"""
Scheduling Algorithms

This module provides the production scheduling recommendation engine.

Components:
- Capacity Model: per-step minutes budget (capacity.py)
- Step-State Classifier: current position of each order (step_state.py)
- Scorer: priority / due date / aging / flow score (scoring.py)
- Allocator: greedy fill of step capacity + predicted flow (allocator.py)
- Utilization Reporter: per-step usage summary (utilization.py)
"""

from algorithms.errors import (
    SchedulingError,
    ConfigurationError,
    DataError
)

from algorithms.product import ProductConfig

from algorithms.capacity import (
    build_capacity_model,
    StepCapacity,
    ConstraintLevel
)

from algorithms.step_state import (
    classify_order,
    classify_orders,
    classify_step_value,
    OrderPosition,
    StepState,
    StepKind,
    BlockKind
)

from algorithms.scoring import (
    score_order,
    score_position,
    parse_priority,
    OrderScore,
    Priority
)

from algorithms.allocator import (
    allocate,
    predict_flow,
    Candidate,
    Allocation,
    FlowStep
)

from algorithms.utilization import summarize_utilization, StepUtilization

from algorithms.recommender import (
    recommend,
    daily_capacity_from_monthly_goal,
    Recommendation,
    SchedulingResult,
    SchedulingSummary
)

__all__ = [
    # Errors
    'SchedulingError',
    'ConfigurationError',
    'DataError',
    # Configuration
    'ProductConfig',
    # Capacity
    'build_capacity_model',
    'StepCapacity',
    'ConstraintLevel',
    # Step state
    'classify_order',
    'classify_orders',
    'classify_step_value',
    'OrderPosition',
    'StepState',
    'StepKind',
    'BlockKind',
    # Scoring
    'score_order',
    'score_position',
    'parse_priority',
    'OrderScore',
    'Priority',
    # Allocation
    'allocate',
    'predict_flow',
    'Candidate',
    'Allocation',
    'FlowStep',
    # Reporting
    'summarize_utilization',
    'StepUtilization',
    # Entry point
    'recommend',
    'daily_capacity_from_monthly_goal',
    'Recommendation',
    'SchedulingResult',
    'SchedulingSummary',
]
