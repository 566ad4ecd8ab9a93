"""
Scheduler Settings
Engine tunables and the environment loader used by the host application.

The engine never reads the environment on its own: callers build a
SchedulerSettings (directly or via load_settings) and pass it to recommend().
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


MIN_PLANNING_HOURS = 1
MAX_PLANNING_HOURS = 72


@dataclass
class SchedulerSettings:
    """Tunable constants for scoring, capacity and output limits."""
    red_priority_bonus: float = 1000    # fixed bonus, weight independent
    yellow_multiplier: float = 2.0      # scales date + aging terms
    default_date_weight: float = 30
    default_aging_weight: float = 20
    default_flow_weight: float = 500
    include_overtime: bool = False      # fold overtime hours into step capacity
    planning_hours: float = 8           # horizon for predicted flow
    max_recommendations: int = 500
    flow_recent_hours: float = 24       # completion this recent keeps an order "moving"

    def __post_init__(self):
        self.planning_hours = clamp_planning_hours(self.planning_hours)


def clamp_planning_hours(hours: float) -> float:
    """Keep the planning horizon within 1-72 hours."""
    return min(max(float(hours), MIN_PLANNING_HOURS), MAX_PLANNING_HOURS)


# Environment variable -> (field, type)
ENV_SETTINGS = {
    'SCHEDULER_RED_BONUS': ('red_priority_bonus', float),
    'SCHEDULER_YELLOW_MULTIPLIER': ('yellow_multiplier', float),
    'SCHEDULER_DATE_WEIGHT': ('default_date_weight', float),
    'SCHEDULER_AGING_WEIGHT': ('default_aging_weight', float),
    'SCHEDULER_FLOW_WEIGHT': ('default_flow_weight', float),
    'SCHEDULER_INCLUDE_OVERTIME': ('include_overtime', bool),
    'SCHEDULER_PLANNING_HOURS': ('planning_hours', float),
    'SCHEDULER_MAX_RECOMMENDATIONS': ('max_recommendations', int),
    'SCHEDULER_FLOW_RECENT_HOURS': ('flow_recent_hours', float),
}


def load_settings(env_file: Optional[str] = None) -> SchedulerSettings:
    """
    Load settings from a .env file and the process environment.

    Args:
        env_file: Optional path to a .env file (default: search from cwd)

    Returns:
        SchedulerSettings with any environment overrides applied

    Raises:
        ConfigurationError: if a variable is set but cannot be parsed
    """
    from algorithms.errors import ConfigurationError

    load_dotenv(env_file)

    overrides = {}
    errors = []
    for env_name, (field_name, cast) in ENV_SETTINGS.items():
        raw = os.environ.get(env_name)
        if raw is None or raw.strip() == '':
            continue
        if cast is bool:
            overrides[field_name] = raw.strip().lower() == 'true'
            continue
        try:
            overrides[field_name] = cast(raw.strip())
        except ValueError:
            errors.append(f"{env_name}={raw!r} is not a valid {cast.__name__}")

    if errors:
        raise ConfigurationError(errors)

    return SchedulerSettings(**overrides)
