"""
League Scheduler - season schedule generator with simulated-annealing week assignment.
"""

__version__ = "0.1.0"

from .config import SchedulerConfig, load_config
from .models import Team, Matchup, TeamGame, Schedule
from .engine import WeekAssignmentSession
from .league import (
    generate_schedule,
    build_season,
    ensure_schedule,
    get_team_schedule,
    recompute_record,
    get_bye_week,
    get_team_prime_time_count,
)
from .validation import validate_schedule
from .export import write_excel, write_json

__all__ = [
    "SchedulerConfig",
    "load_config",
    "Team",
    "Matchup",
    "TeamGame",
    "Schedule",
    "WeekAssignmentSession",
    "generate_schedule",
    "build_season",
    "ensure_schedule",
    "get_team_schedule",
    "recompute_record",
    "get_bye_week",
    "get_team_prime_time_count",
    "validate_schedule",
    "write_excel",
    "write_json",
]
