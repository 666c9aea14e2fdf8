"""
League-state facade: generate, store and read season schedules.

``league_state`` is any mutable mapping owned by the host application; the
schedule is kept under the ``"schedule"`` key, either as a ``Schedule`` or as
its persisted dict (which is hydrated on first access).

Hydration writes the ``Schedule`` back into ``league_state``, so hosts that
serialize the state must store ``league_state["schedule"].to_dict()`` rather
than the object itself.
"""

import logging
import math
import random
from typing import Any, Callable, Dict, List, MutableMapping, NamedTuple, Optional, Sequence

from .byes import assign_byes
from .config import SchedulerConfig
from .engine import SolveProgress, WeekAssignmentSession
from .kickoff import assign_kickoffs
from .matchups import build_manifest
from .models import GameStatus, Matchup, Schedule, TeamGame, PRIME_TIME_SLOTS
from .passes import cluster_division_games
from .teams import check_registry
from .validation import summarize_schedule, validate_schedule

logger = logging.getLogger(__name__)

SCHEDULE_KEY = "schedule"


class SeasonBuild(NamedTuple):
    """Products of one generation run, kept for callers that report on them."""
    schedule: Schedule
    manifest: List[Matchup]
    byes: Dict[str, int]
    session: WeekAssignmentSession
    anchored: List[Matchup]
    registry_problems: List[str]
    division_games_moved: int


def build_season(season_year: int, config: SchedulerConfig, rng: random.Random,
                 ranks: Optional[Dict[str, int]] = None,
                 on_progress: Optional[Callable[[SolveProgress], None]] = None) -> SeasonBuild:
    """
    Run the generation pipeline without validating the result.

    Registry -> manifest -> byes -> week solver -> division clustering ->
    kickoffs -> views.

    Args:
        season_year: Season to generate
        config: Scheduler configuration
        rng: Random source for every draw in the run
        ranks: Optional finishing places for rank-matched games
        on_progress: Called with each annealing progress report

    Returns:
        SeasonBuild: The schedule plus the intermediate products
    """
    teams = config.get_teams()
    problems = check_registry(teams)
    team_codes = [team.code for team in teams]

    manifest = build_manifest(season_year, teams, ranks=ranks, games_per_team=config.games_per_team)
    logger.info("Built %d matchups for %d", len(manifest), season_year)

    byes = assign_byes(team_codes, config, rng)

    session = WeekAssignmentSession(manifest, byes, config, rng)
    anchored = session.lock_anchor_games()
    session.initial_assignment()
    for progress in session.iter_solve():
        if on_progress is not None:
            on_progress(progress)
    moved = cluster_division_games(session, config)
    games = session.apply()

    assign_kickoffs(games, season_year, config, rng)

    schedule = build_schedule(season_year, games, byes, team_codes, config)
    return SeasonBuild(schedule, manifest, byes, session, anchored, problems, moved)


def generate_schedule(season_year: int,
                      config: Optional[SchedulerConfig] = None,
                      rng: Optional[random.Random] = None,
                      ranks: Optional[Dict[str, int]] = None) -> Schedule:
    """
    Generate a full season schedule and validate it.

    Quality problems are logged, not raised.

    Args:
        season_year: Season to generate
        config: Scheduler configuration (defaults apply when omitted)
        rng: Random source; defaults to one seeded from ``config.seed``
        ranks: Optional finishing places for rank-matched games

    Returns:
        Schedule: The new schedule
    """
    config = config or SchedulerConfig()
    if rng is None:
        rng = random.Random(config.seed)

    schedule = build_season(season_year, config, rng, ranks=ranks).schedule

    if config.debug:
        summarize_schedule(schedule)
    validate_schedule(schedule, config)

    return schedule


def build_schedule(season_year: int, games: Sequence[Matchup], byes: Dict[str, int],
                   team_codes: Sequence[str], config: SchedulerConfig) -> Schedule:
    """Build the by-week and by-team views from placed games and byes."""
    by_week: Dict[int, List[Matchup]] = {week: [] for week in range(1, config.weeks + 1)}
    for game in sorted(games, key=lambda g: (g.kickoff_iso or "", g.matchup_id)):
        if game.week not in by_week:
            logger.warning("Game %s has invalid week %s; dropped from views", game.matchup_id, game.week)
            continue
        by_week[game.week].append(game)

    by_team: Dict[str, List[TeamGame]] = {code: [] for code in team_codes}
    for week_games in by_week.values():
        for game in week_games:
            for code in game.teams:
                by_team.setdefault(code, []).append(TeamGame.from_matchup(game, code))

    for code, week in byes.items():
        by_team.setdefault(code, []).append(TeamGame.bye(code, week))

    for rows in by_team.values():
        rows.sort(key=lambda row: row.season_week)
        for i, row in enumerate(rows):
            row.index = i

    return Schedule(
        season_year=season_year,
        schema_version=config.schema_version,
        by_team=by_team,
        by_week=by_week,
    )


def _stored_schedule(league_state: MutableMapping[str, Any]) -> Optional[Schedule]:
    """Return the stored schedule, hydrating a persisted dict in place."""
    stored = league_state.get(SCHEDULE_KEY)
    if stored is None or isinstance(stored, Schedule):
        return stored

    try:
        schedule = Schedule.from_dict(stored)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Stored schedule could not be read (%s); it will be regenerated", e)
        return None

    league_state[SCHEDULE_KEY] = schedule
    return schedule


def ensure_schedule(league_state: Optional[MutableMapping[str, Any]], season_year: int,
                    config: Optional[SchedulerConfig] = None) -> Schedule:
    """
    Get the schedule for a season, generating it when missing or stale.

    A stored schedule is reused as-is when its season year and schema
    version both match; otherwise a fresh one replaces it.

    Args:
        league_state: Host-owned mutable mapping
        season_year: Season wanted
        config: Scheduler configuration

    Returns:
        Schedule: The stored (or newly stored) schedule

    Raises:
        ValueError: If league_state is missing
    """
    if league_state is None:
        raise ValueError("league_state is required to ensure a schedule")

    config = config or SchedulerConfig()
    existing = _stored_schedule(league_state)
    if (
        existing is not None
        and existing.season_year == season_year
        and existing.schema_version == config.schema_version
    ):
        return existing

    if existing is not None:
        logger.info(
            "Regenerating schedule (stored season %s schema %s, wanted season %s schema %s)",
            existing.season_year, existing.schema_version, season_year, config.schema_version
        )

    fresh = generate_schedule(season_year, config)
    league_state[SCHEDULE_KEY] = fresh
    return fresh


def get_team_schedule(league_state: Optional[MutableMapping[str, Any]], team_code: str,
                      season_year: int, config: Optional[SchedulerConfig] = None) -> List[TeamGame]:
    """Get one team's rows (games and bye), generating the schedule if needed."""
    schedule = ensure_schedule(league_state, season_year, config)
    rows = schedule.get_team_schedule(team_code)
    if not rows:
        logger.warning("No schedule rows for team %s in %s", team_code, season_year)
    return rows


def _as_score(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    return score if math.isfinite(score) else None


def recompute_record(league_state: MutableMapping[str, Any], team_code: str) -> str:
    """
    Win-loss record from a team's final games.

    Returns:
        str: "W-L", or "W-L-T" once a tie exists; "0-0" without a schedule

    Raises:
        ValueError: If league_state is missing
    """
    if league_state is None:
        raise ValueError("league_state is required to recompute a record")

    stored = league_state.get(SCHEDULE_KEY)
    if isinstance(stored, dict):
        stored = _stored_schedule(league_state)
    if stored is None or team_code not in stored.by_team:
        return "0-0"

    wins = losses = ties = 0
    for row in stored.by_team[team_code]:
        if row.is_bye or row.status is not GameStatus.FINAL:
            continue
        ours = _as_score(row.team_score)
        theirs = _as_score(row.opponent_score)
        if ours is None or theirs is None:
            continue
        if ours > theirs:
            wins += 1
        elif theirs > ours:
            losses += 1
        else:
            ties += 1

    return f"{wins}-{losses}-{ties}" if ties else f"{wins}-{losses}"


def get_bye_week(schedule: Schedule, team_code: str) -> Optional[int]:
    """Week of a team's bye, or None."""
    for row in schedule.get_team_schedule(team_code):
        if row.is_bye:
            return row.season_week
    return None


def get_team_prime_time_count(schedule: Schedule, team_code: str) -> int:
    """Number of prime-time slots a team plays in."""
    return sum(
        1 for game in schedule.games
        if game.slot_id in PRIME_TIME_SLOTS and game.involves(team_code)
    )

