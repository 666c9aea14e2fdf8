"""
Read-only checks and debug summaries for a generated schedule.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from .config import SchedulerConfig
from .models import Schedule

logger = logging.getLogger(__name__)


def validate_schedule(schedule: Schedule, config: Optional[SchedulerConfig] = None) -> Dict[str, List[str]]:
    """
    Validate a completed schedule for constraint violations.

    Never mutates the schedule; every problem found is also logged as a
    warning.

    Args:
        schedule: Schedule to validate
        config: Scheduler configuration (defaults apply when omitted)

    Returns:
        Dict[str, List[str]]: Validation results
    """
    config = config or SchedulerConfig()
    violations = {
        'errors': [],
        'warnings': []
    }

    if not schedule.by_week:
        violations['errors'].append("No games scheduled")
        _log_violations(violations)
        return violations

    errors = violations['errors']
    warnings = violations['warnings']
    games = schedule.games

    # Per-team shape
    bye_of: Dict[str, int] = {}
    for team, rows in schedule.by_team.items():
        played = [row for row in rows if not row.is_bye]
        byes = [row for row in rows if row.is_bye]
        if len(played) != config.games_per_team:
            errors.append(f"Team {team} has {len(played)} games (expected {config.games_per_team})")
        if len(byes) != 1:
            errors.append(f"Team {team} has {len(byes)} bye weeks (expected 1)")
        for row in byes:
            bye_of[team] = row.season_week
            if not config.bye_window_start <= row.season_week <= config.bye_window_end:
                errors.append(
                    f"Team {team} bye in week {row.season_week} is outside weeks "
                    f"{config.bye_window_start}-{config.bye_window_end}"
                )

    # League totals
    expected = len(schedule.by_team) * config.games_per_team // 2
    if len(games) != expected:
        errors.append(f"Schedule has {len(games)} games (expected {expected})")

    ordered_pairs = Counter((game.home_team, game.away_team) for game in games)
    for (home, away), count in sorted(ordered_pairs.items()):
        if count > 1:
            errors.append(f"Matchup {away}@{home} scheduled {count} times")

    unordered_pairs = Counter(tuple(sorted(game.teams)) for game in games)
    for pair, count in sorted(unordered_pairs.items()):
        if count > 2:
            warnings.append(f"Teams {pair[0]} and {pair[1]} meet {count} times")

    # Week-level checks
    for week in range(1, config.weeks + 1):
        week_games = schedule.get_week_games(week)
        if not week_games:
            warnings.append(f"Week {week} has no games")
            continue

        appearances = Counter(team for game in week_games for team in game.teams)
        for team, count in sorted(appearances.items()):
            if count > 1:
                errors.append(f"Team {team} scheduled {count} games in week {week}")
            if bye_of.get(team) == week:
                errors.append(f"Team {team} plays in its bye week {week}")

        for game in week_games:
            if game.week != week:
                errors.append(f"Game {game.matchup_id} listed in week {week} but tagged week {game.week}")
            if game.kickoff is None:
                warnings.append(f"Game {game.matchup_id} in week {week} has no kickoff time")

    errors.extend(_check_views(schedule))

    _log_violations(violations)
    return violations


def _check_views(schedule: Schedule) -> List[str]:
    """Cross-check the by-week and by-team views against each other."""
    problems = []

    team_rows = Counter()
    for team, rows in schedule.by_team.items():
        for row in rows:
            if not row.is_bye:
                team_rows[(team, row.season_week, row.opponent_code, row.is_home)] += 1

    league_rows = Counter()
    for week, week_games in schedule.by_week.items():
        for game in week_games:
            league_rows[(game.home_team, week, game.away_team, True)] += 1
            league_rows[(game.away_team, week, game.home_team, False)] += 1

    for key in sorted(set(league_rows) | set(team_rows)):
        team, week, opponent, is_home = key
        side = "home" if is_home else "away"
        if league_rows[key] > team_rows[key]:
            problems.append(f"Week {week} {side} game for {team} vs {opponent} missing from team view")
        elif team_rows[key] > league_rows[key]:
            problems.append(f"Team view of {team} lists week {week} {side} game vs {opponent} not in week view")

    return problems


def _log_violations(violations: Dict[str, List[str]]) -> None:
    for error in violations['errors']:
        logger.warning("Schedule error: %s", error)
    for warning in violations['warnings']:
        logger.warning("Schedule warning: %s", warning)


def summarize_schedule(schedule: Schedule) -> Dict[str, Any]:
    """
    Build (and log at DEBUG) a per-week and per-team summary.

    Returns:
        Dict: {'weeks': {week: {...}}, 'teams': {code: {...}}}
    """
    bye_teams: Dict[int, List[str]] = {}
    for team, rows in schedule.by_team.items():
        for row in rows:
            if row.is_bye:
                bye_teams.setdefault(row.season_week, []).append(team)

    weeks = {}
    for week in sorted(schedule.by_week):
        week_games = schedule.by_week[week]
        appearances = Counter(team for game in week_games for team in game.teams)
        weeks[week] = {
            'games': len(week_games),
            'teams_playing': len(appearances),
            'bye_teams': sorted(bye_teams.get(week, [])),
            'doubleheaders': sorted(team for team, count in appearances.items() if count > 1),
        }
        logger.debug(
            "Week %2d: %2d games, %2d teams, byes=%s, doubleheaders=%s",
            week, weeks[week]['games'], weeks[week]['teams_playing'],
            weeks[week]['bye_teams'], weeks[week]['doubleheaders']
        )

    teams = {}
    for team in sorted(schedule.by_team):
        rows = schedule.by_team[team]
        played = [row for row in rows if not row.is_bye]
        teams[team] = {
            'games': len(played),
            'home': sum(1 for row in played if row.is_home),
            'bye_weeks': [row.season_week for row in rows if row.is_bye],
        }
        logger.debug(
            "%-3s games=%2d home=%d byes=%s",
            team, teams[team]['games'], teams[team]['home'], teams[team]['bye_weeks']
        )

    return {'weeks': weeks, 'teams': teams}
