"""
Late-season division clustering pass.

Moves division games into the final weeks of the season without touching
byes or adding conflicts. Two moves are used:

- whole-week exchanges between weeks that have no byes and no locked games
- alternating-cycle exchanges between a late week and an earlier week, where
  every team in the cycle plays exactly once in each of the two weeks
"""

import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from ..config import SchedulerConfig
from ..engine import WeekAssignmentSession
from ..models import GameType

logger = logging.getLogger(__name__)


def cluster_division_games(session: WeekAssignmentSession, config: SchedulerConfig,
                           max_rounds: int = 3) -> int:
    """
    Pull division games into the late weeks of a solved session.

    Args:
        session: Session whose assignment has already been solved
        config: Scheduler configuration
        max_rounds: Passes over the late weeks for cycle exchanges

    Returns:
        int: Net number of division games added to the late weeks
    """
    if not config.late_division_clustering:
        logger.info("Late-season division clustering disabled")
        return 0

    late_weeks = [week for week in config.late_weeks if week in session.weeks]
    if not late_weeks:
        return 0

    original = session.assignment()
    units_before = session.conflict_units
    before = _late_division_count(session, original, late_weeks)

    week_of = list(original)
    _exchange_weeks(session, week_of, late_weeks)
    for _ in range(max_rounds):
        if not _exchange_cycles(session, week_of, late_weeks):
            break

    session.load_assignment(week_of)
    if session.conflict_units > units_before:
        logger.warning(
            "Division clustering raised conflicts from %d to %d; reverting",
            units_before, session.conflict_units
        )
        session.load_assignment(original)
        return 0

    after = _late_division_count(session, week_of, late_weeks)
    logger.info(
        "Division clustering: %d -> %d division games in weeks %s",
        before, after, late_weeks
    )
    return after - before


def _is_division(session: WeekAssignmentSession, g: int) -> bool:
    return session.games[g].game_type is GameType.DIVISION


def _late_division_count(session: WeekAssignmentSession, week_of: Sequence[int],
                         late_weeks: Sequence[int]) -> int:
    late = set(late_weeks)
    return sum(1 for g, week in enumerate(week_of) if week in late and _is_division(session, g))


def _games_by_week(week_of: Sequence[int]) -> Dict[int, List[int]]:
    by_week: Dict[int, List[int]] = defaultdict(list)
    for g, week in enumerate(week_of):
        by_week[week].append(g)
    return by_week


def _exchange_weeks(session: WeekAssignmentSession, week_of: List[int],
                    late_weeks: Sequence[int]) -> None:
    """Swap the contents of bye-free weeks so the richest in division games land late."""
    bye_weeks = set(session.byes.values())
    locked_weeks = set(session.locked.values())
    free = [
        week for week in session.weeks
        if week not in bye_weeks and week not in locked_weeks
    ]
    late = [week for week in late_weeks if week in free]
    if not late:
        return

    by_week = _games_by_week(week_of)
    division_count = {
        week: sum(1 for g in by_week.get(week, []) if _is_division(session, g))
        for week in free
    }
    chosen = sorted(free, key=lambda week: (-division_count[week], week))[:len(late)]

    incoming = [week for week in chosen if week not in late]
    outgoing = [week for week in late if week not in chosen]
    for source, target in zip(incoming, outgoing):
        for g in by_week.get(source, []):
            week_of[g] = target
        for g in by_week.get(target, []):
            week_of[g] = source
        logger.debug(
            "Exchanged weeks %d and %d (%d division games moved late)",
            source, target, division_count[source] - division_count[target]
        )


def _exchange_cycles(session: WeekAssignmentSession, week_of: List[int],
                     late_weeks: Sequence[int]) -> int:
    """One round-robin sweep of cycle exchanges; returns how many were made."""
    late = set(late_weeks)
    earlier = [week for week in session.weeks if week not in late]
    exchanges = 0

    for late_week in late_weeks:
        for week in earlier:
            by_week = _games_by_week(week_of)
            games = by_week.get(late_week, []) + by_week.get(week, [])
            for component in _components(session, games):
                if any(session.is_locked(g) for g in component):
                    continue
                if not _is_cycle(session, component, week_of, late_week, week):
                    continue
                gain = sum(
                    (1 if week_of[g] == week else -1)
                    for g in component if _is_division(session, g)
                )
                if gain <= 0:
                    continue
                for g in component:
                    week_of[g] = late_week if week_of[g] == week else week
                exchanges += 1

    logger.debug("Cycle exchanges this round: %d", exchanges)
    return exchanges


def _components(session: WeekAssignmentSession, games: Sequence[int]) -> List[List[int]]:
    """Group games into connected components linked by shared teams."""
    parent: Dict[str, str] = {}

    def find(code: str) -> str:
        parent.setdefault(code, code)
        while parent[code] != code:
            parent[code] = parent[parent[code]]
            code = parent[code]
        return code

    for g in games:
        game = session.games[g]
        root_a, root_b = find(game.home_team), find(game.away_team)
        if root_a != root_b:
            parent[root_a] = root_b

    groups: Dict[str, List[int]] = defaultdict(list)
    for g in games:
        groups[find(session.games[g].home_team)].append(g)
    return list(groups.values())


def _is_cycle(session: WeekAssignmentSession, component: Sequence[int],
              week_of: Sequence[int], week_a: int, week_b: int) -> bool:
    """True when every team in the component plays once in each week."""
    counts: Dict[str, List[int]] = defaultdict(lambda: [0, 0])
    for g in component:
        side = 0 if week_of[g] == week_a else 1
        for code in session.games[g].teams:
            counts[code][side] += 1
    return all(a == 1 and b == 1 for a, b in counts.values())
