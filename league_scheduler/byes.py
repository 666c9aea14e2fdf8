"""
Bye week allocation inside the mid-season window.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from .config import SchedulerConfig

logger = logging.getLogger(__name__)


def build_bye_slots(config: SchedulerConfig) -> List[int]:
    """Expand the bye pattern into one week entry per bye."""
    slots = []
    for week, count in zip(config.bye_weeks(), config.bye_pattern):
        if count % 2 == 1:
            logger.warning("Week %d has an odd bye count (%d); one team cannot play", week, count)
        slots.extend([week] * count)
    return slots


def assign_byes(team_codes: Sequence[str], config: SchedulerConfig,
                rng: Optional[random.Random] = None) -> Dict[str, int]:
    """
    Give each team one bye week from the configured window.

    Teams and bye slots are shuffled independently and paired off. Holiday
    hosts are then moved off the holiday week so they can host their games.

    Args:
        team_codes: Teams needing a bye
        config: Scheduler configuration
        rng: Random source

    Returns:
        Dict[str, int]: team code -> bye week
    """
    rng = rng or random.Random()

    slots = build_bye_slots(config)
    if len(slots) != len(team_codes):
        logger.warning(
            "Bye pattern provides %d byes for %d teams", len(slots), len(team_codes)
        )

    teams = list(team_codes)
    rng.shuffle(teams)
    rng.shuffle(slots)

    byes = dict(zip(teams, slots))

    for team in teams[len(slots):]:
        logger.warning("Team %s receives no bye week", team)

    _move_hosts_off_holiday(byes, config, rng)

    return byes


def _move_hosts_off_holiday(byes: Dict[str, int], config: SchedulerConfig,
                            rng: random.Random) -> None:
    """Swap any holiday host's bye with a team whose bye is elsewhere."""
    hosts = set(config.holiday_hosts)
    for host in config.holiday_hosts:
        if byes.get(host) != config.holiday_week:
            continue

        candidates = sorted(
            team for team, week in byes.items()
            if team not in hosts and week != config.holiday_week
        )
        if not candidates:
            logger.warning("No bye swap available to free %s for week %d", host, config.holiday_week)
            continue

        partner = rng.choice(candidates)
        byes[host], byes[partner] = byes[partner], byes[host]
        logger.debug("Moved %s bye to week %d (swapped with %s)", host, byes[host], partner)


def get_bye_counts(byes: Dict[str, int]) -> Dict[int, int]:
    """Count byes per week."""
    counts: Dict[int, int] = {}
    for week in byes.values():
        counts[week] = counts.get(week, 0) + 1
    return dict(sorted(counts.items()))
