"""
Kickoff slot assignment and timestamp derivation.

Each week opens on a Thursday. Slots are defined as a day offset from that
Thursday plus a local clock time in the configured reference zone.
"""

import logging
import random
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Set

import pytz

from .config import SchedulerConfig
from .models import Matchup

logger = logging.getLogger(__name__)

THURSDAY = 3  # date.weekday()

HOLIDAY_SLOTS = ("TGV_1230", "TGV_430")
HOLIDAY_NIGHT_SLOT = "TGV_820"
MONDAY_SLOTS = ("MON_700", "MON_1000")
LATE_SLOTS = ("SUN_415", "SUN_425")
DEFAULT_SLOT = "SUN_1"
INTERNATIONAL_SLOT = "SUN_930"


def season_start(season_year: int) -> date:
    """Second Thursday of September: the Thursday that opens week 1."""
    first = date(season_year, 9, 1)
    first_thursday = first + timedelta(days=(THURSDAY - first.weekday()) % 7)
    return first_thursday + timedelta(days=7)


def slot_kickoff(season_year: int, week: int, slot_id: str,
                 config: SchedulerConfig) -> datetime:
    """
    Concrete kickoff for a slot in a given week.

    Args:
        season_year: Season the week belongs to
        week: Week number, 1-based
        slot_id: Key into ``config.slots``
        config: Scheduler configuration

    Returns:
        datetime: Timezone-aware kickoff in the reference zone
    """
    slot = config.slots[slot_id]
    day = season_start(season_year) + timedelta(days=(week - 1) * 7 + slot.day_offset)
    tz = pytz.timezone(config.timezone)
    return tz.localize(datetime(day.year, day.month, day.day, slot.hour, slot.minute))


class KickoffAssigner:
    """Assigns slots week by week, spreading prime-time appearances.

    Usage sets remember which teams already appeared in each prime slot type
    this season, so later weeks prefer fresh teams.
    """

    def __init__(self, season_year: int, config: SchedulerConfig,
                 rng: Optional[random.Random] = None):
        self.season_year = season_year
        self.config = config
        self.rng = rng or random.Random()
        self.usage: Dict[str, Set[str]] = {"THU": set(), "SNF": set(), "MNF": set()}

    def assign(self, games: Sequence[Matchup]) -> List[Matchup]:
        """Assign every placed game a slot and kickoff."""
        by_week: Dict[int, List[Matchup]] = defaultdict(list)
        for game in games:
            if game.is_placed:
                by_week[game.week].append(game)
            else:
                logger.warning("Game %s has no week; leaving kickoff unset", game.matchup_id)

        for week in sorted(by_week):
            self.assign_week(week, by_week[week])

        return list(games)

    def assign_week(self, week: int, games: Sequence[Matchup]) -> None:
        pool = list(games)
        self.rng.shuffle(pool)

        if week == self.config.holiday_week:
            self._assign_holiday(week, pool)
        else:
            self._assign_international(week, pool)
            self._set_slot(self._pick_prime(pool, "THU"), week, "THU")

        self._set_slot(self._pick_prime(pool, "SNF"), week, "SUN_820")
        monday = self._pick_prime(pool, "MNF")
        if monday is not None:
            self._set_slot(monday, week, self.rng.choice(MONDAY_SLOTS))

        for game in pool:
            if game.home_team in self.config.late_hosts and self.rng.random() < self.config.late_host_rate:
                self._set_slot(game, week, self.rng.choice(LATE_SLOTS))
            else:
                self._set_slot(game, week, DEFAULT_SLOT)

    def _assign_holiday(self, week: int, pool: List[Matchup]) -> None:
        """Thursday triple-header: each host's home game, then one night game."""
        for host, slot_id in zip(self.config.holiday_hosts, HOLIDAY_SLOTS):
            game = next((g for g in pool if g.home_team == host), None)
            if game is None:
                logger.warning("No %s home game in holiday week %d", host, week)
                continue
            pool.remove(game)
            self._set_slot(game, week, slot_id)

        if pool:
            self._set_slot(pool.pop(), week, HOLIDAY_NIGHT_SLOT)

    def _assign_international(self, week: int, pool: List[Matchup]) -> None:
        if week not in self.config.international_weeks or not pool:
            return
        if self.rng.random() >= self.config.international_rate:
            return
        # Early kick favors hosts outside the late window
        game = next((g for g in pool if g.home_team not in self.config.late_hosts), pool[0])
        pool.remove(game)
        self._set_slot(game, week, INTERNATIONAL_SLOT)

    def _pick_prime(self, pool: List[Matchup], usage_key: str) -> Optional[Matchup]:
        """Take a game whose teams have not had this prime slot yet, else any game."""
        if not pool:
            return None
        used = self.usage[usage_key]
        game = next(
            (g for g in pool if g.home_team not in used and g.away_team not in used),
            pool[-1]
        )
        pool.remove(game)
        used.update(game.teams)
        return game

    def _set_slot(self, game: Optional[Matchup], week: int, slot_id: str) -> None:
        if game is None:
            return
        if slot_id not in self.config.slots:
            logger.warning("Slot %s is not configured; using %s", slot_id, DEFAULT_SLOT)
            slot_id = DEFAULT_SLOT
        game.slot_id = slot_id
        game.kickoff = slot_kickoff(self.season_year, week, slot_id, self.config)


def assign_kickoffs(games: Sequence[Matchup], season_year: int, config: SchedulerConfig,
                    rng: Optional[random.Random] = None) -> List[Matchup]:
    """
    Convenience function to slot every game of a season.

    Args:
        games: Week-assigned matchups
        season_year: Season year (anchors the calendar)
        config: Scheduler configuration
        rng: Random source

    Returns:
        List[Matchup]: The same games with ``slot_id`` and ``kickoff`` set
    """
    return KickoffAssigner(season_year, config, rng).assign(games)
