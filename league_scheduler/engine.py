"""
Week assignment engine: places every matchup in a week by simulated annealing.

A session holds one solve. Games are packed greedily into weeks (each week
holds as many games as it has playing teams divided by two), then random
pairwise week swaps drive the conflict count to zero. A conflict is a team
appearing more than once in a week, or appearing in its own bye week.
"""

import logging
import math
import random
from collections import Counter
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from .config import SchedulerConfig
from .models import Matchup

logger = logging.getLogger(__name__)


class SolveProgress(NamedTuple):
    """Progress report yielded between batches of annealing iterations."""
    restart: int
    iterations: int
    conflicts: int
    temperature: float


Move = Tuple[int, int]  # (game id, target week)


class WeekAssignmentSession:
    """Solver state for a single schedule generation.

    Game ids are indices into ``games``; team ids are indices into
    ``team_codes``.
    """

    def __init__(self, manifest: Sequence[Matchup], byes: Dict[str, int],
                 config: SchedulerConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.params = config.annealing
        self.rng = rng or random.Random()
        self.games: List[Matchup] = list(manifest)
        self.byes = dict(byes)
        self.weeks = list(range(1, config.weeks + 1))

        self.team_codes = sorted({code for game in self.games for code in game.teams} | set(self.byes))
        self._team_idx = {code: i for i, code in enumerate(self.team_codes)}
        self._home = [self._team_idx[game.home_team] for game in self.games]
        self._away = [self._team_idx[game.away_team] for game in self.games]
        self._bye_week = [self.byes.get(code, 0) for code in self.team_codes]

        self.capacity = self._week_capacity()
        self.locked: Dict[int, int] = {}
        self.week_of: List[int] = [0] * len(self.games)
        self.conflicts: Set[Tuple[int, int]] = set()
        self.conflict_units = 0
        self.temperature = self.params.start_temperature
        self.iterations = 0

        self._counts: List[List[int]] = []
        self._members: Dict[int, List[int]] = {}
        self._pos: List[int] = [0] * len(self.games)
        self._movable: List[int] = []
        self._assigned = False

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _week_capacity(self) -> Dict[int, int]:
        byes_per_week = Counter(self.byes.values())
        return {
            week: (len(self.team_codes) - byes_per_week.get(week, 0)) // 2
            for week in self.weeks
        }

    def lock_anchor_games(self) -> List[Matchup]:
        """
        Fix one home game for each holiday host in the holiday week.

        Opponents are drawn at random among teams that are free that week
        and not already committed to another holiday game.

        Returns:
            List[Matchup]: The locked games
        """
        week = self.config.holiday_week
        hosts = self.config.holiday_hosts
        used = set(hosts)
        anchored = []

        for host in hosts:
            if host not in self._team_idx:
                logger.warning("Holiday host %s is not in the league", host)
                continue
            if self.byes.get(host) == week:
                logger.warning("Holiday host %s has its bye in week %d", host, week)
                continue

            candidates = [
                g for g, game in enumerate(self.games)
                if game.home_team == host
                and g not in self.locked
                and game.away_team not in used
                and self.byes.get(game.away_team) != week
            ]
            if not candidates:
                logger.warning("No eligible holiday game for %s in week %d", host, week)
                continue

            g = self.rng.choice(candidates)
            self.locked[g] = week
            used.add(self.games[g].away_team)
            anchored.append(self.games[g])
            logger.debug("Locked %s into week %d", self.games[g].matchup_id, week)

        return anchored

    def initial_assignment(self) -> None:
        """
        Greedily pack unlocked games into weeks under the weekly capacity.

        Each game goes to a random open week where neither team plays yet;
        when no such week is left it takes the open week with the fewest
        clashes, leaving a conflict for the annealer.
        """
        remaining = dict(self.capacity)
        busy: Dict[int, Set[int]] = {week: set() for week in self.weeks}
        week_of = [0] * len(self.games)

        for g, week in self.locked.items():
            week_of[g] = week
            remaining[week] -= 1
            busy[week].update((self._home[g], self._away[g]))

        order = [g for g in range(len(self.games)) if g not in self.locked]
        self.rng.shuffle(order)

        overflow = 0
        for g in order:
            home, away = self._home[g], self._away[g]
            open_weeks = [
                w for w in self.weeks
                if remaining[w] > 0 and not self._bye_blocked(g, w)
            ]
            if not open_weeks:
                open_weeks = [w for w in self.weeks if remaining[w] > 0]

            if open_weeks:
                clashes = {w: (home in busy[w]) + (away in busy[w]) for w in open_weeks}
                fewest = min(clashes.values())
                week = self.rng.choice([w for w in open_weeks if clashes[w] == fewest])
            else:
                week = max(self.weeks, key=lambda w: remaining[w])
                overflow += 1

            week_of[g] = week
            remaining[week] -= 1
            busy[week].update((home, away))

        if overflow:
            logger.warning("%d games placed beyond weekly capacity", overflow)

        self.load_assignment(week_of)

    def load_assignment(self, week_of: Sequence[int]) -> None:
        """Rebuild all derived state from a game -> week list."""
        n_teams = len(self.team_codes)
        self.week_of = list(week_of)
        self._counts = [[0] * n_teams for _ in range(len(self.weeks) + 1)]
        self._members = {week: [] for week in self.weeks}
        self._movable = []

        for g, week in enumerate(self.week_of):
            self._counts[week][self._home[g]] += 1
            self._counts[week][self._away[g]] += 1
            if g in self.locked:
                continue
            self._pos[g] = len(self._members[week])
            self._members[week].append(g)
            self._movable.append(g)

        self._recount()
        self._assigned = True

    def assignment(self) -> List[int]:
        """Copy of the current game -> week list."""
        return list(self.week_of)

    def is_locked(self, g: int) -> bool:
        return g in self.locked

    # ------------------------------------------------------------------
    # Conflict bookkeeping
    # ------------------------------------------------------------------

    def _cell_units(self, week: int, team: int, count: int) -> int:
        units = count - 1 if count > 1 else 0
        if count and self._bye_week[team] == week:
            units += count
        return units

    def _set_count(self, week: int, team: int, count: int) -> None:
        old = self._cell_units(week, team, self._counts[week][team])
        new = self._cell_units(week, team, count)
        self._counts[week][team] = count
        self.conflict_units += new - old
        if new:
            self.conflicts.add((week, team))
        else:
            self.conflicts.discard((week, team))

    def _recount(self) -> None:
        self.conflicts = set()
        self.conflict_units = 0
        for week in self.weeks:
            row = self._counts[week]
            for team, count in enumerate(row):
                units = self._cell_units(week, team, count)
                if units:
                    self.conflicts.add((week, team))
                    self.conflict_units += units

    def _bye_blocked(self, g: int, week: int) -> bool:
        return self._bye_week[self._home[g]] == week or self._bye_week[self._away[g]] == week

    def _move_delta(self, moves: Sequence[Move]) -> Tuple[int, Dict[Tuple[int, int], int]]:
        """Conflict units gained by a set of moves, and the count changes they make."""
        changes: Dict[Tuple[int, int], int] = {}
        for g, target in moves:
            source = self.week_of[g]
            for team in (self._home[g], self._away[g]):
                changes[(source, team)] = changes.get((source, team), 0) - 1
                changes[(target, team)] = changes.get((target, team), 0) + 1

        delta = 0
        for (week, team), diff in changes.items():
            if diff:
                count = self._counts[week][team]
                delta += self._cell_units(week, team, count + diff) - self._cell_units(week, team, count)
        return delta, changes

    def _apply_swap(self, g1: int, g2: int, changes: Dict[Tuple[int, int], int]) -> None:
        for (week, team), diff in changes.items():
            if diff:
                self._set_count(week, team, self._counts[week][team] + diff)

        a, b = self.week_of[g1], self.week_of[g2]
        self.week_of[g1], self.week_of[g2] = b, a
        i, j = self._pos[g1], self._pos[g2]
        self._members[a][i] = g2
        self._members[b][j] = g1
        self._pos[g1], self._pos[g2] = j, i

    # ------------------------------------------------------------------
    # Local search
    # ------------------------------------------------------------------

    def _pick_conflicted_game(self) -> int:
        week, team = self.rng.choice(tuple(self.conflicts))
        candidates = [
            g for g in self._members[week]
            if self._home[g] == team or self._away[g] == team
        ]
        if not candidates:
            return self.rng.choice(self._movable)
        return self.rng.choice(candidates)

    def _sample_partner(self, g1: int) -> Optional[Tuple[int, int, Dict[Tuple[int, int], int]]]:
        """Best of a few random swap partners for a conflicted game."""
        a = self.week_of[g1]
        best = None
        for _ in range(self.params.candidate_sample):
            g2 = self.rng.choice(self._movable)
            b = self.week_of[g2]
            if a == b or self._bye_blocked(g1, b) or self._bye_blocked(g2, a):
                continue
            units, changes = self._move_delta(((g1, b), (g2, a)))
            if best is None or units < best[1]:
                best = (g2, units, changes)
        return best

    def _step(self) -> bool:
        """One swap attempt; True when the swap was applied."""
        if self.conflicts and self.rng.random() < self.params.focus_rate:
            g1 = self._pick_conflicted_game()
            candidate = self._sample_partner(g1)
            if candidate is None:
                return False
            g2, units, changes = candidate
        else:
            g1 = self.rng.choice(self._movable)
            g2 = self.rng.choice(self._movable)
            a, b = self.week_of[g1], self.week_of[g2]
            if a == b or self._bye_blocked(g1, b) or self._bye_blocked(g2, a):
                return False
            units, changes = self._move_delta(((g1, b), (g2, a)))

        delta = units * self.params.conflict_penalty
        if delta <= 0 or (self.temperature > 0
                          and self.rng.random() < math.exp(-delta / self.temperature)):
            self._apply_swap(g1, g2, changes)
            return True
        return False

    def iter_solve(self, batch_size: Optional[int] = None) -> Iterator[SolveProgress]:
        """
        Anneal toward a conflict-free assignment, yielding after each batch.

        When the iteration budget runs out with conflicts left, the search
        restarts from a fresh packing (up to ``max_restarts`` times) and the
        best assignment seen is kept.

        Args:
            batch_size: Iterations between yields (defaults to ``check_interval``)

        Yields:
            SolveProgress: State after each batch
        """
        if not self._assigned:
            self.initial_assignment()

        batch_size = batch_size or self.params.check_interval
        max_iterations = self.params.max_iterations
        best_units = None
        best_assignment = None

        for restart in range(self.params.max_restarts + 1):
            if restart:
                logger.info("Restarting week assignment (%d conflicts left)", self.conflict_units)
                self.initial_assignment()

            self.temperature = self.params.start_temperature
            done = 0
            while done < max_iterations and self.conflict_units:
                for _ in range(min(batch_size, max_iterations - done)):
                    self._step()
                    self.temperature *= self.params.cooling_rate
                    done += 1
                    if not self.conflict_units:
                        break
                self._recount()
                logger.debug(
                    "Annealing restart=%d iterations=%d conflicts=%d temperature=%.4f",
                    restart, done, self.conflict_units, self.temperature
                )
                yield SolveProgress(restart, done, self.conflict_units, self.temperature)

            self.iterations += done
            if best_units is None or self.conflict_units < best_units:
                best_units = self.conflict_units
                best_assignment = self.assignment()
            if not self.conflict_units:
                break

        if best_assignment is not None and self.conflict_units > best_units:
            self.load_assignment(best_assignment)

        if self.conflict_units:
            logger.warning(
                "Week assignment ended with %d conflicts after %d iterations",
                self.conflict_units, self.iterations
            )
            for line in self.describe_conflicts():
                logger.warning("  %s", line)
        else:
            logger.info("Week assignment solved in %d iterations", self.iterations)

    def solve(self) -> int:
        """Run the annealer to completion and return the remaining conflict count."""
        for _ in self.iter_solve():
            pass
        return self.conflict_units

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def describe_conflicts(self) -> List[str]:
        """One line per conflicting team-week, naming the games involved."""
        lines = []
        for week, team in sorted(self.conflicts):
            code = self.team_codes[team]
            games = [
                self.games[g].matchup_id for g, w in enumerate(self.week_of)
                if w == week and self.games[g].involves(code)
            ]
            if self._bye_week[team] == week:
                lines.append(f"Week {week}: {code} plays during its bye ({', '.join(games)})")
            else:
                lines.append(f"Week {week}: {code} plays {len(games)} games ({', '.join(games)})")
        return lines

    def week_game_counts(self) -> Dict[int, int]:
        counts = Counter(self.week_of)
        return {week: counts.get(week, 0) for week in self.weeks}

    def apply(self) -> List[Matchup]:
        """Write the assigned weeks onto the matchups."""
        for game, week in zip(self.games, self.week_of):
            game.week = week
        return self.games


def assign_weeks(manifest: Sequence[Matchup], byes: Dict[str, int],
                 config: SchedulerConfig,
                 rng: Optional[random.Random] = None) -> WeekAssignmentSession:
    """
    Convenience function to run the week solver.

    Args:
        manifest: Matchups to place
        byes: Team code -> bye week
        config: Scheduler configuration
        rng: Random source

    Returns:
        WeekAssignmentSession: The finished session (weeks already applied)
    """
    session = WeekAssignmentSession(manifest, byes, config, rng)
    session.lock_anchor_games()
    session.initial_assignment()
    session.solve()
    session.apply()
    return session
