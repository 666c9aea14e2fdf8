"""
Matchup manifest generation: every game of the season, before weeks and times.

The formula gives each team 17 opponents:

- 6 division games (home and away against each of 3 rivals)
- 4 games against a same-conference division (3-year rotation)
- 4 games against a cross-conference division (3-year rotation)
- 2 rank-matched games against the two remaining same-conference divisions
- 1 rank-matched cross-conference game (host conference alternates by year)
"""

import logging
from typing import List, Dict, Optional, Sequence, Tuple

from .models import Matchup, GameType, Team
from .teams import TEAMS, CONFERENCES, DIVISION_NAMES, DIVISION_SIZE, group_teams

logger = logging.getLogger(__name__)

SAME_CONFERENCE_ANCHOR_YEAR = 2023
CROSS_CONFERENCE_ANCHOR_YEAR = 2022
CROSS_CONFERENCE_CYCLE = 3

# Division pairings for the 4-game same-conference block, one entry per year
# of the cycle.
SAME_CONFERENCE_ROTATION: List[List[Tuple[str, str]]] = [
    [("East", "West"), ("North", "South")],
    [("East", "North"), ("South", "West")],
    [("East", "South"), ("North", "West")],
]


def same_conference_pairs(season_year: int) -> List[Tuple[str, str]]:
    """Get the two same-conference division pairings for a season."""
    idx = (season_year - SAME_CONFERENCE_ANCHOR_YEAR) % len(SAME_CONFERENCE_ROTATION)
    return SAME_CONFERENCE_ROTATION[idx]


def same_conference_partner(division: str, season_year: int) -> str:
    """Get the division a division plays all four teams of, within its conference."""
    for first, second in same_conference_pairs(season_year):
        if division == first:
            return second
        if division == second:
            return first
    raise ValueError(f"Unknown division: {division}")


def cross_conference_offset(season_year: int) -> int:
    return (season_year - CROSS_CONFERENCE_ANCHOR_YEAR) % CROSS_CONFERENCE_CYCLE


def _rotate_division(conference: str, division: str, offset: int) -> str:
    idx = DIVISION_NAMES.index(division)
    if conference == "AFC":
        return DIVISION_NAMES[(idx + offset) % len(DIVISION_NAMES)]
    return DIVISION_NAMES[(idx - offset) % len(DIVISION_NAMES)]


def cross_conference_division(conference: str, division: str, season_year: int) -> str:
    """Get the other-conference division played in the 4-game block."""
    return _rotate_division(conference, division, cross_conference_offset(season_year))


def seventeenth_game_division(conference: str, division: str, season_year: int) -> str:
    """Get the other-conference division supplying the rank-matched 17th game."""
    # Two steps past the 4-game rotation, so the two never coincide.
    return _rotate_division(conference, division, cross_conference_offset(season_year) + 2)


def host_conference(season_year: int) -> str:
    """Conference hosting the 17th game: AFC in even years, NFC in odd years."""
    return "AFC" if season_year % 2 == 0 else "NFC"


def _apply_ranks(structure: Dict[str, Dict[str, List[str]]],
                 ranks: Optional[Dict[str, int]]) -> Dict[str, Dict[str, List[str]]]:
    """Order each division by finishing place when ranks are supplied."""
    if not ranks:
        return structure
    ordered = {}
    for conference, divisions in structure.items():
        ordered[conference] = {
            division: sorted(codes, key=lambda code: (ranks.get(code, DIVISION_SIZE + 1), code))
            for division, codes in divisions.items()
        }
    return ordered


def _full_size(*groups: Optional[List[str]]) -> bool:
    return all(group is not None and len(group) == DIVISION_SIZE for group in groups)


def build_manifest(season_year: int,
                   teams: Sequence[Team] = TEAMS,
                   ranks: Optional[Dict[str, int]] = None,
                   games_per_team: int = 17) -> List[Matchup]:
    """
    Build every matchup of the season, without weeks or kickoff times.

    Args:
        season_year: Season the rotations are computed for
        teams: Team registry
        ranks: Optional {team code: 1-4} finishing places for rank-matched games
        games_per_team: Games each team is expected to play

    Returns:
        List[Matchup]: Unplaced, type-tagged matchups (272 for the standard league)
    """
    divisions = _apply_ranks(group_teams(teams), ranks)
    games: List[Matchup] = []
    parity = season_year % 2

    # 1) Division home and away
    for conference in CONFERENCES:
        for division in DIVISION_NAMES:
            members = divisions[conference].get(division)
            if not _full_size(members):
                continue
            for i in range(DIVISION_SIZE):
                for j in range(i + 1, DIVISION_SIZE):
                    games.append(Matchup(members[i], members[j], GameType.DIVISION))
                    games.append(Matchup(members[j], members[i], GameType.DIVISION))

    # 2) Same-conference 4-game rotation
    for conference in CONFERENCES:
        for div_a, div_b in same_conference_pairs(season_year):
            teams_a = divisions[conference].get(div_a)
            teams_b = divisions[conference].get(div_b)
            if not _full_size(teams_a, teams_b):
                continue
            for i in range(DIVISION_SIZE):
                for j in range(DIVISION_SIZE):
                    if (i + j + parity) % 2 == 0:
                        games.append(Matchup(teams_a[i], teams_b[j], GameType.CONFERENCE))
                    else:
                        games.append(Matchup(teams_b[j], teams_a[i], GameType.CONFERENCE))

    # 3) Cross-conference 4-game rotation
    for division in DIVISION_NAMES:
        afc_teams = divisions["AFC"].get(division)
        nfc_teams = divisions["NFC"].get(cross_conference_division("AFC", division, season_year))
        if not _full_size(afc_teams, nfc_teams):
            continue
        for j in range(DIVISION_SIZE):
            for k in range(DIVISION_SIZE):
                if (j + k + parity) % 2 == 0:
                    games.append(Matchup(afc_teams[j], nfc_teams[k], GameType.NONCONFERENCE))
                else:
                    games.append(Matchup(nfc_teams[k], afc_teams[j], GameType.NONCONFERENCE))

    # 4) Same-conference rank-matched games against the two remaining divisions
    for conference in CONFERENCES:
        first_pair, second_pair = same_conference_pairs(season_year)
        for i, div_a in enumerate(first_pair):
            for j, div_b in enumerate(second_pair):
                teams_a = divisions[conference].get(div_a)
                teams_b = divisions[conference].get(div_b)
                if not _full_size(teams_a, teams_b):
                    continue
                for rank in range(DIVISION_SIZE):
                    if (rank + i + j + parity) % 2 == 0:
                        games.append(Matchup(teams_a[rank], teams_b[rank], GameType.EXTRA))
                    else:
                        games.append(Matchup(teams_b[rank], teams_a[rank], GameType.EXTRA))

    # 5) 17th game, rank-matched across conferences
    afc_hosts = host_conference(season_year) == "AFC"
    for division in DIVISION_NAMES:
        afc_teams = divisions["AFC"].get(division)
        nfc_teams = divisions["NFC"].get(seventeenth_game_division("AFC", division, season_year))
        if not _full_size(afc_teams, nfc_teams):
            continue
        for rank in range(DIVISION_SIZE):
            if afc_hosts:
                games.append(Matchup(afc_teams[rank], nfc_teams[rank], GameType.NONCONFERENCE))
            else:
                games.append(Matchup(nfc_teams[rank], afc_teams[rank], GameType.NONCONFERENCE))

    expected = len(teams) * games_per_team // 2
    if len(games) != expected:
        logger.warning(
            "Manifest for %s has %d games (expected %d)", season_year, len(games), expected
        )

    return games


def get_team_opponents(season_year: int,
                       teams: Sequence[Team] = TEAMS,
                       games_per_team: int = 17) -> Dict[str, List[Dict[str, str]]]:
    """
    Get each team's opponents for a season, ignoring weeks and venues.

    Returns:
        Dict: {team code: [{'opponentCode': ..., 'type': ...}, ...]}
    """
    by_team: Dict[str, List[Dict[str, str]]] = {team.code: [] for team in teams}

    for game in build_manifest(season_year, teams, games_per_team=games_per_team):
        by_team[game.home_team].append({'opponentCode': game.away_team, 'type': game.game_type.value})
        by_team[game.away_team].append({'opponentCode': game.home_team, 'type': game.game_type.value})

    for code, opponents in by_team.items():
        if len(opponents) != games_per_team:
            logger.warning("%s has %d opponents (expected %d)", code, len(opponents), games_per_team)

    return by_team


def get_manifest_summary(matchups: List[Matchup]) -> Dict:
    """
    Get summary statistics for a manifest.

    Returns:
        Dict: Summary statistics
    """
    if not matchups:
        return {}

    type_counts: Dict[str, int] = {}
    team_game_counts: Dict[str, int] = {}
    home_counts: Dict[str, int] = {}

    for matchup in matchups:
        type_counts[matchup.game_type.value] = type_counts.get(matchup.game_type.value, 0) + 1
        home_counts[matchup.home_team] = home_counts.get(matchup.home_team, 0) + 1
        for team in matchup.teams:
            team_game_counts[team] = team_game_counts.get(team, 0) + 1

    pairs = {}
    for matchup in matchups:
        key = tuple(sorted(matchup.teams))
        pairs[key] = pairs.get(key, 0) + 1

    return {
        'total_matchups': len(matchups),
        'types': type_counts,
        'teams': len(team_game_counts),
        'games_per_team': team_game_counts,
        'home_games_per_team': home_counts,
        'repeated_pairs': sorted(key for key, count in pairs.items() if count > 1),
    }
