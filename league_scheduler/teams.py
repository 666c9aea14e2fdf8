"""
Team registry: the 32 franchises and their conference/division alignment.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .models import Team

logger = logging.getLogger(__name__)

CONFERENCES = ["AFC", "NFC"]
DIVISION_NAMES = ["East", "North", "South", "West"]
DIVISION_SIZE = 4


TEAMS: List[Team] = [
    # AFC East
    Team("BUF", "Buffalo", "Bills", "AFC", "East"),
    Team("MIA", "Miami", "Dolphins", "AFC", "East"),
    Team("NE", "New England", "Patriots", "AFC", "East"),
    Team("NYJ", "New York", "Jets", "AFC", "East"),

    # AFC North
    Team("BAL", "Baltimore", "Ravens", "AFC", "North"),
    Team("CIN", "Cincinnati", "Bengals", "AFC", "North"),
    Team("CLE", "Cleveland", "Browns", "AFC", "North"),
    Team("PIT", "Pittsburgh", "Steelers", "AFC", "North"),

    # AFC South
    Team("HOU", "Houston", "Texans", "AFC", "South"),
    Team("IND", "Indianapolis", "Colts", "AFC", "South"),
    Team("JAX", "Jacksonville", "Jaguars", "AFC", "South"),
    Team("TEN", "Tennessee", "Titans", "AFC", "South"),

    # AFC West
    Team("DEN", "Denver", "Broncos", "AFC", "West"),
    Team("KC", "Kansas City", "Chiefs", "AFC", "West"),
    Team("LV", "Las Vegas", "Raiders", "AFC", "West"),
    Team("LAC", "Los Angeles", "Chargers", "AFC", "West"),

    # NFC East
    Team("DAL", "Dallas", "Cowboys", "NFC", "East"),
    Team("NYG", "New York", "Giants", "NFC", "East"),
    Team("PHI", "Philadelphia", "Eagles", "NFC", "East"),
    Team("WAS", "Washington", "Commanders", "NFC", "East"),

    # NFC North
    Team("CHI", "Chicago", "Bears", "NFC", "North"),
    Team("DET", "Detroit", "Lions", "NFC", "North"),
    Team("GB", "Green Bay", "Packers", "NFC", "North"),
    Team("MIN", "Minnesota", "Vikings", "NFC", "North"),

    # NFC South
    Team("ATL", "Atlanta", "Falcons", "NFC", "South"),
    Team("CAR", "Carolina", "Panthers", "NFC", "South"),
    Team("NO", "New Orleans", "Saints", "NFC", "South"),
    Team("TB", "Tampa Bay", "Buccaneers", "NFC", "South"),

    # NFC West
    Team("ARI", "Arizona", "Cardinals", "NFC", "West"),
    Team("LAR", "Los Angeles", "Rams", "NFC", "West"),
    Team("SF", "San Francisco", "49ers", "NFC", "West"),
    Team("SEA", "Seattle", "Seahawks", "NFC", "West"),
]

_BY_CODE: Dict[str, Team] = {team.code: team for team in TEAMS}


def get_team(team_code: str) -> Optional[Team]:
    """Look up a team by its code."""
    return _BY_CODE.get(team_code)


def get_team_display_name(team_code: Optional[str]) -> str:
    """Get "City Name" for a team code, falling back to the code itself."""
    team = get_team(team_code) if team_code else None
    if team is None:
        return team_code or "Unknown Team"
    return team.display_name


def get_division_teams(conference: str, division: str,
                       teams: Sequence[Team] = TEAMS) -> List[str]:
    """Get the team codes in one division."""
    return [t.code for t in teams if t.conference == conference and t.division == division]


def get_all_team_codes(teams: Sequence[Team] = TEAMS) -> List[str]:
    return [t.code for t in teams]


def group_teams(teams: Sequence[Team] = TEAMS) -> Dict[str, Dict[str, List[str]]]:
    """
    Group team codes by conference and division.

    Every known conference/division gets an entry, even when empty. Codes
    are sorted inside each division so rank order is deterministic.

    Returns:
        Dict: {conference: {division: [codes]}}
    """
    structure: Dict[str, Dict[str, List[str]]] = defaultdict(dict)
    for conference in CONFERENCES:
        for division in DIVISION_NAMES:
            structure[conference][division] = []

    for team in teams:
        structure[team.conference].setdefault(team.division, []).append(team.code)

    for divisions in structure.values():
        for codes in divisions.values():
            codes.sort()

    return dict(structure)


def check_registry(teams: Sequence[Team] = TEAMS) -> List[str]:
    """
    Check that every division holds exactly four teams.

    Returns:
        List[str]: One message per malformed group (also logged as warnings)
    """
    problems = []
    codes = [t.code for t in teams]
    duplicates = sorted({code for code in codes if codes.count(code) > 1})
    if duplicates:
        problems.append(f"Duplicate team codes: {duplicates}")

    for conference, divisions in group_teams(teams).items():
        for division, members in divisions.items():
            if len(members) != DIVISION_SIZE:
                problems.append(
                    f"{conference} {division} has {len(members)} teams (expected {DIVISION_SIZE})"
                )

    for problem in problems:
        logger.warning("Team registry: %s", problem)

    return problems
