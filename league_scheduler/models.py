"""
Data models for the league scheduler.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any
from enum import Enum
import pandas as pd
import pytz


SCHEDULE_SCHEMA_VERSION = 4
BYE_CODE = "BYE"
PRIME_TIME_SLOTS = ("THU", "TGV_820", "SUN_820", "MON_700", "MON_1000")


class GameType(Enum):
    """Matchup categories."""
    DIVISION = "division"
    CONFERENCE = "conference"
    NONCONFERENCE = "nonconference"
    EXTRA = "extra"
    BYE = "bye"


class GameStatus(Enum):
    """Game lifecycle states."""
    SCHEDULED = "scheduled"
    FINAL = "final"


def format_kickoff(kickoff: Optional[datetime]) -> Optional[str]:
    """Serialize a kickoff as a UTC ISO timestamp."""
    if kickoff is None:
        return None
    return kickoff.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_kickoff(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored kickoff timestamp back into an aware datetime."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class Team:
    """A team in the league."""
    code: str
    city: str
    name: str
    conference: str
    division: str

    @property
    def display_name(self) -> str:
        return f"{self.city} {self.name}"

    @property
    def group(self) -> str:
        """Conference and division label, e.g. "AFC East"."""
        return f"{self.conference} {self.division}"


@dataclass
class Matchup:
    """A matchup between two teams.

    Created unplaced by the manifest builder, then filled in by the week
    solver (``week``) and the kickoff assigner (``slot_id``, ``kickoff``).
    """
    home_team: str
    away_team: str
    game_type: GameType
    week: int = 0
    slot_id: Optional[str] = None
    kickoff: Optional[datetime] = None
    status: GameStatus = GameStatus.SCHEDULED
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    matchup_id: Optional[str] = None

    def __post_init__(self):
        if self.matchup_id is None:
            self.matchup_id = f"{self.away_team}@{self.home_team}"

    @property
    def teams(self) -> List[str]:
        """Get both teams in this matchup."""
        return [self.home_team, self.away_team]

    @property
    def is_placed(self) -> bool:
        return self.week > 0

    @property
    def kickoff_iso(self) -> Optional[str]:
        return format_kickoff(self.kickoff)

    def involves(self, team_code: str) -> bool:
        return team_code == self.home_team or team_code == self.away_team

    def opponent_of(self, team_code: str) -> str:
        return self.away_team if team_code == self.home_team else self.home_team

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted league-view shape."""
        return {
            'week': self.week,
            'homeTeam': self.home_team,
            'awayTeam': self.away_team,
            'type': self.game_type.value,
            'kickoffIso': self.kickoff_iso,
            'status': self.status.value,
            'homeScore': self.home_score,
            'awayScore': self.away_score,
            'slotId': self.slot_id,
            'gameId': self.matchup_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Matchup":
        return cls(
            home_team=data['homeTeam'],
            away_team=data['awayTeam'],
            game_type=GameType(data['type']),
            week=int(data.get('week') or 0),
            slot_id=data.get('slotId'),
            kickoff=parse_kickoff(data.get('kickoffIso')),
            status=GameStatus(data.get('status') or GameStatus.SCHEDULED.value),
            home_score=data.get('homeScore'),
            away_score=data.get('awayScore'),
            matchup_id=data.get('gameId'),
        )


@dataclass
class TeamGame:
    """One row of a team's schedule: a game from that team's side, or its bye."""
    index: int
    season_week: int
    team_code: str
    opponent_code: str
    is_home: bool
    game_type: GameType
    kickoff_iso: Optional[str] = None
    status: GameStatus = GameStatus.SCHEDULED
    team_score: Optional[int] = None
    opponent_score: Optional[int] = None

    @property
    def is_bye(self) -> bool:
        return self.game_type is GameType.BYE

    @classmethod
    def bye(cls, team_code: str, week: int) -> "TeamGame":
        return cls(
            index=0,
            season_week=week,
            team_code=team_code,
            opponent_code=BYE_CODE,
            is_home=False,
            game_type=GameType.BYE,
        )

    @classmethod
    def from_matchup(cls, game: Matchup, team_code: str) -> "TeamGame":
        is_home = game.home_team == team_code
        return cls(
            index=0,
            season_week=game.week,
            team_code=team_code,
            opponent_code=game.opponent_of(team_code),
            is_home=is_home,
            game_type=game.game_type,
            kickoff_iso=game.kickoff_iso,
            status=game.status,
            team_score=game.home_score if is_home else game.away_score,
            opponent_score=game.away_score if is_home else game.home_score,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted team-view shape."""
        return {
            'index': self.index,
            'seasonWeek': self.season_week,
            'teamCode': self.team_code,
            'opponentCode': self.opponent_code,
            'isHome': self.is_home,
            'type': self.game_type.value,
            'kickoffIso': self.kickoff_iso,
            'status': self.status.value,
            'teamScore': self.team_score,
            'opponentScore': self.opponent_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamGame":
        return cls(
            index=int(data.get('index', 0)),
            season_week=int(data['seasonWeek']),
            team_code=data['teamCode'],
            opponent_code=data['opponentCode'],
            is_home=bool(data.get('isHome')),
            game_type=GameType(data['type']),
            kickoff_iso=data.get('kickoffIso'),
            status=GameStatus(data.get('status') or GameStatus.SCHEDULED.value),
            team_score=data.get('teamScore'),
            opponent_score=data.get('opponentScore'),
        )


@dataclass
class Schedule:
    """A complete season schedule, viewed by team and by week."""
    season_year: int
    schema_version: int = SCHEDULE_SCHEMA_VERSION
    by_team: Dict[str, List[TeamGame]] = field(default_factory=dict)
    by_week: Dict[int, List[Matchup]] = field(default_factory=dict)

    @property
    def games(self) -> List[Matchup]:
        """All placed games in week order."""
        return [game for week in sorted(self.by_week) for game in self.by_week[week]]

    def get_team_schedule(self, team_code: str) -> List[TeamGame]:
        """Get all rows (games and bye) for a specific team."""
        return self.by_team.get(team_code, [])

    def get_week_games(self, week: int) -> List[Matchup]:
        """Get all games in a specific week."""
        return self.by_week.get(week, [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted shape handed to the host application."""
        return {
            'seasonYear': self.season_year,
            'schemaVersion': self.schema_version,
            'byTeam': {
                code: [row.to_dict() for row in rows]
                for code, rows in self.by_team.items()
            },
            'byWeek': {
                week: [game.to_dict() for game in games]
                for week, games in self.by_week.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        """Rebuild a schedule from its persisted shape (week keys may be strings)."""
        return cls(
            season_year=int(data['seasonYear']),
            schema_version=int(data.get('schemaVersion', 0)),
            by_team={
                code: [TeamGame.from_dict(row) for row in rows]
                for code, rows in (data.get('byTeam') or {}).items()
            },
            by_week={
                int(week): [Matchup.from_dict(game) for game in games]
                for week, games in (data.get('byWeek') or {}).items()
            },
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Convert schedule to pandas DataFrame."""
        if not self.by_week:
            return pd.DataFrame()

        data = []
        for game in self.games:
            data.append({
                'Week': game.week,
                'Slot': game.slot_id,
                'Kickoff': game.kickoff_iso,
                'Home Team': game.home_team,
                'Away Team': game.away_team,
                'Type': game.game_type.value,
                'Status': game.status.value,
                'Home Score': game.home_score,
                'Away Score': game.away_score,
                'Game ID': game.matchup_id
            })

        df = pd.DataFrame(data)
        return df.sort_values(['Week', 'Kickoff'], na_position='last').reset_index(drop=True)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the schedule."""
        df = self.to_dataframe()
        if df.empty:
            return {}

        bye_weeks = {}
        for code, rows in self.by_team.items():
            for row in rows:
                if row.is_bye:
                    bye_weeks[row.season_week] = bye_weeks.get(row.season_week, 0) + 1

        stats = {
            'season_year': self.season_year,
            'total_games': len(df),
            'total_teams': len(self.by_team),
            'games_per_week': df['Week'].value_counts().sort_index().to_dict(),
            'type_distribution': df['Type'].value_counts().to_dict(),
            'slot_distribution': df['Slot'].value_counts().to_dict(),
            'byes_per_week': dict(sorted(bye_weeks.items())),
        }

        return stats
