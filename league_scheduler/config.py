"""
Configuration management for the league scheduler.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Dict, Optional
import pytz

from .models import Team, SCHEDULE_SCHEMA_VERSION


class AnnealingParams(BaseModel):
    """Tuning constants for the week assignment solver."""
    max_iterations: int = Field(default=300_000, ge=1, description="Swap attempts per solve")
    start_temperature: float = Field(default=2.0, gt=0.0, description="Initial annealing temperature")
    cooling_rate: float = Field(default=0.99998, gt=0.0, lt=1.0, description="Geometric decay per attempt")
    conflict_penalty: float = Field(default=10.0, gt=0.0, description="Cost of one conflicting team-week")
    check_interval: int = Field(default=2000, ge=1, description="Iterations between progress checks")
    focus_rate: float = Field(default=0.6, ge=0.0, le=1.0, description="Chance of moving a conflicted game")
    max_restarts: int = Field(default=2, ge=0, description="Fresh restarts when conflicts remain")
    candidate_sample: int = Field(default=8, ge=1, description="Partners tried for a conflicted game")


class SlotDefinition(BaseModel):
    """A kickoff window relative to the Thursday that opens each week."""
    day_offset: int = Field(ge=0, le=6, description="Days after the week's Thursday")
    hour: int = Field(ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


def default_slots() -> Dict[str, SlotDefinition]:
    return {
        "THU": SlotDefinition(day_offset=0, hour=20, minute=20),
        "TGV_1230": SlotDefinition(day_offset=0, hour=12, minute=30),
        "TGV_430": SlotDefinition(day_offset=0, hour=16, minute=30),
        "TGV_820": SlotDefinition(day_offset=0, hour=20, minute=20),
        "SUN_930": SlotDefinition(day_offset=3, hour=9, minute=30),
        "SUN_1": SlotDefinition(day_offset=3, hour=13, minute=0),
        "SUN_415": SlotDefinition(day_offset=3, hour=16, minute=15),
        "SUN_425": SlotDefinition(day_offset=3, hour=16, minute=25),
        "SUN_820": SlotDefinition(day_offset=3, hour=20, minute=20),
        "MON_700": SlotDefinition(day_offset=4, hour=19, minute=0),
        "MON_1000": SlotDefinition(day_offset=4, hour=22, minute=0),
    }


class TeamEntry(BaseModel):
    """A registry row, used to override the built-in 32-team table."""
    code: str
    city: str
    name: str
    conference: str
    division: str

    def to_team(self) -> Team:
        return Team(
            code=self.code,
            city=self.city,
            name=self.name,
            conference=self.conference,
            division=self.division,
        )


class SchedulerConfig(BaseModel):
    """Main configuration for the league scheduler."""
    timezone: str = Field(default="America/New_York", description="Reference zone for kickoff times")
    schema_version: int = Field(default=SCHEDULE_SCHEMA_VERSION, ge=1, description="Persisted schedule schema")

    # Season shape
    weeks: int = Field(default=18, ge=1, description="Regular season weeks")
    games_per_team: int = Field(default=17, ge=1, description="Games each team plays")

    # Byes
    bye_window_start: int = Field(default=5, ge=1, description="First week a bye may fall in")
    bye_window_end: int = Field(default=14, ge=1, description="Last week a bye may fall in")
    bye_pattern: List[int] = Field(
        default=[4, 4, 4, 4, 4, 4, 4, 0, 2, 2],
        description="Byes per week across the window"
    )

    # Holiday anchor games
    holiday_week: int = Field(default=12, ge=1, description="Week of the Thursday triple-header")
    holiday_hosts: List[str] = Field(
        default=["DET", "DAL"],
        description="Franchises hosting the early and afternoon holiday games"
    )

    # Kickoff slots
    late_hosts: List[str] = Field(
        default=["SEA", "SF", "LAR", "LAC", "ARI", "LV", "DEN"],
        description="Hosts favored for the late Sunday window"
    )
    late_host_rate: float = Field(default=0.7, ge=0.0, le=1.0)
    international_weeks: List[int] = Field(default=[5, 6, 7, 8])
    international_rate: float = Field(default=0.25, ge=0.0, le=1.0)
    slots: Dict[str, SlotDefinition] = Field(default_factory=default_slots)

    # Late-season division clustering
    late_division_clustering: bool = Field(default=True)
    late_weeks: List[int] = Field(default=[15, 16, 17, 18])

    # Solver
    annealing: AnnealingParams = Field(default_factory=AnnealingParams)

    # Optional registry override
    teams: Optional[List[TeamEntry]] = Field(default=None, description="Replaces the built-in team table")

    # Random seed for reproducibility (None draws from an unseeded generator)
    seed: Optional[int] = Field(default=None, description="Random seed")

    debug: bool = Field(default=False, description="Log a schedule summary after generation")

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        try:
            pytz.timezone(v)
            return v
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")

    @field_validator('bye_pattern')
    @classmethod
    def validate_bye_pattern(cls, v):
        if any(count < 0 for count in v):
            raise ValueError(f"Invalid bye pattern: {v}. Counts must be non-negative.")
        return v

    @model_validator(mode='after')
    def validate_season_shape(self):
        if self.bye_window_end < self.bye_window_start:
            raise ValueError(
                f"Invalid bye window: {self.bye_window_start}-{self.bye_window_end}"
            )
        if self.bye_window_end > self.weeks:
            raise ValueError(f"Bye window ends after week {self.weeks}")
        window = self.bye_window_end - self.bye_window_start + 1
        if len(self.bye_pattern) != window:
            raise ValueError(
                f"Bye pattern has {len(self.bye_pattern)} entries, window has {window} weeks"
            )
        if not 1 <= self.holiday_week <= self.weeks:
            raise ValueError(f"Holiday week {self.holiday_week} outside weeks 1-{self.weeks}")
        for week in list(self.late_weeks) + list(self.international_weeks):
            if not 1 <= week <= self.weeks:
                raise ValueError(f"Week {week} outside weeks 1-{self.weeks}")
        missing = {"THU", "SUN_1", "SUN_820"} - set(self.slots)
        if missing:
            raise ValueError(f"Missing slot definitions: {sorted(missing)}")
        return self

    def bye_weeks(self) -> List[int]:
        """Weeks in the bye window, in order."""
        return list(range(self.bye_window_start, self.bye_window_end + 1))

    def get_teams(self) -> List[Team]:
        """Get the registry in use: the override if given, else the built-in table."""
        if self.teams is not None:
            return [entry.to_team() for entry in self.teams]
        from .teams import TEAMS
        return list(TEAMS)

    def get_all_teams(self) -> List[str]:
        """Get all team codes."""
        return [team.code for team in self.get_teams()]

    def get_team_division(self, team: str) -> Optional[str]:
        """Get the "Conference Division" label for a team code."""
        for entry in self.get_teams():
            if entry.code == team:
                return f"{entry.conference} {entry.division}"
        return None


def load_config(config_path: str) -> SchedulerConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    return SchedulerConfig(**config_data)


def save_config(config: SchedulerConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2)
