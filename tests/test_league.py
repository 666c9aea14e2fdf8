"""
Tests for schedule generation and the league-state facade.
"""

import json
import random
from collections import Counter
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).parent.parent))

from league_scheduler.config import SchedulerConfig
from league_scheduler.engine import SolveProgress
from league_scheduler.league import (
    generate_schedule, build_season, ensure_schedule, get_team_schedule, recompute_record,
    get_bye_week, get_team_prime_time_count,
)
from league_scheduler.models import GameStatus, GameType, Schedule, PRIME_TIME_SLOTS
from league_scheduler.validation import validate_schedule


@pytest.fixture(scope="module")
def config():
    return SchedulerConfig(seed=2024)


@pytest.fixture(scope="module")
def schedule(config):
    return generate_schedule(2024, config)


def test_coverage(schedule):
    """Test 272 distinct games and 544 team-side rows."""
    assert len(schedule.games) == 272
    assert len({id(game) for game in schedule.games}) == 272

    rows = sum(
        1 for team_rows in schedule.by_team.values()
        for row in team_rows if not row.is_bye
    )
    assert rows == 272 * 2


def test_per_team_shape(schedule):
    """Test 17 games and one bye inside the window for every team."""
    assert len(schedule.by_team) == 32
    for code, rows in schedule.by_team.items():
        byes = [row for row in rows if row.is_bye]
        assert len(rows) == 18, code
        assert len(byes) == 1, code
        assert 5 <= byes[0].season_week <= 14
        assert byes[0].opponent_code == "BYE"
        assert byes[0].game_type is GameType.BYE
        assert [row.index for row in rows] == list(range(18))
        assert [row.season_week for row in rows] == sorted(row.season_week for row in rows)
        assert sorted(row.season_week for row in rows) == list(range(1, 19))


def test_no_duplicate_matchup_in_a_week(schedule):
    """Test that no pair of teams meets twice in one week."""
    for week, games in schedule.by_week.items():
        pairs = Counter(tuple(sorted(game.teams)) for game in games)
        assert max(pairs.values()) == 1, week


def test_bye_exclusivity(schedule):
    """Test that no team plays in its bye week."""
    for code in schedule.by_team:
        bye = get_bye_week(schedule, code)
        assert not any(game.involves(code) for game in schedule.by_week[bye])


def test_view_consistency(schedule, config):
    """Test that the week view and the team view agree."""
    for week, games in schedule.by_week.items():
        for game in games:
            home_row = next(r for r in schedule.by_team[game.home_team] if r.season_week == week)
            away_row = next(r for r in schedule.by_team[game.away_team] if r.season_week == week)
            assert home_row.is_home and home_row.opponent_code == game.away_team
            assert not away_row.is_home and away_row.opponent_code == game.home_team
            assert home_row.kickoff_iso == game.kickoff_iso

    assert validate_schedule(schedule, config)['errors'] == []


def test_example_season_2024(schedule):
    """Test week keys and the BUF schedule."""
    assert sorted(schedule.by_week) == list(range(1, 19))
    assert all(schedule.by_week[week] for week in range(1, 19))

    buf = schedule.by_team["BUF"]
    assert len(buf) == 18
    assert sum(1 for row in buf if row.game_type is GameType.BYE) == 1


def test_holiday_anchor_games(schedule, config):
    """Test both holiday hosts play at home in the holiday week."""
    week_games = schedule.by_week[config.holiday_week]
    det = [g for g in week_games if g.home_team == "DET"]
    dal = [g for g in week_games if g.home_team == "DAL"]

    assert len(det) == 1 and det[0].slot_id == "TGV_1230"
    assert len(dal) == 1 and dal[0].slot_id == "TGV_430"
    assert sum(1 for g in week_games if g.slot_id == "TGV_820") == 1
    assert not any(g.slot_id == "THU" for g in week_games)


def test_slots_and_kickoffs(schedule, config):
    """Test every game has a slot and kickoff, and special slots stay in their weeks."""
    for game in schedule.games:
        assert game.slot_id in config.slots
        assert game.kickoff_iso is not None and game.kickoff_iso.endswith("Z")
        if game.slot_id == "SUN_930":
            assert game.week in config.international_weeks
        if game.slot_id.startswith("TGV"):
            assert game.week == config.holiday_week

    for week in range(1, 19):
        slots = Counter(game.slot_id for game in schedule.by_week[week])
        assert slots["SUN_820"] == 1
        assert slots["MON_700"] + slots["MON_1000"] == 1


def test_seeded_generation_is_reproducible(schedule, config):
    """Test that the same seed reproduces the same schedule."""
    again = generate_schedule(2024, config)
    assert again.to_dict() == schedule.to_dict()


def test_persisted_shape(schedule):
    """Test the camelCase persisted shape survives JSON."""
    data = json.loads(json.dumps(schedule.to_dict()))

    assert data['seasonYear'] == 2024
    assert data['schemaVersion'] == schedule.schema_version
    assert set(data['byWeek']) == {str(week) for week in range(1, 19)}
    row = data['byTeam']['BUF'][0]
    assert set(row) == {
        'index', 'seasonWeek', 'teamCode', 'opponentCode', 'isHome', 'type',
        'kickoffIso', 'status', 'teamScore', 'opponentScore',
    }
    game = data['byWeek']['1'][0]
    assert game['status'] == 'scheduled'
    assert game['homeScore'] is None

    restored = Schedule.from_dict(data)
    assert restored.to_dict() == schedule.to_dict()


def test_ensure_schedule_is_idempotent(config):
    """Test a second call returns the stored schedule untouched."""
    state = {}
    first = ensure_schedule(state, 2024, config)
    second = ensure_schedule(state, 2024, config)

    assert second is first
    assert state["schedule"] is first


def test_ensure_schedule_regenerates_on_schema_bump(schedule, config):
    """Test a schema version bump forces a fresh, valid schedule."""
    state = {"schedule": schedule}
    bumped = config.model_copy(update={'schema_version': config.schema_version + 1})

    fresh = ensure_schedule(state, 2024, bumped)

    assert fresh is not schedule
    assert fresh.schema_version == config.schema_version + 1
    assert state["schedule"] is fresh
    assert validate_schedule(fresh, bumped)['errors'] == []


def test_ensure_schedule_regenerates_on_new_season(schedule, config):
    """Test a new season year replaces the stored schedule."""
    state = {"schedule": schedule}

    fresh = ensure_schedule(state, 2025, config)

    assert fresh.season_year == 2025
    assert state["schedule"] is fresh
    assert validate_schedule(fresh, config)['errors'] == []


def test_ensure_schedule_hydrates_persisted_dict(schedule, config):
    """Test a stored JSON dict is reused and replaced by a Schedule."""
    state = {"schedule": json.loads(json.dumps(schedule.to_dict()))}

    result = ensure_schedule(state, 2024, config)

    assert isinstance(result, Schedule)
    assert state["schedule"] is result
    assert result.to_dict() == schedule.to_dict()


def test_ensure_schedule_requires_state():
    """Test that a missing league state is a hard error."""
    with pytest.raises(ValueError, match="league_state is required"):
        ensure_schedule(None, 2024)


def test_recompute_record_requires_state():
    """Test that a missing league state is a hard error for records too."""
    with pytest.raises(ValueError, match="league_state is required"):
        recompute_record(None, "BUF")

    assert recompute_record({}, "BUF") == "0-0"


def test_build_season_matches_generate(schedule, config):
    """Test the shared pipeline reports progress and yields the same schedule."""
    reports = []
    build = build_season(2024, config, random.Random(config.seed), on_progress=reports.append)

    assert build.schedule.to_dict() == schedule.to_dict()
    assert len(build.manifest) == 272
    assert len(build.byes) == 32
    assert sorted(game.home_team for game in build.anchored) == ["DAL", "DET"]
    assert build.registry_problems == []
    assert build.division_games_moved >= 0
    assert all(isinstance(report, SolveProgress) for report in reports)
    if reports:
        assert reports[-1].conflicts == build.session.conflict_units


def test_hydrated_state_persists_through_to_dict(schedule, config):
    """Test a hydrated state serializes again through Schedule.to_dict()."""
    persisted = json.loads(json.dumps(schedule.to_dict()))
    state = {"schedule": persisted}

    ensure_schedule(state, 2024, config)
    stored = state["schedule"]

    assert isinstance(stored, Schedule)
    with pytest.raises(TypeError):
        json.dumps(state)
    assert json.loads(json.dumps(stored.to_dict())) == persisted


def test_get_team_schedule(schedule, config):
    """Test the per-team accessor."""
    state = {"schedule": schedule}
    rows = get_team_schedule(state, "BUF", 2024, config)

    assert rows is schedule.by_team["BUF"]
    assert all(row.team_code == "BUF" for row in rows)


def test_recompute_record(schedule):
    """Test win-loss strings from final games only."""
    assert recompute_record({}, "BUF") == "0-0"
    assert recompute_record({"schedule": schedule}, "XYZ") == "0-0"

    copy = Schedule.from_dict(schedule.to_dict())
    state = {"schedule": copy}
    games = [row for row in copy.by_team["BUF"] if not row.is_bye]
    assert recompute_record(state, "BUF") == "0-0"

    results = [(24, 17), (10, 20), (30, 0), ("abc", 3)]
    for row, (ours, theirs) in zip(games, results):
        row.status = GameStatus.FINAL
        row.team_score, row.opponent_score = ours, theirs
    assert recompute_record(state, "BUF") == "2-1"

    games[4].status = GameStatus.FINAL
    games[4].team_score, games[4].opponent_score = 13, 13
    games[5].team_score, games[5].opponent_score = 7, 3
    assert recompute_record(state, "BUF") == "2-1-1"


def test_recompute_record_from_persisted_dict(schedule):
    """Test records read through a stored JSON dict."""
    state = {"schedule": json.loads(json.dumps(schedule.to_dict()))}
    assert recompute_record(state, "BUF") == "0-0"
    assert isinstance(state["schedule"], Schedule)


def test_prime_time_count(schedule):
    """Test the prime-time counter against the week view."""
    total = 0
    for code in schedule.by_team:
        count = get_team_prime_time_count(schedule, code)
        expected = sum(
            1 for game in schedule.games
            if game.slot_id in PRIME_TIME_SLOTS and game.involves(code)
        )
        assert count == expected
        total += count

    prime_games = sum(1 for game in schedule.games if game.slot_id in PRIME_TIME_SLOTS)
    assert total == prime_games * 2
