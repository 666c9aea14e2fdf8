"""
Tests for matchup manifest generation.
"""

import logging
from collections import Counter
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).parent.parent))

from league_scheduler.matchups import (
    build_manifest, get_team_opponents, get_manifest_summary,
    same_conference_partner, cross_conference_division, seventeenth_game_division,
    host_conference,
)
from league_scheduler.models import GameType
from league_scheduler.teams import TEAMS, DIVISION_NAMES, get_team


def test_manifest_size_and_types():
    """Test the 272-game manifest and its type breakdown."""
    manifest = build_manifest(2024)

    assert len(manifest) == 272
    types = Counter(game.game_type for game in manifest)
    assert types[GameType.DIVISION] == 96
    assert types[GameType.CONFERENCE] == 64
    assert types[GameType.NONCONFERENCE] == 80
    assert types[GameType.EXTRA] == 32
    assert all(not game.is_placed for game in manifest)


def test_every_team_plays_17():
    """Test per-team game counts across several seasons."""
    for year in range(2022, 2028):
        counts = Counter(code for game in build_manifest(year) for code in game.teams)
        assert len(counts) == 32
        assert set(counts.values()) == {17}, year


def test_no_duplicate_matchups():
    """Test that only division rivals meet twice, once at each venue."""
    manifest = build_manifest(2025)

    ordered = Counter((game.home_team, game.away_team) for game in manifest)
    assert max(ordered.values()) == 1

    summary = get_manifest_summary(manifest)
    assert len(summary['repeated_pairs']) == 48
    for home, away in summary['repeated_pairs']:
        assert get_team(home).group == get_team(away).group


def test_home_balance_follows_host_conference():
    """Test 9 home games for the hosting conference and 8 for the other."""
    for year in (2024, 2025):
        home = Counter(game.home_team for game in build_manifest(year))
        host = host_conference(year)
        for team in TEAMS:
            expected = 9 if team.conference == host else 8
            assert home[team.code] == expected, (year, team.code)


def test_rotation_formulas():
    """Test the division rotations."""
    assert same_conference_partner("East", 2023) == "West"
    assert same_conference_partner("East", 2024) == "North"
    assert same_conference_partner("East", 2025) == "South"
    assert same_conference_partner("East", 2026) == "West"
    assert same_conference_partner("South", 2024) == "West"

    assert cross_conference_division("AFC", "East", 2022) == "East"
    assert cross_conference_division("AFC", "East", 2023) == "North"
    assert cross_conference_division("AFC", "East", 2025) == "East"

    assert host_conference(2024) == "AFC"
    assert host_conference(2025) == "NFC"

    for year in range(2020, 2030):
        mapped = {cross_conference_division("AFC", d, year) for d in DIVISION_NAMES}
        assert mapped == set(DIVISION_NAMES)
        for division in DIVISION_NAMES:
            assert seventeenth_game_division("AFC", division, year) != \
                cross_conference_division("AFC", division, year)


def test_rank_matched_games():
    """Test that extra and 17th games pair teams of equal rank."""
    ranks = {}
    for conference in ("AFC", "NFC"):
        for division in DIVISION_NAMES:
            codes = sorted(t.code for t in TEAMS if t.conference == conference and t.division == division)
            for place, code in enumerate(reversed(codes), start=1):
                ranks[code] = place

    manifest = build_manifest(2024, ranks=ranks)
    assert len(manifest) == 272

    extras = [game for game in manifest if game.game_type is GameType.EXTRA]
    for game in extras:
        assert ranks[game.home_team] == ranks[game.away_team]


def test_malformed_registry_warns(caplog):
    """Test that a short division gives a short manifest and a warning."""
    teams = [t for t in TEAMS if t.code != "BUF"]

    with caplog.at_level(logging.WARNING):
        manifest = build_manifest(2024, teams)

    assert len(manifest) < 272
    assert "expected 263" in caplog.text


def test_team_opponents():
    """Test the per-team opponent listing."""
    opponents = get_team_opponents(2024)

    assert len(opponents) == 32
    for code, entries in opponents.items():
        assert len(entries) == 17
        division_games = [e for e in entries if e['type'] == 'division']
        assert len(division_games) == 6
