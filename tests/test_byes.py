"""
Tests for bye week allocation.
"""

import logging
import random
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).parent.parent))

from league_scheduler.byes import assign_byes, build_bye_slots, get_bye_counts
from league_scheduler.config import SchedulerConfig
from league_scheduler.teams import get_all_team_codes


def test_bye_slots_follow_pattern():
    """Test expansion of the bye pattern."""
    config = SchedulerConfig()
    slots = build_bye_slots(config)

    assert len(slots) == 32
    assert slots.count(5) == 4
    assert slots.count(12) == 0
    assert slots.count(14) == 2


def test_every_team_gets_one_bye_in_window():
    """Test one bye per team, inside weeks 5-14, matching the pattern."""
    config = SchedulerConfig()
    byes = assign_byes(get_all_team_codes(), config, random.Random(3))

    assert sorted(byes) == sorted(get_all_team_codes())
    assert all(5 <= week <= 14 for week in byes.values())

    expected = {week: count for week, count in zip(config.bye_weeks(), config.bye_pattern) if count}
    assert get_bye_counts(byes) == expected


def test_byes_are_reproducible():
    """Test that a seeded generator gives the same byes."""
    config = SchedulerConfig()
    first = assign_byes(get_all_team_codes(), config, random.Random(99))
    second = assign_byes(get_all_team_codes(), config, random.Random(99))

    assert first == second


def test_holiday_hosts_never_on_bye_in_holiday_week():
    """Test that hosts are moved off a holiday week that has byes."""
    config = SchedulerConfig(holiday_week=11)
    assert build_bye_slots(config).count(11) == 4

    for seed in range(40):
        byes = assign_byes(get_all_team_codes(), config, random.Random(seed))
        assert byes["DET"] != 11
        assert byes["DAL"] != 11
        assert get_bye_counts(byes)[11] == 4


def test_short_pattern_warns(caplog):
    """Test that a pattern with too few byes leaves teams without one."""
    config = SchedulerConfig(bye_pattern=[4, 4, 4, 4, 4, 4, 4, 0, 2, 0])

    with caplog.at_level(logging.WARNING):
        byes = assign_byes(get_all_team_codes(), config, random.Random(1))

    assert len(byes) == 30
    assert "provides 30 byes for 32 teams" in caplog.text
    assert "receives no bye week" in caplog.text


def test_odd_week_count_warns(caplog):
    """Test the warning for an odd number of byes in a week."""
    config = SchedulerConfig(bye_pattern=[3, 5, 4, 4, 4, 4, 4, 0, 2, 2])

    with caplog.at_level(logging.WARNING):
        build_bye_slots(config)

    assert "odd bye count" in caplog.text
