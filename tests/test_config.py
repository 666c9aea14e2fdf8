"""
Tests for configuration management.
"""

import pytest
import tempfile
from pathlib import Path
import sys

# Add the league_scheduler package to the path
sys.path.append(str(Path(__file__).parent.parent))

from league_scheduler.config import SchedulerConfig, load_config, save_config


def test_default_config():
    """Test the default season shape."""
    config = SchedulerConfig()

    assert config.timezone == "America/New_York"
    assert config.weeks == 18
    assert config.games_per_team == 17
    assert config.bye_weeks() == list(range(5, 15))
    assert sum(config.bye_pattern) == 32
    assert config.holiday_hosts == ["DET", "DAL"]
    assert config.late_weeks == [15, 16, 17, 18]
    assert config.annealing.max_iterations == 300_000
    assert config.annealing.cooling_rate == 0.99998
    assert {"THU", "SUN_1", "SUN_820", "MON_700", "MON_1000"} <= set(config.slots)
    assert config.seed is None


def test_config_validation():
    """Test configuration validation."""
    # Test invalid timezone
    with pytest.raises(ValueError, match="Unknown timezone"):
        SchedulerConfig(timezone="Invalid/Timezone")

    # Test negative bye count
    with pytest.raises(ValueError, match="Invalid bye pattern"):
        SchedulerConfig(bye_pattern=[4, 4, 4, 4, 4, 4, 4, -1, 2, 3])

    # Test pattern that does not cover the window
    with pytest.raises(ValueError, match="Bye pattern has 3 entries"):
        SchedulerConfig(bye_pattern=[10, 10, 12])

    # Test reversed bye window
    with pytest.raises(ValueError, match="Invalid bye window"):
        SchedulerConfig(bye_window_start=10, bye_window_end=5)

    # Test holiday week outside the season
    with pytest.raises(ValueError, match="Holiday week"):
        SchedulerConfig(holiday_week=19, weeks=18)

    # Test late weeks outside the season
    with pytest.raises(ValueError, match="Week 19 outside"):
        SchedulerConfig(late_weeks=[17, 18, 19, 20])


def test_missing_required_slots():
    """Test that the Thursday, Sunday and Sunday-night slots are required."""
    with pytest.raises(ValueError, match="Missing slot definitions"):
        SchedulerConfig(slots={"THU": {"day_offset": 0, "hour": 20}})


def test_bad_slot_clock():
    """Test slot clock bounds."""
    slots = {
        "THU": {"day_offset": 0, "hour": 20, "minute": 20},
        "SUN_1": {"day_offset": 3, "hour": 25},
        "SUN_820": {"day_offset": 3, "hour": 20, "minute": 20},
    }
    with pytest.raises(ValueError):
        SchedulerConfig(slots=slots)


def test_config_load_save():
    """Test loading and saving configuration."""
    config = SchedulerConfig(
        timezone="America/Chicago",
        seed=7,
        late_host_rate=0.5,
        annealing={"max_iterations": 50_000, "max_restarts": 1},
    )

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        temp_path = f.name

    try:
        save_config(config, temp_path)
        loaded = load_config(temp_path)

        assert loaded.timezone == "America/Chicago"
        assert loaded.seed == 7
        assert loaded.late_host_rate == 0.5
        assert loaded.annealing.max_iterations == 50_000
        assert loaded.annealing.max_restarts == 1
        assert loaded.slots["MON_1000"].hour == 22
        assert loaded.model_dump() == config.model_dump()
    finally:
        Path(temp_path).unlink()


def test_load_partial_yaml():
    """Test that keys missing from YAML fall back to defaults."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write("seed: 11\nlate_division_clustering: false\n")
        temp_path = f.name

    try:
        config = load_config(temp_path)
        assert config.seed == 11
        assert config.late_division_clustering is False
        assert config.weeks == 18
    finally:
        Path(temp_path).unlink()


def test_load_missing_file():
    """Test that a missing file surfaces as FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/config.yaml")


def test_team_helpers():
    """Test registry helpers on the config."""
    config = SchedulerConfig()

    teams = config.get_all_teams()
    assert len(teams) == 32
    assert "BUF" in teams
    assert config.get_team_division("BUF") == "AFC East"
    assert config.get_team_division("SEA") == "NFC West"
    assert config.get_team_division("XYZ") is None


def test_team_override():
    """Test replacing the built-in registry."""
    config = SchedulerConfig(teams=[
        {"code": "AAA", "city": "Alpha", "name": "Ants", "conference": "AFC", "division": "East"},
        {"code": "BBB", "city": "Beta", "name": "Bees", "conference": "NFC", "division": "West"},
    ])

    assert config.get_all_teams() == ["AAA", "BBB"]
    assert config.get_team_division("BBB") == "NFC West"
    assert config.get_teams()[0].display_name == "Alpha Ants"
