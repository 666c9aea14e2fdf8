"""
Command-line interface for the league scheduler.
"""

import argparse
import logging
import random
import sys

import yaml

from .byes import get_bye_counts
from .config import SchedulerConfig, load_config
from .engine import SolveProgress
from .export import write_excel, write_json
from .league import build_season, get_team_prime_time_count
from .matchups import get_manifest_summary
from .teams import get_team_display_name
from .validation import summarize_schedule, validate_schedule


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="League Scheduler - season schedule generator"
    )

    parser.add_argument(
        "--season",
        type=int,
        required=True,
        help="Season year to generate"
    )

    parser.add_argument(
        "--config",
        help="Path to YAML configuration file (defaults apply when omitted)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed (overrides the configuration)"
    )

    parser.add_argument(
        "--out",
        help="Path to output Excel file"
    )

    parser.add_argument(
        "--json",
        help="Path to output JSON file (persisted schedule shape)"
    )

    parser.add_argument(
        "--team",
        help="Print one team's schedule"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Generate and validate without writing output files"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        # Load configuration
        if args.config:
            print("Loading configuration...")
            config = load_config(args.config)
        else:
            config = SchedulerConfig()
        if args.seed is not None:
            config = config.model_copy(update={'seed': args.seed})
        if args.verbose:
            config = config.model_copy(update={'debug': True})
        rng = random.Random(config.seed)

        # Generate
        print(f"Generating {args.season} schedule...")
        on_progress = _print_progress if args.verbose else None
        build = build_season(args.season, config, rng, on_progress=on_progress)
        schedule = build.schedule
        session = build.session

        print(f"Loaded {len(schedule.by_team)} teams")
        for problem in build.registry_problems:
            print(f"  - WARNING: {problem}")

        summary = get_manifest_summary(build.manifest)
        print(f"Built {len(build.manifest)} matchups: {summary.get('types', {})}")
        print(f"Byes per week: {get_bye_counts(build.byes)}")
        for game in build.anchored:
            print(f"  Holiday game: {game.matchup_id} (week {config.holiday_week})")

        if session.conflict_units:
            print(f"WARNING: {session.conflict_units} conflicts remain")
            for line in session.describe_conflicts():
                print(f"  - {line}")
        else:
            print(f"Weeks assigned without conflicts ({session.iterations} iterations)")

        if config.late_division_clustering:
            print(
                f"Division clustering moved {build.division_games_moved} games "
                f"into weeks {config.late_weeks}"
            )

        if config.debug:
            summarize_schedule(schedule)

        # Validate
        print("\nValidating schedule...")
        violations = validate_schedule(schedule, config)

        if violations['errors']:
            print("ERRORS found in schedule:")
            for error in violations['errors']:
                print(f"  - {error}")
        else:
            print("No errors found in schedule!")

        if violations['warnings']:
            print("WARNINGS found in schedule:")
            for warning in violations['warnings']:
                print(f"  - {warning}")

        if args.team:
            _print_team_schedule(schedule, args.team)

        if args.validate_only:
            print("Validation complete. Exiting.")
            return

        if args.out:
            print(f"\nExporting schedule to {args.out}...")
            write_excel(schedule, config, args.out)

        if args.json:
            print(f"Writing JSON to {args.json}...")
            write_json(schedule, args.json)

        # Print summary
        print("\n" + "="*50)
        print("SCHEDULING COMPLETE")
        print("="*50)

        stats = schedule.get_summary_stats()
        print(f"Season: {stats.get('season_year', args.season)}")
        print(f"Total games scheduled: {stats.get('total_games', 0)}")
        print(f"Total teams: {stats.get('total_teams', 0)}")
        print(f"Games per week: {stats.get('games_per_week', {})}")
        print(f"Slot distribution: {stats.get('slot_distribution', {})}")

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


def _print_progress(progress: SolveProgress) -> None:
    print(
        f"  restart {progress.restart} iteration {progress.iterations}: "
        f"{progress.conflicts} conflicts (T={progress.temperature:.4f})"
    )


def _print_team_schedule(schedule, team_code: str) -> None:
    rows = schedule.get_team_schedule(team_code)
    print(f"\n{get_team_display_name(team_code)} ({team_code})")
    if not rows:
        print("  No games found")
        return
    for row in rows:
        if row.is_bye:
            print(f"  Week {row.season_week:2d}: BYE")
            continue
        prefix = "vs" if row.is_home else "@ "
        print(f"  Week {row.season_week:2d}: {prefix} {row.opponent_code:<3} {row.kickoff_iso or 'TBA'}")
    print(f"  Prime-time games: {get_team_prime_time_count(schedule, team_code)}")


if __name__ == "__main__":
    main()
