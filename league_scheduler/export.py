"""
Export functionality for writing schedules to Excel and JSON.
"""

import json
import logging
from typing import Dict, List

import pandas as pd
import pytz

from .config import SchedulerConfig
from .models import Schedule, PRIME_TIME_SLOTS
from .teams import get_team

logger = logging.getLogger(__name__)

PRIME_TIME_GROUPS = {
    "THU": "Thursday",
    "TGV_820": "Holiday Night",
    "SUN_820": "Sunday Night",
    "MON_700": "Monday Night",
    "MON_1000": "Monday Night",
}


def write_excel(schedule: Schedule, config: SchedulerConfig, output_path: str) -> None:
    """
    Write schedule to Excel file with summary sheets.

    Args:
        schedule: Schedule to export
        config: Scheduler configuration
        output_path: Path to output Excel file
    """
    logger.info("Writing schedule to %s", output_path)

    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        _write_final_schedule(schedule, config, writer)
        _write_team_grid(schedule, config, writer)
        _write_prime_time(schedule, config, writer)
        _write_bye_weeks(schedule, config, writer)

    logger.info("Schedule exported to %s", output_path)


def write_json(schedule: Schedule, output_path: str) -> None:
    """Write the persisted schedule shape as JSON."""
    with open(output_path, 'w') as f:
        json.dump(schedule.to_dict(), f, indent=2)
    logger.info("Schedule JSON written to %s", output_path)


def _write_final_schedule(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write the main schedule sheet, one row per game in local time."""
    if not schedule.by_week:
        logger.warning("No games to export")
        return

    tz = pytz.timezone(config.timezone)
    rows = []
    for game in schedule.games:
        local = game.kickoff.astimezone(tz) if game.kickoff else None
        rows.append({
            'Week': game.week,
            'Date': local.strftime('%m/%d/%Y') if local else 'TBA',
            'Day': local.strftime('%a') if local else '',
            'Time': local.strftime('%I:%M %p') if local else '',
            'Slot': game.slot_id or '',
            'Away Team': game.away_team,
            'Home Team': game.home_team,
            'Type': game.game_type.value,
            'Prime Time': 'Yes' if game.slot_id in PRIME_TIME_SLOTS else '',
            'Game ID': game.matchup_id,
        })

    df = pd.DataFrame(rows)
    sheet_name = 'Final Schedule'
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book
    _format_schedule_worksheet(worksheet, workbook, df)


def _team_grid_rows(schedule: Schedule, weeks: int) -> List[Dict[str, str]]:
    rows = []
    for code in sorted(schedule.by_team):
        row = {'Team': code}
        for week in range(1, weeks + 1):
            row[f'Wk {week}'] = ''
        for entry in schedule.by_team[code]:
            if entry.is_bye:
                cell = 'BYE'
            else:
                opponent = get_team(entry.opponent_code)
                name = opponent.name if opponent else entry.opponent_code
                cell = name if entry.is_home else f'@{name}'
            row[f'Wk {entry.season_week}'] = cell
        rows.append(row)
    return rows


def _write_team_grid(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write the team x week grid (road games prefixed with @)."""
    df = pd.DataFrame(_team_grid_rows(schedule, config.weeks))
    if df.empty:
        return

    sheet_name = 'Team Grid'
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book
    worksheet.set_column(0, 0, 8)
    worksheet.set_column(1, len(df.columns) - 1, 12)
    worksheet.conditional_format(1, 1, len(df), len(df.columns) - 1, {
        'type': 'cell',
        'criteria': '==',
        'value': '"BYE"',
        'format': workbook.add_format({'bg_color': '#D9D9D9'})
    })


def _write_prime_time(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write per-team prime-time appearance counts."""
    groups = sorted(set(PRIME_TIME_GROUPS.values()))
    counts = {code: {group: 0 for group in groups} for code in schedule.by_team}
    for game in schedule.games:
        group = PRIME_TIME_GROUPS.get(game.slot_id)
        if group is None:
            continue
        for code in game.teams:
            counts.setdefault(code, {g: 0 for g in groups})[group] += 1

    rows = []
    for code, by_group in counts.items():
        row = {'Team': code, 'Division': config.get_team_division(code) or ''}
        row.update(by_group)
        row['Total'] = sum(by_group.values())
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return
    df = df.sort_values(['Total', 'Team'], ascending=[False, True])

    sheet_name = 'Prime Time'
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    worksheet = writer.sheets[sheet_name]
    summary_row = len(df) + 3
    worksheet.write(summary_row, 0, 'Summary Statistics')
    worksheet.write(summary_row + 1, 0, f'Average Appearances: {df["Total"].mean():.2f}')
    worksheet.write(summary_row + 2, 0, f'Teams Without Prime Time: {(df["Total"] == 0).sum()}')


def _write_bye_weeks(schedule: Schedule, config: SchedulerConfig, writer) -> None:
    """Write each team's bye week plus the per-week bye count."""
    rows = []
    for code, entries in schedule.by_team.items():
        for entry in entries:
            if entry.is_bye:
                rows.append({
                    'Team': code,
                    'Division': config.get_team_division(code) or '',
                    'Bye Week': entry.season_week,
                })

    df = pd.DataFrame(rows)
    if df.empty:
        return
    df = df.sort_values(['Bye Week', 'Team'])

    sheet_name = 'Bye Weeks'
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    per_week = df['Bye Week'].value_counts().sort_index()
    worksheet = writer.sheets[sheet_name]
    summary_row = len(df) + 3
    worksheet.write(summary_row, 0, 'Byes Per Week')
    for i, (week, count) in enumerate(per_week.items()):
        worksheet.write(summary_row + 1, i, f'Wk {week}')
        worksheet.write(summary_row + 2, i, int(count))


def _format_schedule_worksheet(worksheet, workbook, df: pd.DataFrame) -> None:
    """Apply formatting to the schedule worksheet."""
    header_format = workbook.add_format({
        'bold': True,
        'text_wrap': True,
        'valign': 'top',
        'fg_color': '#D7E4BC',
        'border': 1
    })

    column_widths = {
        'Week': 6,
        'Date': 12,
        'Day': 6,
        'Time': 10,
        'Slot': 10,
        'Away Team': 10,
        'Home Team': 10,
        'Type': 14,
        'Prime Time': 10,
        'Game ID': 12,
    }

    for i, col in enumerate(df.columns):
        worksheet.set_column(i, i, column_widths.get(col, 12))

    for col_num, value in enumerate(df.columns.values):
        worksheet.write(0, col_num, value, header_format)

    if 'Prime Time' in df.columns:
        prime_col = df.columns.get_loc('Prime Time')
        worksheet.conditional_format(1, prime_col, len(df), prime_col, {
            'type': 'cell',
            'criteria': '==',
            'value': '"Yes"',
            'format': workbook.add_format({'bg_color': '#FFEB9C'})
        })
