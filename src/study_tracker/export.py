"""Weekly report data and JSON export."""
import json
from datetime import date, timedelta
from pathlib import Path

from study_tracker.models import TrackerState
from study_tracker.stats import STREAK_THRESHOLD, Streaks, get_day_stats
from study_tracker.timetable import Timetable


def format_time(time24: str) -> str:
    """'13:05' -> '1:05 PM'"""
    if not time24:
        return ""
    hours, minutes = time24.split(":")
    h = int(hours)
    suffix = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{minutes} {suffix}"


def format_time_range(start: str, end: str) -> str:
    return f"{format_time(start)} - {format_time(end)}"


def monday_of(date_key: str) -> date:
    d = date.fromisoformat(date_key)
    return d - timedelta(days=d.weekday())


def week_identifier(d: date) -> str:
    """ISO week id, e.g. '2026-W43'."""
    year, week, _ = d.isocalendar()
    return f"{year}-W{week:02d}"


def _block_rows(stats) -> list[dict]:
    day = stats.day_data
    done = set(day.completed_blocks)
    rows = []
    for index, block in enumerate(stats.schedule):
        time = day.effective_time(index, block)
        skip_reason = day.skipped_reasons.get(index)
        if index in done:
            status = "completed"
        elif skip_reason:
            status = "skipped"
        else:
            status = "pending"
        row = {
            "time": format_time_range(time.start, time.end),
            "subject": day.effective_subject(index, block),
            "status": status,
        }
        if skip_reason:
            row["skipReason"] = skip_reason
        rows.append(row)
    return rows


def prepare_weekly_data(
    state: TrackerState,
    timetable: Timetable,
    reference_date: str,
    today_key: str,
    streaks: Streaks,
) -> dict:
    """Summary of the Monday-to-Sunday week containing reference_date."""
    monday = monday_of(reference_date)
    days = []
    planned = 0.0
    completed = 0.0
    for offset in range(7):
        stats = get_day_stats(state, (monday + timedelta(days=offset)).isoformat(), timetable, today_key)
        days.append({
            "date": stats.date_key,
            "dayName": stats.day_name,
            "plannedHours": round(stats.total_hours, 2),
            "completedHours": round(stats.completed_hours, 2),
            "completionPercentage": round(stats.percent, 1),
            "blocks": _block_rows(stats),
        })
        planned += stats.total_hours
        completed += stats.completed_hours

    percent = (completed / planned) * 100 if planned > 0 else 0.0
    return {
        "weekIdentifier": week_identifier(monday),
        "summary": {
            "totalPlannedHours": round(planned, 2),
            "totalCompletedHours": round(completed, 2),
            "completionPercentage": round(percent, 1),
        },
        "streaks": {
            "currentStreak": streaks.current,
            "bestStreak": streaks.best,
            "minThreshold": f"{STREAK_THRESHOLD:.0f}%",
        },
        "dailyBreakdown": days,
    }


def export_to_json(export_data: dict, out_dir: str) -> Path:
    """Write the weekly data to placement-prep-week-<id>.json in out_dir."""
    path = Path(out_dir) / f"placement-prep-week-{export_data['weekIdentifier']}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(export_data, indent=2))
    return path
