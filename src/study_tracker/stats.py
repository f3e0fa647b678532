"""Derived statistics: day progress, streaks, subject hours, heatmap."""
import re
from dataclasses import dataclass
from datetime import date, timedelta

from study_tracker.clock import weekday_name_of
from study_tracker.models import DayRecord, TrackerState
from study_tracker.timetable import Timetable, block_duration

STREAK_THRESHOLD = 70.0


@dataclass(frozen=True)
class DayStats:
    date_key: str
    day_name: str
    schedule: tuple
    day_data: DayRecord
    total_hours: float
    completed_hours: float
    percent: float
    is_today: bool


@dataclass(frozen=True)
class Streaks:
    current: int
    best: int


def effective_durations(day: DayRecord, schedule) -> list[float]:
    """Duration in hours of each block, using the day's time overrides."""
    durations = []
    for index, block in enumerate(schedule):
        time = day.effective_time(index, block)
        durations.append(block_duration(time.start, time.end))
    return durations


def get_day_stats(state: TrackerState, date_key: str, timetable: Timetable, today_key: str) -> DayStats:
    """Progress for one date. Every view derives its numbers from this."""
    day_name = weekday_name_of(date_key)
    schedule = timetable.schedule_for(day_name)
    day = state.day(date_key)

    total = 0.0
    completed = 0.0
    done = set(day.completed_blocks)
    for index, duration in enumerate(effective_durations(day, schedule)):
        total += duration
        if index in done:
            completed += duration

    percent = (completed / total) * 100 if total > 0 else 0.0
    return DayStats(
        date_key=date_key,
        day_name=day_name,
        schedule=schedule,
        day_data=day,
        total_hours=total,
        completed_hours=completed,
        percent=percent,
        is_today=date_key == today_key,
    )


def is_valid_study_day(stats: DayStats) -> bool:
    return stats.total_hours > 0 and stats.percent >= STREAK_THRESHOLD


def compute_streaks(state: TrackerState, timetable: Timetable, today_key: str) -> Streaks:
    """Current and best run of days at or above the threshold.

    Rest days neither break nor extend a run.
    """
    dates = sorted(state.daily_progress)
    if not dates:
        return Streaks(current=0, best=0)

    best = 0
    run = 0
    day = date.fromisoformat(dates[0])
    last = date.fromisoformat(today_key)
    while day <= last:
        stats = get_day_stats(state, day.isoformat(), timetable, today_key)
        if stats.total_hours > 0:
            if stats.percent >= STREAK_THRESHOLD:
                run += 1
                best = max(best, run)
            else:
                run = 0
        day += timedelta(days=1)
    return Streaks(current=run, best=best)


_QUALIFIER = re.compile(r"\s*[(:].*$")


def normalize_subject(subject: str) -> str:
    """'DSA (Arrays)' -> 'DSA', 'System Design: Basics' -> 'System Design'."""
    return _QUALIFIER.sub("", subject).strip()


def subject_hours(state: TrackerState, timetable: Timetable) -> dict[str, float]:
    """Completed hours per normalized subject across every recorded date."""
    hours = {}
    for date_key, day in state.daily_progress.items():
        schedule = timetable.schedule_for(weekday_name_of(date_key))
        durations = effective_durations(day, schedule)
        for index in day.completed_blocks:
            if index >= len(schedule):
                continue
            subject = normalize_subject(day.effective_subject(index, schedule[index]))
            hours[subject] = hours.get(subject, 0.0) + durations[index]
    return hours


def progress_totals(state: TrackerState, timetable: Timetable) -> dict:
    by_subject = subject_hours(state, timetable)
    return {
        "subject_hours": by_subject,
        "total_leetcode": sum(1 for d in state.daily_progress.values() if d.leetcode),
        "total_study_hours": sum(by_subject.values()),
    }


def calendar_color(stats: DayStats, tracked: bool, future: bool) -> str:
    """Month calendar cell colour for a day."""
    if future:
        return "future"
    if not tracked or stats.total_hours == 0:
        return "grey"
    if stats.percent >= 80:
        return "green"
    elif stats.percent >= 30:
        return "yellow"
    return "red"


def heatmap_level(stats: DayStats, today_key: str) -> str:
    if stats.date_key > today_key:
        return "future"
    if stats.total_hours == 0 or stats.percent == 0:
        return "empty"
    if stats.percent < 30:
        return "level-1"
    elif stats.percent < STREAK_THRESHOLD:
        return "level-2"
    return "level-3"


def available_years(state: TrackerState, today_key: str) -> list[int]:
    """Years with tracked data plus the current one, newest first."""
    years = {date.fromisoformat(today_key).year}
    for date_key in state.daily_progress:
        years.add(date.fromisoformat(date_key).year)
    return sorted(years, reverse=True)


def heatmap_weeks(state: TrackerState, timetable: Timetable, year: int, today_key: str) -> list[list[dict]]:
    """Monday-aligned week columns covering the whole year.

    Each cell is {"date_key", "in_year", "level"}; padding days outside the
    year get level "hidden".
    """
    start = date(year, 1, 1)
    start -= timedelta(days=start.weekday())
    end = date(year, 12, 31)
    end += timedelta(days=6 - end.weekday())

    weeks = []
    day = start
    while day <= end:
        week = []
        for _ in range(7):
            key = day.isoformat()
            in_year = day.year == year
            level = heatmap_level(get_day_stats(state, key, timetable, today_key), today_key) if in_year else "hidden"
            week.append({"date_key": key, "in_year": in_year, "level": level})
            day += timedelta(days=1)
        weeks.append(week)
    return weeks
