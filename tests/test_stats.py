import pytest

from study_tracker.models import DayRecord, TimeRange, TrackerState
from study_tracker.stats import (
    available_years, calendar_color, compute_streaks, get_day_stats, heatmap_level,
    heatmap_weeks, normalize_subject, progress_totals, subject_hours,
)

TODAY = "2026-10-19"


def test_day_stats_scenario(timetable):
    state = TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(0,))})
    stats = get_day_stats(state, TODAY, timetable, TODAY)
    assert stats.day_name == "Monday"
    assert stats.total_hours == 2
    assert stats.completed_hours == 1
    assert stats.percent == 50
    assert stats.is_today is True
    assert len(stats.schedule) == 2


def test_day_stats_untracked_date(timetable):
    stats = get_day_stats(TrackerState(), "2026-10-12", timetable, TODAY)
    assert stats.day_data == DayRecord()
    assert stats.completed_hours == 0
    assert stats.percent == 0
    assert stats.is_today is False


def test_day_stats_rest_day_is_zero(timetable):
    stats = get_day_stats(TrackerState(), "2026-10-25", timetable, TODAY)
    assert stats.day_name == "Sunday"
    assert stats.total_hours == 0
    assert stats.percent == 0


def test_day_stats_uses_overridden_times(timetable):
    day = DayRecord(completed_blocks=(1,), overridden_times={1: TimeRange("09:00", "11:00")})
    stats = get_day_stats(TrackerState(daily_progress={TODAY: day}), TODAY, timetable, TODAY)
    assert stats.total_hours == 3
    assert stats.completed_hours == 2
    assert stats.percent == pytest.approx(200 / 3)


def test_day_stats_ignores_out_of_schedule_index(timetable):
    day = DayRecord(completed_blocks=(0, 1, 7))
    stats = get_day_stats(TrackerState(daily_progress={TODAY: day}), TODAY, timetable, TODAY)
    assert stats.percent == 100


def test_day_stats_is_pure(timetable):
    state = TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(1,))})
    assert get_day_stats(state, TODAY, timetable, TODAY) == get_day_stats(state, TODAY, timetable, TODAY)


def test_streaks_no_history(timetable):
    assert compute_streaks(TrackerState(), timetable, TODAY).current == 0
    assert compute_streaks(TrackerState(), timetable, TODAY).best == 0


def test_streaks_rest_days_do_not_break(timetable):
    state = TrackerState(daily_progress={
        "2026-10-19": DayRecord(completed_blocks=(0, 1)),
        "2026-10-20": DayRecord(completed_blocks=(0,)),
        # Wednesday 21st untracked -> 0% breaks the run
        "2026-10-26": DayRecord(completed_blocks=(0, 1)),
        "2026-10-27": DayRecord(completed_blocks=(0,)),
    })
    streaks = compute_streaks(state, timetable, "2026-10-27")
    assert streaks.best == 2
    assert streaks.current == 2

    # Thu-Sun are rest days between Wed 28 and Mon 2
    state = TrackerState(daily_progress={
        **state.daily_progress,
        "2026-10-28": DayRecord(completed_blocks=(0,)),
        "2026-11-02": DayRecord(completed_blocks=(0, 1)),
    })
    streaks = compute_streaks(state, timetable, "2026-11-02")
    assert streaks.current == 4
    assert streaks.best == 4


def test_streak_below_threshold_resets(timetable):
    state = TrackerState(daily_progress={
        "2026-10-19": DayRecord(completed_blocks=(0, 1)),
        "2026-10-20": DayRecord(completed_blocks=(0,)),
        "2026-10-26": DayRecord(completed_blocks=(0,)),  # 50%
    })
    streaks = compute_streaks(state, timetable, "2026-10-26")
    assert streaks.current == 0
    assert streaks.best == 2
    assert streaks.current <= streaks.best


def test_streaks_all_below_threshold(timetable):
    state = TrackerState(daily_progress={"2026-10-19": DayRecord(completed_blocks=(0,))})
    streaks = compute_streaks(state, timetable, "2026-10-20")
    assert (streaks.current, streaks.best) == (0, 0)


@pytest.mark.parametrize("raw,expected", [
    ("DSA (Arrays)", "DSA"),
    ("System Design: Basics", "System Design"),
    ("Core CS: OS (Paging)", "Core CS"),
    ("Math", "Math"),
])
def test_normalize_subject(raw, expected):
    assert normalize_subject(raw) == expected


def test_subject_hours_scenario(timetable):
    state = TrackerState(daily_progress={
        "2026-10-20": DayRecord(completed_blocks=(0,)),  # System Design: Basics, 1.5h
        "2026-10-21": DayRecord(completed_blocks=(0,)),  # System Design (Networking), 0.5h
    })
    assert subject_hours(state, timetable) == {"System Design": 2.0}


def test_subject_hours_uses_overridden_subject(timetable):
    state = TrackerState(daily_progress={
        TODAY: DayRecord(completed_blocks=(0, 1, 5), overridden_subjects={0: "Physics (Optics)"}),
    })
    assert subject_hours(state, timetable) == {"Physics": 1.0, "DSA": 1.0}


def test_progress_totals(timetable):
    state = TrackerState(daily_progress={
        TODAY: DayRecord(completed_blocks=(0, 1), leetcode=True),
        "2026-10-20": DayRecord(leetcode=True),
        "2026-10-21": DayRecord(),
    })
    totals = progress_totals(state, timetable)
    assert totals["total_leetcode"] == 2
    assert totals["total_study_hours"] == 2
    assert totals["subject_hours"] == {"Math": 1.0, "DSA": 1.0}


def test_calendar_color(timetable):
    full = get_day_stats(TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(0, 1))}), TODAY, timetable, TODAY)
    half = get_day_stats(TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(0,))}), TODAY, timetable, TODAY)
    none = get_day_stats(TrackerState(), TODAY, timetable, TODAY)
    assert calendar_color(full, tracked=True, future=False) == "green"
    assert calendar_color(half, tracked=True, future=False) == "yellow"
    assert calendar_color(none, tracked=True, future=False) == "red"
    assert calendar_color(none, tracked=False, future=False) == "grey"
    assert calendar_color(full, tracked=True, future=True) == "future"


def test_heatmap_level(timetable):
    half = get_day_stats(TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(0,))}), TODAY, timetable, TODAY)
    full = get_day_stats(TrackerState(daily_progress={TODAY: DayRecord(completed_blocks=(0, 1))}), TODAY, timetable, TODAY)
    assert heatmap_level(half, TODAY) == "level-2"
    assert heatmap_level(full, TODAY) == "level-3"
    assert heatmap_level(get_day_stats(TrackerState(), TODAY, timetable, TODAY), TODAY) == "empty"
    assert heatmap_level(get_day_stats(TrackerState(), "2026-10-26", timetable, TODAY), TODAY) == "future"


def test_heatmap_weeks_cover_year(timetable):
    weeks = heatmap_weeks(TrackerState(), timetable, 2026, TODAY)
    assert all(len(w) == 7 for w in weeks)
    # 2026-01-01 is a Thursday, so the first column starts on Monday 2025-12-29
    assert weeks[0][0] == {"date_key": "2025-12-29", "in_year": False, "level": "hidden"}
    assert weeks[0][3]["date_key"] == "2026-01-01"
    assert weeks[-1][-1]["date_key"] >= "2026-12-31"
    in_year = [c for w in weeks for c in w if c["in_year"]]
    assert len(in_year) == 365


def test_available_years():
    state = TrackerState(daily_progress={"2024-03-01": DayRecord(), "2026-01-05": DayRecord()})
    assert available_years(state, TODAY) == [2026, 2024]
