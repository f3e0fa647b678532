"""Tracking store: the owned, authoritative tracker state and its mutations."""
import logging
from dataclasses import replace

from study_tracker import snapshots
from study_tracker.clock import Clock, weekday_name_of
from study_tracker.export import prepare_weekly_data
from study_tracker.integrity import validate
from study_tracker.models import (
    DayRecord, MutationResult, TimeRange, TrackerState, is_valid_time, parse_block_index,
)
from study_tracker.stats import (
    DayStats, Streaks, compute_streaks, get_day_stats, progress_totals, subject_hours,
)
from study_tracker.storage import load_raw, save
from study_tracker.timetable import Timetable, to_hours

logger = logging.getLogger(__name__)

ROLLOVER_CHECK_SECONDS = 60

READ_ONLY_ERROR = "Data is corrupted; changes are disabled until a snapshot is restored."


class TrackingStore:
    """Holds the tracker state for one session and is the only thing that changes it.

    Date-keyed mutations only apply to today, read fresh from the clock on
    every call. Every accepted mutation is persisted, except while the loaded
    data is flagged as corrupted, when the store is read-only.
    """

    def __init__(self, db_path: str, timetable: Timetable, clock: Clock | None = None):
        self.db_path = db_path
        self.timetable = timetable
        self.clock = clock or Clock()
        self.today_key = self.clock.today_key()
        self.last_save_ok = True
        self._last_check = self.clock.now()
        self._load()

    def _load(self) -> None:
        raw = load_raw(self.db_path)
        self._raw = raw
        self._state = TrackerState.from_dict(raw)
        self.corruption_errors = validate(raw) if raw is not None else []
        if self.corruption_errors:
            logger.warning("Loaded data failed validation: %s", self.corruption_errors)
        else:
            snapshots.create_daily_snapshot(self.db_path, self._state, self.clock)

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_read_only(self) -> bool:
        return bool(self.corruption_errors)

    def get_day_stats(self, date_key: str) -> DayStats:
        return get_day_stats(self._state, date_key, self.timetable, self.today_key)

    def streaks(self) -> Streaks:
        return compute_streaks(self._state, self.timetable, self.today_key)

    def subject_hours(self) -> dict[str, float]:
        return subject_hours(self._state, self.timetable)

    def progress_totals(self) -> dict:
        return progress_totals(self._state, self.timetable)

    def weekly_data(self, reference_date: str) -> dict:
        return prepare_weekly_data(
            self._state, self.timetable, reference_date, self.today_key, self.streaks(),
        )

    def list_snapshots(self):
        return snapshots.list_snapshots(self.db_path)

    def restore_from_snapshot(self, key: str) -> bool:
        """Restore stored data from a snapshot and reload it into the store."""
        if not snapshots.restore_from_snapshot(self.db_path, key):
            return False
        self._load()
        return True

    def poll(self) -> bool:
        """Run tick() if ROLLOVER_CHECK_SECONDS have passed since the last check."""
        now = self.clock.now()
        if (now - self._last_check).total_seconds() < ROLLOVER_CHECK_SECONDS:
            return False
        self._last_check = now
        return self.tick()

    def tick(self) -> bool:
        """Handle a change of calendar date. Returns True if the day rolled over."""
        current = self.clock.today_key()
        if current == self.today_key:
            return False
        logger.info("Day rolled over from %s to %s", self.today_key, current)
        document = self._raw if self.is_read_only else self._state.to_dict()
        self.corruption_errors = validate(document)
        if not self.corruption_errors:
            snapshots.create_daily_snapshot(self.db_path, document, self.clock)
        self.today_key = current
        return True

    def current_day(self) -> str:
        """Today's date key, rolling the store over first if midnight has passed."""
        self.tick()
        return self.today_key

    def _check_editable(self, date_key: str) -> MutationResult | None:
        today = self.current_day()
        if self.is_read_only:
            return MutationResult.rejected(READ_ONLY_ERROR)
        if date_key != today:
            return MutationResult.rejected(f"Only today's entries ({today}) can be edited, not {date_key}.")
        return None

    def _check_day_edit(self, date_key: str, block_index) -> MutationResult | None:
        rejection = self._check_editable(date_key)
        if rejection:
            return rejection
        if not isinstance(block_index, int) or parse_block_index(block_index) is None:
            return MutationResult.rejected(f"Invalid block index: {block_index!r}")
        return None

    def _commit(self, state: TrackerState) -> MutationResult:
        self._state = state
        if not self.is_read_only:
            self.last_save_ok = save(self.db_path, state)
        return MutationResult.success()

    def _commit_day(self, date_key: str, day: DayRecord) -> MutationResult:
        progress = dict(self._state.daily_progress)
        progress[date_key] = day
        return self._commit(replace(self._state, daily_progress=progress))

    def toggle_block(self, date_key: str, block_index: int) -> MutationResult:
        rejection = self._check_day_edit(date_key, block_index)
        if rejection:
            return rejection
        day = self._state.day(date_key)
        completed = set(day.completed_blocks)
        skipped = day.skipped_reasons
        if block_index in completed:
            completed.discard(block_index)
        else:
            completed.add(block_index)
            skipped = {k: v for k, v in skipped.items() if k != block_index}
        return self._commit_day(date_key, replace(
            day, completed_blocks=tuple(sorted(completed)), skipped_reasons=skipped,
        ))

    def update_skip_reason(self, date_key: str, block_index: int, reason: str) -> MutationResult:
        rejection = self._check_day_edit(date_key, block_index)
        if rejection:
            return rejection
        day = self._state.day(date_key)
        reasons = dict(day.skipped_reasons)
        completed = day.completed_blocks
        if reason.strip() == "":
            reasons.pop(block_index, None)
        else:
            reasons[block_index] = reason
            completed = tuple(i for i in completed if i != block_index)
        return self._commit_day(date_key, replace(
            day, skipped_reasons=reasons, completed_blocks=completed,
        ))

    def update_overridden_subject(self, date_key: str, block_index: int, text: str) -> MutationResult:
        rejection = self._check_day_edit(date_key, block_index)
        if rejection:
            return rejection
        if not text.strip():
            return MutationResult.rejected("Subject cannot be blank.")
        day = self._state.day(date_key)
        subjects = dict(day.overridden_subjects)
        subjects[block_index] = text
        return self._commit_day(date_key, replace(day, overridden_subjects=subjects))

    def update_overridden_time(self, date_key: str, block_index: int, new_start: str, new_end: str) -> MutationResult:
        rejection = self._check_day_edit(date_key, block_index)
        if rejection:
            return rejection
        if not (is_valid_time(new_start) and is_valid_time(new_end)):
            return MutationResult.rejected("Times must be in HH:MM format.")
        start, end = to_hours(new_start), to_hours(new_end)
        if start >= end:
            return MutationResult.rejected("Start time must be before end time.")

        schedule = self.timetable.schedule_for(weekday_name_of(date_key))
        if block_index >= len(schedule):
            return MutationResult.rejected(f"There is no block {block_index} on {date_key}.")

        day = self._state.day(date_key)
        for index, block in enumerate(schedule):
            if index == block_index:
                continue
            other = day.effective_time(index, block)
            # back-to-back blocks (end == start) don't overlap
            if start < to_hours(other.end) and to_hours(other.start) < end:
                return MutationResult.rejected(
                    f"Overlaps with {day.effective_subject(index, block)} ({other.start}-{other.end})."
                )

        times = dict(day.overridden_times)
        times[block_index] = TimeRange(new_start, new_end)
        return self._commit_day(date_key, replace(day, overridden_times=times))

    def update_notes(self, date_key: str, text: str) -> MutationResult:
        rejection = self._check_editable(date_key)
        if rejection:
            return rejection
        return self._commit_day(date_key, replace(self._state.day(date_key), notes=text))

    def toggle_leetcode(self, date_key: str) -> MutationResult:
        rejection = self._check_editable(date_key)
        if rejection:
            return rejection
        day = self._state.day(date_key)
        return self._commit_day(date_key, replace(day, leetcode=not day.leetcode))

    def update_weak_areas(self, text: str) -> MutationResult:
        if self.is_read_only:
            return MutationResult.rejected(READ_ONLY_ERROR)
        areas = tuple(line for line in text.split("\n") if line.strip() != "")
        return self._commit(replace(self._state, weak_areas=areas))

    def save_review(self, week_id: str, payload) -> MutationResult:
        if self.is_read_only:
            return MutationResult.rejected(READ_ONLY_ERROR)
        reviews = dict(self._state.reviews)
        reviews[week_id] = payload
        return self._commit(replace(self._state, reviews=reviews))
