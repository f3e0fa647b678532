"""Data classes for the tracker domain model."""
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

STATE_FIELDS = ("dailyProgress", "weakAreas", "reviews")

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(_HHMM.match(value))


def is_date_key(key) -> bool:
    """True for a 'YYYY-MM-DD' calendar date."""
    if not isinstance(key, str) or len(key) != 10:
        return False
    try:
        date.fromisoformat(key)
    except ValueError:
        return False
    return True


def parse_block_index(raw: Any) -> Optional[int]:
    """Return raw as a non-negative block index, or None if it isn't one.

    JSON object keys arrive as strings ("3"), list entries as ints.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str) and raw.isdigit():
        return int(raw)
    return None


@dataclass(frozen=True)
class ScheduleBlock:
    start: str
    end: str
    subject: str


@dataclass(frozen=True)
class TimeRange:
    start: str
    end: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    def is_valid(self) -> bool:
        # zero-padded HH:MM strings order the same as the times they name
        return is_valid_time(self.start) and is_valid_time(self.end) and self.start < self.end

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["TimeRange"]:
        """Parse a stored {start, end} pair, or None if it isn't a usable range."""
        if not isinstance(raw, dict):
            return None
        time_range = cls(raw.get("start"), raw.get("end"))
        return time_range if time_range.is_valid() else None


def _index_map(raw: Any) -> dict:
    if not isinstance(raw, dict):
        return {}
    out = {}
    for key, value in raw.items():
        idx = parse_block_index(key)
        if idx is not None:
            out[idx] = value
    return out


@dataclass(frozen=True)
class DayRecord:
    completed_blocks: tuple = ()
    skipped_reasons: dict = field(default_factory=dict)
    overridden_subjects: dict = field(default_factory=dict)
    overridden_times: dict = field(default_factory=dict)
    notes: str = ""
    leetcode: bool = False

    def effective_time(self, block_index: int, block: ScheduleBlock) -> TimeRange:
        override = self.overridden_times.get(block_index)
        return override if override is not None else TimeRange(block.start, block.end)

    def effective_subject(self, block_index: int, block: ScheduleBlock) -> str:
        return self.overridden_subjects.get(block_index) or block.subject

    def to_dict(self) -> dict:
        return {
            "completedBlocks": list(self.completed_blocks),
            "skippedReasons": {str(k): v for k, v in self.skipped_reasons.items()},
            "overriddenSubjects": {str(k): v for k, v in self.overridden_subjects.items()},
            "overriddenTimes": {str(k): v.to_dict() for k, v in self.overridden_times.items()},
            "notes": self.notes,
            "leetcode": self.leetcode,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "DayRecord":
        if not isinstance(raw, dict):
            return cls()
        entries = raw.get("completedBlocks")
        if not isinstance(entries, list):
            entries = []
        completed = set()
        for entry in entries:
            idx = parse_block_index(entry) if not isinstance(entry, str) else None
            if idx is not None:
                completed.add(idx)
        times = {}
        for idx, value in _index_map(raw.get("overriddenTimes")).items():
            time_range = TimeRange.from_dict(value)
            if time_range is not None:
                times[idx] = time_range
        return cls(
            completed_blocks=tuple(sorted(completed)),
            skipped_reasons={k: str(v) for k, v in _index_map(raw.get("skippedReasons")).items()},
            overridden_subjects={k: str(v) for k, v in _index_map(raw.get("overriddenSubjects")).items()},
            overridden_times=times,
            notes=str(raw.get("notes") or ""),
            leetcode=bool(raw.get("leetcode", False)),
        )


@dataclass(frozen=True)
class TrackerState:
    daily_progress: dict = field(default_factory=dict)
    weak_areas: tuple = ()
    reviews: dict = field(default_factory=dict)

    def day(self, date_key: str) -> DayRecord:
        """The record for date_key, or a blank one if the date was never touched."""
        return self.daily_progress.get(date_key) or DayRecord()

    def to_dict(self) -> dict:
        return {
            "dailyProgress": {k: v.to_dict() for k, v in self.daily_progress.items()},
            "weakAreas": list(self.weak_areas),
            "reviews": dict(self.reviews),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "TrackerState":
        if not isinstance(raw, dict):
            return cls()
        progress = raw.get("dailyProgress")
        weak = raw.get("weakAreas")
        reviews = raw.get("reviews")
        return cls(
            daily_progress={
                k: DayRecord.from_dict(v)
                for k, v in (progress.items() if isinstance(progress, dict) else [])
                if is_date_key(k)
            },
            weak_areas=tuple(str(w) for w in weak) if isinstance(weak, list) else (),
            reviews=dict(reviews) if isinstance(reviews, dict) else {},
        )


@dataclass(frozen=True)
class SnapshotInfo:
    key: str
    date: str
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a tracker mutation. Rejections carry a message, never raise."""
    ok: bool
    error: str = ""
    changed: bool = False

    @classmethod
    def success(cls, changed: bool = True) -> "MutationResult":
        return cls(ok=True, changed=changed)

    @classmethod
    def rejected(cls, error: str) -> "MutationResult":
        return cls(ok=False, error=error)
