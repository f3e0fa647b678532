"""Weekly schedule catalog: weekday name -> ordered study blocks."""
import json
import os
from pathlib import Path

import yaml

from study_tracker.clock import WEEKDAYS
from study_tracker.models import ScheduleBlock, is_valid_time

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_TIMETABLE_PATH = os.environ.get(
    "STUDY_TRACKER_TIMETABLE", str(CONTENT_DIR / "timetable.json")
)


class TimetableError(ValueError):
    """Raised when a timetable file can't be read or is malformed."""


def to_hours(hhmm: str) -> float:
    """'09:30' -> 9.5"""
    hours, minutes = hhmm.split(":")
    return int(hours) + int(minutes) / 60


def block_duration(start: str, end: str) -> float:
    return to_hours(end) - to_hours(start)


def read_timetable_file(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text())
        return json.loads(path.read_text())
    except OSError as e:
        raise TimetableError(f"Cannot read timetable {file_path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise TimetableError(f"Cannot parse timetable {file_path}: {e}") from e


class Timetable:
    """Read-only weekly schedule. Unknown weekdays are rest days."""

    def __init__(self, days: dict):
        if not isinstance(days, dict):
            raise TimetableError("Timetable must map weekday names to block lists")
        self._days = {}
        for day_name, blocks in days.items():
            if day_name not in WEEKDAYS:
                raise TimetableError(f"Unknown weekday: {day_name}")
            parsed = []
            for i, b in enumerate(blocks or []):
                if not isinstance(b, dict):
                    raise TimetableError(f"{day_name} block {i}: expected a mapping")
                start, end, subject = b.get("start"), b.get("end"), b.get("subject")
                if not (is_valid_time(start) and is_valid_time(end)):
                    raise TimetableError(f"{day_name} block {i}: times must be HH:MM")
                if to_hours(start) >= to_hours(end):
                    raise TimetableError(f"{day_name} block {i}: start must be before end")
                if not subject:
                    raise TimetableError(f"{day_name} block {i}: subject is required")
                parsed.append(ScheduleBlock(start=start, end=end, subject=subject))
            self._days[day_name] = tuple(parsed)

    def schedule_for(self, day_name: str) -> tuple:
        return self._days.get(day_name, ())

    def weekdays(self) -> list[str]:
        return [d for d in WEEKDAYS if d in self._days]


def load_timetable(file_path: str = DEFAULT_TIMETABLE_PATH) -> Timetable:
    """Load the catalog from a .json or .yaml file."""
    return Timetable(read_timetable_file(file_path))
