"""Date source used for the today-only rules."""
from datetime import date, datetime

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def weekday_name_of(date_key: str) -> str:
    """'2026-10-19' -> 'Monday'."""
    return WEEKDAYS[date.fromisoformat(date_key).weekday()]


class Clock:
    """Wall-clock date source. Subclass or replace in tests."""

    def now(self) -> datetime:
        return datetime.now()

    def today_key(self) -> str:
        return self.now().date().isoformat()


class FixedClock(Clock):
    """Clock pinned to a given moment; move it with set()."""

    def __init__(self, moment: datetime | str):
        self.set(moment)

    def set(self, moment: datetime | str) -> None:
        if isinstance(moment, str):
            moment = datetime.fromisoformat(moment)
        self._moment = moment

    def now(self) -> datetime:
        return self._moment
