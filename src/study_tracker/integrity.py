"""Corruption checks run on the stored document before it is trusted."""
from study_tracker.models import STATE_FIELDS, TimeRange, is_date_key, parse_block_index

_INDEX_MAPS = ("skippedReasons", "overriddenSubjects", "overriddenTimes")


def validate(data) -> list[str]:
    """Return a list of problems with data; empty means it is safe to use.

    Reports only. Nothing here repairs or mutates the document.
    """
    errors = []

    if data is None or not isinstance(data, dict):
        errors.append("Data is missing or null.")
        return errors

    for name in STATE_FIELDS:
        if name not in data:
            errors.append(f"Missing required field: {name}")

    progress = data.get("dailyProgress")
    if not isinstance(progress, dict):
        if progress is not None:
            errors.append("dailyProgress must be a mapping of dates to day records.")
        return errors

    for day_key, day in progress.items():
        if not is_date_key(day_key):
            errors.append(f"Invalid date key in dailyProgress: {day_key}")
        if not day:
            continue
        if not isinstance(day, dict):
            errors.append(f"Day record at {day_key} is not a mapping.")
            continue

        completed = day.get("completedBlocks") or []
        skipped = day.get("skippedReasons") or {}
        if not isinstance(completed, list):
            errors.append(f"completedBlocks at {day_key} is not a list.")
            completed = []

        for idx in completed:
            if isinstance(skipped, dict) and str(idx) in skipped:
                errors.append(
                    f"Data Conflict at {day_key}: Block {idx} is marked as both completed and skipped."
                )

        for idx in completed:
            if isinstance(idx, str) or parse_block_index(idx) is None:
                errors.append(f"Invalid index in completedBlocks at {day_key}: {idx!r}")

        for map_name in _INDEX_MAPS:
            entries = day.get(map_name) or {}
            if not isinstance(entries, dict):
                errors.append(f"{map_name} at {day_key} is not a mapping.")
                continue
            for key in entries:
                if parse_block_index(key) is None:
                    errors.append(f"Invalid index in {map_name} at {day_key}: {key}")

        times = day.get("overriddenTimes") or {}
        if isinstance(times, dict):
            for key, value in times.items():
                if TimeRange.from_dict(value) is None:
                    errors.append(f"Invalid time range in overriddenTimes at {day_key}: Block {key}")

    return errors
