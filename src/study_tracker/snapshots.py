"""Daily last-known-good copies of the tracker document."""
import json
import logging
import sqlite3

from study_tracker.clock import Clock
from study_tracker.db import get_item, keys_with_prefix, remove_item, set_item
from study_tracker.integrity import validate
from study_tracker.models import SnapshotInfo, TrackerState
from study_tracker.storage import save_raw

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "snapshot_"
MAX_SNAPSHOTS = 3


def snapshot_key(date_key: str) -> str:
    return f"{SNAPSHOT_PREFIX}{date_key}"


def create_daily_snapshot(db_path: str, state, clock: Clock) -> bool:
    """Snapshot state under today's key unless one exists or state is invalid.

    Returns True if a snapshot was written.
    """
    document = state.to_dict() if isinstance(state, TrackerState) else state
    key = snapshot_key(clock.today_key())
    if get_item(db_path, key) is not None:
        return False
    errors = validate(document)
    if errors:
        logger.warning("Skipping snapshot creation due to data validation errors: %s", errors)
        return False
    try:
        set_item(db_path, key, json.dumps({
            "timestamp": clock.now().isoformat(),
            "data": document,
        }))
    except (sqlite3.Error, TypeError, ValueError) as e:
        logger.error("Failed to write snapshot %s: %s", key, e)
        return False
    logger.info("Created snapshot %s", key)
    cleanup_old_snapshots(db_path)
    return True


def list_snapshots(db_path: str) -> list[SnapshotInfo]:
    """Readable snapshots, newest date first. Malformed entries are skipped."""
    snapshots = []
    for key in keys_with_prefix(db_path, SNAPSHOT_PREFIX):
        try:
            content = json.loads(get_item(db_path, key) or "")
            timestamp = content.get("timestamp")
        except (ValueError, AttributeError):
            logger.error("Failed to parse snapshot: %s", key)
            continue
        snapshots.append(SnapshotInfo(
            key=key, date=key[len(SNAPSHOT_PREFIX):], timestamp=timestamp,
        ))
    return sorted(snapshots, key=lambda s: s.date, reverse=True)


def cleanup_old_snapshots(db_path: str) -> None:
    """Keep only the MAX_SNAPSHOTS most recent snapshots."""
    for old in list_snapshots(db_path)[MAX_SNAPSHOTS:]:
        remove_item(db_path, old.key)
        logger.info("Pruned snapshot %s", old.key)


def restore_from_snapshot(db_path: str, key: str) -> bool:
    """Overwrite the stored document with the snapshot's data.

    Returns False, leaving stored data alone, if the snapshot is missing or
    unreadable.
    """
    try:
        snapshot = json.loads(get_item(db_path, key) or "null")
    except (ValueError, sqlite3.Error) as e:
        logger.error("Failed to restore from snapshot %s: %s", key, e)
        return False
    if not isinstance(snapshot, dict) or not snapshot.get("data"):
        logger.error("Snapshot %s is missing or has no data", key)
        return False
    if not save_raw(db_path, snapshot["data"]):
        return False
    logger.info("Restored data from snapshot %s", key)
    return True
