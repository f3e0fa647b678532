"""Load and save the tracker document under a single storage key."""
import json
import logging
import sqlite3

from study_tracker.db import get_item, set_item
from study_tracker.models import TrackerState

logger = logging.getLogger(__name__)

STORAGE_KEY = "placement_tracker_data"


def load_raw(db_path: str):
    """Decoded document as stored, or None if absent or undecodable."""
    try:
        text = get_item(db_path, STORAGE_KEY)
    except sqlite3.Error as e:
        logger.error("Failed to load data: %s", e)
        return None
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        logger.error("Stored data is not valid JSON: %s", e)
        return None


def load(db_path: str) -> TrackerState:
    """Current document, or an empty state on first run or decode failure."""
    return TrackerState.from_dict(load_raw(db_path))


def save_raw(db_path: str, document: dict) -> bool:
    try:
        set_item(db_path, STORAGE_KEY, json.dumps(document))
    except (sqlite3.Error, TypeError, ValueError) as e:
        logger.error("Failed to save data: %s", e)
        return False
    return True


def save(db_path: str, state: TrackerState) -> bool:
    """Overwrite the stored document. Failures are logged and reported as False."""
    return save_raw(db_path, state.to_dict())
