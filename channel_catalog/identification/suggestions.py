"""
Check whether channels have already been suggested.
"""
from typing import Iterable

from ..db.database import Database


def has_existing_suggestion(db: Database, channel_ids: Iterable[str]) -> bool:
    """Return True if any user has suggested any of the given channels."""
    return len(db.get_suggestions(channel_ids)) > 0
