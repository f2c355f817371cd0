# data/content_resolver.py
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from jetaudio.data.models import Audio
from jetaudio.db.database import connect

logger = logging.getLogger(__name__)

PROJECTION = ("id", "display_name", "artist", "data", "duration", "title")
SELECTION = "is_music = ?"
SELECTION_ARGS = (1,)
SORT_ORDER = "display_name ASC"


def _to_uri(path: str) -> str:
    p = Path(path)
    if not p.is_absolute():
        p = p.resolve()
    return p.as_uri()


def audio_from_row(row: sqlite3.Row) -> Audio:
    return Audio(
        uri=_to_uri(row["data"]),
        display_name=row["display_name"],
        id=int(row["id"]),
        artist=row["artist"],
        data=row["data"],
        duration=int(row["duration"]),
        title=row["title"],
    )


class ContentResolverHelper:
    """
    Queries the media store for music files.

    Opens a fresh connection per query so it can run on any thread.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_audio_data(self) -> list[Audio]:
        db = connect(self.db_path)
        try:
            cursor = db.execute(
                f"SELECT {', '.join(PROJECTION)} FROM audio WHERE {SELECTION} ORDER BY {SORT_ORDER}",
                SELECTION_ARGS,
            )
            audio_list = [audio_from_row(row) for row in cursor.fetchall()]
        finally:
            db.close()

        logger.debug("Content query returned %d rows", len(audio_list))
        return audio_list
