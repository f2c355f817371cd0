from __future__ import annotations

import logging
import os
import sqlite3
from typing import Iterable, List

from jetaudio.db.models import Config, MediaStoreEntry
from jetaudio.db.schema import SCHEMA_V1_SQL

logger = logging.getLogger(__name__)

CURRENT_DB_VERSION = 2
DB_FILE_NAME = "db.sqlite3"


def connect(db_path: str) -> sqlite3.Connection:
    db = sqlite3.connect(db_path)
    db.row_factory = sqlite3.Row
    return db


def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, DB_FILE_NAME)
    logger.info("Database file path: %s", sqlite_path)

    db = connect(sqlite_path)

    existing_version = int(db.execute("PRAGMA user_version").fetchone()[0])
    upgrade_database_if_needed(db, existing_version)

    return db


def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int) -> None:
    logger.debug("Existing database version: %s", existing_version)

    if existing_version >= CURRENT_DB_VERSION:
        return

    if existing_version <= 0:
        logger.info("Migrate database version 1...")
        db.execute("PRAGMA journal_mode=WAL")
        db.execute("PRAGMA user_version=1")
        db.executescript(SCHEMA_V1_SQL)
        db.commit()

    if existing_version <= 1:
        logger.info("Migrate database version 2...")
        db.execute("PRAGMA user_version=2")
        db.execute("ALTER TABLE config_data ADD COLUMN show_notification BOOLEAN DEFAULT 1")
        db.commit()


# -------------------------------
# DIRECTORIES
# -------------------------------
def get_directories(db: sqlite3.Connection) -> List[str]:
    cursor = db.execute("SELECT path FROM directories ORDER BY id")
    return [row["path"] for row in cursor.fetchall()]


def set_directories(db: sqlite3.Connection, directories: List[str]) -> None:
    db.execute("DELETE FROM directories")
    for path in directories:
        db.execute("INSERT INTO directories (path) VALUES (?)", (path,))
    db.commit()


# -------------------------------
# CONFIG
# -------------------------------
def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT volume, show_notification
        FROM config_data
        LIMIT 1
    """).fetchone()
    return Config(
        volume=float(row["volume"]),
        show_notification=bool(row["show_notification"]),
    )


def set_config(db: sqlite3.Connection, config: Config) -> None:
    db.execute("""
        UPDATE config_data
        SET volume = ?,
            show_notification = ?
        WHERE 1
    """, (min(1.0, max(0.0, float(config.volume))), config.show_notification))
    db.commit()


# -------------------------------
# MEDIA STORE
# -------------------------------
def remove_missing_media_store_entries(db: sqlite3.Connection, kept_paths: Iterable[str]) -> int:
    """Delete rows whose path is not in kept_paths. Kept rows keep their ids."""
    db.execute("CREATE TEMP TABLE IF NOT EXISTS scanned_paths (data TEXT PRIMARY KEY)")
    db.execute("DELETE FROM scanned_paths")
    db.executemany("INSERT OR IGNORE INTO scanned_paths (data) VALUES (?)", [(p,) for p in kept_paths])
    cursor = db.execute("DELETE FROM audio WHERE data NOT IN (SELECT data FROM scanned_paths)")
    db.execute("DROP TABLE scanned_paths")
    db.commit()
    logger.debug("Removed %d stale media store rows", cursor.rowcount)
    return cursor.rowcount


def add_media_store_entries(db: sqlite3.Connection, entries: Iterable[MediaStoreEntry]) -> None:
    db.executemany("""
        INSERT INTO audio (data, display_name, title, artist, duration, is_music)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(data) DO UPDATE SET
            display_name = excluded.display_name,
            title = excluded.title,
            artist = excluded.artist,
            duration = excluded.duration,
            is_music = excluded.is_music
    """, [
        (e.data, e.display_name, e.title, e.artist, int(e.duration), e.is_music)
        for e in entries
    ])
    db.commit()


def get_media_store_count(db: sqlite3.Connection, music_only: bool = True) -> int:
    sql = "SELECT COUNT(*) FROM audio"
    if music_only:
        sql += " WHERE is_music = 1"
    return int(db.execute(sql).fetchone()[0])
