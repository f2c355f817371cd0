"""Tests for the media store content query."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from jetaudio.data.content_resolver import ContentResolverHelper
from jetaudio.db.database import DB_FILE_NAME, add_media_store_entries, initialize_database
from jetaudio.db.models import MediaStoreEntry


@pytest.fixture
def db_path(tmp_path) -> str:
    music = tmp_path / "music"
    db = initialize_database(str(tmp_path))
    add_media_store_entries(db, [
        MediaStoreEntry(str(music / "b.mp3"), "b.mp3", "Bee", "Artist B", 125_000),
        MediaStoreEntry(str(music / "a.flac"), "a.flac", "Ay", "Artist A", -1),
        MediaStoreEntry(str(music / "Ringtones" / "ring.ogg"), "ring.ogg", "Ring", "Phone", 3_000, is_music=False),
    ])
    db.close()
    return os.path.join(str(tmp_path), DB_FILE_NAME)


def test_returns_music_rows_sorted_by_display_name(db_path) -> None:
    audio_list = ContentResolverHelper(db_path).get_audio_data()

    assert [a.display_name for a in audio_list] == ["a.flac", "b.mp3"]


def test_maps_row_fields(db_path, tmp_path) -> None:
    audio = ContentResolverHelper(db_path).get_audio_data()[1]

    path = str(tmp_path / "music" / "b.mp3")
    assert audio.data == path
    assert audio.uri == Path(path).as_uri()
    assert audio.title == "Bee"
    assert audio.artist == "Artist B"
    assert audio.duration == 125_000


def test_unknown_duration_stays_negative(db_path) -> None:
    audio = ContentResolverHelper(db_path).get_audio_data()[0]

    assert audio.duration == -1


def test_ids_are_unique(db_path) -> None:
    ids = [a.id for a in ContentResolverHelper(db_path).get_audio_data()]

    assert len(ids) == len(set(ids))


def test_reflects_store_at_call_time(db_path, tmp_path) -> None:
    resolver = ContentResolverHelper(db_path)
    assert len(resolver.get_audio_data()) == 2

    db = initialize_database(str(tmp_path))
    add_media_store_entries(db, [MediaStoreEntry(str(tmp_path / "c.mp3"), "c.mp3", "Cee", "Artist C", 1_000)])
    db.close()

    assert [a.display_name for a in resolver.get_audio_data()] == ["a.flac", "b.mp3", "c.mp3"]
