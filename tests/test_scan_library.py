"""Tests for folder walking and tag reading."""

from __future__ import annotations

import os
from types import SimpleNamespace

import pytest
from mutagen import MutagenError

from jetaudio.library import scan_library
from jetaudio.library.scan_library import (
    UNKNOWN_ARTIST,
    iter_audio_paths,
    new_media_store_entry_from_path,
)


class FakeTags(dict):
    """Stand-in for a mutagen easy-tag file."""

    def __init__(self, tags, length=None):
        super().__init__(tags)
        self.info = SimpleNamespace(length=length) if length is not None else None


def touch(path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return str(path)


def test_iter_audio_paths_filters_by_extension(tmp_path) -> None:
    touch(tmp_path / "b.mp3")
    touch(tmp_path / "a.FLAC")
    touch(tmp_path / "cover.jpg")
    touch(tmp_path / "notes.txt")
    touch(tmp_path / "sub" / "c.ogg")

    paths = iter_audio_paths([str(tmp_path)])

    names = [os.path.relpath(p, tmp_path) for p in paths]
    assert sorted(names) == sorted(["a.FLAC", "b.mp3", os.path.join("sub", "c.ogg")])
    assert all(os.path.isabs(p) for p in paths)


def test_iter_audio_paths_skips_missing_folders(tmp_path, caplog) -> None:
    touch(tmp_path / "a.mp3")

    paths = iter_audio_paths([str(tmp_path / "gone"), str(tmp_path)])

    assert len(paths) == 1
    assert "gone" in caplog.text


def test_entry_from_tags(monkeypatch) -> None:
    monkeypatch.setattr(
        scan_library, "MutagenFile",
        lambda path, easy: FakeTags({"title": ["Song"], "artist": ["Band"]}, length=185.4),
    )

    entry = new_media_store_entry_from_path("/music/track01.mp3")

    assert entry.data == "/music/track01.mp3"
    assert entry.display_name == "track01.mp3"
    assert entry.title == "Song"
    assert entry.artist == "Band"
    assert entry.duration == 185_400
    assert entry.is_music


def test_missing_tags_fall_back(monkeypatch) -> None:
    monkeypatch.setattr(scan_library, "MutagenFile", lambda path, easy: FakeTags({"title": ["  "]}))

    entry = new_media_store_entry_from_path("/music/Some Track.flac")

    assert entry.title == "Some Track"
    assert entry.artist == UNKNOWN_ARTIST
    assert entry.duration == -1


@pytest.mark.parametrize("folder", ["Ringtones", "notifications", "Alarms"])
def test_system_sound_folders_are_not_music(monkeypatch, folder) -> None:
    monkeypatch.setattr(scan_library, "MutagenFile", lambda path, easy: FakeTags({}, length=2.0))

    entry = new_media_store_entry_from_path(f"/media/{folder}/beep.ogg")

    assert not entry.is_music


def test_unreadable_file_is_skipped(monkeypatch) -> None:
    def broken(path, easy):
        raise MutagenError("bad header")

    monkeypatch.setattr(scan_library, "MutagenFile", broken)

    assert new_media_store_entry_from_path("/music/broken.mp3") is None


def test_unknown_format_is_skipped(monkeypatch) -> None:
    monkeypatch.setattr(scan_library, "MutagenFile", lambda path, easy: None)

    assert new_media_store_entry_from_path("/music/mystery.wav") is None
