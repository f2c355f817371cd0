# src/jetaudio/library/scan_library.py
from __future__ import annotations

import logging
import os

from mutagen import File as MutagenFile, MutagenError

from jetaudio.db.models import MediaStoreEntry

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".opus", ".wav"}

# Folder names whose files are indexed but not listed as music.
NON_MUSIC_DIRS = {"ringtones", "notifications", "alarms"}

UNKNOWN_ARTIST = "Unknown Artist"


def iter_audio_paths(directories: list[str]) -> list[str]:
    paths: list[str] = []
    for root in directories:
        if not root or not os.path.isdir(root):
            logger.warning("Skipping missing music folder: %s", root)
            continue
        for dirpath, _, filenames in os.walk(root):
            for fn in sorted(filenames):
                ext = os.path.splitext(fn)[1].lower()
                if ext in AUDIO_EXTS:
                    paths.append(os.path.abspath(os.path.join(dirpath, fn)))
    return paths


def _first(easy, key: str) -> str | None:
    v = easy.get(key)
    if not v:
        return None
    if isinstance(v, list):
        return (str(v[0]).strip() if v else None) or None
    s = str(v).strip()
    return s or None


def _is_music_path(path: str) -> bool:
    parts = os.path.normpath(os.path.dirname(path)).split(os.sep)
    return not any(p.lower() in NON_MUSIC_DIRS for p in parts)


def _duration_ms(audio) -> int:
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    if length is None:
        return -1
    try:
        return int(float(length) * 1000)
    except (TypeError, ValueError):
        return -1


def new_media_store_entry_from_path(path: str) -> MediaStoreEntry | None:
    """
    Reads tags with mutagen. Returns None for files mutagen can't parse.
    """
    try:
        audio = MutagenFile(path, easy=True)
    except MutagenError as e:
        logger.warning("Cannot read tags from %s: %s", path, e)
        return None
    if audio is None:
        return None

    display_name = os.path.basename(path)
    title = _first(audio, "title") or os.path.splitext(display_name)[0]
    artist = _first(audio, "artist") or UNKNOWN_ARTIST

    return MediaStoreEntry(
        data=path,
        display_name=display_name,
        title=title,
        artist=artist,
        duration=_duration_ms(audio),
        is_music=_is_music_path(path),
    )
