from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Config:
    volume: float
    show_notification: bool


@dataclass(frozen=True)
class MediaStoreEntry:
    """A scanned file before the media store assigns it an id."""
    data: str           # absolute path to the audio file
    display_name: str   # basename (song.mp3)
    title: str
    artist: str
    duration: int       # ms, -1 when unknown
    is_music: bool = True
