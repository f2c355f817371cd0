# data/models.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Audio:
    uri: str            # file:// URI, what the player loads
    display_name: str   # file name
    id: int
    artist: str
    data: str           # absolute path on disk
    duration: int       # ms; negative means unknown
    title: str


# Shown in the bottom bar before anything plays.
EMPTY_AUDIO = Audio(uri="", display_name="", id=0, artist="", data="", duration=0, title="")
