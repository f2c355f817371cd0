"""Shared fixtures: offscreen Qt app, sample tracks and a signal-compatible fake player."""

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication

from jetaudio.data.models import Audio
from jetaudio.player.player import PlaybackState
from jetaudio.player.service import JetAudioService


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def make_audio(audio_id: int, title: str, artist: str = "Said", duration: int = 200_000) -> Audio:
    path = f"/music/{title}.mp3"
    return Audio(
        uri=f"file://{path}",
        display_name=f"{title}.mp3",
        id=audio_id,
        artist=artist,
        data=path,
        duration=duration,
        title=title,
    )


@pytest.fixture
def audio_list() -> list[Audio]:
    return [
        make_audio(1, "Title One"),
        make_audio(2, "Title Two", artist="Unknown", duration=65_000),
        make_audio(3, "Title Three", duration=-1),
    ]


class FakePlayer(QObject):
    """Records calls; mirrors the Player API the session, service and view-model use."""

    playbackStateChanged = Signal(object)
    isPlayingChanged = Signal(bool)
    positionChanged = Signal(int)
    durationChanged = Signal(int)
    mediaItemChanged = Signal(object)

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []
        self.playback_state = PlaybackState.IDLE
        self.media_items: list[Audio] = []
        self.current_index = -1
        self.position = 0
        self._play_when_ready = False
        self._playing = False

    @property
    def current_media_item(self):
        if 0 <= self.current_index < len(self.media_items):
            return self.media_items[self.current_index]
        return None

    @property
    def play_when_ready(self) -> bool:
        return self._play_when_ready

    @play_when_ready.setter
    def play_when_ready(self, value: bool) -> None:
        self.calls.append(("play_when_ready", value))
        self._play_when_ready = value

    def _set_playing(self, playing: bool) -> None:
        if playing != self._playing:
            self._playing = playing
            self.isPlayingChanged.emit(playing)

    def set_media_items(self, items):
        self.calls.append(("set_media_items", len(items)))
        self.media_items = list(items)

    def seek_to_item(self, index: int, position_ms: int = 0):
        self.calls.append(("seek_to_item", index))
        self.current_index = index
        self.playback_state = PlaybackState.READY
        self.mediaItemChanged.emit(self.current_media_item)

    def has_next_item(self) -> bool:
        return 0 <= self.current_index + 1 < len(self.media_items)

    def seek_to_next(self):
        self.calls.append(("seek_to_next",))
        if self.has_next_item():
            self.seek_to_item(self.current_index + 1)

    def play(self):
        self.calls.append(("play",))
        self._play_when_ready = True
        self._set_playing(True)

    def pause(self):
        self.calls.append(("pause",))
        self._play_when_ready = False
        self._set_playing(False)

    def toggle_play_pause(self):
        if self._playing:
            self.pause()
        else:
            self.play()

    def seek_to(self, ms: int):
        self.calls.append(("seek_to", ms))
        self.position = ms

    def stop(self):
        self.calls.append(("stop",))
        self.playback_state = PlaybackState.IDLE
        self.position = 0
        self._set_playing(False)

    def set_volume(self, volume: float):
        self.calls.append(("set_volume", volume))

    def is_playing(self) -> bool:
        return self._playing

    def position_ms(self) -> int:
        return self.position


@pytest.fixture
def fake_player(qapp) -> FakePlayer:
    return FakePlayer()


@pytest.fixture(autouse=True)
def _reset_service_singleton():
    yield
    JetAudioService._instance = None
