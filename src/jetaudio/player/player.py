# src/jetaudio/player/player.py
from __future__ import annotations

import logging
import os
from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, QTimer, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

from jetaudio.data.models import Audio
from .mpv_ipc import MpvBackendConfig, MpvIpcBackend

logger = logging.getLogger(__name__)

DISABLE_MPV_ENV = "JETAUDIO_DISABLE_MPV"


class PlaybackState(Enum):
    IDLE = auto()     # nothing prepared, or stopped
    READY = auto()    # an item is loaded; plays when play_when_ready is set
    ENDED = auto()    # the last item of the playlist finished


class Player(QObject):
    """
    Playlist player. mpv (JSON IPC) when available, QMediaPlayer otherwise.
    """

    playbackStateChanged = Signal(object)   # PlaybackState
    isPlayingChanged = Signal(bool)
    positionChanged = Signal(int)           # ms
    durationChanged = Signal(int)           # ms
    mediaItemChanged = Signal(object)       # Audio | None

    def __init__(self, volume: float = 0.7, use_mpv: bool = True):
        super().__init__()

        self.playback_state = PlaybackState.IDLE
        self.media_items: list[Audio] = []
        self.current_index: int = -1

        self._play_when_ready = False
        self._is_playing = False
        self._volume_0_to_1 = min(1.0, max(0.0, float(volume)))

        self._use_mpv = False
        self._mpv: Optional[MpvIpcBackend] = None

        # Qt fallback backend
        self.audio = QAudioOutput()
        self.audio.setVolume(self._volume_0_to_1)
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self.media.positionChanged.connect(self._on_qt_position)
        self.media.durationChanged.connect(self._on_qt_duration)
        self.media.playbackStateChanged.connect(self._on_qt_state_changed)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

        # mpv pump
        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(50)
        self._poll_timer.timeout.connect(self._poll)

        self._last_pos_ms = -1
        self._last_dur_ms = -1

        if use_mpv and os.getenv(DISABLE_MPV_ENV) != "1":
            self._try_init_mpv()

        logger.info("Audio backend: %s", self.backend_name())

    # ----------------------------
    # Backend init
    # ----------------------------

    def _try_init_mpv(self) -> None:
        try:
            backend = MpvIpcBackend(MpvBackendConfig())
            backend.start()
            backend.set_volume_0_to_1(self._volume_0_to_1)
        except (OSError, TimeoutError) as e:
            logger.warning("mpv unavailable, using Qt Multimedia: %s", e)
            return

        self._mpv = backend
        self._use_mpv = True
        self._poll_timer.start()

    def _mpv_active(self) -> bool:
        return self._use_mpv and self._mpv is not None

    # ----------------------------
    # Qt backend handlers
    # ----------------------------

    def _on_qt_position(self, ms: int) -> None:
        if not self._mpv_active():
            self.positionChanged.emit(int(ms))

    def _on_qt_duration(self, ms: int) -> None:
        if not self._mpv_active():
            self.durationChanged.emit(int(ms))

    def _on_qt_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        if self._mpv_active():
            return
        self._set_is_playing(state == QMediaPlayer.PlaybackState.PlayingState)

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if self._mpv_active():
            return
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            # don't swap the source from inside Qt's own signal
            QTimer.singleShot(0, self._on_item_ended)

    def _on_qt_error(self, error, message: str) -> None:
        logger.error("QMediaPlayer error %s: %s", error, message)

    # ----------------------------
    # mpv pump
    # ----------------------------

    def _poll(self) -> None:
        if not self._mpv_active():
            return

        try:
            events = self._mpv.process_messages(max_messages=500)
        except (ConnectionError, OSError) as e:
            logger.warning("mpv went away (%s); falling back to Qt Multimedia", e)
            self._use_mpv = False
            self._mpv = None
            self._poll_timer.stop()
            self._set_is_playing(False)
            return

        pos_ms = self._mpv.position_ms()
        dur_ms = self._mpv.duration_ms()
        if pos_ms != self._last_pos_ms:
            self._last_pos_ms = pos_ms
            self.positionChanged.emit(pos_ms)
        if dur_ms != self._last_dur_ms:
            self._last_dur_ms = dur_ms
            self.durationChanged.emit(dur_ms)

        self._set_is_playing(
            self.playback_state == PlaybackState.READY
            and not self._mpv.is_paused()
            and not self._mpv.is_idle()
        )

        for event in events:
            if event.get("event") == "end-file" and event.get("reason") == "eof":
                self._on_item_ended()

    # ----------------------------
    # Shared helpers
    # ----------------------------

    def _set_state(self, state: PlaybackState) -> None:
        if self.playback_state != state:
            self.playback_state = state
            self.playbackStateChanged.emit(state)

    def _set_is_playing(self, playing: bool) -> None:
        if self._is_playing != playing:
            self._is_playing = playing
            self.isPlayingChanged.emit(playing)

    def _load_current(self) -> None:
        item = self.current_media_item
        if item is None:
            return

        if self._mpv_active():
            self._mpv.load(item.data, start_playing=self._play_when_ready)
        else:
            self.media.setSource(QUrl(item.uri) if item.uri else QUrl.fromLocalFile(item.data))
            if self._play_when_ready:
                self.media.play()

        self._set_state(PlaybackState.READY)

    def _on_item_ended(self) -> None:
        if self.has_next_item():
            self.seek_to_item(self.current_index + 1)
            return
        self._set_is_playing(False)
        self._set_state(PlaybackState.ENDED)

    # ----------------------------
    # Playlist
    # ----------------------------

    @property
    def current_media_item(self) -> Audio | None:
        if 0 <= self.current_index < len(self.media_items):
            return self.media_items[self.current_index]
        return None

    def set_media_items(self, items: list[Audio]) -> None:
        """
        Replace the playlist. The current item is found again by file path;
        if it is gone, playback stops.
        """
        current = self.current_media_item
        self.media_items = list(items)
        self.current_index = -1
        if current is None:
            return

        for i, audio in enumerate(self.media_items):
            if audio.data == current.data:
                self.current_index = i
                if audio != current:
                    self.mediaItemChanged.emit(audio)
                return

        logger.info("Current item %s left the playlist; stopping", current.data)
        self.stop()
        self.mediaItemChanged.emit(None)

    def seek_to_item(self, index: int, position_ms: int = 0) -> None:
        if not 0 <= index < len(self.media_items):
            raise IndexError(f"media item index out of range: {index}")

        self.current_index = index
        self._load_current()
        self.mediaItemChanged.emit(self.current_media_item)
        if position_ms > 0:
            self.seek_to(position_ms)

    def has_next_item(self) -> bool:
        return 0 <= self.current_index + 1 < len(self.media_items)

    def seek_to_next(self) -> None:
        if self.has_next_item():
            self.seek_to_item(self.current_index + 1)

    # ----------------------------
    # Transport
    # ----------------------------

    @property
    def play_when_ready(self) -> bool:
        return self._play_when_ready

    @play_when_ready.setter
    def play_when_ready(self, value: bool) -> None:
        self._play_when_ready = bool(value)
        if self.playback_state != PlaybackState.READY:
            return

        if self._mpv_active():
            self._mpv.set_paused(not self._play_when_ready)
        elif self._play_when_ready:
            self.media.play()
        else:
            self.media.pause()

    def play(self) -> None:
        if self.playback_state == PlaybackState.ENDED and self.media_items:
            self._play_when_ready = True
            self.seek_to_item(max(self.current_index, 0))
            return
        if self.playback_state == PlaybackState.IDLE and self.current_media_item is not None:
            self._play_when_ready = True
            self._load_current()
            return
        self.play_when_ready = True

    def pause(self) -> None:
        self.play_when_ready = False

    def toggle_play_pause(self) -> None:
        if self.is_playing():
            self.pause()
        else:
            self.play()

    def seek_to(self, ms: int) -> None:
        ms = max(0, int(ms))
        if self._mpv_active():
            self._mpv.seek_ms(ms, exact=True)
        else:
            self.media.setPosition(ms)
        self.positionChanged.emit(ms)

    def stop(self) -> None:
        if self._mpv_active():
            self._mpv.stop_playback()
        else:
            self.media.stop()
        self._set_is_playing(False)
        self._set_state(PlaybackState.IDLE)

    def set_volume(self, volume_0_to_1: float) -> None:
        v = min(1.0, max(0.0, float(volume_0_to_1)))
        self._volume_0_to_1 = v
        if self._mpv_active():
            self._mpv.set_volume_0_to_1(v)
        else:
            self.audio.setVolume(v)

    def release(self) -> None:
        self._poll_timer.stop()
        if self._mpv is not None:
            self._mpv.terminate()
            self._mpv = None
        self._use_mpv = False
        self.media.stop()

    # ----------------------------
    # Getters
    # ----------------------------

    def is_playing(self) -> bool:
        return self._is_playing

    def position_ms(self) -> int:
        if self._mpv_active():
            return self._mpv.position_ms()
        return int(self.media.position())

    def duration_ms(self) -> int:
        if self._mpv_active():
            return self._mpv.duration_ms()
        return int(self.media.duration())

    def backend_name(self) -> str:
        return "mpv-ipc" if self._mpv_active() else "qt-multimedia"
