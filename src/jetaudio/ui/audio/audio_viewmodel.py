# ui/audio/audio_viewmodel.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from jetaudio.data.models import EMPTY_AUDIO, Audio
from jetaudio.ui.workers.audio_loader import AudioLoader

logger = logging.getLogger(__name__)


class AudioViewModel(QObject):
    """
    Playback state for the home screen, and the target of its callbacks.
    """

    stateChanged = Signal()
    loadFailed = Signal(str)

    def __init__(self, repository, player, start_service: Optional[Callable[[], None]] = None, parent=None):
        super().__init__(parent)
        self.repository = repository
        self.player = player
        self._start_service = start_service
        self._service_started = False
        self._loader: AudioLoader | None = None
        self._reload_pending = False

        self.audio_list: list[Audio] = []
        self.current_audio: Audio = EMPTY_AUDIO
        self.is_playing = False
        self.progress = 0.0      # 0..100
        self.duration = 0        # ms

        # no player: the list still loads, playback intents are ignored
        if player is not None:
            player.mediaItemChanged.connect(self._on_media_item_changed)
            player.isPlayingChanged.connect(self._on_is_playing_changed)
            player.durationChanged.connect(self._on_duration_changed)
            player.positionChanged.connect(self._on_position_changed)

    # ------------------ loading ------------------
    def load_audio_data(self) -> None:
        if self._loader is not None:
            # one reload after the running one, however many were asked for
            self._reload_pending = True
            return
        self._loader = AudioLoader(self.repository, self)
        self._loader.loaded.connect(self.set_audio_list)
        self._loader.failed.connect(self.loadFailed.emit)
        self._loader.finished.connect(self._on_loader_finished)
        self._loader.start()

    def _on_loader_finished(self) -> None:
        loader, self._loader = self._loader, None
        if loader is not None:
            loader.deleteLater()
        if self._reload_pending:
            self._reload_pending = False
            self.load_audio_data()

    def is_loading(self) -> bool:
        return self._loader is not None

    def set_audio_list(self, audio_list: list[Audio]) -> None:
        self.audio_list = list(audio_list)
        if self.player is not None:
            self.player.set_media_items(self.audio_list)
        logger.info("Loaded %d tracks", len(self.audio_list))
        self.stateChanged.emit()

    # ------------------ UI intents ------------------
    def on_progress(self, value: float) -> None:
        value = min(100.0, max(0.0, float(value)))
        self.progress = value
        if self.duration > 0 and self.player is not None:
            self.player.seek_to(int(self.duration * value / 100.0))
        self.stateChanged.emit()

    def on_start(self) -> None:
        if self.player is None:
            return
        if self.player.current_media_item is None:
            if self.audio_list:
                self.on_item_click(0)
            return
        self._ensure_service_started()
        self.player.toggle_play_pause()

    def on_item_click(self, index: int) -> None:
        if not 0 <= index < len(self.audio_list):
            logger.warning("Ignoring click on missing item %s", index)
            return
        if self.player is None:
            return
        self._ensure_service_started()
        self.player.seek_to_item(index)
        self.player.play()

    def on_next(self) -> None:
        if self.player is not None:
            self.player.seek_to_next()

    def _ensure_service_started(self) -> None:
        if self._service_started or self._start_service is None:
            return
        self._service_started = True
        self._start_service()

    # ------------------ player events ------------------
    def _on_media_item_changed(self, audio: Audio | None) -> None:
        self.current_audio = audio or EMPTY_AUDIO
        self.duration = max(0, self.current_audio.duration)
        self.progress = 0.0
        self.stateChanged.emit()

    def _on_is_playing_changed(self, playing: bool) -> None:
        self.is_playing = bool(playing)
        self.stateChanged.emit()

    def _on_duration_changed(self, ms: int) -> None:
        if ms > 0:
            self.duration = int(ms)

    def _on_position_changed(self, ms: int) -> None:
        if self.duration <= 0:
            return
        progress = min(100.0, max(0.0, ms * 100.0 / self.duration))
        if progress != self.progress:
            self.progress = progress
            self.stateChanged.emit()
