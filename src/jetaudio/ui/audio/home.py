# ui/audio/home.py
from __future__ import annotations

import math
from typing import Callable, Optional

from PySide6.QtCore import QByteArray, QSize, Qt
from PySide6.QtGui import QIcon, QPainter, QPixmap
from PySide6.QtSvg import QSvgRenderer
from PySide6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QScrollArea, QSlider, QToolButton, QVBoxLayout, QWidget,
)

from jetaudio.data.models import Audio

# Material icons
SVG_MUSIC_NOTE = "M12 3v10.55c-.59-.34-1.27-.55-2-.55-2.21 0-4 1.79-4 4s1.79 4 4 4 4-1.79 4-4V7h4V3h-6z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 19h4V5H6v14zm8-14v14h4V5h-4z"
SVG_SKIP_NEXT = "M6 18l8.5-6L6 6v12zM16 6v12h2V6h-2z"

# Slider ticks per 100% of progress
SLIDER_STEPS = 1000


def time_stamp_to_duration(position: int) -> str:
    """Format milliseconds as m:ss; negative means unknown."""
    if position < 0:
        return "--:--"
    total_seconds = int(math.floor(position / 1e3))
    minutes = total_seconds // 60
    remaining_seconds = total_seconds - minutes * 60
    return "%d:%02d" % (minutes, remaining_seconds)


def _svg_icon(path_d: str, size: int = 24, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.GlobalColor.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


class PlayerIconItem(QToolButton):
    """Round icon button."""

    def __init__(self, icon_path: str, on_click: Callable[[], None], bordered: bool = False, parent=None):
        super().__init__(parent)
        self.icon_path = icon_path
        self.setIcon(_svg_icon(icon_path))
        self.setIconSize(QSize(24, 24))
        self.setObjectName("PlayerIconBordered" if bordered else "PlayerIcon")
        self.clicked.connect(lambda: on_click())

    def set_icon_path(self, icon_path: str) -> None:
        if icon_path != self.icon_path:
            self.icon_path = icon_path
            self.setIcon(_svg_icon(icon_path))


class AudioItem(QFrame):
    def __init__(self, audio: Audio, on_item_click: Callable[[], None], parent=None):
        super().__init__(parent)
        self.audio = audio
        self._on_item_click = on_item_click
        self.setObjectName("AudioItem")
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        row = QHBoxLayout(self)
        row.setContentsMargins(16, 8, 16, 8)

        col = QVBoxLayout()
        col.setSpacing(4)
        self.lbl_name = QLabel(audio.display_name)
        self.lbl_name.setObjectName("AudioItemTitle")
        self.lbl_artist = QLabel(audio.artist)
        self.lbl_artist.setObjectName("AudioItemArtist")
        col.addWidget(self.lbl_name)
        col.addWidget(self.lbl_artist)

        self.lbl_duration = QLabel(time_stamp_to_duration(audio.duration))

        row.addLayout(col, 1)
        row.addWidget(self.lbl_duration)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self.rect().contains(event.position().toPoint()):
            self._on_item_click()
            event.accept()
            return
        super().mouseReleaseEvent(event)


class ArtistInfo(QWidget):
    def __init__(self, audio: Audio, parent=None):
        super().__init__(parent)
        row = QHBoxLayout(self)
        row.setContentsMargins(4, 4, 4, 4)

        self.icon = PlayerIconItem(SVG_MUSIC_NOTE, on_click=lambda: None, bordered=True)
        row.addWidget(self.icon)

        col = QVBoxLayout()
        col.setSpacing(4)
        self.lbl_title = QLabel()
        self.lbl_title.setObjectName("NowPlayingTitle")
        self.lbl_artist = QLabel()
        self.lbl_artist.setObjectName("NowPlayingArtist")
        col.addWidget(self.lbl_title)
        col.addWidget(self.lbl_artist)
        row.addLayout(col, 1)

        self.set_audio(audio)

    def set_audio(self, audio: Audio) -> None:
        self.lbl_title.setText(audio.title)
        self.lbl_artist.setText(audio.artist)


class MediaPlayerController(QWidget):
    def __init__(self, is_audio_playing: bool, on_start: Callable[[], None], on_next: Callable[[], None], parent=None):
        super().__init__(parent)
        row = QHBoxLayout(self)
        row.setContentsMargins(4, 4, 4, 4)
        row.setSpacing(8)

        self.btn_play = PlayerIconItem(SVG_PLAY, on_click=on_start)
        self.btn_next = PlayerIconItem(SVG_SKIP_NEXT, on_click=on_next)
        self.btn_next.setToolTip("Next")
        row.addWidget(self.btn_play)
        row.addWidget(self.btn_next)

        self.set_playing(is_audio_playing)

    def set_playing(self, is_audio_playing: bool) -> None:
        self.btn_play.set_icon_path(SVG_PAUSE if is_audio_playing else SVG_PLAY)
        self.btn_play.setToolTip("Pause" if is_audio_playing else "Play")


class BottomBarPlayer(QFrame):
    def __init__(
        self,
        progress: float,
        on_progress: Callable[[float], None],
        audio: Audio,
        is_audio_playing: bool,
        on_start: Callable[[], None],
        on_next: Callable[[], None],
        parent=None,
    ):
        super().__init__(parent)
        self.setObjectName("BottomBarPlayer")
        self._on_progress = on_progress

        row = QHBoxLayout(self)
        row.setContentsMargins(8, 8, 8, 8)

        self.artist_info = ArtistInfo(audio)
        self.controller = MediaPlayerController(is_audio_playing, on_start=on_start, on_next=on_next)

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, SLIDER_STEPS)
        self.slider.valueChanged.connect(self._on_slider_value)

        row.addWidget(self.artist_info, 1)
        row.addWidget(self.controller)
        row.addWidget(self.slider, 1)

        self.set_progress(progress)

    def _on_slider_value(self, value: int) -> None:
        self._on_progress(value * 100.0 / SLIDER_STEPS)

    def set_progress(self, progress: float) -> None:
        if self.slider.isSliderDown():
            return
        value = round(min(100.0, max(0.0, progress)) * SLIDER_STEPS / 100.0)
        self.slider.blockSignals(True)
        self.slider.setValue(value)
        self.slider.blockSignals(False)

    def progress(self) -> float:
        return self.slider.value() * 100.0 / SLIDER_STEPS

    def set_state(self, progress: float, audio: Audio, is_audio_playing: bool) -> None:
        self.artist_info.set_audio(audio)
        self.controller.set_playing(is_audio_playing)
        self.set_progress(progress)


class HomeScreen(QWidget):
    """
    Track list plus bottom playback bar.

    Holds no playback state of its own: call set_state() with the current
    state; user actions go out through the callbacks.
    """

    def __init__(
        self,
        on_progress: Callable[[float], None],
        on_start: Callable[[], None],
        on_item_click: Callable[[int], None],
        on_next: Callable[[], None],
        current_playing_audio: Audio,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._on_item_click = on_item_click
        self._audio_list: list[Audio] = []
        self.audio_items: list[AudioItem] = []

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        self.list_container = QWidget()
        self.list_container.setObjectName("AudioList")
        self.list_layout = QVBoxLayout(self.list_container)
        self.list_layout.setContentsMargins(12, 12, 12, 12)
        self.list_layout.setSpacing(12)
        self.list_layout.addStretch(1)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setWidget(self.list_container)

        self.bottom_bar = BottomBarPlayer(
            progress=0.0,
            on_progress=on_progress,
            audio=current_playing_audio,
            is_audio_playing=False,
            on_start=on_start,
            on_next=on_next,
        )

        root.addWidget(self.scroll, 1)
        root.addWidget(self.bottom_bar)

        self._apply_styles()

    def set_state(
        self,
        progress: float,
        is_audio_playing: bool,
        current_playing_audio: Audio,
        audio_list: list[Audio],
    ) -> None:
        if audio_list != self._audio_list:
            self._set_audio_list(audio_list)
        self.bottom_bar.set_state(progress, current_playing_audio, is_audio_playing)

    def _set_audio_list(self, audio_list: list[Audio]) -> None:
        for item in self.audio_items:
            self.list_layout.removeWidget(item)
            item.deleteLater()
        self.audio_items = []
        self._audio_list = list(audio_list)

        for index, audio in enumerate(self._audio_list):
            item = AudioItem(audio, on_item_click=lambda i=index: self._on_item_click(i))
            self.list_layout.insertWidget(index, item)
            self.audio_items.append(item)

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#AudioList, QScrollArea {
            background-color: #020617;
            border: none;
        }
        QFrame#AudioItem {
            background: #0b1222;
            border: 1px solid #1f2937;
            border-radius: 12px;
        }
        QFrame#AudioItem:hover {
            border-color: #38bdf8;
        }
        QLabel {
            color: #9ca3af;
            font-size: 11px;
        }
        QLabel#AudioItemTitle, QLabel#NowPlayingTitle {
            color: #e5e7eb;
            font-size: 15px;
        }
        QLabel#NowPlayingTitle {
            font-weight: bold;
        }

        QFrame#BottomBarPlayer {
            background-color: #020617;
            border-top: 1px solid #111827;
        }
        QToolButton#PlayerIcon, QToolButton#PlayerIconBordered {
            border: 1px solid transparent;
            background: #111827;
            border-radius: 16px;
            padding: 4px;
        }
        QToolButton#PlayerIconBordered {
            border-color: #e5e7eb;
        }
        QToolButton#PlayerIcon:hover {
            border-color: #38bdf8;
        }

        QSlider::groove:horizontal {
            height: 4px;
            background: #0f172a;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            width: 12px;
            height: 12px;
            margin: -4px 0;
            border-radius: 6px;
            background: #38bdf8;
        }
        QSlider::sub-page:horizontal {
            background: #38bdf8;
            border-radius: 2px;
        }
        """)
