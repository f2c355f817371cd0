# src/jetaudio/player/notification.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from .session import MediaSession

logger = logging.getLogger(__name__)

NOTIFICATION_ID = 101
APP_TITLE = "JetAudio"


class JetAudioNotificationManager(QObject):
    """
    "Now playing" tray notification bound to a media session.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.tray: Optional[QSystemTrayIcon] = None
        self.menu: Optional[QMenu] = None
        self.act_play: Optional[QAction] = None
        self.act_next: Optional[QAction] = None
        self._session: Optional[MediaSession] = None

    @property
    def is_showing(self) -> bool:
        return self.tray is not None and self._session is not None

    def start_notification_service(self, media_session: MediaSession, media_session_service) -> None:
        if self._session is media_session and self.tray is not None:
            return
        self.stop_notification_service()
        self._session = media_session
        self._build_notification(media_session)

        player = media_session.player
        player.mediaItemChanged.connect(self._refresh)
        player.isPlayingChanged.connect(self._refresh)
        media_session.released.connect(self.stop_notification_service)

        self._refresh()
        if QSystemTrayIcon.isSystemTrayAvailable():
            self.tray.show()
        else:
            logger.info("No system tray available; notification stays hidden")

        media_session_service.start_foreground(NOTIFICATION_ID, self.tray)

    def stop_notification_service(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            player = session.player
            player.mediaItemChanged.disconnect(self._refresh)
            player.isPlayingChanged.disconnect(self._refresh)
            session.released.disconnect(self.stop_notification_service)

        if self.tray is not None:
            self.tray.hide()
            self.tray.deleteLater()
            self.tray = None
        if self.menu is not None:
            self.menu.deleteLater()
            self.menu = None

    def _build_notification(self, media_session: MediaSession) -> None:
        style = QApplication.style()
        player = media_session.player

        self.menu = QMenu()
        self.act_play = self.menu.addAction("Play")
        self.act_play.triggered.connect(lambda: player.toggle_play_pause())
        self.act_next = self.menu.addAction(style.standardIcon(QStyle.StandardPixmap.SP_MediaSkipForward), "Next")
        self.act_next.triggered.connect(lambda: player.seek_to_next())

        self.tray = QSystemTrayIcon(style.standardIcon(QStyle.StandardPixmap.SP_MediaPlay))
        self.tray.setContextMenu(self.menu)

    def _refresh(self, *_args) -> None:
        if self._session is None or self.tray is None:
            return
        player = self._session.player
        audio = player.current_media_item
        playing = player.is_playing()

        style = QApplication.style()
        if playing:
            self.act_play.setText("Pause")
            self.act_play.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_MediaPause))
        else:
            self.act_play.setText("Play")
            self.act_play.setIcon(style.standardIcon(QStyle.StandardPixmap.SP_MediaPlay))
        self.act_next.setEnabled(player.has_next_item())

        if audio is None:
            self.tray.setToolTip(APP_TITLE)
        else:
            self.tray.setToolTip(f"{audio.title}\n{audio.artist}")
