# src/jetaudio/player/service.py
from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, Signal, qVersion

from .player import PlaybackState
from .session import ControllerInfo, MediaSession

logger = logging.getLogger(__name__)

START_STICKY = 1

# Minimum Qt runtime for the tray notification.
NOTIFICATION_MIN_PLATFORM_VERSION = (6, 0)


class ServiceState(Enum):
    INACTIVE = auto()
    ACTIVE = auto()


def platform_version() -> tuple[int, ...]:
    parts = []
    for p in qVersion().split("."):
        if not p.isdigit():
            break
        parts.append(int(p))
    return tuple(parts)


class JetAudioService(QObject):
    """
    Long-lived playback service. One per process.

    Starts the foreground notification, hands its session to controllers,
    and tears playback down on destroy.
    """

    stateChanged = Signal(object)  # ServiceState

    _instance: Optional["JetAudioService"] = None

    def __init__(
        self,
        media_session: MediaSession,
        notification_manager,
        platform_version_fn=platform_version,
        parent: Optional[QObject] = None,
    ):
        if JetAudioService._instance is not None:
            raise RuntimeError("JetAudioService is already running in this process")
        super().__init__(parent)
        JetAudioService._instance = self

        self.media_session = media_session
        self.notification_manager = notification_manager
        self._platform_version_fn = platform_version_fn

        self.state = ServiceState.INACTIVE
        self.foreground_notification_id: Optional[int] = None
        self.foreground_notification = None

    @classmethod
    def instance(cls) -> Optional["JetAudioService"]:
        return cls._instance

    @property
    def is_foreground(self) -> bool:
        return self.foreground_notification_id is not None

    def _set_state(self, state: ServiceState) -> None:
        if self.state != state:
            self.state = state
            self.stateChanged.emit(state)

    def on_start_command(self, intent=None, flags: int = 0, start_id: int = 0) -> int:
        if self._platform_version_fn() >= NOTIFICATION_MIN_PLATFORM_VERSION:
            self.notification_manager.start_notification_service(
                media_session=self.media_session,
                media_session_service=self,
            )
        else:
            logger.info("Platform %s too old for the playback notification", self._platform_version_fn())
        self._set_state(ServiceState.ACTIVE)
        return START_STICKY

    def start_foreground(self, notification_id: int, notification) -> None:
        self.foreground_notification_id = notification_id
        self.foreground_notification = notification

    def on_get_session(self, controller_info: ControllerInfo) -> MediaSession:
        logger.debug("Session requested by %s", controller_info.package_name)
        return self.media_session

    def on_destroy(self) -> None:
        session = self.media_session
        session.release()

        player = session.player
        if player.playback_state != PlaybackState.IDLE:
            player.seek_to(0)
            player.play_when_ready = False
            player.stop()

        self.foreground_notification_id = None
        self.foreground_notification = None
        self._set_state(ServiceState.INACTIVE)
        if JetAudioService._instance is self:
            JetAudioService._instance = None
