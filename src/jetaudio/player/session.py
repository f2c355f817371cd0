# src/jetaudio/player/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "jetaudio"


@dataclass(frozen=True)
class ControllerInfo:
    """Who is asking for the session (tray, window, an external remote)."""
    package_name: str
    uid: int = 0


class MediaSession(QObject):
    """
    The app's playback as seen by the rest of the system.

    Owns nothing but the reference to the player; releasing the session
    doesn't stop playback.
    """

    released = Signal()

    def __init__(self, player, session_id: str = DEFAULT_SESSION_ID):
        super().__init__()
        self.player = player
        self.session_id = session_id
        self._released = False

    @property
    def is_released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        logger.debug("Media session %s released", self.session_id)
        self.released.emit()
