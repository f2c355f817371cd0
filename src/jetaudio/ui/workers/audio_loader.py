# ui/workers/audio_loader.py
import asyncio
import logging

from PySide6.QtCore import QThread, Signal

logger = logging.getLogger(__name__)


class AudioLoader(QThread):
    """Runs AudioRepository.get_audio_data() off the GUI thread."""

    loaded = Signal(object)   # list[Audio]
    failed = Signal(str)

    def __init__(self, repository, parent=None):
        super().__init__(parent)
        self.repository = repository

    def run(self):
        try:
            audio_list = asyncio.run(self.repository.get_audio_data())
        except Exception as e:
            logger.exception("Loading audio list failed")
            self.failed.emit(str(e))
            return
        self.loaded.emit(audio_list)
