import logging
import os
import sys

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication, QMessageBox

from jetaudio.core.state import AppState, Notify
from jetaudio.data.content_resolver import ContentResolverHelper
from jetaudio.data.repository import AudioRepository
from jetaudio.db.database import DB_FILE_NAME, get_config, initialize_database
from jetaudio.player.notification import JetAudioNotificationManager
from jetaudio.player.player import Player
from jetaudio.player.service import JetAudioService
from jetaudio.player.session import MediaSession
from jetaudio.ui.audio.audio_viewmodel import AudioViewModel
from jetaudio.ui.main_window import MainWindow

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "JETAUDIO_LOG_LEVEL"
DATA_DIR_ENV = "JETAUDIO_DATA_DIR"
DEBUG_SCHEMA_ENV = "JETAUDIO_DEBUG_SCHEMA"


def configure_logging() -> None:
    level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def debug_print_schema(db) -> None:
    for table in ("audio", "directories", "config_data"):
        cur = db.execute(f"PRAGMA table_info({table})")
        print(f"\n[{table} table schema]")
        for _cid, name, col_type, _notnull, _default, _pk in cur.fetchall():
            print(f"- {name} ({col_type})")


def get_app_data_dir() -> str:
    base = os.getenv(DATA_DIR_ENV) or QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base


def init_app_state() -> AppState:
    app_state = AppState()

    app_state.app_data_dir = get_app_data_dir()
    app_state.db_path = os.path.join(app_state.app_data_dir, DB_FILE_NAME)
    app_state.db = initialize_database(app_state.app_data_dir)
    app_state.config = get_config(app_state.db)

    if os.getenv(DEBUG_SCHEMA_ENV) == "1":
        debug_print_schema(app_state.db)

    try:
        app_state.player = Player(volume=app_state.config.volume)
        app_state.media_session = MediaSession(app_state.player)
        if app_state.config.show_notification:
            app_state.service = JetAudioService(app_state.media_session, JetAudioNotificationManager())
    except Exception as e:
        logger.exception("Audio player setup failed")
        app_state.player = None
        app_state.media_session = None
        app_state.service = None
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    return app_state


def main() -> int:
    configure_logging()

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("JetAudio")

    try:
        app_state = init_app_state()
    except Exception as e:
        logger.exception("Startup failed")
        QMessageBox.critical(None, "JetAudio", f"Failed to start: {e}")
        return 1

    repository = AudioRepository(ContentResolverHelper(app_state.db_path))
    service = app_state.service
    view_model = AudioViewModel(
        repository,
        app_state.player,
        start_service=service.on_start_command if service else None,
    )

    main_window = MainWindow(app_state, view_model)
    main_window.show()
    main_window.show_queued_notifications()
    view_model.load_audio_data()

    return qt_app.exec()
