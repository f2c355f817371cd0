import logging

from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout, QLabel, QMainWindow, QProgressBar, QStyle, QToolButton, QVBoxLayout, QWidget,
)

from jetaudio.data.models import EMPTY_AUDIO
from jetaudio.db.database import get_config, get_directories
from jetaudio.ui.audio.home import HomeScreen
from jetaudio.ui.dialogs.music_folders_dialog import MusicFoldersDialog
from jetaudio.ui.workers.library_scanner import LibraryScanner

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, app_state, view_model):
        super().__init__()
        self.setWindowTitle("JetAudio")
        self.resize(420, 720)
        self.app_state = app_state
        self.view_model = view_model
        self.scanner = None

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.layout.setSpacing(0)

        # --- Top bar ---
        top_bar = QHBoxLayout()
        top_bar.setContentsMargins(8, 4, 8, 4)
        top_bar.addStretch(1)

        self.btn_refresh = QToolButton()
        self.btn_refresh.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_BrowserReload))
        self.btn_refresh.setToolTip("Rescan music folders")
        self.btn_refresh.clicked.connect(self.refresh_library)

        self.btn_folders = QToolButton()
        self.btn_folders.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DirOpenIcon))
        self.btn_folders.setToolTip("Music folders and settings")
        self.btn_folders.clicked.connect(self.open_folders_dialog)

        top_bar.addWidget(self.btn_refresh)
        top_bar.addWidget(self.btn_folders)
        self.layout.addLayout(top_bar)

        # --- Home ---
        self.home = HomeScreen(
            on_progress=view_model.on_progress,
            on_start=view_model.on_start,
            on_item_click=view_model.on_item_click,
            on_next=view_model.on_next,
            current_playing_audio=EMPTY_AUDIO,
        )
        self.layout.addWidget(self.home, 1)

        # --- Scan progress (hidden when idle) ---
        self.scan_row = QWidget()
        self.scan_row.setObjectName("ScanRow")
        scan_layout = QHBoxLayout(self.scan_row)
        scan_layout.setContentsMargins(8, 6, 8, 6)
        self.scan_label = QLabel("Scanning…")
        self.progress_bar = QProgressBar()
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setRange(0, 100)
        scan_layout.addWidget(self.scan_label)
        scan_layout.addWidget(self.progress_bar, 1)
        self.layout.addWidget(self.scan_row)
        self.scan_row.setVisible(False)

        # --- Shortcuts ---
        QShortcut(QKeySequence("Space"), self, activated=view_model.on_start)
        QShortcut(QKeySequence("Ctrl+Right"), self, activated=view_model.on_next)

        view_model.stateChanged.connect(self._render)
        view_model.loadFailed.connect(self._on_load_failed)
        self.app_state.notification.connect(self._on_notify)

        self._render()

    # ------------------ state ------------------
    def _render(self):
        vm = self.view_model
        self.home.set_state(
            progress=vm.progress,
            is_audio_playing=vm.is_playing,
            current_playing_audio=vm.current_audio,
            audio_list=vm.audio_list,
        )

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def _on_load_failed(self, msg: str):
        self.app_state.notify(f"Could not load tracks: {msg}", "error")

    def _on_notify(self, n):
        if n.message:
            self.statusBar().showMessage(n.message, 4000)

    # ------------------ folders + scanning ------------------
    def open_folders_dialog(self):
        dlg = MusicFoldersDialog(self.app_state.db, self)
        if dlg.exec():
            self.apply_settings()
            self.refresh_library()

    def apply_settings(self):
        self.app_state.config = get_config(self.app_state.db)
        if self.app_state.player is not None:
            self.app_state.player.set_volume(self.app_state.config.volume)

    def refresh_library(self):
        directories = get_directories(self.app_state.db)
        if not directories:
            self.app_state.notify("No music folders configured.", "warning")
            return
        if self.scanner is not None and self.scanner.isRunning():
            return

        self.scan_row.setVisible(True)
        self.progress_bar.setRange(0, 0)
        self.btn_refresh.setEnabled(False)

        self.scanner = LibraryScanner(self.app_state.db_path, directories)
        self.scanner.progress_signal.connect(self._update_scan_progress)
        self.scanner.finished_signal.connect(self._scan_finished)
        self.scanner.start()

    def _update_scan_progress(self, scanned: int, total: int):
        if total <= 0:
            self.progress_bar.setRange(0, 0)
            return
        percent = max(0, min(100, int(scanned * 100 / total)))
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(percent)
        self.scan_label.setText(f"Scanning… {scanned}/{total} ({percent}%)")

    def _scan_finished(self, ok: bool, msg: str):
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.scan_row.setVisible(False)
        self.btn_refresh.setEnabled(True)

        if ok:
            self.view_model.load_audio_data()
            self.app_state.notify(msg, "success")
        else:
            self.app_state.notify(f"Library scanning failed: {msg}", "error")

    # ------------------ shutdown ------------------
    def closeEvent(self, event):
        if self.scanner is not None and self.scanner.isRunning():
            self.scanner.wait(3000)
        if self.app_state.service is not None:
            self.app_state.service.on_destroy()
        if self.app_state.player is not None:
            self.app_state.player.release()
        super().closeEvent(event)
