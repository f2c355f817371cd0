from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox, QDialog, QFileDialog, QHBoxLayout, QLabel, QListWidget, QMessageBox,
    QPushButton, QSlider, QVBoxLayout,
)

from jetaudio.db.database import get_config, get_directories, set_config, set_directories
from jetaudio.db.models import Config


class MusicFoldersDialog(QDialog):
    """Music folders plus the playback settings stored next to them."""

    def __init__(self, db, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.resize(500, 440)
        self.db = db

        layout = QVBoxLayout(self)

        layout.addWidget(QLabel("Music folders"))
        self.list_widget = QListWidget()
        layout.addWidget(self.list_widget)

        btn_layout = QHBoxLayout()
        self.add_btn = QPushButton("Add Folder")
        self.remove_btn = QPushButton("Remove Selected")
        btn_layout.addWidget(self.add_btn)
        btn_layout.addWidget(self.remove_btn)
        layout.addLayout(btn_layout)

        config = get_config(self.db)

        volume_row = QHBoxLayout()
        volume_row.addWidget(QLabel("Volume"))
        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setValue(round(config.volume * 100))
        volume_row.addWidget(self.volume_slider, 1)
        layout.addLayout(volume_row)

        self.chk_notification = QCheckBox("Show playback notification (applies after restart)")
        self.chk_notification.setChecked(config.show_notification)
        layout.addWidget(self.chk_notification)

        self.save_btn = QPushButton("Save")
        layout.addWidget(self.save_btn)

        for d in get_directories(self.db):
            self.list_widget.addItem(d)

        self.add_btn.clicked.connect(lambda: self.add_folder())
        self.remove_btn.clicked.connect(self.remove_selected)
        self.save_btn.clicked.connect(self.save)

    def folders(self) -> list[str]:
        return [self.list_widget.item(i).text() for i in range(self.list_widget.count())]

    def config(self) -> Config:
        return Config(
            volume=self.volume_slider.value() / 100.0,
            show_notification=self.chk_notification.isChecked(),
        )

    def add_folder(self, path: str = ""):
        path = path or QFileDialog.getExistingDirectory(self, "Select Music Folder")
        if not path or path in self.folders():
            return
        self.list_widget.addItem(path)

    def remove_selected(self):
        for item in self.list_widget.selectedItems():
            self.list_widget.takeItem(self.list_widget.row(item))

    def save(self):
        folders = self.folders()
        if not folders:
            QMessageBox.warning(self, "No folders", "Please add at least one music folder.")
            return

        set_directories(self.db, folders)
        set_config(self.db, self.config())
        self.accept()
