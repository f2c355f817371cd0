# ui/workers/library_scanner.py
import logging

from PySide6.QtCore import QThread, Signal

from jetaudio.db.database import add_media_store_entries, connect, remove_missing_media_store_entries
from jetaudio.library.scan_library import iter_audio_paths, new_media_store_entry_from_path

logger = logging.getLogger(__name__)

BATCH_SIZE = 100


class LibraryScanner(QThread):
    progress_signal = Signal(int, int)     # scanned, total
    finished_signal = Signal(bool, str)    # ok, message

    def __init__(self, db_path: str, directories: list[str]):
        super().__init__()
        self.db_path = db_path
        self.directories = directories

    def run(self):
        try:
            paths = iter_audio_paths(self.directories)
            total = len(paths)
            scanned = 0
            logger.info("Scanning %d audio files", total)

            # sqlite connections can't cross threads
            db = connect(self.db_path)
            try:
                # upsert by path so unchanged files keep their ids
                kept_paths = []
                batch = []
                for p in paths:
                    entry = new_media_store_entry_from_path(p)
                    scanned += 1

                    if entry is not None:
                        batch.append(entry)
                        kept_paths.append(entry.data)

                    if len(batch) >= BATCH_SIZE:
                        add_media_store_entries(db, batch)
                        batch.clear()
                        self.progress_signal.emit(scanned, total)

                if batch:
                    add_media_store_entries(db, batch)
                remove_missing_media_store_entries(db, kept_paths)
            finally:
                db.close()

            self.progress_signal.emit(scanned, total)
            self.finished_signal.emit(True, "Library scanning complete!")
        except Exception as e:
            logger.exception("Library scan failed")
            self.finished_signal.emit(False, f"Scan failed: {e}")
