from __future__ import annotations

import json
import logging
import os
import queue
import shutil
import socket
import subprocess
import tempfile
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

MPV_PATH_ENV = "JETAUDIO_MPV_PATH"


# -----------------------------
# Utilities
# -----------------------------

def _is_windows() -> bool:
    return os.name == "nt"


def default_ipc_endpoint(app_name: str = "jetaudio-mpv") -> str:
    """
    Windows: named pipe \\\\.\\pipe\\<name>
    Unix:    socket file in the temp dir, suffixed with our pid
    """
    if _is_windows():
        return rf"\\.\pipe\{app_name}-{os.getpid()}"
    return os.path.join(tempfile.gettempdir(), f"{app_name}-{os.getpid()}.sock")


def find_mpv_binary(preferred_path: Optional[str] = None) -> Optional[str]:
    """
    Priority: explicit path, $JETAUDIO_MPV_PATH, then PATH.
    """
    for candidate in (preferred_path, os.getenv(MPV_PATH_ENV)):
        if candidate and os.path.isfile(candidate):
            return candidate
    return shutil.which("mpv")


# -----------------------------
# Transport
# -----------------------------

class MpvJsonIpcTransport:
    """
    Line-delimited JSON over mpv's IPC endpoint.

    A daemon thread reads replies/events into a queue; the owner drains it
    with recv_nowait() from its own thread.
    """

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        self._stop = threading.Event()
        self._rx_thread: Optional[threading.Thread] = None
        self._rx_queue: "queue.Queue[dict[str, Any]]" = queue.Queue()
        self._tx_lock = threading.Lock()

        self._pipe_fh = None                         # Windows
        self._sock: Optional[socket.socket] = None   # Unix

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def connect(self, timeout_s: float = 3.0) -> None:
        # mpv creates the endpoint a little after the process starts
        deadline = time.monotonic() + timeout_s
        last_err: Optional[Exception] = None

        while time.monotonic() < deadline and not self._stop.is_set():
            try:
                if _is_windows():
                    self._pipe_fh = open(self.endpoint, "r+b", buffering=0)
                else:
                    s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
                    try:
                        s.connect(self.endpoint)
                    except OSError:
                        s.close()
                        raise
                    self._sock = s
                break
            except OSError as e:
                last_err = e
                time.sleep(0.05)

        if self._sock is None and self._pipe_fh is None:
            raise OSError(f"Failed to connect to mpv IPC at {self.endpoint}: {last_err!r}")

        self._rx_thread = threading.Thread(target=self._rx_loop, name="mpv-ipc-rx", daemon=True)
        self._rx_thread.start()

    def close(self) -> None:
        self._stop.set()
        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()
            self._sock = None
        if self._pipe_fh is not None:
            try:
                self._pipe_fh.close()
            except OSError:
                pass
            self._pipe_fh = None

    def send(self, payload: dict[str, Any]) -> None:
        line = (json.dumps(payload) + "\n").encode("utf-8")
        with self._tx_lock:
            if self._sock is not None:
                self._sock.sendall(line)
            elif self._pipe_fh is not None:
                self._pipe_fh.write(line)
                self._pipe_fh.flush()
            else:
                raise RuntimeError("mpv IPC not connected")

    def recv_nowait(self) -> Optional[dict[str, Any]]:
        try:
            return self._rx_queue.get_nowait()
        except queue.Empty:
            return None

    def _read_chunk(self) -> bytes:
        if self._sock is not None:
            return self._sock.recv(4096)
        if self._pipe_fh is not None:
            return self._pipe_fh.read(4096) or b""
        return b""

    def _rx_loop(self) -> None:
        buf = b""
        try:
            while not self._stop.is_set():
                try:
                    chunk = self._read_chunk()
                except OSError:
                    break
                if not chunk:
                    break

                buf += chunk
                while b"\n" in buf:
                    line, buf = buf.split(b"\n", 1)
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        msg = json.loads(line.decode("utf-8", errors="replace"))
                    except ValueError:
                        logger.debug("Dropping malformed mpv line: %r", line[:200])
                        continue
                    if isinstance(msg, dict):
                        self._rx_queue.put(msg)
        finally:
            self._stop.set()


# -----------------------------
# Backend
# -----------------------------

@dataclass
class MpvBackendConfig:
    mpv_path: Optional[str] = None
    ipc_endpoint: Optional[str] = None
    start_paused: bool = True
    audio_only: bool = True
    connect_timeout_s: float = 3.0


class MpvIpcBackend:
    """
    mpv process driven over JSON IPC.

    Call process_messages() regularly (the Player does it from a QTimer);
    property-change observers and request replies are dispatched there.
    """

    def __init__(self, config: Optional[MpvBackendConfig] = None):
        self.config = config or MpvBackendConfig()

        self._mpv_bin = find_mpv_binary(self.config.mpv_path)
        if not self._mpv_bin:
            raise FileNotFoundError("mpv binary not found")

        self.ipc = self.config.ipc_endpoint or default_ipc_endpoint()
        self._proc: Optional[subprocess.Popen] = None

        self._req_id = 0
        self._observers: dict[str, list[Callable[[Any], None]]] = {}

        self._time_pos_s = 0.0
        self._duration_s = 0.0
        self._paused = True
        self._idle = True

        self._transport = MpvJsonIpcTransport(self.ipc)

    # ---- lifecycle ----

    def start(self) -> None:
        if self._proc is not None:
            return

        if not _is_windows() and os.path.exists(self.ipc):
            os.remove(self.ipc)

        args = [self._mpv_bin, "--idle=yes", "--keep-open=no"]
        if self.config.audio_only:
            args += ["--no-video", "--audio-display=no"]
        args += [f"--input-ipc-server={self.ipc}", "--terminal=no", "--msg-level=all=warn"]
        if self.config.start_paused:
            args += ["--pause=yes"]

        logger.debug("Starting mpv: %s", " ".join(args))
        self._proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0) if _is_windows() else 0,
        )

        try:
            self._transport.connect(timeout_s=self.config.connect_timeout_s)
        except OSError:
            self.terminate()
            raise

        self.observe_property("time-pos", self._on_time_pos)
        self.observe_property("duration", self._on_duration)
        self.observe_property("pause", self._on_pause)
        self.observe_property("idle-active", self._on_idle)

    def terminate(self) -> None:
        """Stop playback and end the mpv process."""
        if not self._transport.closed:
            try:
                self.command("quit")
            except (OSError, RuntimeError):
                pass
        self._transport.close()

        if self._proc is not None:
            try:
                self._proc.wait(timeout=1.0)
            except subprocess.TimeoutExpired:
                self._proc.kill()
            self._proc = None

        if not _is_windows() and os.path.exists(self.ipc):
            try:
                os.remove(self.ipc)
            except OSError:
                pass

    # ---- protocol ----

    def _next_id(self) -> int:
        self._req_id += 1
        return self._req_id

    def command(self, *args: Any) -> None:
        self._transport.send({"command": list(args)})

    def set_property(self, name: str, value: Any) -> None:
        self.command("set_property", name, value)

    def observe_property(self, name: str, on_change: Callable[[Any], None]) -> None:
        if name not in self._observers:
            self._observers[name] = []
            self.command("observe_property", self._next_id(), name)
        self._observers[name].append(on_change)

    def process_messages(self, max_messages: int = 200) -> list[dict[str, Any]]:
        """
        Drain incoming messages. Command replies are dropped,
        property changes go to observers, other events are returned.
        """
        if self._transport.closed and self._proc is not None:
            raise ConnectionError("mpv IPC connection closed")

        events: list[dict[str, Any]] = []
        for _ in range(max_messages):
            msg = self._transport.recv_nowait()
            if msg is None:
                break

            if "request_id" in msg:
                continue

            if msg.get("event") == "property-change":
                name = msg.get("name")
                for cb in list(self._observers.get(name, ())):
                    try:
                        cb(msg.get("data"))
                    except Exception:
                        logger.exception("mpv observer for %s failed", name)
                continue

            if "event" in msg:
                events.append(msg)
        return events

    # ---- cached properties ----

    def _on_time_pos(self, value: Any) -> None:
        self._time_pos_s = float(value) if isinstance(value, (int, float)) else 0.0

    def _on_duration(self, value: Any) -> None:
        self._duration_s = float(value) if isinstance(value, (int, float)) else 0.0

    def _on_pause(self, value: Any) -> None:
        self._paused = bool(value)

    def _on_idle(self, value: Any) -> None:
        self._idle = bool(value)

    # ---- controls ----

    def load(self, path: str, *, start_playing: bool = True) -> None:
        self.command("loadfile", path, "replace")
        self.set_paused(not start_playing)

    def set_paused(self, paused: bool) -> None:
        self._paused = bool(paused)
        self.set_property("pause", bool(paused))

    def stop_playback(self) -> None:
        self.command("stop")
        self._time_pos_s = 0.0

    def seek_ms(self, ms: int, *, exact: bool = False) -> None:
        ms = max(0, int(ms))
        self._time_pos_s = ms / 1000.0
        self.command("seek", ms / 1000.0, "absolute+exact" if exact else "absolute")

    def set_volume_0_to_1(self, volume: float) -> None:
        v = min(1.0, max(0.0, float(volume)))
        self.set_property("volume", v * 100.0)  # mpv volume is 0..100

    # ---- getters ----

    def position_ms(self) -> int:
        return int(self._time_pos_s * 1000.0)

    def duration_ms(self) -> int:
        return int(self._duration_s * 1000.0)

    def is_paused(self) -> bool:
        return self._paused

    def is_idle(self) -> bool:
        return self._idle
