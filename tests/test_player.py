"""Playlist behaviour of Player on the Qt Multimedia backend."""

from __future__ import annotations

from dataclasses import replace

import pytest

from jetaudio.player import mpv_ipc
from jetaudio.player.mpv_ipc import find_mpv_binary
from jetaudio.player.player import PlaybackState, Player


@pytest.fixture
def player(qapp):
    p = Player(volume=0.0, use_mpv=False)
    yield p
    p.release()


def test_starts_idle_and_empty(player) -> None:
    assert player.playback_state == PlaybackState.IDLE
    assert player.current_media_item is None
    assert not player.has_next_item()
    assert player.backend_name() == "qt-multimedia"


def test_seek_to_item_prepares_it(player, audio_list) -> None:
    changed = []
    player.mediaItemChanged.connect(changed.append)
    player.set_media_items(audio_list)

    player.seek_to_item(1)

    assert player.current_media_item == audio_list[1]
    assert player.playback_state == PlaybackState.READY
    assert changed == [audio_list[1]]


def test_seek_to_missing_item_raises(player, audio_list) -> None:
    player.set_media_items(audio_list)

    with pytest.raises(IndexError):
        player.seek_to_item(3)


def test_seek_to_next_stops_at_last_item(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(1)

    player.seek_to_next()
    assert player.current_media_item == audio_list[2]
    assert not player.has_next_item()

    player.seek_to_next()
    assert player.current_media_item == audio_list[2]


def test_replacing_playlist_keeps_current_item(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(2)

    player.set_media_items(list(reversed(audio_list)))

    assert player.current_index == 0
    assert player.current_media_item == audio_list[2]


def test_end_of_item_advances_then_ends(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(1)

    player._on_item_ended()
    assert player.current_media_item == audio_list[2]

    player._on_item_ended()
    assert player.playback_state == PlaybackState.ENDED
    assert not player.is_playing()


def test_stop_returns_to_idle(player, audio_list) -> None:
    states = []
    player.playbackStateChanged.connect(states.append)
    player.set_media_items(audio_list)
    player.seek_to_item(0)

    player.stop()

    assert player.playback_state == PlaybackState.IDLE
    assert states == [PlaybackState.READY, PlaybackState.IDLE]


def test_play_when_ready_is_remembered(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(0)

    player.play_when_ready = True
    assert player.play_when_ready

    player.pause()
    assert not player.play_when_ready


def test_find_mpv_prefers_explicit_path(tmp_path, monkeypatch) -> None:
    binary = tmp_path / "mpv"
    binary.write_bytes(b"")
    monkeypatch.delenv(mpv_ipc.MPV_PATH_ENV, raising=False)

    assert find_mpv_binary(str(binary)) == str(binary)


def test_find_mpv_uses_env_then_path(tmp_path, monkeypatch) -> None:
    binary = tmp_path / "mpv-custom"
    binary.write_bytes(b"")
    monkeypatch.setenv(mpv_ipc.MPV_PATH_ENV, str(binary))
    assert find_mpv_binary() == str(binary)

    monkeypatch.setenv(mpv_ipc.MPV_PATH_ENV, str(tmp_path / "missing"))
    monkeypatch.setattr(mpv_ipc.shutil, "which", lambda name: "/usr/bin/mpv")
    assert find_mpv_binary() == "/usr/bin/mpv"


def test_current_item_is_matched_by_path_not_id(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(1)
    changes = []
    player.mediaItemChanged.connect(changes.append)

    # same files, ids handed out again in another order
    renumbered = [replace(a, id=a.id + 10) for a in reversed(audio_list)]
    player.set_media_items(renumbered)

    assert player.current_media_item.data == audio_list[1].data
    assert player.current_index == 1
    assert changes == [renumbered[1]]


def test_current_item_leaving_playlist_stops_playback(player, audio_list) -> None:
    player.set_media_items(audio_list)
    player.seek_to_item(0)
    changes = []
    player.mediaItemChanged.connect(changes.append)

    player.set_media_items(audio_list[1:])

    assert player.current_media_item is None
    assert player.playback_state == PlaybackState.IDLE
    assert changes == [None]


class QueueTransport:
    def __init__(self, messages):
        self.messages = list(messages)
        self.closed = False
        self.sent = []

    def recv_nowait(self):
        return self.messages.pop(0) if self.messages else None

    def send(self, obj):
        self.sent.append(obj)


def test_mpv_messages_drop_replies_and_return_events(monkeypatch) -> None:
    monkeypatch.setattr(mpv_ipc, "find_mpv_binary", lambda preferred=None: "/usr/bin/mpv")
    backend = mpv_ipc.MpvIpcBackend(mpv_ipc.MpvBackendConfig())
    backend._transport = QueueTransport([
        {"request_id": 7, "error": "success", "data": 1.5},
        {"event": "property-change", "name": "time-pos", "data": 12.5},
        {"event": "end-file", "reason": "eof"},
    ])
    backend.observe_property("time-pos", backend._on_time_pos)

    events = backend.process_messages()

    assert events == [{"event": "end-file", "reason": "eof"}]
    assert backend.position_ms() == 12_500
    assert backend._transport.sent == [{"command": ["observe_property", 1, "time-pos"]}]
