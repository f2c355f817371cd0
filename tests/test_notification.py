"""Tests for the tray notification manager."""

from __future__ import annotations

import pytest

from jetaudio.player.notification import APP_TITLE, NOTIFICATION_ID, JetAudioNotificationManager
from jetaudio.player.session import MediaSession


class FakeService:
    def __init__(self):
        self.foreground: list[tuple] = []

    def start_foreground(self, notification_id, notification):
        self.foreground.append((notification_id, notification))


@pytest.fixture
def session(fake_player) -> MediaSession:
    return MediaSession(fake_player)


@pytest.fixture
def manager(qapp):
    manager = JetAudioNotificationManager()
    yield manager
    manager.stop_notification_service()


def test_start_puts_service_in_foreground(manager, session) -> None:
    service = FakeService()

    manager.start_notification_service(session, service)

    assert manager.is_showing
    assert service.foreground == [(NOTIFICATION_ID, manager.tray)]


def test_idle_notification_shows_app_title(manager, session) -> None:
    manager.start_notification_service(session, FakeService())

    assert manager.tray.toolTip() == APP_TITLE
    assert manager.act_play.text() == "Play"
    assert not manager.act_next.isEnabled()


def test_follows_current_item_and_play_state(manager, session, fake_player, audio_list) -> None:
    fake_player.set_media_items(audio_list)
    manager.start_notification_service(session, FakeService())

    fake_player.seek_to_item(0)
    fake_player.play()

    assert manager.tray.toolTip() == "Title One\nSaid"
    assert manager.act_play.text() == "Pause"
    assert manager.act_next.isEnabled()

    fake_player.seek_to_item(2)
    fake_player.pause()

    assert manager.tray.toolTip() == "Title Three\nSaid"
    assert manager.act_play.text() == "Play"
    assert not manager.act_next.isEnabled()


def test_actions_drive_the_player(manager, session, fake_player, audio_list) -> None:
    fake_player.set_media_items(audio_list)
    fake_player.seek_to_item(0)
    manager.start_notification_service(session, FakeService())
    fake_player.calls.clear()

    manager.act_play.trigger()
    manager.act_next.trigger()

    assert fake_player.calls == [("play",), ("seek_to_next",), ("seek_to_item", 1)]


def test_session_release_removes_notification(manager, session) -> None:
    manager.start_notification_service(session, FakeService())

    session.release()

    assert not manager.is_showing
    assert manager.tray is None


def test_starting_twice_for_same_session_is_a_noop(manager, session) -> None:
    service = FakeService()
    manager.start_notification_service(session, service)
    tray = manager.tray

    manager.start_notification_service(session, service)

    assert manager.tray is tray
    assert len(service.foreground) == 1
