"""Tests for player state reported by the video component."""
import pytest

pytest.importorskip("flet_video")

from erdytv.components.video_player import VideoPlayerComponent
from erdytv.services.preferences import PLAYER_VOLUME_KEY, Preferences


@pytest.fixture
def player(tmp_path):
    return VideoPlayerComponent(Preferences(str(tmp_path)))


class TestPlaybackEvents:

    def test_stream_end_reports_stopped(self, player):
        states = []
        buffering = []
        player.on_state_change(states.append)
        player.on_buffering(buffering.append)

        player._on_video_completed(None)

        assert states == [False]
        assert buffering == [False]

    def test_seek_without_channel_is_ignored(self, player):
        positions = []
        player.on_position_change(positions.append)
        player.seek(30)
        assert positions == []


class TestVolume:

    def test_volume_is_clamped_and_saved(self, player, tmp_path):
        player.set_volume(1.5)
        assert Preferences(str(tmp_path)).get(PLAYER_VOLUME_KEY) == 1.0

        player.set_volume(-1)
        assert Preferences(str(tmp_path)).get(PLAYER_VOLUME_KEY) == 0.0

    def test_saved_volume_is_restored(self, tmp_path):
        prefs = Preferences(str(tmp_path))
        prefs.set(PLAYER_VOLUME_KEY, 0.5)
        player = VideoPlayerComponent(prefs)
        assert player._volume_slider.value == 50
