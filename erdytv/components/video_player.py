"""Video player component wrapping flet_video for playlist channels."""
import logging
from typing import Callable, List, Optional

import flet as ft
import flet_video as fv

from ..models.channel import Channel
from ..services.preferences import PLAYER_VOLUME_KEY, Preferences

logger = logging.getLogger(__name__)

SKIP_SECONDS = 30


class VideoPlayerComponent(ft.Column):
    """Player surface plus the playback commands the catalog UI needs.

    Volume is kept as 0.0-1.0 and persisted; seeking is ignored for live
    channels. flet_video has no position stream, so position callbacks fire
    on seeks only. The end of a stream is reported as a state change.
    """

    def __init__(
        self,
        preferences: Preferences,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        super().__init__()
        self._preferences = preferences
        self._on_error = on_error
        self._current_channel: Optional[Channel] = None
        self._is_playing = False
        self._is_live = True
        self._volume = self._saved_volume()

        self._state_callbacks: List[Callable[[bool], None]] = []
        self._position_callbacks: List[Callable[[float], None]] = []
        self._buffering_callbacks: List[Callable[[bool], None]] = []

        self._build_ui()

    def _saved_volume(self) -> float:
        value = self._preferences.get(PLAYER_VOLUME_KEY, 1.0)
        if not isinstance(value, (int, float)):
            return 1.0
        return min(1.0, max(0.0, float(value)))

    def _build_ui(self):
        """Build the video player UI."""
        self._video = fv.Video(
            expand=True,
            fill_color="#000000",
            aspect_ratio=16/9,
            volume=self._volume * 100,
            autoplay=True,
            show_controls=False,
            fit=ft.ImageFit.CONTAIN,
            on_loaded=self._on_video_loaded,
            on_error=self._on_video_error,
            on_completed=self._on_video_completed,
        )

        self._channel_info = ft.Text("", color=ft.Colors.WHITE, size=14, weight=ft.FontWeight.W_600)

        self._play_btn = ft.IconButton(
            icon=ft.Icons.PAUSE_ROUNDED,
            icon_color=ft.Colors.WHITE70,
            on_click=lambda e: self.toggle_play_pause(),
        )
        self._back_btn = ft.IconButton(
            icon=ft.Icons.REPLAY_30_ROUNDED,
            icon_color=ft.Colors.WHITE70,
            tooltip="Back 30 seconds",
            on_click=lambda e: self.skip_backward(),
        )
        self._forward_btn = ft.IconButton(
            icon=ft.Icons.FORWARD_30_ROUNDED,
            icon_color=ft.Colors.WHITE70,
            tooltip="Forward 30 seconds",
            on_click=lambda e: self.skip_forward(),
        )

        self._volume_slider = ft.Slider(
            min=0,
            max=100,
            value=self._volume * 100,
            width=120,
            active_color=ft.Colors.PURPLE_400,
            on_change=lambda e: self.set_volume(float(e.control.value) / 100),
        )

        self._loading_indicator = ft.ProgressRing(visible=False, width=32, height=32)

        self._now_playing_bar = ft.Container(
            content=ft.Row(
                [
                    self._back_btn,
                    self._play_btn,
                    self._forward_btn,
                    ft.Container(content=self._channel_info, expand=True),
                    self._loading_indicator,
                    ft.Icon(ft.Icons.VOLUME_UP_ROUNDED, color=ft.Colors.WHITE70, size=20),
                    self._volume_slider,
                ],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.padding.symmetric(horizontal=12, vertical=6),
            bgcolor="#12121f",
            visible=False,
        )

        self.controls = [
            ft.Container(content=self._video, expand=True, bgcolor="#000000"),
            self._now_playing_bar,
        ]
        self.spacing = 0
        self.expand = True

    # Event registration
    def on_state_change(self, callback: Callable[[bool], None]):
        self._state_callbacks.append(callback)

    def on_position_change(self, callback: Callable[[float], None]):
        self._position_callbacks.append(callback)

    def on_buffering(self, callback: Callable[[bool], None]):
        self._buffering_callbacks.append(callback)

    def _set_playing(self, playing: bool):
        self._is_playing = playing
        self._play_btn.icon = ft.Icons.PAUSE_ROUNDED if playing else ft.Icons.PLAY_ARROW_ROUNDED
        for callback in self._state_callbacks:
            callback(playing)

    def _set_buffering(self, buffering: bool):
        self._loading_indicator.visible = buffering
        for callback in self._buffering_callbacks:
            callback(buffering)

    # Playback commands
    def load(self, channel: Channel):
        """Replace whatever is playing with a channel's stream."""
        self._current_channel = channel
        self._is_live = channel.is_live
        self._channel_info.value = channel.name
        self._back_btn.visible = not self._is_live
        self._forward_btn.visible = not self._is_live
        self._now_playing_bar.visible = True
        self._set_buffering(True)

        self._video.stop()
        # Drop everything queued before adding the new stream
        while self._video.playlist:
            self._video.playlist_remove(len(self._video.playlist) - 1)
        self._video.playlist_add(fv.VideoMedia(resource=channel.stream_url))
        self._video.jump_to(0)
        self.play()

    def play(self):
        self._video.play()
        self._set_playing(True)
        self._refresh()

    def pause(self):
        self._video.pause()
        self._set_playing(False)
        self._refresh()

    def toggle_play_pause(self):
        if self._is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float):
        """Jump to a position. Live streams cannot seek."""
        if self._is_live or self._current_channel is None:
            return
        position = max(0.0, seconds)
        self._video.seek(int(position * 1000))
        for callback in self._position_callbacks:
            callback(position)

    def _current_seconds(self) -> float:
        position = self._video.get_current_position()
        return (position or 0) / 1000

    def skip_forward(self):
        self.seek(self._current_seconds() + SKIP_SECONDS)

    def skip_backward(self):
        self.seek(self._current_seconds() - SKIP_SECONDS)

    def set_volume(self, value: float):
        """Set volume between 0.0 and 1.0 and remember it."""
        self._volume = min(1.0, max(0.0, value))
        self._video.volume = self._volume * 100
        self._volume_slider.value = self._volume * 100
        self._preferences.set(PLAYER_VOLUME_KEY, self._volume)
        self._refresh()

    def stop(self):
        """Stop playback and hide the player bar."""
        self._video.stop()
        self._set_playing(False)
        self._set_buffering(False)
        self._now_playing_bar.visible = False
        self._refresh()

    # flet_video events
    def _on_video_loaded(self, e):
        self._set_buffering(False)
        self._refresh()

    def _on_video_completed(self, e):
        logger.info("Stream ended: %s", self._current_channel)
        self._set_buffering(False)
        self._set_playing(False)
        self._refresh()

    def _on_video_error(self, e):
        logger.warning("Playback failed for %s: %s", self._current_channel, getattr(e, "data", None))
        self._set_buffering(False)
        self._set_playing(False)
        if self._on_error:
            self._on_error("Failed to load stream")
        self._refresh()

    def _refresh(self):
        if self.page:
            self.update()
