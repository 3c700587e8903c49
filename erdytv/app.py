"""Main application module."""
import flet as ft

from .components.channel_list import CategoryManager, ChannelList
from .components.video_player import VideoPlayerComponent
from .models.catalog import CatalogSnapshot
from .models.channel import Channel
from .services.playlist_manager import PlaylistManager
from .services.preferences import SHOW_CHANNEL_ICONS_KEY, Preferences


class ErdyTVApp:
    """IPTV player: onboarding, category sidebar and player."""

    def __init__(self, page: ft.Page):
        self.page = page
        self.preferences = Preferences()
        self.manager = PlaylistManager(self.preferences)
        self._search_text = ""
        self._rendered_categories = None

        self._setup_page()
        self._setup_views()
        self.manager.on_change(self._on_catalog_change)

        if self.manager.saved_url:
            self._show_main()
            self.page.run_task(self.manager.load_playlist)
        else:
            self._show_onboarding()

    def _setup_page(self):
        """Configure the page settings."""
        self.page.title = "ErdyTV"
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.bgcolor = "#0a0a0f"
        self.page.padding = 0
        self.page.spacing = 0

        self.page.window.width = 1280
        self.page.window.height = 720
        self.page.window.min_width = 800
        self.page.window.min_height = 600

        self.page.theme = ft.Theme(color_scheme_seed=ft.Colors.PURPLE)
        self.page.on_keyboard_event = self._on_keyboard

    def _setup_views(self):
        """Initialize all views."""
        self._player = VideoPlayerComponent(
            preferences=self.preferences,
            on_error=self._show_message,
        )

        self._channel_list = ChannelList(
            on_channel_select=self._on_channel_select,
            on_channel_block=self.manager.block_channel,
            on_search=self._on_search,
            on_manage_categories=self._show_category_manager,
            show_icons=self.preferences.get(SHOW_CHANNEL_ICONS_KEY, True),
        )

        self._url_field = ft.TextField(
            hint_text="https://example.com/playlist.m3u",
            width=480,
            on_submit=lambda e: self._submit_playlist(),
        )
        self._onboarding = ft.Container(
            content=ft.Column(
                [
                    ft.Icon(ft.Icons.LIVE_TV_ROUNDED, size=64, color=ft.Colors.PURPLE_300),
                    ft.Text("Welcome to ErdyTV", size=28, weight=ft.FontWeight.BOLD),
                    ft.Text("Enter the URL or path of your M3U playlist", color=ft.Colors.WHITE54),
                    self._url_field,
                    ft.ElevatedButton("Load Playlist", on_click=lambda e: self._submit_playlist()),
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
                spacing=16,
            ),
            alignment=ft.alignment.center,
            expand=True,
        )

        self._icons_switch = ft.Switch(
            label="Show Channel Icons",
            value=self.preferences.get(SHOW_CHANNEL_ICONS_KEY, True),
            on_change=self._on_icons_toggle,
        )
        self._main = ft.Column(
            [
                ft.Container(
                    content=ft.Row(
                        [
                            ft.Text("ErdyTV", size=18, weight=ft.FontWeight.BOLD),
                            ft.Row(
                                [
                                    self._icons_switch,
                                    ft.IconButton(
                                        icon=ft.Icons.REFRESH_ROUNDED,
                                        tooltip="Reload playlist",
                                        on_click=lambda e: self.page.run_task(self.manager.load_playlist),
                                    ),
                                    ft.IconButton(
                                        icon=ft.Icons.LOGOUT_ROUNDED,
                                        tooltip="Change playlist",
                                        on_click=lambda e: self._change_playlist(),
                                    ),
                                ],
                            ),
                        ],
                        alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                    ),
                    padding=ft.padding.symmetric(horizontal=16, vertical=8),
                ),
                ft.Row([self._channel_list, self._player], expand=True, spacing=0),
            ],
            expand=True,
            spacing=0,
        )

        self._container = ft.Container(expand=True)
        self.page.add(self._container)

    def _show_onboarding(self):
        self._container.content = self._onboarding
        self.page.update()

    def _show_main(self):
        self._container.content = self._main
        self._render_catalog(self.manager.snapshot)
        self.page.update()

    def _submit_playlist(self):
        location = (self._url_field.value or "").strip()
        if not location:
            return
        self.manager.set_playlist_source(location)
        self._show_main()
        self.page.run_task(self.manager.load_playlist)

    def _change_playlist(self):
        self._player.stop()
        self.manager.clear_playlist()
        self._url_field.value = ""
        self._show_onboarding()

    def _on_catalog_change(self, snapshot: CatalogSnapshot):
        """Refresh the sidebar from a newly published catalog."""
        if snapshot.categories is self._rendered_categories:
            # Only loading state or progress changed
            self._channel_list.set_loading(snapshot.is_loading, snapshot.progress)
            self._channel_list.set_error(snapshot.error_message)
        else:
            self._render_catalog(snapshot)
        self.page.update()

    def _render_catalog(self, snapshot: CatalogSnapshot):
        self._rendered_categories = snapshot.categories
        self._channel_list.set_loading(snapshot.is_loading, snapshot.progress)
        self._channel_list.set_error(snapshot.error_message)
        self._channel_list.set_categories(self.manager.filtered_categories(self._search_text))

    def _on_search(self, text: str):
        self._search_text = text
        self._render_catalog(self.manager.snapshot)
        self.page.update()

    def _on_channel_select(self, channel: Channel):
        self._player.load(channel)

    def _show_category_manager(self):
        dialog = CategoryManager(
            get_categories=lambda: self.manager.categories,
            is_visible=self.manager.is_category_visible,
            on_toggle=self._toggle_category,
            on_move=lambda index, destination: self.manager.move_category([index], destination),
        )
        self.page.open(dialog)

    def _toggle_category(self, name: str):
        self.manager.toggle_category_visibility(name)
        self._render_catalog(self.manager.snapshot)
        self.page.update()

    def _on_icons_toggle(self, e):
        show_icons = bool(e.control.value)
        self.preferences.set(SHOW_CHANNEL_ICONS_KEY, show_icons)
        self._channel_list.set_show_icons(show_icons)
        self.page.update()

    def _show_message(self, message: str):
        self.page.open(ft.SnackBar(content=ft.Text(message)))

    def _on_keyboard(self, e: ft.KeyboardEvent):
        """Handle global keyboard events."""
        if e.key == "P" and e.ctrl:
            self._player.toggle_play_pause()
        elif e.key == "F" and e.ctrl:
            self.page.window.full_screen = not self.page.window.full_screen
            self.page.update()


def main(page: ft.Page):
    """Application entry point."""
    ErdyTVApp(page)
