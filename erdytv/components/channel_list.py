"""Sidebar listing categories with their grouped channel trees."""
from typing import Callable, List, Optional, Set

import flet as ft

from ..models.category import Category
from ..models.channel import Channel
from ..models.channel_item import ChannelGroup, ChannelItem, ChannelLeaf


class ChannelList(ft.Container):
    """Category sidebar rendering the cached grouped tree of each category.

    Expanded state is tracked by category id and group id so that it
    survives rebuilds caused by searching or blocking.
    """

    def __init__(
        self,
        on_channel_select: Optional[Callable[[Channel], None]] = None,
        on_channel_block: Optional[Callable[[Channel], None]] = None,
        on_search: Optional[Callable[[str], None]] = None,
        on_manage_categories: Optional[Callable[[], None]] = None,
        show_icons: bool = True,
    ):
        super().__init__()
        self._on_channel_select = on_channel_select
        self._on_channel_block = on_channel_block
        self._on_search = on_search
        self._on_manage_categories = on_manage_categories
        self._show_icons = show_icons
        self._categories: List[Category] = []
        self._expanded: Set[str] = set()
        self._selected_channel: Optional[Channel] = None

        self._build_ui()

    def _build_ui(self):
        """Build the sidebar UI."""
        self._search_field = ft.TextField(
            hint_text="Search channels...",
            prefix_icon=ft.Icons.SEARCH_ROUNDED,
            border_radius=30,
            height=44,
            text_size=14,
            bgcolor="#1a1a2e",
            border_color=ft.Colors.TRANSPARENT,
            focused_border_color=ft.Colors.PURPLE_400,
            color=ft.Colors.WHITE,
            on_change=self._on_search_change,
            expand=True,
        )

        self._manage_btn = ft.IconButton(
            icon=ft.Icons.FILTER_LIST_ROUNDED,
            icon_color=ft.Colors.WHITE70,
            tooltip="Manage categories",
            on_click=lambda e: self._on_manage_categories() if self._on_manage_categories else None,
        )

        self._tree = ft.ListView(spacing=2, expand=True)
        self._progress = ft.ProgressRing()
        self._loading = ft.Container(
            content=ft.Column(
                [self._progress, ft.Text("Loading Channels...", size=12, color=ft.Colors.WHITE54)],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            alignment=ft.alignment.center,
            visible=False,
        )
        self._error = ft.Text("", color=ft.Colors.RED_300, size=12, visible=False)

        self.content = ft.Column(
            [
                ft.Row([self._search_field, self._manage_btn], spacing=8),
                self._error,
                ft.Stack([self._tree, self._loading], expand=True),
            ],
            spacing=8,
            expand=True,
        )
        self.padding = ft.padding.all(12)
        self.bgcolor = "#0f0f1a"
        self.width = 340

    def set_categories(self, categories: List[Category]):
        """Replace the rendered categories."""
        self._categories = categories
        self._tree.controls = [self._build_category(category) for category in categories]

    def set_loading(self, loading: bool, progress: Optional[float] = None):
        """Show the loading overlay; a None progress spins indefinitely."""
        self._loading.visible = loading
        self._progress.value = progress

    def set_error(self, message: Optional[str]):
        self._error.value = message or ""
        self._error.visible = bool(message)

    def set_show_icons(self, show_icons: bool):
        self._show_icons = show_icons
        self.set_categories(self._categories)

    def _build_category(self, category: Category) -> ft.Control:
        items = category.grouped_channels
        if items is None:
            items = tuple(ChannelLeaf(ch) for ch in category.channels)

        return ft.ExpansionTile(
            title=ft.Text(category.name, weight=ft.FontWeight.BOLD, color=ft.Colors.WHITE),
            subtitle=ft.Text(f"{len(category.channels)} channels", size=11, color=ft.Colors.WHITE38),
            initially_expanded=category.id in self._expanded,
            on_change=lambda e, key=category.id: self._on_expand(key, e.data),
            controls=[self._build_item(item) for item in items],
        )

    def _build_item(self, item: ChannelItem) -> ft.Control:
        if isinstance(item, ChannelGroup):
            return ft.ExpansionTile(
                title=ft.Text(item.name, color=ft.Colors.WHITE),
                subtitle=ft.Text(f"{item.leaf_count()} items", size=11, color=ft.Colors.WHITE38),
                leading=ft.Icon(ft.Icons.FOLDER_ROUNDED, color=ft.Colors.PURPLE_200, size=18),
                initially_expanded=item.id in self._expanded,
                on_change=lambda e, key=item.id: self._on_expand(key, e.data),
                controls=[self._build_item(child) for child in item.items],
                tile_padding=ft.padding.only(left=16, right=8),
            )
        return self._build_channel_tile(item.channel)

    def _build_channel_tile(self, channel: Channel) -> ft.Control:
        """Build a channel list tile."""
        leading = None
        if self._show_icons:
            icon = ft.Icon(
                ft.Icons.LIVE_TV_ROUNDED if channel.is_live else ft.Icons.MOVIE_ROUNDED,
                color=ft.Colors.WHITE54,
                size=18,
            )
            if channel.logo_url:
                leading = ft.Image(
                    src=channel.logo_url,
                    width=30,
                    height=30,
                    fit=ft.ImageFit.CONTAIN,
                    error_content=icon,
                )
            else:
                leading = icon

        is_selected = self._selected_channel is not None and self._selected_channel.id == channel.id
        return ft.ListTile(
            leading=leading,
            title=ft.Text(channel.name, size=13, color=ft.Colors.WHITE, max_lines=1),
            trailing=ft.IconButton(
                icon=ft.Icons.BLOCK_ROUNDED,
                icon_color=ft.Colors.WHITE24,
                icon_size=16,
                tooltip="Remove channel",
                on_click=lambda e, ch=channel: self._block(ch),
            ),
            selected=is_selected,
            dense=True,
            on_click=lambda e, ch=channel: self._select_channel(ch),
        )

    def _on_expand(self, key: str, data):
        if data == "true":
            self._expanded.add(key)
        else:
            self._expanded.discard(key)

    def _select_channel(self, channel: Channel):
        self._selected_channel = channel
        if self._on_channel_select:
            self._on_channel_select(channel)

    def _block(self, channel: Channel):
        if self._on_channel_block:
            self._on_channel_block(channel)

    def _on_search_change(self, e):
        if self._on_search:
            self._on_search(self._search_field.value or "")


class CategoryManager(ft.AlertDialog):
    """Dialog to show, hide and reorder categories."""

    def __init__(
        self,
        get_categories: Callable[[], List[Category]],
        is_visible: Callable[[str], bool],
        on_toggle: Callable[[str], None],
        on_move: Callable[[int, int], None],
    ):
        super().__init__()
        self._get_categories = get_categories
        self._is_visible = is_visible
        self._on_toggle = on_toggle
        self._on_move = on_move

        self._rows = ft.Column(scroll=ft.ScrollMode.AUTO, spacing=2, height=420, width=360)
        self.title = ft.Text("Manage Categories")
        self.content = self._rows
        self.actions = [ft.TextButton("Done", on_click=lambda e: self.page.close(self))]
        self.refresh()

    def refresh(self):
        """Rebuild the rows from the current category order."""
        categories = self._get_categories()
        self._rows.controls = [
            ft.Row(
                [
                    ft.Switch(
                        label=category.name,
                        value=self._is_visible(category.name),
                        on_change=lambda e, name=category.name: self._toggle(name),
                        expand=True,
                    ),
                    ft.IconButton(
                        icon=ft.Icons.ARROW_UPWARD_ROUNDED,
                        disabled=index == 0,
                        on_click=lambda e, i=index: self._move(i, i - 1),
                    ),
                    ft.IconButton(
                        icon=ft.Icons.ARROW_DOWNWARD_ROUNDED,
                        disabled=index == len(categories) - 1,
                        on_click=lambda e, i=index: self._move(i, i + 2),
                    ),
                ],
            )
            for index, category in enumerate(categories)
        ]

    def _toggle(self, name: str):
        self._on_toggle(name)

    def _move(self, index: int, destination: int):
        self._on_move(index, destination)
        self.refresh()
        if self.page:
            self.update()
