"""Catalog state: playlist loading, blocked channels and category preferences."""
import asyncio
import logging
from dataclasses import replace
from typing import Callable, FrozenSet, Iterable, List, Optional, Set

from ..models.catalog import CatalogSnapshot
from ..models.category import Category
from ..models.channel import Channel
from .channel_grouper import ChannelGrouper
from .m3u_parser import M3UParser
from .playlist_source import PlaylistError, PlaylistSource
from .preferences import (
    BLOCKED_URLS_KEY,
    CATEGORY_ORDER_KEY,
    FETCH_TIMEOUT_KEY,
    PLAYLIST_URL_KEY,
    VISIBLE_CATEGORIES_KEY,
    Preferences,
)

logger = logging.getLogger(__name__)

# Searches shorter than this leave the channel lists untouched
MIN_SEARCH_LENGTH = 3


class PlaylistManager:
    """Owns the published catalog and the user's view preferences.

    Only the fetch/parse/group pipeline of ``load_playlist`` runs off the
    event loop. Everything else, including publication, happens on the loop
    that owns this object.
    """

    def __init__(
        self,
        preferences: Preferences,
        source: Optional[PlaylistSource] = None,
        grouper: Optional[ChannelGrouper] = None,
    ):
        self.preferences = preferences
        self.source = source or PlaylistSource(timeout=self._fetch_timeout())
        self.grouper = grouper or ChannelGrouper()

        self._snapshot = CatalogSnapshot()
        self._load_generation = 0
        self._on_change: List[Callable[[CatalogSnapshot], None]] = []

        self.visible_categories: Set[str] = set(preferences.get_list(VISIBLE_CATEGORIES_KEY))
        self.category_order: List[str] = preferences.get_list(CATEGORY_ORDER_KEY)
        self.blocked_urls: Set[str] = set(preferences.get_list(BLOCKED_URLS_KEY))

    def _fetch_timeout(self) -> Optional[float]:
        value = self.preferences.get(FETCH_TIMEOUT_KEY)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
        return None

    # Published state
    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def categories(self) -> List[Category]:
        return list(self._snapshot.categories)

    @property
    def is_loading(self) -> bool:
        return self._snapshot.is_loading

    @property
    def error_message(self) -> Optional[str]:
        return self._snapshot.error_message

    @property
    def saved_url(self) -> Optional[str]:
        return self.preferences.get(PLAYLIST_URL_KEY) or None

    @saved_url.setter
    def saved_url(self, value: Optional[str]):
        if value:
            self.preferences.set(PLAYLIST_URL_KEY, value)
        else:
            self.preferences.remove(PLAYLIST_URL_KEY)

    def on_change(self, callback: Callable[[CatalogSnapshot], None]):
        """Register callback for published catalog changes."""
        self._on_change.append(callback)

    def _publish(self, snapshot: CatalogSnapshot):
        self._snapshot = snapshot
        for callback in self._on_change:
            callback(snapshot)

    # Loading
    def set_playlist_source(self, location: str):
        """Remember the playlist URL or file path for the next load."""
        self.saved_url = location.strip()

    async def load_playlist(self):
        """Fetch, parse, filter and group the saved playlist, then publish it.

        On failure the previous catalog is kept and an error message is
        published. When loads overlap, the most recently started one wins.
        """
        location = self.saved_url
        if not location:
            return

        self._load_generation += 1
        generation = self._load_generation
        self._publish(replace(self._snapshot, is_loading=True, error_message=None, progress=None))

        try:
            await self._load(location, generation)
        finally:
            # Never leave the current load stuck in the loading state
            if generation == self._load_generation and self._snapshot.is_loading:
                self._publish(replace(
                    self._snapshot,
                    is_loading=False,
                    progress=None,
                    error_message=self._snapshot.error_message or "Failed to load playlist",
                ))

    async def _load(self, location: str, generation: int):
        def on_progress(downloaded: int, total: int):
            if generation == self._load_generation:
                self._publish(replace(self._snapshot, progress=downloaded / total))

        try:
            content = await self.source.fetch(location, progress_callback=on_progress)
            blocked = frozenset(self.blocked_urls)
            categories = await asyncio.to_thread(self._build_categories, content, blocked)
        except PlaylistError as e:
            if generation != self._load_generation:
                return
            logger.warning("Loading playlist %s failed: %s", location, e)
            self._publish(replace(self._snapshot, is_loading=False, progress=None, error_message=str(e)))
            return

        if generation != self._load_generation:
            logger.debug("Discarding result of superseded playlist load")
            return

        # Channels blocked while the parse was running
        blocked_since = self.blocked_urls - blocked
        if blocked_since:
            categories = self._without_urls(categories, blocked_since)

        snapshot = CatalogSnapshot(categories=tuple(self._ordered(categories)))
        names = snapshot.category_names()
        if not self.visible_categories:
            self.visible_categories = set(names)
            self._save_visible_categories()
        if not self.category_order:
            self.category_order = list(names)
            self._save_category_order()

        logger.info("Loaded %d channels in %d categories", snapshot.channel_count, len(names))
        self._publish(snapshot)

    def _build_categories(self, content: str, blocked: FrozenSet[str]) -> List[Category]:
        """Parse, drop blocked channels and empty categories, cache grouping."""
        categories = []
        for category in M3UParser.parse(content):
            channels = [ch for ch in category.channels if ch.url_key not in blocked]
            if not channels:
                continue
            categories.append(self._grouped(category.with_channels(channels)))
        return categories

    def _grouped(self, category: Category) -> Category:
        return category.with_grouping(self.grouper.group_channels(category.channels))

    def clear_playlist(self):
        """Forget the saved playlist and empty the catalog."""
        self._load_generation += 1
        self.saved_url = None
        self._publish(CatalogSnapshot())

    # Blocking
    def block_channel(self, channel: Channel):
        """Block a channel and drop it from the catalog without reloading."""
        key = channel.url_key
        self.blocked_urls.add(key)
        self._save_blocked_urls()

        categories = self._without_urls(self._snapshot.categories, {key})
        self._publish(replace(self._snapshot, categories=tuple(categories)))

    def _without_urls(self, categories: Iterable[Category], keys: Set[str]) -> List[Category]:
        """Drop channels with the given URL keys, regrouping what changed."""
        result = []
        for category in categories:
            remaining = [ch for ch in category.channels if ch.url_key not in keys]
            if len(remaining) == len(category.channels):
                result.append(category)
            elif remaining:
                result.append(self._grouped(category.with_channels(remaining)))
        return result

    async def unblock_channel(self, url_key: str):
        """Unblock a stream URL and reload so the channel reappears."""
        if url_key not in self.blocked_urls:
            return
        self.blocked_urls.discard(url_key)
        self._save_blocked_urls()
        await self.load_playlist()

    # Category preferences
    def toggle_category_visibility(self, name: str):
        """Show or hide a category."""
        if name in self.visible_categories:
            self.visible_categories.discard(name)
        else:
            self.visible_categories.add(name)
        self._save_visible_categories()

    def is_category_visible(self, name: str) -> bool:
        return name in self.visible_categories

    def move_category(self, source: Iterable[int], destination: int):
        """Move categories at the given positions before ``destination``.

        Positions refer to the current category list; the destination is
        counted before the moved entries are removed.
        """
        names = [category.name for category in self._snapshot.categories] or list(self.category_order)
        indices = sorted({i for i in source if 0 <= i < len(names)})
        if not indices:
            return

        destination = max(0, min(destination, len(names)))
        moved = [names[i] for i in indices]
        remaining = [name for i, name in enumerate(names) if i not in indices]
        insert_at = destination - sum(1 for i in indices if i < destination)
        remaining[insert_at:insert_at] = moved

        # Saved names not in this playlist keep their place at the end
        stale = [name for name in self.category_order if name not in remaining]
        self.category_order = remaining + stale
        self._save_category_order()
        self.apply_order()

    def apply_order(self):
        """Re-sort the catalog by the saved category order."""
        ordered = self._ordered(self._snapshot.categories)
        self._publish(replace(self._snapshot, categories=tuple(ordered)))

    def _ordered(self, categories: Iterable[Category]) -> List[Category]:
        positions = {}
        for index, name in enumerate(self.category_order):
            positions.setdefault(name, index)
        unknown = len(self.category_order)
        return sorted(categories, key=lambda category: positions.get(category.name, unknown))

    def filtered_categories(self, search_text: str = "") -> List[Category]:
        """Visible categories, narrowed to channels matching a search."""
        categories = [c for c in self._snapshot.categories if c.name in self.visible_categories]

        query = search_text.strip().casefold()
        if len(query) < MIN_SEARCH_LENGTH:
            return categories

        filtered = []
        for category in categories:
            matches = [ch for ch in category.channels if query in ch.name.casefold()]
            if matches:
                filtered.append(self._grouped(category.with_channels(matches)))
        return filtered

    # Persistence
    def _save_visible_categories(self):
        self.preferences.set_list(VISIBLE_CATEGORIES_KEY, self.visible_categories)

    def _save_category_order(self):
        self.preferences.set_list(CATEGORY_ORDER_KEY, self.category_order)

    def _save_blocked_urls(self):
        self.preferences.set_list(BLOCKED_URLS_KEY, self.blocked_urls)
