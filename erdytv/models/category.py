"""Category model for playlist groups."""
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

from .channel import Channel
from .channel_item import ChannelItem


@dataclass(frozen=True)
class Category:
    """A named bucket of channels taken from the playlist group-title."""

    name: str
    channels: Tuple[Channel, ...] = ()
    grouped_channels: Optional[Tuple[ChannelItem, ...]] = None  # Cached grouping
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def with_channels(self, channels: Iterable[Channel]) -> "Category":
        """Return a copy with a new channel list and no cached grouping."""
        return replace(self, channels=tuple(channels), grouped_channels=None)

    def with_grouping(self, items: Iterable[ChannelItem]) -> "Category":
        """Return a copy carrying a precomputed grouped tree."""
        return replace(self, grouped_channels=tuple(items))
