"""Grouped channel tree nodes."""
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from .channel import Channel


@dataclass(frozen=True)
class ChannelLeaf:
    """A single channel in the grouped tree."""

    channel: Channel

    @property
    def id(self) -> str:
        return self.channel.id

    @property
    def name(self) -> str:
        return self.channel.name

    def leaf_count(self) -> int:
        return 1

    def iter_channels(self) -> Iterator[Channel]:
        yield self.channel


@dataclass(frozen=True)
class ChannelGroup:
    """A synthetic cluster of related channels, possibly nested.

    The id is derived from the detected name so it stays stable across
    rebuilds and can be used as an expand/collapse key.
    """

    id: str
    name: str
    items: Tuple["ChannelItem", ...]

    def leaf_count(self) -> int:
        """Count descendant channels."""
        return sum(item.leaf_count() for item in self.items)

    def iter_channels(self) -> Iterator[Channel]:
        """Yield descendant channels depth-first in tree order."""
        for item in self.items:
            yield from item.iter_channels()


ChannelItem = Union[ChannelLeaf, ChannelGroup]
