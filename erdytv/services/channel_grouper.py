"""Heuristic grouping of flat channel lists into series and season trees."""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.channel import Channel
from ..models.channel_item import ChannelGroup, ChannelItem, ChannelLeaf


@dataclass(frozen=True)
class GroupingConfig:
    """Tunable thresholds for the grouping heuristics."""

    min_grouping_size: int = 3   # Smaller lists are returned ungrouped
    min_cluster_size: int = 3    # Smallest run that becomes a group
    min_prefix_length: int = 5   # Common prefix must be longer than this
    # Keep the season marker in the series key ("Show S01") instead of
    # grouping at series level ("Show") with season sub-groups
    season_in_group_key: bool = False


class ChannelGrouper:
    """Clusters related channels using series patterns and common prefixes."""

    # Series patterns in priority order, first match wins
    SEASON_SERIES_PATTERN = re.compile(r"^(.*?)\s+S(\d+)", re.IGNORECASE)  # Show S01E01
    EPISODE_SERIES_PATTERN = re.compile(r"^(.*?)\s+E(\d+)", re.IGNORECASE)  # Show E01
    SERIES_PATTERNS = [SEASON_SERIES_PATTERN, EPISODE_SERIES_PATTERN]

    SEASON_PATTERN = re.compile(r"S(\d+)|Season\s*(\d+)", re.IGNORECASE)

    TRAILING_DIGITS = re.compile(r"\d+$")
    SEPARATOR_CHARS = "-_:| \t\r\n"

    def __init__(self, config: Optional[GroupingConfig] = None):
        self.config = config or GroupingConfig()

    def group_channels(self, channels: Iterable[Channel]) -> List[ChannelItem]:
        """Turn a flat channel list into a tree of channels and groups."""
        sorted_channels = sorted(channels, key=lambda ch: (ch.name, ch.stream_url))

        if len(sorted_channels) < self.config.min_grouping_size:
            return [ChannelLeaf(ch) for ch in sorted_channels]

        items: List[ChannelItem] = []
        used_ids = set()
        i = 0

        while i < len(sorted_channels):
            current = sorted_channels[i]
            group_name = self._series_key(current.name)

            # Fall back to the prefix shared with the next channel
            if group_name is None and i + 1 < len(sorted_channels):
                group_name = self._common_prefix_key(current.name, sorted_channels[i + 1].name)

            if group_name is not None:
                j = i + 1
                while j < len(sorted_channels) and sorted_channels[j].name.startswith(group_name):
                    j += 1

                if j - i >= self.config.min_cluster_size:
                    group_id = self._unique_id(f"group_{group_name}", used_ids)
                    group_items = self._group_seasons(sorted_channels[i:j], group_name)
                    items.append(ChannelGroup(id=group_id, name=group_name, items=tuple(group_items)))
                    i = j
                    continue

            items.append(ChannelLeaf(current))
            i += 1

        return items

    def _series_key(self, name: str) -> Optional[str]:
        """Detect a series name from season/episode markers."""
        for pattern in self.SERIES_PATTERNS:
            match = pattern.match(name)
            if not match:
                continue

            if pattern is self.SEASON_SERIES_PATTERN and self.config.season_in_group_key:
                key = match.group(0).strip()
            else:
                key = match.group(1).strip()

            if key:
                return key
        return None

    def _common_prefix_key(self, first: str, second: str) -> Optional[str]:
        """Derive a group name from the prefix two names share."""
        prefix = common_prefix(first, second)
        # Keep "Show 1" and "Show 10" together
        prefix = self.TRAILING_DIGITS.sub("", prefix)

        if len(prefix) <= self.config.min_prefix_length:
            return None

        key = prefix.strip(self.SEPARATOR_CHARS)
        return key or None

    def _group_seasons(self, channels: Sequence[Channel], series_name: str) -> List[ChannelItem]:
        """Split a series run into season sub-groups plus loose channels."""
        seasons: Dict[int, List[Channel]] = {}

        for channel in channels:
            number = self._season_number(channel.name)
            if number is not None:
                seasons.setdefault(number, []).append(channel)

        items: List[ChannelItem] = []
        grouped = set()

        for number in sorted(seasons):
            season_channels = seasons[number]
            if len(season_channels) < self.config.min_cluster_size:
                continue
            season = f"Season {number}"
            items.append(ChannelGroup(
                id=f"group_{series_name}_{season}",
                name=season,
                items=tuple(ChannelLeaf(ch) for ch in season_channels),
            ))
            grouped.update(ch.id for ch in season_channels)

        items.extend(ChannelLeaf(ch) for ch in channels if ch.id not in grouped)
        return items

    @classmethod
    def _season_number(cls, name: str) -> Optional[int]:
        match = cls.SEASON_PATTERN.search(name)
        if not match:
            return None
        # "01" and "1" are the same season
        return int(match.group(1) or match.group(2))

    @staticmethod
    def _unique_id(base: str, used_ids: set) -> str:
        candidate = base
        suffix = 2
        while candidate in used_ids:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used_ids.add(candidate)
        return candidate


def common_prefix(first: str, second: str) -> str:
    """Longest run of leading characters two strings share."""
    length = 0
    for a, b in zip(first, second):
        if a != b:
            break
        length += 1
    return first[:length]


def group_channels(channels: Iterable[Channel], config: Optional[GroupingConfig] = None) -> List[ChannelItem]:
    """Group channels with a one-off grouper."""
    return ChannelGrouper(config).group_channels(channels)
