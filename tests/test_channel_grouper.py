"""Tests for the channel grouping heuristics."""
import random

from erdytv.models.channel import Channel
from erdytv.models.channel_item import ChannelGroup, ChannelLeaf
from erdytv.services.channel_grouper import (
    ChannelGrouper,
    GroupingConfig,
    common_prefix,
    group_channels,
)


def channels_named(*names):
    return [Channel(name=name, stream_url=f"http://stream/{i}") for i, name in enumerate(names)]


def names_of(items):
    return [item.name for item in items]


def iter_groups(items):
    for item in items:
        if isinstance(item, ChannelGroup):
            yield item
            yield from iter_groups(item.items)


def flatten(items):
    return [ch for item in items for ch in item.iter_channels()]


def shape(items):
    """Comparable structure of a tree: group ids and leaf stream URLs."""
    result = []
    for item in items:
        if isinstance(item, ChannelGroup):
            result.append((item.id, shape(item.items)))
        else:
            result.append(item.channel.stream_url)
    return result


class TestSeriesPatterns:
    """Season and episode marker detection."""

    def test_season_episode_series(self):
        """Episodes of one season become a series group with a season group."""
        items = group_channels(channels_named("Show S01E01", "Show S01E02", "Show S01E03"))

        assert len(items) == 1
        group = items[0]
        assert isinstance(group, ChannelGroup)
        assert group.name == "Show"
        assert group.id == "group_Show"

        assert len(group.items) == 1
        season = group.items[0]
        assert isinstance(season, ChannelGroup)
        assert season.name == "Season 1"
        assert season.id == "group_Show_Season 1"
        assert names_of(season.items) == ["Show S01E01", "Show S01E02", "Show S01E03"]
        assert all(isinstance(item, ChannelLeaf) for item in season.items)

    def test_season_in_group_key_variant(self):
        config = GroupingConfig(season_in_group_key=True)
        items = group_channels(channels_named("Show S01E01", "Show S01E02", "Show S01E03"), config)

        assert names_of(items) == ["Show S01"]
        assert names_of(items[0].items) == ["Season 1"]

    def test_seasons_sorted_numerically(self):
        names = [f"Show S{s}E0{e}" for s in ("10", "2", "01") for e in (1, 2, 3)]
        items = group_channels(channels_named(*names))

        assert names_of(items) == ["Show"]
        assert names_of(items[0].items) == ["Season 1", "Season 2", "Season 10"]

    def test_episode_only_series(self):
        items = group_channels(channels_named("Drama E1", "Drama E2", "Drama E3", "Zulu"))

        assert names_of(items) == ["Drama", "Zulu"]
        assert names_of(items[0].items) == ["Drama E1", "Drama E2", "Drama E3"]
        assert isinstance(items[1], ChannelLeaf)

    def test_loose_episodes_follow_seasons(self):
        items = group_channels(channels_named(
            "Show E99 Special",
            "Show S01E01", "Show S01E02", "Show S01E03",
        ))

        group = items[0]
        assert group.name == "Show"
        assert names_of(group.items) == ["Season 1", "Show E99 Special"]
        assert isinstance(group.items[1], ChannelLeaf)

    def test_small_season_is_not_a_group(self):
        items = group_channels(channels_named(
            "Show S01E01", "Show S01E02", "Show S01E03", "Show S02E01",
        ))

        group = items[0]
        assert names_of(group.items) == ["Season 1", "Show S02E01"]
        assert isinstance(group.items[1], ChannelLeaf)

    def test_series_pattern_beats_common_prefix(self):
        """Series detection wins over the longer common prefix."""
        items = group_channels(channels_named(
            "Long Title S01E01", "Long Title S01E02", "Long Title S01E03",
        ))
        assert names_of(items) == ["Long Title"]

    def test_short_run_emits_leaves(self):
        items = group_channels(channels_named("Show S01E01", "Show S01E02", "Other", "Zebra"))
        assert all(isinstance(item, ChannelLeaf) for item in items)
        assert names_of(items) == ["Other", "Show S01E01", "Show S01E02", "Zebra"]


class TestCommonPrefix:
    """Prefix fallback when no series pattern applies."""

    def test_numbered_movies(self):
        items = group_channels(channels_named("Alpha Movie 1", "Alpha Movie 2", "Alpha Movie 10", "Beta"))

        assert names_of(items) == ["Alpha Movie", "Beta"]
        group = items[0]
        assert group.id == "group_Alpha Movie"
        assert names_of(group.items) == ["Alpha Movie 1", "Alpha Movie 10", "Alpha Movie 2"]
        assert isinstance(items[1], ChannelLeaf)

    def test_separators_are_stripped(self):
        items = group_channels(channels_named("NEWS | Alpha", "NEWS | Beta", "NEWS | Gamma"))
        assert names_of(items) == ["NEWS"]

    def test_short_prefix_does_not_group(self):
        items = group_channels(channels_named("Abc 1", "Abc 2", "Abc 3"))
        assert all(isinstance(item, ChannelLeaf) for item in items)

    def test_prefix_threshold_is_configurable(self):
        config = GroupingConfig(min_prefix_length=2)
        items = group_channels(channels_named("Abc 1", "Abc 2", "Abc 3"), config)
        assert names_of(items) == ["Abc"]

    def test_unrelated_names_stay_flat(self):
        items = group_channels(channels_named("CNN", "BBC One", "Al Jazeera", "Sky News"))
        assert names_of(items) == ["Al Jazeera", "BBC One", "CNN", "Sky News"]
        assert all(isinstance(item, ChannelLeaf) for item in items)

    def test_common_prefix_helper(self):
        assert common_prefix("Alpha Movie 1", "Alpha Movie 10") == "Alpha Movie 1"
        assert common_prefix("abc", "xyz") == ""
        assert common_prefix("", "abc") == ""


class TestInvariants:
    """Properties that hold for every grouping."""

    SAMPLE = (
        "Show S01E01", "Show S01E02", "Show S01E03", "Show S02E01", "Show S02E02",
        "Show S02E03", "Other E1", "Other E2", "Alpha Movie 1", "Alpha Movie 2",
        "Alpha Movie 3", "CNN", "BBC", "Documentary Planet 1", "Documentary Planet 2",
        "Documentary Planet 3", "Zed",
    )

    def test_small_lists_are_not_grouped(self):
        items = group_channels(channels_named("Show S01E01", "Show S01E02"))
        assert all(isinstance(item, ChannelLeaf) for item in items)
        assert names_of(items) == ["Show S01E01", "Show S01E02"]

    def test_grouping_threshold_is_configurable(self):
        config = GroupingConfig(min_grouping_size=10)
        items = group_channels(channels_named("Show S01E01", "Show S01E02", "Show S01E03"), config)
        assert all(isinstance(item, ChannelLeaf) for item in items)

    def test_groups_have_at_least_three_leaves(self):
        items = group_channels(channels_named(*self.SAMPLE))
        groups = list(iter_groups(items))
        assert groups
        assert all(group.leaf_count() >= 3 for group in groups)

    def test_every_channel_appears_once(self):
        channels = channels_named(*self.SAMPLE)
        items = group_channels(channels)
        assert sorted(ch.id for ch in flatten(items)) == sorted(ch.id for ch in channels)

    def test_input_order_does_not_matter(self):
        channels = channels_named(*self.SAMPLE)
        shuffled = list(channels)
        random.Random(7).shuffle(shuffled)

        assert shape(group_channels(channels)) == shape(group_channels(shuffled))

    def test_regrouping_flattened_output_is_stable(self):
        items = group_channels(channels_named(*self.SAMPLE))
        assert shape(group_channels(flatten(items))) == shape(items)

    def test_group_ids_unique_among_siblings(self):
        items = group_channels(channels_named(*self.SAMPLE))
        for siblings in [items] + [group.items for group in iter_groups(items)]:
            ids = [item.id for item in siblings]
            assert len(ids) == len(set(ids))

    def test_grouper_instance_reusable(self):
        grouper = ChannelGrouper()
        first = grouper.group_channels(channels_named(*self.SAMPLE))
        second = grouper.group_channels(channels_named(*self.SAMPLE))
        assert shape(first) == shape(second)
