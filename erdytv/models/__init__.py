# Models package
from .channel import Channel, classify_live, UNCATEGORIZED
from .channel_item import ChannelItem, ChannelLeaf, ChannelGroup
from .category import Category
from .catalog import CatalogSnapshot
