# Services package
from .m3u_parser import M3UParser, is_valid_url
from .channel_grouper import ChannelGrouper, GroupingConfig, group_channels
from .playlist_source import PlaylistSource, PlaylistError, FetchError, DecodeError
from .preferences import Preferences
from .playlist_manager import PlaylistManager
