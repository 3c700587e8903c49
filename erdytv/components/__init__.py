# Components package
from .channel_list import ChannelList, CategoryManager
from .video_player import VideoPlayerComponent
