"""Channel model for IPTV channels."""
import posixpath
import re
import uuid
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit


UNCATEGORIZED = "Uncategorized"

# Container extensions that always mean on-demand content
VOD_EXTENSIONS = frozenset({"mp4", "mkv", "avi", "mov", "flv", "wmv"})

EPISODE_NAME_PATTERNS = [
    re.compile(r"S\d+E\d+"),                   # S01E01
    re.compile(r"\sE\d+"),                     # " E01"
    re.compile(r"Season\s*\d+", re.IGNORECASE),  # Season 1
]


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Channel:
    """Represents an IPTV channel parsed from a playlist entry."""

    name: str
    stream_url: str
    logo_url: Optional[str] = None
    group: str = UNCATEGORIZED
    id: str = field(default_factory=_new_id)

    @property
    def url_key(self) -> str:
        """Key used to remember this channel in the blocked set."""
        return self.stream_url

    @property
    def is_live(self) -> bool:
        return classify_live(self)


def _path_extension(url: str) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    return posixpath.splitext(path)[1].lstrip(".").lower()


def classify_live(channel: Channel) -> bool:
    """Guess whether a channel is a continuous live stream.

    Container files (mp4, mkv, ...) and names carrying episode or season
    markers are treated as on-demand. Everything else is live.
    """
    if _path_extension(channel.stream_url) in VOD_EXTENSIONS:
        return False

    for pattern in EPISODE_NAME_PATTERNS:
        if pattern.search(channel.name):
            return False

    return True
