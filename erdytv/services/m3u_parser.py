"""M3U/M3U8 playlist parser producing categories of channels."""
import logging
import re
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from ..models.category import Category
from ..models.channel import Channel, UNCATEGORIZED

logger = logging.getLogger(__name__)

UNKNOWN_CHANNEL = "Unknown Channel"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_WHITESPACE_RE = re.compile(r"\s")


def is_valid_url(value: Optional[str]) -> bool:
    """Check that a string is a syntactically valid absolute URL."""
    if not value or not _SCHEME_RE.match(value) or _WHITESPACE_RE.search(value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return bool(parts.netloc or parts.path)


class M3UParser:
    """Line-oriented parser for M3U playlists.

    Malformed entries never abort a parse: missing attributes fall back to
    defaults and entries whose URL line does not parse are dropped.
    """

    EXTINF_MARKER = "#EXTINF"

    GROUP_PATTERN = re.compile(r'group-title="([^"]*)"')
    LOGO_PATTERN = re.compile(r'tvg-logo="([^"]*)"')

    @classmethod
    def parse(cls, content: str) -> List[Category]:
        """Parse playlist text into categories sorted by name."""
        buckets: Dict[str, List[Channel]] = {}

        current_group = UNCATEGORIZED
        current_logo: Optional[str] = None
        current_name: Optional[str] = None

        for line in content.lstrip("\ufeff").splitlines():
            line = line.strip()

            if not line:
                continue

            if line.startswith(cls.EXTINF_MARKER):
                current_group = cls._extract_group(line)
                current_logo = cls._extract_logo(line)
                current_name = cls._extract_name(line)
                continue

            if line.startswith("#"):
                continue

            # Anything else is the URL line of the entry being assembled
            if current_name is None:
                logger.debug("Skipping URL without #EXTINF metadata: %s", line)
            elif is_valid_url(line):
                channel = Channel(
                    name=current_name,
                    stream_url=line,
                    logo_url=current_logo,
                    group=current_group,
                )
                buckets.setdefault(current_group, []).append(channel)
            else:
                logger.debug("Dropping entry %r with invalid URL %r", current_name, line)

            current_group = UNCATEGORIZED
            current_logo = None
            current_name = None

        return [
            Category(name=name, channels=tuple(channels))
            for name, channels in sorted(buckets.items(), key=lambda item: item[0])
        ]

    @classmethod
    def _extract_group(cls, extinf_line: str) -> str:
        match = cls.GROUP_PATTERN.search(extinf_line)
        if match and match.group(1):
            return match.group(1)
        return UNCATEGORIZED

    @classmethod
    def _extract_logo(cls, extinf_line: str) -> Optional[str]:
        match = cls.LOGO_PATTERN.search(extinf_line)
        if match and is_valid_url(match.group(1)):
            return match.group(1)
        return None

    @classmethod
    def _extract_name(cls, extinf_line: str) -> str:
        """Extract the display name - everything after the last comma."""
        last_comma_idx = extinf_line.rfind(",")
        if last_comma_idx == -1:
            return UNKNOWN_CHANNEL

        name = extinf_line[last_comma_idx + 1:].strip()
        return name or UNKNOWN_CHANNEL
