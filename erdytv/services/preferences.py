"""Persisted user preferences backed by a JSON file."""
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

# Preference keys
PLAYLIST_URL_KEY = "iptv_playlist_url"
VISIBLE_CATEGORIES_KEY = "visible_categories"
CATEGORY_ORDER_KEY = "category_order"
BLOCKED_URLS_KEY = "blocked_urls"
PLAYER_VOLUME_KEY = "player_volume"
SHOW_CHANNEL_ICONS_KEY = "show_channel_icons"
FETCH_TIMEOUT_KEY = "fetch_timeout"

DATA_DIR_ENV = "ERDYTV_DATA_DIR"


class Preferences:
    """Key-value store for simple scalars and string collections.

    Every mutation is written straight to disk; last write wins.
    """

    def __init__(self, data_dir: Optional[str] = None):
        """Initialize the store, loading any existing settings file."""
        if data_dir:
            self.data_dir = Path(data_dir)
        elif os.environ.get(DATA_DIR_ENV):
            self.data_dir = Path(os.environ[DATA_DIR_ENV])
        else:
            self.data_dir = Path.home() / ".erdytv"

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._settings_file = self.data_dir / "settings.json"
        self._settings: dict = {}

        self._load()

    def _load(self):
        """Load settings from file."""
        if not self._settings_file.exists():
            return
        try:
            data = json.loads(self._settings_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self._settings_file, e)
            return

        if isinstance(data, dict):
            self._settings = data
        else:
            logger.warning("Ignoring settings file %s: not a JSON object", self._settings_file)

    def _save(self):
        """Save settings to file."""
        self._settings_file.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")

    def get(self, key: str, default=None):
        """Get a scalar value."""
        return self._settings.get(key, default)

    def set(self, key: str, value):
        """Set a scalar value."""
        self._settings[key] = value
        self._save()

    def remove(self, key: str):
        """Forget a value."""
        if key in self._settings:
            del self._settings[key]
            self._save()

    def get_list(self, key: str) -> List[str]:
        """Get a string collection, empty when missing or malformed."""
        value = self._settings.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def set_list(self, key: str, values: Iterable[str]):
        """Set a string collection. Sets are stored sorted."""
        if isinstance(values, (set, frozenset)):
            values = sorted(values)
        self.set(key, list(values))
