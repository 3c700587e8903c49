"""Tests for the JSON preference store."""
import json

from erdytv.services.preferences import (
    BLOCKED_URLS_KEY,
    CATEGORY_ORDER_KEY,
    DATA_DIR_ENV,
    PLAYER_VOLUME_KEY,
    Preferences,
)


class TestPreferences:

    def test_values_survive_reload(self, tmp_path):
        prefs = Preferences(str(tmp_path))
        prefs.set(PLAYER_VOLUME_KEY, 0.4)
        prefs.set_list(CATEGORY_ORDER_KEY, ["News", "Sports"])
        prefs.set_list(BLOCKED_URLS_KEY, {"http://b", "http://a"})

        reloaded = Preferences(str(tmp_path))
        assert reloaded.get(PLAYER_VOLUME_KEY) == 0.4
        assert reloaded.get_list(CATEGORY_ORDER_KEY) == ["News", "Sports"]
        assert reloaded.get_list(BLOCKED_URLS_KEY) == ["http://a", "http://b"]

    def test_defaults(self, tmp_path):
        prefs = Preferences(str(tmp_path))
        assert prefs.get("missing") is None
        assert prefs.get("missing", 3) == 3
        assert prefs.get_list("missing") == []

    def test_remove(self, tmp_path):
        prefs = Preferences(str(tmp_path))
        prefs.set("key", "value")
        prefs.remove("key")
        assert prefs.get("key") is None
        assert Preferences(str(tmp_path)).get("key") is None

    def test_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")
        prefs = Preferences(str(tmp_path))
        assert prefs.get_list(CATEGORY_ORDER_KEY) == []

        prefs.set("key", 1)
        assert json.loads((tmp_path / "settings.json").read_text(encoding="utf-8")) == {"key": 1}

    def test_non_string_list_items_are_skipped(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({CATEGORY_ORDER_KEY: ["A", 1, None, "B"]}))
        assert Preferences(str(tmp_path)).get_list(CATEGORY_ORDER_KEY) == ["A", "B"]

    def test_data_dir_from_environment(self, tmp_path, monkeypatch):
        target = tmp_path / "from-env"
        monkeypatch.setenv(DATA_DIR_ENV, str(target))
        prefs = Preferences()
        prefs.set("key", "value")
        assert (target / "settings.json").exists()
