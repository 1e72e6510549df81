"""Tests for the history and settings stores."""

import json

import pytest

from scanassist.history import HistoryRecord, HistoryStore
from scanassist.settings_store import DEFAULTS, SettingsKey, SettingsStore


@pytest.fixture
def history(tmp_path):
    return HistoryStore(path=tmp_path / "history.json", max_items=50)


@pytest.fixture
def settings(tmp_path):
    return SettingsStore(path=tmp_path / "settings.json")


class TestHistoryStore:
    def test_empty_when_missing(self, history):
        assert history.list() == []

    def test_newest_first(self, history):
        history.append("first", "img://1", timestamp=1)
        history.append("second", "img://2", timestamp=2)
        items = history.list()
        assert [r.text for r in items] == ["second", "first"]
        assert items[0].source_reference == "img://2"

    def test_keeps_only_most_recent(self, history):
        for i in range(60):
            history.append(f"scan {i}", timestamp=i)
        items = history.list()
        assert len(items) == 50
        assert items[0].text == "scan 59"
        assert items[-1].text == "scan 10"

    def test_clear(self, history):
        history.append("x")
        history.clear()
        assert history.list() == []
        history.clear()

    def test_default_timestamp_is_epoch_millis(self, history):
        record = history.append("x")
        assert record.timestamp > 1_600_000_000_000

    def test_unreadable_file_is_empty(self, history):
        history.path.write_text("{not json")
        assert history.list() == []
        history.append("recovered")
        assert [r.text for r in history.list()] == ["recovered"]

    def test_corrupt_record_is_skipped(self, history):
        history.path.write_text(json.dumps([
            {"id": "a", "text": "keep me", "source_reference": "", "timestamp": 1},
            {"id": "b", "text": "broken", "source_reference": "", "timestamp": "yesterday"},
        ]))
        assert [r.text for r in history.list()] == ["keep me"]
        history.append("new")
        assert [r.text for r in history.list()] == ["new", "keep me"]

    def test_persisted_format(self, history):
        record = history.append("hello", "uri", timestamp=5)
        data = json.loads(history.path.read_text())
        assert data == [{"id": record.id, "text": "hello", "source_reference": "uri", "timestamp": 5}]

    def test_record_from_partial_dict(self):
        record = HistoryRecord.from_dict({"text": "t"})
        assert record.text == "t"
        assert record.id
        assert record.timestamp == 0


class TestSettingsStore:
    def test_defaults(self, settings):
        assert settings.snapshot() == {
            "theme_mode": "system",
            "high_contrast": False,
            "ocr_languages": frozenset({"eng", "ara"}),
        }

    def test_set_and_get(self, settings):
        settings.set(SettingsKey.THEME_MODE, "dark")
        settings.set("ocr_languages", ["fra", "eng"])
        assert settings.get(SettingsKey.THEME_MODE) == "dark"
        assert settings.get(SettingsKey.OCR_LANGUAGES) == frozenset({"fra", "eng"})

    def test_persists_across_instances(self, settings):
        settings.set(SettingsKey.HIGH_CONTRAST, True)
        assert SettingsStore(path=settings.path).get(SettingsKey.HIGH_CONTRAST) is True

    def test_write_leaves_no_temp_file(self, settings):
        settings.set(SettingsKey.THEME_MODE, "dark")
        assert json.loads(settings.path.read_text())["theme_mode"] == "dark"
        assert [p.name for p in settings.path.parent.iterdir()] == [settings.path.name]

    def test_toggle(self, settings):
        assert settings.toggle(SettingsKey.HIGH_CONTRAST) is True
        assert settings.toggle(SettingsKey.HIGH_CONTRAST) is False
        with pytest.raises(ValueError):
            settings.toggle(SettingsKey.THEME_MODE)

    def test_empty_language_set_rejected(self, settings):
        with pytest.raises(ValueError):
            settings.set(SettingsKey.OCR_LANGUAGES, [])
        assert settings.get(SettingsKey.OCR_LANGUAGES) == DEFAULTS[SettingsKey.OCR_LANGUAGES]

    @pytest.mark.parametrize(
        "key,value",
        [
            (SettingsKey.THEME_MODE, "purple"),
            (SettingsKey.HIGH_CONTRAST, "yes"),
            (SettingsKey.OCR_LANGUAGES, "eng"),
            (SettingsKey.OCR_LANGUAGES, ["klingon"]),
        ],
    )
    def test_invalid_values(self, settings, key, value):
        with pytest.raises(ValueError):
            settings.set(key, value)

    def test_corrupt_value_reads_as_default(self, settings):
        settings.path.write_text(json.dumps({"ocr_languages": [], "theme_mode": "light"}))
        assert settings.get(SettingsKey.OCR_LANGUAGES) == frozenset({"eng", "ara"})
        assert settings.get(SettingsKey.THEME_MODE) == "light"
