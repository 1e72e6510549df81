# scanassist/settings_store.py

"""
Typed settings persisted as a small JSON document.

Keys and their defaults live on SettingsKey; values are checked on write,
and a stored value that fails the same check reads back as the default.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet

from scanassist.config import SETTINGS_FILE

logger = logging.getLogger("scanassist")

THEME_MODES = ("system", "light", "dark")

SUPPORTED_OCR_LANGUAGES = {
    "eng": "English",
    "ara": "Arabic",
    "fra": "French",
    "spa": "Spanish",
    "deu": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "rus": "Russian",
    "jpn": "Japanese",
    "chi_sim": "Chinese (Simplified)",
}


class SettingsKey(str, Enum):
    THEME_MODE = "theme_mode"
    HIGH_CONTRAST = "high_contrast"
    OCR_LANGUAGES = "ocr_languages"


DEFAULTS: Dict[SettingsKey, Any] = {
    SettingsKey.THEME_MODE: "system",
    SettingsKey.HIGH_CONTRAST: False,
    SettingsKey.OCR_LANGUAGES: frozenset({"eng", "ara"}),
}


def validate_setting(key: SettingsKey, value: Any) -> Any:
    """Return the normalized value or raise ValueError."""
    if key is SettingsKey.THEME_MODE:
        if value not in THEME_MODES:
            raise ValueError(f"theme_mode must be one of {', '.join(THEME_MODES)}.")
        return value
    if key is SettingsKey.HIGH_CONTRAST:
        if not isinstance(value, bool):
            raise ValueError("high_contrast must be true or false.")
        return value
    if key is SettingsKey.OCR_LANGUAGES:
        if isinstance(value, str) or not isinstance(value, Iterable):
            raise ValueError("ocr_languages must be a list of language codes.")
        languages: FrozenSet[str] = frozenset(value)
        if not languages:
            raise ValueError("At least one OCR language must stay enabled.")
        unknown = sorted(lang for lang in languages if lang not in SUPPORTED_OCR_LANGUAGES)
        if unknown:
            raise ValueError(f"Unsupported OCR language(s): {', '.join(map(str, unknown))}.")
        return languages
    raise ValueError(f"Unknown setting: {key}")


class SettingsStore:
    def __init__(self, path: Path = SETTINGS_FILE):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(json.dumps({"event": "settings_unreadable", "error": str(exc)}))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, key: SettingsKey) -> Any:
        key = SettingsKey(key)
        with self._lock:
            stored = self._load()
        if key.value not in stored:
            return DEFAULTS[key]
        try:
            return validate_setting(key, stored[key.value])
        except ValueError:
            return DEFAULTS[key]

    def set(self, key: SettingsKey, value: Any) -> Any:
        key = SettingsKey(key)
        value = validate_setting(key, value)
        with self._lock:
            data = self._load()
            data[key.value] = sorted(value) if isinstance(value, frozenset) else value
            self._save(data)
        return value

    def toggle(self, key: SettingsKey) -> bool:
        key = SettingsKey(key)
        if key is not SettingsKey.HIGH_CONTRAST:
            raise ValueError(f"{key.value} is not a boolean setting.")
        return self.set(key, not self.get(key))

    def snapshot(self) -> Dict[str, Any]:
        return {key.value: self.get(key) for key in SettingsKey}
