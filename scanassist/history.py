# scanassist/history.py

"""
Scan history: a JSON file holding the most recent records, newest first.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from scanassist.config import HISTORY_FILE, HISTORY_LIMIT

logger = logging.getLogger("scanassist")


@dataclass(frozen=True)
class HistoryRecord:
    id: str
    text: str
    source_reference: str
    timestamp: int  # epoch millis

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryRecord":
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            text=str(data.get("text", "")),
            source_reference=str(data.get("source_reference", "")),
            timestamp=int(data.get("timestamp") or 0),
        )


class HistoryStore:
    def __init__(self, path: Path = HISTORY_FILE, max_items: int = HISTORY_LIMIT):
        self.path = Path(path)
        self.max_items = max_items
        self._lock = threading.Lock()

    def _load(self) -> List[HistoryRecord]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(json.dumps({"event": "history_unreadable", "path": str(self.path), "error": str(exc)}))
            return []
        if not isinstance(raw, list):
            logger.warning(json.dumps({"event": "history_unreadable", "path": str(self.path), "error": "not a list"}))
            return []

        records: List[HistoryRecord] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            try:
                records.append(HistoryRecord.from_dict(item))
            except (ValueError, TypeError) as exc:
                # one bad record must not cost the rest of the history
                logger.warning(json.dumps({"event": "history_record_skipped", "index": index, "error": str(exc)}))
        return records

    def _save(self, records: List[HistoryRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([asdict(r) for r in records], indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def append(
        self,
        text: str,
        source_reference: str = "",
        timestamp: Optional[int] = None,
    ) -> HistoryRecord:
        """Insert at the front and keep only the newest `max_items`."""
        record = HistoryRecord(
            id=str(uuid.uuid4()),
            text=text,
            source_reference=source_reference,
            timestamp=int(time.time() * 1000) if timestamp is None else timestamp,
        )
        with self._lock:
            records = [record] + self._load()
            self._save(records[: self.max_items])
        return record

    def list(self) -> List[HistoryRecord]:
        with self._lock:
            return self._load()

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self.path.unlink()
