# fitquest/persistence/file_gateway.py
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from fitquest.common.io_utils import read_json, write_json
from fitquest.common.paths import STORE_DIR, get_user_store
from fitquest.progression.quests import QuestProgress
from fitquest.progression.stats import Stats

from .gateway import DateLike, PersistenceError, PersistenceGateway, iso_date


class JsonFilePersistenceGateway(PersistenceGateway):
    """
    Offline store: one JSON document per user.

      {"stats": {...}, "quests": {"2026-10-18": {"pushups": {"current": 40, "completed": false}}}}
    """
    def __init__(self, root: Path = STORE_DIR):
        self.root = Path(root)
        self._lock = threading.Lock()

    def _read(self, user_id) -> Dict[str, Any]:
        path = get_user_store(self.root, user_id)
        if not path.exists():
            return {}
        try:
            return read_json(path) or {}
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

    def _write(self, user_id, doc: Dict[str, Any]) -> None:
        path = get_user_store(self.root, user_id)
        try:
            write_json(doc, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    def save_stats(self, user_id, stats: Stats) -> None:
        with self._lock:
            doc = self._read(user_id)
            doc["stats"] = stats.to_dict()
            self._write(user_id, doc)

    def load_stats(self, user_id) -> Optional[Stats]:
        with self._lock:
            data = self._read(user_id).get("stats")
        return Stats.from_dict(data) if data else None

    def save_quest_progress(self, user_id, quest_id: str, progress: QuestProgress,
                            day: Optional[DateLike] = None) -> None:
        with self._lock:
            doc = self._read(user_id)
            day_quests = doc.setdefault("quests", {}).setdefault(iso_date(day), {})
            day_quests[quest_id] = progress.to_dict()
            self._write(user_id, doc)

    def load_quests(self, user_id, day: Optional[DateLike] = None) -> Dict[str, QuestProgress]:
        with self._lock:
            rows = self._read(user_id).get("quests", {}).get(iso_date(day), {})
        return {qid: QuestProgress.from_dict(row) for qid, row in rows.items()}
