# fitquest/persistence/http_gateway.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from fitquest.common.config import API_TIMEOUT_S, API_URL
from fitquest.progression.quests import QuestProgress
from fitquest.progression.stats import Stats

from .gateway import DateLike, PersistenceError, PersistenceGateway, iso_date

logger = logging.getLogger(__name__)


class HttpPersistenceGateway(PersistenceGateway):
    """
    REST backend:
      GET/PUT  {base}/users/{id}/stats
      GET      {base}/users/{id}/quests
      PUT      {base}/users/{id}/quests/{quest_id}   body {currentProgress, completed}
    """
    def __init__(self, base_url: str = API_URL, timeout: float = API_TIMEOUT_S,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, *parts: Any) -> str:
        return "/".join([self.base_url, *(str(p) for p in parts)])

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PersistenceError(f"{method} {url} failed: {e}") from e
        return resp

    @staticmethod
    def _check(resp: requests.Response, what: str) -> None:
        if not resp.ok:
            raise PersistenceError(f"Failed to {what}: HTTP {resp.status_code}")

    @staticmethod
    def _json(resp: requests.Response, what: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise PersistenceError(f"Failed to {what}: invalid JSON body") from e

    # ---------- stats ----------
    def save_stats(self, user_id, stats: Stats) -> None:
        resp = self._request("PUT", self._url("users", user_id, "stats"), json=stats.to_dict())
        self._check(resp, "update stats")

    def load_stats(self, user_id) -> Optional[Stats]:
        resp = self._request("GET", self._url("users", user_id, "stats"))
        if resp.status_code == 404:
            logger.info("no stats stored for user %s", user_id)
            return None
        self._check(resp, "fetch stats")
        return Stats.from_dict(self._json(resp, "fetch stats"))

    # ---------- quests ----------
    def save_quest_progress(self, user_id, quest_id: str, progress: QuestProgress,
                            day: Optional[DateLike] = None) -> None:
        body = {"currentProgress": progress.current, "completed": progress.completed}
        resp = self._request("PUT", self._url("users", user_id, "quests", quest_id),
                             json=body, params={"date": iso_date(day)})
        self._check(resp, "update quest")

    def load_quests(self, user_id, day: Optional[DateLike] = None) -> Dict[str, QuestProgress]:
        resp = self._request("GET", self._url("users", user_id, "quests"),
                             params={"date": iso_date(day)})
        self._check(resp, "fetch quests")
        rows = self._json(resp, "fetch quests") or []
        out: Dict[str, QuestProgress] = {}
        for row in rows:
            qid = row.get("quest_id") or row.get("id")
            if qid:
                out[qid] = QuestProgress.from_dict(row)
        return out
