import datetime as dt
import threading

import pytest
import requests

from fitquest.persistence.file_gateway import JsonFilePersistenceGateway
from fitquest.persistence.gateway import PersistenceError, iso_date
from fitquest.persistence.http_gateway import HttpPersistenceGateway
from fitquest.persistence.writer import BackgroundWriter
from fitquest.progression.quests import QuestProgress
from fitquest.progression.stats import Stats

DAY = dt.date(2026, 10, 18)


# ---------- file gateway ----------
def test_file_gateway_new_user_is_not_an_error(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    assert gw.load_stats(7) is None
    assert gw.load_quests(7, DAY) == {}


def test_file_gateway_roundtrip_and_upsert(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    gw.save_stats(7, Stats(strength=1.5, exp=120))
    gw.save_quest_progress(7, "pushups", QuestProgress(40, False), DAY)
    gw.save_quest_progress(7, "pushups", QuestProgress(60, False), DAY)
    gw.save_quest_progress(7, "situps", QuestProgress(100, True), DAY)

    stats = gw.load_stats(7)
    assert stats.strength == pytest.approx(1.5)
    assert stats.level == 2
    assert gw.load_quests(7, DAY) == {
        "pushups": QuestProgress(60, False),
        "situps": QuestProgress(100, True),
    }
    # progress is keyed by date
    assert gw.load_quests(7, DAY + dt.timedelta(days=1)) == {}


def test_file_gateway_corrupt_document(tmp_path):
    (tmp_path / "user_3.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JsonFilePersistenceGateway(tmp_path).load_stats(3)


def test_iso_date():
    assert iso_date(DAY) == "2026-10-18"
    assert iso_date("2026-01-01") == "2026-01-01"


# ---------- http gateway ----------
class _Resp:
    def __init__(self, status=200, body=None):
        self.status_code = status
        self.ok = 200 <= status < 300
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class _FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def test_http_load_stats():
    session = _FakeSession([_Resp(200, {"strength": 2.5, "intelligence": 0, "endurance": 0.2,
                                         "exp": 100, "level": 1})])
    gw = HttpPersistenceGateway("http://api/api/", session=session)
    stats = gw.load_stats(5)
    assert stats.strength == 2.5 and stats.level == 2
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://api/api/users/5/stats")
    assert "timeout" in kwargs


def test_http_missing_stats_means_new_user():
    gw = HttpPersistenceGateway("http://api", session=_FakeSession([_Resp(404, {"error": "Stats not found"})]))
    assert gw.load_stats(5) is None


def test_http_save_quest_body():
    session = _FakeSession([_Resp(200, {"message": "ok"})])
    HttpPersistenceGateway("http://api", session=session).save_quest_progress(
        5, "squats", QuestProgress(30, False), DAY)
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "http://api/users/5/quests/squats")
    assert kwargs["json"] == {"currentProgress": 30, "completed": False}
    assert kwargs["params"] == {"date": "2026-10-18"}


def test_http_load_quests_rows():
    rows = [{"quest_id": "pushups", "current_progress": 12, "completed": 0},
            {"quest_id": "lunges", "current_progress": 100, "completed": 1}]
    gw = HttpPersistenceGateway("http://api", session=_FakeSession([_Resp(200, rows)]))
    assert gw.load_quests(5, DAY) == {"pushups": QuestProgress(12, False),
                                      "lunges": QuestProgress(100, True)}


def test_http_failures_raise_persistence_error():
    gw = HttpPersistenceGateway("http://api", session=_FakeSession([
        requests.ConnectionError("refused"),
        _Resp(500, {"error": "boom"}),
    ]))
    with pytest.raises(PersistenceError):
        gw.save_stats(5, Stats())
    with pytest.raises(PersistenceError):
        gw.save_stats(5, Stats())


# ---------- background writer ----------
def test_writer_runs_tasks_off_thread():
    seen = []
    with BackgroundWriter() as writer:
        writer.submit(lambda x: seen.append((x, threading.current_thread().name)), 1)
        assert writer.flush(timeout=5)
    assert seen == [(1, "Persistence-Writer")]
    assert writer.completed == 1


def test_writer_failure_is_logged_not_raised(caplog):
    errors = []

    def boom():
        raise PersistenceError("offline")

    writer = BackgroundWriter(on_error=lambda label, e: errors.append((label, str(e))))
    assert writer.submit(boom, label="save stats")
    assert writer.flush(timeout=5)
    writer.close()

    assert writer.failures == 1
    assert errors == [("save stats", "offline")]
    assert "save stats failed" in caplog.text


def test_writer_drops_after_close():
    writer = BackgroundWriter()
    writer.close()
    assert writer.submit(lambda: None) is False


def test_flush_timeout_leaves_no_helper_threads():
    gate = threading.Event()
    writer = BackgroundWriter()
    writer.submit(gate.wait, 5)
    before = threading.active_count()

    for _ in range(3):
        assert writer.flush(timeout=0.05) is False
    assert threading.active_count() == before

    gate.set()
    assert writer.flush(timeout=5)
    writer.close()
