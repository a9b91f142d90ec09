import datetime as dt

import pytest

from fitquest.persistence.file_gateway import JsonFilePersistenceGateway
from fitquest.persistence.gateway import PersistenceError, PersistenceGateway
from fitquest.persistence.writer import BackgroundWriter
from fitquest.progression.quests import QuestProgress
from fitquest.progression.session import CharacterSession
from fitquest.progression.stats import Stats

DAY = dt.date(2026, 10, 18)


class _OfflineGateway(PersistenceGateway):
    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        raise PersistenceError("backend unreachable")

    save_stats = load_stats = save_quest_progress = load_quests = _fail


def test_new_user_needs_assessment(tmp_path):
    session = CharacterSession(1, JsonFilePersistenceGateway(tmp_path), today=DAY).load()
    assert session.stats == Stats()
    assert session.needs_assessment
    assert len(session.quests) == 6
    assert session.warnings == []


def test_returning_user_gets_todays_progress(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    gw.save_stats(1, Stats(strength=4.0, endurance=0.3))
    gw.save_quest_progress(1, "squats", QuestProgress(70, False), DAY)
    gw.save_quest_progress(1, "squats", QuestProgress(5, False), DAY - dt.timedelta(days=1))

    session = CharacterSession(1, gw, today=DAY).load()
    assert not session.needs_assessment
    assert session.quest("squats").current == 70
    assert session.quest("pushups").current == 0


def test_finish_exercise_persists_through_writer(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    gw.save_stats(1, Stats(strength=1.0))
    with BackgroundWriter() as writer:
        session = CharacterSession(1, gw, writer=writer, today=DAY).load()
        outcome = session.finish_exercise("pushup", 20)
        assert writer.flush(timeout=5)

    assert outcome.quest_id == "pushups"
    assert gw.load_stats(1).strength == pytest.approx(3.0)
    assert gw.load_quests(1, DAY) == {"pushups": QuestProgress(20, False)}


def test_offline_backend_keeps_in_memory_state():
    gw = _OfflineGateway()
    session = CharacterSession(1, gw, today=DAY).load()
    assert session.warnings and "load stats" in session.warnings[0]

    session.complete_assessment(30)
    outcome = session.finish_exercise("squat", 10)
    assert outcome.count == 10
    assert session.stats.strength == pytest.approx(4.0)
    assert session.quest("squats").current == 10
    assert any("save quest squats" in w for w in session.warnings)


def test_zero_count_saves_nothing():
    gw = _OfflineGateway()
    session = CharacterSession(1, gw, today=DAY)
    session.finish_exercise("lunge", 0)
    assert gw.calls == 0


def test_quests_reset_on_new_day():
    session = CharacterSession(1, today=DAY)
    session.stats = Stats(strength=1.0)
    session.finish_exercise("situp", 15)
    assert session.quest("situps").current == 15

    assert session.ensure_today(DAY) is False
    assert session.ensure_today(DAY + dt.timedelta(days=1)) is True
    assert session.quest("situps").current == 0
    assert session.stats.strength > 1.0


def test_complete_assessment_seeds_stats(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    session = CharacterSession(9, gw, today=DAY).load()
    stats = session.complete_assessment(45)
    assert stats.strength == pytest.approx(4.5)
    assert stats.endurance == pytest.approx(0.4)
    assert not session.needs_assessment
    assert gw.load_stats(9) == stats
    # quests are untouched by the assessment
    assert all(q.current == 0 for q in session.quests)


class _FlakyStatsGateway(JsonFilePersistenceGateway):
    """Stats reads fail; everything else hits the file store."""

    def load_stats(self, user_id):
        raise PersistenceError("timeout")


def test_failed_stats_read_does_not_restart_assessment(tmp_path):
    JsonFilePersistenceGateway(tmp_path).save_stats(1, Stats(strength=50, endurance=5, exp=300))

    session = CharacterSession(1, _FlakyStatsGateway(tmp_path), today=DAY).load()

    assert not session.needs_assessment
    assert any("load stats" in w for w in session.warnings)
    assert JsonFilePersistenceGateway(tmp_path).load_stats(1).strength == 50.0


def test_zero_rep_assessment_still_completes(tmp_path):
    gw = JsonFilePersistenceGateway(tmp_path)
    gw.save_quest_progress(2, "pushups", QuestProgress(12, False), DAY)
    session = CharacterSession(2, gw, today=DAY).load()
    assert session.needs_assessment

    session.complete_assessment(0)

    assert not session.needs_assessment
    # today's stored progress is merged in once the assessment is over
    assert session.quest("pushups").current == 12
