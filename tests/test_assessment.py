import pytest

from fitquest.common.rules import ExerciseType
from fitquest.progression.assessment import FitnessAssessment


@pytest.mark.parametrize("duration", [0, 179, 301])
def test_duration_window(duration):
    with pytest.raises(ValueError):
        FitnessAssessment(duration_s=duration)


def test_needs_an_exercise():
    with pytest.raises(ValueError):
        FitnessAssessment(exercises=())


def test_nothing_runs_before_start(pose):
    a = FitnessAssessment()
    assert a.current is None
    assert a.feed(pose.pushup(90, ts=0.0)) is None


def test_timed_trial_seeds_stats(pose):
    a = FitnessAssessment(duration_s=180)
    assert a.start_next() == ExerciseType.PUSHUP

    t = 0.0
    for i in range(20):
        a.feed(pose.pushup(90 if i % 2 == 0 else 170, ts=t))
        t += 1.0
    assert a.time_remaining(t) == pytest.approx(160.0)
    # time is up: the push-up exercise closes itself
    assert a.feed(pose.pushup(90, ts=200.0)) is None
    assert a.current is None
    assert a.counts[ExerciseType.PUSHUP] == 10

    assert a.start_next() == ExerciseType.SITUP
    a.feed(pose.torso(40, ts=300.0))
    a.feed(pose.torso(90, ts=301.0))
    a.finish_current()

    assert a.finished
    assert a.start_next() is None
    assert a.total_reps == 11
    stats = a.result()
    assert stats.strength == pytest.approx(1.1)
    assert stats.endurance == pytest.approx(0.1)
    assert stats.exp == 0


def test_skip_counts_zero(pose):
    a = FitnessAssessment(exercises=("squat",), duration_s=240)
    a.start_next()
    a.feed(pose.squat(90, ts=0.0))
    a.skip_current()
    assert a.finished
    assert a.total_reps == 0
    assert a.result().strength == 0.0
