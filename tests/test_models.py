"""Tests for data model classes and clocks."""
from datetime import datetime, timedelta

from study_tracker.clock import FixedClock, SystemClock
from study_tracker.models import Flashcard, StudyProgress, StudySession, StudyStreak, TopicMastery

T = datetime(2024, 1, 10, 9, 0)


def test_session_defaults():
    s = StudySession(id="s1", topic="cardiology", start_time=T)
    assert s.is_active
    assert s.duration_seconds == 0
    assert s.accuracy == 0
    assert s.notes_created == 0


def test_session_accuracy_and_duration():
    s = StudySession(id="s1", topic="a", start_time=T, end_time=T + timedelta(minutes=2),
                     questions_answered=3, correct_answers=2)
    assert not s.is_active
    assert s.duration_seconds == 120
    assert s.accuracy == 66.7


def test_topic_mastery_percent():
    assert TopicMastery(correct=3, total=4).mastery_percent == 75
    assert TopicMastery().last_practiced is None


def test_flashcard_defaults():
    f = Flashcard(id="c1", topic="a", front="Q?", back="A", next_review=T)
    assert f.review_count == 0
    assert f.correct_count == 0
    assert f.last_reviewed is None
    assert f.tags == []
    assert f.difficulty == "medium"


def test_progress_defaults_are_independent():
    a, b = StudyProgress(), StudyProgress()
    a.weak_areas.add("x")
    assert b.weak_areas == set()
    assert a.accuracy == 0


def test_streak_defaults():
    s = StudyStreak()
    assert (s.current, s.longest, s.last_study_date) == (0, 0, None)


def test_fixed_clock():
    clock = FixedClock(T)
    assert clock.now() == T
    assert clock.advance(days=1, hours=2) == T + timedelta(days=1, hours=2)
    clock.set(T)
    assert clock.now() == T


def test_system_clock_moves():
    before = datetime.now()
    assert SystemClock().now() >= before
