# tests/test_recommend.py
from study_tracker.models import StudyProgress, TopicMastery
from study_tracker.recommend import get_weak_topics, recommended_topics


def make_progress(scores, strong=(), weak=()):
    return StudyProgress(
        topics_mastery={t: TopicMastery(correct=c, total=n) for t, (c, n) in scores.items()},
        strong_areas=set(strong),
        weak_areas=set(weak),
    )


def test_empty_progress():
    assert recommended_topics(StudyProgress()) == []


def test_sorted_by_mastery_excluding_strong():
    progress = make_progress(
        {"renal": (7, 10), "neuro": (2, 10), "cardio": (9, 10), "pulm": (5, 10)},
        strong={"cardio"}, weak={"neuro", "pulm"},
    )
    assert recommended_topics(progress) == ["neuro", "pulm", "renal"]


def test_ties_broken_by_topic_key():
    progress = make_progress({"b": (1, 2), "a": (2, 4), "c": (0, 1)})
    assert recommended_topics(progress) == ["c", "a", "b"]


def test_unpractised_topics_excluded():
    progress = make_progress({"a": (0, 0), "b": (1, 3)})
    assert recommended_topics(progress) == ["b"]


def test_limit():
    progress = make_progress({"a": (1, 3), "b": (2, 3), "c": (0, 3)})
    assert recommended_topics(progress, limit=2) == ["c", "a"]


def test_get_weak_topics():
    progress = make_progress({"neuro": (1, 4), "pulm": (1, 2)}, weak={"neuro", "pulm"})
    weak = get_weak_topics(progress)
    assert [w["topic"] for w in weak] == ["neuro", "pulm"]
    assert weak[0]["score"] == 25.0
    assert weak[0]["total"] == 4
