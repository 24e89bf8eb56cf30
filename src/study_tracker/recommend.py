"""Focus-area recommendations derived from topic mastery."""
from typing import Optional

from study_tracker.models import StudyProgress


def recommended_topics(progress: StudyProgress, limit: Optional[int] = None) -> list[str]:
    """Practised topics that are not yet strong, weakest first (ties by topic name)."""
    candidates = [
        (mastery.mastery_percent, topic)
        for topic, mastery in progress.topics_mastery.items()
        if mastery.total > 0 and topic not in progress.strong_areas
    ]
    candidates.sort()
    topics = [topic for _, topic in candidates]
    return topics[:limit] if limit is not None else topics


def get_weak_topics(progress: StudyProgress) -> list[dict]:
    """Weak topics with their scores, sorted worst first."""
    rows = [
        {
            "topic": topic,
            "correct": progress.topics_mastery[topic].correct,
            "total": progress.topics_mastery[topic].total,
            "score": round(progress.topics_mastery[topic].mastery_percent, 1),
        }
        for topic in progress.weak_areas
        if topic in progress.topics_mastery
    ]
    rows.sort(key=lambda r: (r["score"], r["topic"]))
    return rows
