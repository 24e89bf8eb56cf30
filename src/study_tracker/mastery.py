"""Per-topic mastery accounting and weak/strong classification."""
import logging
from datetime import datetime
from typing import NamedTuple

from study_tracker.models import StudyProgress, TopicMastery

logger = logging.getLogger(__name__)

WEAK_THRESHOLD = 60.0
STRONG_THRESHOLD = 80.0


class Classification(NamedTuple):
    weak: bool
    strong: bool


def classify(mastery: TopicMastery) -> Classification:
    """Weak below 60%, strong from 80% up, neither in between or when unpractised."""
    if mastery.total <= 0:
        return Classification(weak=False, strong=False)
    percent = mastery.mastery_percent
    return Classification(weak=percent < WEAK_THRESHOLD, strong=percent >= STRONG_THRESHOLD)


def get_mastery_label(percent: float) -> str:
    if percent >= STRONG_THRESHOLD:
        return "STRONG"
    elif percent >= WEAK_THRESHOLD:
        return "FAIR"
    return "WEAK"


def get_mastery_color(percent: float) -> str:
    if percent >= STRONG_THRESHOLD:
        return "green"
    elif percent >= WEAK_THRESHOLD:
        return "yellow"
    return "red"


class MasteryTracker:
    """Updates a StudyProgress in place. Holds no state of its own."""

    def __init__(self, progress: StudyProgress):
        self.progress = progress

    def record_outcome(self, topic: str, correct: bool, now: datetime) -> TopicMastery:
        progress = self.progress
        entry = progress.topics_mastery.get(topic)
        if entry is None:
            entry = progress.topics_mastery[topic] = TopicMastery()
        entry.total += 1
        progress.total_questions += 1
        if correct:
            entry.correct += 1
            progress.correct_answers += 1
        entry.last_practiced = now
        self._reclassify(topic, entry)
        return entry

    def mastery(self, topic: str) -> float:
        entry = self.progress.topics_mastery.get(topic)
        return entry.mastery_percent if entry else 0.0

    def _reclassify(self, topic: str, entry: TopicMastery) -> None:
        progress = self.progress
        was = Classification(topic in progress.weak_areas, topic in progress.strong_areas)
        now = classify(entry)
        if now == was:
            return
        if now.weak:
            progress.weak_areas.add(topic)
        else:
            progress.weak_areas.discard(topic)
        if now.strong:
            progress.strong_areas.add(topic)
        else:
            progress.strong_areas.discard(topic)
        logger.debug("Topic %s reclassified: weak=%s strong=%s (%.1f%%)",
                     topic, now.weak, now.strong, entry.mastery_percent)
