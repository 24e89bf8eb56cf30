"""Spaced repetition scheduling for flashcards."""
from dataclasses import replace
from datetime import datetime, timedelta

from study_tracker.models import Flashcard

INTERVAL_STEP_DAYS = 2
MAX_INTERVAL_DAYS = 30
FAILED_INTERVAL_DAYS = 1


def review_interval(review_count: int, correct: bool) -> int:
    """Days until the next review, given the review count after this outcome.

    Args:
        review_count: Total reviews including the one being scored
        correct: Whether the card was answered correctly

    Returns:
        Interval in days, capped at MAX_INTERVAL_DAYS.
    """
    if not correct:
        # Incorrect: reset
        return FAILED_INTERVAL_DAYS
    return min(review_count * INTERVAL_STEP_DAYS, MAX_INTERVAL_DAYS)


def on_review_outcome(item: Flashcard, correct: bool, now: datetime) -> Flashcard:
    """Return the card's next review state. The input card is not modified."""
    review_count = item.review_count + 1
    correct_count = item.correct_count + 1 if correct else item.correct_count
    interval = review_interval(review_count, correct)
    return replace(
        item,
        tags=list(item.tags),
        review_count=review_count,
        correct_count=correct_count,
        last_reviewed=now,
        next_review=now + timedelta(days=interval),
    )


def is_due(item: Flashcard, now: datetime) -> bool:
    return now >= item.next_review
