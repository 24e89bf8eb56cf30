"""Consecutive-day study streaks."""
import logging
from datetime import datetime

from study_tracker.models import StudyStreak

logger = logging.getLogger(__name__)


class StreakCalculator:
    def __init__(self, streak: StudyStreak):
        self.streak = streak

    def update(self, now: datetime) -> StudyStreak:
        """Register a session start at `now`. Called once per started session."""
        streak = self.streak
        today = now.date()
        last = streak.last_study_date
        gap = (today - last).days if last is not None else None
        if gap == 0:
            return streak
        if gap is not None and gap < 0:
            logger.warning("Session start %s is before last study date %s; streak unchanged",
                           today.isoformat(), last.isoformat())
            return streak
        if gap == 1:
            streak.current += 1
        else:
            streak.current = 1
        streak.longest = max(streak.longest, streak.current)
        streak.last_study_date = today
        return streak
