"""The study engine: the single entry point views call into.

Every mutating method validates its input first, then applies its updates in
a fixed order (mastery, session counters, goals) and finally saves the whole
state to the store. Getters return copies, so callers can never mutate engine
state behind its back.
"""
import copy
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

from study_tracker.clock import SystemClock
from study_tracker.errors import (
    InvalidOutcomeError, InvalidTopicError, PersistenceError, UnknownItemError,
)
from study_tracker.mastery import MasteryTracker
from study_tracker.models import (
    GOAL_METRICS, GOAL_TYPES, EngineSnapshot, Flashcard, Note, QuizScore, StudyGoal,
    StudyProgress, StudySession, StudyStreak,
)
from study_tracker.recommend import recommended_topics
from study_tracker.scheduler import is_due, on_review_outcome
from study_tracker.session import SessionManager
from study_tracker.state import StudyState, dump_state, load_state
from study_tracker.streak import StreakCalculator

logger = logging.getLogger(__name__)


def _check_topic(topic) -> str:
    if not isinstance(topic, str) or not topic.strip():
        raise InvalidTopicError(topic)
    return topic.strip()


def _check_outcome(correct) -> bool:
    if not isinstance(correct, bool):
        raise InvalidOutcomeError(correct)
    return correct


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class StudyEngine:
    def __init__(self, store=None, clock=None, state: Optional[StudyState] = None):
        self.store = store
        self.clock = clock or SystemClock()
        self.state = state or StudyState()
        self.sessions = SessionManager(self.state)
        self.mastery = MasteryTracker(self.state.progress)
        self.streaks = StreakCalculator(self.state.streak)

    @classmethod
    def load(cls, store, clock=None) -> "StudyEngine":
        """Build an engine from the state previously saved in `store`."""
        state = load_state(store)
        logger.info("Loaded state: %d sessions, %d flashcards, %d topics",
                    len(state.session_history), len(state.flashcards), len(state.progress.topics_mastery))
        return cls(store=store, clock=clock, state=state)

    # --- persistence ---

    def save(self) -> None:
        if self.store is None:
            return
        self.store.set_many(dump_state(self.state))

    def _persist(self, result):
        try:
            self.save()
        except PersistenceError as e:
            logger.warning("State not saved, keeping in-memory changes: %s", e)
            raise PersistenceError(str(e), result=result) from e
        return result

    # --- sessions ---

    def start_session(self, topic: str) -> str:
        topic = _check_topic(topic)
        now = self.clock.now()
        session = self.sessions.start_session(topic, now)
        self.streaks.update(now)
        return self._persist(session.id)

    def end_session(self) -> StudySession:
        closed = self.sessions.end_session(self.clock.now())
        self._refresh_goals()
        return self._persist(closed)

    # --- answers and reviews ---

    def submit_answer(self, topic: str, correct: bool) -> StudyProgress:
        """Record a quiz answer. Outside a session it still counts toward mastery."""
        topic = _check_topic(topic)
        _check_outcome(correct)
        self.mastery.record_outcome(topic, correct, self.clock.now())
        if self.sessions.is_active:
            self.sessions.record_answer(correct)
        self._refresh_goals()
        return self._persist(copy.deepcopy(self.state.progress))

    def review_flashcard(self, item_id: str, correct: bool) -> Flashcard:
        _check_outcome(correct)
        card = self._card(item_id)
        updated = on_review_outcome(card, correct, self.clock.now())
        self.state.flashcards[item_id] = updated
        if self.sessions.is_active:
            self.sessions.record_flashcard_review()
        logger.debug("Card %s reviewed (%s), next review %s",
                     item_id, "correct" if correct else "incorrect", updated.next_review.isoformat())
        return self._persist(copy.deepcopy(updated))

    def record_quiz_score(self, topic: str, score: int, total: int) -> QuizScore:
        topic = _check_topic(topic)
        if total <= 0 or not 0 <= score <= total:
            raise ValueError(f"Quiz score must satisfy 0 <= score <= total and total > 0, got {score}/{total}")
        entry = QuizScore(topic=topic, score=score, total=total, date=self.clock.now())
        self.state.quiz_scores.append(entry)
        return self._persist(replace(entry))

    # --- flashcards ---

    def add_flashcard(self, topic: str, front: str, back: str, explanation: str = "",
                      difficulty: str = "medium", tags: Optional[list] = None,
                      card_id: Optional[str] = None) -> Flashcard:
        """Add a card, due immediately. Re-adding an existing id updates its content only."""
        topic = _check_topic(topic)
        existing = self.state.flashcards.get(card_id) if card_id else None
        if existing is not None:
            card = replace(existing, topic=topic, front=front, back=back, explanation=explanation,
                           difficulty=difficulty, tags=list(tags or []))
        else:
            card = Flashcard(id=card_id or _new_id("card"), topic=topic, front=front, back=back,
                             explanation=explanation, difficulty=difficulty, tags=list(tags or []),
                             next_review=self.clock.now())
        self.state.flashcards[card.id] = card
        return self._persist(copy.deepcopy(card))

    def _card(self, item_id: str) -> Flashcard:
        card = self.state.flashcards.get(item_id)
        if card is None:
            raise UnknownItemError("flashcard", item_id)
        return card

    def flashcard(self, item_id: str) -> Flashcard:
        return copy.deepcopy(self._card(item_id))

    def flashcards(self, topic: Optional[str] = None) -> list[Flashcard]:
        return [copy.deepcopy(c) for c in self.state.flashcards.values() if topic is None or c.topic == topic]

    def due_flashcards(self, topic: Optional[str] = None, limit: Optional[int] = None) -> list[Flashcard]:
        """Due cards, most overdue first."""
        now = self.clock.now()
        due = [c for c in self.state.flashcards.values()
               if is_due(c, now) and (topic is None or c.topic == topic)]
        due.sort(key=lambda c: (c.next_review, c.id))
        if limit is not None:
            due = due[:limit]
        return [copy.deepcopy(c) for c in due]

    # --- notes ---

    def add_note(self, topic: str, title: str, content: str, tags: Optional[list] = None) -> str:
        topic = _check_topic(topic)
        now = self.clock.now()
        note = Note(id=_new_id("note"), topic=topic, title=title, content=content,
                    tags=list(tags or []), created_at=now, updated_at=now)
        self.state.notes.insert(0, note)
        if self.sessions.is_active:
            self.sessions.record_note_created()
        return self._persist(note.id)

    def _note(self, note_id: str) -> Note:
        for note in self.state.notes:
            if note.id == note_id:
                return note
        raise UnknownItemError("note", note_id)

    def update_note(self, note_id: str, title: Optional[str] = None, content: Optional[str] = None,
                    tags: Optional[list] = None, topic: Optional[str] = None) -> Note:
        note = self._note(note_id)
        if topic is not None:
            topic = _check_topic(topic)
        if title is not None:
            note.title = title
        if content is not None:
            note.content = content
        if tags is not None:
            note.tags = list(tags)
        if topic is not None:
            note.topic = topic
        note.updated_at = self.clock.now()
        return self._persist(copy.deepcopy(note))

    def delete_note(self, note_id: str) -> None:
        note = self._note(note_id)
        self.state.notes.remove(note)
        self._persist(None)

    def notes(self, topic: Optional[str] = None) -> list[Note]:
        """Notes, newest first."""
        return [copy.deepcopy(n) for n in self.state.notes if topic is None or n.topic == topic]

    # --- goals ---

    def set_goal(self, metric: str, target: float, deadline: datetime, goal_type: str = "custom") -> str:
        if metric not in GOAL_METRICS:
            raise ValueError(f"Unknown goal metric {metric!r}, expected one of {', '.join(GOAL_METRICS)}")
        if goal_type not in GOAL_TYPES:
            raise ValueError(f"Unknown goal type {goal_type!r}, expected one of {', '.join(GOAL_TYPES)}")
        if target <= 0:
            raise ValueError("Goal target must be positive")
        goal = StudyGoal(id=_new_id("goal"), metric=metric, target=target, deadline=deadline,
                         created_at=self.clock.now(), type=goal_type)
        self.state.goals.append(goal)
        self._refresh_goals()
        return self._persist(goal.id)

    def _metric_value(self, metric: str) -> float:
        progress = self.state.progress
        if metric == "questions":
            return progress.total_questions
        if metric == "time":
            return round(self.state.total_study_time / 60, 1)
        if metric == "topics":
            return len(progress.strong_areas)
        return progress.accuracy

    def _refresh_goals(self) -> None:
        for goal in self.state.goals:
            if goal.completed:
                continue
            goal.current = self._metric_value(goal.metric)
            goal.progress = round(min(goal.current / goal.target * 100, 100.0), 1)
            if goal.current >= goal.target:
                goal.completed = True
                logger.info("Goal %s reached (%s >= %s)", goal.id, goal.current, goal.target)

    def goals(self) -> list[StudyGoal]:
        return [copy.deepcopy(g) for g in self.state.goals]

    # --- read-only views ---

    def snapshot(self) -> EngineSnapshot:
        state = self.state
        return EngineSnapshot(
            progress=copy.deepcopy(state.progress),
            streak=copy.deepcopy(state.streak),
            active_session=copy.deepcopy(state.current_session),
            session_history=tuple(copy.deepcopy(s) for s in state.session_history),
            total_study_time=state.total_study_time,
            due_flashcards=len(self.due_flashcards()),
            notes=len(state.notes),
            goals=tuple(self.goals()),
        )

    def streak(self) -> StudyStreak:
        return copy.deepcopy(self.state.streak)

    def recommended_topics(self, limit: Optional[int] = None) -> list[str]:
        return recommended_topics(self.state.progress, limit=limit)

    def topic_mastery(self, topic: str) -> float:
        return self.mastery.mastery(topic)

    def active_session(self) -> Optional[StudySession]:
        return copy.deepcopy(self.state.current_session)

    def session_history(self) -> tuple[StudySession, ...]:
        return tuple(copy.deepcopy(s) for s in self.state.session_history)

    def quiz_scores(self, topic: Optional[str] = None) -> list[QuizScore]:
        return [replace(q) for q in self.state.quiz_scores if topic is None or q.topic == topic]
