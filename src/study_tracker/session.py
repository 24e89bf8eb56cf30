"""Study session lifecycle: one active session at a time, closed ones kept as history."""
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

from study_tracker.errors import NoActiveSessionError, SessionAlreadyActiveError
from study_tracker.models import StudySession
from study_tracker.state import StudyState

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return f"session-{uuid.uuid4().hex[:12]}"


class SessionManager:
    """Session operations over the engine's StudyState."""

    def __init__(self, state: StudyState):
        self.state = state

    @property
    def current(self) -> Optional[StudySession]:
        return self.state.current_session

    @property
    def is_active(self) -> bool:
        return self.state.current_session is not None

    @property
    def history(self) -> tuple[StudySession, ...]:
        return tuple(self.state.session_history)

    def start_session(self, topic: str, now: datetime) -> StudySession:
        if self.state.current_session is not None:
            raise SessionAlreadyActiveError(self.state.current_session.id)
        session = StudySession(id=new_session_id(), topic=topic, start_time=now)
        self.state.current_session = session
        logger.info("Started session %s on %s", session.id, topic)
        return session

    def _require_active(self, action: str) -> StudySession:
        if self.state.current_session is None:
            raise NoActiveSessionError(action)
        return self.state.current_session

    def record_answer(self, correct: bool) -> StudySession:
        session = self._require_active("recording an answer")
        session.questions_answered += 1
        if correct:
            session.correct_answers += 1
        return session

    def record_flashcard_review(self) -> StudySession:
        session = self._require_active("reviewing a flashcard")
        session.flashcards_reviewed += 1
        return session

    def record_note_created(self) -> StudySession:
        session = self._require_active("creating a note")
        session.notes_created += 1
        return session

    def end_session(self, now: datetime) -> StudySession:
        session = self._require_active("ending a session")
        # End time never precedes start time, even if the clock moved back.
        closed = replace(session, end_time=max(now, session.start_time))
        self.state.session_history.append(closed)
        self.state.current_session = None
        self.state.total_study_time += closed.duration_seconds
        logger.info("Ended session %s after %.0fs (%d answered, %d cards, %d notes)",
                    closed.id, closed.duration_seconds, closed.questions_answered,
                    closed.flashcards_reviewed, closed.notes_created)
        return replace(closed)
