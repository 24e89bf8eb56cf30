"""Aggregate engine state and its JSON encoding for the key-value store."""
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from study_tracker.errors import PersistenceError
from study_tracker.models import (
    Flashcard, Note, QuizScore, StudyGoal, StudyProgress, StudySession, StudyStreak, TopicMastery,
)

STATE_KEYS = (
    "progress", "sessionHistory", "currentSession", "totalStudyTime", "streak",
    "flashcards", "flashcardState", "notes", "goals", "quizScores",
)


@dataclass
class StudyState:
    """Everything the engine owns for one user."""
    progress: StudyProgress = field(default_factory=StudyProgress)
    streak: StudyStreak = field(default_factory=StudyStreak)
    session_history: list[StudySession] = field(default_factory=list)
    current_session: Optional[StudySession] = None
    total_study_time: float = 0.0
    flashcards: dict[str, Flashcard] = field(default_factory=dict)
    notes: list[Note] = field(default_factory=list)
    goals: list[StudyGoal] = field(default_factory=list)
    quiz_scores: list[QuizScore] = field(default_factory=list)


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _session_to_dict(s: StudySession) -> dict:
    return {
        "id": s.id,
        "topic": s.topic,
        "startTime": _ts(s.start_time),
        "endTime": _ts(s.end_time),
        "questionsAnswered": s.questions_answered,
        "correctAnswers": s.correct_answers,
        "flashcardsReviewed": s.flashcards_reviewed,
        "notesCreated": s.notes_created,
    }


def _session_from_dict(d: dict) -> StudySession:
    return StudySession(
        id=d["id"],
        topic=d["topic"],
        start_time=_parse_ts(d["startTime"]),
        end_time=_parse_ts(d.get("endTime")),
        questions_answered=d.get("questionsAnswered", 0),
        correct_answers=d.get("correctAnswers", 0),
        flashcards_reviewed=d.get("flashcardsReviewed", 0),
        notes_created=d.get("notesCreated", 0),
    )


def _progress_to_dict(p: StudyProgress) -> dict:
    return {
        "totalQuestions": p.total_questions,
        "correctAnswers": p.correct_answers,
        "topicsMastery": {
            topic: {"correct": m.correct, "total": m.total, "lastPracticed": _ts(m.last_practiced)}
            for topic, m in p.topics_mastery.items()
        },
        "weakAreas": sorted(p.weak_areas),
        "strongAreas": sorted(p.strong_areas),
    }


def _progress_from_dict(d: dict) -> StudyProgress:
    return StudyProgress(
        total_questions=d.get("totalQuestions", 0),
        correct_answers=d.get("correctAnswers", 0),
        topics_mastery={
            topic: TopicMastery(correct=m["correct"], total=m["total"],
                                last_practiced=_parse_ts(m.get("lastPracticed")))
            for topic, m in d.get("topicsMastery", {}).items()
        },
        weak_areas=set(d.get("weakAreas", [])),
        strong_areas=set(d.get("strongAreas", [])),
    )


def _streak_to_dict(s: StudyStreak) -> dict:
    return {
        "current": s.current,
        "longest": s.longest,
        "lastStudyDate": s.last_study_date.isoformat() if s.last_study_date else None,
    }


def _streak_from_dict(d: dict) -> StudyStreak:
    last = d.get("lastStudyDate")
    return StudyStreak(
        current=d.get("current", 0),
        longest=d.get("longest", 0),
        last_study_date=date.fromisoformat(last) if last else None,
    )


def _card_content(c: Flashcard) -> dict:
    return {
        "topic": c.topic,
        "front": c.front,
        "back": c.back,
        "explanation": c.explanation,
        "difficulty": c.difficulty,
        "tags": list(c.tags),
    }


def _card_review_state(c: Flashcard) -> dict:
    return {
        "reviewCount": c.review_count,
        "correctCount": c.correct_count,
        "lastReviewed": _ts(c.last_reviewed),
        "nextReview": _ts(c.next_review),
    }


def _cards_from_dicts(content: dict, review_state: dict) -> dict[str, Flashcard]:
    cards = {}
    for card_id, fields in content.items():
        review = review_state.get(card_id, {})
        cards[card_id] = Flashcard(
            id=card_id,
            topic=fields["topic"],
            front=fields["front"],
            back=fields["back"],
            explanation=fields.get("explanation", ""),
            difficulty=fields.get("difficulty", "medium"),
            tags=list(fields.get("tags", [])),
            review_count=review.get("reviewCount", 0),
            correct_count=review.get("correctCount", 0),
            last_reviewed=_parse_ts(review.get("lastReviewed")),
            next_review=_parse_ts(review.get("nextReview")) or datetime.min,
        )
    return cards


def _note_to_dict(n: Note) -> dict:
    return {
        "id": n.id, "topic": n.topic, "title": n.title, "content": n.content, "tags": list(n.tags),
        "createdAt": _ts(n.created_at), "updatedAt": _ts(n.updated_at),
    }


def _note_from_dict(d: dict) -> Note:
    return Note(
        id=d["id"], topic=d["topic"], title=d["title"], content=d["content"], tags=list(d.get("tags", [])),
        created_at=_parse_ts(d["createdAt"]), updated_at=_parse_ts(d["updatedAt"]),
    )


def _goal_to_dict(g: StudyGoal) -> dict:
    return {
        "id": g.id, "type": g.type, "metric": g.metric, "target": g.target, "current": g.current,
        "progress": g.progress, "deadline": _ts(g.deadline), "completed": g.completed,
        "createdAt": _ts(g.created_at),
    }


def _goal_from_dict(d: dict) -> StudyGoal:
    return StudyGoal(
        id=d["id"], type=d.get("type", "custom"), metric=d["metric"], target=d["target"],
        current=d.get("current", 0), progress=d.get("progress", 0.0), deadline=_parse_ts(d["deadline"]),
        completed=d.get("completed", False), created_at=_parse_ts(d["createdAt"]),
    )


def dump_state(state: StudyState) -> dict[str, str]:
    """Encode the state as one JSON document per store key."""
    record = {
        "progress": _progress_to_dict(state.progress),
        "sessionHistory": [_session_to_dict(s) for s in state.session_history],
        "currentSession": _session_to_dict(state.current_session) if state.current_session else None,
        "totalStudyTime": state.total_study_time,
        "streak": _streak_to_dict(state.streak),
        "flashcards": {cid: _card_content(c) for cid, c in state.flashcards.items()},
        "flashcardState": {cid: _card_review_state(c) for cid, c in state.flashcards.items()},
        "notes": [_note_to_dict(n) for n in state.notes],
        "goals": [_goal_to_dict(g) for g in state.goals],
        "quizScores": [
            {"topic": q.topic, "score": q.score, "total": q.total, "date": _ts(q.date)}
            for q in state.quiz_scores
        ],
    }
    return {key: json.dumps(value) for key, value in record.items()}


def load_state(store) -> StudyState:
    """Read every state key from `store`. Missing keys fall back to empty state."""
    raw = {key: store.get(key) for key in STATE_KEYS}
    try:
        record = {key: json.loads(value) for key, value in raw.items() if value is not None}
        current = record.get("currentSession")
        return StudyState(
            progress=_progress_from_dict(record.get("progress", {})),
            streak=_streak_from_dict(record.get("streak", {})),
            session_history=[_session_from_dict(s) for s in record.get("sessionHistory", [])],
            current_session=_session_from_dict(current) if current else None,
            total_study_time=float(record.get("totalStudyTime", 0.0)),
            flashcards=_cards_from_dicts(record.get("flashcards", {}), record.get("flashcardState", {})),
            notes=[_note_from_dict(n) for n in record.get("notes", [])],
            goals=[_goal_from_dict(g) for g in record.get("goals", [])],
            quiz_scores=[
                QuizScore(topic=q["topic"], score=q["score"], total=q["total"], date=_parse_ts(q["date"]))
                for q in record.get("quizScores", [])
            ],
        )
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise PersistenceError(f"Stored state is corrupt: {e}") from e
