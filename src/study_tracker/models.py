"""Data classes for the study tracker domain model."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass
class StudySession:
    id: str
    topic: str
    start_time: datetime
    end_time: Optional[datetime] = None
    questions_answered: int = 0
    correct_answers: int = 0
    flashcards_reviewed: int = 0
    notes_created: int = 0

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return max((self.end_time - self.start_time).total_seconds(), 0.0)

    @property
    def accuracy(self) -> float:
        if not self.questions_answered:
            return 0.0
        return round(self.correct_answers / self.questions_answered * 100, 1)


@dataclass
class TopicMastery:
    correct: int = 0
    total: int = 0
    last_practiced: Optional[datetime] = None

    @property
    def mastery_percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.correct * 100 / self.total


@dataclass
class Flashcard:
    id: str
    topic: str
    front: str
    back: str
    next_review: datetime
    explanation: str = ""
    difficulty: str = "medium"
    tags: list[str] = field(default_factory=list)
    review_count: int = 0
    correct_count: int = 0
    last_reviewed: Optional[datetime] = None


@dataclass
class StudyProgress:
    total_questions: int = 0
    correct_answers: int = 0
    topics_mastery: dict[str, TopicMastery] = field(default_factory=dict)
    weak_areas: set[str] = field(default_factory=set)
    strong_areas: set[str] = field(default_factory=set)

    @property
    def accuracy(self) -> float:
        if not self.total_questions:
            return 0.0
        return round(self.correct_answers / self.total_questions * 100, 1)


@dataclass
class StudyStreak:
    current: int = 0
    longest: int = 0
    last_study_date: Optional[date] = None


@dataclass
class Note:
    id: str
    topic: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)


GOAL_TYPES = ("daily", "weekly", "monthly", "custom")
GOAL_METRICS = ("questions", "time", "topics", "accuracy")


@dataclass
class StudyGoal:
    id: str
    metric: str
    target: float
    deadline: datetime
    created_at: datetime
    type: str = "custom"
    current: float = 0
    progress: float = 0.0
    completed: bool = False


@dataclass
class QuizScore:
    topic: str
    score: int
    total: int
    date: datetime


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only copy of everything a view needs to render."""
    progress: StudyProgress
    streak: StudyStreak
    active_session: Optional[StudySession]
    session_history: tuple[StudySession, ...]
    total_study_time: float
    due_flashcards: int
    notes: int
    goals: tuple[StudyGoal, ...]
