"""Exceptions raised by the study engine."""


class StudyEngineError(Exception):
    """Base class for all engine errors."""


class SessionAlreadyActiveError(StudyEngineError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is already active")
        self.session_id = session_id


class NoActiveSessionError(StudyEngineError):
    def __init__(self, action: str = "this action"):
        super().__init__(f"No active session for {action}")
        self.action = action


class PersistenceError(StudyEngineError):
    """Saving or loading state failed.

    The in-memory state stays authoritative. When raised after a mutating
    call, `result` holds what the call would have returned.
    """

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result


class InvalidTopicError(StudyEngineError, ValueError):
    def __init__(self, topic):
        super().__init__(f"Invalid topic: {topic!r}")
        self.topic = topic


class InvalidOutcomeError(StudyEngineError, TypeError):
    def __init__(self, value):
        super().__init__(f"Outcome must be a bool, got {type(value).__name__}: {value!r}")
        self.value = value


class UnknownItemError(StudyEngineError, KeyError):
    def __init__(self, kind: str, item_id: str):
        super().__init__(f"Unknown {kind}: {item_id}")
        self.kind = kind
        self.item_id = item_id

    def __str__(self) -> str:
        return self.args[0]


class ImportFormatError(StudyEngineError, ValueError):
    """A deck or study-material file could not be parsed."""
