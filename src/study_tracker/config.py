"""Application settings read from the environment."""
import os

from study_tracker.db import DEFAULT_DB_PATH

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings:
    DB_PATH: str
    USER_ID: str
    LOG_LEVEL: str
    LOG_FILE: str | None

    def __init__(self):
        self.DB_PATH = os.getenv("STUDY_TRACKER_DB", DEFAULT_DB_PATH)
        self.USER_ID = os.getenv("STUDY_TRACKER_USER", "default").strip()
        self.LOG_LEVEL = os.getenv("STUDY_TRACKER_LOG_LEVEL", "WARNING").upper()
        self.LOG_FILE = os.getenv("STUDY_TRACKER_LOG_FILE") or None
        self._validate()

    def _validate(self):
        if not self.USER_ID:
            raise RuntimeError("STUDY_TRACKER_USER must not be empty")
        if self.LOG_LEVEL not in LOG_LEVELS:
            raise RuntimeError(f"STUDY_TRACKER_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
