"""Import flashcard decks and study material into the engine."""
import json
import logging
from pathlib import Path
from typing import Optional

import yaml

from study_tracker.errors import ImportFormatError

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _read_json(path: Path) -> str:
    data = json.loads(_read_text(path))
    return json.dumps(data, indent=2) if isinstance(data, (dict, list)) else str(data)


def _read_yaml(path: Path) -> str:
    data = yaml.safe_load(_read_text(path))
    if isinstance(data, (dict, list)):
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return "" if data is None else str(data)


def _read_pdf(path: Path) -> str:
    from PyPDF2 import PdfReader
    from PyPDF2.errors import PdfReadError
    try:
        reader = PdfReader(str(path))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except PdfReadError as e:
        raise ImportFormatError(f"{path.name} is not a readable PDF: {e}") from e


def _read_docx(path: Path) -> str:
    from docx import Document
    from docx.opc.exceptions import PackageNotFoundError
    try:
        doc = Document(str(path))
    except PackageNotFoundError as e:
        raise ImportFormatError(f"{path.name} is not a Word document") from e
    return "\n".join(p.text for p in doc.paragraphs)


def _read_html(path: Path) -> str:
    from bs4 import BeautifulSoup
    return BeautifulSoup(_read_text(path), "html.parser").get_text(separator="\n", strip=True)


READERS = {
    ".txt": _read_text,
    ".md": _read_text,
    ".json": _read_json,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".pdf": _read_pdf,
    ".docx": _read_docx,
    ".html": _read_html,
    ".htm": _read_html,
}


def read_file_content(file_path: str) -> str:
    """Extract plain text from a study-material file.

    Unknown suffixes are read as UTF-8 text. Missing, unreadable or malformed
    files raise ImportFormatError.
    """
    path = Path(file_path)
    reader = READERS.get(path.suffix.lower(), _read_text)
    try:
        return reader(path)
    except ImportFormatError:
        raise
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ImportFormatError(f"Cannot read {path.name}: {e}") from e


def _tags(value, where: str) -> list[str]:
    """A single tag, a list of tags, or nothing."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(t, (str, int, float)) for t in value):
        return [str(t) for t in value]
    raise ImportFormatError(f"{where}: tags must be a string or a list of strings")



def categorize_content(text: str, topics) -> Optional[str]:
    """Pick the known topic mentioned most often in `text`. Returns None if none appear."""
    text_lower = text.lower()
    scores = {topic: text_lower.count(topic.lower()) for topic in topics if topic.strip()}
    if not scores:
        return None
    best = max(sorted(scores), key=scores.get)
    return best if scores[best] > 0 else None


def load_deck(file_path: str) -> list[dict]:
    """Parse a JSON or YAML deck into a list of card dicts.

    Accepted shapes: a list of cards, or a mapping with a `flashcards` list and
    an optional deck-level `topic` applied to cards without one.
    """
    path = Path(file_path)
    try:
        text = path.read_text()
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ImportFormatError(f"Cannot read deck {path.name}: {e}") from e

    deck_topic = None
    if isinstance(data, dict):
        deck_topic = data.get("topic")
        data = data.get("flashcards")
    if not isinstance(data, list):
        raise ImportFormatError(f"{path.name}: expected a list of flashcards")

    cards = []
    for i, raw in enumerate(data, 1):
        if not isinstance(raw, dict):
            raise ImportFormatError(f"{path.name}: card {i} is not a mapping")
        front = raw.get("front") or raw.get("question")
        back = raw.get("back") or raw.get("answer")
        topic = raw.get("topic") or deck_topic
        if not front or not back:
            raise ImportFormatError(f"{path.name}: card {i} needs a front and a back")
        if not topic:
            raise ImportFormatError(f"{path.name}: card {i} has no topic")
        cards.append({
            "card_id": str(raw["id"]) if raw.get("id") is not None else None,
            "topic": topic,
            "front": front,
            "back": back,
            "explanation": raw.get("explanation", ""),
            "difficulty": raw.get("difficulty", "medium"),
            "tags": _tags(raw.get("tags"), f"{path.name}: card {i}"),
        })
    return cards


def import_deck(engine, file_path: str) -> dict:
    """Add every card of a deck file to the engine."""
    cards = load_deck(file_path)
    topics = set()
    for card in cards:
        engine.add_flashcard(**card)
        topics.add(card["topic"])
    logger.info("Imported %d flashcards from %s", len(cards), Path(file_path).name)
    return {"filename": Path(file_path).name, "count": len(cards), "topics": sorted(topics)}


def import_notes(engine, file_path: str, topic: Optional[str] = None) -> dict:
    """Store a study-material file as a note. Auto-categorizes if topic not provided."""
    content = read_file_content(file_path)
    if topic is None:
        known = set(engine.snapshot().progress.topics_mastery) | {c.topic for c in engine.flashcards()}
        topic = categorize_content(content, known) or "general"
    note_id = engine.add_note(topic, Path(file_path).stem, content, tags=["imported"])
    return {"filename": Path(file_path).name, "topic": topic, "note_id": note_id, "length": len(content)}
