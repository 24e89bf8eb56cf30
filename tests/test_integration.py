# tests/test_integration.py
"""End-to-end test of a few study days."""
from datetime import datetime

from study_tracker.clock import FixedClock
from study_tracker.engine import StudyEngine
from study_tracker.importer import import_deck
from study_tracker.storage import SqliteStore


def test_three_day_study_workflow(tmp_db, tmp_path):
    clock = FixedClock(datetime(2024, 1, 10, 19, 0))
    deck = tmp_path / "deck.yaml"
    deck.write_text(
        "topic: cardiology\n"
        "flashcards:\n"
        "  - {id: c1, front: 'Normal resting heart rate?', back: 60-100 bpm}\n"
        "  - {id: c2, front: 'Pacemaker of the heart?', back: SA node}\n"
        "  - {id: n1, front: 'Number of cranial nerves?', back: '12', topic: neurology}\n"
    )
    engine = StudyEngine(store=SqliteStore(tmp_db, "student"), clock=clock)
    import_deck(engine, str(deck))

    # Day 1
    engine.start_session("cardiology")
    for card in engine.due_flashcards(topic="cardiology"):
        engine.review_flashcard(card.id, True)
    for correct in (True, True, True, False):
        engine.submit_answer("cardiology", correct)
    for correct in (False, False, True):
        engine.submit_answer("neurology", correct)
    engine.add_note("cardiology", "Conduction", "SA node -> AV node -> His bundle")
    clock.advance(minutes=40)
    day1 = engine.end_session()
    assert day1.flashcards_reviewed == 2
    assert day1.questions_answered == 7

    snap = engine.snapshot()
    assert snap.progress.weak_areas == {"neurology"}
    assert snap.progress.strong_areas == set()
    assert engine.recommended_topics() == ["neurology", "cardiology"]
    assert [c.id for c in engine.due_flashcards()] == ["n1"]

    # Day 2: restart the process, keep going
    clock.set(datetime(2024, 1, 11, 7, 30))
    engine = StudyEngine.load(SqliteStore(tmp_db, "student"), clock=clock)
    engine.start_session("neurology")
    assert engine.streak().current == 2
    engine.review_flashcard("n1", False)
    for _ in range(5):
        engine.submit_answer("neurology", True)
    engine.submit_answer("cardiology", True)
    clock.advance(minutes=20)
    engine.end_session()

    snap = engine.snapshot()
    # neurology 6/8 = 75%, cardiology 4/5 = 80%
    assert snap.progress.weak_areas == set()
    assert snap.progress.strong_areas == {"cardiology"}
    assert engine.recommended_topics() == ["neurology"]
    assert engine.flashcard("n1").next_review == datetime(2024, 1, 12, 7, 30)

    # Day 4: streak broken
    clock.set(datetime(2024, 1, 13, 12, 0))
    engine.start_session("cardiology")
    assert engine.streak().current == 1
    assert engine.streak().longest == 2
    assert {c.id for c in engine.due_flashcards()} == {"c1", "c2", "n1"}
    assert engine.snapshot().total_study_time == 3600
