import pytest
from unittest.mock import patch

from study_tracker.app import (
    SessionExitRequested, ask_topic, cmd_dashboard, cmd_end, cmd_start, dispatch,
    run_flashcard_session, run_quiz_session, session_confirm, session_prompt,
)
from study_tracker.errors import PersistenceError


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("study_tracker.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("study_tracker.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("study_tracker.app.Prompt.ask", return_value="hello"):
        assert session_prompt("test prompt") == "hello"


def test_session_confirm():
    with patch("study_tracker.app.Prompt.ask", return_value="y"):
        assert session_confirm("ok?") is True
    with patch("study_tracker.app.Prompt.ask", return_value="n"):
        assert session_confirm("ok?") is False


def test_ask_topic_defaults_to_active_session(engine):
    engine.start_session("cardiology")
    with patch("study_tracker.app.Prompt.ask", return_value=" cardiology ") as ask:
        assert ask_topic(engine) == "cardiology"
    assert ask.call_args.kwargs["default"] == "cardiology"


def test_run_flashcard_session_reviews_cards(engine):
    engine.start_session("cardiology")
    engine.add_flashcard("cardiology", "Q1", "A1")
    engine.add_flashcard("cardiology", "Q2", "A2")
    cards = engine.due_flashcards()
    # Card 1: reveal, knew it. Card 2: reveal, didn't.
    with patch("study_tracker.app.Prompt.ask", side_effect=["", "y", "", "n"]):
        correct, reviewed = run_flashcard_session(engine, cards)
    assert (correct, reviewed) == (1, 2)
    assert engine.active_session().flashcards_reviewed == 2
    assert engine.due_flashcards() == []


def test_run_flashcard_session_exits_on_q(engine):
    """First card saved, 'q' on the second card's reveal prompt stops the drill."""
    engine.add_flashcard("cardiology", "Q1", "A1")
    engine.add_flashcard("cardiology", "Q2", "A2")
    cards = engine.due_flashcards()
    with patch("study_tracker.app.Prompt.ask", side_effect=["", "y", "q"]):
        with pytest.raises(SessionExitRequested):
            run_flashcard_session(engine, cards)
    assert len(engine.due_flashcards()) == 1


def test_run_flashcard_session_no_cards(engine):
    assert run_flashcard_session(engine, []) == (0, 0)


def test_run_quiz_session_records_answers_and_score(engine):
    engine.start_session("renal")
    engine.add_flashcard("renal", "Q1", "A1")
    engine.add_flashcard("renal", "Q2", "A2")
    cards = engine.flashcards("renal")
    with patch("study_tracker.app.Prompt.ask", side_effect=["my answer", "y", "other", "n"]):
        assert run_quiz_session(engine, "renal", cards) == (1, 2)
    assert engine.topic_mastery("renal") == 50
    assert engine.active_session().questions_answered == 2
    assert engine.quiz_scores()[0].score == 1


def test_run_quiz_session_partial_quiz_keeps_score(engine):
    engine.add_flashcard("renal", "Q1", "A1")
    engine.add_flashcard("renal", "Q2", "A2")
    cards = engine.flashcards("renal")
    with patch("study_tracker.app.Prompt.ask", side_effect=["x", "y", "q"]):
        with pytest.raises(SessionExitRequested):
            run_quiz_session(engine, "renal", cards)
    scores = engine.quiz_scores()
    assert (scores[0].score, scores[0].total) == (1, 1)


def test_cmd_start_and_end(engine, clock):
    with patch("study_tracker.app.Prompt.ask", return_value="pharm"):
        cmd_start(engine)
    assert engine.active_session().topic == "pharm"
    clock.advance(minutes=5)
    cmd_end(engine)
    assert engine.active_session() is None


def test_cmd_dashboard_renders(engine):
    engine.submit_answer("pharm", True)
    engine.submit_answer("neuro", False)
    cmd_dashboard(engine)


def test_dispatch_reports_engine_errors(engine):
    with patch("study_tracker.app.console.print") as printed:
        assert dispatch(engine, "end") is True
    assert "No active session" in printed.call_args.args[0]


def test_dispatch_reports_persistence_warning(engine, store):
    store.fail = True
    with patch("study_tracker.app.Prompt.ask", return_value="pharm"), \
            patch("study_tracker.app.console.print") as printed:
        assert dispatch(engine, "start") is True
    assert "not saved" in printed.call_args.args[0]
    assert engine.active_session().topic == "pharm"


def test_dispatch_quit_ends_active_session(engine):
    engine.start_session("pharm")
    assert dispatch(engine, "quit") is False
    assert engine.active_session() is None
    assert len(engine.session_history()) == 1


def test_dispatch_unknown_command(engine):
    assert dispatch(engine, "dance") is True


def test_run_quiz_session_counts_answers_when_save_fails(engine, store):
    engine.add_flashcard("renal", "Q1", "A1")
    engine.add_flashcard("renal", "Q2", "A2")
    cards = engine.flashcards("renal")
    store.fail = True
    with patch("study_tracker.app.Prompt.ask", side_effect=["x", "y", "x", "n"]), \
            patch("study_tracker.app.console.print") as printed:
        assert run_quiz_session(engine, "renal", cards) == (1, 2)
    assert engine.topic_mastery("renal") == 50
    assert engine.quiz_scores()[0].total == 2
    assert any("not saved" in str(c.args[0]) for c in printed.call_args_list if c.args)


def test_dispatch_quit_warns_when_save_fails(engine, store):
    engine.start_session("pharm")
    store.fail = True
    with patch("study_tracker.app.console.print") as printed:
        assert dispatch(engine, "quit") is False
    assert engine.active_session() is None
    assert any("not saved" in str(c.args[0]) for c in printed.call_args_list if c.args)


def test_dispatch_reports_unexpected_errors(engine):
    def broken(engine):
        raise RuntimeError("disk on fire")

    with patch.dict("study_tracker.app.COMMANDS", {"broken": broken}), \
            patch("study_tracker.app.console.print") as printed:
        assert dispatch(engine, "broken") is True
    assert "disk on fire" in printed.call_args.args[0]
