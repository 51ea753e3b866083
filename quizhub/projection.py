"""Client-visible view of the session.

Everything that goes out over the wire is built here. Correctness flags are
stripped while a question is open, and connection handles and the durable host
id never leave the server.
"""
from typing import Any, Dict, List, Optional

from .models import GameState, QUESTION_STATES, Session


def answer_tally(session: Session) -> Optional[List[int]]:
    """Number of players that picked each option of the current question."""
    if session.state not in QUESTION_STATES and session.paused_from not in QUESTION_STATES:
        return None
    tally = [0] * len(session.current_question.options)
    for player in session.players.values():
        if player.answered and player.answer_index is not None:
            tally[player.answer_index] += 1
    return tally


def project_session(session: Optional[Session]) -> Optional[Dict[str, Any]]:
    if session is None:
        return None
    # A question paused mid-countdown is still open
    question_open = session.state == GameState.QUESTION or session.paused_from == GameState.QUESTION
    return {
        'title': session.quiz.title,
        'state': session.state.value,
        'quiz': session.quiz.to_dict(redact=question_open),
        'currentQuestionIndex': session.current_question_index,
        'questionStartedAt': session.question_started_at,
        'players': [p.to_dict() for p in session.players.values()],
        'hostConnected': session.host_connected,
        'pausedFrom': session.paused_from.value if session.paused_from else None,
        'remainingMillisAtPause': session.remaining_ms_at_pause,
        'firstCorrectPlayerId': None if question_open else session.first_correct_player_id,
        'answerTally': None if question_open else answer_tally(session),
    }
