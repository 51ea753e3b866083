import json

from conftest import make_quiz
from quizhub.projection import project_session


def _options(view):
    return [o for q in view['quiz']['questions'] for o in q['options']]


def test_no_session_projects_to_none():
    assert project_session(None) is None


def test_open_question_hides_correctness(lobby):
    lobby.start('h1')
    view = lobby.view()
    assert view['state'] == 'QUESTION'
    assert all(set(o) == {'text'} for o in _options(view))
    assert view['answerTally'] is None
    assert view['firstCorrectPlayerId'] is None


def test_leaderboard_shows_correctness_and_tally(lobby):
    lobby.start('h1')
    lobby.answer('p1', 'player-1', 1)
    lobby.advance('h1')
    view = lobby.view()
    assert view['state'] == 'LEADERBOARD'
    assert all('isCorrect' in o for o in _options(view))
    assert [o['isCorrect'] for o in view['quiz']['questions'][0]['options']] == [False, True, False]
    assert view['answerTally'] == [0, 1, 0]
    assert view['firstCorrectPlayerId'] == 'player-1'


def test_question_paused_mid_countdown_stays_redacted(lobby):
    lobby.start('h1')
    lobby.toggle_pause('h1')
    view = lobby.view()
    assert view['state'] == 'PAUSED'
    assert view['pausedFrom'] == 'QUESTION'
    assert view['remainingMillisAtPause'] == 20_000
    assert all(set(o) == {'text'} for o in _options(view))


def test_view_hides_connection_handles_and_host_id(lobby):
    raw = json.dumps(lobby.view())
    assert 'host-1' not in raw
    assert 'h1' not in raw
    assert 'p1' not in raw
    player = lobby.view()['players'][0]
    assert set(player) == {'id', 'nickname', 'score', 'answered', 'answerIndex', 'lastPoints', 'connected'}


def test_players_are_listed_in_join_order(lobby):
    lobby.player_join('p2', 'player-2', 'Bob')
    lobby.player_join('p3', 'player-3', 'Cara')
    assert [p['nickname'] for p in lobby.view()['players']] == ['Alice', 'Bob', 'Cara']


def test_projection_does_not_alias_internal_state(lobby):
    view = lobby.view()
    view['players'][0]['score'] = 999
    view['quiz']['questions'][0]['options'].clear()
    assert lobby.session.players['player-1'].score == 0
    assert len(lobby.session.quiz.questions[0].options) == 3


def test_lobby_view_shape(engine):
    engine.create('h1', 'host-1', make_quiz((30,)))
    view = engine.view()
    assert view['title'] == 'Space Quiz'
    assert view['currentQuestionIndex'] == 0
    assert view['questionStartedAt'] is None
    assert view['hostConnected'] is True
    assert view['answerTally'] is None
    assert view['quiz']['questions'][0]['timeLimit'] == 30
