import os
import sys
import pytest

# Ensure the project root (containing the `quizhub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from quizhub import create_app, socketio
from quizhub.models import Option, Question, Quiz
from quizhub.services.games.engine import GameEngine
from quizhub.services.games.scoring import ScoringRules


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'
    HOST_INACTIVITY_TIMEOUT_SEC = 1.0
    SCORE_DECAY_FACTOR = 2.0
    FIRST_CORRECT_BONUS = 0
    REVEAL_ANSWER_STEP = False
    MIN_PLAYERS = 1


QUIZ_DATA = {
    'title': 'Space Quiz',
    'questions': [
        {
            'text': 'Largest volcano in the solar system?',
            'timeLimit': 20,
            'options': [
                {'text': 'Mauna Kea', 'isCorrect': False},
                {'text': 'Olympus Mons', 'isCorrect': True},
                {'text': 'Tamu Massif', 'isCorrect': False},
            ],
        },
        {
            'text': 'Which planet is the Red Planet?',
            'timeLimit': 15,
            'options': [
                {'text': 'Mars', 'isCorrect': True},
                {'text': 'Venus', 'isCorrect': False},
            ],
        },
    ],
}


def make_quiz(time_limits=(20, 15)):
    return Quiz(
        title='Space Quiz',
        questions=tuple(
            Question(
                text=f'Question {i + 1}',
                time_limit=limit,
                options=(Option('wrong'), Option('right', is_correct=True), Option('also wrong')),
            )
            for i, limit in enumerate(time_limits)
        ),
    )


class FakeClock:
    """Epoch-millisecond clock that only moves when told to.

    ``monotonic`` is its steady counterpart. ``advance`` moves both;
    ``step_wall`` moves only the epoch reading, like an NTP correction.
    """

    def __init__(self, start=1_700_000_000_000.0):
        self.now = start
        self.mono = 5_000.0

    def __call__(self):
        return self.now

    def monotonic(self):
        return self.mono

    def advance(self, seconds):
        self.now += seconds * 1000.0
        self.mono += seconds * 1000.0

    def step_wall(self, seconds):
        self.now += seconds * 1000.0


class ManualTimer:
    """Host-inactivity timer stand-in that fires only when the test says so."""

    instances = []

    def __init__(self, delay_sec, on_expire):
        self.delay_sec = delay_sec
        self.on_expire = on_expire
        self.armed = False
        self.cancelled = False
        ManualTimer.instances.append(self)

    def arm(self):
        self.armed = True

    def cancel(self):
        self.armed = False
        self.cancelled = True

    def fire(self):
        self.armed = False
        return self.on_expire()


class RecordingDispatcher:
    """Dispatcher double that records what would have gone over the wire."""

    def __init__(self):
        self.sent = []  # (sid or '*', event, payload)

    def send(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def update(self, view):
        self.sent.append(('*', 'game:update', view))

    def error(self, sid, message):
        self.sent.append((sid, 'game:error', message))

    def ended(self, message, sid=None, skip_sid=None):
        self.sent.append((sid or '*', 'game:ended', message))

    def events(self, name, target=None):
        return [p for s, e, p in self.sent if e == name and (target is None or s == target)]

    @property
    def last_view(self):
        views = self.events('game:update', '*')
        return views[-1] if views else None

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture()
def engine(dispatcher, clock):
    ManualTimer.instances = []
    return GameEngine(
        dispatcher,
        rules=ScoringRules(factor=2.0),
        clock=clock,
        monotonic=clock.monotonic,
        timer_factory=ManualTimer,
        host_timeout_sec=300,
        reveal_step=False,
    )


@pytest.fixture()
def lobby(engine):
    """Engine with a created game (host sid 'h1') and one joined player (sid 'p1')."""
    engine.create('h1', 'host-1', make_quiz())
    engine.player_join('p1', 'player-1', 'Alice')
    return engine


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        c = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            c.disconnect()
        except Exception:
            pass
